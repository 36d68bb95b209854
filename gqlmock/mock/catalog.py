"""Error simulation catalog: operation name to simulated outcome."""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, Iterator, Optional

from ..core.models import (
    ConformantError,
    DelayedFailure,
    ErrorCode,
    MalformedSuccess,
    NonConformantError,
    PartialSuccess,
    SimulatedOutcome,
)

logger = logging.getLogger(__name__)


class UnknownOperationError(KeyError):
    """Raised when resolving an operation the catalog does not declare."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown operation: {self.name}"


@dataclass(frozen=True)
class OperationDefinition:
    """Definition of a mock operation."""
    name: str
    description: str
    return_type: str  # GraphQL output type name
    resolve: Callable[[Optional[int]], SimulatedOutcome]
    argument: Optional[str] = None  # Name of the single Int argument, if any


def _missing_argument(name: str) -> ConformantError:
    return ConformantError(
        message=f"Argument '{name}' is required",
        code=ErrorCode.BAD_USER_INPUT.value,
    )


def not_found(_: Optional[int] = None) -> SimulatedOutcome:
    return ConformantError(
        message="Not found - error occured",
        code=ErrorCode.NOT_FOUND.value,
        thrown=False,
    )


def authentication_fail(_: Optional[int] = None) -> SimulatedOutcome:
    return ConformantError(
        message="Authentication failed - access forbidden",
        code=ErrorCode.FORBIDDEN.value,
    )


def given_code(code: Optional[int] = None) -> SimulatedOutcome:
    """Fail with the caller's status code.

    A falsy code (absent or ``0``) is an input error. The ``or 500`` fallback
    below can never fire once that check has passed; it is kept as written.
    """
    if not code:
        return _missing_argument("code")
    return ConformantError(
        message=f"Request failed with status code {code}",
        code=ErrorCode.BAD_REQUEST.value,
        http_status=code or 500,
    )


def request_timeout(time: Optional[int] = None) -> SimulatedOutcome:
    if time is None:
        return _missing_argument("time")
    return DelayedFailure(
        delay_ms=max(time, 0),
        error=ConformantError(
            message=f"Request timed out after {time}ms",
            code=ErrorCode.INTERNAL_SERVER_ERROR.value,
        ),
    )


def network_error(_: Optional[int] = None) -> SimulatedOutcome:
    return ConformantError(
        message="Network error - request could not be completed",
        code=ErrorCode.INTERNAL_SERVER_ERROR.value,
        http_status=408,
    )


def service_unavailable(_: Optional[int] = None) -> SimulatedOutcome:
    return ConformantError(
        message="Service unavailable",
        code=ErrorCode.SERVICE_UNAVAILABLE.value,
        http_status=503,
    )


def combined_error(_: Optional[int] = None) -> SimulatedOutcome:
    return PartialSuccess(
        items=["Partial content"],
        error=ConformantError(
            message="Failed to load remaining content",
            code=ErrorCode.INTERNAL_SERVER_ERROR.value,
        ),
    )


def other(_: Optional[int] = None) -> SimulatedOutcome:
    return NonConformantError(
        message="Cannot read properties of undefined (reading 'body')",
        fault="TypeError",
    )


def anti_pattern(_: Optional[int] = None) -> SimulatedOutcome:
    return MalformedSuccess(
        payload={
            "body": {"value": "", "code": 404},
            "errors": None,
        }
    )


def gql_error(_: Optional[int] = None) -> SimulatedOutcome:
    return ConformantError(message="Custom error", code=ErrorCode.GQL_ERROR.value)


def non_gql_error(_: Optional[int] = None) -> SimulatedOutcome:
    return NonConformantError(message="Something went wrong", fault="Exception")


DEFAULT_OPERATIONS = (
    OperationDefinition("notFound", "404 not found", "Response", not_found),
    OperationDefinition("authenticationFail", "403 auth", "Response", authentication_fail),
    OperationDefinition(
        "givenCode", "Returns an error with the given status code", "Response", given_code, argument="code"
    ),
    OperationDefinition("serviceUnavailable", "503, i.e. from a CDN", "Response", service_unavailable),
    OperationDefinition("combinedError", "Partial data together with an error", "Response", combined_error),
    OperationDefinition("networkError", "Fast network failure (408)", "Response", network_error),
    OperationDefinition(
        "requestTimeout", "Waits the given milliseconds, then fails", "Response", request_timeout, argument="time"
    ),
    OperationDefinition("other", "Raw TypeError, not expected on the client side", "Response", other),
    OperationDefinition("antiPattern", "Success payload that signals failure", "AntiPatternResponse", anti_pattern),
    OperationDefinition("gqlError", "Thrown error with a custom code", "Body", gql_error),
    OperationDefinition("nonGqlError", "Thrown generic error without a code", "Body", non_gql_error),
)


class ErrorCatalog:
    """Immutable registry of simulated operations.

    Every declared operation resolves to exactly one outcome kind, and the
    set of operations is fixed once the catalog is constructed.
    """

    def __init__(self, operations: Iterable[OperationDefinition]):
        """Initialize the catalog.

        Args:
            operations: Operation definitions to serve.

        Raises:
            ValueError: If two definitions share a name.
        """
        registry: dict[str, OperationDefinition] = {}
        for operation in operations:
            if operation.name in registry:
                raise ValueError(f"Duplicate operation: {operation.name}")
            registry[operation.name] = operation
        self._operations = MappingProxyType(registry)

    def resolve(self, name: str, **arguments: Optional[int]) -> SimulatedOutcome:
        """Produce the outcome for an operation.

        Args:
            name: Operation name.
            **arguments: Operation arguments, keyed by argument name.

        Returns:
            The simulated outcome.

        Raises:
            UnknownOperationError: If ``name`` is not declared.
        """
        operation = self._operations.get(name)
        if operation is None:
            raise UnknownOperationError(name)

        value = arguments.get(operation.argument) if operation.argument else None
        outcome = operation.resolve(value)
        logger.debug(f"Resolved {name}({value!r}) -> {outcome.kind.value}")
        return outcome

    def get(self, name: str) -> Optional[OperationDefinition]:
        return self._operations.get(name)

    def names(self) -> list[str]:
        return list(self._operations.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def __iter__(self) -> Iterator[OperationDefinition]:
        return iter(self._operations.values())

    def __len__(self) -> int:
        return len(self._operations)


def build_default_catalog() -> ErrorCatalog:
    """Build the standard catalog of simulated failures."""
    return ErrorCatalog(DEFAULT_OPERATIONS)
