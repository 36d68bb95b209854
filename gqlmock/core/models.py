"""Core data models for gql-error-mock."""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(str, Enum):
    """Machine-readable codes carried in ``extensions.code``."""
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    BAD_USER_INPUT = "BAD_USER_INPUT"
    BAD_REQUEST = "BAD_REQUEST"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    GQL_ERROR = "GQL_ERROR"
    GRAPHQL_PARSE_FAILED = "GRAPHQL_PARSE_FAILED"
    GRAPHQL_VALIDATION_FAILED = "GRAPHQL_VALIDATION_FAILED"


class OutcomeKind(str, Enum):
    """Kinds of simulated outcomes."""
    CONFORMANT_ERROR = "conformant_error"
    NON_CONFORMANT_ERROR = "non_conformant_error"
    MALFORMED_SUCCESS = "malformed_success"
    DELAYED_FAILURE = "delayed_failure"
    PARTIAL_SUCCESS = "partial_success"


class _Outcome(BaseModel):
    model_config = ConfigDict(frozen=True)


class ConformantError(_Outcome):
    """An error following the standard GraphQL error envelope."""
    kind: Literal[OutcomeKind.CONFORMANT_ERROR] = OutcomeKind.CONFORMANT_ERROR
    message: str
    code: str
    http_status: Optional[int] = None
    thrown: bool = True  # False: the resolver returns the error as its value

    def extensions(self) -> dict[str, Any]:
        """Build the ``extensions`` mapping for this error."""
        extensions: dict[str, Any] = {"code": self.code}
        if self.http_status is not None:
            extensions["http"] = {"status": self.http_status}
        return extensions


class NonConformantError(_Outcome):
    """A raw fault with no machine-readable code."""
    kind: Literal[OutcomeKind.NON_CONFORMANT_ERROR] = OutcomeKind.NON_CONFORMANT_ERROR
    message: str
    fault: Literal["TypeError", "Exception"] = "Exception"

    def to_exception(self) -> Exception:
        if self.fault == "TypeError":
            return TypeError(self.message)
        return Exception(self.message)


class MalformedSuccess(_Outcome):
    """A successful value that does not match its declared shape."""
    kind: Literal[OutcomeKind.MALFORMED_SUCCESS] = OutcomeKind.MALFORMED_SUCCESS
    payload: dict[str, Any]


class DelayedFailure(_Outcome):
    """Withhold the response for ``delay_ms`` and then fail."""
    kind: Literal[OutcomeKind.DELAYED_FAILURE] = OutcomeKind.DELAYED_FAILURE
    delay_ms: int = Field(ge=0)
    error: ConformantError


class PartialSuccess(_Outcome):
    """A list value with one entry replaced by an error."""
    kind: Literal[OutcomeKind.PARTIAL_SUCCESS] = OutcomeKind.PARTIAL_SUCCESS
    items: list[str]
    error: ConformantError


SimulatedOutcome = Annotated[
    Union[ConformantError, NonConformantError, MalformedSuccess, DelayedFailure, PartialSuccess],
    Field(discriminator="kind"),
]
