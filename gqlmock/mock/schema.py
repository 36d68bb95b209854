"""GraphQL schema for the mock server, bound to an error catalog."""

import asyncio
import logging
from typing import Any, Callable

from graphql import GraphQLError, GraphQLSchema, build_schema

from ..core.models import (
    ConformantError,
    DelayedFailure,
    MalformedSuccess,
    NonConformantError,
    PartialSuccess,
    SimulatedOutcome,
)
from .catalog import ErrorCatalog, OperationDefinition

logger = logging.getLogger(__name__)


TYPE_DEFS = '''
type Body {
    value: String
    code: Int
}

type Response {
    body: [String]
}

type AntiPatternResponse {
    body: Body
    errors: [Int]
}
'''


def build_type_defs(catalog: ErrorCatalog) -> str:
    """Render the SDL for a catalog.

    Arguments are nullable so that a missing value reaches the catalog's own
    input check instead of failing validation.
    """
    fields = []
    for operation in catalog:
        signature = operation.name
        if operation.argument:
            signature += f"({operation.argument}: Int)"
        fields.append(f'    "{operation.description}"\n    {signature}: {operation.return_type}')
    return TYPE_DEFS + "\ntype Query {\n" + "\n".join(fields) + "\n}\n"


def to_graphql_error(error: ConformantError) -> GraphQLError:
    return GraphQLError(error.message, extensions=error.extensions())


async def suspend(delay_ms: int) -> None:
    """Sleep without blocking the event loop until ``delay_ms`` has elapsed.

    Re-checks the deadline after waking so the call never returns early.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + delay_ms / 1000
    remaining = delay_ms / 1000
    while remaining > 0:
        await asyncio.sleep(remaining)
        remaining = deadline - loop.time()


async def settle(outcome: SimulatedOutcome) -> Any:
    """Turn a simulated outcome into a resolver result or raised error."""
    if isinstance(outcome, ConformantError):
        error = to_graphql_error(outcome)
        if outcome.thrown:
            raise error
        return error

    if isinstance(outcome, NonConformantError):
        raise outcome.to_exception()

    if isinstance(outcome, MalformedSuccess):
        return outcome.payload

    if isinstance(outcome, DelayedFailure):
        logger.info(f"Delaying failure by {outcome.delay_ms}ms")
        await suspend(outcome.delay_ms)
        raise to_graphql_error(outcome.error)

    if isinstance(outcome, PartialSuccess):
        # graphql-core nulls the errored entry and reports it at its list index
        return {"body": [*outcome.items, to_graphql_error(outcome.error)]}

    raise TypeError(f"Unsupported outcome: {outcome!r}")


def _make_resolver(catalog: ErrorCatalog, operation: OperationDefinition) -> Callable:
    async def resolve(_root: Any, _info: Any, **arguments: Any) -> Any:
        outcome = catalog.resolve(operation.name, **arguments)
        return await settle(outcome)

    return resolve


def build_executable_schema(catalog: ErrorCatalog) -> GraphQLSchema:
    """Build the GraphQL schema and attach one resolver per operation.

    Args:
        catalog: Catalog that resolves every query field.

    Returns:
        Executable schema.
    """
    schema = build_schema(build_type_defs(catalog))
    query_fields = schema.query_type.fields
    for operation in catalog:
        query_fields[operation.name].resolve = _make_resolver(catalog, operation)
    return schema
