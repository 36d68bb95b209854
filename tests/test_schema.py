"""Tests for the GraphQL schema bound to the catalog."""

import asyncio
import time

import pytest
from graphql import GraphQLError, graphql

from gqlmock.core.models import ConformantError, DelayedFailure, MalformedSuccess
from gqlmock.mock.catalog import build_default_catalog
from gqlmock.mock.schema import build_executable_schema, build_type_defs, settle, suspend


@pytest.fixture
def schema():
    return build_executable_schema(build_default_catalog())


class TestTypeDefs:
    """SDL generated from the catalog."""

    def test_every_operation_is_a_query_field(self, schema):
        """Test every operation is a Query field."""
        catalog = build_default_catalog()
        assert set(schema.query_type.fields) == set(catalog.names())

    def test_arguments_are_nullable_ints(self):
        """Test argument and return types in the SDL."""
        sdl = build_type_defs(build_default_catalog())
        assert "givenCode(code: Int): Response" in sdl
        assert "requestTimeout(time: Int): Response" in sdl
        assert "antiPattern: AntiPatternResponse" in sdl


class TestSettle:
    """Mapping outcomes onto resolver behaviour."""

    @pytest.mark.asyncio
    async def test_returned_error(self):
        """Test a returned error is handed back."""
        result = await settle(ConformantError(message="gone", code="NOT_FOUND", thrown=False))
        assert isinstance(result, GraphQLError)
        assert result.extensions == {"code": "NOT_FOUND"}

    @pytest.mark.asyncio
    async def test_thrown_error(self):
        """Test a thrown error is raised."""
        with pytest.raises(GraphQLError) as excinfo:
            await settle(ConformantError(message="boom", code="GQL_ERROR"))
        assert excinfo.value.extensions == {"code": "GQL_ERROR"}

    @pytest.mark.asyncio
    async def test_malformed_success_is_returned(self):
        """Test a malformed success returns its payload."""
        payload = {"body": None, "errors": None}
        assert await settle(MalformedSuccess(payload=payload)) == payload

    @pytest.mark.asyncio
    async def test_delayed_failure_waits_then_raises(self):
        """Test a delayed failure waits before raising."""
        outcome = DelayedFailure(
            delay_ms=50,
            error=ConformantError(message="timeout", code="INTERNAL_SERVER_ERROR"),
        )
        started = time.monotonic()
        with pytest.raises(GraphQLError):
            await settle(outcome)
        assert (time.monotonic() - started) * 1000 >= 50


class TestSuspend:
    """Non-blocking delay primitive."""

    @pytest.mark.asyncio
    async def test_never_returns_early(self):
        """Test suspend waits the full delay."""
        loop = asyncio.get_running_loop()
        started = loop.time()
        await suspend(30)
        assert loop.time() - started >= 0.03

    @pytest.mark.asyncio
    async def test_concurrent_delays_overlap(self):
        """Test concurrent delays run in parallel."""
        started = time.monotonic()
        await asyncio.gather(suspend(100), suspend(100), suspend(100))
        assert time.monotonic() - started < 0.25

    @pytest.mark.asyncio
    async def test_cancellation_produces_no_outcome(self):
        """Test cancelling a pending delay."""
        task = asyncio.ensure_future(settle(DelayedFailure(
            delay_ms=1000,
            error=ConformantError(message="timeout", code="INTERNAL_SERVER_ERROR"),
        )))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


class TestExecution:
    """Executing queries against the schema."""

    @pytest.mark.asyncio
    async def test_not_found(self, schema):
        """Test executing notFound."""
        result = await graphql(schema, "{ notFound { body } }")
        assert result.data == {"notFound": None}
        assert result.errors[0].message == "Not found - error occured"
        assert result.errors[0].extensions == {"code": "NOT_FOUND"}
        assert result.errors[0].path == ["notFound"]

    @pytest.mark.asyncio
    async def test_other_has_no_code(self, schema):
        """Test other keeps its original TypeError."""
        result = await graphql(schema, "{ other { body } }")
        assert result.errors[0].extensions in (None, {})
        assert isinstance(result.errors[0].original_error, TypeError)

    @pytest.mark.asyncio
    async def test_anti_pattern(self, schema):
        """Test executing antiPattern."""
        result = await graphql(schema, "{ antiPattern { body { value code } errors } }")
        assert result.errors is None
        assert result.data == {"antiPattern": {"body": {"value": "", "code": 404}, "errors": None}}

    @pytest.mark.asyncio
    async def test_combined_error(self, schema):
        """Test executing combinedError."""
        result = await graphql(schema, "{ combinedError { body } }")
        assert result.data == {"combinedError": {"body": ["Partial content", None]}}
        assert len(result.errors) == 1
        assert result.errors[0].path == ["combinedError", "body", 1]

    @pytest.mark.asyncio
    async def test_given_code_variable(self, schema):
        """Test givenCode with a variable."""
        result = await graphql(
            schema,
            "query($code: Int) { givenCode(code: $code) { body } }",
            variable_values={"code": 502},
        )
        assert result.errors[0].extensions == {"code": "BAD_REQUEST", "http": {"status": 502}}
