"""Tests for the probe runner."""

import json
from unittest.mock import MagicMock

import pytest

from gqlmock.cli.probe import ProbeResult, ProbeRunner, build_probes, evaluate_probe
from gqlmock.core.config import GqlMockConfig, ProbeConfig
from gqlmock.mock.server import MockServer


def probe_named(operation, probes=None):
    probes = probes or build_probes(ProbeConfig())
    return next(p for p in probes if p["operation"] == operation)


def fake_response(status, body):
    response = MagicMock()
    response.status = status
    response.json.return_value = body
    return response


class TestBuildProbes:
    """The built-in probe suite."""

    def test_covers_every_catalog_operation(self):
        """Test the built-in suite covers the whole catalog."""
        operations = {p["operation"] for p in build_probes(ProbeConfig())}
        assert operations == set(MockServer().catalog.names())

    def test_uses_configured_values(self):
        """Test configured code and delay reach the suite."""
        probes = build_probes(ProbeConfig(given_code=418, request_timeout_ms=120))
        given = next(p for p in probes if p.get("variables") == {"code": 418})
        assert given["expect"]["status"] == 418
        timeout = next(p for p in probes if p.get("variables") == {"time": 120})
        assert timeout["expect"]["min_elapsed_ms"] == 120


class TestEvaluateProbe:
    """Checking envelopes against expectations."""

    def test_matching_error(self):
        """Test a matching envelope passes every check."""
        body = {"data": {"notFound": None}, "errors": [{"message": "x", "extensions": {"code": "NOT_FOUND"}}]}
        result = evaluate_probe(probe_named("notFound"), 200, body, 3)
        assert result.passed
        assert {c["check"] for c in result.checks} == {"status", "has_errors", "data", "code"}

    def test_wrong_code(self):
        """Test a wrong code fails only the code check."""
        body = {"data": {"notFound": None}, "errors": [{"message": "x", "extensions": {"code": "FORBIDDEN"}}]}
        result = evaluate_probe(probe_named("notFound"), 200, body, 3)
        assert not result.passed
        failed = [c for c in result.checks if not c["passed"]]
        assert failed == [{"check": "code", "passed": False, "expected": "NOT_FOUND", "actual": "FORBIDDEN"}]

    def test_missing_code_is_expected_for_raw_faults(self):
        """Test raw faults pass without a code."""
        body = {"data": {"other": None}, "errors": [{"message": "boom"}]}
        assert evaluate_probe(probe_named("other"), 200, body, 1).passed

    def test_code_present_on_raw_fault_fails(self):
        """Test a code on a raw fault fails."""
        body = {"data": {"other": None}, "errors": [{"message": "boom", "extensions": {"code": "INTERNAL_SERVER_ERROR"}}]}
        assert not evaluate_probe(probe_named("other"), 200, body, 1).passed

    def test_malformed_success(self):
        """Test the antiPattern envelope passes."""
        body = {"data": {"antiPattern": {"body": {"value": "", "code": 404}, "errors": None}}}
        assert evaluate_probe(probe_named("antiPattern"), 200, body, 1).passed

    def test_malformed_success_with_errors_fails(self):
        """Test antiPattern with errors fails."""
        body = {
            "data": {"antiPattern": {"body": {"value": "", "code": 404}, "errors": None}},
            "errors": [{"message": "unexpected"}],
        }
        assert not evaluate_probe(probe_named("antiPattern"), 200, body, 1).passed

    def test_partial_success_path(self):
        """Test the partial success error path."""
        body = {
            "data": {"combinedError": {"body": ["Partial content", None]}},
            "errors": [{
                "message": "x",
                "path": ["combinedError", "body", 1],
                "extensions": {"code": "INTERNAL_SERVER_ERROR"},
            }],
        }
        assert evaluate_probe(probe_named("combinedError"), 200, body, 1).passed

    def test_timeout_too_fast_fails(self):
        """Test a response faster than the delay fails."""
        probes = build_probes(ProbeConfig(request_timeout_ms=50))
        probe = next(p for p in probes if p.get("variables") == {"time": 50})
        body = {"data": {"requestTimeout": None}, "errors": [{"message": "x", "extensions": {"code": "INTERNAL_SERVER_ERROR"}}]}
        assert not evaluate_probe(probe, 200, body, 10).passed
        assert evaluate_probe(probe, 200, body, 51).passed

    def test_wrong_status(self):
        """Test a wrong HTTP status is reported first."""
        body = {"data": {"networkError": None}, "errors": [{"message": "x", "extensions": {"code": "INTERNAL_SERVER_ERROR"}}]}
        result = evaluate_probe(probe_named("networkError"), 200, body, 1)
        assert not result.passed
        assert result.checks[0] == {"check": "status", "passed": False, "expected": 408, "actual": 200}

    def test_non_json_body(self):
        """Test a non-JSON body is an error."""
        result = evaluate_probe(probe_named("notFound"), 500, None, 1)
        assert not result.passed
        assert result.error == "Response body is not a JSON object"


class TestProbeRunner:
    """Running probes through a request context."""

    @pytest.fixture
    def runner(self):
        runner = ProbeRunner(GqlMockConfig())
        runner._request = MagicMock()
        return runner

    def test_run_probe_posts_query_and_variables(self, runner):
        """Test the request carries query and variables."""
        probe = next(p for p in runner.probes if p.get("variables") == {"code": 500})
        runner._request.post.return_value = fake_response(500, {
            "data": {"givenCode": None},
            "errors": [{"message": "x", "extensions": {"code": "BAD_REQUEST"}}],
        })

        result = runner.run_probe(probe, "http://localhost:4000/graphql")

        runner._request.post.assert_called_once_with(
            "http://localhost:4000/graphql",
            data={"query": probe["query"], "variables": {"code": 500}},
        )
        assert result.passed
        assert result.start_time is not None
        assert result.end_time >= result.start_time

    def test_request_failure_is_reported(self, runner):
        """Test request failures are recorded as errors."""
        runner._request.post.side_effect = RuntimeError("connect ECONNREFUSED")
        result = runner.run_probe(probe_named("notFound"), "http://localhost:1/graphql")
        assert not result.passed
        assert "ECONNREFUSED" in result.error

    def test_summary_and_save(self, runner, tmp_path):
        """Test the run summary and saved results."""
        runner._request.post.return_value = fake_response(200, {"data": {}})
        runner.run_all("http://localhost:4000/graphql")

        summary = runner.get_summary()
        assert summary["total"] == len(runner.probes)
        assert summary["passed"] + summary["failed"] == summary["total"]

        path = tmp_path / "out" / "probe.json"
        runner.save_results(str(path))
        saved = json.loads(path.read_text())
        assert saved["summary"]["total"] == len(runner.probes)

    def test_empty_summary(self):
        """Test the summary before any run."""
        assert ProbeRunner(GqlMockConfig()).get_summary() == {"total": 0, "passed": 0, "failed": 0}

    def test_to_dict(self):
        """Test result serialization."""
        result = ProbeResult(name="n", operation="notFound", status=200)
        assert result.to_dict()["operation"] == "notFound"
