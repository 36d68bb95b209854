"""Probe a running mock server and check every simulated outcome."""

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from playwright.sync_api import APIRequestContext, Playwright, sync_playwright

from ..core.config import GqlMockConfig, ProbeConfig
from ..core.models import ErrorCode
from ..mock.server import MockServer

logger = logging.getLogger(__name__)

_MISSING = object()


def build_probes(config: ProbeConfig) -> list[dict]:
    """Build the built-in probe suite.

    Each probe names the operation it calls, the GraphQL request to send and
    what the response envelope must look like.

    Args:
        config: Probe configuration (status code and delay to request).

    Returns:
        List of probe definitions.
    """
    code = config.given_code
    delay = config.request_timeout_ms
    return [
        {
            "name": "notFound returns a NOT_FOUND error",
            "operation": "notFound",
            "query": "{ notFound { body } }",
            "expect": {"outcome": "error", "code": ErrorCode.NOT_FOUND.value, "status": 200},
        },
        {
            "name": "authenticationFail returns FORBIDDEN",
            "operation": "authenticationFail",
            "query": "{ authenticationFail { body } }",
            "expect": {"outcome": "error", "code": ErrorCode.FORBIDDEN.value, "status": 200},
        },
        {
            "name": f"givenCode({code}) sets the response status",
            "operation": "givenCode",
            "query": "query GivenCode($code: Int) { givenCode(code: $code) { body } }",
            "variables": {"code": code},
            "expect": {"outcome": "error", "code": ErrorCode.BAD_REQUEST.value, "status": code},
        },
        {
            "name": "givenCode without a code is a user input error",
            "operation": "givenCode",
            "query": "{ givenCode { body } }",
            "expect": {"outcome": "error", "code": ErrorCode.BAD_USER_INPUT.value, "status": 200},
        },
        {
            "name": "serviceUnavailable returns 503",
            "operation": "serviceUnavailable",
            "query": "{ serviceUnavailable { body } }",
            "expect": {"outcome": "error", "code": ErrorCode.SERVICE_UNAVAILABLE.value, "status": 503},
        },
        {
            "name": "combinedError returns partial data",
            "operation": "combinedError",
            "query": "{ combinedError { body } }",
            "expect": {
                "outcome": "partial",
                "code": ErrorCode.INTERNAL_SERVER_ERROR.value,
                "data": {"body": ["Partial content", None]},
                "path": ["combinedError", "body", 1],
                "status": 200,
            },
        },
        {
            "name": "networkError fails fast with 408",
            "operation": "networkError",
            "query": "{ networkError { body } }",
            "expect": {"outcome": "error", "code": ErrorCode.INTERNAL_SERVER_ERROR.value, "status": 408},
        },
        {
            "name": f"requestTimeout({delay}) fails after the delay",
            "operation": "requestTimeout",
            "query": "query Timeout($time: Int) { requestTimeout(time: $time) { body } }",
            "variables": {"time": delay},
            "expect": {
                "outcome": "error",
                "code": ErrorCode.INTERNAL_SERVER_ERROR.value,
                "status": 200,
                "min_elapsed_ms": delay,
            },
        },
        {
            "name": "requestTimeout without a time is a user input error",
            "operation": "requestTimeout",
            "query": "{ requestTimeout { body } }",
            "expect": {"outcome": "error", "code": ErrorCode.BAD_USER_INPUT.value, "status": 200},
        },
        {
            "name": "other raises a fault without a code",
            "operation": "other",
            "query": "{ other { body } }",
            "expect": {"outcome": "error", "code": None, "status": 200},
        },
        {
            "name": "antiPattern returns a malformed success",
            "operation": "antiPattern",
            "query": "{ antiPattern { body { value code } errors } }",
            "expect": {
                "outcome": "data",
                "data": {"body": {"value": "", "code": 404}, "errors": None},
                "status": 200,
            },
        },
        {
            "name": "gqlError raises GQL_ERROR",
            "operation": "gqlError",
            "query": "{ gqlError { value code } }",
            "expect": {"outcome": "error", "code": ErrorCode.GQL_ERROR.value, "status": 200},
        },
        {
            "name": "nonGqlError raises a fault without a code",
            "operation": "nonGqlError",
            "query": "{ nonGqlError { value code } }",
            "expect": {"outcome": "error", "code": None, "status": 200},
        },
    ]


@dataclass
class ProbeResult:
    """Result of one probe."""
    name: str
    operation: str
    passed: bool = True
    checks: list[dict] = field(default_factory=list)
    status: Optional[int] = None
    body: Optional[dict] = None
    duration_ms: int = 0
    error: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "operation": self.operation,
            "passed": self.passed,
            "checks": self.checks,
            "status": self.status,
            "body": self.body,
            "duration_ms": self.duration_ms,
            "error": self.error,
        }


def _check(result: ProbeResult, check: str, expected: Any, actual: Any) -> None:
    passed = expected == actual
    result.checks.append({"check": check, "passed": passed, "expected": expected, "actual": actual})
    if not passed:
        result.passed = False


def evaluate_probe(probe: dict, status: int, body: Any, elapsed_ms: float) -> ProbeResult:
    """Check a response envelope against a probe's expectations.

    Args:
        probe: Probe definition.
        status: HTTP status of the response.
        body: Decoded JSON body.
        elapsed_ms: Time between sending the request and the response.

    Returns:
        Probe result with one entry per check.
    """
    expect = probe.get("expect", {})
    operation = probe["operation"]
    result = ProbeResult(
        name=probe["name"],
        operation=operation,
        status=status,
        body=body if isinstance(body, dict) else None,
        duration_ms=int(elapsed_ms),
    )

    if not isinstance(body, dict):
        result.passed = False
        result.error = "Response body is not a JSON object"
        return result

    errors = body.get("errors") or []
    value = (body.get("data") or {}).get(operation)

    if "status" in expect:
        _check(result, "status", expect["status"], status)

    outcome = expect.get("outcome")
    if outcome == "error":
        _check(result, "has_errors", True, bool(errors))
        _check(result, "data", None, value)
    elif outcome == "data":
        _check(result, "has_errors", False, bool(errors))
        _check(result, "data", expect.get("data"), value)
    elif outcome == "partial":
        _check(result, "has_errors", True, bool(errors))
        _check(result, "data", expect.get("data"), value)

    first_error = errors[0] if errors else {}
    if "code" in expect:
        actual_code = (first_error.get("extensions") or {}).get("code", _MISSING)
        _check(result, "code", expect["code"], None if actual_code is _MISSING else actual_code)
    if "path" in expect:
        _check(result, "path", expect["path"], first_error.get("path"))
    if "min_elapsed_ms" in expect:
        _check(result, "min_elapsed_ms", True, elapsed_ms >= expect["min_elapsed_ms"])

    return result


class ProbeRunner:
    """Run the probe suite against a mock server.

    Features:
    - Starts an in-process server unless a base URL is configured
    - Sends requests through a Playwright API request context
    - Checks error codes, HTTP statuses, payload shapes and delays
    """

    def __init__(self, config: GqlMockConfig, server: Optional[MockServer] = None):
        """Initialize the runner.

        Args:
            config: gql-error-mock configuration.
            server: Server to probe when no base URL is configured.
        """
        self.config = config
        self.server = server
        self.probes = build_probes(config.probe)
        self._playwright: Optional[Playwright] = None
        self._request: Optional[APIRequestContext] = None
        self._results: list[ProbeResult] = []
        self._owns_server = False

    def setup(self) -> str:
        """Start the server (if needed) and the request context.

        Returns:
            GraphQL endpoint URL.
        """
        if self.config.probe.base_url:
            base_url = self.config.probe.base_url.rstrip("/")
        else:
            if self.server is None:
                self.server = MockServer(config=self.config.server)
                self._owns_server = True
            base_url = self.server.start(background=True)

        self._playwright = sync_playwright().start()
        self._request = self._playwright.request.new_context(
            timeout=self.config.probe.timeout_ms
        )

        return f"{base_url}{self.config.server.graphql_path}"

    def teardown(self) -> None:
        """Clean up resources."""
        if self._request:
            self._request.dispose()
            self._request = None
        if self._playwright:
            self._playwright.stop()
            self._playwright = None
        if self.server and self._owns_server:
            self.server.stop()

    def run_probe(self, probe: dict, endpoint: str) -> ProbeResult:
        """Run a single probe.

        Args:
            probe: Probe definition.
            endpoint: GraphQL endpoint URL.

        Returns:
            Probe result.
        """
        payload = {"query": probe["query"]}
        if probe.get("variables"):
            payload["variables"] = probe["variables"]

        start_time = datetime.now()
        started = time.monotonic()
        try:
            response = self._request.post(endpoint, data=payload)
            elapsed_ms = (time.monotonic() - started) * 1000
            try:
                body = response.json()
            except ValueError:
                body = None
            result = evaluate_probe(probe, response.status, body, elapsed_ms)
        except Exception as e:
            result = ProbeResult(name=probe["name"], operation=probe["operation"], passed=False, error=str(e))
            result.duration_ms = int((time.monotonic() - started) * 1000)

        result.start_time = start_time
        result.end_time = datetime.now()
        return result

    def run_all(self, endpoint: str) -> list[ProbeResult]:
        """Run every built-in probe.

        Args:
            endpoint: GraphQL endpoint URL.

        Returns:
            List of probe results.
        """
        results = []
        for probe in self.probes:
            logger.info(f"Probing: {probe['name']}")
            result = self.run_probe(probe, endpoint)
            results.append(result)

            status = "PASS" if result.passed else "FAIL"
            logger.info(f"  {status} ({result.duration_ms}ms)")
            for check in result.checks:
                if not check["passed"]:
                    logger.info(f"    {check['check']}: expected {check['expected']!r}, got {check['actual']!r}")

        self._results = results
        return results

    def get_summary(self) -> dict:
        """Get probe run summary.

        Returns:
            Summary statistics.
        """
        if not self._results:
            return {"total": 0, "passed": 0, "failed": 0}

        passed = sum(1 for r in self._results if r.passed)
        failed = len(self._results) - passed

        return {
            "total": len(self._results),
            "passed": passed,
            "failed": failed,
            "pass_rate": passed / len(self._results),
            "results": [r.to_dict() for r in self._results]
        }

    def save_results(self, path: str) -> None:
        """Save probe results to file.

        Args:
            path: Output file path.
        """
        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)

        with open(output, "w") as f:
            json.dump({
                "run_at": datetime.now().isoformat(),
                "summary": self.get_summary()
            }, f, indent=2)


def run_probes(config: GqlMockConfig) -> tuple[dict, list[ProbeResult]]:
    """Run the probe suite and return its results.

    Args:
        config: gql-error-mock configuration.

    Returns:
        Summary and the individual probe results.
    """
    runner = ProbeRunner(config)

    try:
        endpoint = runner.setup()
        logger.info(f"Probing endpoint: {endpoint}")

        results = runner.run_all(endpoint)
        summary = runner.get_summary()

        logger.info(f"\nResults: {summary['passed']}/{summary['total']} passed ({summary['pass_rate']:.1%})")

        if config.probe.results_file:
            runner.save_results(config.probe.results_file)
            logger.info(f"Results saved to: {config.probe.results_file}")

        return summary, results

    finally:
        runner.teardown()
