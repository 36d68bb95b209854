"""Allure report generation for probe results."""

import hashlib
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from uuid import uuid4

from ..cli.probe import ProbeResult

logger = logging.getLogger(__name__)


class AllureReporter:
    """Generates Allure-compatible probe reports.

    Creates JSON result files that can be processed by
    allure-commandline to generate HTML reports.
    """

    def __init__(self, results_dir: str = "allure-results"):
        """Initialize the reporter.

        Args:
            results_dir: Directory for Allure result files.
        """
        self.results_dir = Path(results_dir)
        self.results_dir.mkdir(parents=True, exist_ok=True)

    def report_probe(self, result: ProbeResult) -> str:
        """Generate Allure report for a probe result.

        Args:
            result: Probe result.

        Returns:
            Path to the generated result file.
        """
        probe_uuid = str(uuid4())

        start_ms = int(result.start_time.timestamp() * 1000) if result.start_time else 0
        stop_ms = int(result.end_time.timestamp() * 1000) if result.end_time else start_ms

        allure_result = {
            "uuid": probe_uuid,
            "historyId": self._generate_history_id(result.name),
            "name": result.name,
            "description": f"Operation: {result.operation}",
            "status": self._status(result),
            "statusDetails": {
                "message": result.error or self._failure_message(result),
                "trace": ""
            } if not result.passed else {},
            "stage": "finished",
            "steps": [self._convert_check(check) for check in result.checks],
            "labels": [
                {"name": "suite", "value": "gql-error-mock probes"},
                {"name": "framework", "value": "gql-error-mock"},
                {"name": "language", "value": "python"},
                {"name": "tag", "value": result.operation},
            ],
            "links": [],
            "start": start_ms,
            "stop": stop_ms,
            "parameters": [
                {"name": "operation", "value": result.operation},
                {"name": "http_status", "value": str(result.status) if result.status is not None else ""},
                {"name": "duration_ms", "value": str(result.duration_ms)}
            ]
        }

        result_file = self.results_dir / f"{probe_uuid}-result.json"
        with open(result_file, "w") as f:
            json.dump(allure_result, f, indent=2)

        logger.debug(f"Wrote Allure result: {result_file}")
        return str(result_file)

    def _status(self, result: ProbeResult) -> str:
        if result.passed:
            return "passed"
        # A request that never got a response is broken, not failed
        return "broken" if result.error and not result.checks else "failed"

    def _failure_message(self, result: ProbeResult) -> str:
        return "; ".join(
            f"{check['check']}: expected {check['expected']!r}, got {check['actual']!r}"
            for check in result.checks
            if not check["passed"]
        )

    def _convert_check(self, check: dict) -> dict:
        """Convert a probe check to an Allure step.

        Args:
            check: Check entry from a probe result.

        Returns:
            Allure step dictionary.
        """
        return {
            "name": f"Check {check['check']}",
            "status": "passed" if check["passed"] else "failed",
            "statusDetails": {
                "message": f"expected {check['expected']!r}, got {check['actual']!r}"
            } if not check["passed"] else {},
            "stage": "finished",
            "parameters": [
                {"name": "expected", "value": json.dumps(check["expected"])},
                {"name": "actual", "value": json.dumps(check["actual"])}
            ]
        }

    def _generate_history_id(self, name: str) -> str:
        return hashlib.md5(name.encode()).hexdigest()

    def report_suite(self, results: list[ProbeResult], suite_name: str = "gql-error-mock probes") -> dict:
        """Generate report for a probe run.

        Args:
            results: List of probe results.
            suite_name: Name of the suite.

        Returns:
            Summary statistics.
        """
        passed = sum(1 for r in results if r.passed)
        failed = len(results) - passed
        total_duration = sum(r.duration_ms for r in results)

        for result in results:
            self.report_probe(result)

        self._write_environment()
        self._write_categories()

        summary = {
            "suite": suite_name,
            "total": len(results),
            "passed": passed,
            "failed": failed,
            "pass_rate": passed / len(results) if results else 0,
            "duration_ms": total_duration,
            "results_dir": str(self.results_dir)
        }

        logger.info(f"Suite report: {passed}/{len(results)} passed ({summary['pass_rate']:.1%})")
        return summary

    def _write_environment(self) -> None:
        """Write environment.properties file."""
        env_file = self.results_dir / "environment.properties"
        with open(env_file, "w") as f:
            f.write("Framework=gql-error-mock\n")
            f.write(f"Python={sys.version.split()[0]}\n")
            f.write(f"Generated={datetime.now().isoformat()}\n")

    def _write_categories(self) -> None:
        """Write categories.json for failure categorization."""
        categories = [
            {
                "name": "Wrong error code",
                "matchedStatuses": ["failed"],
                "messageRegex": ".*expected '[A-Z_]+'.*"
            },
            {
                "name": "Unexpected HTTP status",
                "matchedStatuses": ["failed"],
                "messageRegex": ".*expected \\d{3}, got \\d{3}.*"
            },
            {
                "name": "Connection failure",
                "matchedStatuses": ["broken"],
                "messageRegex": ".*(ECONNREFUSED|connect|Timeout).*"
            }
        ]

        categories_file = self.results_dir / "categories.json"
        with open(categories_file, "w") as f:
            json.dump(categories, f, indent=2)
