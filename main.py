#!/usr/bin/env python3
"""gql-error-mock - Mock GraphQL server for client error-handling tests.

Commands:
    serve        Run the mock GraphQL server
    operations   List the simulated operations and their outcomes
    probe        Check every simulated outcome against a server
    init-config  Write a default configuration file
    report       Generate an Allure HTML report from probe results
"""

import argparse
import logging
import sys

from pydantic import ValidationError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("gqlmock")


def _load(args):
    from gqlmock.core.config import load_config

    return load_config(args.config)


def cmd_serve(args):
    """Run the mock server in the foreground."""
    from gqlmock.mock.catalog import build_default_catalog
    from gqlmock.mock.server import MockServer

    config = _load(args)

    # Override with CLI args
    if args.host:
        config.server.host = args.host
    if args.port is not None:
        config.server.port = args.port
    if args.debug:
        config.server.debug = True

    server = MockServer(catalog=build_default_catalog(), config=config.server)
    logger.info(f"Server ready at {server.get_url()}{config.server.graphql_path}")
    server.start()
    return 0


def cmd_operations(args):
    """List catalog operations."""
    from gqlmock.mock.catalog import build_default_catalog

    catalog = build_default_catalog()
    for operation in catalog:
        argument = f"({operation.argument}: Int)" if operation.argument else ""
        # Resolve with a representative argument to show the outcome kind
        outcome = catalog.resolve(operation.name, **({operation.argument: 1} if operation.argument else {}))
        print(f"{operation.name}{argument}: {operation.return_type}  [{outcome.kind.value}]  {operation.description}")
    return 0


def cmd_probe(args):
    """Probe a server and report which outcomes match."""
    from gqlmock.cli.probe import run_probes
    from gqlmock.reporting.allure_reporter import AllureReporter

    config = _load(args)

    if args.base_url:
        config.probe.base_url = args.base_url
    if args.port is not None:
        config.server.port = args.port
    if args.output:
        config.probe.results_file = args.output
    if args.allure:
        config.reporting.allure_enabled = True
    if args.allure_dir:
        config.reporting.output_dir = args.allure_dir

    summary, results = run_probes(config)

    if config.reporting.allure_enabled:
        reporter = AllureReporter(results_dir=config.reporting.output_dir)
        reporter.report_suite(results)
        logger.info(f"Allure results written to: {config.reporting.output_dir}")

    return 0 if summary["failed"] == 0 else 1


def cmd_init_config(args):
    """Write a default configuration file."""
    from gqlmock.core.config import create_default_config

    create_default_config(args.path, port=args.port)
    logger.info(f"Configuration written to: {args.path}")
    return 0


def cmd_report(args):
    """Generate reports from probe results."""
    import subprocess

    logger.info("Generating reports...")

    try:
        result = subprocess.run([
            "allure", "generate", args.results_dir,
            "-o", args.output_dir,
            "--clean"
        ], capture_output=True, text=True)
    except FileNotFoundError:
        logger.error("allure commandline not found on PATH")
        return 1

    if result.returncode != 0:
        logger.error(f"Allure generation failed: {result.stderr}")
        return 1

    logger.info(f"Allure report generated in: {args.output_dir}")
    if args.open:
        subprocess.run(["allure", "open", args.output_dir])
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="gql-error-mock - Mock GraphQL server for client error-handling tests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to config YAML file"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the mock server")
    serve_parser.add_argument("--host", help="Interface to bind")
    serve_parser.add_argument("--port", type=int, help="Port to listen on (default 4000)")
    serve_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    serve_parser.set_defaults(func=cmd_serve)

    # Operations command
    operations_parser = subparsers.add_parser("operations", help="List simulated operations")
    operations_parser.set_defaults(func=cmd_operations)

    # Probe command
    probe_parser = subparsers.add_parser("probe", help="Check every simulated outcome")
    probe_parser.add_argument("--base-url", help="Probe a running server instead of starting one")
    probe_parser.add_argument("--port", type=int, help="Port for the in-process server")
    probe_parser.add_argument("-o", "--output", help="Output path for probe results JSON")
    probe_parser.add_argument("--allure", action="store_true", help="Generate Allure results")
    probe_parser.add_argument("--allure-dir", help="Allure results directory")
    probe_parser.set_defaults(func=cmd_probe)

    # Init-config command
    init_parser = subparsers.add_parser("init-config", help="Write a default config file")
    init_parser.add_argument("path", nargs="?", default="gqlmock.config.yaml")
    init_parser.add_argument("--port", type=int, help="Port to write into the config")
    init_parser.set_defaults(func=cmd_init_config)

    # Report command
    report_parser = subparsers.add_parser("report", help="Generate reports")
    report_parser.add_argument("--results-dir", default="allure-results")
    report_parser.add_argument("--output-dir", default="allure-report")
    report_parser.add_argument("--open", action="store_true", help="Open report in browser")
    report_parser.set_defaults(func=cmd_report)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except (FileNotFoundError, ValidationError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
