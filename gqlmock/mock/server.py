"""Mock GraphQL server using Flask."""

import json
import logging
import threading
from inspect import isawaitable
from typing import Any, Optional

from flask import Flask, Response, jsonify, render_template_string, request
from flask_cors import CORS
from graphql import ExecutionResult, GraphQLError, execute, parse, print_schema, validate
from werkzeug.serving import BaseWSGIServer, make_server

from ..core.config import ServerConfig
from ..core.models import ErrorCode
from .catalog import ErrorCatalog, build_default_catalog
from .schema import build_executable_schema

logger = logging.getLogger(__name__)


# HTML templates for the fallback page
TEMPLATES = {
    "base": """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
    <style>
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; padding: 20px; background: #f5f5f5; }
        .container { max-width: 800px; margin: 0 auto; background: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
        h1 { margin-bottom: 20px; color: #333; }
        code { background: #e9ecef; padding: 2px 4px; border-radius: 4px; }
        ul { list-style: none; }
        li { padding: 6px 0; border-bottom: 1px solid #eee; }
        .error { color: #dc3545; }
    </style>
</head>
<body>
    <div class="container">
        {% block content %}{% endblock %}
    </div>
</body>
</html>
""",
    "error": """
<h1 id="error-title" class="error" data-testid="error-title">Something went wrong</h1>
<p id="error-path" data-testid="error-path">No page is served at <code>/{{ path }}</code>.</p>
<p>The API is available at <code>{{ graphql_path }}</code>. Operations:</p>
<ul id="operations" data-testid="operations">
    {% for name in operations %}
    <li>{{ name }}</li>
    {% endfor %}
</ul>
""",
}

FALLBACK_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


class MockServer:
    """Mock GraphQL server for exercising client error handling.

    Features:
    - One GraphQL endpoint backed by an error catalog
    - Apollo-style ``extensions.http.status`` mapped onto the response status
    - Static fallback page (HTTP 500) for every non-API path
    - CORS for browser clients
    """

    def __init__(
        self,
        catalog: Optional[ErrorCatalog] = None,
        config: Optional[ServerConfig] = None
    ):
        """Initialize the mock server.

        Args:
            catalog: Catalog to serve. Defaults to the built-in catalog.
            config: Server configuration.
        """
        self.catalog = catalog or build_default_catalog()
        self.config = config or ServerConfig()
        self.schema = build_executable_schema(self.catalog)

        self.app = Flask(__name__)
        CORS(self.app, origins=self.config.cors_origins)

        self._setup_routes()

        self._server: Optional[BaseWSGIServer] = None
        self._server_thread: Optional[threading.Thread] = None

    def _setup_routes(self) -> None:
        """Set up Flask routes."""
        graphql_path = self.config.graphql_path

        @self.app.route(graphql_path, methods=["GET", "POST"])
        async def graphql_endpoint():
            if request.method == "GET":
                params: dict[str, Any] = request.args.to_dict()
                if params.get("variables"):
                    try:
                        params["variables"] = json.loads(params["variables"])
                    except ValueError:
                        return self._request_error("Variables are invalid JSON.", ErrorCode.BAD_REQUEST)
            else:
                params = request.get_json(silent=True)
                if params is None:
                    params = {}
                if not isinstance(params, dict):
                    return self._request_error("POST body must be a JSON object.", ErrorCode.BAD_REQUEST)

            query = params.get("query")
            if not query or not isinstance(query, str):
                return self._request_error(
                    "GraphQL operations must contain a non-empty `query`.", ErrorCode.BAD_REQUEST
                )

            variables = params.get("variables")
            if variables is not None and not isinstance(variables, dict):
                return self._request_error("`variables` must be an object.", ErrorCode.BAD_REQUEST)

            return await self.execute_query(query, variables, params.get("operationName"))

        @self.app.route(f"{graphql_path}/schema")
        def graphql_schema():
            return Response(print_schema(self.schema), mimetype="text/plain")

        @self.app.route("/", defaults={"path": ""}, methods=FALLBACK_METHODS)
        @self.app.route("/<path:path>", methods=FALLBACK_METHODS)
        def fallback_page(path: str):
            logger.debug(f"Fallback page for /{path}")
            page = render_template_string(
                TEMPLATES["base"].replace("{% block content %}{% endblock %}", TEMPLATES["error"]),
                title="Error",
                path=path,
                graphql_path=graphql_path,
                operations=self.catalog.names(),
            )
            return page, 500

    async def execute_query(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
        operation_name: Optional[str] = None
    ):
        """Parse, validate and execute a GraphQL request.

        Args:
            query: GraphQL document.
            variables: Variable values.
            operation_name: Operation to run when the document holds several.

        Returns:
            Flask response tuple of JSON body and status code.
        """
        try:
            document = parse(query)
        except GraphQLError as e:
            return self._errors_response([e], ErrorCode.GRAPHQL_PARSE_FAILED)

        validation_errors = validate(self.schema, document)
        if validation_errors:
            return self._errors_response(validation_errors, ErrorCode.GRAPHQL_VALIDATION_FAILED)

        result = execute(
            self.schema,
            document,
            variable_values=variables,
            operation_name=operation_name
        )
        if isawaitable(result):
            result = await result

        payload, status = self.format_result(result)
        logger.debug(f"GraphQL {operation_name or 'request'} -> {status}")
        return jsonify(payload), status

    def format_result(self, result: ExecutionResult) -> tuple[dict[str, Any], int]:
        """Build the wire envelope and HTTP status for an execution result.

        ``extensions.http`` is removed from each error; the first valid status
        found becomes the response status.

        Args:
            result: graphql-core execution result.

        Returns:
            Tuple of JSON-ready payload and HTTP status.
        """
        payload = result.formatted
        # Execution never started, e.g. bad variable values
        status = 400 if result.data is None and result.errors else 200
        http_status: Optional[int] = None

        for error in payload.get("errors", []):
            if "extensions" not in error:
                continue
            extensions = dict(error["extensions"])
            http = extensions.pop("http", None)
            if extensions:
                error["extensions"] = extensions
            else:
                del error["extensions"]

            candidate = (http or {}).get("status")
            if candidate is None or http_status is not None:
                continue
            if isinstance(candidate, int) and 100 <= candidate <= 599:
                http_status = candidate
            else:
                logger.warning(f"Ignoring invalid HTTP status {candidate!r}")

        return payload, http_status or status

    def _errors_response(self, errors: list[GraphQLError], code: ErrorCode):
        formatted = []
        for error in errors:
            entry = dict(error.formatted)
            entry["extensions"] = {**(entry.get("extensions") or {}), "code": code.value}
            formatted.append(entry)
        logger.debug(f"Rejected request: {code.value}")
        return jsonify({"errors": formatted}), 400

    def _request_error(self, message: str, code: ErrorCode):
        return self._errors_response([GraphQLError(message)], code)

    def start(self, background: bool = False) -> str:
        """Start the mock server.

        Args:
            background: Run in background thread.

        Returns:
            Server URL.
        """
        if background:
            self._server = make_server(
                self.config.host,
                self.config.port,
                self.app,
                threaded=self.config.threaded
            )
            self._server_thread = threading.Thread(
                target=self._server.serve_forever,
                daemon=True
            )
            self._server_thread.start()
            logger.info(f"Mock server started at {self.get_url()}")
        else:
            logger.info(f"Starting mock server at {self.get_url()}")
            self.app.run(
                host=self.config.host,
                port=self.config.port,
                debug=self.config.debug,
                threaded=self.config.threaded,
                use_reloader=False
            )
        return self.get_url()

    def stop(self) -> None:
        """Stop a server started in the background."""
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._server_thread is not None:
            self._server_thread.join(timeout=5)
            self._server_thread = None

    def get_url(self) -> str:
        """Get the server URL.

        Returns:
            Server URL string. Reflects the bound port when started with port 0.
        """
        port = self._server.server_port if self._server is not None else self.config.port
        return f"http://{self.config.host}:{port}"

    @property
    def graphql_url(self) -> str:
        return f"{self.get_url()}{self.config.graphql_path}"
