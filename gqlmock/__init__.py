"""gql-error-mock - Mock GraphQL server for client error-handling tests.

Modules:
    core        - Outcome models and configuration
    mock        - Error catalog, GraphQL schema and Flask server
    cli         - Probe runner for a live server
    reporting   - Allure result files for probe runs
"""

__version__ = "0.1.0"

from .core.config import GqlMockConfig, load_config
from .core.models import (
    ErrorCode,
    OutcomeKind,
    ConformantError,
    NonConformantError,
    MalformedSuccess,
    DelayedFailure,
    PartialSuccess,
)
from .mock.catalog import ErrorCatalog, OperationDefinition, UnknownOperationError, build_default_catalog
from .mock.server import MockServer

__all__ = [
    # Config
    "GqlMockConfig",
    "load_config",
    # Models
    "ErrorCode",
    "OutcomeKind",
    "ConformantError",
    "NonConformantError",
    "MalformedSuccess",
    "DelayedFailure",
    "PartialSuccess",
    # Core classes
    "ErrorCatalog",
    "OperationDefinition",
    "UnknownOperationError",
    "build_default_catalog",
    "MockServer",
]
