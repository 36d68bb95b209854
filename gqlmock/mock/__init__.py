"""Mock GraphQL server for error-handling tests."""

from .catalog import ErrorCatalog, OperationDefinition, UnknownOperationError, build_default_catalog
from .schema import build_executable_schema
from .server import MockServer

__all__ = [
    "ErrorCatalog",
    "OperationDefinition",
    "UnknownOperationError",
    "build_default_catalog",
    "build_executable_schema",
    "MockServer",
]
