"""Core data models and configuration for gql-error-mock."""

from .models import (
    ErrorCode,
    OutcomeKind,
    ConformantError,
    NonConformantError,
    MalformedSuccess,
    DelayedFailure,
    PartialSuccess,
    SimulatedOutcome,
)
from .config import GqlMockConfig, ServerConfig, ProbeConfig, ReportingConfig, load_config

__all__ = [
    "ErrorCode",
    "OutcomeKind",
    "ConformantError",
    "NonConformantError",
    "MalformedSuccess",
    "DelayedFailure",
    "PartialSuccess",
    "SimulatedOutcome",
    "GqlMockConfig",
    "ServerConfig",
    "ProbeConfig",
    "ReportingConfig",
    "load_config",
]
