"""CLI modules for gql-error-mock."""

from .probe import ProbeResult, ProbeRunner, evaluate_probe, run_probes

__all__ = ["ProbeResult", "ProbeRunner", "evaluate_probe", "run_probes"]
