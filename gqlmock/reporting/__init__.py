"""Probe reporting."""

from .allure_reporter import AllureReporter

__all__ = ["AllureReporter"]
