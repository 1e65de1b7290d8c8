"""Reporting exports."""
from .base import ReporterGroup, Reporter
from .json_reporter import JsonReporter
from .terminal import TerminalReporter

__all__ = [
    "ReporterGroup",
    "Reporter",
    "JsonReporter",
    "TerminalReporter",
]
