"""Core engine exposed at the package level."""
from .classifier import (
    Classifier,
    ExitCodeClassifier,
    FallbackClassifier,
    MarkerRule,
    TextPatternClassifier,
    build_classifier,
    register_classifier,
)
from .discovery import cases_from_paths, discover_cases
from .driver import BatchDriver
from .errors import BatchInterrupted, HarnessError, LaunchError
from .interrupts import CancelToken, InterruptHandler
from .models import InvocationResult, OutcomeKind, TestCase
from .results import BatchResult, CaseResult
from .runner import InvocationRunner
from .tally import CorpusTally

__all__ = [
    "BatchDriver",
    "BatchInterrupted",
    "BatchResult",
    "CancelToken",
    "CaseResult",
    "Classifier",
    "CorpusTally",
    "ExitCodeClassifier",
    "FallbackClassifier",
    "HarnessError",
    "InterruptHandler",
    "InvocationResult",
    "InvocationRunner",
    "LaunchError",
    "MarkerRule",
    "OutcomeKind",
    "TestCase",
    "TextPatternClassifier",
    "build_classifier",
    "cases_from_paths",
    "discover_cases",
    "register_classifier",
]
