"""Harness plan loading and execution."""

from .loader import apply_options, build_plan, load_plan
from .models import CommandConfig, CorpusConfig, HarnessPlan, PlanOptions
from .runner import resolve_cases, run_plan

__all__ = [
    "CommandConfig",
    "CorpusConfig",
    "HarnessPlan",
    "PlanOptions",
    "apply_options",
    "build_plan",
    "load_plan",
    "resolve_cases",
    "run_plan",
]
