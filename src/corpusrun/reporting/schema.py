"""JSON schema definition for reporter output."""
from __future__ import annotations

from corpusrun.core.models import OutcomeKind

SCHEMA_VERSION = "1.0.0"

_OUTCOMES = [kind.value for kind in OutcomeKind]

JSON_SCHEMA_V1 = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "corpusrun report",
    "type": "object",
    "required": ["schema_version", "generated_at", "summary", "cases"],
    "properties": {
        "schema_version": {"type": "string"},
        "generated_at": {"type": "string", "format": "date-time"},
        "summary": {
            "type": "object",
            "required": ["total", *_OUTCOMES, "clean", "duration_s"],
            "properties": {
                "total": {"type": "integer", "minimum": 0},
                **{name: {"type": "integer", "minimum": 0} for name in _OUTCOMES},
                "clean": {"type": "boolean"},
                "command": {"type": ["string", "null"]},
                "classifier": {"type": "string"},
                "timeout_s": {"type": "number"},
                "duration_s": {"type": "number"},
            },
        },
        "cases": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "path", "outcome", "exit_status", "duration_ms"],
                "properties": {
                    "name": {"type": "string"},
                    "path": {"type": "string"},
                    "outcome": {"type": "string", "enum": _OUTCOMES},
                    "exit_status": {"type": ["integer", "null"]},
                    "duration_ms": {"type": "number"},
                    "details": {"type": "string"},
                },
            },
        },
    },
}
