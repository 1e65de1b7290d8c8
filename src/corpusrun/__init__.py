"""corpusrun: run a program over a corpus of inputs and tally the outcomes."""
from __future__ import annotations

import importlib
import os
from typing import Tuple

from .version import __version__

__all__ = [
    "__version__",
    "bootstrap",
]

# Comma-separated modules whose ``register()`` adds classifier strategies.
PLUGINS_ENV = "CORPUSRUN_PLUGINS"

_LOADED_PLUGINS: Tuple[str, ...] | None = None


def bootstrap() -> Tuple[str, ...]:
    """Load classifier plugins once; returns the imported module names."""

    global _LOADED_PLUGINS
    if _LOADED_PLUGINS is None:
        _LOADED_PLUGINS = _load_plugins(os.environ.get(PLUGINS_ENV, ""))
    return _LOADED_PLUGINS


def _load_plugins(spec: str) -> Tuple[str, ...]:
    loaded = []
    for module_name in (item.strip() for item in spec.split(",")):
        if not module_name:
            continue
        module = importlib.import_module(module_name)
        register = getattr(module, "register", None)
        if not callable(register):
            raise ImportError(f"Plugin module '{module_name}' has no register() function")
        register()
        loaded.append(module_name)
    return tuple(loaded)
