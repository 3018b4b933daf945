"""failable: explicit success/failure values for Python.

Public API:
    - success() / failure(): construct values
    - Success / Failure / Failable: the result type and its combinators
    - failable() / failable_async(): builders with early-exit ``run``
    - map_m(): first-failure-wins batch mapping
    - Optional: short-circuiting reads through nested optional data
"""

from __future__ import annotations

import logging

from failable.batch import map_m, map_multiple
from failable.builder import BuilderHelpers, BuilderState, failable, failable_async
from failable.config import FrozenConfig, config_scope, resolve_config
from failable.errors import (
    BuilderScopeError,
    ConfigurationError,
    FailableError,
    InvariantViolationError,
)
from failable.optional import Optional
from failable.result import (
    AsyncFunction,
    Failable,
    FailableAwaitable,
    FailableSummary,
    Failure,
    Success,
    failure,
    is_failable,
    success,
)

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("failable")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("failable").addHandler(logging.NullHandler())

__all__ = [
    "AsyncFunction",
    "BuilderHelpers",
    "BuilderScopeError",
    "BuilderState",
    "ConfigurationError",
    "Failable",
    "FailableAwaitable",
    "FailableError",
    "FailableSummary",
    "Failure",
    "FrozenConfig",
    "InvariantViolationError",
    "Optional",
    "Success",
    "config_scope",
    "failable",
    "failable_async",
    "failure",
    "is_failable",
    "map_m",
    "map_multiple",
    "resolve_config",
    "success",
]
