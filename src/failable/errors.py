"""Exception hierarchy for failable.

Domain failures never appear here: they travel as ``Failure`` values. These
classes describe defects, i.e. misuse of the library or broken configuration.
"""

from __future__ import annotations


class FailableError(Exception):
    """Base exception for all failable errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        """Return the message followed by the hint, when present."""
        msg = super().__str__()
        return f"{msg}. {self.hint}" if self.hint else msg


class ConfigurationError(FailableError):
    """Configuration validation or resolution failed."""


class InvariantViolationError(FailableError):
    """A builder broke its contract.

    Raised when a builder returns something that is neither ``Success`` nor
    ``Failure``.
    """

    def __init__(
        self,
        message: str,
        *,
        builder_name: str | None = None,
        hint: str | None = None,
    ) -> None:
        self.builder_name = builder_name
        msg = message if builder_name is None else f"[{builder_name}] {message}"
        super().__init__(msg, hint=hint)


class BuilderScopeError(FailableError):
    """Builder helpers were used outside the invocation that created them."""


HINTS = {
    "non_result_return": (
        "Return helpers.success(...) or helpers.failure(...) from the builder"
    ),
    "stale_helpers": (
        "Helpers are only valid while their builder runs; do not store them "
        "or call them from callbacks that outlive the builder"
    ),
    "invalid_setting": "Check FAILABLE_* environment variables and [tool.failable]",
}
