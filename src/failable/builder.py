"""Builders: straight-line code with early-exit failure propagation.

A builder is a callable that receives a ``BuilderHelpers`` object. Inside it,
``helpers.run(result)`` unwraps a success inline; on a failure it abandons
the rest of the builder and the whole call evaluates to that failure::

    def parse_port(raw: str | None) -> Failable[int, str]:
        def body(h: BuilderHelpers[int, str]) -> Failable[int, str]:
            text = h.run(require(raw))
            port = h.run(to_int(text))
            return h.success(port) if port < 65536 else h.failure("OUT_OF_RANGE")

        return failable(body)

The early exit is carried by a private ``BaseException`` subclass bound to the
helpers of one invocation. The boundary converts only its own signal; every
other exception, including an outer builder's signal, passes through
unchanged.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from enum import Enum
import inspect
import logging
from types import TracebackType
from typing import Any

from failable.config import FrozenConfig, current_config
from failable.errors import (
    HINTS,
    BuilderScopeError,
    InvariantViolationError,
)
from failable.result import Failable, Failure, Success

log = logging.getLogger(__name__)


class BuilderState(str, Enum):
    """Lifecycle of one builder invocation."""

    IDLE = "idle"
    RUNNING = "running"
    ABORTED = "aborted"  # run() raised; the boundary has not converted yet
    COMPLETED = "completed"
    PROPAGATING = "propagating"


_ACTIVE_STATES = frozenset({BuilderState.RUNNING, BuilderState.ABORTED})


class _Abort(BaseException):
    # Derives from BaseException so `except Exception` in a builder body
    # cannot intercept it.
    __slots__ = ("error", "scope")

    def __init__(self, error: object, scope: BuilderHelpers[Any, Any]) -> None:
        super().__init__()
        self.error = error
        self.scope = scope


class BuilderHelpers[V, E]:
    """Capabilities handed to a builder for the duration of one call."""

    __slots__ = ("name", "state")

    def __init__(self, name: str) -> None:
        self.name = name
        self.state = BuilderState.IDLE

    def __repr__(self) -> str:
        return f"BuilderHelpers(name={self.name!r}, state={self.state.value!r})"

    def _ensure_active(self, op: str) -> None:
        if self.state not in _ACTIVE_STATES:
            raise BuilderScopeError(
                f"{op}() called on helpers of builder {self.name!r} "
                f"in state {self.state.value!r}",
                hint=HINTS["stale_helpers"],
            )

    def success(self, value: V) -> Failable[V, E]:
        """Build a success for this builder's result type."""
        self._ensure_active("success")
        return Success(value)

    def failure(self, error: E) -> Failable[V, E]:
        """Build a failure for this builder's result type."""
        self._ensure_active("failure")
        return Failure(error)

    def run[R](self, result: Failable[R, E]) -> R:
        """Unwrap a success, or abort the builder with the failure's error.

        ``run`` never awaits: in async builders, await the sub-computation
        first and pass the resolved ``Failable``.
        """
        self._ensure_active("run")
        if isinstance(result, Success):
            return result.value
        if isinstance(result, Failure):
            self.state = BuilderState.ABORTED
            raise _Abort(result.error, self)
        msg = f"run() expects Success or Failure, got {type(result).__name__}"
        if inspect.isawaitable(result):
            msg += "; await it before passing it to run()"
        raise TypeError(msg)


class _Boundary:
    """Failure boundary around one builder invocation.

    Suppresses only the abort raised by ``helpers`` and records it as
    ``failure``; everything else propagates.
    """

    __slots__ = ("_cfg", "_helpers", "failure")

    def __init__(self, helpers: BuilderHelpers[Any, Any], cfg: FrozenConfig) -> None:
        self._helpers = helpers
        self._cfg = cfg
        self.failure: Failure[Any] | None = None

    def __enter__(self) -> _Boundary:
        self._helpers.state = BuilderState.RUNNING
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        helpers = self._helpers
        if exc is None:
            helpers.state = BuilderState.COMPLETED
            return False

        if isinstance(exc, _Abort) and exc.scope is helpers:
            helpers.state = BuilderState.COMPLETED
            if self._cfg.debug_aborts:
                log.debug(
                    "Builder %s short-circuited with error %r", helpers.name, exc.error
                )
            self.failure = Failure(exc.error)
            return True

        helpers.state = BuilderState.PROPAGATING
        if not isinstance(exc, _Abort):
            log.debug(
                "Builder %s raised %s; propagating", helpers.name, type(exc).__name__
            )
        return False


def _builder_name(builder: Callable[..., Any]) -> str:
    return getattr(builder, "__qualname__", None) or repr(builder)


def _checked[V, E](
    result: object, helpers: BuilderHelpers[V, E], cfg: FrozenConfig
) -> Failable[V, E]:
    if not cfg.validate_returns or isinstance(result, (Success, Failure)):
        return result  # type: ignore[return-value]

    hint = HINTS["non_result_return"]
    if inspect.iscoroutine(result):
        result.close()
        hint = "Coroutine builders must be run with failable_async()"
    raise InvariantViolationError(
        f"builder returned {type(result).__name__}, expected Success or Failure",
        builder_name=helpers.name,
        hint=hint,
    )


def failable[V, E](
    builder: Callable[[BuilderHelpers[V, E]], Failable[V, E]],
) -> Failable[V, E]:
    """Run ``builder`` and return its result, converting aborts to failures.

    Args:
        builder: Callable receiving the helpers and returning a ``Failable``.

    Returns:
        The builder's own result, or ``Failure(error)`` when one of its
        ``run`` calls met a failure.

    Raises:
        Any exception the builder raises other than its own abort signal.
        InvariantViolationError: If the builder returns a non-``Failable``
            while ``validate_returns`` is enabled.
    """
    cfg = current_config()
    helpers: BuilderHelpers[V, E] = BuilderHelpers(_builder_name(builder))
    with _Boundary(helpers, cfg) as boundary:
        result = builder(helpers)
    if boundary.failure is not None:
        return boundary.failure
    return _checked(result, helpers, cfg)


async def failable_async[V, E](
    builder: Callable[
        [BuilderHelpers[V, E]], Awaitable[Failable[V, E]] | Failable[V, E]
    ],
) -> Failable[V, E]:
    """Async counterpart of ``failable``.

    The builder may suspend any number of times; the boundary spans its whole
    execution, so a ``run`` after an ``await`` still short-circuits. Plain
    callables returning a ``Failable`` (or any awaitable of one) are
    accepted too.
    """
    cfg = current_config()
    helpers: BuilderHelpers[V, E] = BuilderHelpers(_builder_name(builder))
    with _Boundary(helpers, cfg) as boundary:
        result = builder(helpers)
        if inspect.isawaitable(result):
            result = await result
    if boundary.failure is not None:
        return boundary.failure
    return _checked(result, helpers, cfg)


__all__ = [
    "BuilderHelpers",
    "BuilderState",
    "failable",
    "failable_async",
]
