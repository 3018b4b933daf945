"""Result values for computations that may fail.

A ``Failable[V, E]`` is either ``Success(value)`` or ``Failure(error)``.
Both variants are frozen, so every combinator returns a new value (or the
receiver itself on the short-circuit path) and never mutates in place.

Branch without combinators through the discriminant::

    if r.is_error:
        handle(r.error)
    else:
        use(r.value)

or through structural pattern matching::

    match r:
        case Success(value):
            ...
        case Failure(error):
            ...
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import dataclasses
from typing import Any, Literal, Never, Self, TypedDict


class SuccessSummary[V](TypedDict):
    """Structural view of a success."""

    is_error: Literal[False]
    value: V


class FailureSummary[E](TypedDict):
    """Structural view of a failure."""

    is_error: Literal[True]
    error: E


type FailableSummary[V, E] = SuccessSummary[V] | FailureSummary[E]


@dataclasses.dataclass(frozen=True, slots=True)
class Success[V]:
    """A successful outcome carrying ``value``."""

    value: V

    @property
    def is_error(self) -> Literal[False]:
        return False

    @property
    def result(self) -> SuccessSummary[V]:
        return {"is_error": False, "value": self.value}

    def map[V2](self, f: Callable[[V], V2]) -> Success[V2]:
        """Return ``Success(f(value))``."""
        return Success(f(self.value))

    def map_error(self, f: Callable[[Any], object]) -> Self:
        """No-op on success; ``f`` is never called."""
        del f
        return self

    def flat_map[V2, E2](self, f: Callable[[V], Failable[V2, E2]]) -> Failable[V2, E2]:
        """Chain a dependent computation and return its result as-is."""
        return f(self.value)

    def match[T](
        self,
        *,
        success: Callable[[V], T],
        failure: Callable[[Never], T],
    ) -> T:
        """Dispatch to ``success`` with the value."""
        del failure
        return success(self.value)


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[E]:
    """A failed outcome carrying ``error``."""

    error: E

    @property
    def is_error(self) -> Literal[True]:
        return True

    @property
    def result(self) -> FailureSummary[E]:
        return {"is_error": True, "error": self.error}

    def map(self, f: Callable[[Any], object]) -> Self:
        """No-op on failure; ``f`` is never called."""
        del f
        return self

    def map_error[E2](self, f: Callable[[E], E2]) -> Failure[E2]:
        """Return ``Failure(f(error))``."""
        return Failure(f(self.error))

    def flat_map(self, f: Callable[[Any], object]) -> Self:
        """Short-circuit: ``f`` is never called and the failure is returned."""
        del f
        return self

    def match[T](
        self,
        *,
        success: Callable[[Never], T],
        failure: Callable[[E], T],
    ) -> T:
        """Dispatch to ``failure`` with the error."""
        del success
        return failure(self.error)


type Failable[V, E] = Success[V] | Failure[E]

type FailableAwaitable[V, E] = Awaitable[Failable[V, E]]

# Typing convenience only: an async function from Req to a Failable.
type AsyncFunction[Req, Res, Err] = Callable[[Req], FailableAwaitable[Res, Err]]


def success[V](value: V) -> Success[V]:
    """Create a successful ``Failable``."""
    return Success(value)


def failure[E](error: E) -> Failure[E]:
    """Create a failed ``Failable``."""
    return Failure(error)


def is_failable(obj: object) -> bool:
    """Return True when ``obj`` is a ``Success`` or a ``Failure``."""
    return isinstance(obj, (Success, Failure))


__all__ = [
    "AsyncFunction",
    "Failable",
    "FailableAwaitable",
    "FailableSummary",
    "Failure",
    "FailureSummary",
    "Success",
    "SuccessSummary",
    "failure",
    "is_failable",
    "success",
]
