"""Batch helper: apply a failable function across a sequence."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from failable.result import Failable, Failure, Success


def map_m[T, U, E](
    items: Iterable[T], f: Callable[[T], Failable[U, E]]
) -> Failable[list[U], E]:
    """Apply ``f`` to each item in order, stopping at the first failure.

    Items are consumed lazily, so nothing after the failing item is pulled
    from ``items`` or passed to ``f``.

    Returns:
        The first failure unchanged, or ``Success`` of the unwrapped values
        in input order (``Success([])`` for empty input).
    """
    values: list[U] = []
    for item in items:
        outcome = f(item)
        if isinstance(outcome, Failure):
            return outcome
        values.append(outcome.value)
    return Success(values)


map_multiple = map_m

__all__ = ["map_m", "map_multiple"]
