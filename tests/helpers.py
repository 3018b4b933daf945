"""Test helpers (small, reusable doubles and failable functions).

Keep this file tiny and purpose-built so suites share one definition of the
lookup/parse scenario used throughout the builder tests.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from failable import Failable, failure, success


@dataclass
class Probe:
    """Callable that records every argument it sees.

    Used to prove that short-circuited callbacks are never invoked.
    """

    calls: list[Any] = field(default_factory=list)

    def __call__(self, value: Any) -> Any:
        self.calls.append(value)
        return value

    @property
    def fired(self) -> bool:
        return bool(self.calls)


def find(s: str | None) -> Failable[str, str]:
    """Succeed with a non-empty string, else fail with NOT_FOUND."""
    return success(s) if s else failure("NOT_FOUND")


def parse_number(s: str) -> Failable[int, str]:
    """Parse an int; unparseable or zero input fails with NOT_A_NUMBER."""
    try:
        num = int(s)
    except ValueError:
        return failure("NOT_A_NUMBER")
    return success(num) if num else failure("NOT_A_NUMBER")


async def find_async(s: str | None) -> Failable[str, str]:
    await asyncio.sleep(0)
    return find(s)


async def parse_number_async(s: str) -> Failable[int, str]:
    await asyncio.sleep(0)
    return parse_number(s)
