"""Short-circuiting reads through nested optional data.

``Optional.of(obj)`` wraps any object graph. Each attribute or item read
moves one level down; once a level is missing or ``None`` every further read
is a no-op and ``value_of()`` yields ``None``::

    cfg = {"server": {"tls": None}}
    Optional.of(cfg).server.tls.cert.path.value_of()  # None
    Optional.of(cfg)["server"].value_of()  # {"tls": None}

Mappings are read by key and sequences by integer index. Any other key is
read as an attribute, so named tuples expose their fields. Names defined on
the wrapper itself (``of``, ``value_of``, ``get``, ``then``, ``is_present``)
shadow fields of the same name; reach those through ``opt["get"]`` or
``opt.get("get")``.

Unrelated to ``Failable``.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping, Sequence
from typing import Any

# Values that unwrap to themselves and are not descended into
_SCALARS = (str, bytes, bytearray, int, float, complex)


def _lookup(obj: object, key: Hashable) -> object:
    if obj is None or isinstance(obj, _SCALARS):
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    if isinstance(obj, Sequence) and isinstance(key, int):
        return obj[key] if -len(obj) <= key < len(obj) else None
    # Named fields on tuples and other sequences are plain attributes
    if isinstance(key, str):
        return getattr(obj, key, None)
    return None


class Optional:
    """Read-only wrapper over a possibly missing value."""

    __slots__ = ("_value",)

    # Item access must not turn the wrapper into an endless legacy iterator
    __iter__ = None

    def __init__(self, value: object) -> None:
        object.__setattr__(self, "_value", value)

    @classmethod
    def of(cls, value: object) -> Optional:
        """Wrap ``value``; ``None`` maps to the shared null wrapper."""
        return NULL if value is None else cls(value)

    @property
    def is_present(self) -> bool:
        return self._value is not None

    def value_of(self) -> Any:
        """Return the wrapped value, or ``None`` past a missing level."""
        return self._value

    def get(self, *path: Hashable) -> Optional:
        """Walk ``path`` one key, index or attribute name at a time."""
        current: Optional = self
        for key in path:
            current = Optional.of(_lookup(current._value, key))
        return current

    def then(self, f: Callable[[Any], object]) -> Optional:
        """Apply ``f`` to a present value and wrap the outcome."""
        if self._value is None:
            return self
        return Optional.of(f(self._value))

    def __getattr__(self, name: str) -> Optional:
        if name == "_value" or (name.startswith("__") and name.endswith("__")):
            raise AttributeError(name)
        return self.get(name)

    def __getitem__(self, key: Hashable) -> Optional:
        return self.get(key)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"Optional is read-only; cannot set {name!r}")

    def __reduce__(self) -> tuple[Callable[[object], Optional], tuple[object]]:
        return (Optional.of, (self._value,))

    def __repr__(self) -> str:
        if self._value is None:
            return "Optional.NULL"
        return f"Optional({self._value!r})"


NULL = Optional(None)
Optional.NULL = NULL  # type: ignore[attr-defined]

__all__ = ["NULL", "Optional"]
