"""Key/value sources consulted by the loader."""

from __future__ import annotations

import os
from typing import Mapping, MutableMapping, Optional, Protocol, Tuple, runtime_checkable

__all__ = ["EnvironSource", "MappingSource", "ValueSource"]


@runtime_checkable
class ValueSource(Protocol):
    """Total lookup from a key to ``(value, found)``."""

    def lookup(self, key: str) -> Tuple[str, bool]:  # pragma: no cover - protocol
        ...


class EnvironSource:
    """Read keys from the live process environment."""

    def __init__(self, environ: Optional[MutableMapping[str, str]] = None) -> None:
        self._environ = environ

    def lookup(self, key: str) -> Tuple[str, bool]:
        environ = os.environ if self._environ is None else self._environ
        value = environ.get(key)
        if value is None:
            return "", False
        return value, True

    def __repr__(self) -> str:
        return "EnvironSource()"


class MappingSource:
    """Read keys from a fixed mapping, typically in tests."""

    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = dict(values)

    def lookup(self, key: str) -> Tuple[str, bool]:
        if key in self._values:
            return self._values[key], True
        return "", False

    def __repr__(self) -> str:
        return f"MappingSource(keys={sorted(self._values)!r})"
