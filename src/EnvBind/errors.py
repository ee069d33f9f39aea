# === NAVMAP v1 ===
# {
#   "module": "EnvBind.errors",
#   "purpose": "Exception hierarchy raised while binding records to key/value namespaces",
#   "sections": [
#     {"id": "base", "name": "Base Exceptions", "anchor": "BAS", "kind": "api"},
#     {"id": "target", "name": "Target & Tag Errors", "anchor": "TGT", "kind": "api"},
#     {"id": "coercion", "name": "Coercion Errors", "anchor": "COE", "kind": "api"},
#     {"id": "required", "name": "Required Field Errors", "anchor": "REQ", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Exception hierarchy used across the EnvBind loader and doc collector.

Every error raised by a traversal carries the identifier of the field that
failed, the lookup key computed for it, and a list of enclosing frames that is
extended while the error propagates up the recursion. The rendered message is
namespaced with ``envbind:`` so callers can recognise it in mixed logs.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

__all__ = [
    "EnvBindError",
    "InvalidTagError",
    "InvalidTargetError",
    "ParseError",
    "RequiredFieldError",
    "UnsupportedTypeError",
]

NAMESPACE = "envbind"


class EnvBindError(RuntimeError):
    """Base exception for all binding and documentation failures."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.key = key
        self.context: List[Tuple[str, str]] = []

    def annotate(self, *, field: Optional[str] = None, key: Optional[str] = None) -> "EnvBindError":
        """Fill in ``field``/``key`` when the raiser did not know them yet."""

        if self.field is None and field is not None:
            self.field = field
        if self.key is None and key is not None:
            self.key = key
        return self

    def add_context(self, field: str, prefix: str) -> "EnvBindError":
        """Record an enclosing ``field`` (and the prefix it was loaded under)."""

        self.context.append((field, prefix))
        return self

    def describe(self) -> str:
        """Return the message with field and key details but no namespace."""

        details = []
        if self.field is not None:
            details.append(f"field {self.field!r}")
        if self.key:
            details.append(f"key {self.key!r}")
        if not details:
            return self.message
        return f"{self.message} ({', '.join(details)})"

    def __str__(self) -> str:
        frames = [
            f"{field} [{prefix}]" if prefix else field for field, prefix in reversed(self.context)
        ]
        chain = " > ".join(frames)
        if chain:
            return f"{NAMESPACE}: {chain}: {self.describe()}"
        return f"{NAMESPACE}: {self.describe()}"


class InvalidTargetError(EnvBindError):
    """Raised when the target is not a mutable record instance."""


class InvalidTagError(EnvBindError):
    """Raised when a field tag combines flags that cannot apply together."""


class ParseError(EnvBindError):
    """Raised when a raw string cannot be converted to the declared type."""

    def __init__(
        self,
        message: str,
        *,
        raw_value: Optional[str] = None,
        field: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        super().__init__(message, field=field, key=key)
        self.raw_value = raw_value

    def describe(self) -> str:
        base = super().describe()
        if self.raw_value is None:
            return base
        return f"{base}: invalid value {self.raw_value!r}"


class UnsupportedTypeError(EnvBindError):
    """Raised when a field type has no string coercion rule."""

    def __init__(
        self,
        message: str,
        *,
        data_type: Optional[str] = None,
        field: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        super().__init__(message, field=field, key=key)
        self.data_type = data_type


class RequiredFieldError(EnvBindError):
    """Raised when one or more required fields have no value."""

    def __init__(
        self,
        message: str,
        *,
        fields: Sequence[Tuple[str, str]] = (),
        field: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        super().__init__(message, field=field, key=key)
        self.fields: Tuple[Tuple[str, str], ...] = tuple(fields)

    def describe(self) -> str:
        if len(self.fields) <= 1:
            return super().describe()
        listed = ", ".join(f"{name} ({key})" for name, key in self.fields)
        return f"{self.message}: {listed}"
