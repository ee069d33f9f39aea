# === NAVMAP v1 ===
# {
#   "module": "EnvBind.coercion",
#   "purpose": "Convert raw strings into typed field values and back.",
#   "sections": [
#     {
#       "id": "slot",
#       "name": "Slot",
#       "anchor": "class-slot",
#       "kind": "class"
#     },
#     {
#       "id": "selfparsable",
#       "name": "SelfParsable",
#       "anchor": "class-selfparsable",
#       "kind": "class"
#     },
#     {
#       "id": "parse-bool",
#       "name": "parse_bool",
#       "anchor": "function-parse-bool",
#       "kind": "function"
#     },
#     {
#       "id": "parse-int",
#       "name": "parse_int",
#       "anchor": "function-parse-int",
#       "kind": "function"
#     },
#     {
#       "id": "parse-float",
#       "name": "parse_float",
#       "anchor": "function-parse-float",
#       "kind": "function"
#     },
#     {
#       "id": "parse-duration",
#       "name": "parse_duration",
#       "anchor": "function-parse-duration",
#       "kind": "function"
#     },
#     {
#       "id": "format-duration",
#       "name": "format_duration",
#       "anchor": "function-format-duration",
#       "kind": "function"
#     },
#     {
#       "id": "parse-value",
#       "name": "parse_value",
#       "anchor": "function-parse-value",
#       "kind": "function"
#     },
#     {
#       "id": "coerce-into",
#       "name": "coerce_into",
#       "anchor": "function-coerce-into",
#       "kind": "function"
#     },
#     {
#       "id": "format-value",
#       "name": "format_value",
#       "anchor": "function-format-value",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Convert raw strings into typed field values and back.

This is the only place where a string read from a value source becomes a
typed value. Supported targets:

- ``bool`` (an empty string means ``True``), ``numpy.bool_``
- ``int`` (64-bit signed) and the sized ``numpy`` integer types
- ``float`` (64-bit) and the sized ``numpy`` floating types
- ``str``
- ``datetime.timedelta`` using Go-style duration syntax (``1h30m``, ``250ms``)
- subclasses of the kinds above (``class Color(str, Enum)``), built with the
  declared type from the parsed primitive
- any type exposing a ``parse_env_value`` classmethod (:class:`SelfParsable`)
- ``Optional[T]`` of any of the above

Numeric parsing is sized to the field's bit width and fails instead of
truncating. :func:`format_value` renders values back into the same syntax so
documentation templates can be fed straight back into a loader.
"""

from __future__ import annotations

import dataclasses
import math
import re
from datetime import timedelta
from enum import Enum
from fractions import Fraction
from typing import Any, Protocol, runtime_checkable

import numpy as np

from .errors import ParseError, UnsupportedTypeError
from .schema import describe_type, unwrap_optional

__all__ = [
    "AttributeSlot",
    "SelfParsable",
    "Slot",
    "TentativeSlot",
    "coerce_into",
    "format_duration",
    "format_value",
    "is_zero_value",
    "parse_bool",
    "parse_duration",
    "parse_float",
    "parse_int",
    "parse_value",
]

_TRUE_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_LITERALS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_LEGACY_OCTAL = re.compile(r"0[0-7_]*[0-7]")
_FLOAT_MAX = {
    16: float(np.finfo(np.float16).max),
    32: float(np.finfo(np.float32).max),
}

_NANOS_PER_MICRO = 1_000
_UNIT_NANOS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_DURATION_COMPONENT = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")
_MAX_DURATION_NANOS = (1 << 63) - 1


@runtime_checkable
class SelfParsable(Protocol):
    """Capability of a type that builds itself from one raw string.

    A record implementing it may also define ``format_env_value()`` returning
    the string documentation templates show for its current value.
    """

    @classmethod
    def parse_env_value(cls, raw: str) -> Any:  # pragma: no cover - protocol
        ...


class Slot:
    """Assignable location holding one value of ``annotation``."""

    annotation: Any

    def get(self) -> Any:  # pragma: no cover - abstract
        raise NotImplementedError

    def set(self, value: Any) -> None:  # pragma: no cover - abstract
        raise NotImplementedError


class AttributeSlot(Slot):
    """Slot backed by an attribute of a record instance."""

    __slots__ = ("owner", "name", "annotation")

    def __init__(self, owner: Any, name: str, annotation: Any) -> None:
        self.owner = owner
        self.name = name
        self.annotation = annotation

    def get(self) -> Any:
        return getattr(self.owner, self.name, None)

    def set(self, value: Any) -> None:
        setattr(self.owner, self.name, value)


class TentativeSlot(Slot):
    """Detached slot whose value is only committed by the caller on success."""

    __slots__ = ("annotation", "value")

    def __init__(self, annotation: Any, value: Any = None) -> None:
        self.annotation = annotation
        self.value = value

    def get(self) -> Any:
        return self.value

    def set(self, value: Any) -> None:
        self.value = value


def parse_bool(text: str) -> bool:
    """Parse ``text`` as a boolean; the empty string means ``True``."""

    if text == "":
        return True
    if text in _TRUE_LITERALS:
        return True
    if text in _FALSE_LITERALS:
        return False
    raise ParseError("invalid boolean", raw_value=text)


def _integer_bounds(bits: int, signed: bool) -> tuple[int, int]:
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def parse_int(text: str, bits: int = 64, signed: bool = True) -> int:
    """Parse ``text`` as an integer that must fit ``bits`` (two's complement if ``signed``).

    Base prefixes ``0x``, ``0o`` and ``0b`` are honoured, as is a bare leading
    ``0`` for octal. The empty string means zero.
    """

    if text == "":
        return 0
    if not text.isascii() or text != text.strip():
        raise ParseError("invalid integer syntax", raw_value=text)

    sign, body = "", text
    if body[:1] in ("+", "-"):
        if not signed:
            raise ParseError("unsigned integer cannot carry a sign", raw_value=text)
        sign, body = body[0], body[1:]
    if not body or body[0] in ("+", "-", "_"):
        raise ParseError("invalid integer syntax", raw_value=text)

    try:
        if _LEGACY_OCTAL.fullmatch(body):
            value = int(sign + body[1:].lstrip("_"), 8)
        else:
            value = int(sign + body, 0)
    except ValueError:
        raise ParseError("invalid integer syntax", raw_value=text) from None

    lower, upper = _integer_bounds(bits, signed)
    if not lower <= value <= upper:
        kind = "signed" if signed else "unsigned"
        raise ParseError(f"value out of range for {bits}-bit {kind} integer", raw_value=text)
    return value


def parse_float(text: str, bits: int = 64) -> float:
    """Parse ``text`` as a float that must fit a ``bits``-wide IEEE value.

    Accepts decimal and exponent notation, hexadecimal floats (``0x1p-2``),
    ``inf`` and ``nan``. A finite literal too large for the width is an error
    rather than silently becoming infinity. The empty string means zero.
    """

    if text == "":
        return 0.0
    if not text.isascii() or text != text.strip():
        raise ParseError("invalid float syntax", raw_value=text)
    try:
        value = float(text)
    except ValueError:
        try:
            value = float.fromhex(text)
        except (ValueError, OverflowError):
            raise ParseError("invalid float syntax", raw_value=text) from None

    literal = text.lower().lstrip("+-")
    if math.isinf(value) and literal not in ("inf", "infinity"):
        raise ParseError(f"value out of range for {bits}-bit float", raw_value=text)
    maximum = _FLOAT_MAX.get(bits)
    if maximum is not None and math.isfinite(value) and abs(value) > maximum:
        raise ParseError(f"value out of range for {bits}-bit float", raw_value=text)
    return value


def parse_duration(text: str) -> timedelta:
    """Parse a Go-style duration such as ``"1h15m30.5s"`` or ``"-250ms"``.

    The magnitude must fit a signed 64-bit nanosecond count. Sub-microsecond
    parts are truncated toward zero because ``timedelta`` cannot hold them.
    """

    original = text
    negative = False
    if text[:1] in ("+", "-"):
        negative = text[0] == "-"
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ParseError("invalid duration", raw_value=original)

    total = Fraction(0)
    position = 0
    while position < len(text):
        match = _DURATION_COMPONENT.match(text, position)
        whole, fraction, unit = match.groups() if match else ("", None, "")
        if not whole and not fraction:
            raise ParseError("invalid duration", raw_value=original)
        if not unit:
            raise ParseError("missing unit in duration", raw_value=original)
        if unit not in _UNIT_NANOS:
            raise ParseError(f"unknown unit {unit!r} in duration", raw_value=original)
        amount = Fraction(int(whole or "0"))
        if fraction:
            amount += Fraction(int(fraction), 10 ** len(fraction))
        total += amount * _UNIT_NANOS[unit]
        position = match.end()

    nanos = int(total)
    limit = _MAX_DURATION_NANOS + (1 if negative else 0)
    if nanos > limit:
        raise ParseError("duration out of range", raw_value=original)
    micros = nanos // _NANOS_PER_MICRO
    return timedelta(microseconds=-micros if negative else micros)


def format_duration(value: timedelta) -> str:
    """Render ``value`` with the syntax accepted by :func:`parse_duration`."""

    micros = value // timedelta(microseconds=1)
    if micros == 0:
        return "0s"
    sign = "-" if micros < 0 else ""
    micros = abs(micros)

    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        millis, remainder = divmod(micros, 1_000)
        fraction = f"{remainder:03d}".rstrip("0")
        return f"{sign}{millis}.{fraction}ms" if fraction else f"{sign}{millis}ms"

    total_seconds, remainder = divmod(micros, 1_000_000)
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    fraction = f"{remainder:06d}".rstrip("0")
    seconds_text = f"{seconds}.{fraction}" if fraction else str(seconds)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds_text}s"
    if minutes:
        return f"{sign}{minutes}m{seconds_text}s"
    return f"{sign}{seconds_text}s"


def _construct(target_type: type, value: Any, raw: str) -> Any:
    try:
        return target_type(value)
    except (ValueError, TypeError) as exc:
        raise ParseError(
            f"{value!r} is not a valid {target_type.__name__}", raw_value=raw
        ) from exc


def parse_value(raw: str, target_type: Any) -> Any:
    """Convert ``raw`` into a value of the non-optional ``target_type``.

    Raises:
        ParseError: If ``raw`` is not valid for ``target_type``.
        UnsupportedTypeError: If ``target_type`` has no coercion rule.
    """

    parser = getattr(target_type, "parse_env_value", None)
    if callable(parser):
        try:
            return parser(raw)
        except ParseError:
            raise
        except (ValueError, TypeError) as exc:
            raise ParseError(
                f"cannot parse {describe_type(target_type)}: {exc}", raw_value=raw
            ) from exc

    if not isinstance(target_type, type):
        raise UnsupportedTypeError(
            f"unsupported field value type {describe_type(target_type)!r}",
            data_type=describe_type(target_type),
        )

    if issubclass(target_type, timedelta):
        return parse_duration(raw)
    if issubclass(target_type, (bool, np.bool_)):
        flag = parse_bool(raw)
        return flag if target_type is bool else target_type(flag)
    if issubclass(target_type, np.integer):
        info = np.iinfo(target_type)
        return target_type(parse_int(raw, info.bits, info.min < 0))
    if issubclass(target_type, np.floating):
        info = np.finfo(target_type)
        return target_type(parse_float(raw, info.bits))
    if issubclass(target_type, int):
        number = parse_int(raw, 64, True)
        return number if target_type is int else _construct(target_type, number, raw)
    if issubclass(target_type, float):
        number = parse_float(raw, 64)
        return number if target_type is float else _construct(target_type, number, raw)
    if issubclass(target_type, str):
        return raw if target_type is str else _construct(target_type, raw, raw)

    raise UnsupportedTypeError(
        f"unsupported field value type {target_type.__name__!r}",
        data_type=target_type.__name__,
    )


def coerce_into(raw: str, slot: Slot) -> bool:
    """Store ``raw`` converted to ``slot.annotation`` and report whether it applied.

    ``Optional[T]`` slots convert into a tentative ``T`` slot first and are only
    assigned when that conversion applied a value.
    """

    inner, optional = unwrap_optional(slot.annotation)
    if optional:
        tentative = TentativeSlot(inner, slot.get())
        applied = coerce_into(raw, tentative)
        if applied:
            slot.set(tentative.value)
        return applied
    slot.set(parse_value(raw, inner))
    return True


def is_zero_value(value: Any) -> bool:
    """Return ``True`` for ``None``, the zero value of a scalar kind, and records
    equal to a default-built instance of their type.
    """

    if value is None:
        return True
    if isinstance(value, Enum):
        return is_zero_value(value.value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        try:
            return value == type(value)()
        except (TypeError, ValueError):
            return False
    try:
        return not bool(value)
    except (TypeError, ValueError):
        return False


def format_value(value: Any) -> str:
    """Render ``value`` in the syntax :func:`parse_value` reads back.

    Records render through their ``format_env_value`` method when they have
    one and as ``""`` otherwise.
    """

    if value is None:
        return ""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        formatter = getattr(value, "format_env_value", None)
        return str(formatter()) if callable(formatter) else ""
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, np.generic):
        return str(value.item())
    if isinstance(value, float):
        return repr(value)
    return str(value)
