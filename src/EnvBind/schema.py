# === NAVMAP v1 ===
# {
#   "module": "EnvBind.schema",
#   "purpose": "Reflect dataclass record types into cached field descriptor tables.",
#   "sections": [
#     {
#       "id": "shapekind",
#       "name": "ShapeKind",
#       "anchor": "class-shapekind",
#       "kind": "class"
#     },
#     {
#       "id": "typeshape",
#       "name": "TypeShape",
#       "anchor": "class-typeshape",
#       "kind": "class"
#     },
#     {
#       "id": "fielddescriptor",
#       "name": "FieldDescriptor",
#       "anchor": "class-fielddescriptor",
#       "kind": "class"
#     },
#     {
#       "id": "classify",
#       "name": "classify",
#       "anchor": "function-classify",
#       "kind": "function"
#     },
#     {
#       "id": "record-fields",
#       "name": "record_fields",
#       "anchor": "function-record-fields",
#       "kind": "function"
#     },
#     {
#       "id": "describe-type",
#       "name": "describe_type",
#       "anchor": "function-describe-type",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Reflect dataclass record types into field descriptor tables.

The traversal engine never inspects annotations directly. It asks this module
for the ordered descriptors of a record type, each carrying the field's
identifier, its resolved annotation, a classified :class:`TypeShape`, and the
raw tag text stored under the loader's tag key. Tables are computed once per
``(type, tag_key)`` pair and cached for the lifetime of the process.

Recognised shapes:

- ``Record`` and ``Optional[Record]`` where ``Record`` is a dataclass
- ``dict[str, Record]``, ``dict[str, Optional[Record]]`` and ``dict[str, Any]``
  (entries must be dataclass instances at load time)
- everything else is a scalar leaf; whether it can be coerced is decided by
  :mod:`EnvBind.coercion` when a value is actually present
"""

from __future__ import annotations

import collections.abc
import dataclasses
import functools
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from .errors import InvalidTargetError

__all__ = [
    "FieldDescriptor",
    "ShapeKind",
    "TypeShape",
    "classify",
    "describe_type",
    "is_record",
    "is_record_type",
    "record_fields",
    "unwrap_optional",
]

_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)
_UNION_ORIGINS: tuple[Any, ...] = (typing.Union, types.UnionType)


class ShapeKind(str, Enum):
    """Structural role of a field during traversal."""

    SCALAR = "scalar"
    RECORD = "record"
    MAP = "map"


@dataclass(frozen=True, slots=True)
class TypeShape:
    """Classified view of a field annotation."""

    kind: ShapeKind
    annotation: Any
    inner: Any
    # Declared record type of map values; None when values are typed Any.
    value_type: Any = None


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """One bindable field of a record type, in declaration order."""

    name: str
    annotation: Any
    shape: TypeShape
    tag: Optional[str]


def is_record_type(candidate: Any) -> bool:
    """Return ``True`` when ``candidate`` is a dataclass type."""

    return isinstance(candidate, type) and dataclasses.is_dataclass(candidate)


def is_record(candidate: Any) -> bool:
    """Return ``True`` when ``candidate`` is a dataclass instance."""

    return dataclasses.is_dataclass(candidate) and not isinstance(candidate, type)


def unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """Split ``Optional[T]`` into ``(T, True)``; other annotations return ``(a, False)``."""

    if typing.get_origin(annotation) is typing.Annotated:
        annotation = typing.get_args(annotation)[0]
    if typing.get_origin(annotation) in _UNION_ORIGINS:
        args = typing.get_args(annotation)
        non_none = [arg for arg in args if arg is not type(None)]
        if len(non_none) == 1 and len(args) == 2:
            inner = non_none[0]
            if typing.get_origin(inner) is typing.Annotated:
                inner = typing.get_args(inner)[0]
            return inner, True
    return annotation, False


def classify(annotation: Any) -> TypeShape:
    """Classify ``annotation`` as a scalar, record or record-map shape."""

    inner, _ = unwrap_optional(annotation)
    if is_record_type(inner):
        return TypeShape(ShapeKind.RECORD, annotation, inner)

    origin = typing.get_origin(inner)
    if origin in _MAPPING_ORIGINS:
        args = typing.get_args(inner)
        if len(args) == 2 and args[0] is str:
            value_type, _ = unwrap_optional(args[1])
            if is_record_type(value_type):
                return TypeShape(ShapeKind.MAP, annotation, inner, value_type)
            if value_type in (Any, object):
                return TypeShape(ShapeKind.MAP, annotation, inner)
    return TypeShape(ShapeKind.SCALAR, annotation, inner)


def _resolve_hints(record_type: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(record_type)
    except (NameError, TypeError):
        hints: dict[str, Any] = {}
        for field_def in dataclasses.fields(record_type):
            if isinstance(field_def.type, str):
                raise InvalidTargetError(
                    f"cannot resolve annotation {field_def.type!r} of "
                    f"{record_type.__qualname__}",
                    field=field_def.name,
                ) from None
            hints[field_def.name] = field_def.type
        return hints


@functools.lru_cache(maxsize=None)
def record_fields(record_type: type, tag_key: str = "env") -> Tuple[FieldDescriptor, ...]:
    """Return the ordered field descriptors of ``record_type``.

    Private fields (leading underscore) are not bindable and are left out.

    Raises:
        InvalidTargetError: If ``record_type`` is not a dataclass or one of its
            annotations cannot be resolved.
    """

    if not is_record_type(record_type):
        raise InvalidTargetError(f"{record_type!r} is not a dataclass record type")
    hints = _resolve_hints(record_type)
    descriptors = []
    for field_def in dataclasses.fields(record_type):
        if field_def.name.startswith("_"):
            continue
        annotation = hints.get(field_def.name, field_def.type)
        tag = field_def.metadata.get(tag_key) if field_def.metadata else None
        descriptors.append(
            FieldDescriptor(
                name=field_def.name,
                annotation=annotation,
                shape=classify(annotation),
                tag=tag,
            )
        )
    return tuple(descriptors)


def describe_type(annotation: Any) -> str:
    """Render ``annotation`` the way it reads in source (``Optional[int]``, ``dict[str, X]``)."""

    inner, optional = unwrap_optional(annotation)
    if optional:
        return f"Optional[{describe_type(inner)}]"
    args = typing.get_args(inner)
    origin = typing.get_origin(inner)
    if origin is not None and args:
        origin_name = getattr(origin, "__name__", None) or str(origin).replace("typing.", "")
        return f"{origin_name}[{', '.join(describe_type(arg) for arg in args)}]"
    if inner is Any:
        return "Any"
    if isinstance(inner, type):
        return inner.__name__
    return str(inner).replace("typing.", "")
