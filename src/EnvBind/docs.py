"""Documentation records produced by a docs-mode traversal.

Record types can describe their fields by implementing either capability:

- :class:`Describable`: ``env_field_docs()`` returning a mapping from field
  identifier (or key) to :class:`FieldDocsDescriptor`, which can also document
  enumerated values.
- :class:`LegacyDescribable`: ``env_field_descriptions()`` returning a plain
  identifier-or-key to text mapping.

Both are looked up on the record that declares the field.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Protocol, runtime_checkable

from .coercion import format_value, is_zero_value
from .schema import describe_type

__all__ = [
    "DocCollector",
    "Describable",
    "FieldDoc",
    "FieldDocsDescriptor",
    "LegacyDescribable",
    "resolve_field_docs",
]


@dataclass(frozen=True, slots=True)
class FieldDocsDescriptor:
    """Description of one field plus optional enumerated value docs."""

    description: str = ""
    enum_docs: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FieldDoc:
    """Everything the template renderer needs to know about one key."""

    lookup_key: str
    data_type: str
    required: bool = False
    description: str = ""
    value: str = ""
    path: str = ""
    enum_docs: Mapping[str, str] = field(default_factory=dict)


@runtime_checkable
class Describable(Protocol):
    def env_field_docs(self) -> Mapping[str, FieldDocsDescriptor]:  # pragma: no cover
        ...


@runtime_checkable
class LegacyDescribable(Protocol):
    def env_field_descriptions(self) -> Mapping[str, str]:  # pragma: no cover
        ...


def _first_present(mapping: Mapping[str, Any], candidates: List[str]) -> Optional[Any]:
    for candidate in candidates:
        if candidate and candidate in mapping:
            return mapping[candidate]
    return None


def resolve_field_docs(
    record: Any, field_name: str, key: str, lookup_key: str
) -> FieldDocsDescriptor:
    """Return the description and enum docs ``record`` provides for a field.

    ``env_field_docs`` wins over ``env_field_descriptions``; within each, the
    identifier is tried before the key fragment and the full lookup key.
    """

    candidates = [field_name, key, lookup_key]
    enum_docs: Mapping[str, str] = {}
    if isinstance(record, Describable):
        entry = _first_present(record.env_field_docs() or {}, candidates)
        if entry is not None:
            enum_docs = dict(entry.enum_docs or {})
            if entry.description:
                return FieldDocsDescriptor(entry.description, enum_docs)
    if isinstance(record, LegacyDescribable):
        text = _first_present(record.env_field_descriptions() or {}, candidates)
        if text:
            return FieldDocsDescriptor(str(text), enum_docs)
    return FieldDocsDescriptor("", enum_docs)


class DocCollector:
    """Sink accumulating :class:`FieldDoc` entries in traversal order."""

    def __init__(self) -> None:
        self.entries: List[FieldDoc] = []

    def emit(
        self,
        record: Any,
        *,
        field_name: str,
        annotation: Any,
        key: str,
        lookup_key: str,
        required: bool,
        path: str,
    ) -> FieldDoc:
        docs = resolve_field_docs(record, field_name, key, lookup_key)
        current = getattr(record, field_name, None)
        entry = FieldDoc(
            lookup_key=lookup_key,
            data_type=describe_type(annotation),
            required=required,
            description=docs.description,
            value="" if is_zero_value(current) else format_value(current),
            path=path,
            enum_docs=docs.enum_docs,
        )
        self.entries.append(entry)
        return entry
