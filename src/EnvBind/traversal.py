# === NAVMAP v1 ===
# {
#   "module": "EnvBind.traversal",
#   "purpose": "Recursive walk over dataclass records shared by loading and documentation.",
#   "sections": [
#     {
#       "id": "traversalstate",
#       "name": "TraversalState",
#       "anchor": "class-traversalstate",
#       "kind": "class"
#     },
#     {
#       "id": "traversal",
#       "name": "Traversal",
#       "anchor": "class-traversal",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Recursive walk over dataclass records shared by loading and documentation.

A :class:`Traversal` visits every field of a record in declaration order,
computes its lookup key from the inherited prefix and the field's tag, and
dispatches on the field's shape:

- scalar leaves are looked up in the value source and coerced in place
- nested records recurse with a longer prefix (or the same prefix when
  squashed, or a root-level prefix when the key opts out of prefixing)
- ``map``-tagged ``dict[str, Record]`` fields recurse once per entry, with the
  upper-cased entry key appended to the prefix

With a :class:`~EnvBind.docs.DocCollector` attached the same walk runs in
documentation mode: leaves are recorded instead of loaded, nothing is mutated,
and missing required values never fail. A field tagged ``docs_hidden`` is
left out of the documentation together with everything below it.

Required fields and deferral
----------------------------
A required leaf that is missing does not always fail on the spot. Each level
of recursion carries a :class:`TraversalState`; at the root, or anywhere below
a field that is itself required, a missing required leaf fails immediately.
Inside an optional sub-record the failure is deferred until the end of that
record: if nothing at all was loaded for the record it is simply left unset,
but if anything was loaded every deferred required leaf is reported together.
This lets an optional section containing required settings be omitted
entirely while still rejecting a half-configured one.

Record schemas must be acyclic; recursion depth equals schema nesting depth.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

from .coercion import AttributeSlot, coerce_into
from .docs import DocCollector
from .errors import EnvBindError, InvalidTagError, InvalidTargetError, RequiredFieldError
from .logging import StructuredLogger, get_logger
from .schema import FieldDescriptor, ShapeKind, is_record, is_record_type, record_fields
from .settings import DEFAULT_CONFIG, LoaderConfig
from .sources import ValueSource
from .tags import FieldOptions, parse_field_tag

__all__ = ["Traversal", "TraversalState", "allocate_record"]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TraversalState:
    """Context inherited by one level of recursion.

    ``parent_required`` is set once any ancestor field was tagged required;
    ``requirement_deferred`` is set once the walk is below the root record.
    """

    prefix: str = ""
    parent_required: bool = False
    requirement_deferred: bool = False
    path: str = ""

    def descend(self, prefix: str, *, required: bool, path: str) -> "TraversalState":
        return TraversalState(
            prefix=prefix,
            parent_required=self.parent_required or required,
            requirement_deferred=True,
            path=path,
        )

    def fails_immediately(self) -> bool:
        """Whether a missing required leaf at this level is fatal right away."""
        return self.parent_required or not self.requirement_deferred

    def child_path(self, name: str) -> str:
        return f"{self.path}.{name}" if self.path else name


def allocate_record(record_type: type, field_name: Optional[str] = None) -> Any:
    """Instantiate ``record_type`` with its defaults.

    Raises:
        InvalidTargetError: If the type cannot be built without arguments.
    """

    if not is_record_type(record_type):
        raise InvalidTargetError(f"{record_type!r} is not a dataclass record type", field=field_name)
    try:
        return record_type()
    except (TypeError, ValueError) as exc:
        raise InvalidTargetError(
            f"cannot construct {record_type.__qualname__} from defaults: {exc}",
            field=field_name,
        ) from exc


class Traversal:
    """One top-level walk against a value source, in load or docs mode."""

    def __init__(
        self,
        source: Optional[ValueSource],
        config: LoaderConfig = DEFAULT_CONFIG,
        sink: Optional[DocCollector] = None,
        log: Optional[StructuredLogger] = None,
    ) -> None:
        if sink is None and source is None:
            raise ValueError("a value source is required outside documentation mode")
        self.source = source
        self.config = config
        self.sink = sink
        self.log = log if log is not None else logger

    @property
    def documenting(self) -> bool:
        return self.sink is not None

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def walk(self, target: Any, state: TraversalState) -> bool:
        """Visit every field of ``target``; return whether anything was loaded."""

        self._check_target(target)
        loaded_any = False
        deferred: List[Tuple[str, str]] = []

        for descriptor in record_fields(type(target), self.config.tag_key):
            options = parse_field_tag(descriptor.tag, descriptor.name, self.config)
            if options.ignored:
                continue

            kind = descriptor.shape.kind
            is_map = kind is ShapeKind.MAP and options.is_map
            if options.squash and kind is not ShapeKind.RECORD and not is_map:
                raise InvalidTagError(
                    "squash can only be used on record or map fields",
                    field=descriptor.name,
                )

            if kind is ShapeKind.RECORD:
                loaded = self._visit_record(target, descriptor, options, state)
            elif is_map:
                loaded = self._visit_map(target, descriptor, options, state)
            else:
                loaded = self._visit_leaf(target, descriptor, options, state, deferred)
            loaded_any = loaded_any or loaded

        if loaded_any and deferred and not self.documenting:
            first_name, first_key = deferred[0]
            raise RequiredFieldError(
                "field is required",
                fields=deferred,
                field=first_name,
                key=first_key,
            )
        return loaded_any

    # ------------------------------------------------------------------
    # Key computation
    # ------------------------------------------------------------------

    def _lookup_key(self, options: FieldOptions, state: TraversalState) -> str:
        if options.no_prefix:
            return options.key
        return state.prefix + options.key

    def _child_prefix(self, options: FieldOptions, state: TraversalState) -> str:
        separator = self.config.namespace_separator
        if options.squash:
            return state.prefix
        if options.no_prefix:
            return options.key + separator
        return state.prefix + options.key + separator

    # ------------------------------------------------------------------
    # Field visitors
    # ------------------------------------------------------------------

    def _visit_record(
        self,
        target: Any,
        descriptor: FieldDescriptor,
        options: FieldOptions,
        state: TraversalState,
    ) -> bool:
        name = descriptor.name
        record_type = descriptor.shape.inner
        lookup_key = self._lookup_key(options, state)
        slot = AttributeSlot(target, name, descriptor.annotation)
        self_parsing = callable(getattr(record_type, "parse_env_value", None))

        if self.documenting and options.docs_hidden:
            return False
        if not options.squash:
            if self.documenting and self_parsing:
                self._emit(target, descriptor, options, lookup_key, state)
                return False
            if not self.documenting:
                raw, found = self.source.lookup(lookup_key)
                if found:
                    # The whole record is given as one value; no recursion.
                    return self._coerce(raw, slot, name, lookup_key)

        child_state = state.descend(
            self._child_prefix(options, state),
            required=options.required,
            path=state.child_path(name),
        )
        current = slot.get()
        if current is None:
            instance = allocate_record(record_type, name)
            loaded = self._descend(instance, child_state, name)
            if loaded and not self.documenting:
                slot.set(instance)
                self.log.debug(
                    "Allocated nested record",
                    extra={"extra_fields": {"field": name, "prefix": child_state.prefix}},
                )
        else:
            loaded = self._descend(current, child_state, name)

        if options.required and not loaded and not self.documenting:
            raise RequiredFieldError("field is required", field=name, key=child_state.prefix)
        return loaded

    def _visit_map(
        self,
        target: Any,
        descriptor: FieldDescriptor,
        options: FieldOptions,
        state: TraversalState,
    ) -> bool:
        name = descriptor.name
        if self.documenting and options.docs_hidden:
            return False
        entries = getattr(target, name, None)
        if entries is None:
            return False
        if not isinstance(entries, Mapping):
            raise InvalidTargetError(
                f"map field must hold a mapping, got {type(entries).__name__}", field=name
            )

        value_type = descriptor.shape.value_type
        separator = self.config.namespace_separator
        base_prefix = self._child_prefix(options, state)
        loaded_any = False
        for entry_key, entry in entries.items():
            entry_name = f"{name}[{entry_key}]"
            if not is_record(entry):
                raise InvalidTargetError(
                    f"map entry must be a record instance, got {type(entry).__name__}",
                    field=entry_name,
                )
            if value_type is not None and not isinstance(entry, value_type):
                raise InvalidTargetError(
                    f"map entry must be an instance of {value_type.__qualname__}, "
                    f"got {type(entry).__qualname__}",
                    field=entry_name,
                )
            entry_state = state.descend(
                base_prefix + str(entry_key).upper() + separator,
                required=options.required,
                path=f"{state.child_path(name)}[{entry_key}]",
            )
            loaded = self._descend(entry, entry_state, entry_name)
            if options.required and not loaded and not self.documenting:
                raise RequiredFieldError(
                    "field is required", field=entry_name, key=entry_state.prefix
                )
            loaded_any = loaded_any or loaded
        return loaded_any

    def _visit_leaf(
        self,
        target: Any,
        descriptor: FieldDescriptor,
        options: FieldOptions,
        state: TraversalState,
        deferred: List[Tuple[str, str]],
    ) -> bool:
        name = descriptor.name
        lookup_key = self._lookup_key(options, state)

        if self.documenting:
            if not options.docs_hidden:
                self._emit(target, descriptor, options, lookup_key, state)
            return False

        raw, found = self.source.lookup(lookup_key)
        if found:
            slot = AttributeSlot(target, name, descriptor.annotation)
            return self._coerce(raw, slot, name, lookup_key)

        if options.required:
            if state.fails_immediately():
                raise RequiredFieldError("field is required", field=name, key=lookup_key)
            deferred.append((name, lookup_key))
        return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_target(self, target: Any) -> None:
        if not is_record(target):
            raise InvalidTargetError(
                f"target must be a dataclass instance, got {type(target).__name__}"
            )
        params = getattr(type(target), "__dataclass_params__", None)
        if not self.documenting and params is not None and params.frozen:
            raise InvalidTargetError(
                f"{type(target).__qualname__} is frozen and cannot be loaded into"
            )

    def _descend(self, instance: Any, state: TraversalState, field_name: str) -> bool:
        try:
            return self.walk(instance, state)
        except EnvBindError as exc:
            exc.add_context(field_name, state.prefix)
            raise

    def _coerce(self, raw: str, slot: AttributeSlot, name: str, lookup_key: str) -> bool:
        try:
            applied = coerce_into(raw, slot)
        except EnvBindError as exc:
            exc.annotate(field=name, key=lookup_key)
            raise
        self.log.debug(
            "Loaded field",
            extra={"extra_fields": {"field": name, "key": lookup_key, "applied": applied}},
        )
        return applied

    def _emit(
        self,
        target: Any,
        descriptor: FieldDescriptor,
        options: FieldOptions,
        lookup_key: str,
        state: TraversalState,
    ) -> None:
        self.sink.emit(
            target,
            field_name=descriptor.name,
            annotation=descriptor.annotation,
            key=options.key,
            lookup_key=lookup_key,
            required=options.required,
            path=state.child_path(descriptor.name),
        )
