# === NAVMAP v1 ===
# {
#   "module": "EnvBind.loader",
#   "purpose": "Public entry points that load records and collect their documentation.",
#   "sections": [
#     {
#       "id": "loader",
#       "name": "Loader",
#       "anchor": "class-loader",
#       "kind": "class"
#     },
#     {
#       "id": "load-env",
#       "name": "load_env",
#       "anchor": "function-load-env",
#       "kind": "function"
#     },
#     {
#       "id": "load-optional-env",
#       "name": "load_optional_env",
#       "anchor": "function-load-optional-env",
#       "kind": "function"
#     },
#     {
#       "id": "collect-docs",
#       "name": "collect_docs",
#       "anchor": "function-collect-docs",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Public entry points that load records and collect their documentation.

A :class:`Loader` pairs a value source with a frozen :class:`LoaderConfig`.
Both are read-only, so one loader may serve any number of independent calls,
including concurrent ones against different targets. The module-level helpers
use a default loader bound to the process environment.

Example:
    >>> from dataclasses import dataclass, field
    >>> from EnvBind import Loader, MappingSource
    >>> @dataclass
    ... class Inner:
    ...     color: str = ""
    >>> @dataclass
    ... class Config:
    ...     name: str = ""
    ...     inner: Inner = field(default_factory=Inner)
    >>> cfg = Config()
    >>> Loader(MappingSource({"APP_INNER_COLOR": "RED"})).load("APP_", cfg)
    >>> cfg.inner.color
    'RED'
"""

from __future__ import annotations

from typing import Any, List, Optional, Type, TypeVar

from .docs import DocCollector, FieldDoc
from .errors import InvalidTargetError
from .logging import get_logger
from .schema import is_record_type
from .settings import DEFAULT_CONFIG, LoaderConfig
from .sources import EnvironSource, ValueSource
from .traversal import Traversal, TraversalState, allocate_record

__all__ = ["Loader", "collect_docs", "default_loader", "load_env", "load_optional_env"]

logger = get_logger(__name__)

RecordT = TypeVar("RecordT")


class Loader:
    """Bind dataclass records to a flat key/value source."""

    def __init__(
        self,
        source: Optional[ValueSource] = None,
        config: LoaderConfig = DEFAULT_CONFIG,
    ) -> None:
        self.source: ValueSource = source if source is not None else EnvironSource()
        self.config = config

    def __repr__(self) -> str:
        return f"Loader(source={self.source!r}, config={self.config!r})"

    def load(self, prefix: str, target: Any) -> None:
        """Load values for every field of ``target`` (a dataclass instance) in place.

        Loading is not transactional: fields applied before a failing field
        keep their new values.

        Raises:
            InvalidTargetError: If ``target`` is not a mutable dataclass instance.
            InvalidTagError: If a field tag is invalid for its field.
            ParseError: If a present value cannot be converted.
            UnsupportedTypeError: If a present value targets an unsupported type.
            RequiredFieldError: If required fields are missing.
        """

        if isinstance(target, type):
            raise InvalidTargetError(
                f"target must be an instance, not the type {target.__qualname__}; "
                "use load_optional() to build one"
            )
        log = logger.child(record=type(target).__qualname__, prefix=prefix)
        traversal = Traversal(self.source, self.config, log=log)
        loaded = traversal.walk(target, TraversalState(prefix=prefix))
        log.debug("Loaded record", extra={"extra_fields": {"loaded": loaded}})

    def load_optional(
        self,
        prefix: str,
        record_type: Type[RecordT],
        current: Optional[RecordT] = None,
    ) -> Optional[RecordT]:
        """Load an optional top-level record, preserving ``None`` when nothing is set.

        When ``current`` is ``None`` a default instance is built and returned
        only if at least one value was loaded into it. The record is treated
        like an optional section: required fields only fail once some other
        value of the record is present. An existing ``current`` instance is
        loaded in place and returned.
        """

        if current is not None:
            self.load(prefix, current)
            return current
        if not is_record_type(record_type):
            raise InvalidTargetError(f"{record_type!r} is not a dataclass record type")

        instance = allocate_record(record_type)
        log = logger.child(record=record_type.__qualname__, prefix=prefix)
        traversal = Traversal(self.source, self.config, log=log)
        state = TraversalState(prefix=prefix, requirement_deferred=True)
        loaded = traversal.walk(instance, state)
        log.debug("Loaded optional record", extra={"extra_fields": {"loaded": loaded}})
        return instance if loaded else None

    def collect_docs(self, prefix: str, skeleton: Any) -> List[FieldDoc]:
        """Return a :class:`FieldDoc` per documented leaf of ``skeleton``, in field order.

        ``skeleton`` may be a dataclass instance, whose current non-zero values
        become the documented defaults, or a dataclass type built from its
        defaults. The value source is not consulted and ``skeleton`` is never
        modified.
        """

        if isinstance(skeleton, type):
            skeleton = allocate_record(skeleton)
        collector = DocCollector()
        Traversal(None, self.config, sink=collector).walk(skeleton, TraversalState(prefix=prefix))
        return list(collector.entries)


default_loader = Loader()


def load_env(prefix: str, target: Any) -> None:
    """Load ``target`` from the process environment with the default loader."""

    default_loader.load(prefix, target)


def load_optional_env(
    prefix: str, record_type: Type[RecordT], current: Optional[RecordT] = None
) -> Optional[RecordT]:
    """Load an optional record from the process environment."""

    return default_loader.load_optional(prefix, record_type, current)


def collect_docs(prefix: str, skeleton: Any) -> List[FieldDoc]:
    """Collect field documentation with the default loader configuration."""

    return default_loader.collect_docs(prefix, skeleton)
