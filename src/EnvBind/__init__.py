"""
EnvBind: bind dataclass configuration records to environment variables.

Fields are addressed by upper-snake-case keys derived from their names and
joined with the prefix of every enclosing record (``APP_DATABASE_HOST``).
Dataclass field metadata refines the mapping::

    @dataclass
    class Database:
        host: str = field(default="", metadata={"env": ",required"})
        port: int = 5432
        timeout: timedelta = field(default=timedelta(seconds=5), metadata={"env": "!DB_TIMEOUT"})

    @dataclass
    class AppConfig:
        database: Optional[Database] = None
        pools: dict[str, Database] = field(default_factory=dict, metadata={"env": ",map"})

    cfg = AppConfig()
    load_env("APP_", cfg)

The same walk documents every key, see :func:`collect_docs` and
:mod:`EnvBind.template`.
"""

from __future__ import annotations

import logging as _logging

from .coercion import SelfParsable
from .docs import Describable, FieldDoc, FieldDocsDescriptor, LegacyDescribable
from .errors import (
    EnvBindError,
    InvalidTagError,
    InvalidTargetError,
    ParseError,
    RequiredFieldError,
    UnsupportedTypeError,
)
from .loader import Loader, collect_docs, default_loader, load_env, load_optional_env
from .naming import convert_field_name
from .settings import LoaderConfig
from .sources import EnvironSource, MappingSource, ValueSource
from .template import EnvTemplateOptions, render_env_template, write_env_template

__version__ = "0.3.0"

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

__all__ = [
    "Describable",
    "EnvBindError",
    "EnvTemplateOptions",
    "EnvironSource",
    "FieldDoc",
    "FieldDocsDescriptor",
    "InvalidTagError",
    "InvalidTargetError",
    "LegacyDescribable",
    "Loader",
    "LoaderConfig",
    "MappingSource",
    "ParseError",
    "RequiredFieldError",
    "SelfParsable",
    "UnsupportedTypeError",
    "ValueSource",
    "collect_docs",
    "convert_field_name",
    "default_loader",
    "load_env",
    "load_optional_env",
    "render_env_template",
    "write_env_template",
]
