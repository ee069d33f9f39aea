# === NAVMAP v1 ===
# {
#   "module": "EnvBind.settings",
#   "purpose": "Loader configuration knobs and CLI settings for EnvBind.",
#   "sections": [
#     {
#       "id": "loaderconfig",
#       "name": "LoaderConfig",
#       "anchor": "class-loaderconfig",
#       "kind": "class"
#     },
#     {
#       "id": "loglevel",
#       "name": "LogLevel",
#       "anchor": "class-loglevel",
#       "kind": "class"
#     },
#     {
#       "id": "logformat",
#       "name": "LogFormat",
#       "anchor": "class-logformat",
#       "kind": "class"
#     },
#     {
#       "id": "clisettings",
#       "name": "CliSettings",
#       "anchor": "class-clisettings",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Typed settings for the EnvBind loader and its command-line front end.

``LoaderConfig`` holds the process-wide tag and key conventions a ``Loader`` is
built with. It is a frozen Pydantic v2 model: once a loader exists its
conventions cannot drift, which keeps concurrent top-level calls independent.
``CliSettings`` layers ``ENVBIND_*`` environment variables under the CLI
options so operators can pin logging and key conventions per shell.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["CliSettings", "LoaderConfig", "LogFormat", "LogLevel", "DEFAULT_CONFIG"]


class LoaderConfig(BaseModel):
    """Tag and namespace conventions shared by every traversal of a loader."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tag_key: str = Field("env", description="Dataclass field metadata key holding the tag text")
    namespace_separator: str = Field("_", description="Separator appended after each key segment")
    ignore_sentinel: str = Field("-", description="Tag key marking a field as ignored")
    squash_sentinel: str = Field("&", description="Tag key marking a record field as squashed")
    no_prefix_sentinel: str = Field(
        "!", description="Leading character that detaches a key from inherited prefixes"
    )

    @field_validator("tag_key", "namespace_separator", "ignore_sentinel", "squash_sentinel")
    @classmethod
    def require_non_empty(cls, value: str) -> str:
        """Reject empty conventions; they would match every tag."""
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("no_prefix_sentinel")
    @classmethod
    def require_single_char(cls, value: str) -> str:
        """The no-prefix marker is stripped as a single leading character."""
        if len(value) != 1:
            raise ValueError(f"must be a single character, got {value!r}")
        return value

    @model_validator(mode="after")
    def require_distinct_sentinels(self) -> "LoaderConfig":
        """Ensure sentinels cannot be confused with each other."""
        sentinels = (self.ignore_sentinel, self.squash_sentinel, self.no_prefix_sentinel)
        if len(set(sentinels)) != len(sentinels):
            raise ValueError(f"tag sentinels must be distinct, got {sentinels!r}")
        if "," in sentinels:
            raise ValueError("tag sentinels cannot contain the flag delimiter ','")
        return self


DEFAULT_CONFIG = LoaderConfig()


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Supported log output formats."""

    CONSOLE = "console"
    JSON = "json"


class CliSettings(BaseSettings):
    """Defaults for the ``envbind`` command, overridable through ``ENVBIND_*``."""

    model_config = SettingsConfigDict(
        env_prefix="ENVBIND_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: LogLevel = Field(LogLevel.WARNING, description="Root logging level")
    log_format: LogFormat = Field(LogFormat.CONSOLE, description="Console text or JSON lines")
    wrap_width: int = Field(72, ge=20, description="Column at which descriptions are wrapped")
    tag_key: str = Field("env", description="Field metadata key read for tags")
    namespace_separator: str = Field("_", description="Separator between key segments")

    def loader_config(self) -> LoaderConfig:
        """Build the ``LoaderConfig`` described by these settings."""
        return LoaderConfig(tag_key=self.tag_key, namespace_separator=self.namespace_separator)
