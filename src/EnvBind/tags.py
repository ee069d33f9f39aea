"""Parse per-field tag text into structured binding options.

A tag is the string stored under the loader's tag key in a dataclass field's
metadata, for example ``field(metadata={"env": "!ABSOLUTE_SIZE,required"})``.
The part before the first comma overrides the lookup key; the remainder is a
comma-separated list of flags. Unknown flags are ignored so tags written for a
newer release keep loading.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidTagError
from .naming import convert_field_name
from .settings import DEFAULT_CONFIG, LoaderConfig

__all__ = ["FieldOptions", "parse_field_tag", "parse_tag_flags"]

FLAG_REQUIRED = "required"
FLAG_SQUASH = "squash"
FLAG_SQUASH_LEGACY = "anonymous"
FLAG_MAP = "map"
FLAG_DOCS_HIDDEN = "docs_hidden"


@dataclass(frozen=True, slots=True)
class FieldOptions:
    """Options resolved from one field's tag."""

    key: str = ""
    ignored: bool = False
    squash: bool = False
    no_prefix: bool = False
    required: bool = False
    is_map: bool = False
    docs_hidden: bool = False


def parse_tag_flags(text: str) -> dict[str, bool]:
    """Return the known flags set in the comma-separated ``text``."""

    flags = {
        "required": False,
        "squash": False,
        "is_map": False,
        "docs_hidden": False,
    }
    for token in text.split(","):
        token = token.strip()
        if token == FLAG_REQUIRED:
            flags["required"] = True
        elif token in (FLAG_SQUASH, FLAG_SQUASH_LEGACY):
            flags["squash"] = True
        elif token == FLAG_MAP:
            flags["is_map"] = True
        elif token == FLAG_DOCS_HIDDEN:
            flags["docs_hidden"] = True
    return flags


def parse_field_tag(
    tag: str | None,
    field_name: str,
    config: LoaderConfig = DEFAULT_CONFIG,
) -> FieldOptions:
    """Resolve the key and flags for ``field_name`` from its ``tag``.

    Raises:
        InvalidTagError: If the tag combines ``squash`` with a no-prefix key.
    """

    key_part, _, flag_part = (tag or "").partition(",")
    flags = parse_tag_flags(flag_part)

    if key_part == config.ignore_sentinel:
        return FieldOptions(ignored=True)

    no_prefix = False
    explicit_key = key_part
    if key_part == config.squash_sentinel:
        explicit_key = ""
        flags["squash"] = True
    elif key_part.startswith(config.no_prefix_sentinel):
        explicit_key = key_part[len(config.no_prefix_sentinel):]
        no_prefix = True

    if flags["squash"] and no_prefix:
        raise InvalidTagError(
            "squash cannot be combined with a no-prefix key",
            field=field_name,
        )

    if flags["squash"]:
        key = ""
    else:
        key = explicit_key or convert_field_name(field_name)

    return FieldOptions(
        key=key,
        no_prefix=no_prefix,
        **flags,
    )
