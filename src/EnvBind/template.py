"""Render collected field docs as a commented ``KEY=value`` env template."""

from __future__ import annotations

import io
import textwrap
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, TextIO

from .docs import FieldDoc
from .loader import Loader, default_loader

__all__ = ["EnvTemplateOptions", "format_entries", "render_env_template", "write_env_template"]


@dataclass(frozen=True)
class EnvTemplateOptions:
    """Rendering switches for :func:`write_env_template`."""

    field_prefix: str = ""
    # Sort by key unless the declaration order is preferred.
    original_ordering: bool = False
    # Inline the skeleton's current values instead of listing them as defaults.
    include_skeleton_values: bool = False
    show_paths: bool = True
    include_enum_docs: bool = True
    wrap_width: int = 72


def _entry_lines(entry: FieldDoc, options: EnvTemplateOptions) -> List[str]:
    lines = [""]
    if entry.description:
        for line in textwrap.wrap(entry.description, width=options.wrap_width) or [""]:
            lines.append(f"# {line}")
        lines.append("#")
    if entry.required:
        lines.append("# required")
    lines.append(f"# type: {entry.data_type}")
    if not options.include_skeleton_values and entry.value:
        lines.append(f"#  def: {entry.value}")
    if options.include_enum_docs and entry.enum_docs:
        lines.append("#  values:")
        for name, text in entry.enum_docs.items():
            lines.append(f"#    {name}: {text}" if text else f"#    {name}")
    if options.show_paths and entry.path:
        lines.append(f"# path: {entry.path}")
    value = entry.value if options.include_skeleton_values else ""
    lines.append(f"{entry.lookup_key}={value}")
    return lines


def format_entries(entries: Iterable[FieldDoc], options: EnvTemplateOptions) -> List[str]:
    """Return template lines for ``entries`` honouring the ordering option."""

    ordered = list(entries)
    if not options.original_ordering:
        ordered.sort(key=lambda entry: entry.lookup_key)
    lines: List[str] = []
    for entry in ordered:
        lines.extend(_entry_lines(entry, options))
    return lines


def write_env_template(
    writer: TextIO,
    skeleton: Any,
    options: EnvTemplateOptions = EnvTemplateOptions(),
    loader: Optional[Loader] = None,
) -> None:
    """Write the env template documenting every field of ``skeleton``.

    Raises:
        EnvBindError: Propagated from documentation collection.
    """

    entries = (loader or default_loader).collect_docs(options.field_prefix, skeleton)
    for line in format_entries(entries, options):
        writer.write(line + "\n")


def render_env_template(
    skeleton: Any,
    options: EnvTemplateOptions = EnvTemplateOptions(),
    loader: Optional[Loader] = None,
) -> str:
    """Return the env template for ``skeleton`` as a string."""

    buffer = io.StringIO()
    write_env_template(buffer, skeleton, options, loader)
    return buffer.getvalue()
