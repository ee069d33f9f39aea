# === NAVMAP v1 ===
# {
#   "module": "EnvBind.cli",
#   "purpose": "Typer command-line front end: render env templates and check loads.",
#   "sections": [
#     {
#       "id": "resolve-target",
#       "name": "resolve_target",
#       "anchor": "function-resolve-target",
#       "kind": "function"
#     },
#     {
#       "id": "template",
#       "name": "template",
#       "anchor": "function-template",
#       "kind": "function"
#     },
#     {
#       "id": "check",
#       "name": "check",
#       "anchor": "function-check",
#       "kind": "function"
#     },
#     {
#       "id": "main",
#       "name": "main",
#       "anchor": "function-main",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Command-line front end for EnvBind.

Provides two commands operating on a dataclass named as ``module:Class``:

- ``envbind template``: print (or write) a commented env template
- ``envbind check``: load the record from the current environment and report

Example:
    $ envbind template myapp.config:AppConfig --prefix MYAPP_ > .env.example
    $ envbind check myapp.config:AppConfig --prefix MYAPP_
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Optional

import typer

from .errors import EnvBindError
from .loader import Loader
from .logging import configure_logging, get_logger
from .schema import is_record_type
from .settings import CliSettings, LogFormat, LogLevel
from .sources import EnvironSource
from .template import EnvTemplateOptions, render_env_template
from .traversal import allocate_record

logger = get_logger(__name__)

app = typer.Typer(
    name="envbind",
    help="Bind dataclass configuration to environment variables and document it",
    no_args_is_help=True,
    add_completion=False,
)


def resolve_target(spec: str) -> type:
    """Import the dataclass named by ``spec`` (``package.module:Class``)."""

    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise typer.BadParameter(f"expected 'module:Class', got {spec!r}")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise typer.BadParameter(f"cannot import {module_name!r}: {exc}") from exc
    for part in attr_path.split("."):
        obj = getattr(obj, part, None)
        if obj is None:
            raise typer.BadParameter(f"{module_name!r} has no attribute {attr_path!r}")
    if not is_record_type(obj):
        raise typer.BadParameter(f"{spec!r} is not a dataclass")
    return obj


def _settings(ctx: typer.Context) -> CliSettings:
    return ctx.obj if isinstance(ctx.obj, CliSettings) else CliSettings()


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: Optional[LogLevel] = typer.Option(
        None, "--log-level", case_sensitive=False, help="Logging level (default: ENVBIND_LOG_LEVEL)"
    ),
    log_format: Optional[LogFormat] = typer.Option(
        None, "--log-format", case_sensitive=False, help="console or json (default: ENVBIND_LOG_FORMAT)"
    ),
) -> None:
    """Configure logging and shared settings for every command."""
    settings = CliSettings()
    level = log_level or settings.log_level
    fmt = log_format or settings.log_format
    configure_logging(level.value, fmt.value)
    ctx.obj = settings


@app.command()
def template(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Dataclass to document, as module:Class"),
    prefix: str = typer.Option("", "--prefix", "-p", help="Prefix prepended to every key"),
    sort: bool = typer.Option(
        True, "--sort/--original-order", help="Sort entries by key or keep declaration order"
    ),
    values: bool = typer.Option(
        False, "--values", help="Write default values after '=' instead of as comments"
    ),
    paths: bool = typer.Option(True, "--paths/--no-paths", help="Include structural paths"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to a file"),
) -> None:
    """Render a commented env template for TARGET."""
    settings = _settings(ctx)
    record_type = resolve_target(target)
    options = EnvTemplateOptions(
        field_prefix=prefix,
        original_ordering=not sort,
        include_skeleton_values=values,
        show_paths=paths,
        wrap_width=settings.wrap_width,
    )
    loader = Loader(config=settings.loader_config())
    try:
        text = render_env_template(record_type, options, loader)
    except EnvBindError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1)

    if output is None:
        typer.echo(text, nl=False)
        return
    output.write_text(text, encoding="utf-8")
    logger.info(
        "Wrote env template",
        extra={"extra_fields": {"record": record_type.__qualname__, "path": str(output)}},
    )


@app.command()
def check(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Dataclass to load, as module:Class"),
    prefix: str = typer.Option("", "--prefix", "-p", help="Prefix prepended to every key"),
) -> None:
    """Load TARGET from the current environment and report the outcome."""
    settings = _settings(ctx)
    record_type = resolve_target(target)
    loader = Loader(EnvironSource(), settings.loader_config())
    try:
        loader.load(prefix, allocate_record(record_type))
    except EnvBindError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1)
    typer.echo(f"ok: {record_type.__qualname__} loaded")


def main() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
