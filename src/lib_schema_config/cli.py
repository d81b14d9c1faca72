"""CLI adapter for ``lib_schema_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Expose a schema-validated configuration file via a command line interface so
operators can inspect, document, and edit settings without writing Python
code. Values travel as text and are converted with the store's ``cast`` and
``uncast`` rules, so the CLI accepts exactly what remote callers would.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling, trace ids, the schema
  import path and the config file path.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_keys` / :func:`cli_get` / :func:`cli_docs` / :func:`cli_dump` –
  read-only inspection commands.
* :func:`cli_set` / :func:`cli_reset` – mutate the config file in place.
* :func:`cli_validate` – check a config file against the schema.
* :func:`cli_generate` – write a commented file holding every default.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It invokes the composition root
(``load_config`` / ``save_config``) and never reaches into the store
internals. ``lib_cli_exit_tools`` centralises the exit code strategy so all
commands behave consistently across shells and CI.
"""

from __future__ import annotations

import importlib
import io
import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.codecs.yaml import YamlEncoder
from .application.store import ConfigStore, Strictness
from .core import load_config, open_config, save_config
from .domain.casting import uncast_value
from .domain.errors import NotFound
from .domain.schema import Section, iter_entries
from .examples import generate_default_config
from .observability import bind_trace_id

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

DEFAULT_SCHEMA: Final[str] = "lib_schema_config.examples:DEMO_SCHEMA"
DOCS_FORMAT_CHOICES: Final[tuple[str, ...]] = ("text", "json")


def _resolve_version() -> str:
    """Return the installed package version with sensible fallbacks.

    Why
        ``click.version_option`` requires a string at decoration time. Fetching
        metadata lazily avoids hard-coding the version and keeps editable installs
        working without additional wiring.
    """

    try:
        return metadata.version("lib_schema_config")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Typed, schema-validated configuration files",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_schema_config",
    message="lib_schema_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.option("--trace-id", default=None, help="Trace identifier attached to every log event")
@click.option(
    "--schema",
    "schema_path",
    default=DEFAULT_SCHEMA,
    show_default=True,
    help="Schema to validate against, as module:attribute",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="YAML configuration file (defaults only when omitted)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    traceback: bool,
    trace_id: Optional[str],
    schema_path: str,
    config_path: Optional[Path],
) -> None:
    """Root command storing global options for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color`` and binds the trace
        identifier for the rest of the invocation.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    ctx.obj["schema_path"] = schema_path
    ctx.obj["config_path"] = config_path
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    bind_trace_id(trace_id)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_schema_config")
    except metadata.PackageNotFoundError:
        click.echo("lib_schema_config (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_schema_config')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("keys", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--section", "prefix", default="", help="Only list keys below this section")
@click.pass_context
def cli_keys(ctx: click.Context, prefix: str) -> None:
    """List every materialised key, one per line."""

    store = _open_store(ctx)
    view = store.section(prefix) if prefix else store
    for key in view.keys():
        click.echo(key)


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("key")
@click.pass_context
def cli_get(ctx: click.Context, key: str) -> None:
    """Print the value of KEY as text (list elements joined by ``;;``).

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> CliRunner().invoke(cli, ["get", "daemon.port"]).output.strip()
    '6666'
    """

    store = _open_store(ctx)
    _require_key(store, key)
    click.echo(store.uncast(key))


@cli.command("set", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("key")
@click.argument("value")
@click.pass_context
def cli_set(ctx: click.Context, key: str, value: str) -> None:
    """Set KEY to VALUE and write the config file."""

    path = _require_config_path(ctx)
    store = _open_store(ctx)
    _require_key(store, key)
    store.set(key, store.cast(key, value))
    save_config(store, path)
    click.echo(f"{key} = {store.uncast(key)}")


@cli.command("reset", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("key", required=False, default="")
@click.pass_context
def cli_reset(ctx: click.Context, key: str) -> None:
    """Reset KEY (a leaf or a section; everything when omitted) to its defaults."""

    path = _require_config_path(ctx)
    store = _open_store(ctx)
    store.reset(key)
    save_config(store, path)


@cli.command("docs", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(DOCS_FORMAT_CHOICES, case_sensitive=False),
    default="text",
    show_default=True,
    help="Output format",
)
@click.pass_context
def cli_docs(ctx: click.Context, output_format: str) -> None:
    """Document every key of the schema: type, default, restart flag and docs."""

    schema = _load_schema(ctx.obj["schema_path"])
    rows = [
        {
            "key": key,
            "type": str(entry.type_tag),
            "default": uncast_value(entry.default),
            "needs_restart": entry.needs_restart,
            "docs": entry.docs,
        }
        for key, entry in iter_entries(schema)
    ]
    if output_format.lower() == "json":
        click.echo(json.dumps(rows, indent=2))
        return
    for row in rows:
        restart = " [restart]" if row["needs_restart"] else ""
        click.echo(f"{row['key']} ({row['type']}) = {row['default']!r}{restart}")
        if row["docs"]:
            click.echo(f"    {row['docs']}")


@cli.command("validate", context_settings=CLICK_CONTEXT_SETTINGS)
@click.pass_context
def cli_validate(ctx: click.Context) -> None:
    """Check that the config file exists and fits the schema."""

    path = _require_config_path(ctx)
    store = load_config(path, _load_schema(ctx.obj["schema_path"]), strictness=Strictness.BEST_EFFORT)
    click.echo(f"{path}: ok (version {store.version})")


@cli.command("dump", context_settings=CLICK_CONTEXT_SETTINGS)
@click.pass_context
def cli_dump(ctx: click.Context) -> None:
    """Print the full configuration, defaults included, as YAML."""

    store = _open_store(ctx)
    buffer = io.StringIO()
    store.save(YamlEncoder(buffer))
    click.echo(buffer.getvalue(), nl=False)


@cli.command("generate", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("destination", type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    "--force/--no-force",
    default=False,
    help="Overwrite an existing file if set",
    show_default=True,
)
@click.pass_context
def cli_generate(ctx: click.Context, destination: Path, force: bool) -> None:
    """Write a commented config file holding every default to DESTINATION."""

    written = generate_default_config(_load_schema(ctx.obj["schema_path"]), destination, force=force)
    if not written:
        raise click.ClickException(f"{destination} exists; pass --force to overwrite")
    click.echo(str(destination))


def _load_schema(import_path: str) -> Section:
    """Import the schema named by ``module:attribute``."""

    module_name, _, attribute = import_path.partition(":")
    if not module_name or not attribute:
        raise click.BadParameter("expected module:attribute", param_hint="--schema")
    try:
        schema = getattr(importlib.import_module(module_name), attribute)
    except (ImportError, AttributeError) as exc:
        raise click.BadParameter(f"cannot import {import_path}: {exc}", param_hint="--schema") from exc
    if not isinstance(schema, Section):
        raise click.BadParameter(f"{import_path} is not a schema Section", param_hint="--schema")
    return schema


def _open_store(ctx: click.Context) -> ConfigStore:
    """Open the configured file, or pure defaults when there is none yet."""

    schema = _load_schema(ctx.obj["schema_path"])
    path = ctx.obj["config_path"]
    if path is None:
        return open_config(None, schema, strictness=Strictness.BEST_EFFORT)
    try:
        return load_config(path, schema, strictness=Strictness.BEST_EFFORT)
    except NotFound:
        return open_config(None, schema, strictness=Strictness.BEST_EFFORT)


def _require_config_path(ctx: click.Context) -> Path:
    path = ctx.obj["config_path"]
    if path is None:
        raise click.UsageError("this command needs --config")
    return path


def _require_key(store: ConfigStore, key: str) -> None:
    if not store.is_valid_key(key):
        raise click.BadParameter(f"unknown key: {key}", param_hint="KEY")


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_schema_config",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color
            bind_trace_id(None)


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
