"""CLI adapter for ``config_server`` built on ``lib_cli_exit_tools``.

Purpose
-------
Run the HTTP service and expose the synthesis transforms (flatten, additive
merge, route separation) as offline commands so operators can preview what a
save or a poll will produce without touching a running server.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_serve` – runs the FastAPI application with uvicorn.
* :func:`cli_flatten` / :func:`cli_merge` / :func:`cli_separate_routes` –
  offline transforms over YAML files.
* :func:`main` – entry point used by ``console_scripts`` registration.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click
import uvicorn

from .adapters.http.app import create_app
from .application.flatten import flatten
from .application.merge import merge_add
from .application.routes import separate_route
from .codec import decode_yaml, encode_yaml
from .core import ConfigServer, create_store, load_settings
from .observability import configure_logging

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

LOG_LEVEL_CHOICES: Final[tuple[str, ...]] = ("debug", "info", "warning", "error")

_YAML_FILE = click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True)


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version("config_server")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Configuration synthesis and distribution server",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="config_server",
    message="config_server version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference for ``lib_cli_exit_tools``."""

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("config_server")
    except metadata.PackageNotFoundError:
        click.echo("config_server (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'config_server')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.11')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("serve", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", default=8888, type=int, show_default=True, help="Port to listen on")
@click.option(
    "--settings",
    "settings_path",
    type=_YAML_FILE,
    default=None,
    help="Settings file (YAML, JSON or TOML) layered under CONFIG_SERVER_* variables",
)
@click.option(
    "--data-dir",
    type=click.Path(path_type=Path, file_okay=False, dir_okay=True),
    default=None,
    help="Directory holding stored records; records stay in memory when omitted",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVEL_CHOICES, case_sensitive=False),
    default="info",
    show_default=True,
)
def cli_serve(host: str, port: int, settings_path: Optional[Path], data_dir: Optional[Path], log_level: str) -> None:
    """Run the HTTP service until interrupted."""

    configure_logging(log_level)
    server = ConfigServer.build(create_store(data_dir), load_settings(settings_path))
    uvicorn.run(create_app(server), host=host, port=port, log_level=log_level.lower())


@cli.command("flatten", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("source", type=_YAML_FILE)
@click.option("--indent", type=int, default=2, show_default=True, help="JSON indent size")
def cli_flatten(source: Path, indent: int) -> None:
    """Print the dotted property set a consumer would receive for SOURCE."""

    body = decode_yaml(source.read_text(encoding="utf-8"), source=str(source))
    click.echo(json.dumps(flatten(body), indent=indent, sort_keys=True, ensure_ascii=False))


@cli.command("merge", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("existing", type=_YAML_FILE)
@click.argument("incoming", type=_YAML_FILE)
def cli_merge(existing: Path, incoming: Path) -> None:
    """Print the YAML an ``add`` save of INCOMING over EXISTING would store."""

    stored = decode_yaml(existing.read_text(encoding="utf-8"), source=str(existing))
    submitted = decode_yaml(incoming.read_text(encoding="utf-8"), source=str(incoming))
    click.echo(encode_yaml(merge_add(stored, submitted)), nl=False)


@cli.command("separate-routes", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("source", type=_YAML_FILE)
def cli_separate_routes(source: Path) -> None:
    """Print the route-free gateway document and the shared route table, as two YAML documents."""

    gateway = decode_yaml(source.read_text(encoding="utf-8"), source=str(source))
    remainder, routes, _ = separate_route(gateway)
    click.echo(f"{remainder}---\n{routes}", nl=False)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="config_server",
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


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
