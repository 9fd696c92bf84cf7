"""inilock CLI — locked INI file access for shell scripts.

Values are printed plainly on stdout so scripts can capture them; errors go
to stderr. Exit codes:

    0  success
    1  unexpected failure
    2  usage error
    3  section or key not found, invalid name or value
    4  file missing, unreadable or not INI
    5  lock could not be acquired
    6  write failed
    7  bad configuration
"""

from __future__ import annotations

import functools
import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from inilock import __version__
from inilock.bridge import JsonBridge
from inilock.config import IniConfig, load_config
from inilock.errors import IniLockError, KeyNotFoundError
from inilock.log import setup_logging
from inilock.manager import IniManager

console = Console()
err_console = Console(stderr=True)


def _handle_errors(func):
    """Print an inilock error and exit with its bucket's exit code."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except IniLockError as exc:
            err_console.print(f"[red]Error:[/] {escape(str(exc))}", highlight=False)
            raise SystemExit(exc.exit_code)

    return wrapper


def _manager(ctx: click.Context, file: str) -> IniManager:
    return IniManager(file, ctx.obj)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="YAML config file")
@click.option("--stale-after", type=float, default=None,
              help="Seconds after which a lock file is considered abandoned")
@click.option("--verbose", "-v", is_flag=True, help="Log lock activity to stderr")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None,
              help="Append detailed logs to this file")
@click.pass_context
@_handle_errors
def main(ctx: click.Context, config_path: str | None, stale_after: float | None,
         verbose: bool, log_file: str | None):
    """inilock — safe concurrent access to shared INI files.

    Every command takes the same lock as the companion shell and PHP
    tools, so they can all update one file without clobbering each other.
    """
    setup_logging(verbose=verbose, log_file=log_file)
    config = IniConfig.from_env()
    if config_path:
        config = load_config(config_path, base=config)
    ctx.obj = config.with_overrides(stale_after=stale_after)


# ── Read ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("file")
@click.argument("section")
@click.argument("key", required=False)
@click.pass_context
@_handle_errors
def read(ctx: click.Context, file: str, section: str, key: str | None):
    """Print a value, or every key=value line of SECTION when KEY is omitted."""
    ini = _manager(ctx, file)
    if key is not None:
        click.echo(ini.read(section, key))
        return
    for name, value in ini.read_section(section).items():
        click.echo(f"{name}={value}")


@main.command()
@click.argument("file")
@click.pass_context
@_handle_errors
def sections(ctx: click.Context, file: str):
    """List section names, one per line."""
    for name in _manager(ctx, file).sections():
        click.echo(name)


@main.command()
@click.argument("file")
@click.argument("section")
@click.pass_context
@_handle_errors
def keys(ctx: click.Context, file: str, section: str):
    """List the keys of SECTION, one per line."""
    for name in _manager(ctx, file).keys(section):
        click.echo(name)


@main.command()
@click.argument("file")
@click.option("--format", "fmt", default="ini", type=click.Choice(["ini", "json", "table"]))
@click.pass_context
@_handle_errors
def dump(ctx: click.Context, file: str, fmt: str):
    """Print the whole file as parsed."""
    data = _manager(ctx, file).read_all()

    if fmt == "json":
        click.echo(json.dumps(data, indent=2))
        return

    if fmt == "table":
        table = Table(title=file)
        table.add_column("Section", style="cyan")
        table.add_column("Key")
        table.add_column("Value", style="green")
        for section, entries in data.items():
            for key, value in entries.items():
                table.add_row(section, key, value)
        console.print(table)
        return

    for section, entries in data.items():
        click.echo(f"[{section}]")
        for key, value in entries.items():
            click.echo(f"{key}={value}")
        click.echo()


# ── Write / Delete ───────────────────────────────────────────────────


@main.command()
@click.argument("file")
@click.argument("section")
@click.argument("key")
@click.argument("value")
@click.pass_context
@_handle_errors
def write(ctx: click.Context, file: str, section: str, key: str, value: str):
    """Set KEY in SECTION to VALUE, creating the file or section if needed."""
    _manager(ctx, file).write(section, key, value)


@main.command()
@click.argument("file")
@click.argument("section")
@click.argument("key")
@click.pass_context
@_handle_errors
def delete(ctx: click.Context, file: str, section: str, key: str):
    """Delete KEY from SECTION; an emptied section is removed."""
    if not _manager(ctx, file).delete(section, key):
        raise KeyNotFoundError(section, key)


# ── JSON ─────────────────────────────────────────────────────────────


@main.command(name="json-read")
@click.argument("file")
@click.argument("section")
@click.argument("keys", nargs=-1)
@click.option("--convert", is_flag=True, help="Convert values to booleans and numbers")
@click.pass_context
@_handle_errors
def json_read(ctx: click.Context, file: str, section: str, keys: tuple, convert: bool):
    """Print KEYS of SECTION (all keys when none given) as a JSON object."""
    bridge = JsonBridge(ctx.obj, value_convert=convert or None)
    click.echo(bridge.read_json(file, section, list(keys)))


@main.command(name="json-write")
@click.argument("file")
@click.argument("section")
@click.argument("payload")
@click.option("--convert", is_flag=True, help="Write booleans as 1/0")
@click.pass_context
@_handle_errors
def json_write(ctx: click.Context, file: str, section: str, payload: str, convert: bool):
    """Write a flat JSON object PAYLOAD into SECTION."""
    bridge = JsonBridge(ctx.obj, value_convert=convert or None)
    bridge.write_json(file, section, payload)


# ── Diagnostics ──────────────────────────────────────────────────────


@main.command(name="lock-path")
@click.argument("file")
@click.pass_context
@_handle_errors
def lock_path(ctx: click.Context, file: str):
    """Print the lock file path other tools must use for FILE."""
    click.echo(str(_manager(ctx, file).lock_path))


if __name__ == "__main__":
    main()
