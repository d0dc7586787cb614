"""Root CLI group for folio with global flags and command registration."""

from __future__ import annotations

import click

from folio import __version__
from folio.commands import register_commands
from folio.commands._base import FolioGroup
from folio.commands._context import AppContext
from folio.config.settings import FolioSettings


@click.group(
    cls=FolioGroup,
    invoke_without_command=True,
    examples=[
        ("folio build", "Build the site found from the current directory."),
        ("folio --config site build --clean", "Rebuild the site in ./site from scratch."),
        ("folio index", "Summarise pages, tags and folders."),
        ("folio links Index", "Show what links to and from the Index page."),
    ],
)
@click.version_option(version=__version__, prog_name="folio")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Config file, or the site directory holding folio.toml.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """folio — build a static site from linked Markdown notes."""
    ctx.ensure_object(dict)
    settings = FolioSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
