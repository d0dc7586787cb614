"""Subcommand modules for folio.

Provides register_commands() which uses deferred imports to keep
``folio --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from folio.commands.build import build
    from folio.commands.index import index
    from folio.commands.links import links

    cli.add_command(build)
    cli.add_command(index)
    cli.add_command(links)
