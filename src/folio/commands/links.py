"""Command: show the links and backlinks of one page."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from folio.commands._base import FolioCommand

if TYPE_CHECKING:
    from folio.commands._context import AppContext


@click.command(
    cls=FolioCommand,
    examples=[
        ('folio links "Getting Started"', "Quote names that contain spaces."),
        ("folio -q links Index", "One page per line, outgoing then backlinks."),
        ("folio --json links Index", "Links and backlinks as JSON."),
    ],
)
@click.argument("name")
@click.pass_obj
def links(app: AppContext, name: str) -> None:
    """Show the pages NAME links to and the pages linking back to it."""
    from folio.services.inspect import IndexService

    app.emit(IndexService(app.site).links(name))
