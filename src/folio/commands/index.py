"""Command: summarize the content index."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from folio.commands._base import FolioCommand

if TYPE_CHECKING:
    from folio.commands._context import AppContext


@click.command(
    cls=FolioCommand,
    examples=[
        ("folio index", "Page, draft, tag and folder counts."),
        ("folio -v index", "Also log each indexing step."),
        ("folio --json index", "Machine-readable counts and duplicate names."),
    ],
)
@click.pass_obj
def index(app: AppContext) -> None:
    """Show page, tag and folder counts and duplicate names."""
    from folio.services.inspect import IndexService

    app.emit(IndexService(app.site).summary())
