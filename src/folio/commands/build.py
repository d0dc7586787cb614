"""Command: build the static site."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from folio.commands._base import FolioCommand

if TYPE_CHECKING:
    from folio.commands._context import AppContext


@click.command(
    cls=FolioCommand,
    examples=[
        ("folio build", "Render content/ into public/."),
        ("folio build --clean", "Remove public/ first, dropping stale pages."),
        ("folio build --content notes --output site", "Use other directories for this run."),
        ("folio build --workers 4", "Render pages on four threads."),
        ("folio --json build", "Print counts and warnings as JSON."),
    ],
)
@click.option(
    "--content",
    "content_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Content directory (overrides [content] content_dir).",
)
@click.option(
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (overrides [content] output_dir).",
)
@click.option("--clean", is_flag=True, help="Remove the output directory first.")
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Render pages on N threads (overrides [build] workers).",
)
@click.pass_obj
def build(
    app: AppContext,
    content_dir: Path | None,
    output_dir: Path | None,
    clean: bool,
    workers: int | None,
) -> None:
    """Render every published document into the output directory."""
    from folio.infrastructure.site import Site
    from folio.services.build import BuildService

    settings = app.settings
    if workers is not None:
        settings = settings.model_copy(update={"build": settings.build.model_copy(update={"workers": workers})})

    if settings is app.settings and content_dir is None and output_dir is None:
        site = app.site
    else:
        site = Site(settings, content_root=content_dir, output_root=output_dir)

    app.emit(BuildService(site).build(clean=clean))
