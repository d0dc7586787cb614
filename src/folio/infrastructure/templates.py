"""Shared Jinja2 template loading with per-site override support."""

from __future__ import annotations

from pathlib import Path

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    select_autoescape,
)


def build_template_environment(group: str, *, site_root: Path | None = None) -> Environment:
    """Build a Jinja2 environment with site overrides before packaged defaults.

    Overrides are loaded from ``templates/`` inside the site root. Both a
    namespaced directory (for example ``templates/site/``) and the shared
    root are searched, so a site can override ``page.html`` by dropping it
    in either place.
    """

    loaders: list[BaseLoader] = []
    if site_root is not None:
        template_root = site_root / "templates"
        loaders.append(FileSystemLoader([str(template_root / group), str(template_root)]))

    loaders.append(PackageLoader("folio", f"templates/{group}"))
    return Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(["html"]),
        keep_trailing_newline=True,
    )
