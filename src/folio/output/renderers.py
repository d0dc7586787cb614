"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from folio.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from folio.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    if result.op == "build":
        return str(result.data.get("output_dir", ""))
    if result.op == "links":
        pages = [*result.data.get("links", []), *result.data.get("backlinks", [])]
        return "\n".join(dict.fromkeys(p["name"] for p in pages))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    console.print(Text.assemble(("OK", "folio.ok"), (f"  {result.op}", "folio.op")))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="folio.key")
    if key in ("path", "source") or key.endswith("_dir"):
        v = Text(str(value), style="folio.path")
    elif key == "link":
        v = Text(str(value), style="folio.link")
    elif key == "title":
        v = Text(str(value), style="folio.title")
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(Text(f"    {k}: {v}"))


def _page_table(pages: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Name", no_wrap=True)
    table.add_column("Title", style="folio.title")
    table.add_column("Date", style="dim")
    table.add_column("Link", style="folio.link")
    for page in pages:
        title = Text(str(page.get("title", "")))
        if page.get("draft"):
            title.append(" (draft)", style="folio.draft")
        table.add_row(str(page.get("name", "")), title, str(page.get("date", "")), str(page.get("link", "")))
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "folio.error"), (f"  {result.op}", "folio.op"), f" — {msg}"))

    # Path and stage are always shown for build failures: they say where to look.
    if err and err.detail:
        for k, v in err.detail.items():
            if verbose or k in ("path", "stage"):
                console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_build(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in (
        "output_dir",
        "page_count",
        "draft_count",
        "listing_count",
        "static_count",
        "math_pages",
        "skipped_count",
    ):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


def _render_index(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("content_dir", "page_count", "draft_count", "static_count"):
        if key in result.data:
            _field(console, key, result.data[key])

    tags: dict[str, int] = result.data.get("tags", {})
    if tags:
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("Tag")
        table.add_column("Pages", justify="right")
        for tag, count in tags.items():
            table.add_row(tag, str(count))
        console.print(table)

    if verbose:
        folders: dict[str, int] = result.data.get("folders", {})
        for folder, count in folders.items():
            _field(console, f"folder {folder}", count)

    for name, paths in result.data.get("duplicates", {}).items():
        console.print(Text(f"  duplicate {name!r}:", style="folio.warning"))
        for path in paths:
            console.print(Text(f"    {path}", style="folio.path"))


def _render_links(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    page = result.data.get("page", {})
    for key in ("title", "link", "source"):
        if key in page:
            _field(console, key, page[key])

    for section in ("links", "backlinks"):
        pages = result.data.get(section, [])
        console.print(Text(f"  {section}: {len(pages)}", style="folio.key"))
        if pages:
            console.print(_page_table(pages))


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "build": _render_build,
    "index": _render_index,
    "links": _render_links,
}
