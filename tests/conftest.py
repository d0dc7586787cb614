"""Shared pytest fixtures and test helpers for folio tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from folio.config.settings import FolioSettings
from folio.domain.errors import MathRenderError
from folio.domain.metadata import DocumentMetadata
from folio.infrastructure.index import ContentIndex, Page
from folio.infrastructure.site import Site


class FakeMath:
    """Math renderer that wraps expressions in a marker, or fails on demand."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, bool]] = []

    def render(self, expression: str, *, display: bool) -> str:
        self.calls.append((expression, display))
        if self.fail:
            msg = "katex: parse error"
            raise MathRenderError(msg)
        return f"<katex>{expression}</katex>"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def site_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary site directory with an empty ``content/`` folder.

    ``FOLIO_*`` variables from the developer's shell never leak in.
    """
    monkeypatch.delenv("FOLIO_CONFIG", raising=False)
    (tmp_path / "content").mkdir()
    return tmp_path


@pytest.fixture
def content_root(site_root: Path) -> Path:
    return site_root / "content"


@pytest.fixture
def _isolated_site(site_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp site root so the CLI builds an isolated site.

    Use via ``@pytest.mark.usefixtures("_isolated_site")`` on command test
    classes.
    """
    monkeypatch.chdir(site_root)


@pytest.fixture
def fake_math() -> FakeMath:
    return FakeMath()


def make_site(site_root: Path, math: FakeMath | None = None, **overrides: object) -> Site:
    """Build a Site over *site_root* with a fake math renderer."""
    settings = FolioSettings.from_cli(site_root=site_root, **overrides)
    return Site(settings, math=math or FakeMath())


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_doc(root: Path, rel: str, body: str = "", **header: object) -> Path:
    """Write a markdown document with an optional YAML header.

    List values are written as YAML sequences; everything else verbatim.
    """
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    parts: list[str] = []
    if header:
        parts.append("---")
        for key, value in header.items():
            if isinstance(value, list):
                parts.append(f"{key}:")
                parts.extend(f"  - {item}" for item in value)
            else:
                parts.append(f"{key}: {value}")
        parts.append("---")
    parts.append(body)
    path.write_text("\n".join(parts) + "\n", encoding="utf-8")
    return path


def make_page(
    name: str,
    *,
    title: str | None = None,
    date: str = "2024-01-01",
    draft: bool = False,
    tags: list[str] | None = None,
    folder: str = "",
) -> Page:
    """Build a Page in memory, without touching the filesystem."""
    rel = f"{folder}/{name}" if folder else name
    return Page(
        name=name,
        link=f"/{rel}.html",
        metadata=DocumentMetadata(
            title=title or name,
            date=date,
            draft=draft,
            tags=tags or [],
        ),
        source=Path("content") / f"{rel}.md",
        output=Path("public") / f"{rel}.html",
        folder=folder,
    )


def make_index(*pages: Page) -> ContentIndex:
    return ContentIndex.from_pages(pages)
