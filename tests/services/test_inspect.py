"""Tests for IndexService."""

from __future__ import annotations

from pathlib import Path

import pytest

from folio.services.inspect import IndexService
from tests.conftest import make_site, write_doc


@pytest.fixture
def linked_site(content_root: Path) -> Path:
    write_doc(content_root, "Hub.md", "[[Spoke A]] [[Spoke B]]", date="2024-01-01", tags=["core"])
    write_doc(content_root, "spokes/Spoke A.md", "back to [[Hub]]", date="2024-02-01", tags=["core", "leaf"])
    write_doc(content_root, "spokes/Spoke B.md", "nothing", date="2024-03-01")
    write_doc(content_root, "Draft.md", "[[Hub]]", date="2024-04-01", draft="true")
    return content_root.parent


class TestSummary:
    def test_counts(self, linked_site: Path) -> None:
        result = IndexService(make_site(linked_site)).summary()
        assert result.ok
        assert result.op == "index"
        assert result.data["page_count"] == 4
        assert result.data["draft_count"] == 1
        assert result.data["tags"] == {"core": 2, "leaf": 1}
        assert result.data["folders"] == {"/": 2, "spokes": 2}
        assert result.data["duplicates"] == {}

    def test_duplicates_reported(self, linked_site: Path) -> None:
        write_doc(linked_site / "content", "spokes/Hub.md", "", date="2024-01-01")
        result = IndexService(make_site(linked_site)).summary()
        assert list(result.data["duplicates"]) == ["Hub"]
        assert result.warnings

    def test_failure(self, tmp_path: Path) -> None:
        result = IndexService(make_site(tmp_path)).summary()
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "IO_ERROR"


class TestLinks:
    def test_links_and_backlinks(self, linked_site: Path) -> None:
        result = IndexService(make_site(linked_site)).links("Hub")
        assert result.ok
        assert result.data["page"]["name"] == "Hub"
        assert [p["name"] for p in result.data["links"]] == ["Spoke B", "Spoke A"]
        # Drafts never count as backlinks.
        assert [p["name"] for p in result.data["backlinks"]] == ["Spoke A"]

    def test_unknown_page(self, linked_site: Path) -> None:
        result = IndexService(make_site(linked_site)).links("Nope")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
