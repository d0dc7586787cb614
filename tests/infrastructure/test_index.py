"""Tests for ContentIndex — discovery, buckets, lookups and backlinks."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from folio.config.models import ContentConfig
from folio.domain.errors import ParseError, UnsupportedConstructError
from folio.infrastructure.index import ContentIndex, sort_pages
from tests.conftest import make_index, make_page, write_doc


def _build(content_root: Path, config: ContentConfig | None = None, **kwargs: object) -> ContentIndex:
    output_root = content_root.parent / "public"
    return ContentIndex.build(config or ContentConfig(), content_root, output_root, **kwargs)


class TestBuild:
    def test_documents_and_statics(self, content_root: Path) -> None:
        write_doc(content_root, "Home.md", "hi", title="Home", date="2024-01-01")
        write_doc(content_root, "notes/Deep Note.md", "x", date="2024-01-02")
        (content_root / "notes" / "diagram.PNG").write_bytes(b"\x89PNG")
        (content_root / "notes" / "readme.txt").write_text("ignored")

        index = _build(content_root)
        pages = list(index.pages())
        assert [p.name for p in pages] == ["Home", "Deep Note"]
        assert pages[0].link == "/Home.html"
        assert pages[1].link == "/notes/Deep Note.html"
        assert pages[1].folder == "notes"
        assert pages[0].folder == ""
        assert pages[1].output == content_root.parent / "public" / "notes" / "Deep Note.html"

        (asset,) = index.statics()
        assert asset.output == content_root.parent / "public" / "notes" / "diagram.PNG"

    def test_slugified_paths(self, content_root: Path) -> None:
        write_doc(content_root, "My Notes/Deep Note.md", "x", date="2024-01-02")
        index = _build(content_root, ContentConfig(slugify_paths=True))
        (page,) = index.pages()
        assert page.link == "/my-notes/deep-note.html"
        assert page.name == "Deep Note"
        assert page.folder == "My Notes"

    def test_ignored_folders(self, content_root: Path) -> None:
        write_doc(content_root, "keep.md", date="2024-01-01")
        write_doc(content_root, "Private/hidden.md", date="2024-01-01")
        index = _build(content_root, ContentConfig(ignored_folders=["Private"]))
        assert [p.name for p in index.pages()] == ["keep"]

    def test_malformed_header_aborts(self, content_root: Path) -> None:
        bad = content_root / "bad.md"
        bad.write_text("---\ntitle: [oops\n---\nbody\n")
        with pytest.raises(ParseError) as exc_info:
            _build(content_root)
        assert exc_info.value.path == bad
        assert exc_info.value.stage == "index"

    def test_malformed_header_skipped(self, content_root: Path, caplog: pytest.LogCaptureFixture) -> None:
        (content_root / "bad.md").write_text("---\ntitle: [oops\n---\nbody\n")
        write_doc(content_root, "good.md", date="2024-01-01")
        with caplog.at_level(logging.WARNING, logger="folio"):
            index = _build(content_root, on_error="skip")
        assert [p.name for p in index.pages()] == ["good"]
        assert index.skipped == (content_root / "bad.md",)
        assert "Skipping" in caplog.text

    def test_toml_header_aborts(self, content_root: Path) -> None:
        odd = content_root / "odd.md"
        odd.write_text("+++\ntitle = \"Odd\"\ndraft = true\n+++\nbody\n")
        with pytest.raises(UnsupportedConstructError) as exc_info:
            _build(content_root)
        assert exc_info.value.path == odd
        assert exc_info.value.stage == "index"

    def test_toml_header_skipped(self, content_root: Path) -> None:
        (content_root / "odd.md").write_text("+++\ntitle = \"Odd\"\n+++\nbody\n")
        write_doc(content_root, "good.md", date="2024-01-01")
        index = _build(content_root, on_error="skip")
        assert [p.name for p in index.pages()] == ["good"]
        assert index.skipped == (content_root / "odd.md",)

    def test_missing_content_root(self, tmp_path: Path) -> None:
        from folio.domain.errors import SiteIOError

        with pytest.raises(SiteIOError):
            _build(tmp_path / "missing")


class TestBuckets:
    def test_sorted_by_date_then_title_desc(self) -> None:
        a = make_page("a", title="Alpha", date="2024-01-01")
        b = make_page("b", title="Beta", date="2024-03-01")
        c = make_page("c", title="Gamma", date="2024-01-01")
        assert sort_pages([a, b, c]) == [b, c, a]

    def test_folder_and_tag_buckets(self) -> None:
        a = make_page("a", date="2024-01-01", tags=["x", "y"], folder="f")
        b = make_page("b", date="2024-02-01", tags=["x"], folder="f")
        c = make_page("c", date="2024-03-01", tags=["y"])
        index = make_index(a, b, c)

        assert dict(index.tags()) == {"x": [b, a], "y": [c, a]}
        assert dict(index.folders()) == {"": [c], "f": [b, a]}
        assert index.folder("f") == [b, a]
        assert index.folder("nope") == []

    def test_every_bucket_is_sorted(self) -> None:
        pages = [
            make_page(f"p{i}", title=f"T{i % 3}", date=f"2024-0{1 + i % 4}-01", tags=["t"], folder="f")
            for i in range(8)
        ]
        index = make_index(*pages)
        for _, bucket in [*index.tags(), *index.folders()]:
            keys = [(p.metadata.date, p.title) for p in bucket]
            assert keys == sorted(keys, reverse=True)

    def test_duplicate_tag_on_one_page_counted_once(self) -> None:
        page = make_page("a", tags=["x", "x"])
        index = make_index(page)
        assert dict(index.tags()) == {"x": [page]}

    def test_empty_index(self) -> None:
        index = make_index()
        assert len(index) == 0
        assert list(index.tags()) == []
        assert index.page_by_name("anything") is None


class TestNames:
    def test_first_encountered_wins(self, caplog: pytest.LogCaptureFixture) -> None:
        older = make_page("dup", title="First", date="2020-01-01", folder="a")
        newer = make_page("dup", title="Second", date="2024-01-01", folder="b")
        with caplog.at_level(logging.WARNING, logger="folio"):
            index = make_index(older, newer)

        assert index.page_by_name("dup") is older
        assert index.pages_named("dup") == [newer, older]
        assert list(index.duplicates()) == ["dup"]
        assert "has conflicts" in caplog.text
        assert str(older.source) in caplog.text
        assert str(newer.source) in caplog.text

    def test_unknown_name(self) -> None:
        assert make_index(make_page("a")).page_by_name("b") is None


class TestLinks:
    def test_backlinks_sorted(self) -> None:
        target = make_page("target")
        old = make_page("old", date="2020-01-01")
        new = make_page("new", date="2024-01-01")
        index = make_index(target, old, new)
        index.register_links(old, [target])
        index.register_links(new, [target])

        assert index.backlinks(target) == [new, old]
        assert index.links_from(old) == [target]
        assert index.backlinks(old) == []

    def test_self_links_ignored(self) -> None:
        page = make_page("me")
        index = make_index(page)
        index.register_links(page, [page])
        assert index.backlinks(page) == []

    def test_repeated_registration_is_idempotent(self) -> None:
        a, b = make_page("a"), make_page("b")
        index = make_index(a, b)
        index.register_links(a, [b, b])
        index.register_links(a, [b])
        assert index.backlinks(b) == [a]

    def test_unknown_page(self) -> None:
        index = make_index(make_page("a"))
        assert index.backlinks(make_page("stranger", folder="x")) == []
