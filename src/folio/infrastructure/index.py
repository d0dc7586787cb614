"""ContentIndex — one scan of the content tree, then read-only lookups.

INVARIANT: The index is built exactly once, fully, before any page is
rendered. Listing pages and named-reference resolution need global
knowledge that does not exist mid-scan.

Every bucket (by name, by tag, by folder) is sorted newest first:
``(date desc, title desc)``. Lookups by name ignore that ordering and
return the first page met during the walk, so duplicates resolve the
same way on every run.

Backlinks live in a NetworkX DiGraph keyed by source path. Edges are
registered by the link pre-pass between index build and render; after
that the index is only read.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import networkx as nx

from folio.domain.errors import FolioError, ParseError, UnsupportedConstructError
from folio.domain.metadata import DocumentMetadata, extract_metadata
from folio.domain.slug import slugify_path
from folio.infrastructure.filesystem import (
    is_document,
    is_static,
    read_text,
    relative_posix,
    translate,
    walk_content,
)
from folio.infrastructure.markdown import find_front_matter, parse_document

if TYPE_CHECKING:
    from folio.config.models import ContentConfig, OnError

logger = logging.getLogger(__name__)

# Per-document header errors the "skip" policy downgrades.
_SKIPPABLE = (ParseError, UnsupportedConstructError)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StaticAsset:
    """A file copied verbatim into the output tree."""

    source: Path
    output: Path


@dataclass(frozen=True, eq=False)
class Page:
    """A document with metadata and a place in the output tree.

    Attributes:
        name: File stem; the key used by ``[[name]]`` references.
        link: Site-relative URL with a leading slash.
        folder: Content-root-relative POSIX folder ("" for the root).
    """

    name: str
    link: str
    metadata: DocumentMetadata
    source: Path
    output: Path
    folder: str = ""

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def draft(self) -> bool:
        return self.metadata.draft


def _sort_key(page: Page) -> tuple[str, str]:
    return (page.metadata.date, page.metadata.title)


def sort_pages(pages: Iterable[Page]) -> list[Page]:
    """Return *pages* newest first, ties broken by title descending."""
    return sorted(pages, key=_sort_key, reverse=True)


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------


@dataclass
class ContentIndex:
    """All pages and static assets of a site, plus derived lookup buckets."""

    content_root: Path
    output_root: Path
    _pages: tuple[Page, ...] = ()
    _statics: tuple[StaticAsset, ...] = ()
    _by_name: dict[str, tuple[int, ...]] = field(default_factory=dict)
    _first_by_name: dict[str, int] = field(default_factory=dict)
    _by_tag: dict[str, tuple[int, ...]] = field(default_factory=dict)
    _by_folder: dict[str, tuple[int, ...]] = field(default_factory=dict)
    _by_source: dict[Path, int] = field(default_factory=dict)
    _links: nx.DiGraph = field(default_factory=nx.DiGraph)
    skipped: tuple[Path, ...] = ()

    # -- construction -------------------------------------------------------

    @classmethod
    def build(
        cls,
        config: ContentConfig,
        content_root: Path,
        output_root: Path,
        *,
        on_error: OnError = "abort",
    ) -> ContentIndex:
        """Scan *content_root* and build the index.

        Raises:
            SiteIOError: If a directory or file cannot be read.
            ParseError: If a header is malformed (unless *on_error* is ``"skip"``).
            UnsupportedConstructError: If a header is not YAML (same policy).
            PathError: If a path cannot be re-rooted under *output_root*.
        """
        pages: list[Page] = []
        statics: list[StaticAsset] = []
        skipped: list[Path] = []

        for path in walk_content(content_root, ignored=config.ignored_folders):
            if is_static(path):
                output = output_path(config, content_root, output_root, path)
                statics.append(StaticAsset(source=path, output=output))
            elif is_document(path):
                try:
                    pages.append(_read_page(config, content_root, output_root, path))
                except _SKIPPABLE as exc:
                    exc.with_context(path=path, stage="index")
                    if on_error != "skip":
                        raise
                    logger.warning("Skipping %s: %s", path, exc.message)
                    skipped.append(path)
                except FolioError as exc:
                    exc.with_context(path=path, stage="index")
                    raise

        index = cls(
            content_root=content_root,
            output_root=output_root,
            _pages=tuple(pages),
            _statics=tuple(statics),
            skipped=tuple(skipped),
        )
        index._build_buckets()
        logger.debug(
            "Indexed %d pages and %d static files under %s",
            len(pages),
            len(statics),
            content_root,
        )
        return index

    @classmethod
    def from_pages(
        cls,
        pages: Iterable[Page],
        *,
        content_root: Path = Path("content"),
        output_root: Path = Path("public"),
    ) -> ContentIndex:
        """Build an index over already-constructed pages, in the given order."""
        index = cls(content_root=content_root, output_root=output_root, _pages=tuple(pages))
        index._build_buckets()
        return index

    def _build_buckets(self) -> None:
        by_name: dict[str, list[int]] = {}
        by_tag: dict[str, list[int]] = {}
        by_folder: dict[str, list[int]] = {}

        for i, page in enumerate(self._pages):
            by_name.setdefault(page.name, []).append(i)
            for tag in dict.fromkeys(page.metadata.tags):
                by_tag.setdefault(tag, []).append(i)
            by_folder.setdefault(page.folder, []).append(i)
            self._by_source[page.source] = i
            self._links.add_node(page.source)

        for name, indices in by_name.items():
            if len(indices) > 1:
                paths = "\n\t".join(str(self._pages[i].source) for i in indices)
                logger.warning("Page name %r has conflicts:\n\t%s", name, paths)

        self._first_by_name = {name: indices[0] for name, indices in by_name.items()}
        self._by_name = {k: self._sorted(v) for k, v in by_name.items()}
        self._by_tag = {k: self._sorted(v) for k, v in by_tag.items()}
        self._by_folder = {k: self._sorted(v) for k, v in by_folder.items()}

    def _sorted(self, indices: list[int]) -> tuple[int, ...]:
        return tuple(sorted(indices, key=lambda i: _sort_key(self._pages[i]), reverse=True))

    # -- reads ----------------------------------------------------------------

    def pages(self) -> Iterator[Page]:
        """Iterate all pages in discovery order."""
        return iter(self._pages)

    def statics(self) -> Iterator[StaticAsset]:
        return iter(self._statics)

    def page_by_name(self, name: str) -> Page | None:
        """Return the first page discovered with *name*, or None."""
        i = self._first_by_name.get(name)
        return self._pages[i] if i is not None else None

    def pages_named(self, name: str) -> list[Page]:
        """Every page sharing *name*, in bucket order."""
        return [self._pages[i] for i in self._by_name.get(name, ())]

    def duplicates(self) -> dict[str, list[Page]]:
        """Names claimed by more than one page."""
        return {
            name: [self._pages[i] for i in indices]
            for name, indices in sorted(self._by_name.items())
            if len(indices) > 1
        }

    def folders(self) -> Iterator[tuple[str, list[Page]]]:
        """Iterate ``(folder, pages)`` pairs, folders in name order."""
        for folder in sorted(self._by_folder):
            yield folder, [self._pages[i] for i in self._by_folder[folder]]

    def folder(self, folder: str) -> list[Page]:
        return [self._pages[i] for i in self._by_folder.get(folder, ())]

    def tags(self) -> Iterator[tuple[str, list[Page]]]:
        """Iterate ``(tag, pages)`` pairs, tags in name order."""
        for tag in sorted(self._by_tag):
            yield tag, [self._pages[i] for i in self._by_tag[tag]]

    def __len__(self) -> int:
        return len(self._pages)

    # -- links ----------------------------------------------------------------

    def register_links(self, page: Page, targets: Iterable[Page]) -> None:
        """Record that *page* contains resolved references to *targets*.

        Self-references are ignored.
        """
        for target in targets:
            if target.source != page.source:
                self._links.add_edge(page.source, target.source)

    def backlinks(self, page: Page) -> list[Page]:
        """Pages that link to *page*, newest first."""
        if page.source not in self._links:
            return []
        return self._resolve_sources(self._links.predecessors(page.source))

    def links_from(self, page: Page) -> list[Page]:
        """Pages that *page* links to, newest first."""
        if page.source not in self._links:
            return []
        return self._resolve_sources(self._links.successors(page.source))

    def _resolve_sources(self, sources: Iterable[Path]) -> list[Page]:
        return sort_pages(self._pages[self._by_source[s]] for s in sources if s in self._by_source)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def output_path(
    config: ContentConfig,
    content_root: Path,
    output_root: Path,
    path: Path,
    *,
    suffix: str | None = None,
) -> Path:
    """Mirror *path* under *output_root*, slugifying segments when configured."""
    out = translate(content_root, output_root, path, suffix=suffix)
    if config.slugify_paths:
        rel = slugify_path(relative_posix(output_root, out))
        out = output_root.joinpath(*rel.parts)
    return out


def _read_page(config: ContentConfig, content_root: Path, output_root: Path, path: Path) -> Page:
    """Read one document's header and build its :class:`Page`."""
    text = read_text(path)
    header = find_front_matter(parse_document(text))
    metadata = extract_metadata(path, header)

    output = output_path(config, content_root, output_root, path, suffix=".html")
    link = "/" + relative_posix(output_root, output).as_posix()
    folder = relative_posix(content_root, path.parent).as_posix()
    return Page(
        name=path.stem,
        link=link,
        metadata=metadata,
        source=path,
        output=output,
        folder="" if folder == "." else folder,
    )
