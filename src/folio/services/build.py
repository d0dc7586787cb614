"""BuildService — the full content-to-site pipeline.

Stages run strictly in order:

1. **index** — scan the content tree once (:class:`ContentIndex`).
2. **links** — parse every page and register resolved references so
   backlinks are known before anything is written.
3. **render** — render each published page into the page template.
4. **write** — folder and tag listing pages.
5. **copy** — image assets and the ``static/`` tree.

Drafts are indexed but never rendered, listed or linked to.
"""

from __future__ import annotations

import logging
import shutil
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

from markupsafe import Markup

from folio.domain.errors import FolioError, ParseError, PathError, SiteIOError, UnsupportedConstructError
from folio.domain.slug import slugify
from folio.infrastructure.filesystem import copy_file, copy_tree, relative_posix, write_output
from folio.infrastructure.index import output_path
from folio.services.base import BaseService
from folio.services.links import parse_pages, register_site_links
from folio.services.renderer import DocumentRenderer, RenderLog
from folio.services.result import ServiceResult

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from folio.domain.document import Root
    from folio.infrastructure.index import ContentIndex, Page

logger = logging.getLogger(__name__)

TAGS_FOLDER = "tags"
# Page name of the tag overview; a tag slugging to it is renamed.
TAG_INDEX = "index"
STATIC_FOLDER = "static"

# Errors a single document can raise that the "skip" policy downgrades.
_SKIPPABLE = (ParseError, UnsupportedConstructError)


@dataclass
class _BuildState:
    """Mutable tallies for one build run."""

    warnings: list[str] = field(default_factory=list)
    written: set[Path] = field(default_factory=set)
    page_count: int = 0
    listing_count: int = 0
    static_count: int = 0
    math_pages: int = 0
    skipped: int = 0


class BuildService(BaseService):
    """Turn a content tree into a static site."""

    def build(self, *, clean: bool = False) -> ServiceResult:
        """Run every build stage and report what was produced.

        Fatal errors become a failed result whose ``error.detail`` names
        the offending ``path`` and ``stage``.
        """
        started = time.perf_counter()
        state = _BuildState()
        try:
            data = self._run(state, clean=clean)
        except FolioError as exc:
            logger.error("Build failed: %s", exc)
            return ServiceResult.failure("build", exc, warnings=state.warnings)

        elapsed_ms = round((time.perf_counter() - started) * 1000)
        logger.info("Built %d pages in %d ms", state.page_count, elapsed_ms)
        return ServiceResult(
            ok=True,
            op="build",
            data=data,
            warnings=state.warnings,
            meta={"elapsed_ms": elapsed_ms},
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run(self, state: _BuildState, *, clean: bool) -> dict[str, Any]:
        settings = self._site.settings
        if clean:
            self._clean_output()

        index = self._load_index()
        for name, pages in index.duplicates().items():
            paths = ", ".join(str(p.source) for p in pages)
            state.warnings.append(f"Duplicate page name {name!r}: {paths}")
        for path in index.skipped:
            state.warnings.append(f"Skipped {path}: header could not be read")
            state.skipped += 1

        published = [p for p in index.pages() if not p.draft]
        draft_count = len(index) - len(published)
        trees = parse_pages(published)
        register_site_links(index, trees)

        self._render_pages(index, published, trees, state)
        for folder in settings.content.list_folders:
            self._write_folder_listing(index, folder, state)
        if settings.build.tag_pages:
            self._write_tag_listings(index, state)
        self._copy_statics(index, state)

        return {
            "output_dir": str(self._site.output_root),
            "page_count": state.page_count,
            "draft_count": draft_count,
            "listing_count": state.listing_count,
            "static_count": state.static_count,
            "math_pages": state.math_pages,
            "skipped_count": state.skipped,
        }

    def _clean_output(self) -> None:
        output_root = self._site.output_root
        if not output_root.exists():
            return
        content_root = self._site.content_root
        if content_root == output_root or content_root.is_relative_to(output_root):
            msg = "Refusing to clean an output directory that contains the content"
            raise PathError(msg, path=output_root, stage="write")
        logger.debug("Removing %s", output_root)
        try:
            shutil.rmtree(output_root)
        except OSError as exc:
            raise SiteIOError(f"Cannot remove output: {exc}", path=output_root, stage="write") from exc

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def _render_pages(
        self,
        index: ContentIndex,
        pages: list[Page],
        trees: dict[Path, Root],
        state: _BuildState,
    ) -> None:
        workers = self._site.settings.build.workers
        if workers > 1 and len(pages) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [pool.submit(self._render_page, index, p, trees[p.source]) for p in pages]
                for page, future in zip(pages, futures, strict=True):
                    self._collect(page, future.result, state)
        else:
            for page in pages:
                self._collect(page, lambda p=page: self._render_page(index, p, trees[p.source]), state)

    def _collect(self, page: Page, outcome: Callable[[], RenderLog], state: _BuildState) -> None:
        """Record the result of rendering *page*, applying the error policy."""
        try:
            log = outcome()
        except _SKIPPABLE as exc:
            exc.with_context(path=page.source, stage="render")
            if self._site.settings.build.on_error != "skip":
                raise
            logger.warning("Skipping %s: %s", page.source, exc.message)
            state.warnings.append(f"Skipped {page.source}: {exc.message}")
            state.skipped += 1
            return

        state.page_count += 1
        state.written.add(page.output)
        if log.has_math:
            state.math_pages += 1
        for name in dict.fromkeys(log.unresolved):
            state.warnings.append(f"{page.source}: unresolved reference [[{name}]]")
        if log.math_failures:
            state.warnings.append(f"{page.source}: {log.math_failures} math expression(s) rendered verbatim")

    def _render_page(self, index: ContentIndex, page: Page, tree: Root) -> RenderLog:
        renderer = DocumentRenderer(index, self._site.math, source=page.source)
        body, log = renderer.render_to_string(tree)
        metadata = page.metadata
        html = self._site.templates.get_template("page.html").render(
            body=Markup(body),
            has_math=log.has_math,
            title=metadata.title,
            date=metadata.date,
            draft=metadata.draft,
            authors=metadata.authors,
            published=metadata.published,
            tags=metadata.tags,
            source_link=metadata.link,
            link=page.link,
            backlinks=[{"title": b.title, "link": b.link} for b in index.backlinks(page)],
            site=self._site.settings.site,
        )
        write_output(page.output, html)
        logger.debug("Rendered %s -> %s", page.source, page.output)
        return log

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def _write_folder_listing(self, index: ContentIndex, folder: str, state: _BuildState) -> None:
        key = PurePosixPath(folder).as_posix()
        key = "" if key == "." else key
        content_root = self._site.content_root
        out = output_path(
            self._site.settings.content,
            content_root,
            self._site.output_root,
            content_root.joinpath(*PurePosixPath(key).parts, "index.html"),
        )
        title = PurePosixPath(key).name or self._site.settings.site.title
        self._write_listing(out, title, index.folder(key), state)

    def _write_tag_listings(self, index: ContentIndex, state: _BuildState) -> None:
        tags_root = self._site.output_root / TAGS_FOLDER
        entries: list[dict[str, Any]] = []
        for tag, pages in index.tags():
            slug = slugify(tag)
            visible = [p for p in pages if not p.draft]
            if not visible:
                continue
            if not slug:
                state.warnings.append(f"Tag {tag!r} has no usable slug; listing skipped")
                continue
            if slug == TAG_INDEX:
                slug = f"{slug}-tag"
            out = tags_root / f"{slug}.html"
            if self._write_listing(out, tag, visible, state):
                entries.append({"name": tag, "link": self._link(out), "count": len(visible)})

        if entries:
            self._write_listing(tags_root / f"{TAG_INDEX}.html", "Tags", [], state, tags=entries)

    def _write_listing(
        self,
        out: Path,
        title: str,
        pages: Iterable[Page],
        state: _BuildState,
        *,
        tags: list[dict[str, Any]] | None = None,
    ) -> bool:
        """Render one listing page; returns False if *out* is already taken."""
        if out in state.written:
            logger.warning("Listing %s collides with an existing page; skipped", out)
            state.warnings.append(f"Listing {out} collides with an existing page; skipped")
            return False
        html = self._site.templates.get_template("listing.html").render(
            title=title,
            url=self._link(out),
            pages=[
                {"title": p.title, "date": p.metadata.date, "link": p.link, "tags": p.metadata.tags}
                for p in pages
                if not p.draft
            ],
            tags=tags or [],
            site=self._site.settings.site,
        )
        write_output(out, html)
        state.written.add(out)
        state.listing_count += 1
        return True

    def _link(self, out: Path) -> str:
        return "/" + relative_posix(self._site.output_root, out).as_posix()

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def _copy_statics(self, index: ContentIndex, state: _BuildState) -> None:
        for asset in index.statics():
            copy_file(asset.source, asset.output)
            state.static_count += 1

        static_root = self._site.static_root
        if not static_root.is_dir():
            return
        try:
            state.static_count += copy_tree(static_root, self._site.output_root / STATIC_FOLDER)
        except FolioError as exc:
            exc.with_context(stage="copy")
            raise
