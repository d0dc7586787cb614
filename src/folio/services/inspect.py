"""IndexService — read-only views of the content index.

Runs the index and link stages of a build without rendering or writing
anything, so a site can be checked for duplicate names, broken links and
tag usage before publishing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from folio.domain.errors import FolioError
from folio.services.base import BaseService
from folio.services.links import parse_pages, register_site_links
from folio.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from folio.infrastructure.index import ContentIndex, Page

logger = logging.getLogger(__name__)


def _page_summary(page: Page) -> dict[str, Any]:
    return {
        "name": page.name,
        "title": page.title,
        "date": page.metadata.date,
        "link": page.link,
        "source": str(page.source),
        "draft": page.draft,
    }


class IndexService(BaseService):
    """Inspect what a build would see."""

    def summary(self) -> ServiceResult:
        """Counts, tags, folders and duplicate names of the whole site."""
        try:
            index = self._load_index()
        except FolioError as exc:
            return ServiceResult.failure("index", exc)

        pages = list(index.pages())
        drafts = sum(1 for p in pages if p.draft)
        duplicates = index.duplicates()
        warnings = [
            f"Duplicate page name {name!r}: {', '.join(str(p.source) for p in dupes)}"
            for name, dupes in duplicates.items()
        ]
        warnings.extend(f"Skipped {path}: header could not be read" for path in index.skipped)

        return ServiceResult(
            ok=True,
            op="index",
            data={
                "content_dir": str(self._site.content_root),
                "page_count": len(pages),
                "draft_count": drafts,
                "static_count": sum(1 for _ in index.statics()),
                "tags": {tag: len(tagged) for tag, tagged in index.tags()},
                "folders": {folder or "/": len(members) for folder, members in index.folders()},
                "duplicates": {name: [str(p.source) for p in dupes] for name, dupes in duplicates.items()},
            },
            warnings=warnings,
        )

    def links(self, name: str) -> ServiceResult:
        """Outgoing links and backlinks of the page called *name*."""
        try:
            index = self._linked_index()
        except FolioError as exc:
            return ServiceResult.failure("links", exc)

        page = index.page_by_name(name)
        if page is None:
            return ServiceResult(
                ok=False,
                op="links",
                error=ServiceError(
                    code="NOT_FOUND",
                    message=f"No page named {name!r}",
                    detail={"name": name},
                ),
            )

        warnings: list[str] = []
        if len(index.pages_named(name)) > 1:
            warnings.append(f"Page name {name!r} is ambiguous; showing {page.source}")

        return ServiceResult(
            ok=True,
            op="links",
            data={
                "page": _page_summary(page),
                "links": [_page_summary(p) for p in index.links_from(page)],
                "backlinks": [_page_summary(p) for p in index.backlinks(page)],
            },
            warnings=warnings,
        )

    def _linked_index(self) -> ContentIndex:
        index = self._load_index()
        trees = parse_pages(p for p in index.pages() if not p.draft)
        register_site_links(index, trees)
        return index
