"""Link pre-pass — register resolved references before any page is rendered.

Backlinks for page *B* depend on every other page's content, so they
cannot be collected while pages render one by one. This pass walks the
text of each parsed document (code and math excluded, the same text the
renderer scans) and records an edge for every reference that resolves
to a published page. After it runs the index is only read.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from folio.domain.errors import FolioError
from folio.domain.links import extract_references
from folio.infrastructure.filesystem import read_text
from folio.infrastructure.markdown import iter_text, parse_document

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from folio.domain.document import Root
    from folio.infrastructure.index import ContentIndex, Page

logger = logging.getLogger(__name__)


def parse_pages(pages: Iterable[Page]) -> dict[Path, Root]:
    """Read and parse every page, keyed by source path.

    Raises:
        SiteIOError: If a document cannot be read.
        ParseError: If a document cannot be parsed.
    """
    trees: dict[Path, Root] = {}
    for page in pages:
        try:
            trees[page.source] = parse_document(read_text(page.source))
        except FolioError as exc:
            exc.with_context(path=page.source, stage="links")
            raise
    return trees


def resolve_references(index: ContentIndex, tree: Root) -> list[Page]:
    """Published pages that *tree* references, in first-mention order."""
    targets: dict[Path, Page] = {}
    for text in iter_text(tree):
        for ref in extract_references(text.value):
            target = index.page_by_name(ref.name)
            if target is not None and not target.draft:
                targets.setdefault(target.source, target)
    return list(targets.values())


def register_site_links(index: ContentIndex, trees: dict[Path, Root]) -> int:
    """Register the outgoing links of every parsed, published page.

    Returns the number of link edges recorded.
    """
    edges = 0
    for page in index.pages():
        tree = trees.get(page.source)
        if tree is None or page.draft:
            continue
        targets = [t for t in resolve_references(index, tree) if t.source != page.source]
        index.register_links(page, targets)
        edges += len(targets)
    logger.debug("Registered %d links across %d pages", edges, len(trees))
    return edges
