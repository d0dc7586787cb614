"""BaseService — foundation for all folio services.

Every service receives a :class:`Site` at construction time. The Site
provides the resolved settings, content/output locations, the template
environment and the math renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from folio.infrastructure.index import ContentIndex

if TYPE_CHECKING:
    from folio.infrastructure.site import Site


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class BuildService(BaseService):
            def build(self) -> ServiceResult:
                index = self._load_index()
                ...
    """

    def __init__(self, site: Site) -> None:
        self._site = site

    def _load_index(self) -> ContentIndex:
        """Scan the site's content root under the configured error policy."""
        settings = self._site.settings
        return ContentIndex.build(
            settings.content,
            self._site.content_root,
            self._site.output_root,
            on_error=settings.build.on_error,
        )
