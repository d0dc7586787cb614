"""Site — the single dependency injected into every service.

Bundles the resolved settings with the collaborators a build needs: the
content/output locations, the Jinja2 environment and the math renderer.
Collaborators are created lazily so ``folio index`` never spawns KaTeX
and ``--help`` never touches the filesystem.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from folio.infrastructure.math import MathRenderer, build_math_renderer
from folio.infrastructure.templates import build_template_environment

if TYPE_CHECKING:
    from jinja2 import Environment

    from folio.config.settings import FolioSettings


class Site:
    """A configured site: where content lives, where output goes, how to render."""

    def __init__(
        self,
        settings: FolioSettings,
        *,
        content_root: Path | None = None,
        output_root: Path | None = None,
        math: MathRenderer | None = None,
    ) -> None:
        self.settings = settings
        self.content_root = (content_root or settings.content_root).resolve()
        self.output_root = (output_root or settings.output_root).resolve()
        self.static_root = settings.static_root.resolve()
        self._math = math
        self._templates: Environment | None = None

    @property
    def math(self) -> MathRenderer:
        """The math renderer (created lazily on first access)."""
        if self._math is None:
            render = self.settings.render
            self._math = build_math_renderer(
                enabled=render.math,
                command=render.math_command,
                timeout=render.math_timeout,
            )
        return self._math

    @property
    def templates(self) -> Environment:
        """The page template environment, with site overrides first."""
        if self._templates is None:
            self._templates = build_template_environment("site", site_root=self.settings.site_root)
        return self._templates
