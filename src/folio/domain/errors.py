"""Error taxonomy for index builds and renders.

Every fatal error carries the offending path and the pipeline stage
(``index``, ``links``, ``render``, ``write``, ``copy``) so the CLI can
report exactly where a build stopped. Recoverable conditions (unresolved
references, math failures, missing footnotes, duplicate names) are never
raised; they degrade in place and are logged.
"""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar


class FolioError(Exception):
    """Base class for fatal build errors."""

    code: ClassVar[str] = "FOLIO_ERROR"

    def __init__(self, message: str, *, path: Path | None = None, stage: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.stage = stage

    def with_context(self, *, path: Path | None = None, stage: str | None = None) -> FolioError:
        """Fill in path/stage if the raiser did not know them."""
        if self.path is None:
            self.path = path
        if self.stage is None:
            self.stage = stage
        return self

    def __str__(self) -> str:
        where = []
        if self.stage:
            where.append(self.stage)
        if self.path is not None:
            where.append(str(self.path))
        if not where:
            return self.message
        return f"[{': '.join(where)}] {self.message}"


class SiteIOError(FolioError):
    """A filesystem read or write failed."""

    code = "IO_ERROR"


class ParseError(FolioError):
    """A header block or markdown document could not be parsed."""

    code = "PARSE_ERROR"


class PathError(FolioError):
    """A path cannot be expressed relative to its expected root."""

    code = "PATH_ERROR"


class UnsupportedConstructError(FolioError):
    """The document uses a markup construct the renderer does not implement."""

    code = "UNSUPPORTED_CONSTRUCT"

    def __init__(self, kind: str, *, path: Path | None = None, stage: str | None = None) -> None:
        super().__init__(f"Unsupported construct: {kind}", path=path, stage=stage)
        self.kind = kind


class MathRenderError(Exception):
    """The math service could not typeset an expression. Always recoverable."""
