"""Document metadata — header parsing with path/mtime fallbacks.

The header is the YAML block at the top of a document. Every scalar is
read as a plain string (ruamel.yaml's base loader), so ``draft: True``
and ``date: 2024-01-01`` reach the rules below as text, exactly as they
were written.

Fallback rules, evaluated per field:

- ``title``: header value, else the file stem.
- ``date``: first of ``modified``, ``created``, ``date`` that starts with
  ``YYYY-MM-DD``; else the file's mtime as a UTC date.
- ``published``: same prefix rule as ``date``, without a fallback.
- ``draft``: true only when the value equals ``"true"`` case-insensitively.
- ``authors`` / ``tags``: a string or a list of strings, normalized to a list.
- ``link``: verbatim.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from folio.domain.errors import ParseError, SiteIOError

_DATE_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})")

# Order matters: the first parseable field wins.
_DATE_FIELDS: tuple[str, ...] = ("modified", "created", "date")


class DocumentMetadata(BaseModel):
    """Normalized metadata for one document. ``title`` and ``date`` are always set."""

    model_config = {"frozen": True}

    title: str
    draft: bool = False
    date: str
    authors: list[str] = Field(default_factory=list)
    published: str | None = None
    link: str | None = None
    tags: list[str] = Field(default_factory=list)


class _RawHeader(BaseModel):
    """The header as written. Unknown keys are ignored."""

    model_config = {"frozen": True, "extra": "ignore"}

    title: str | None = None
    date: str | None = None
    modified: str | None = None
    created: str | None = None
    published: str | None = None
    draft: str | None = None
    link: str | None = None
    authors: str | list[str] | None = None
    tags: str | list[str] | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _empty_is_absent(cls, value: object) -> object:
        # The base loader turns `key:` with no value into "".
        if value == "":
            return None
        return value


def _new_yaml() -> YAML:
    """Create a YAML parser that keeps every scalar as a string."""
    return YAML(typ="base", pure=True)


def date_prefix(value: str | None) -> str | None:
    """Return the leading ``YYYY-MM-DD`` of *value*, or None.

    Examples:
        >>> date_prefix("2024-03-01-extra-text")
        '2024-03-01'
        >>> date_prefix("March 1st") is None
        True
    """
    if not value:
        return None
    match = _DATE_PREFIX.match(value)
    return match.group(1) if match else None


def mtime_date(path: Path) -> str:
    """Return the last-modified date of *path* as ``YYYY-MM-DD`` in UTC."""
    try:
        mtime = path.stat().st_mtime
    except OSError as exc:
        raise SiteIOError(f"Cannot stat file: {exc}", path=path) from exc
    return datetime.fromtimestamp(mtime, tz=UTC).date().isoformat()


def _as_list(value: str | list[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def parse_header(path: Path, header: str) -> _RawHeader:
    """Parse raw header text into the loosely-typed header model."""
    try:
        data = _new_yaml().load(header)
    except YAMLError as exc:
        raise ParseError(f"Invalid header block: {exc}", path=path) from exc

    if data is None or data == "":
        return _RawHeader()
    if not isinstance(data, dict):
        msg = f"Header block must be a mapping, got {type(data).__name__}"
        raise ParseError(msg, path=path)

    try:
        return _RawHeader.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err["loc"])
        raise ParseError(f"Invalid header field(s): {fields}", path=path) from exc


def extract_metadata(path: Path, header: str | None) -> DocumentMetadata:
    """Build :class:`DocumentMetadata` for the document at *path*.

    Args:
        path: The source file. Used for the title and date fallbacks.
        header: Raw header text, or None when the document has no header.

    Raises:
        ParseError: If *header* is present but malformed.
        SiteIOError: If the date falls back to an mtime that cannot be read.
    """
    raw = parse_header(path, header) if header is not None else _RawHeader()

    date: str | None = None
    for name in _DATE_FIELDS:
        date = date_prefix(getattr(raw, name))
        if date is not None:
            break

    return DocumentMetadata(
        title=raw.title if raw.title is not None else path.stem,
        draft=raw.draft is not None and raw.draft.lower() == "true",
        date=date if date is not None else mtime_date(path),
        authors=_as_list(raw.authors),
        published=date_prefix(raw.published),
        link=raw.link,
        tags=_as_list(raw.tags),
    )
