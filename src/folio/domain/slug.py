"""URL-safe slugs for tag pages and output paths.

Pure functions. ``slugify`` is idempotent: ``slugify(slugify(x)) == slugify(x)``.
"""

from __future__ import annotations

import re
from pathlib import PurePath, PurePosixPath

from unidecode import unidecode

_SEPARATOR_RUN = re.compile(r"[\s_-]+")
_DISALLOWED = re.compile(r"[^a-z0-9.-]")
_HYPHEN_RUN = re.compile(r"-{2,}")


def _transliterate(text: str) -> str:
    """Spell *text* in its closest ASCII equivalent.

    Accents are stripped, ligatures expanded (``Æ`` -> ``AE``, ``ß`` -> ``ss``)
    and non-Latin scripts romanised (``北京`` -> ``Bei Jing``). Characters
    with no known transliteration are dropped.
    """
    return unidecode(text)


def slugify(text: str) -> str:
    """Convert *text* into a lower-case, URL-safe token.

    Examples:
        >>> slugify("Hello World")
        'hello-world'
        >>> slugify("What's Up?")
        'whats-up'
        >>> slugify("Crème Brûlée.html")
        'creme-brulee.html'
    """
    value = _transliterate(text).lower()
    value = _SEPARATOR_RUN.sub("-", value)
    value = _DISALLOWED.sub("", value)
    # Dropping characters can bring two hyphens together again.
    value = _HYPHEN_RUN.sub("-", value)
    return value.strip("-")


def slugify_path(path: PurePath | str) -> PurePosixPath:
    """Slugify every segment of *path*, keeping segment boundaries."""
    parts = PurePath(path).parts
    return PurePosixPath(*(slugify(part) for part in parts)) if parts else PurePosixPath()
