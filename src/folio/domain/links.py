"""Named reference scanning — split text around ``[[wikilinks]]``.

Pure functions, no infrastructure dependencies. Consumed by the renderer
for every text node and by the link pre-pass that feeds backlinks.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

# [[Name]] or [[Name|Display Text]]; neither part may contain [ ] or |.
_REFERENCE_PATTERN = re.compile(r"\[\[([^|\[\]]+)\|?([^|\[\]]+)?\]\]")


@dataclass(frozen=True)
class PlainText:
    """A run of text containing no named reference."""

    source: str


@dataclass(frozen=True)
class NamedReference:
    """A ``[[name]]`` or ``[[name|display]]`` reference."""

    name: str
    display: str | None = None
    source: str = ""  # the full bracketed text as written

    def display_or_name(self) -> str:
        return self.display if self.display is not None else self.name


type ReferenceSegment = PlainText | NamedReference


def segment(text: str) -> Iterator[ReferenceSegment]:
    """Yield alternating plain-text and reference segments covering *text*.

    Joining ``seg.source`` for every yielded segment reproduces *text*
    exactly. Empty plain-text runs are never yielded.

    Examples:
        >>> [s.source for s in segment("a [[B|c]] d")]
        ['a ', '[[B|c]]', ' d']
    """
    cursor = 0
    for match in _REFERENCE_PATTERN.finditer(text):
        start, end = match.span()
        if start > cursor:
            yield PlainText(text[cursor:start])
        yield NamedReference(name=match.group(1), display=match.group(2), source=match.group(0))
        cursor = end
    if cursor < len(text):
        yield PlainText(text[cursor:])


def extract_references(text: str) -> list[NamedReference]:
    """Return only the named references found in *text*, in order."""
    return [seg for seg in segment(text) if isinstance(seg, NamedReference)]
