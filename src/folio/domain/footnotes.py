"""Per-render footnote bookkeeping.

Footnote references may appear before or after their definition. Each
identifier gets an ordinal the first time it is seen (reference or
definition, whichever comes first); definitions are parked in a slot
list indexed by ordinal until the renderer emits the footnotes section.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from folio.domain.document import Node


@dataclass
class FootnoteSlot:
    identifier: str
    children: tuple[Node, ...] | None = None  # None until a definition is seen

    @property
    def defined(self) -> bool:
        return self.children is not None


@dataclass
class FootnoteTable:
    """First-seen ordinals plus the definitions gathered so far."""

    _ordinals: dict[str, int] = field(default_factory=dict)
    _slots: list[FootnoteSlot] = field(default_factory=list)

    def ordinal(self, identifier: str) -> int:
        """Return the stable ordinal for *identifier*, assigning one if new."""
        found = self._ordinals.get(identifier)
        if found is not None:
            return found
        ordinal = len(self._ordinals)
        self._ordinals[identifier] = ordinal
        self._slots.append(FootnoteSlot(identifier=identifier))
        return ordinal

    def define(self, identifier: str, children: tuple[Node, ...]) -> int:
        """Record the definition for *identifier*. A later definition wins."""
        ordinal = self.ordinal(identifier)
        self._slots[ordinal].children = children
        return ordinal

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[FootnoteSlot]:
        return iter(self._slots)
