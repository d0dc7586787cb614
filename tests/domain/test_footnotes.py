"""Tests for the per-render footnote table."""

from __future__ import annotations

from folio.domain.document import Text
from folio.domain.footnotes import FootnoteTable


class TestFootnoteTable:
    def test_ordinals_in_first_seen_order(self) -> None:
        table = FootnoteTable()
        assert table.ordinal("b") == 0
        assert table.ordinal("a") == 1
        assert table.ordinal("b") == 0
        assert len(table) == 2

    def test_definition_before_reference_keeps_ordinal(self) -> None:
        table = FootnoteTable()
        assert table.define("x", (Text("note"),)) == 0
        assert table.ordinal("x") == 0
        (slot,) = list(table)
        assert slot.defined
        assert slot.children == (Text("note"),)

    def test_undefined_slot(self) -> None:
        table = FootnoteTable()
        table.ordinal("missing")
        (slot,) = list(table)
        assert slot.identifier == "missing"
        assert not slot.defined

    def test_later_definition_wins(self) -> None:
        table = FootnoteTable()
        table.define("n", (Text("first"),))
        table.define("n", (Text("second"),))
        assert [s.children for s in table] == [(Text("second"),)]
