"""Document tree — the parsed form of one Markdown file.

Node types mirror the usual Markdown AST vocabulary (root, paragraph,
heading, list, ...). Trees are produced by
:func:`folio.infrastructure.markdown.parse_document` and consumed,
read-only, by the renderer and the link pre-pass. All nodes are frozen;
container children are tuples.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Root:
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Paragraph:
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Blockquote:
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Heading:
    depth: int
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class List:
    ordered: bool = False
    start: int | None = None
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class ListItem:
    """A list item. ``spread`` is True for items of a loose list."""

    spread: bool = False
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Emphasis:
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Strong:
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Delete:
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Link:
    url: str
    title: str | None = None
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Table:
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class TableRow:
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class TableCell:
    header: bool = False
    align: str | None = None  # "left", "center", "right"
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class FootnoteDefinition:
    identifier: str
    children: tuple[Node, ...] = ()


# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class InlineCode:
    value: str


@dataclass(frozen=True)
class Code:
    value: str
    lang: str | None = None


@dataclass(frozen=True)
class Html:
    """Raw embedded markup, emitted byte-for-byte."""

    value: str


@dataclass(frozen=True)
class Image:
    url: str
    alt: str = ""
    title: str | None = None


@dataclass(frozen=True)
class ThematicBreak:
    pass


@dataclass(frozen=True)
class Break:
    pass


@dataclass(frozen=True)
class FrontMatter:
    """The YAML header block. Consumed at index time, skipped when rendering."""

    value: str


@dataclass(frozen=True)
class FootnoteReference:
    identifier: str


@dataclass(frozen=True)
class InlineMath:
    value: str


@dataclass(frozen=True)
class Math:
    value: str


@dataclass(frozen=True)
class Unsupported:
    """A construct the parser recognised but folio does not render."""

    kind: str
    source: str = field(default="", compare=False)


type Node = (
    Root
    | Paragraph
    | Blockquote
    | Heading
    | List
    | ListItem
    | Emphasis
    | Strong
    | Delete
    | Link
    | Table
    | TableRow
    | TableCell
    | FootnoteDefinition
    | Text
    | InlineCode
    | Code
    | Html
    | Image
    | ThematicBreak
    | Break
    | FrontMatter
    | FootnoteReference
    | InlineMath
    | Math
    | Unsupported
)
