"""Markdown parsing — markdown-it-py tokens to :mod:`folio.domain.document` nodes.

The parser is configured for CommonMark plus tables, strikethrough, a
YAML front matter block, footnotes and ``$``/``$$`` math. Footnote
definitions stay where they were written (the renderer collects them
itself) and references to undefined footnotes are still recognised, so
the renderer can emit a placeholder for them.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from functools import cache
from typing import Any

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.dollarmath import dollarmath_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.front_matter import front_matter_plugin

from folio.domain import document as doc
from folio.domain.errors import ParseError, UnsupportedConstructError

# Containers that map one-to-one onto a node type taking only children.
_SIMPLE_CONTAINERS: dict[str, type] = {
    "paragraph": doc.Paragraph,
    "blockquote": doc.Blockquote,
    "em": doc.Emphasis,
    "strong": doc.Strong,
    "s": doc.Delete,
    "table": doc.Table,
    "tr": doc.TableRow,
}

# Flattened into their parent: the inline run of a block, and table
# sections (rows attach directly to the table).
_TRANSPARENT = frozenset({"inline", "thead", "tbody"})

# Kinds for constructs folio refuses to render.
TOML_FRONT_MATTER = "toml_front_matter"
REFERENCE_DEFINITION = "reference_definition"

# A "+++" fenced header opening the file.
_TOML_HEADER = re.compile(r"\A\+\+\+[ \t]*\r?\n(.*?)^\+\+\+[ \t]*$\r?\n?", re.DOTALL | re.MULTILINE)

# Nodes whose text must not be scanned for named references.
_OPAQUE = (doc.Code, doc.InlineCode, doc.Html, doc.InlineMath, doc.Math, doc.FrontMatter)


@cache
def _parser() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])
    md.use(front_matter_plugin)
    md.use(footnote_plugin, inline=False, move_to_end=False, always_match_refs=True)
    md.use(dollarmath_plugin)
    return md


def parse_document(text: str) -> doc.Root:
    """Parse Markdown *text* into a document tree.

    Two constructs are kept out of the tree as leading
    :class:`~folio.domain.document.Unsupported` nodes, because markdown-it
    would otherwise render them silently: a TOML (``+++``) header, and
    link reference definitions (``[label]: url``), which markdown-it
    consumes while resolving ``[text][label]`` shorthand.

    Raises:
        ParseError: If the parser rejects the input.
    """
    leading: list[doc.Node] = []
    header = _TOML_HEADER.match(text)
    if header:
        leading.append(doc.Unsupported(kind=TOML_FRONT_MATTER, source=header.group(0)))
        text = text[header.end() :]

    env: dict[str, Any] = {}
    try:
        tokens = _parser().parse(text, env)
    except Exception as exc:  # markdown-it raises plain exceptions on bad input
        raise ParseError(f"Failed to parse markdown: {exc}") from exc

    if env.get("references"):
        labels = ", ".join(sorted(env["references"]))
        leading.append(doc.Unsupported(kind=REFERENCE_DEFINITION, source=labels))
    return doc.Root(children=(*leading, *_convert_children(SyntaxTreeNode(tokens))))


def find_front_matter(root: doc.Root) -> str | None:
    """Return the raw YAML header text of *root*, or None if it has no header.

    Raises:
        UnsupportedConstructError: If the header is written in TOML.
    """
    for child in root.children:
        if isinstance(child, doc.FrontMatter):
            return child.value
        if isinstance(child, doc.Unsupported) and child.kind == TOML_FRONT_MATTER:
            raise UnsupportedConstructError(child.kind)
    return None


def iter_text(root: doc.Node) -> Iterator[doc.Text]:
    """Yield every text node in document order, skipping code, math and raw HTML."""
    stack: list[doc.Node] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, doc.Text):
            yield node
        elif isinstance(node, _OPAQUE):
            continue
        else:
            stack.extend(reversed(getattr(node, "children", ())))


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def _convert_children(node: SyntaxTreeNode, *, tight: bool = False) -> tuple[doc.Node, ...]:
    """Convert the children of *node*, merging adjacent text runs."""
    out: list[doc.Node] = []
    for child in node.children:
        if child.type in _TRANSPARENT:
            out.extend(_convert_children(child))
            continue
        converted = _convert(child, tight=tight)
        if isinstance(converted, doc.Text) and out and isinstance(out[-1], doc.Text):
            out[-1] = doc.Text(out[-1].value + converted.value)
        else:
            out.append(converted)
    return tuple(out)


def _is_tight(list_node: SyntaxTreeNode) -> bool:
    """A list is tight when markdown-it hid every paragraph inside its items."""
    for item in list_node.children:
        for child in item.children:
            if child.type == "paragraph" and not child.hidden:
                return False
    return True


def _convert(node: SyntaxTreeNode, *, tight: bool) -> doc.Node:
    kind = node.type

    if kind in _SIMPLE_CONTAINERS:
        return _SIMPLE_CONTAINERS[kind](children=_convert_children(node))

    match kind:
        case "text":
            return doc.Text(node.content)
        case "softbreak":
            return doc.Text("\n")
        case "hardbreak":
            return doc.Break()
        case "code_inline":
            return doc.InlineCode(node.content)
        case "fence":
            lang = node.info.split(maxsplit=1)[0] if node.info.strip() else None
            return doc.Code(value=node.content.rstrip("\n"), lang=lang)
        case "code_block":
            return doc.Code(value=node.content.rstrip("\n"))
        case "html_block" | "html_inline":
            return doc.Html(node.content)
        case "hr":
            return doc.ThematicBreak()
        case "heading":
            return doc.Heading(depth=int(node.tag[1:]), children=_convert_children(node))
        case "bullet_list" | "ordered_list":
            start = node.attrs.get("start") if kind == "ordered_list" else None
            return doc.List(
                ordered=kind == "ordered_list",
                start=int(start) if start is not None else None,
                children=_convert_children(node, tight=_is_tight(node)),
            )
        case "list_item":
            return doc.ListItem(spread=not tight, children=_convert_children(node))
        case "th" | "td":
            return doc.TableCell(
                header=kind == "th",
                align=_cell_align(node),
                children=_convert_children(node),
            )
        case "link":
            title = node.attrs.get("title")
            return doc.Link(
                url=str(node.attrs.get("href", "")),
                title=str(title) if title is not None else None,
                children=_convert_children(node),
            )
        case "image":
            title = node.attrs.get("title")
            return doc.Image(
                url=str(node.attrs.get("src", "")),
                alt=_plain_text(node),
                title=str(title) if title is not None else None,
            )
        case "front_matter":
            return doc.FrontMatter(node.content)
        case "footnote_reference":
            return doc.FootnoteDefinition(
                identifier=str(node.meta.get("label", "")),
                children=_convert_children(node),
            )
        case "footnote_ref":
            return doc.FootnoteReference(identifier=str(node.meta.get("label", "")))
        case "math_inline" | "math_inline_double":
            return doc.InlineMath(node.content)
        case "math_block" | "math_block_label":
            return doc.Math(node.content.strip("\n"))
        case _:
            return doc.Unsupported(kind=kind, source=node.content)


def _plain_text(node: SyntaxTreeNode) -> str:
    """The text of *node*'s inline children with all markup dropped (image alt text)."""
    parts: list[str] = []
    stack = list(reversed(node.children))
    while stack:
        child = stack.pop()
        if child.type in ("softbreak", "hardbreak"):
            parts.append("\n")
        elif child.children:
            stack.extend(reversed(child.children))
        else:
            parts.append(child.content)
    return "".join(parts)


def _cell_align(node: SyntaxTreeNode) -> str | None:
    style = str(node.attrs.get("style", ""))
    if style.startswith("text-align:"):
        return style.removeprefix("text-align:").strip()
    return None
