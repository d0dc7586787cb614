"""DocumentRenderer — document tree to HTML, with site-aware references.

The walk uses an explicit LIFO work stack instead of recursion. For a
container node the closing markup is pushed first, then the children in
reverse, then the opening markup; popping therefore yields open,
children, close. Deeply nested input never grows the Python call stack.

Things that cannot be resolved degrade in place and never fail a page:

- ``[[Missing]]`` renders as ``<em>Missing</em>``.
- A math expression the math service rejects renders verbatim.
- A footnote referenced but never defined renders as ``???``.

Constructs outside the supported set raise
:class:`~folio.domain.errors.UnsupportedConstructError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from html import escape
from io import StringIO
from typing import TYPE_CHECKING, TextIO

from folio.domain.document import (
    Blockquote,
    Break,
    Code,
    Delete,
    Emphasis,
    FootnoteDefinition,
    FootnoteReference,
    FrontMatter,
    Heading,
    Html,
    Image,
    InlineCode,
    InlineMath,
    Link,
    List,
    ListItem,
    Math,
    Node,
    Paragraph,
    Root,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    Unsupported,
)
from folio.domain.errors import MathRenderError, SiteIOError, UnsupportedConstructError
from folio.domain.footnotes import FootnoteTable
from folio.domain.links import NamedReference, segment

if TYPE_CHECKING:
    from pathlib import Path

    from folio.infrastructure.index import ContentIndex
    from folio.infrastructure.math import MathRenderer

logger = logging.getLogger(__name__)

FOOTNOTE_PLACEHOLDER = "???"


@dataclass
class RenderLog:
    """What happened while rendering one document.

    Attributes:
        has_math: At least one math node was seen (the page template loads
            math stylesheets only when this is set).
        links: Names of pages successfully linked to.
        unresolved: Reference names that matched no published page.
        math_failures: Expressions that fell back to verbatim output.
    """

    has_math: bool = False
    links: set[str] = field(default_factory=set)
    unresolved: list[str] = field(default_factory=list)
    math_failures: int = 0

    def merge(self, other: RenderLog) -> None:
        self.has_math = self.has_math or other.has_math
        self.links |= other.links
        self.unresolved.extend(other.unresolved)
        self.math_failures += other.math_failures


def footnote_anchor(ordinal: int) -> str:
    """Anchor id for the footnote with zero-based *ordinal*."""
    return f"fn-{ordinal + 1}"


class DocumentRenderer:
    """Render document trees against a built :class:`ContentIndex`.

    The index is only read. One renderer may be shared by several
    threads; all per-document state lives inside :meth:`render`.
    """

    def __init__(
        self,
        index: ContentIndex,
        math: MathRenderer,
        *,
        source: Path | None = None,
    ) -> None:
        self._index = index
        self._math = math
        self._source = source

    def render(self, writer: TextIO, root: Node) -> RenderLog:
        """Write the HTML for *root* to *writer*.

        Raises:
            SiteIOError: If *writer* rejects output.
            UnsupportedConstructError: If the tree contains an unsupported node.
        """
        log = RenderLog()
        footnotes = FootnoteTable()
        try:
            self._walk(writer, root, footnotes, log)
            if len(footnotes):
                self._write_footnotes(writer, footnotes, log)
        except OSError as exc:
            raise SiteIOError(f"Cannot write output: {exc}", path=self._source, stage="render") from exc
        except UnsupportedConstructError as exc:
            raise exc.with_context(path=self._source, stage="render")
        return log

    def render_to_string(self, root: Node) -> tuple[str, RenderLog]:
        buffer = StringIO()
        log = self.render(buffer, root)
        return buffer.getvalue(), log

    # ------------------------------------------------------------------
    # Walk
    # ------------------------------------------------------------------

    def _walk(self, writer: TextIO, root: Node, footnotes: FootnoteTable, log: RenderLog) -> None:
        stack: list[Node | str] = [root]

        def container(open_tag: str, children: tuple[Node, ...], close_tag: str) -> None:
            stack.append(close_tag)
            stack.extend(reversed(children))
            stack.append(open_tag)

        while stack:
            item = stack.pop()
            if isinstance(item, str):
                writer.write(item)
                continue

            match item:
                case Root(children=children):
                    stack.extend(reversed(children))
                case Paragraph(children=children):
                    container("\n<p>", children, "</p>")
                case Blockquote(children=children):
                    container("\n<blockquote>", children, "\n</blockquote>")
                case Heading(depth=depth, children=children):
                    container(f"\n<h{depth}>", children, f"</h{depth}>")
                case Emphasis(children=children):
                    container("<em>", children, "</em>")
                case Strong(children=children):
                    container("<strong>", children, "</strong>")
                case Delete(children=children):
                    container("<del>", children, "</del>")
                case List(ordered=True, start=start, children=children):
                    open_tag = "\n<ol>" if start in (None, 1) else f'\n<ol start="{start}">'
                    container(open_tag, children, "\n</ol>")
                case List(children=children):
                    container("\n<ul>", children, "\n</ul>")
                case ListItem(spread=False, children=(Paragraph(children=inline),)):
                    # Tight list: the lone paragraph is unwrapped.
                    container("\n<li>", inline, "</li>")
                case ListItem(children=children):
                    container("\n<li>", children, "</li>")
                case Table(children=children):
                    container("\n<table>", children, "\n</table>")
                case TableRow(children=children):
                    container("\n<tr>", children, "\n</tr>")
                case TableCell(header=header, align=align, children=children):
                    tag = "th" if header else "td"
                    style = f' style="text-align:{escape(align)}"' if align else ""
                    container(f"\n<{tag}{style}>", children, f"</{tag}>")
                case Link(url=url, title=title, children=children):
                    title_attr = f' title="{escape(title)}"' if title else ""
                    container(f'<a href="{escape(url)}"{title_attr}>', children, "</a>")
                case Text(value=value):
                    self._write_text(writer, value, log)
                case InlineCode(value=value):
                    writer.write(f"<code>{escape(value, quote=False)}</code>")
                case Code(value=value, lang=lang):
                    cls = f' class="language-{escape(lang)}"' if lang else ""
                    writer.write(f"\n<pre><code{cls}>{escape(value, quote=False)}</code></pre>")
                case Html(value=value):
                    writer.write(value)
                case Image(url=url, alt=alt, title=title):
                    title_attr = f' title="{escape(title)}"' if title else ""
                    writer.write(f'<img src="{escape(url)}" alt="{escape(alt)}"{title_attr} />')
                case ThematicBreak():
                    writer.write("\n<hr />")
                case Break():
                    writer.write("<br />\n")
                case FrontMatter():
                    pass
                case FootnoteDefinition(identifier=identifier, children=children):
                    footnotes.define(identifier, children)
                case FootnoteReference(identifier=identifier):
                    anchor = footnote_anchor(footnotes.ordinal(identifier))
                    label = footnotes.ordinal(identifier) + 1
                    writer.write(f'<sup><a href="#{anchor}">{label}</a></sup>')
                case InlineMath(value=value):
                    writer.write(self._render_math(value, display=False, log=log))
                case Math(value=value):
                    writer.write(self._render_math(value, display=True, log=log))
                case Unsupported(kind=kind):
                    raise UnsupportedConstructError(kind)
                case _:
                    raise UnsupportedConstructError(type(item).__name__)

    def _write_text(self, writer: TextIO, value: str, log: RenderLog) -> None:
        for seg in segment(value):
            if isinstance(seg, NamedReference):
                writer.write(self._resolve(seg, log))
            else:
                writer.write(escape(seg.source, quote=False))

    def _resolve(self, ref: NamedReference, log: RenderLog) -> str:
        text = escape(ref.display_or_name(), quote=False)
        page = self._index.page_by_name(ref.name)
        if page is None or page.draft:
            log.unresolved.append(ref.name)
            return f"<em>{text}</em>"
        log.links.add(page.name)
        return f'<a href="{escape(page.link)}">{text}</a>'

    def _render_math(self, expression: str, *, display: bool, log: RenderLog) -> str:
        log.has_math = True
        try:
            markup = self._math.render(expression, display=display)
        except MathRenderError as exc:
            log.math_failures += 1
            logger.warning(
                "Math rendering failed in %s for %r: %s",
                self._source or "<document>",
                expression,
                exc,
            )
            if display:
                return f"\n<pre><code>$$\n{escape(expression, quote=False)}\n$$</code></pre>"
            return f"<code>${escape(expression, quote=False)}$</code>"
        mode = "math-display" if display else "math-inline"
        return f'<span class="math {mode}">{markup}</span>'

    # ------------------------------------------------------------------
    # Footnotes
    # ------------------------------------------------------------------

    def _write_footnotes(self, writer: TextIO, footnotes: FootnoteTable, log: RenderLog) -> None:
        writer.write('\n<section class="footnotes">\n<ol>\n')
        for ordinal, slot in enumerate(footnotes):
            anchor = footnote_anchor(ordinal)
            if slot.children is None:
                writer.write(f'<li id="{anchor}">{FOOTNOTE_PLACEHOLDER}</li>\n')
                continue
            writer.write(f'<li id="{anchor}">')
            log.merge(self.render(writer, Root(children=slot.children)))
            writer.write("</li>\n")
        writer.write("</ol>\n</section>\n")


def render_document(
    writer: TextIO,
    index: ContentIndex,
    math: MathRenderer,
    root: Node,
    *,
    source: Path | None = None,
) -> RenderLog:
    """Render *root* to *writer*; see :meth:`DocumentRenderer.render`."""
    return DocumentRenderer(index, math, source=source).render(writer, root)
