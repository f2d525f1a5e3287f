"""Serialize rendered trees to HTML or plain text.

HTML:
    Escaped text has &, <, >, " replaced by entities; Raw markup is
    emitted verbatim; Anchor becomes <a title="..." href="...">...</a>
    with attribute values escaped the same way.

Text:
    Escaped text is emitted as is; Raw markup is reduced to its text
    content; an Anchor contributes only its visible text.

Escaping happens here and nowhere else, so a tree embedded in another
render (as an argument) is escaped exactly once.

Python 3.13+.
"""

from html.parser import HTMLParser

from wikimsg.enums import RenderFormat
from wikimsg.runtime.rendered import Anchor, Escaped, Fragment, Raw, RenderedNode

__all__ = ["escape_html", "render_node", "to_html", "to_text"]

_HTML_ESCAPES = str.maketrans({"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;"})


def escape_html(text: str) -> str:
    """Entity-escape &, <, > and ".

    Example:
        >>> escape_html('<bar bar="bar">&gt;</bar>')
        '&lt;bar bar=&quot;bar&quot;&gt;&amp;gt;&lt;/bar&gt;'
    """
    return text.translate(_HTML_ESCAPES)


class _MarkupText(HTMLParser):
    """Collect the text content of an HTML fragment, entities decoded."""

    # Elements whose content is never visible text
    _HIDDEN = frozenset({"script", "style"})

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: list[str] = []
        self._hidden_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in self._HIDDEN:
            self._hidden_depth += 1

    def handle_endtag(self, tag: str) -> None:
        if tag in self._HIDDEN and self._hidden_depth:
            self._hidden_depth -= 1

    def handle_data(self, data: str) -> None:
        if not self._hidden_depth:
            self._parts.append(data)

    def get_data(self) -> str:
        return "".join(self._parts)


def _markup_text(markup: str) -> str:
    parser = _MarkupText()
    parser.feed(markup)
    parser.close()
    return parser.get_data()


def _write_html(node: RenderedNode, output: list[str]) -> None:
    match node:
        case Escaped():
            output.append(escape_html(node.text))
        case Raw():
            output.append(node.markup)
        case Anchor():
            output.append("<a")
            if node.title is not None:
                output.append(f' title="{escape_html(node.title)}"')
            output.append(f' href="{escape_html(node.href)}">')
            for child in node.children:
                _write_html(child, output)
            output.append("</a>")
        case Fragment():
            for child in node.children:
                _write_html(child, output)


def _write_text(node: RenderedNode, output: list[str]) -> None:
    match node:
        case Escaped():
            output.append(node.text)
        case Raw():
            output.append(_markup_text(node.markup))
        case Anchor() | Fragment():
            for child in node.children:
                _write_text(child, output)


def to_html(node: RenderedNode) -> str:
    """Serialize a rendered tree to HTML."""
    output: list[str] = []
    _write_html(node, output)
    return "".join(output)


def to_text(node: RenderedNode) -> str:
    """Serialize a rendered tree to plain text."""
    output: list[str] = []
    _write_text(node, output)
    return "".join(output)


def render_node(node: RenderedNode, output_format: RenderFormat) -> str | RenderedNode:
    """Serialize node for the requested format (NODE returns the tree itself)."""
    match output_format:
        case RenderFormat.HTML:
            return to_html(node)
        case RenderFormat.TEXT:
            return to_text(node)
        case _:
            return node
