"""Rendered output tree.

Evaluation produces a tree that records, for every piece of output,
whether it is text awaiting escaping or markup to emit verbatim:

    Escaped   text; entity-escaped exactly once, when serialized to HTML
    Raw       trusted markup supplied by the caller
    Anchor    a link built by the engine (href/title escaped as attributes)
    Fragment  ordered children

Text never becomes markup by accident: only a caller-marked argument
(TrustedHtml, an object with __html__, or a RenderedNode from an earlier
render) yields Raw.

Python 3.13+.
"""

from dataclasses import dataclass
from typing import Protocol, TypeIs, runtime_checkable

__all__ = [
    "Anchor",
    "Escaped",
    "Fragment",
    "GenderedUser",
    "HtmlProvider",
    "Raw",
    "RenderedNode",
    "TrustedHtml",
    "is_rendered_node",
]


@dataclass(frozen=True, slots=True)
class Escaped:
    """Plain text, escaped when serialized to HTML."""

    text: str


@dataclass(frozen=True, slots=True)
class Raw:
    """Trusted markup, emitted verbatim in HTML output."""

    markup: str


@dataclass(frozen=True, slots=True)
class Anchor:
    """Link synthesized from [[target|display]] or [url display].

    Attributes:
        href: URL, unescaped
        children: Visible content
        title: Page title for internal links, None for external ones
    """

    href: str
    children: tuple["RenderedNode", ...] = ()
    title: str | None = None


@dataclass(frozen=True, slots=True)
class Fragment:
    """Ordered sequence of rendered nodes."""

    children: tuple["RenderedNode", ...] = ()


type RenderedNode = Escaped | Raw | Anchor | Fragment


def is_rendered_node(value: object) -> TypeIs[RenderedNode]:
    """Type guard for RenderedNode values passed back in as arguments."""
    return isinstance(value, (Escaped, Raw, Anchor, Fragment))


@runtime_checkable
class HtmlProvider(Protocol):
    """Object that renders itself as safe HTML (the __html__ convention)."""

    def __html__(self) -> str: ...


@runtime_checkable
class GenderedUser(Protocol):
    """Argument that supplies a grammatical gender to {{GENDER:...}}."""

    @property
    def gender(self) -> str: ...


class TrustedHtml(str):
    """String the caller vouches for as safe HTML.

    Example:
        >>> engine.render("object-replace", TrustedHtml('<div class="bar">&gt;</div>'))
        'Foo <div class="bar">&gt;</div>'
    """

    __slots__ = ()

    def __html__(self) -> str:
        return str(self)
