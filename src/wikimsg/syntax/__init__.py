"""Message syntax package.

Provides the parser, AST definitions, visitor pattern, and serialization.
Separate from runtime so tooling (linters, translation checkers) can use it
without a locale.

Python 3.13+.
"""

from .ast import ASTNode, Concat, Junk, Link, Literal, Node, ParamRef, Span, TemplateCall
from .cursor import Cursor, ParseResult
from .parser import MessageParser
from .serializer import MessageSerializer, serialize
from .visitor import ASTVisitor

__all__ = [
    "ASTNode",
    "ASTVisitor",
    "Concat",
    "Cursor",
    "Junk",
    "Link",
    "Literal",
    "MessageParser",
    "MessageSerializer",
    "Node",
    "ParamRef",
    "ParseResult",
    "Span",
    "TemplateCall",
    "parse",
    "serialize",
]


def parse(source: str, *, key: str = "") -> Node:
    """Parse raw message text into an AST.

    Convenience function for MessageParser().parse(). Never raises.

    Args:
        source: Raw message text
        key: Message key, used only in parse-error text

    Example:
        >>> parse("Foo $1")
        Concat(children=(Literal(text='Foo '), ParamRef(index=1)))
    """
    return MessageParser().parse(source, key=key)
