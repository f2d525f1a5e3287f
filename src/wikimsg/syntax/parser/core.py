"""Core message parser implementation.

This module provides the MessageParser class that turns raw message text
into the AST defined in :mod:`wikimsg.syntax.ast`.

Architecture:
    The parser uses an immutable cursor pattern (:class:`~wikimsg.syntax.cursor.Cursor`)
    to traverse source text. Each grammar rule in :mod:`~wikimsg.syntax.parser.rules`
    returns either a :class:`~wikimsg.syntax.cursor.ParseResult` or None, in
    which case the characters are kept as literal text.

Totality:
    parse() never raises. Well-formed or not, every input yields a tree;
    input the parser refuses (size limit, nesting limit) yields a Junk node
    whose text is "<key>: Parse error at position <offset> in input: <text>".

Security:
    Includes configurable input size and nesting limits to bound memory and
    recursion on untrusted translations.
"""

import logging

from wikimsg.constants import MAX_DEPTH, MAX_SOURCE_SIZE
from wikimsg.diagnostics import Diagnostic, ErrorTemplate, MessageSyntaxError
from wikimsg.syntax.ast import Junk, Node
from wikimsg.syntax.cursor import Cursor
from wikimsg.syntax.parser.rules import ParseContext, parse_sequence

__all__ = ["MessageParser", "make_junk"]

logger = logging.getLogger(__name__)

# Longest source excerpt echoed back in a size-limit diagnostic.
_EXCERPT_LENGTH: int = 100


def make_junk(key: str, position: int, source: str) -> Junk:
    """Build the inline parse-error node for a message.

    Args:
        key: Message key (may be empty for anonymous sources)
        position: Offset of the first unconsumed/invalid character
        source: Message text echoed in the diagnostic

    Example:
        >>> make_junk("pipe-trick", 0, "[[Tampa, Florida|]]").text
        'pipe-trick: Parse error at position 0 in input: [[Tampa, Florida|]]'
    """
    diagnostic = ErrorTemplate.parse_error(key, position, source)
    return Junk(text=diagnostic.message, position=position, source=source)


class MessageParser:
    """Message mini-language parser using the immutable cursor pattern.

    Attributes:
        max_source_size: Maximum accepted message length in characters
        max_nesting_depth: Maximum construct nesting depth

    Example:
        >>> parser = MessageParser()
        >>> parser.parse("Foo $1")
        Concat(children=(Literal(text='Foo '), ParamRef(index=1)))
    """

    __slots__ = ("_max_nesting_depth", "_max_source_size")

    def __init__(
        self,
        *,
        max_source_size: int | None = None,
        max_nesting_depth: int | None = None,
    ) -> None:
        """Initialize parser with optional size and nesting depth limits.

        Args:
            max_source_size: Maximum message length (default: 1 MiB).
                            Set to 0 to disable the limit.
            max_nesting_depth: Maximum construct nesting depth (default: 100).
        """
        self._max_source_size = (
            max_source_size if max_source_size is not None else MAX_SOURCE_SIZE
        )
        self._max_nesting_depth = (
            max_nesting_depth if max_nesting_depth is not None else MAX_DEPTH
        )

    @property
    def max_source_size(self) -> int:
        """Maximum accepted message length in characters."""
        return self._max_source_size

    @property
    def max_nesting_depth(self) -> int:
        """Maximum construct nesting depth."""
        return self._max_nesting_depth

    def parse(self, source: str, *, key: str = "") -> Node:
        """Parse raw message text into an AST.

        Args:
            source: Raw message text
            key: Message key, used only in parse-error text

        Returns:
            Concat of the message's nodes, or Junk if the message was refused.
        """
        if self._max_source_size and len(source) > self._max_source_size:
            diagnostic = ErrorTemplate.source_too_large(len(source), self._max_source_size)
            logger.warning("Message '%s' refused: %s", key, diagnostic.message)
            excerpt = source[:_EXCERPT_LENGTH] + "..."
            return make_junk(key, 0, excerpt)

        context = ParseContext(max_nesting_depth=self._max_nesting_depth)
        try:
            result = parse_sequence(Cursor(source, 0), context)
        except MessageSyntaxError as e:
            detail = e.diagnostic.message if isinstance(e.diagnostic, Diagnostic) else str(e)
            logger.debug("Message '%s' refused: %s", key, detail)
            return make_junk(key, e.position, source)
        return result.value
