"""Immutable cursor infrastructure for type-safe parsing.

Implements the immutable cursor pattern for zero-`None` parsing.
Python 3.13+. Zero external dependencies.

Design Philosophy:
    - Cursor is immutable (frozen dataclass)
    - EOF is a state (is_eof), not a return value
    - Every advance() returns NEW cursor (prevents infinite loops)

Pattern Reference:
    - Rust nom parser combinator library
    - Haskell Parsec
"""

from dataclasses import dataclass

from wikimsg.diagnostics import ErrorTemplate

__all__ = ["Cursor", "ParseResult"]


@dataclass(frozen=True, slots=True)
class Cursor:
    """Immutable source position tracker.

    Example:
        >>> cursor = Cursor("$1 items", 0)
        >>> cursor.current
        '$'
        >>> cursor.advance().current
        '1'
        >>> cursor.current  # Original unchanged (immutability)
        '$'
        >>> Cursor("hi", 2).is_eof
        True
    """

    source: str
    pos: int

    @property
    def is_eof(self) -> bool:
        """Check if at end of input."""
        return self.pos >= len(self.source)

    @property
    def current(self) -> str:
        """Get current character.

        Raises:
            EOFError: If at end of input
        """
        if self.is_eof:
            diagnostic = ErrorTemplate.unexpected_eof(self.pos)
            raise EOFError(diagnostic.message)
        return self.source[self.pos]

    def peek(self, offset: int = 0) -> str | None:
        """Peek at character with offset without advancing.

        Returns None ONLY when peeking beyond EOF.
        """
        target_pos = self.pos + offset
        if target_pos >= len(self.source):
            return None
        return self.source[target_pos]

    def advance(self, count: int = 1) -> "Cursor":
        """Return new cursor advanced by count positions (clamped to EOF)."""
        new_pos = min(self.pos + count, len(self.source))
        return Cursor(self.source, new_pos)

    def startswith(self, token: str) -> bool:
        """Check whether the source continues with token at this position.

        Example:
            >>> Cursor("a{{b", 1).startswith("{{")
            True
        """
        return self.source.startswith(token, self.pos)

    def skip_spaces(self) -> "Cursor":
        """Skip inline whitespace (spaces and tabs)."""
        c = self
        while not c.is_eof and c.current in (" ", "\t"):
            c = c.advance()
        return c

    def expect(self, token: str) -> "Cursor | None":
        """Consume token if the source continues with it, return None otherwise.

        Example:
            >>> Cursor("]]x", 0).expect("]]").pos
            2
            >>> Cursor("]x", 0).expect("]]") is None
            True
        """
        if self.startswith(token):
            return self.advance(len(token))
        return None


@dataclass(frozen=True, slots=True)
class ParseResult[T]:
    """Parser result containing parsed value and new cursor position.

    Every grammar rule has the signature::

        def parse_foo(cursor: Cursor, ...) -> ParseResult[Foo] | None

    where None means "this construct does not start here" and the caller
    falls back to treating the characters as literal text.

    Example:
        >>> cursor = Cursor("hello", 0)
        >>> result = ParseResult('h', cursor.advance())
        >>> result.value
        'h'
        >>> result.cursor.pos
        1
    """

    value: T
    cursor: Cursor
