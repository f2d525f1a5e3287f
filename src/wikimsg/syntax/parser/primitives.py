"""Primitive parsing utilities for the message parser.

Low-level parsers for parameter indexes and template names.
"""

from wikimsg.syntax.cursor import Cursor, ParseResult

__all__ = [
    "ASCII_DIGITS",
    "TEMPLATE_NAME_FORBIDDEN",
    "is_template_name_char",
    "parse_digits",
]

# ASCII digits only: "$١" is text, not a parameter.
# str.isdigit() accepts Unicode digits such as "²" which int() rejects.
ASCII_DIGITS: str = "0123456789"

# Characters that cannot appear in a template name. A "{{" followed by any
# of these before ":" / "|" / "}}" does not start a template.
TEMPLATE_NAME_FORBIDDEN: frozenset[str] = frozenset("{}[]$|:\n")


def is_template_name_char(ch: str) -> bool:
    """Check if character can be part of a template name."""
    return ch not in TEMPLATE_NAME_FORBIDDEN


def parse_digits(cursor: Cursor) -> ParseResult[int] | None:
    """Parse a run of ASCII digits as a non-negative integer.

    Examples:
        "12 items" -> 12 (cursor after "12")
        "x"        -> None

    Args:
        cursor: Current position in source

    Returns:
        ParseResult(value, cursor_after_digits), or None if no digit here
    """
    start = cursor.pos
    while not cursor.is_eof and cursor.current in ASCII_DIGITS:
        cursor = cursor.advance()
    if cursor.pos == start:
        return None
    return ParseResult(int(cursor.source[start : cursor.pos]), cursor)
