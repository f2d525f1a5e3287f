"""Diagnostic codes and data structures.

Defines error codes, source spans, and diagnostic messages.
Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "SourceSpan",
]


class DiagnosticCode(Enum):
    """Error codes with unique identifiers.

    Organized by category:
        1000-1999: Reference errors (missing nested messages, cycles)
        2000-2999: Resolution errors (runtime evaluation degradations)
        3000-3999: Syntax errors (parser failures)
        4000-4999: Numeral errors (locale number parsing, unknown locales)
        9000-9999: Usage errors (API misuse by the caller)
    """

    # Reference errors (1000-1999)
    MESSAGE_NOT_FOUND = 1001
    PARAMETER_NOT_PROVIDED = 1002
    CYCLIC_REFERENCE = 1003

    # Resolution errors (2000-2999)
    MAX_DEPTH_EXCEEDED = 2001
    GRAMMAR_CASE_UNSUPPORTED = 2002
    TEMPLATE_ARGUMENT_MISSING = 2003
    PLURAL_COUNT_INVALID = 2004
    UNKNOWN_NODE = 2005
    UNSAFE_LINK_TARGET = 2006

    # Syntax errors (3000-3999)
    UNEXPECTED_EOF = 3001
    PARSE_ERROR = 3002
    PIPE_TRICK_UNSUPPORTED = 3003
    PARSE_NESTING_DEPTH_EXCEEDED = 3004
    SOURCE_TOO_LARGE = 3005

    # Numeral errors (4000-4999)
    NUMBER_PARSE_FAILED = 4001
    LOCALE_UNKNOWN = 4002

    # Usage errors (9000-9999)
    CONFLICTING_RENDER_OPTIONS = 9001
    INVALID_RENDER_OPTION = 9002


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Location of a problem inside a raw message.

    Note:
        Python strings measure positions in characters (Unicode code points),
        not bytes.

    Attributes:
        start: Starting character offset (0-indexed)
        end: Ending character offset (exclusive)
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        """Validate SourceSpan invariants.

        Raises:
            ValueError: If start is negative or end precedes start.
        """
        if self.start < 0:
            msg = f"SourceSpan.start must be >= 0, got {self.start}"
            raise ValueError(msg)
        if self.end < self.start:
            msg = f"SourceSpan.end ({self.end}) must be >= start ({self.start})"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Inspired by Rust compiler diagnostics. Provides rich error information
    for both humans and tools.

    Attributes:
        code: Unique error code
        message: Human-readable error description
        span: Location inside the raw message (None when not applicable)
        hint: Suggestion for fixing the error
        message_key: Key of the message being rendered when the error occurred
        template_name: Template construct involved (PLURAL, GRAMMAR, ...)
        severity: Error severity level
        resolution_path: Nested lookup stack at time of error
    """

    code: DiagnosticCode
    message: str
    span: SourceSpan | None = None
    hint: str | None = None
    message_key: str | None = None
    template_name: str | None = None
    severity: Literal["error", "warning"] = "error"
    resolution_path: tuple[str, ...] | None = None

    def __str__(self) -> str:
        """Return human-readable error description."""
        return self.message

    def format_error(self) -> str:
        """Format diagnostic like Rust compiler.

        Example output:
            error[MESSAGE_NOT_FOUND]: Message 'helppage' not found
              --> message 'newarticletext'
              = help: Check that the message is defined in the message store

        Returns:
            Formatted error message
        """
        from .formatter import DiagnosticFormatter  # noqa: PLC0415 - circular

        return DiagnosticFormatter().format(self)
