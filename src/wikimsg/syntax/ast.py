"""Message AST (Abstract Syntax Tree) node definitions.

A parsed message is a tree of five node kinds:

    Literal       verbatim text (escaped when rendered)
    ParamRef      $N positional parameter (1-based)
    TemplateCall  {{NAME:arg|arg|...}}
    Link          [[target|display]] or [url display]
    Concat        ordered sequence of the above

Junk is a Literal that replaces a whole message the parser refused
(size or nesting limits); its text is the inline parse-error diagnostic.

Spans are carried for diagnostics but excluded from equality, so two
parses of equivalent source compare equal.

Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass, field
from typing import TypeIs

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Base types
    "Span",
    # Nodes
    "Literal",
    "Junk",
    "ParamRef",
    "TemplateCall",
    "Link",
    "Concat",
    # Type aliases
    "Node",
    "ASTNode",
]


@dataclass(frozen=True, slots=True)
class Span:
    """Source position span.

    Attributes:
        start: Starting character offset (inclusive)
        end: Ending character offset (exclusive)

    Example:
        Source: "Foo {{int:bar}}"
        TemplateCall span: Span(start=4, end=15)
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        """Validate span invariants."""
        if self.start < 0:
            msg = f"Span start must be >= 0, got {self.start}"
            raise ValueError(msg)
        if self.end < self.start:
            msg = f"Span end ({self.end}) must be >= start ({self.start})"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Literal:
    """Verbatim text run.

    Characters that look like syntax but do not form a construct
    ("{{" without "}}", "$" without digits, a lone "[") end up here.
    """

    text: str
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class Junk(Literal):
    """Parse-error replacement for a whole message.

    Attributes:
        position: Offset of the first unconsumed/invalid character
        source: The original message text
    """

    position: int
    source: str

    @staticmethod
    def guard(node: object) -> TypeIs["Junk"]:
        """Type guard for Junk (used to surface parse errors)."""
        return isinstance(node, Junk)


@dataclass(frozen=True, slots=True)
class ParamRef:
    """Positional parameter reference: $1, $2, ..."""

    index: int
    span: Span | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Validate 1-based index."""
        if self.index < 1:
            msg = f"ParamRef index must be >= 1, got {self.index}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class TemplateCall:
    """Template invocation: {{NAME}} or {{NAME:arg|arg|...}}.

    Attributes:
        name: Template name as written (surrounding whitespace removed)
        args: Parsed arguments; empty when no ':' followed the name

    Examples:
        {{SITENAME}}                  -> TemplateCall("SITENAME", ())
        {{PLURAL:$1|item|items}}      -> TemplateCall("PLURAL", ($1, item, items))
        {{int:helppage}}              -> TemplateCall("int", (helppage,))
    """

    name: str
    args: tuple["Node", ...] = ()
    span: Span | None = field(default=None, compare=False, repr=False)

    @property
    def key(self) -> str:
        """Case-insensitive name used to pick the construct."""
        return self.name.lower()

    @staticmethod
    def guard(node: object) -> TypeIs["TemplateCall"]:
        """Type guard for TemplateCall."""
        return isinstance(node, TemplateCall)


@dataclass(frozen=True, slots=True)
class Link:
    """Internal [[target|display]] or external [url display] link.

    Attributes:
        target: Page name (internal) or URL (external)
        display: Visible text; None when no display part was written.
            An empty Concat means "[[Target|]]" (pipe trick).
        external: True for [url display]
    """

    target: "Node"
    display: "Node | None" = None
    external: bool = False
    span: Span | None = field(default=None, compare=False, repr=False)

    @property
    def is_pipe_trick(self) -> bool:
        """True for [[Target|]]: a pipe followed by no display text."""
        return (
            not self.external
            and isinstance(self.display, Concat)
            and not self.display.children
        )


@dataclass(frozen=True, slots=True)
class Concat:
    """Sequential composition of nodes."""

    children: tuple["Node", ...] = ()
    span: Span | None = field(default=None, compare=False, repr=False)

    @staticmethod
    def guard(node: object) -> TypeIs["Concat"]:
        """Type guard for Concat."""
        return isinstance(node, Concat)


# ============================================================================
# TYPE ALIASES
# ============================================================================

type Node = Literal | ParamRef | TemplateCall | Link | Concat
"""Any message AST node (Junk is a Literal)."""

type ASTNode = Node
