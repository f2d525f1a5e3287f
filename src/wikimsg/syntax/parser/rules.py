"""Grammar rules for the message mini-language.

This module provides the parsing rules for every construct:
- Positional parameters: $1, $2, ...
- Template calls: {{NAME}}, {{NAME:arg|arg|...}}
- Internal links: [[target]], [[target|display]]
- External links: [url display]

All rules are co-located in a single module because they are mutually
recursive (template arguments and link parts are themselves sequences).

Lookahead:
    - `$` followed by an ASCII digit starts a ParamRef
    - `{{` starts a TemplateCall
    - `[[` starts an internal Link
    - `[` followed by a non-space, non-bracket character starts an external Link

Literal pass-through:
    Every rule returns None when the construct is not well-formed (no
    closing delimiter, empty name, no space in an external link). The
    sequence rule then keeps the opening character as literal text and
    moves on. Translator text like "50% {{" or "[INFO]" therefore renders
    verbatim instead of failing.

Security:
    Nesting depth is bounded. Exceeding the limit raises MessageSyntaxError,
    which the parser turns into a Junk node for the whole message.
"""

from dataclasses import dataclass, field

from wikimsg.constants import MAX_DEPTH
from wikimsg.diagnostics import ErrorTemplate, MessageSyntaxError
from wikimsg.syntax.ast import Concat, Link, Literal, Node, ParamRef, Span, TemplateCall
from wikimsg.syntax.cursor import Cursor, ParseResult
from wikimsg.syntax.parser.primitives import (
    ASCII_DIGITS,
    is_template_name_char,
    parse_digits,
)

__all__ = [
    "ParseContext",
    "parse_external_link",
    "parse_internal_link",
    "parse_param_ref",
    "parse_sequence",
    "parse_template_call",
]

# Terminators for each kind of nested sequence.
_TEMPLATE_ARG_STOPS: tuple[str, ...] = ("|", "}}")
_LINK_TARGET_STOPS: tuple[str, ...] = ("|", "]]")
# Only the first "|" splits target from display; later ones are text.
_LINK_DISPLAY_STOPS: tuple[str, ...] = ("]]",)
_EXTLINK_STOPS: tuple[str, ...] = ("]",)

_INLINE_SPACE: tuple[str, ...] = (" ", "\t")


@dataclass(slots=True)
class ParseContext:
    """Explicit context for parsing operations.

    A construct parses the same way wherever an enclosing sequence meets
    it, so its outcome is recorded per start position for the whole parse.
    An outer sequence that reaches an unterminated opener again (as in
    "{{a:{{a:{{a:...") reuses the recorded None instead of re-parsing it.

    Attributes:
        max_nesting_depth: Maximum allowed construct nesting depth
        current_depth: Current nesting depth (0 = top level)
        outcomes: Construct start position -> parse outcome (None = literal),
            shared by every context of one parse
    """

    max_nesting_depth: int = MAX_DEPTH
    current_depth: int = 0
    outcomes: dict[int, ParseResult[Node] | None] = field(default_factory=dict)

    def is_depth_exceeded(self) -> bool:
        """Check if maximum nesting depth has been exceeded."""
        return self.current_depth >= self.max_nesting_depth

    def enter_construct(self, position: int) -> "ParseContext":
        """Create new context with incremented depth for a nested construct.

        Raises:
            MessageSyntaxError: If the nesting limit is already reached
        """
        if self.is_depth_exceeded():
            raise MessageSyntaxError(
                ErrorTemplate.nesting_depth_exceeded(self.max_nesting_depth, position),
                position=position,
            )
        return ParseContext(
            max_nesting_depth=self.max_nesting_depth,
            current_depth=self.current_depth + 1,
            outcomes=self.outcomes,
        )


def _at_stop(cursor: Cursor, stops: tuple[str, ...], stop_at_space: bool) -> bool:
    """Check whether the enclosing construct ends at this position."""
    if stop_at_space and cursor.current.isspace():
        return True
    return any(cursor.startswith(stop) for stop in stops)


def _parse_construct(cursor: Cursor, context: ParseContext) -> ParseResult[Node] | None:
    """Dispatch on lookahead to the rule that may start here."""
    ch = cursor.current
    if ch == "$":
        return parse_param_ref(cursor)
    if ch == "{" and cursor.startswith("{{"):
        rule = parse_template_call
    elif ch == "[":
        rule = parse_internal_link if cursor.startswith("[[") else parse_external_link
    else:
        return None

    if cursor.pos in context.outcomes:
        return context.outcomes[cursor.pos]
    result = rule(cursor, context)
    context.outcomes[cursor.pos] = result
    return result


def parse_sequence(
    cursor: Cursor,
    context: ParseContext,
    stops: tuple[str, ...] = (),
    *,
    stop_at_space: bool = False,
) -> ParseResult[Concat]:
    """Parse literal runs and constructs until a terminator or EOF.

    Args:
        cursor: Current position in source
        context: Parse context for depth tracking
        stops: Tokens that end the sequence (not consumed)
        stop_at_space: Also end the sequence at any whitespace character

    Returns:
        ParseResult(Concat, cursor_at_terminator_or_eof). Never fails.

    Example:
        "Foo $1 baz" -> Concat(Literal("Foo "), ParamRef(1), Literal(" baz"))
    """
    children: list[Node] = []
    seq_start = cursor.pos
    text_start: int | None = None

    def flush(end: int) -> None:
        nonlocal text_start
        if text_start is not None and end > text_start:
            text = cursor.source[text_start:end]
            children.append(Literal(text=text, span=Span(text_start, end)))
        text_start = None

    while not cursor.is_eof:
        if _at_stop(cursor, stops, stop_at_space):
            break

        result = _parse_construct(cursor, context)
        if result is None:
            if text_start is None:
                text_start = cursor.pos
            cursor = cursor.advance()
            continue

        flush(cursor.pos)
        children.append(result.value)
        cursor = result.cursor

    flush(cursor.pos)
    return ParseResult(Concat(children=tuple(children), span=Span(seq_start, cursor.pos)), cursor)


def parse_param_ref(cursor: Cursor) -> ParseResult[Node] | None:
    """Parse positional parameter: $N (N >= 1).

    Examples:
        $1   -> ParamRef(1)
        $12  -> ParamRef(12)
        $x   -> None ("$" stays literal)
        $0   -> None (parameters are 1-based)
    """
    start = cursor.pos
    following = cursor.peek(1)
    if cursor.current != "$" or following is None or following not in ASCII_DIGITS:
        return None

    digits = parse_digits(cursor.advance())
    if digits is None or digits.value == 0:
        return None
    return ParseResult(ParamRef(index=digits.value, span=Span(start, digits.cursor.pos)), digits.cursor)


def parse_template_call(cursor: Cursor, context: ParseContext) -> ParseResult[Node] | None:
    """Parse template call: {{NAME}} or {{NAME:arg|arg|...}}.

    The name runs to the first ":" (or "|", or "}}"); each argument is a
    full sequence, so $N, nested templates and links may appear inside.

    Examples:
        {{SITENAME}}             -> TemplateCall("SITENAME", ())
        {{PLURAL:$1|item|items}} -> TemplateCall("PLURAL", (Concat($1), Concat(item), Concat(items)))
        {{gender}}               -> TemplateCall("gender", ())
        {{PLURAL:$1|a            -> None (unterminated, rendered literally)

    Args:
        cursor: Position AT the opening "{{"
        context: Parse context for depth tracking

    Returns:
        ParseResult(TemplateCall, cursor_after_closing_braces) or None
    """
    start = cursor.pos
    nested = context.enter_construct(start)
    cursor = cursor.advance(2)

    name_start = cursor.pos
    while not cursor.is_eof and is_template_name_char(cursor.current):
        if cursor.startswith("}}"):
            break
        cursor = cursor.advance()
    name = cursor.source[name_start : cursor.pos].strip()
    if not name or cursor.is_eof:
        return None

    if cursor.startswith("}}"):
        cursor = cursor.advance(2)
        return ParseResult(TemplateCall(name=name, args=(), span=Span(start, cursor.pos)), cursor)

    if cursor.current not in (":", "|"):
        return None
    cursor = cursor.advance()

    args: list[Node] = []
    while True:
        arg = parse_sequence(cursor, nested, _TEMPLATE_ARG_STOPS)
        args.append(arg.value)
        cursor = arg.cursor
        if cursor.startswith("}}"):
            cursor = cursor.advance(2)
            call = TemplateCall(name=name, args=tuple(args), span=Span(start, cursor.pos))
            return ParseResult(call, cursor)
        if cursor.is_eof:
            return None
        cursor = cursor.advance()  # Skip |


def parse_internal_link(cursor: Cursor, context: ParseContext) -> ParseResult[Node] | None:
    """Parse internal link: [[target]] or [[target|display]].

    Only the first "|" separates target from display:
    [[Main Page|Main|Page]] displays "Main|Page".

    [[Target|]] parses to a Link whose display is an empty Concat; the
    evaluator reports it as a parse error.

    Args:
        cursor: Position AT the opening "[["
        context: Parse context for depth tracking

    Returns:
        ParseResult(Link, cursor_after_closing_brackets) or None
    """
    start = cursor.pos
    nested = context.enter_construct(start)
    cursor = cursor.advance(2)

    target = parse_sequence(cursor, nested, _LINK_TARGET_STOPS)
    cursor = target.cursor
    if not target.value.children or cursor.is_eof:
        return None

    if cursor.startswith("]]"):
        cursor = cursor.advance(2)
        return ParseResult(Link(target=target.value, span=Span(start, cursor.pos)), cursor)

    cursor = cursor.advance()  # Skip |
    display = parse_sequence(cursor, nested, _LINK_DISPLAY_STOPS)
    closed = display.cursor.expect("]]")
    if closed is None:
        return None
    link = Link(target=target.value, display=display.value, span=Span(start, closed.pos))
    return ParseResult(link, closed)


def parse_external_link(cursor: Cursor, context: ParseContext) -> ParseResult[Node] | None:
    """Parse external link: [url display].

    The URL runs to the first whitespace; it may contain $N and templates.
    Without whitespace before "]" the brackets are literal text ("[INFO]").

    Examples:
        [https://www.mediawiki.org/ MediaWiki] -> Link(url, "MediaWiki", external=True)
        [$1 bar]                               -> Link(ParamRef(1), "bar", external=True)

    Args:
        cursor: Position AT the opening "["
        context: Parse context for depth tracking

    Returns:
        ParseResult(Link, cursor_after_closing_bracket) or None
    """
    start = cursor.pos
    first = cursor.peek(1)
    if first is None or first.isspace() or first in ("[", "]"):
        return None
    nested = context.enter_construct(start)
    cursor = cursor.advance()

    target = parse_sequence(cursor, nested, _EXTLINK_STOPS, stop_at_space=True)
    cursor = target.cursor
    if cursor.is_eof or cursor.current not in _INLINE_SPACE:
        return None

    display = parse_sequence(cursor.skip_spaces(), nested, _EXTLINK_STOPS)
    closed = display.cursor.expect("]")
    if closed is None:
        return None
    shown = display.value if display.value.children else None
    link = Link(target=target.value, display=shown, external=True, span=Span(start, closed.pos))
    return ParseResult(link, closed)
