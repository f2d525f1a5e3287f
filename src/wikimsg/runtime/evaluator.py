"""Message evaluator - converts ASTs to rendered trees.

Walks a parsed message against positional arguments and a LanguageProfile,
expanding nested messages through a lookup callable, and produces a
RenderedNode tree that keeps escaped text and trusted markup apart.

Error handling:
    - Collects errors instead of raising them
    - Returns (rendered, errors) tuples
    - Every failure degrades to visible output: "$3" for a missing
      argument, "[key]" for a missing nested message, the word unchanged
      for an unknown grammatical case, the number unchanged when it cannot
      be formatted, and "<key>: Parse error at position N in input: ..."
      for a message the engine refuses to interpret

Thread Safety:
    Resolution state is passed explicitly via ResolutionContext. The
    evaluator itself holds only immutable configuration.

Python 3.13+. Indirect dependency: Babel (via LanguageProfile).
"""

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from wikimsg.constants import FALLBACK_MISSING_MESSAGE, MAX_DEPTH, SAFE_URL_SCHEMES
from wikimsg.core.depth_guard import DepthGuard, DepthLimitExceededError
from wikimsg.diagnostics import (
    ErrorTemplate,
    MessageCyclicReferenceError,
    MessageError,
    MessageReferenceError,
    MessageResolutionError,
    MessageSyntaxError,
    NumeralError,
)
from wikimsg.enums import Gender, TemplateName
from wikimsg.introspection import normalize_message_key, requires_parsing
from wikimsg.runtime.cache import ParseCache
from wikimsg.runtime.language import LanguageProfile
from wikimsg.runtime.renderer import to_text
from wikimsg.runtime.rendered import (
    Anchor,
    Escaped,
    Fragment,
    GenderedUser,
    HtmlProvider,
    Raw,
    RenderedNode,
    is_rendered_node,
)
from wikimsg.syntax import Concat, Junk, Link, Literal, Node, ParamRef, TemplateCall, serialize

__all__ = ["Argument", "MessageEvaluator", "MessageLookup", "ResolutionContext", "TitleResolver"]

logger = logging.getLogger(__name__)

type Argument = object
"""A positional argument: str, number, TrustedHtml / __html__ object,
RenderedNode, a list of those, or a GenderedUser."""

type MessageLookup = Callable[[str], str | None]
"""Key -> raw message text, or None when the message does not exist."""

type TitleResolver = Callable[[str], str]
"""Page title -> URL for internal links."""

# Longest message excerpt included in debug logs
_LOG_EXCERPT: int = 50

_PARAM_RE = re.compile(r"\$([0-9]+)", re.ASCII)

_EXPLICIT_FORM_RE = re.compile(r"^\s*([0-9]+)=", re.ASCII)

_URL_SCHEME_RE = re.compile(r"([A-Za-z][A-Za-z0-9+.-]*):")

# Browsers ignore these inside a scheme ("java\tscript:")
_URL_IGNORED_RE = re.compile(r"[\x00-\x20\x7f]")

_EMPTY = Escaped("")


@dataclass(slots=True)
class ResolutionContext:
    """Explicit per-render state.

    Attributes:
        stack: Keys of the messages being expanded (cycle detection)
        max_depth: Maximum nested message depth
        _seen: Set mirror of stack for O(1) membership checks
        _expression_guard: Bounds template/link nesting across nested messages
    """

    stack: list[str] = field(default_factory=list)
    max_depth: int = MAX_DEPTH
    _seen: set[str] = field(default_factory=set)
    _expression_guard: DepthGuard = field(init=False)

    def __post_init__(self) -> None:
        """Initialize the expression depth guard with the configured max depth."""
        self._expression_guard = DepthGuard(max_depth=self.max_depth)

    def push(self, key: str) -> None:
        """Push message key onto resolution stack."""
        self.stack.append(key)
        self._seen.add(key)

    def pop(self) -> str:
        """Pop message key from resolution stack."""
        key = self.stack.pop()
        self._seen.discard(key)
        return key

    def contains(self, key: str) -> bool:
        """Check if key is in resolution stack (cycle detection)."""
        return key in self._seen

    @property
    def depth(self) -> int:
        """Current resolution depth."""
        return len(self.stack)

    def is_depth_exceeded(self) -> bool:
        """Check if maximum depth has been reached."""
        return self.depth >= self.max_depth

    def get_cycle_path(self, key: str) -> list[str]:
        """Get the cycle path for error reporting."""
        return [*self.stack, key]

    @property
    def expression_guard(self) -> DepthGuard:
        """Depth guard for template and link nesting."""
        return self._expression_guard


def _missing(key: str) -> Escaped:
    return Escaped(FALLBACK_MISSING_MESSAGE.format(key=key))


def _parse_error(key: str, position: int, source: str) -> Escaped:
    return Escaped(ErrorTemplate.parse_error(key, position, source).message)


class MessageEvaluator:
    """Evaluates message ASTs to RenderedNode trees.

    Example:
        >>> evaluator = MessageEvaluator(build_profile("en"), lookup={}.get)
        >>> node, errors = evaluator.evaluate_message("plural-msg", "Found $1 {{PLURAL:$1|item|items}}", (2,))
        >>> to_text(node)
        'Found 2 items'
    """

    __slots__ = (
        "grammar_forms",
        "lookup",
        "max_depth",
        "parse",
        "profile",
        "site_name",
        "title_resolver",
    )

    def __init__(
        self,
        profile: LanguageProfile,
        *,
        lookup: MessageLookup,
        parse: Callable[[str], Node] | None = None,
        title_resolver: TitleResolver | None = None,
        site_name: str = "",
        grammar_forms: Mapping[str, Mapping[str, str]] | None = None,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        """Initialize evaluator.

        Args:
            profile: Language capabilities for the active locale
            lookup: Nested message lookup (key -> raw text or None)
            parse: Raw text -> AST (default: a private ParseCache)
            title_resolver: Page title -> URL (default: identity)
            site_name: Value of {{SITENAME}}
            grammar_forms: case -> word -> form overrides for {{GRAMMAR}}
            max_depth: Nested message and construct depth limit
        """
        self.profile = profile
        self.lookup = lookup
        self.parse = parse if parse is not None else ParseCache().get_or_parse
        self.title_resolver = title_resolver if title_resolver is not None else str
        self.site_name = site_name
        self.grammar_forms = grammar_forms or {}
        self.max_depth = max_depth

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def evaluate_message(
        self,
        key: str,
        raw: str,
        args: Sequence[Argument] = (),
        *,
        context: ResolutionContext | None = None,
    ) -> tuple[RenderedNode, tuple[MessageError, ...]]:
        """Evaluate raw message text.

        Returns:
            Tuple of (rendered, errors)
            - rendered: Best-effort output tree
            - errors: Tuple of errors encountered (immutable)
        """
        errors: list[MessageError] = []
        if context is None:
            context = ResolutionContext(max_depth=self.max_depth)
        result = self._evaluate_raw(key, raw, args, errors, context)
        return (result, tuple(errors))

    def evaluate(
        self,
        node: Node,
        args: Sequence[Argument] = (),
        *,
        key: str = "",
    ) -> tuple[RenderedNode, tuple[MessageError, ...]]:
        """Evaluate an already parsed AST.

        A pipe-trick link or an AST nested too deeply replaces the whole
        output with a diagnostic, exactly as for raw text.
        """
        errors: list[MessageError] = []
        context = ResolutionContext(max_depth=self.max_depth)
        try:
            result = self._evaluate_tree(key, node, args, errors, context)
        except MessageSyntaxError as e:
            errors.append(e)
            return (_parse_error(key, e.position, serialize(node)), tuple(errors))
        return (result, tuple(errors))

    # ------------------------------------------------------------------
    # Message level
    # ------------------------------------------------------------------

    def _evaluate_raw(
        self,
        key: str,
        raw: str,
        args: Sequence[Argument],
        errors: list[MessageError],
        context: ResolutionContext,
    ) -> RenderedNode:
        """Expand one message with cycle and depth protection."""
        if context.contains(key):
            cycle_path = context.get_cycle_path(key)
            errors.append(MessageCyclicReferenceError(ErrorTemplate.cyclic_reference(cycle_path)))
            logger.debug("Cyclic message reference: %s", " -> ".join(cycle_path))
            return _missing(key)

        if context.is_depth_exceeded():
            errors.append(
                MessageResolutionError(ErrorTemplate.max_depth_exceeded(key, context.max_depth))
            )
            return _missing(key)

        context.push(key)
        try:
            if not requires_parsing(raw):
                return self._substitute(raw, args, errors)

            tree = self.parse(raw)
            if Junk.guard(tree):
                errors.append(
                    MessageSyntaxError(
                        ErrorTemplate.parse_error(key, tree.position, tree.source),
                        position=tree.position,
                    )
                )
                logger.debug("Message '%s' refused by parser: %.50s", key, raw)
                return _parse_error(key, tree.position, tree.source)

            try:
                return self._evaluate_tree(key, tree, args, errors, context)
            except MessageSyntaxError as e:
                errors.append(e)
                logger.debug("Parse error in message '%s': %.*s", key, _LOG_EXCERPT, raw)
                return _parse_error(key, e.position, raw)
        finally:
            context.pop()

    def _evaluate_tree(
        self,
        key: str,
        tree: Node,
        args: Sequence[Argument],
        errors: list[MessageError],
        context: ResolutionContext,
    ) -> RenderedNode:
        try:
            return self._eval(tree, args, errors, context)
        except DepthLimitExceededError as e:
            errors.append(e)
            return _missing(key)

    def _substitute(
        self,
        raw: str,
        args: Sequence[Argument],
        errors: list[MessageError],
    ) -> RenderedNode:
        """Fast path for messages with no templates or links: $N only."""
        parts: list[RenderedNode] = []
        last = 0
        for match in _PARAM_RE.finditer(raw):
            index = int(match.group(1))
            if index == 0:
                continue
            if match.start() > last:
                parts.append(Escaped(raw[last : match.start()]))
            parts.append(self._param(index, args, errors))
            last = match.end()
        if last < len(raw):
            parts.append(Escaped(raw[last:]))
        return Fragment(tuple(parts))

    # ------------------------------------------------------------------
    # Node level
    # ------------------------------------------------------------------

    def _eval(
        self,
        node: Node,
        args: Sequence[Argument],
        errors: list[MessageError],
        context: ResolutionContext,
    ) -> RenderedNode:
        match node:
            case Junk():
                errors.append(
                    MessageSyntaxError(
                        ErrorTemplate.parse_error("", node.position, node.source),
                        position=node.position,
                    )
                )
                return Escaped(node.text)
            case Literal():
                return Escaped(node.text)
            case ParamRef():
                return self._param(node.index, args, errors)
            case Concat():
                return Fragment(tuple(self._eval(c, args, errors, context) for c in node.children))
            case TemplateCall():
                with context.expression_guard:
                    return self._eval_template(node, args, errors, context)
            case Link():
                with context.expression_guard:
                    return self._eval_link(node, args, errors, context)
            case _:
                errors.append(MessageResolutionError(ErrorTemplate.unknown_node(type(node).__name__)))
                return _EMPTY

    def _text(
        self,
        node: Node,
        args: Sequence[Argument],
        errors: list[MessageError],
        context: ResolutionContext,
    ) -> str:
        """Evaluate a node and reduce it to plain text."""
        return to_text(self._eval(node, args, errors, context))

    def _param(self, index: int, args: Sequence[Argument], errors: list[MessageError]) -> RenderedNode:
        """$N: the argument, or the literal token when not supplied."""
        if index > len(args):
            errors.append(
                MessageReferenceError(ErrorTemplate.parameter_not_provided(index, len(args)))
            )
            return Escaped(f"${index}")
        return self._argument_node(args[index - 1])

    def _argument_node(self, value: Argument) -> RenderedNode:
        """Convert a caller argument; only caller-marked markup becomes Raw."""
        if is_rendered_node(value):
            return value
        if isinstance(value, HtmlProvider):
            return Raw(value.__html__())
        if isinstance(value, (list, tuple)):
            return Fragment(tuple(self._argument_node(item) for item in value))
        return Escaped(str(value))

    @staticmethod
    def _argument_of(node: Node, args: Sequence[Argument]) -> Argument | None:
        """The argument object when node is exactly one supplied $N."""
        if isinstance(node, Concat) and len(node.children) == 1:
            node = node.children[0]
        if isinstance(node, ParamRef) and node.index <= len(args):
            return args[node.index - 1]
        return None

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def _eval_template(
        self,
        node: TemplateCall,
        args: Sequence[Argument],
        errors: list[MessageError],
        context: ResolutionContext,
    ) -> RenderedNode:
        match node.key:
            case TemplateName.PLURAL:
                return self._eval_plural(node, args, errors, context)
            case TemplateName.GENDER:
                return self._eval_gender(node, args, errors, context)
            case TemplateName.GRAMMAR:
                return self._eval_grammar(node, args, errors, context)
            case TemplateName.FORMATNUM:
                return self._eval_formatnum(node, args, errors, context)
            case TemplateName.INT:
                if not node.args:
                    return self._argument_missing(node, "message key", errors)
                key = normalize_message_key(self._text(node.args[0], args, errors, context))
                return self._eval_nested(key, errors, context)
            case TemplateName.SITENAME:
                return Escaped(self.site_name)
            case _:
                return self._eval_nested(normalize_message_key(node.name), errors, context)

    def _argument_missing(
        self, node: TemplateCall, argument: str, errors: list[MessageError]
    ) -> RenderedNode:
        errors.append(
            MessageResolutionError(ErrorTemplate.template_argument_missing(node.name, argument))
        )
        return _EMPTY

    def _eval_nested(
        self, key: str, errors: list[MessageError], context: ResolutionContext
    ) -> RenderedNode:
        """{{int:key}} / {{key}}: expand another message with no arguments.

        key arrives with its first letter lowercased; the fully lowercased key
        is tried next, and a missing message renders as [lowercased key].
        """
        raw = self.lookup(key)
        if raw is None and key.lower() != key:
            key = key.lower()
            raw = self.lookup(key)
        if raw is None:
            errors.append(MessageReferenceError(ErrorTemplate.message_not_found(key)))
            logger.debug("Nested message '%s' not found", key)
            return _missing(key)
        return self._evaluate_raw(key, raw, (), errors, context)

    def _eval_plural(
        self,
        node: TemplateCall,
        args: Sequence[Argument],
        errors: list[MessageError],
        context: ResolutionContext,
    ) -> RenderedNode:
        """{{PLURAL:count|form|form|...}} with optional explicit N=form forms."""
        if len(node.args) < 2:
            return self._argument_missing(node, "forms", errors)

        count_text = self._text(node.args[0], args, errors, context)
        explicit: list[tuple[Decimal, Node]] = []
        forms: list[Node] = []
        for form in node.args[1:]:
            split = _split_explicit_form(form)
            if split is None:
                forms.append(form)
            else:
                explicit.append(split)

        try:
            count = self.profile.numerals.to_decimal(count_text)
        except NumeralError:
            errors.append(MessageResolutionError(ErrorTemplate.plural_count_invalid(count_text)))
            logger.debug("PLURAL count is not a number: %.*s", _LOG_EXCERPT, count_text)
            chosen = forms[-1] if forms else explicit[-1][1]
            return self._eval(chosen, args, errors, context)

        for value, form in explicit:
            if value == count:
                return self._eval(form, args, errors, context)
        if not forms:
            return _EMPTY

        index = self.profile.plural_index(count, len(forms))
        return self._eval(forms[index], args, errors, context)

    def _eval_gender(
        self,
        node: TemplateCall,
        args: Sequence[Argument],
        errors: list[MessageError],
        context: ResolutionContext,
    ) -> RenderedNode:
        """{{GENDER:who|male|female|neutral}}; missing forms repeat the last one."""
        if not node.args:
            return self._argument_missing(node, "gender", errors)
        forms = list(node.args[1:])
        if not forms:
            return _EMPTY

        subject = self._argument_of(node.args[0], args)
        if isinstance(subject, GenderedUser):
            gender = str(subject.gender)
        elif isinstance(subject, str):
            gender = subject
        else:
            gender = self._text(node.args[0], args, errors, context)
        gender = gender.strip()

        while len(forms) < 3:
            forms.append(forms[-1])
        match gender:
            case Gender.MALE:
                chosen = forms[0]
            case Gender.FEMALE:
                chosen = forms[1]
            case _:
                chosen = forms[2]
        return self._eval(chosen, args, errors, context)

    def _eval_grammar(
        self,
        node: TemplateCall,
        args: Sequence[Argument],
        errors: list[MessageError],
        context: ResolutionContext,
    ) -> RenderedNode:
        """{{GRAMMAR:case|word}}: declined word, or the word unchanged."""
        if len(node.args) < 2:
            return self._argument_missing(node, "word", errors)

        case = self._text(node.args[0], args, errors, context).strip()
        word = self._text(node.args[1], args, errors, context)

        override = self.grammar_forms.get(case, {}).get(word)
        if override is not None:
            return Escaped(override)
        if not self.profile.supports_grammar_case(case):
            errors.append(
                MessageResolutionError(
                    ErrorTemplate.grammar_case_unsupported(case, self.profile.locale_code)
                )
            )
            logger.debug(
                "Grammatical case '%s' not defined for '%s'", case, self.profile.locale_code
            )
            return Escaped(word)
        return Escaped(self.profile.grammar_case(word, case))

    def _eval_formatnum(
        self,
        node: TemplateCall,
        args: Sequence[Argument],
        errors: list[MessageError],
        context: ResolutionContext,
    ) -> RenderedNode:
        """{{formatnum:number}} and {{formatnum:localized|R}}."""
        if not node.args:
            return self._argument_missing(node, "number", errors)

        raw_value = self._argument_of(node.args[0], args)
        text = self._text(node.args[0], args, errors, context)
        reverse = len(node.args) > 1 and self._text(node.args[1], args, errors, context).strip() == "R"

        if reverse:
            try:
                return Escaped(self.profile.numerals.parse_integer(text))
            except NumeralError as e:
                errors.append(e)
                logger.debug("formatnum|R input is not a number: %.*s", _LOG_EXCERPT, text)
                return Escaped(text)

        value = raw_value if isinstance(raw_value, (int, float, Decimal)) else text
        return Escaped(self.profile.format_number(value))

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def _eval_link(
        self,
        node: Link,
        args: Sequence[Argument],
        errors: list[MessageError],
        context: ResolutionContext,
    ) -> RenderedNode:
        target = self._text(node.target, args, errors, context)

        if node.is_pipe_trick:
            position = node.span.start if node.span is not None else 0
            raise MessageSyntaxError(
                ErrorTemplate.pipe_trick_unsupported(target, position), position=position
            )

        if node.display is not None:
            display = self._eval(node.display, args, errors, context)
        else:
            display = Escaped(target)

        if node.external:
            if not _is_safe_url(target):
                errors.append(MessageResolutionError(ErrorTemplate.unsafe_link_target(target)))
                logger.debug("External link target dropped: %.*s", _LOG_EXCERPT, target)
                return display
            return Anchor(href=target, children=(display,))
        return Anchor(href=self.title_resolver(target), children=(display,), title=target)


def _is_safe_url(url: str) -> bool:
    """True for scheme-less URLs and those whose scheme is in SAFE_URL_SCHEMES."""
    match = _URL_SCHEME_RE.match(_URL_IGNORED_RE.sub("", url))
    return match is None or match.group(1).lower() in SAFE_URL_SCHEMES


def _split_explicit_form(form: Node) -> tuple[Decimal, Node] | None:
    """Split "N=text" into (N, text); None for an ordinary form."""
    children = form.children if isinstance(form, Concat) else (form,)
    if not children or not isinstance(children[0], Literal):
        return None
    head = children[0]
    match = _EXPLICIT_FORM_RE.match(head.text)
    if match is None:
        return None
    rest = head.text[match.end() :]
    remainder: tuple[Node, ...] = ((Literal(rest),) if rest else ()) + tuple(children[1:])
    return (Decimal(match.group(1)), Concat(remainder))
