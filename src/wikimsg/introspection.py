"""Static analysis of raw messages.

Answers questions about a translation without rendering it: which
parameters it uses, which templates it calls, which pages it links to and
which other messages it pulls in. Translation tooling uses this to check
that a translation uses the same $N parameters as the source message.

Python 3.13+.
"""

from collections.abc import Callable
from dataclasses import dataclass

from wikimsg.enums import TemplateName
from wikimsg.syntax import (
    ASTVisitor,
    Concat,
    Junk,
    Link,
    Literal,
    MessageParser,
    Node,
    ParamRef,
    TemplateCall,
    serialize,
)

__all__ = [
    "MessageIntrospection",
    "introspect_message",
    "normalize_message_key",
    "requires_parsing",
]

_KNOWN_TEMPLATES: frozenset[str] = frozenset(name.value for name in TemplateName)


def requires_parsing(raw: str) -> bool:
    """Check whether a message needs the full parser.

    Messages without "{{" or "[" can only contain $N parameters and plain
    text, so substitution alone renders them.

    Examples:
        >>> requires_parsing("{{int:message}}")
        True
        >>> requires_parsing("[https://www.mediawiki.org/ MediaWiki]")
        True
        >>> requires_parsing("Other message $1")
        False
    """
    return "{{" in raw or "[" in raw


def normalize_message_key(name: str) -> str:
    """Message key for a nested lookup: trimmed, first letter lowercased.

    Example:
        >>> normalize_message_key(" Helppage ")
        'helppage'
    """
    name = name.strip()
    return name[:1].lower() + name[1:]


@dataclass(frozen=True, slots=True)
class MessageIntrospection:
    """What a message uses.

    Attributes:
        parameters: $N indexes referenced anywhere in the message
        templates: Built-in template names called (lowercase)
        message_references: Keys of nested messages ({{int:key}} and unknown
            template names); only statically known keys are listed
        link_targets: Source text of each link target, in order
        has_parse_error: True if the parser refused the message
    """

    parameters: frozenset[int]
    templates: frozenset[str]
    message_references: frozenset[str]
    link_targets: tuple[str, ...]
    has_parse_error: bool = False

    @property
    def max_parameter(self) -> int:
        """Highest $N used (0 if none): the argument count a caller must supply."""
        return max(self.parameters, default=0)


def _static_text(node: object) -> str | None:
    """Text of a node made only of literals, else None."""
    match node:
        case Literal():
            return node.text
        case Concat():
            parts = [_static_text(child) for child in node.children]
            if any(part is None for part in parts):
                return None
            return "".join(part for part in parts if part is not None)
        case _:
            return None


class _IntrospectionVisitor(ASTVisitor):
    """Collects parameters, templates, references and links."""

    def __init__(self) -> None:
        super().__init__()
        self.parameters: set[int] = set()
        self.templates: set[str] = set()
        self.references: set[str] = set()
        self.links: list[str] = []
        self.has_parse_error = False

    def visit_Junk(self, node: Junk) -> Junk:
        self.has_parse_error = True
        return node

    def visit_ParamRef(self, node: ParamRef) -> ParamRef:
        self.parameters.add(node.index)
        return node

    def visit_TemplateCall(self, node: TemplateCall) -> TemplateCall:
        if node.key not in _KNOWN_TEMPLATES:
            self.references.add(normalize_message_key(node.name))
            return self.generic_visit(node)

        self.templates.add(node.key)
        if node.key == TemplateName.INT and node.args:
            key = _static_text(node.args[0])
            if key is not None:
                self.references.add(normalize_message_key(key))
        return self.generic_visit(node)

    def visit_Link(self, node: Link) -> Link:
        self.links.append(serialize(node.target))
        if node.is_pipe_trick:
            self.has_parse_error = True
        return self.generic_visit(node)


def introspect_message(
    raw: str, *, parse: Callable[[str], Node] | None = None
) -> MessageIntrospection:
    """Analyze a raw message without rendering it.

    Example:
        >>> info = introspect_message("{{GENDER:$1|User}}: $2 {{PLURAL:$2|edit|edits}}")
        >>> sorted(info.parameters), sorted(info.templates)
        ([1, 2], ['gender', 'plural'])
    """
    tree = parse(raw) if parse is not None else MessageParser().parse(raw)
    visitor = _IntrospectionVisitor()
    visitor.visit(tree)
    return MessageIntrospection(
        parameters=frozenset(visitor.parameters),
        templates=frozenset(visitor.templates),
        message_references=frozenset(visitor.references),
        link_targets=tuple(visitor.links),
        has_parse_error=visitor.has_parse_error,
    )
