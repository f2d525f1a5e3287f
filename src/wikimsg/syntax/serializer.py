"""Serialize a message AST back to message source.

Useful for:
- Tools that rewrite messages (rename a parameter, swap a link target)
- Property-based testing (roundtrip: parse -> serialize -> parse)

Serialization normalizes: template names lose surrounding whitespace,
arguments are always introduced with ":" and external links use a single
space between URL and display text.

Python 3.13+.
"""

from .ast import Concat, Junk, Link, Literal, Node, ParamRef, TemplateCall
from .visitor import ASTVisitor

__all__ = ["MessageSerializer", "serialize"]


class MessageSerializer(ASTVisitor):
    """Converts an AST back to message source.

    All serialization state is local to the serialize() call.

    Usage:
        >>> from wikimsg.syntax import parse, MessageSerializer
        >>> MessageSerializer().serialize(parse("Found $1 {{PLURAL:$1|item|items}}"))
        'Found $1 {{PLURAL:$1|item|items}}'
    """

    def serialize(self, node: Node) -> str:
        """Serialize node to message source.

        Raises:
            DepthLimitExceededError: If the AST is nested deeper than max_depth
        """
        output: list[str] = []
        self._serialize_node(node, output)
        return "".join(output)

    def _serialize_node(self, node: Node, output: list[str]) -> None:
        with self._depth_guard:
            match node:
                case Junk():
                    # A refused message is kept as written
                    output.append(node.source)
                case Literal():
                    output.append(node.text)
                case ParamRef():
                    output.append(f"${node.index}")
                case TemplateCall():
                    self._serialize_template_call(node, output)
                case Link():
                    self._serialize_link(node, output)
                case Concat():
                    for child in node.children:
                        self._serialize_node(child, output)

    def _serialize_template_call(self, node: TemplateCall, output: list[str]) -> None:
        output.append("{{")
        output.append(node.name)
        for i, arg in enumerate(node.args):
            output.append(":" if i == 0 else "|")
            self._serialize_node(arg, output)
        output.append("}}")

    def _serialize_link(self, node: Link, output: list[str]) -> None:
        if node.external:
            output.append("[")
            self._serialize_node(node.target, output)
            output.append(" ")
            if node.display is not None:
                self._serialize_node(node.display, output)
            output.append("]")
            return

        output.append("[[")
        self._serialize_node(node.target, output)
        if node.display is not None:
            output.append("|")
            self._serialize_node(node.display, output)
        output.append("]]")


def serialize(node: Node) -> str:
    """Serialize an AST to message source.

    Convenience function for MessageSerializer.serialize().

    Example:
        >>> from wikimsg.syntax import parse, serialize
        >>> serialize(parse("[[Main Page|Main|Page]]"))
        '[[Main Page|Main|Page]]'
    """
    return MessageSerializer().serialize(node)
