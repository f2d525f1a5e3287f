"""Visitor pattern for message AST traversal.

Follows the stdlib ast.NodeVisitor naming convention: handlers are named
visit_NodeName (PascalCase), e.g. visit_TemplateCall.

ASTVisitor[T] is generic over the return type of visit(); it defaults to
returning the visited node.

Python 3.13+.
"""

from collections.abc import Callable
from dataclasses import Field, fields
from typing import ClassVar

from wikimsg.constants import MAX_DEPTH
from wikimsg.core.depth_guard import DepthGuard

from .ast import ASTNode, Span

__all__ = ["ASTVisitor"]


class ASTVisitor[T = ASTNode]:
    """Base visitor for traversing message ASTs.

    generic_visit() traverses all child nodes; override visit_NodeType
    methods to add behavior and call generic_visit() to keep descending.

    Example:
        >>> class CountParams(ASTVisitor):
        ...     def __init__(self):
        ...         super().__init__()
        ...         self.count = 0
        ...
        ...     def visit_ParamRef(self, node):
        ...         self.count += 1
        ...         return node
        ...
        >>> visitor = CountParams()
        >>> visitor.visit(parse("$1 and $2"))
        >>> visitor.count
        2
    """

    __slots__ = ("_depth_guard", "_instance_dispatch_cache")

    # Method names per node type name, built once per subclass
    _class_visit_methods: ClassVar[dict[str, str]] = {}

    _fields_cache: ClassVar[dict[type, tuple[Field[object], ...]]] = {}

    def __init_subclass__(cls, **kwargs: object) -> None:
        """Build class-level dispatch table when subclass is defined."""
        super().__init_subclass__(**kwargs)
        cls._class_visit_methods = {}
        for name in dir(cls):
            if name.startswith("visit_") and name != "visit":
                cls._class_visit_methods[name[6:]] = name

    def __init__(self, *, max_depth: int | None = None) -> None:
        """Initialize visitor with depth guard and dispatch cache.

        Subclasses MUST call super().__init__().

        Args:
            max_depth: Maximum traversal depth (default: MAX_DEPTH)
        """
        self._depth_guard = DepthGuard(max_depth=max_depth if max_depth is not None else MAX_DEPTH)
        self._instance_dispatch_cache: dict[type, Callable[[ASTNode], T]] = {}

    def visit(self, node: ASTNode) -> T:
        """Dispatch to visit_<NodeType>, falling back to generic_visit."""
        node_type = type(node)
        method = self._instance_dispatch_cache.get(node_type)
        if method is None:
            method_name = self._class_visit_methods.get(node_type.__name__)
            method = getattr(self, method_name) if method_name else self.generic_visit
            self._instance_dispatch_cache[node_type] = method
        return method(node)

    @staticmethod
    def _node_fields(node_type: type) -> tuple[Field[object], ...]:
        if node_type not in ASTVisitor._fields_cache:
            ASTVisitor._fields_cache[node_type] = fields(node_type)
        return ASTVisitor._fields_cache[node_type]

    def generic_visit(self, node: ASTNode) -> T:
        """Visit every child node, with depth protection.

        Returns:
            The node itself

        Raises:
            DepthLimitExceededError: If traversal depth exceeds max_depth
        """
        with self._depth_guard:
            for node_field in self._node_fields(type(node)):
                value = getattr(node, node_field.name)
                if value is None or isinstance(value, (str, int, Span)):
                    continue
                if isinstance(value, tuple):
                    for item in value:
                        if hasattr(item, "__dataclass_fields__"):
                            self.visit(item)
                elif hasattr(value, "__dataclass_fields__"):
                    self.visit(value)

        return node  # type: ignore[return-value]  # T defaults to ASTNode
