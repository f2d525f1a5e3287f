"""Tests for AST serialization and the visitor base class."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from wikimsg.core import DepthLimitExceededError
from wikimsg.syntax import (
    ASTVisitor,
    Concat,
    Link,
    Literal,
    MessageParser,
    MessageSerializer,
    ParamRef,
    TemplateCall,
    parse,
    serialize,
)


class TestSerializer:
    """serialize() reproduces message source."""

    @pytest.mark.parametrize(
        "source",
        [
            "Foo $1 baz $2",
            "Found $1 {{PLURAL:$1|item|items}}",
            "{{SITENAME}}",
            "注册[[Special:ListUsers|用户]]",
            "[[Main Page|Main|Page]]",
            "[[Tampa, Florida|]]",
            "[https://www.mediawiki.org/ MediaWiki]",
            "[[{{Int:Helppage}}|help page]]",
            "50% {{ and [INFO] and $x",
        ],
    )
    def test_canonical_source_is_reproduced(self, source: str) -> None:
        assert serialize(parse(source)) == source

    def test_first_separator_normalized_to_colon(self) -> None:
        assert serialize(parse("{{ PLURAL |a|b}}")) == "{{PLURAL:a|b}}"

    def test_external_link_spacing_normalized(self) -> None:
        assert serialize(parse("[http://x    y]")) == "[http://x y]"

    def test_external_link_without_display(self) -> None:
        assert serialize(Link(Concat((Literal("http://x"),)), external=True)) == "[http://x ]"

    def test_junk_serializes_to_its_source(self) -> None:
        source = "{{a:{{b:{{c}}}}}}"
        junk = MessageParser(max_nesting_depth=2).parse(source)
        assert serialize(junk) == source

    def test_built_tree(self) -> None:
        tree = Concat(
            (
                Literal("Hi "),
                TemplateCall("GENDER", (Concat((ParamRef(1),)), Concat((Literal("he"),)))),
            )
        )
        assert serialize(tree) == "Hi {{GENDER:$1|he}}"

    def test_depth_limit(self) -> None:
        node: Concat = Concat((Literal("x"),))
        for _ in range(20):
            node = Concat((node,))
        with pytest.raises(DepthLimitExceededError):
            MessageSerializer(max_depth=10).serialize(node)

    @given(st.text(alphabet="ab $1{}[]|:", max_size=60))
    def test_roundtrip_is_stable(self, source: str) -> None:
        tree = parse(source)
        assert parse(serialize(tree)) == tree


class _ParamCollector(ASTVisitor):
    def __init__(self) -> None:
        super().__init__()
        self.indexes: list[int] = []

    def visit_ParamRef(self, node: ParamRef) -> ParamRef:
        self.indexes.append(node.index)
        return node


class _TemplateNames(ASTVisitor):
    def __init__(self) -> None:
        super().__init__()
        self.names: list[str] = []

    def visit_TemplateCall(self, node: TemplateCall) -> TemplateCall:
        self.names.append(node.key)
        return self.generic_visit(node)


class TestVisitor:
    """ASTVisitor dispatch and traversal."""

    def test_collects_params_in_nested_positions(self) -> None:
        visitor = _ParamCollector()
        visitor.visit(parse("$1 {{PLURAL:$2|[[$3|x]]|[$4 y]}}"))
        assert visitor.indexes == [1, 2, 3, 4]

    def test_handler_can_continue_descent(self) -> None:
        visitor = _TemplateNames()
        visitor.visit(parse("{{GRAMMAR:elative|{{SITENAME}}}} {{Int:x}}"))
        assert visitor.names == ["grammar", "sitename", "int"]

    def test_generic_visit_returns_node(self) -> None:
        tree = parse("plain")
        assert ASTVisitor().visit(tree) is tree

    def test_depth_limit(self) -> None:
        node: Concat = Concat((Literal("x"),))
        for _ in range(20):
            node = Concat((node,))
        with pytest.raises(DepthLimitExceededError):
            ASTVisitor(max_depth=5).visit(node)
