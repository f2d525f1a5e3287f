"""Tests for MessageEvaluator: AST -> rendered tree with collected errors."""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

import pytest

from wikimsg.core import DepthLimitExceededError
from wikimsg.diagnostics import (
    DiagnosticCode,
    MessageCyclicReferenceError,
    MessageReferenceError,
    MessageResolutionError,
    MessageSyntaxError,
    NumeralError,
)
from wikimsg.runtime import (
    Escaped,
    Fragment,
    MessageEvaluator,
    ParseCache,
    ResolutionContext,
    build_profile,
    to_html,
    to_text,
)
from wikimsg.syntax import Concat, Literal, MessageParser, TemplateCall, parse


def make_evaluator(
    locale: str = "en",
    messages: Mapping[str, str] | None = None,
    **kwargs: object,
) -> MessageEvaluator:
    return MessageEvaluator(build_profile(locale), lookup=dict(messages or {}).get, **kwargs)  # type: ignore[arg-type]


def codes(errors: tuple[Exception, ...]) -> list[DiagnosticCode]:
    return [e.diagnostic.code for e in errors if getattr(e, "diagnostic", None) is not None]  # type: ignore[attr-defined]


@dataclass
class User:
    gender: str


class TestResolutionContext:
    """Per-render resolution stack."""

    def test_push_pop(self) -> None:
        context = ResolutionContext(max_depth=3)
        context.push("a")
        context.push("b")
        assert context.contains("a")
        assert context.depth == 2
        assert context.get_cycle_path("a") == ["a", "b", "a"]
        assert context.pop() == "b"
        assert not context.contains("b")

    def test_depth_exceeded(self) -> None:
        context = ResolutionContext(max_depth=1)
        assert not context.is_depth_exceeded()
        context.push("a")
        assert context.is_depth_exceeded()

    def test_expression_guard_uses_max_depth(self) -> None:
        assert ResolutionContext(max_depth=7).expression_guard.max_depth == 7


class TestParameters:
    """$N substitution."""

    def test_missing_arguments_stay_literal(self) -> None:
        node, errors = make_evaluator().evaluate_message("replace", "Foo $1 baz $2", ("bar",))
        assert to_html(node) == "Foo bar baz $2"
        assert codes(errors) == [DiagnosticCode.PARAMETER_NOT_PROVIDED]
        assert isinstance(errors[0], MessageReferenceError)

    def test_arguments_are_escaped(self) -> None:
        node, errors = make_evaluator().evaluate_message(
            "plain-replace", "Foo $1", ('<bar bar="bar">&gt;</bar>',)
        )
        assert to_html(node) == "Foo &lt;bar bar=&quot;bar&quot;&gt;&amp;gt;&lt;/bar&gt;"
        assert errors == ()

    def test_numbers_are_stringified(self) -> None:
        node, _ = make_evaluator().evaluate_message("n", "$1/$2", (3, Decimal("1.5")))
        assert to_text(node) == "3/1.5"

    def test_rendered_node_argument_is_reused(self) -> None:
        inner = Fragment((Escaped("<x>"),))
        node, _ = make_evaluator().evaluate_message("outer", "[$1]", (inner,))
        assert to_html(node) == "[&lt;x&gt;]"

    def test_same_output_with_and_without_fast_path(self) -> None:
        evaluator = make_evaluator()
        fast, _ = evaluator.evaluate_message("m", "a $1 & $2 $0 $", ("<b>",))
        slow, _ = evaluator.evaluate(parse("a $1 & $2 $0 $"), ("<b>",))
        assert to_html(fast) == to_html(slow) == "a &lt;b&gt; &amp; $2 $0 $"

    def test_fast_path_skips_parser(self) -> None:
        cache = ParseCache()
        evaluator = make_evaluator(parse=cache.get_or_parse)
        evaluator.evaluate_message("other", "Other message $1", ("x",))
        assert len(cache) == 0
        evaluator.evaluate_message("link", "[[Some page]]")
        assert len(cache) == 1


class TestPlural:
    """{{PLURAL:count|forms}}."""

    @pytest.mark.parametrize(("count", "expected"), [(0, "items"), (1, "item"), (2, "items")])
    def test_english(self, count: int, expected: str) -> None:
        node, errors = make_evaluator().evaluate_message(
            "plural-msg", "Found $1 {{PLURAL:$1|item|items}}", (count,)
        )
        assert to_text(node) == f"Found {count} {expected}"
        assert errors == ()

    @pytest.mark.parametrize(
        ("count", "expected"),
        [(1, "файл"), (3, "файла"), (5, "файлов"), (21, "файл")],
    )
    def test_russian(self, count: int, expected: str) -> None:
        node, _ = make_evaluator("ru").evaluate_message(
            "files", "{{PLURAL:$1|файл|файла|файлов}}", (count,)
        )
        assert to_text(node) == expected

    def test_explicit_forms_win(self) -> None:
        evaluator = make_evaluator()
        raw = "{{PLURAL:$1|0=no items|one item|12=a dozen items|$1 items}}"
        assert to_text(evaluator.evaluate_message("m", raw, (0,))[0]) == "no items"
        assert to_text(evaluator.evaluate_message("m", raw, (1,))[0]) == "one item"
        assert to_text(evaluator.evaluate_message("m", raw, (12,))[0]) == "a dozen items"
        assert to_text(evaluator.evaluate_message("m", raw, (5,))[0]) == "5 items"

    def test_localized_count(self) -> None:
        node, errors = make_evaluator("ar").evaluate_message(
            "m", "{{PLURAL:$1|z|o|t|f|m|x}}", ("٣",)
        )
        assert to_text(node) == "f"
        assert errors == ()

    def test_invalid_count_uses_last_form(self) -> None:
        node, errors = make_evaluator().evaluate_message("m", "{{PLURAL:lots|item|items}}")
        assert to_text(node) == "items"
        assert codes(errors) == [DiagnosticCode.PLURAL_COUNT_INVALID]

    def test_single_form(self) -> None:
        node, _ = make_evaluator().evaluate_message("m", "{{PLURAL:$1|things}}", (1,))
        assert to_text(node) == "things"

    def test_missing_forms(self) -> None:
        node, errors = make_evaluator().evaluate_message("m", "a{{PLURAL:$1}}b", (1,))
        assert to_text(node) == "ab"
        assert codes(errors) == [DiagnosticCode.TEMPLATE_ARGUMENT_MISSING]


class TestGender:
    """{{GENDER:who|male|female|neutral}}."""

    RAW = "$1: {{GENDER:$2|blue|pink|green}}"

    @pytest.mark.parametrize(
        ("who", "expected"),
        [("male", "blue"), ("female", "pink"), ("unknown", "green"), (User("male"), "blue"), (User("female"), "pink")],
    )
    def test_forms(self, who: object, expected: str) -> None:
        node, _ = make_evaluator().evaluate_message("gender-msg", self.RAW, ("Bob", who))
        assert to_text(node) == f"Bob: {expected}"

    def test_missing_subject_is_neutral(self) -> None:
        node, errors = make_evaluator().evaluate_message("gender-msg", self.RAW, ("Bob",))
        assert to_text(node) == "Bob: green"
        assert codes(errors) == [DiagnosticCode.PARAMETER_NOT_PROVIDED]

    def test_short_form_list_repeats_last(self) -> None:
        evaluator = make_evaluator()
        raw = "{{gender:$1|he|she}} is awesome"
        assert to_text(evaluator.evaluate_message("m", raw, ("male",))[0]) == "he is awesome"
        assert to_text(evaluator.evaluate_message("m", raw, ("female",))[0]) == "she is awesome"
        assert to_text(evaluator.evaluate_message("m", raw, ("unknown",))[0]) == "she is awesome"

    def test_no_arguments(self) -> None:
        node, errors = make_evaluator().evaluate_message("m", "{{gender}} test")
        assert to_text(node) == " test"
        assert codes(errors) == [DiagnosticCode.TEMPLATE_ARGUMENT_MISSING]

    def test_literal_gender(self) -> None:
        node, _ = make_evaluator().evaluate_message("m", "{{GENDER:female|he|she}}")
        assert to_text(node) == "she"

    def test_combined_with_plural(self) -> None:
        evaluator = make_evaluator()
        raw = "{{GENDER:$1|User}}: $2 {{PLURAL:$2|edit|edits}}"
        assert to_text(evaluator.evaluate_message("m", raw, ("male", 10))[0]) == "User: 10 edits"
        assert to_text(evaluator.evaluate_message("m", raw, ("female", 1))[0]) == "User: 1 edit"


class TestGrammar:
    """{{GRAMMAR:case|word}}."""

    def test_unsupported_case_returns_word(self) -> None:
        evaluator = make_evaluator(site_name="Wikipedia")
        node, errors = evaluator.evaluate_message(
            "grammar-msg", "Przeszukaj {{GRAMMAR:grammar_case_foo|{{SITENAME}}}}"
        )
        assert to_text(node) == "Przeszukaj Wikipedia"
        assert codes(errors) == [DiagnosticCode.GRAMMAR_CASE_UNSUPPORTED]

    def test_missing_word(self) -> None:
        node, errors = make_evaluator().evaluate_message(
            "m", "Przeszukaj {{GRAMMAR:grammar_case_xyz}}"
        )
        assert to_text(node) == "Przeszukaj "
        assert codes(errors) == [DiagnosticCode.TEMPLATE_ARGUMENT_MISSING]

    def test_finnish_rules(self) -> None:
        evaluator = make_evaluator("fi", site_name="Wikipedia")
        node, errors = evaluator.evaluate_message("m", "{{GRAMMAR:elative|{{SITENAME}}}}")
        assert to_text(node) == "Wikipediasta"
        assert errors == ()

    def test_grammar_forms_override(self) -> None:
        evaluator = make_evaluator(grammar_forms={"genitive": {"Wikipedia": "Wikipedias"}})
        node, errors = evaluator.evaluate_message("m", "{{GRAMMAR:genitive|Wikipedia}}")
        assert to_text(node) == "Wikipedias"
        assert errors == ()


class TestFormatnum:
    """{{formatnum:n}} and {{formatnum:n|R}}."""

    @pytest.mark.parametrize(
        ("locale", "value", "expected"),
        [
            ("en", 987654321.654321, "987654321.654321"),
            ("ar", 987654321.654321, "٩٨٧٦٥٤٣٢١٫٦٥٤٣٢١"),
            ("ar", -12.89, "-١٢٫٨٩"),
            ("nl", 987654321.654321, "987654321,654321"),
            ("nl", -12.89, "-12,89"),
            ("nl", "invalidnumber", "invalidnumber"),
        ],
    )
    def test_format(self, locale: str, value: object, expected: str) -> None:
        node, _ = make_evaluator(locale).evaluate_message("m", "{{formatnum:$1}}", (value,))
        assert to_text(node) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("٩٨٧٦٥٤٣٢١٫٦٥٤٣٢١", "987654321"), ("-١٢٫٨٩", "-12")],
    )
    def test_reverse(self, value: str, expected: str) -> None:
        node, errors = make_evaluator("ar").evaluate_message("m", "{{formatnum:$1|R}}", (value,))
        assert to_text(node) == expected
        assert errors == ()

    def test_reverse_french_plain_space_grouping(self) -> None:
        node, errors = make_evaluator("fr").evaluate_message("m", "{{formatnum:1 234,5|R}}")
        assert to_text(node) == "1234"
        assert errors == ()

    def test_reverse_invalid(self) -> None:
        node, errors = make_evaluator("nl").evaluate_message("m", "{{formatnum:abc|R}}")
        assert to_text(node) == "abc"
        assert len(errors) == 1
        assert isinstance(errors[0], NumeralError)

    def test_literal_number(self) -> None:
        node, _ = make_evaluator("nl").evaluate_message("m", "{{formatnum:1234.5}}")
        assert to_text(node) == "1234,5"


class TestNestedMessages:
    """{{int:key}} and bare-name lookups."""

    def test_int_lookup_lowercases_first_letter(self) -> None:
        evaluator = make_evaluator(messages={"portal-url": "Project:Community portal"})
        node, errors = evaluator.evaluate_message(
            "m", "{{Int:portal-url}} is an important community page."
        )
        assert to_text(node) == "Project:Community portal is an important community page."
        assert errors == ()

    def test_bare_name_lookup(self) -> None:
        evaluator = make_evaluator(messages={"helppage": "Help:Contents"})
        node, _ = evaluator.evaluate_message("m", "{{Helppage}}")
        assert to_text(node) == "Help:Contents"

    def test_missing_message(self) -> None:
        node, errors = make_evaluator().evaluate_message("m", "{{int:doesnt-exist}}")
        assert to_text(node) == "[doesnt-exist]"
        assert codes(errors) == [DiagnosticCode.MESSAGE_NOT_FOUND]

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("{{FOO}}", "[foo]"),
            ("{{int:Doesnt-Exist}}", "[doesnt-exist]"),
            ("{{int:doesnt-Exist}}", "[doesnt-exist]"),
        ],
    )
    def test_missing_message_placeholder_is_lowercased(self, source: str, expected: str) -> None:
        node, errors = make_evaluator().evaluate_message("m", source)
        assert to_text(node) == expected
        assert codes(errors) == [DiagnosticCode.MESSAGE_NOT_FOUND]

    def test_lookup_falls_back_to_lowercased_key(self) -> None:
        evaluator = make_evaluator(messages={"sitesupport": "Donate"})
        node, errors = evaluator.evaluate_message("m", "{{SITESUPPORT}} {{int:SiteSupport}}")
        assert to_text(node) == "Donate Donate"
        assert errors == ()

    def test_first_letter_key_preferred_over_lowercased(self) -> None:
        evaluator = make_evaluator(messages={"mainPage": "camel", "mainpage": "lower"})
        node, _ = evaluator.evaluate_message("m", "{{MainPage}}")
        assert to_text(node) == "camel"

    def test_nested_message_gets_no_arguments(self) -> None:
        evaluator = make_evaluator(messages={"inner": "inner $1"})
        node, _ = evaluator.evaluate_message("m", "{{int:inner}} outer $1", ("x",))
        assert to_text(node) == "inner $1 outer x"

    def test_cycle(self) -> None:
        evaluator = make_evaluator(messages={"a": "A{{int:b}}", "b": "B{{int:a}}"})
        node, errors = evaluator.evaluate_message("a", "A{{int:b}}")
        assert to_text(node) == "AB[a]"
        assert len(errors) == 1
        assert isinstance(errors[0], MessageCyclicReferenceError)
        assert "a -> b -> a" in str(errors[0])

    def test_self_reference(self) -> None:
        evaluator = make_evaluator(messages={"loop": "{{int:loop}}"})
        node, errors = evaluator.evaluate_message("loop", "{{int:loop}}")
        assert to_text(node) == "[loop]"
        assert isinstance(errors[0], MessageCyclicReferenceError)

    def test_depth_limit(self) -> None:
        messages = {f"m{i}": f"{{{{int:m{i + 1}}}}}" for i in range(10)}
        messages["m10"] = "end"
        evaluator = make_evaluator(messages=messages, max_depth=5)
        node, errors = evaluator.evaluate_message("m0", messages["m0"])
        assert "end" not in to_text(node)
        assert any(isinstance(e, MessageResolutionError) for e in errors)

    def test_missing_int_key(self) -> None:
        node, errors = make_evaluator().evaluate_message("m", "x{{int}}y")
        assert to_text(node) == "xy"
        assert codes(errors) == [DiagnosticCode.TEMPLATE_ARGUMENT_MISSING]


class TestLinks:
    """[[internal]] and [external] links."""

    def test_internal_link_uses_title_resolver(self) -> None:
        evaluator = make_evaluator(title_resolver=lambda t: "/w/" + t)
        node, _ = evaluator.evaluate_message("m", "[[Special:ListUsers|用户]]")
        assert to_html(node) == '<a title="Special:ListUsers" href="/w/Special:ListUsers">用户</a>'

    def test_link_without_display_shows_target(self) -> None:
        node, _ = make_evaluator().evaluate_message("m", "[[Main Page]]")
        assert to_html(node) == '<a title="Main Page" href="Main Page">Main Page</a>'

    def test_external_link_with_parameter(self) -> None:
        node, _ = make_evaluator().evaluate_message(
            "external-link-replace", "Foo [$1 bar]", ("http://example.org/?x=y&z",)
        )
        assert to_html(node) == 'Foo <a href="http://example.org/?x=y&amp;z">bar</a>'

    @pytest.mark.parametrize(
        "url",
        ["javascript:alert(1)", "JavaScript:alert(1)", "java\tscript:alert(1)", "data:text/html,x"],
    )
    def test_external_link_with_disallowed_scheme_renders_text(self, url: str) -> None:
        node, errors = make_evaluator().evaluate_message("m", "Foo [$1 bar]", (url,))
        assert to_html(node) == "Foo bar"
        assert codes(errors) == [DiagnosticCode.UNSAFE_LINK_TARGET]

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("mailto:a@example.org", '<a href="mailto:a@example.org">bar</a>'),
            ("//example.org/", '<a href="//example.org/">bar</a>'),
            ("/wiki/Main_Page", '<a href="/wiki/Main_Page">bar</a>'),
        ],
    )
    def test_external_link_allowed_targets(self, url: str, expected: str) -> None:
        node, errors = make_evaluator().evaluate_message("m", "[$1 bar]", (url,))
        assert to_html(node) == expected
        assert errors == ()

    def test_pipe_trick_is_parse_error(self) -> None:
        node, errors = make_evaluator().evaluate_message("pipe-trick", "[[Tampa, Florida|]]")
        assert to_text(node) == "pipe-trick: Parse error at position 0 in input: [[Tampa, Florida|]]"
        assert len(errors) == 1
        assert isinstance(errors[0], MessageSyntaxError)
        assert errors[0].position == 0

    def test_pipe_trick_replaces_whole_message(self) -> None:
        raw = "See [[Tampa, Florida|]] now"
        node, _ = make_evaluator().evaluate_message("pt", raw)
        assert to_text(node) == f"pt: Parse error at position 4 in input: {raw}"

    def test_pipe_trick_in_prebuilt_tree(self) -> None:
        node, errors = make_evaluator().evaluate(parse("[[X|]]"), key="k")
        assert to_text(node) == "k: Parse error at position 0 in input: [[X|]]"
        assert isinstance(errors[0], MessageSyntaxError)
class TestParserRefusal:
    """Junk from the parser becomes the inline parse error."""

    def test_nesting_limit(self) -> None:
        evaluator = make_evaluator(parse=MessageParser(max_nesting_depth=1).parse)
        node, errors = evaluator.evaluate_message("deep", "{{a:{{b}}}}")
        assert to_text(node) == "deep: Parse error at position 4 in input: {{a:{{b}}}}"
        assert codes(errors) == [DiagnosticCode.PARSE_ERROR]


class TestDepthProtection:
    """Deep programmatic trees degrade instead of crashing."""

    def test_deep_template_nesting(self) -> None:
        tree = Concat((Literal("x"),))
        for _ in range(30):
            tree = Concat((TemplateCall("PLURAL", (Concat((Literal("1"),)), tree)),))
        evaluator = make_evaluator(max_depth=10)
        node, errors = evaluator.evaluate(tree, key="deep")
        assert to_text(node) == "[deep]"
        assert any(isinstance(e, DepthLimitExceededError) for e in errors)
