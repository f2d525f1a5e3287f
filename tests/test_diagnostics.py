"""Tests for diagnostics: codes, templates, formatter and error classes."""

import json

import pytest

from wikimsg.diagnostics import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticFormatter,
    ErrorTemplate,
    MessageCyclicReferenceError,
    MessageError,
    MessageReferenceError,
    MessageResolutionError,
    MessageSyntaxError,
    MessageUsageError,
    NumeralError,
    OutputFormat,
    SourceSpan,
)


class TestSourceSpan:
    """Span validation."""

    def test_valid(self) -> None:
        span = SourceSpan(start=2, end=5)
        assert (span.start, span.end) == (2, 5)

    def test_negative_start(self) -> None:
        with pytest.raises(ValueError, match="start must be >= 0"):
            SourceSpan(start=-1, end=0)

    def test_end_before_start(self) -> None:
        with pytest.raises(ValueError, match="must be >= start"):
            SourceSpan(start=3, end=2)


class TestRustFormat:
    """Default multi-line output."""

    def test_message_not_found(self) -> None:
        output = DiagnosticFormatter().format(ErrorTemplate.message_not_found("helppage"))
        assert output == (
            "error[MESSAGE_NOT_FOUND]: Message 'helppage' not found\n"
            "  --> message 'helppage'\n"
            "  = help: Check that the message is defined in the message store"
        )

    def test_parse_error_points_at_position(self) -> None:
        diagnostic = ErrorTemplate.parse_error("pipe", 4, "See [[X|]]")
        output = DiagnosticFormatter().format(diagnostic)
        assert output.splitlines()[0] == (
            "error[PARSE_ERROR]: pipe: Parse error at position 4 in input: See [[X|]]"
        )
        assert "  --> position 4" in output
        assert diagnostic.span == SourceSpan(start=4, end=10)

    def test_resolution_path_and_template(self) -> None:
        output = DiagnosticFormatter().format(ErrorTemplate.cyclic_reference(["a", "b", "a"]))
        assert "  = path: a -> b -> a" in output

        output = DiagnosticFormatter().format(ErrorTemplate.plural_count_invalid("many"))
        assert output.startswith("warning[PLURAL_COUNT_INVALID]: PLURAL count 'many' is not a number")
        assert "  = template: PLURAL" in output

    def test_color(self) -> None:
        formatter = DiagnosticFormatter(color=True)
        assert formatter.format(ErrorTemplate.unknown_node("X")).startswith("\033[1;31merror\033[0m[")
        assert formatter.format(ErrorTemplate.locale_unknown("xx")).startswith("\033[1;33mwarning\033[0m[")

    def test_line_breaks_escaped(self) -> None:
        diagnostic = Diagnostic(code=DiagnosticCode.PARSE_ERROR, message="a\nb\rc")
        assert DiagnosticFormatter().format(diagnostic) == "error[PARSE_ERROR]: a\\nb\\rc"


class TestOtherFormats:
    """Single-line and JSON output."""

    def test_simple(self) -> None:
        formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        assert formatter.format(ErrorTemplate.message_not_found("x")) == (
            "MESSAGE_NOT_FOUND: Message 'x' not found"
        )

    def test_json(self) -> None:
        formatter = DiagnosticFormatter(output_format=OutputFormat.JSON)
        data = json.loads(formatter.format(ErrorTemplate.cyclic_reference(["a", "a"])))
        assert data["code"] == "CYCLIC_REFERENCE"
        assert data["code_value"] == 1003
        assert data["severity"] == "error"
        assert data["resolution_path"] == ["a", "a"]
        assert "start" not in data

    def test_json_keeps_non_ascii(self) -> None:
        formatter = DiagnosticFormatter(output_format=OutputFormat.JSON)
        output = formatter.format(ErrorTemplate.grammar_case_unsupported("genitive", "ru"))
        assert json.loads(output)["template_name"] == "GRAMMAR"

        output = formatter.format(ErrorTemplate.message_not_found("привет"))
        assert "привет" in output

    def test_sanitize_truncates(self) -> None:
        formatter = DiagnosticFormatter(
            output_format=OutputFormat.SIMPLE, sanitize=True, max_content_length=10
        )
        output = formatter.format(ErrorTemplate.message_not_found("a-very-long-key"))
        assert output == "MESSAGE_NOT_FOUND: Message 'a..."

    def test_format_all(self) -> None:
        formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        output = formatter.format_all(
            [ErrorTemplate.message_not_found("a"), ErrorTemplate.message_not_found("b")]
        )
        assert output == "MESSAGE_NOT_FOUND: Message 'a' not found\n\nMESSAGE_NOT_FOUND: Message 'b' not found"


class TestErrorClasses:
    """Exception hierarchy."""

    def test_plain_message(self) -> None:
        error = MessageError("boom")
        assert str(error) == "boom"
        assert error.diagnostic is None

    def test_diagnostic_message(self) -> None:
        diagnostic = ErrorTemplate.message_not_found("helppage")
        error = MessageReferenceError(diagnostic)
        assert error.diagnostic is diagnostic
        assert str(error) == diagnostic.format_error()
        assert str(diagnostic) == "Message 'helppage' not found"

    def test_hierarchy(self) -> None:
        assert issubclass(MessageCyclicReferenceError, MessageReferenceError)
        assert issubclass(NumeralError, MessageResolutionError)
        assert issubclass(MessageUsageError, TypeError)
        for cls in (MessageSyntaxError, MessageReferenceError, MessageResolutionError, MessageUsageError):
            assert issubclass(cls, MessageError)

    def test_syntax_error_position(self) -> None:
        error = MessageSyntaxError(ErrorTemplate.pipe_trick_unsupported("X", 7), position=7)
        assert error.position == 7
        assert "[[X|]]" in str(error)

    def test_numeral_error_context(self) -> None:
        error = NumeralError(
            ErrorTemplate.number_parse_failed("abc", "ar"), input_value="abc", locale_code="ar"
        )
        assert (error.input_value, error.locale_code) == ("abc", "ar")
        assert error.diagnostic is not None
        assert error.diagnostic.code is DiagnosticCode.NUMBER_PARSE_FAILED


class TestTemplates:
    """Template messages."""

    def test_template_argument_missing(self) -> None:
        diagnostic = ErrorTemplate.template_argument_missing("GENDER", "subject")
        assert diagnostic.message == "{{GENDER}} is missing its subject"

    def test_render_option_templates(self) -> None:
        assert ErrorTemplate.invalid_render_option("format", "pdf").message == (
            "Invalid render option format='pdf'"
        )
        assert ErrorTemplate.conflicting_render_options(["format"]).message == (
            "render() got both options= and legacy keyword option(s): format"
        )

    def test_unsafe_link_target(self) -> None:
        diagnostic = ErrorTemplate.unsafe_link_target("javascript:alert(1)")
        assert diagnostic.code == DiagnosticCode.UNSAFE_LINK_TARGET
        assert diagnostic.message == "External link target 'javascript:alert(1)' has a disallowed URL scheme"

    def test_codes_unique(self) -> None:
        values = [code.value for code in DiagnosticCode]
        assert len(values) == len(set(values))
