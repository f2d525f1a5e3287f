"""Error message templates.

Centralized error message templates for testable, consistent error messages.
Python 3.13+. Zero external dependencies.
"""

from wikimsg.constants import PARSE_ERROR_TEMPLATE

from .codes import Diagnostic, DiagnosticCode, SourceSpan


class ErrorTemplate:
    """Centralized error message templates.

    All error messages are created here. NO f-strings in exception constructors!
    This keeps messages testable and consistently formatted.
    """

    # ------------------------------------------------------------------
    # Reference errors
    # ------------------------------------------------------------------

    @staticmethod
    def message_not_found(key: str) -> Diagnostic:
        """Nested message lookup found no message.

        Args:
            key: The (first-letter lowercased) message key

        Returns:
            Diagnostic for MESSAGE_NOT_FOUND
        """
        msg = f"Message '{key}' not found"
        return Diagnostic(
            code=DiagnosticCode.MESSAGE_NOT_FOUND,
            message=msg,
            hint="Check that the message is defined in the message store",
            message_key=key,
        )

    @staticmethod
    def parameter_not_provided(index: int, provided: int) -> Diagnostic:
        """Positional parameter beyond the supplied arguments.

        Args:
            index: 1-based parameter index from the message
            provided: Number of arguments actually supplied

        Returns:
            Diagnostic for PARAMETER_NOT_PROVIDED
        """
        msg = f"Parameter ${index} not provided ({provided} argument(s) given)"
        return Diagnostic(
            code=DiagnosticCode.PARAMETER_NOT_PROVIDED,
            message=msg,
            hint=f"Pass at least {index} argument(s) to render this message completely",
            severity="warning",
        )

    @staticmethod
    def cyclic_reference(path: list[str]) -> Diagnostic:
        """Nested message lookup loops back onto itself.

        Args:
            path: Keys being rendered, ending with the repeated key

        Returns:
            Diagnostic for CYCLIC_REFERENCE
        """
        msg = f"Cyclic message reference: {' -> '.join(path)}"
        return Diagnostic(
            code=DiagnosticCode.CYCLIC_REFERENCE,
            message=msg,
            hint="Break the cycle by removing one of the nested {{int:...}} lookups",
            resolution_path=tuple(path),
        )

    # ------------------------------------------------------------------
    # Resolution errors
    # ------------------------------------------------------------------

    @staticmethod
    def max_depth_exceeded(key: str, max_depth: int) -> Diagnostic:
        """Nested lookups went deeper than the configured limit.

        Args:
            key: Message key whose expansion was refused
            max_depth: The configured limit

        Returns:
            Diagnostic for MAX_DEPTH_EXCEEDED
        """
        msg = f"Maximum nesting depth ({max_depth}) exceeded while expanding '{key}'"
        return Diagnostic(
            code=DiagnosticCode.MAX_DEPTH_EXCEEDED,
            message=msg,
            hint="Flatten the chain of nested messages",
            message_key=key,
        )

    @staticmethod
    def traversal_depth_exceeded(max_depth: int) -> Diagnostic:
        """AST traversal went deeper than the configured limit.

        Args:
            max_depth: The configured limit

        Returns:
            Diagnostic for MAX_DEPTH_EXCEEDED
        """
        msg = f"Maximum traversal depth ({max_depth}) exceeded"
        return Diagnostic(
            code=DiagnosticCode.MAX_DEPTH_EXCEEDED,
            message=msg,
            hint="The AST is too deeply nested; check for programmatic construction bugs",
        )

    @staticmethod
    def grammar_case_unsupported(case: str, locale_code: str) -> Diagnostic:
        """GRAMMAR requested a case the language does not define.

        Args:
            case: Requested grammatical case
            locale_code: Locale of the active language profile

        Returns:
            Diagnostic for GRAMMAR_CASE_UNSUPPORTED
        """
        msg = f"Grammatical case '{case}' is not defined for locale '{locale_code}'"
        return Diagnostic(
            code=DiagnosticCode.GRAMMAR_CASE_UNSUPPORTED,
            message=msg,
            hint="The word is rendered unchanged",
            template_name="GRAMMAR",
            severity="warning",
        )

    @staticmethod
    def template_argument_missing(template: str, argument: str) -> Diagnostic:
        """Template construct invoked without a required argument.

        Args:
            template: Template name as written
            argument: Description of the missing argument

        Returns:
            Diagnostic for TEMPLATE_ARGUMENT_MISSING
        """
        msg = f"{{{{{template}}}}} is missing its {argument}"
        return Diagnostic(
            code=DiagnosticCode.TEMPLATE_ARGUMENT_MISSING,
            message=msg,
            hint="The construct is removed from the output",
            template_name=template,
            severity="warning",
        )

    @staticmethod
    def plural_count_invalid(value: str) -> Diagnostic:
        """PLURAL count is not a number.

        Args:
            value: Text that was supplied as the count

        Returns:
            Diagnostic for PLURAL_COUNT_INVALID
        """
        msg = f"PLURAL count '{value}' is not a number"
        return Diagnostic(
            code=DiagnosticCode.PLURAL_COUNT_INVALID,
            message=msg,
            hint="The last plural form is used",
            template_name="PLURAL",
            severity="warning",
        )

    @staticmethod
    def unknown_node(type_name: str) -> Diagnostic:
        """Evaluator met a node type it does not understand.

        Args:
            type_name: Class name of the node

        Returns:
            Diagnostic for UNKNOWN_NODE
        """
        msg = f"Unknown AST node type: {type_name}"
        return Diagnostic(code=DiagnosticCode.UNKNOWN_NODE, message=msg)

    @staticmethod
    def unsafe_link_target(url: str) -> Diagnostic:
        """External link URL uses a scheme that is never linked.

        Args:
            url: Link target text

        Returns:
            Diagnostic for UNSAFE_LINK_TARGET
        """
        msg = f"External link target '{url}' has a disallowed URL scheme"
        return Diagnostic(
            code=DiagnosticCode.UNSAFE_LINK_TARGET,
            message=msg,
            hint="Use an http, https or mailto URL, or a relative one",
        )

    # ------------------------------------------------------------------
    # Syntax errors
    # ------------------------------------------------------------------

    @staticmethod
    def unexpected_eof(position: int) -> Diagnostic:
        """Cursor read past the end of the source.

        Args:
            position: Offset of the read

        Returns:
            Diagnostic for UNEXPECTED_EOF
        """
        msg = f"Unexpected EOF at position {position}"
        return Diagnostic(
            code=DiagnosticCode.UNEXPECTED_EOF,
            message=msg,
            span=SourceSpan(start=position, end=position),
        )

    @staticmethod
    def parse_error(key: str, position: int, source: str) -> Diagnostic:
        """Message source could not be parsed.

        The message text doubles as the inline replacement rendered in place
        of the whole message.

        Args:
            key: Message key
            position: Offset of the first unconsumed/invalid character
            source: Original message text

        Returns:
            Diagnostic for PARSE_ERROR
        """
        msg = PARSE_ERROR_TEMPLATE.format(key=key, position=position, source=source)
        return Diagnostic(
            code=DiagnosticCode.PARSE_ERROR,
            message=msg,
            span=SourceSpan(start=position, end=len(source)),
            hint="Check brackets and braces in the translation",
            message_key=key,
        )

    @staticmethod
    def pipe_trick_unsupported(target: str, position: int) -> Diagnostic:
        """[[Target|]] asks for display-text inference, which is not performed.

        Args:
            target: Link target text
            position: Offset of the opening [[

        Returns:
            Diagnostic for PIPE_TRICK_UNSUPPORTED
        """
        msg = f"Pipe trick link [[{target}|]] is not supported"
        return Diagnostic(
            code=DiagnosticCode.PIPE_TRICK_UNSUPPORTED,
            message=msg,
            span=SourceSpan(start=position, end=position),
            hint="Write the display text explicitly: [[Target|Label]]",
        )

    @staticmethod
    def nesting_depth_exceeded(max_depth: int, position: int) -> Diagnostic:
        """Template/link nesting deeper than the parser limit.

        Args:
            max_depth: Configured limit
            position: Offset where the limit was hit

        Returns:
            Diagnostic for PARSE_NESTING_DEPTH_EXCEEDED
        """
        msg = f"Nesting depth limit ({max_depth}) exceeded at position {position}"
        return Diagnostic(
            code=DiagnosticCode.PARSE_NESTING_DEPTH_EXCEEDED,
            message=msg,
            span=SourceSpan(start=position, end=position),
        )

    @staticmethod
    def source_too_large(size: int, max_size: int) -> Diagnostic:
        """Raw message exceeds MAX_SOURCE_SIZE.

        Args:
            size: Actual length in characters
            max_size: Configured limit

        Returns:
            Diagnostic for SOURCE_TOO_LARGE
        """
        msg = f"Message source too large: {size} characters (limit {max_size})"
        return Diagnostic(
            code=DiagnosticCode.SOURCE_TOO_LARGE,
            message=msg,
            hint="Split the message or raise max_source_size",
        )

    # ------------------------------------------------------------------
    # Numeral errors
    # ------------------------------------------------------------------

    @staticmethod
    def number_parse_failed(value: str, locale_code: str) -> Diagnostic:
        """Locale numeral text cannot be parsed back to a canonical number.

        Args:
            value: Input text
            locale_code: Locale of the profile

        Returns:
            Diagnostic for NUMBER_PARSE_FAILED
        """
        msg = f"Cannot parse '{value}' as a number for locale '{locale_code}'"
        return Diagnostic(
            code=DiagnosticCode.NUMBER_PARSE_FAILED,
            message=msg,
            hint="Check the digits and separators of the input",
            template_name="formatnum",
            severity="warning",
        )

    @staticmethod
    def locale_unknown(locale_code: str) -> Diagnostic:
        """Locale has no CLDR data.

        Args:
            locale_code: Requested locale code

        Returns:
            Diagnostic for LOCALE_UNKNOWN
        """
        msg = f"Unknown locale '{locale_code}'"
        return Diagnostic(
            code=DiagnosticCode.LOCALE_UNKNOWN,
            message=msg,
            hint="The default (English-like) language profile is used",
            severity="warning",
        )

    # ------------------------------------------------------------------
    # Usage errors
    # ------------------------------------------------------------------

    @staticmethod
    def conflicting_render_options(legacy: list[str]) -> Diagnostic:
        """Legacy keyword options combined with an options object.

        Args:
            legacy: Names of the legacy keywords that were passed

        Returns:
            Diagnostic for CONFLICTING_RENDER_OPTIONS
        """
        names = ", ".join(sorted(legacy))
        msg = f"render() got both options= and legacy keyword option(s): {names}"
        return Diagnostic(
            code=DiagnosticCode.CONFLICTING_RENDER_OPTIONS,
            message=msg,
            hint="Pass a single RenderOptions object and drop the legacy keywords",
        )

    @staticmethod
    def invalid_render_option(name: str, value: object) -> Diagnostic:
        """Unknown render keyword or an unusable option value.

        Args:
            name: Keyword or option name
            value: Value that was passed

        Returns:
            Diagnostic for INVALID_RENDER_OPTION
        """
        msg = f"Invalid render option {name}={value!r}"
        return Diagnostic(
            code=DiagnosticCode.INVALID_RENDER_OPTION,
            message=msg,
            hint="Use RenderOptions(format=RenderFormat.HTML | TEXT | NODE)",
        )
