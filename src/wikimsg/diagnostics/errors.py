"""wikimsg exception hierarchy with structured diagnostics.

All exceptions can carry Diagnostic objects for rich error information.
Rendering collects these instead of raising them; only MessageUsageError
escapes to callers.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic


class MessageError(Exception):
    """Base exception for all wikimsg errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    def __init__(self, message: str | Diagnostic) -> None:
        """Initialize MessageError.

        Args:
            message: Error message string OR Diagnostic object
        """
        if isinstance(message, Diagnostic):
            self.diagnostic: Diagnostic | None = message
            super().__init__(message.format_error())
        else:
            self.diagnostic = None
            super().__init__(message)


class MessageSyntaxError(MessageError):
    """Malformed message source.

    Never raised to callers of the render API. The offending message is
    replaced by an inline "Parse error at position N" diagnostic.

    Attributes:
        position: Offset of the first unconsumed/invalid character
    """

    def __init__(self, message: str | Diagnostic, *, position: int = 0) -> None:
        super().__init__(message)
        self.position = position


class MessageReferenceError(MessageError):
    """Nested message reference that cannot be resolved.

    Fallback: render the bracketed key, e.g. [doesnt-exist].
    """


class MessageCyclicReferenceError(MessageReferenceError):
    """Nested message lookup that re-enters a message already being rendered.

    Example:
        a = {{int:b}}
        b = {{int:a}}  <- infinite loop

    Fallback: render the bracketed key.
    """


class MessageResolutionError(MessageError):
    """Runtime degradation during evaluation.

    Examples:
    - Unsupported grammatical case
    - Non-numeric PLURAL count
    - Nesting depth exceeded

    Fallback: identity / no-op value, evaluation continues.
    """


class NumeralError(MessageResolutionError):
    """Locale numeral text could not be parsed.

    Attributes:
        input_value: The value that could not be converted
        locale_code: Locale of the profile doing the conversion
    """

    def __init__(
        self,
        message: str | Diagnostic,
        *,
        input_value: str = "",
        locale_code: str = "",
    ) -> None:
        super().__init__(message)
        self.input_value = input_value
        self.locale_code = locale_code


class MessageUsageError(MessageError, TypeError):
    """API misuse by the caller.

    The only error the render API raises: it signals a bug at the call
    site, never untrusted translation content.
    """
