"""Render Diagnostic records for people and for tools.

Three styles:
    rust    multi-line, compiler style, with location, template, lookup
            path and hint lines
    simple  one line: CODE: message
    json    one JSON object per diagnostic

Translator text can end up in a diagnostic message (a parse error quotes
the whole raw message), so line breaks are escaped and `sanitize` can cap
the length before anything reaches a log line.

Python 3.13+. Zero external dependencies.
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from .codes import Diagnostic

__all__ = [
    "DiagnosticFormatter",
    "OutputFormat",
]

_ANSI_RESET = "\033[0m"
_SEVERITY_COLORS: dict[str, str] = {
    "error": "\033[1;31m",
    "warning": "\033[1;33m",
}


class OutputFormat(StrEnum):
    """Diagnostic output styles."""

    RUST = "rust"
    SIMPLE = "simple"
    JSON = "json"


@dataclass(frozen=True, slots=True)
class DiagnosticFormatter:
    """Formats diagnostics in one of the OutputFormat styles.

    Attributes:
        output_format: Style to produce
        sanitize: Cap message and hint text at max_content_length
        color: Wrap the severity in ANSI colors (rust style only)
        max_content_length: Length cap used when sanitizing

    Example:
        >>> diagnostic = ErrorTemplate.message_not_found("helppage")
        >>> print(DiagnosticFormatter().format(diagnostic))
        error[MESSAGE_NOT_FOUND]: Message 'helppage' not found
          --> message 'helppage'
          = help: Check that the message is defined in the message store
        >>> print(DiagnosticFormatter(output_format=OutputFormat.SIMPLE).format(diagnostic))
        MESSAGE_NOT_FOUND: Message 'helppage' not found
    """

    output_format: OutputFormat = OutputFormat.RUST
    sanitize: bool = False
    color: bool = False
    max_content_length: int = 100

    def format(self, diagnostic: Diagnostic) -> str:
        """Format one diagnostic in the configured style."""
        match self.output_format:
            case OutputFormat.SIMPLE:
                return f"{diagnostic.code.name}: {self._message(diagnostic)}"
            case OutputFormat.JSON:
                return json.dumps(self._as_record(diagnostic), ensure_ascii=False)
            case _:
                return "\n".join(self._rust_lines(diagnostic))

    def format_all(self, diagnostics: Iterable[Diagnostic]) -> str:
        """Format several diagnostics, separated by blank lines."""
        return "\n\n".join(self.format(d) for d in diagnostics)

    def _rust_lines(self, diagnostic: Diagnostic) -> list[str]:
        severity = diagnostic.severity
        if self.color:
            severity = f"{_SEVERITY_COLORS[severity]}{severity}{_ANSI_RESET}"
        lines = [f"{severity}[{diagnostic.code.name}]: {self._message(diagnostic)}"]

        # A span locates the problem more precisely than the message key.
        if diagnostic.span is not None:
            lines.append(f"  --> position {diagnostic.span.start}")
        elif diagnostic.message_key:
            lines.append(f"  --> message '{diagnostic.message_key}'")
        if diagnostic.template_name:
            lines.append(f"  = template: {diagnostic.template_name}")
        if diagnostic.resolution_path:
            lines.append(f"  = path: {' -> '.join(diagnostic.resolution_path)}")
        if diagnostic.hint:
            lines.append(f"  = help: {self._truncate(diagnostic.hint)}")
        return lines

    def _as_record(self, diagnostic: Diagnostic) -> dict[str, object]:
        record: dict[str, object] = {
            "code": diagnostic.code.name,
            "code_value": diagnostic.code.value,
            "message": self._truncate(diagnostic.message),
            "severity": diagnostic.severity,
        }
        if diagnostic.span is not None:
            record["start"] = diagnostic.span.start
            record["end"] = diagnostic.span.end
        optional = {
            "message_key": diagnostic.message_key,
            "template_name": diagnostic.template_name,
            "resolution_path": list(diagnostic.resolution_path or ()),
            "hint": self._truncate(diagnostic.hint) if diagnostic.hint else None,
        }
        record.update({name: value for name, value in optional.items() if value})
        return record

    def _message(self, diagnostic: Diagnostic) -> str:
        text = self._truncate(diagnostic.message)
        return text.replace("\r", "\\r").replace("\n", "\\n")

    def _truncate(self, text: str) -> str:
        if self.sanitize and len(text) > self.max_content_length:
            return text[: self.max_content_length] + "..."
        return text
