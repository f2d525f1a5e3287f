"""wikimsg - localized wikitext message templates.

Renders interface messages written in the wikitext message mini-language
($1 parameters, {{PLURAL}}, {{GENDER}}, {{GRAMMAR}}, {{formatnum}},
{{int:}} nested messages, [[links]]) for a locale, escaping every
argument exactly once.

Public API:
    MessageEngine - Single-locale message rendering
    RenderOptions - Output format for MessageEngine.render()
    MessageStore - Thread-safe message store with a locale fallback chain
    TrustedHtml - Marks an argument as already-safe markup
    parse - Parse raw message text to AST
    serialize - Serialize AST back to message text
    introspect_message - Parameters, templates and links used by a message

Exceptions:
    MessageError - Base exception class
    MessageSyntaxError - Parse errors
    MessageReferenceError - Missing nested messages and cycles
    MessageResolutionError - Runtime degradations
    MessageUsageError - API misuse (the only error render() raises)

Submodules:
    wikimsg.syntax - AST node types, parser, serializer, visitor
    wikimsg.runtime - Evaluator, renderer, language profiles, numerals
    wikimsg.localization - Message store and bundle loaders
    wikimsg.diagnostics - Error types, codes and formatter
"""

from .diagnostics import (
    MessageCyclicReferenceError,
    MessageError,
    MessageReferenceError,
    MessageResolutionError,
    MessageSyntaxError,
    MessageUsageError,
)
from .enums import Gender, RenderFormat
from .introspection import introspect_message
from .localization import MessageStore, PathMessageLoader
from .runtime import MessageEngine, RenderOptions, TrustedHtml
from .syntax import parse, serialize

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("wikimsg")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "Gender",
    "MessageCyclicReferenceError",
    "MessageEngine",
    "MessageError",
    "MessageReferenceError",
    "MessageResolutionError",
    "MessageStore",
    "MessageSyntaxError",
    "MessageUsageError",
    "PathMessageLoader",
    "RenderFormat",
    "RenderOptions",
    "TrustedHtml",
    "__version__",
    "introspect_message",
    "parse",
    "serialize",
]
