"""Shared constants for wikimsg.

This module provides centralized configuration constants used across
syntax and runtime packages. Placing constants here avoids circular
imports and provides a single source of truth.

Constants are grouped by domain:
- Depth limits: Recursion protection for parsing/evaluation/serialization
- Cache limits: Memory bounds for caching subsystems
- Input limits: DoS prevention via size constraints
- Fallback strings: Visible placeholders for degraded output

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Depth limits
    "MAX_DEPTH",
    # Cache limits
    "MAX_PROFILE_CACHE_SIZE",
    "DEFAULT_CACHE_SIZE",
    # Input limits
    "MAX_SOURCE_SIZE",
    # Locale defaults
    "DEFAULT_LOCALE",
    # Fallback strings
    "FALLBACK_MISSING_MESSAGE",
    "PARSE_ERROR_TEMPLATE",
    # Links
    "SAFE_URL_SCHEMES",
]

# ============================================================================
# DEPTH LIMITS
# ============================================================================
#
# A single limit covers every recursive subsystem:
#
# 1. PARSER (syntax/parser/rules.py):
#    Nesting of template calls and links inside template arguments,
#    e.g. {{PLURAL:$1|{{GENDER:$2|{{int:x}}|...}}|...}}
#
# 2. EVALUATOR (runtime/evaluator.py):
#    Chains of nested message lookups ({{int:a}} -> {{int:b}} -> ...)
#
# 3. SERIALIZER / VISITOR (syntax/serializer.py, syntax/visitor.py):
#    AST traversal depth.
#
# Translator-authored messages rarely nest more than three levels; anything
# past 100 is malformed or adversarial.
#
# ============================================================================

MAX_DEPTH: int = 100

# ============================================================================
# CACHE LIMITS
# ============================================================================

# Maximum cached LanguageProfile instances.
# 128 covers a wiki farm serving every major interface language.
MAX_PROFILE_CACHE_SIZE: int = 128

# Default maximum entries in the parsed-message (AST) cache.
# A typical interface renders a few hundred distinct messages.
DEFAULT_CACHE_SIZE: int = 1000

# ============================================================================
# INPUT LIMITS
# ============================================================================

# Maximum size of a single raw message in characters (1 MiB).
# Interface messages are short; a megabyte message is a loading bug.
MAX_SOURCE_SIZE: int = 1024 * 1024

# ============================================================================
# LOCALE DEFAULTS
# ============================================================================

# Locale whose rules back the default (fallback) language profile.
DEFAULT_LOCALE: str = "en"

# ============================================================================
# FALLBACK STRINGS
# ============================================================================

# Placeholder for a nested message that cannot be resolved, e.g. [doesnt-exist]
FALLBACK_MISSING_MESSAGE: str = "[{key}]"

# Inline diagnostic that replaces a message whose source cannot be parsed.
PARSE_ERROR_TEMPLATE: str = "{key}: Parse error at position {position} in input: {source}"

# ============================================================================
# LINKS
# ============================================================================

# URL schemes an external link may use. Scheme-less (relative and
# protocol-relative) URLs are always linked.
SAFE_URL_SCHEMES: frozenset[str] = frozenset({"http", "https", "mailto"})
