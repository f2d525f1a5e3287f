"""Type aliases for the localization domain.

Provides semantic type aliases used throughout the localization package
and by user code when annotating message store call sites.

Python 3.13+. Zero external dependencies.
"""

from collections.abc import Mapping

__all__ = [
    "LocaleCode",
    "MessageBundle",
    "MessageKey",
    "RawMessage",
]

type MessageKey = str
"""Identifier for a message (e.g., 'newarticletext', 'doesnt-exist')."""

type LocaleCode = str
"""Locale code as used in bundle file names (e.g., 'en', 'pt-br', 'sr-el')."""

type RawMessage = str
"""Unparsed message text in the wikitext mini-language."""

type MessageBundle = Mapping[MessageKey, RawMessage]
"""All messages of one locale, as loaded from a bundle."""
