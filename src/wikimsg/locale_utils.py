"""Locale utilities for BCP-47 to POSIX conversion.

Centralizes locale format normalization used throughout the codebase.
Provides canonical locale handling to ensure consistent cache keys and lookups.

Python 3.13+.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from babel import Locale

__all__ = [
    "get_babel_locale",
    "is_valid_locale_format",
    "language_subtag",
    "normalize_locale",
]


def normalize_locale(locale_code: str) -> str:
    """Convert BCP-47 locale code to POSIX format for Babel.

    BCP-47 uses hyphens (pt-BR), while Babel/POSIX uses underscores (pt_BR).
    Message bundles are commonly named with lowercase BCP-47 codes (pt-br),
    so the region subtag is upper-cased and the language lower-cased.

    Args:
        locale_code: BCP-47 locale code (e.g., "en-US", "pt-br")

    Returns:
        POSIX-formatted locale code (e.g., "en_US", "pt_BR")

    Example:
        >>> normalize_locale("en-US")
        'en_US'
        >>> normalize_locale("pt-br")
        'pt_BR'
        >>> normalize_locale("sr-Latn")
        'sr_Latn'
        >>> normalize_locale("ar")
        'ar'
    """
    parts = locale_code.replace("-", "_").split("_")
    normalized = [parts[0].lower()]
    for part in parts[1:]:
        if len(part) == 4 and part.isalpha():
            normalized.append(part.title())  # script subtag
        elif len(part) in (2, 3):
            normalized.append(part.upper())  # region subtag
        else:
            normalized.append(part)
    return "_".join(normalized)


def language_subtag(locale_code: str) -> str:
    """Return the lowercase primary language subtag.

    Example:
        >>> language_subtag("ar-EG")
        'ar'
        >>> language_subtag("zh_Hans_CN")
        'zh'
    """
    return normalize_locale(locale_code).split("_", 1)[0]


def is_valid_locale_format(locale_code: str) -> bool:
    """Check that a locale code is non-empty and made of alphanumeric subtags.

    Example:
        >>> is_valid_locale_format("de-formal")
        True
        >>> is_valid_locale_format("../etc")
        False
        >>> is_valid_locale_format("")
        False
    """
    if not locale_code:
        return False
    return all(part.isalnum() for part in locale_code.replace("-", "_").split("_"))


@functools.lru_cache(maxsize=128)
def get_babel_locale(locale_code: str) -> Locale:
    """Get a Babel Locale object with caching.

    Parses the locale code once and caches the result. This avoids repeated
    parsing overhead in hot paths like plural rule selection.

    Thread-safe via lru_cache internal locking.

    Args:
        locale_code: Locale code (BCP-47 or POSIX format accepted)

    Returns:
        Babel Locale object

    Raises:
        babel.core.UnknownLocaleError: If locale is not recognized
        ValueError: If locale format is invalid

    Example:
        >>> locale = get_babel_locale("nl-NL")
        >>> locale.language
        'nl'
        >>> locale.territory
        'NL'
    """
    # Lazy import: Babel loads CLDR data at import time; defer until needed
    from babel import Locale  # noqa: PLC0415

    return Locale.parse(normalize_locale(locale_code))
