"""Language profiles: per-locale plural, grammar and numeral behavior.

A LanguageProfile is a flat record built from data: Babel/CLDR supplies
plural rules and number symbols, the tables in locale_data supply digit
sets and grammar rules, and an optional LocaleData overrides any of it.
There is no per-language subclass.

Architecture:
    - build_profile(): locale code (+ LocaleData) -> LanguageProfile
    - LanguageProfileCache: bounded LRU of profiles with compute-once-per-key
      construction and an async load() for locale data fetched elsewhere

Python 3.13+. Uses Babel for CLDR data.
"""

import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from concurrent.futures import Future
from dataclasses import dataclass
from decimal import Decimal
from threading import RLock

from babel import Locale, UnknownLocaleError
from babel.numbers import UnsupportedNumberingSystemError, get_decimal_symbol, get_group_symbol

from wikimsg.constants import DEFAULT_LOCALE, MAX_PROFILE_CACHE_SIZE
from wikimsg.diagnostics import ErrorTemplate
from wikimsg.locale_utils import get_babel_locale, language_subtag, normalize_locale
from wikimsg.runtime.grammar import GrammarRules, compile_grammar
from wikimsg.runtime.locale_data import (
    ASCII_DIGITS,
    GRAMMAR_TRANSFORMATIONS,
    LANGUAGE_ALIASES,
    LANGUAGE_NUMBERING_SYSTEMS,
    NUMBERING_SYSTEM_DIGITS,
    LocaleData,
    PluralRule,
)
from wikimsg.runtime.numerals import NumeralFormatter
from wikimsg.runtime.plural_rules import ordered_categories, select_form_index

__all__ = [
    "LanguageProfile",
    "LanguageProfileCache",
    "LocaleFetcher",
    "build_profile",
]

logger = logging.getLogger(__name__)

type LocaleFetcher = Callable[[str], Awaitable[LocaleData | None]]
"""Async collaborator that fetches locale data for a locale code."""


@dataclass(frozen=True, slots=True)
class LanguageProfile:
    """Language capabilities used by the evaluator.

    Attributes:
        locale_code: Locale the profile was requested for (as given)
        plural_rule: Count -> CLDR plural category
        plural_categories: Categories in PLURAL form order, ending with "other"
        numerals: Digit and separator substitution
        grammar: Grammatical case rules
        is_fallback: True when the locale was unknown and English rules are used

    Example:
        >>> profile = build_profile("ar")
        >>> profile.format_number(987654321.654321)
        '٩٨٧٦٥٤٣٢١٫٦٥٤٣٢١'
        >>> profile.plural_categories
        ('zero', 'one', 'two', 'few', 'many', 'other')
    """

    locale_code: str
    plural_rule: PluralRule
    plural_categories: tuple[str, ...]
    numerals: NumeralFormatter
    grammar: GrammarRules
    is_fallback: bool = False

    def plural_category(self, n: int | float | Decimal) -> str:
        """Select the plural category for a count."""
        return self.plural_rule(n)

    def plural_index(self, n: int | float | Decimal, form_count: int) -> int:
        """Position of the PLURAL form to use for a count."""
        return select_form_index(self.plural_category(n), self.plural_categories, form_count)

    def supports_grammar_case(self, case: str) -> bool:
        """Check whether GRAMMAR knows this case for the language."""
        return self.grammar.supports(case)

    def grammar_case(self, word: str, case: str) -> str:
        """Transform word into the grammatical case (unchanged if unknown)."""
        return self.grammar.transform(word, case)

    def format_number(self, value: object) -> str:
        """Canonical number -> locale numerals; non-numbers unchanged."""
        return self.numerals.format(value)

    def parse_number(self, text: str) -> str:
        """Locale numerals -> canonical number string.

        Raises:
            NumeralError: If text is not a number in this locale
        """
        return self.numerals.parse(text)


def _number_symbols(babel_locale: Locale, numbering_system: str) -> tuple[str, str, str]:
    """Decimal symbol, group symbol and the numbering system CLDR has them for.

    Falls back to the Latin symbols when CLDR has none for numbering_system.
    """
    try:
        return (
            get_decimal_symbol(babel_locale, numbering_system=numbering_system),
            get_group_symbol(babel_locale, numbering_system=numbering_system),
            numbering_system,
        )
    except UnsupportedNumberingSystemError:
        logger.debug(
            "Locale '%s' has no symbols for numbering system '%s'; using latn",
            babel_locale,
            numbering_system,
        )
        return get_decimal_symbol(babel_locale), get_group_symbol(babel_locale), "latn"


def build_profile(locale_code: str, data: LocaleData | None = None) -> LanguageProfile:
    """Construct a LanguageProfile for a locale.

    Unknown locales log a warning and use the default (English) CLDR rules;
    the returned profile keeps the requested locale_code and has
    is_fallback=True.

    Args:
        locale_code: BCP-47 or POSIX locale code (e.g. "pt-br", "ar")
        data: Optional overrides (see LocaleData)

    Example:
        >>> build_profile("nl").format_number(-12.89)
        '-12,89'
    """
    data = data if data is not None else LocaleData()
    language = language_subtag(locale_code)
    cldr_code = LANGUAGE_ALIASES.get(language, normalize_locale(locale_code))

    is_fallback = False
    try:
        babel_locale = get_babel_locale(cldr_code)
    except (UnknownLocaleError, ValueError) as e:
        diagnostic = ErrorTemplate.locale_unknown(locale_code)
        logger.warning("%s (%s). Falling back to %s", diagnostic.message, e, DEFAULT_LOCALE)
        babel_locale = get_babel_locale(DEFAULT_LOCALE)
        is_fallback = True

    numbering_system = data.numbering_system or (
        "latn" if is_fallback else LANGUAGE_NUMBERING_SYSTEMS.get(language, "latn")
    )
    digits = data.digits or NUMBERING_SYSTEM_DIGITS.get(numbering_system, ASCII_DIGITS)
    decimal_symbol, group_symbol, symbols_system = _number_symbols(babel_locale, numbering_system)
    numerals = NumeralFormatter(
        locale_code=locale_code,
        digits=digits,
        decimal_symbol=data.decimal_symbol or decimal_symbol,
        group_symbol=data.group_symbol or group_symbol,
        babel_locale=str(babel_locale),
        numbering_system=symbols_system,
    )

    if data.plural_rule is not None and data.plural_categories is not None:
        plural_rule = data.plural_rule
        categories = ordered_categories(data.plural_categories)
    else:
        plural_rule = babel_locale.plural_form
        categories = ordered_categories(babel_locale.plural_form.tags)

    grammar = compile_grammar(
        {} if is_fallback else GRAMMAR_TRANSFORMATIONS.get(language, {}),
        data.grammar_transformations,
        forms=data.grammar_forms,
    )

    return LanguageProfile(
        locale_code=locale_code,
        plural_rule=plural_rule,
        plural_categories=categories,
        numerals=numerals,
        grammar=grammar,
        is_fallback=is_fallback,
    )


class LanguageProfileCache:
    """Thread-safe LRU cache of LanguageProfile instances keyed by locale.

    Construction happens at most once per locale: the first caller builds
    the profile outside the lock while concurrent callers for the same
    locale wait for that result. The lock only guards bookkeeping.

    Cache Management:
        - clear(): Drop all cached profiles (tests, locale data reloads)
        - size(): Current number of cached profiles
        - info(): Size, limit and cached locales in LRU order

    Example:
        >>> cache = LanguageProfileCache()
        >>> cache.get("nl") is cache.get("nl")
        True
        >>> cache.info()
        {'size': 1, 'max_size': 128, 'locales': ('nl',)}
    """

    __slots__ = ("_cache", "_lock", "_maxsize", "_pending")

    def __init__(self, maxsize: int = MAX_PROFILE_CACHE_SIZE) -> None:
        """Initialize profile cache.

        Raises:
            ValueError: If maxsize is not positive
        """
        if maxsize <= 0:
            msg = "maxsize must be positive"
            raise ValueError(msg)
        self._cache: OrderedDict[str, LanguageProfile] = OrderedDict()
        self._pending: dict[str, Future[LanguageProfile]] = {}
        self._maxsize = maxsize
        self._lock = RLock()

    def _lookup(self, key: str) -> LanguageProfile | None:
        profile = self._cache.get(key)
        if profile is not None:
            self._cache.move_to_end(key)
        return profile

    def _store(self, key: str, profile: LanguageProfile) -> LanguageProfile:
        """Insert unless another profile got there first; return the winner."""
        existing = self._lookup(key)
        if existing is not None:
            return existing
        if len(self._cache) >= self._maxsize:
            self._cache.popitem(last=False)
        self._cache[key] = profile
        return profile

    def get(self, locale_code: str) -> LanguageProfile:
        """Return the cached profile for a locale, building it on first use."""
        key = normalize_locale(locale_code)
        with self._lock:
            profile = self._lookup(key)
            if profile is not None:
                return profile
            pending = self._pending.get(key)
            owner = pending is None
            if pending is None:
                pending = Future()
                self._pending[key] = pending

        if not owner:
            return pending.result()

        try:
            profile = build_profile(locale_code)
        except BaseException as e:
            with self._lock:
                self._pending.pop(key, None)
            pending.set_exception(e)
            raise

        with self._lock:
            profile = self._store(key, profile)
            self._pending.pop(key, None)
        pending.set_result(profile)
        return profile

    def put(self, locale_code: str, data: LocaleData) -> LanguageProfile:
        """Build a profile from explicit data and cache it, replacing any entry."""
        key = normalize_locale(locale_code)
        profile = build_profile(locale_code, data)
        with self._lock:
            self._cache.pop(key, None)
            return self._store(key, profile)

    async def load(
        self, locale_code: str, fetch: LocaleFetcher, *, replace: bool = False
    ) -> LanguageProfile:
        """Fetch locale data asynchronously, then build and cache the profile.

        Nothing is cached until fetch() has completed: if the fetch is
        cancelled or raises, the cache is left as it was and a later call
        can retry.

        Args:
            locale_code: Locale to load
            fetch: Async callable returning LocaleData (or None for defaults)
            replace: Fetch even when the locale is cached, and replace the
                cached profile with the fetched one

        Returns:
            The cached profile (without replace, an existing one wins over
            a concurrent load)
        """
        key = normalize_locale(locale_code)
        if not replace:
            with self._lock:
                profile = self._lookup(key)
            if profile is not None:
                return profile

        data = await fetch(locale_code)
        profile = build_profile(locale_code, data)
        with self._lock:
            if replace:
                self._cache.pop(key, None)
            return self._store(key, profile)

    def clear(self) -> None:
        """Drop all cached profiles."""
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        """Current number of cached profiles."""
        with self._lock:
            return len(self._cache)

    def info(self) -> dict[str, int | tuple[str, ...]]:
        """Cache statistics: size, max_size, locales (LRU order)."""
        with self._lock:
            return {
                "size": len(self._cache),
                "max_size": self._maxsize,
                "locales": tuple(self._cache.keys()),
            }

    def __contains__(self, locale_code: object) -> bool:
        if not isinstance(locale_code, str):
            return False
        with self._lock:
            return normalize_locale(locale_code) in self._cache

    def __len__(self) -> int:
        return self.size()
