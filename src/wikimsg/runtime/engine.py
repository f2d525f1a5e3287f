"""MessageEngine - main API for rendering localized wiki messages.

Python 3.13+. External dependency: Babel (CLDR locale data).
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

from wikimsg.constants import FALLBACK_MISSING_MESSAGE, MAX_DEPTH
from wikimsg.deprecation import deprecated, warn_deprecated
from wikimsg.diagnostics import (
    ErrorTemplate,
    MessageError,
    MessageReferenceError,
    MessageUsageError,
)
from wikimsg.enums import RenderFormat
from wikimsg.introspection import MessageIntrospection, introspect_message
from wikimsg.locale_utils import is_valid_locale_format
from wikimsg.runtime.cache import ParseCache
from wikimsg.runtime.evaluator import Argument, MessageEvaluator, TitleResolver
from wikimsg.runtime.language import LanguageProfile, LanguageProfileCache, LocaleFetcher
from wikimsg.runtime.renderer import render_node, to_html, to_text
from wikimsg.runtime.rendered import Escaped, RenderedNode

__all__ = [
    "MessageEngine",
    "MessageSource",
    "RenderOptions",
    "clear_shared_caches",
    "default_title_resolver",
    "get_shared_parse_cache",
    "get_shared_profile_cache",
]

logger = logging.getLogger(__name__)

# Legacy keyword render options and the release that drops them
_LEGACY_OPTIONS: frozenset[str] = frozenset({"format"})
_LEGACY_REMOVAL_VERSION: str = "1.0.0"

# Characters left unencoded in generated /wiki/ paths
_TITLE_SAFE_CHARS: str = ":/!*'()"


class MessageSource(Protocol):
    """Read-only message lookup: a dict, a MessageStore, or similar."""

    def get(self, key: str, /) -> str | None: ...


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Options for MessageEngine.render().

    Attributes:
        format: HTML string, plain text string, or the RenderedNode tree

    Raises:
        MessageUsageError: If format is not a RenderFormat value
    """

    format: RenderFormat = RenderFormat.HTML

    def __post_init__(self) -> None:
        """Coerce a format name ("html", "text", "node") to RenderFormat."""
        if isinstance(self.format, RenderFormat):
            return
        try:
            coerced = RenderFormat(self.format)
        except ValueError as e:
            raise MessageUsageError(
                ErrorTemplate.invalid_render_option("format", self.format)
            ) from e
        object.__setattr__(self, "format", coerced)


_DEFAULT_OPTIONS = RenderOptions()


def default_title_resolver(title: str) -> str:
    """Map a page title to a /wiki/ path.

    Example:
        >>> default_title_resolver("Main Page")
        '/wiki/Main_Page'
    """
    return "/wiki/" + quote(title.strip().replace(" ", "_"), safe=_TITLE_SAFE_CHARS)


# Process-wide default caches. Engines constructed without explicit caches
# share these; tests reset them through clear_shared_caches().
_shared_parse_cache = ParseCache()
_shared_profiles = LanguageProfileCache()


def get_shared_parse_cache() -> ParseCache:
    """Parsed-message cache used by engines that were not given one."""
    return _shared_parse_cache


def get_shared_profile_cache() -> LanguageProfileCache:
    """Language profile cache used by engines that were not given one."""
    return _shared_profiles


def clear_shared_caches() -> None:
    """Empty both shared caches."""
    _shared_parse_cache.clear()
    _shared_profiles.clear()


class MessageEngine:
    """Renders messages of one locale.

    Messages come from a read-only source (dict, MessageStore); arguments
    are positional ($1, $2, ...). Rendering never raises for problems in
    the message text: the best-effort output is returned together with a
    tuple of collected errors. Only API misuse raises MessageUsageError.

    Thread Safety:
        Rendering keeps its state in a per-call ResolutionContext and the
        shared caches lock internally, so one engine can serve many threads.
        load_locale() swaps the profile; renders already running keep the
        old one.

    Example:
        >>> engine = MessageEngine("en", messages={
        ...     "found": "Found $1 {{PLURAL:$1|item|items}}",
        ... })
        >>> engine.render("found", 3)
        'Found 3 items'
    """

    __slots__ = (
        "_evaluator",
        "_grammar_forms",
        "_locale",
        "_max_depth",
        "_messages",
        "_parse_cache",
        "_profiles",
        "_site_name",
        "_title_resolver",
    )

    def __init__(
        self,
        locale: str,
        /,
        *,
        messages: MessageSource | Mapping[str, str] | None = None,
        title_resolver: TitleResolver | None = None,
        site_name: str = "",
        grammar_forms: Mapping[str, Mapping[str, str]] | None = None,
        parse_cache: ParseCache | None = None,
        profiles: LanguageProfileCache | None = None,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        """Initialize engine for locale.

        Args:
            locale: Locale code (en, pt-BR, sr_Latn) [positional-only]
            messages: Message source; any object with get(key) -> str | None
            title_resolver: Page title -> URL for [[links]]
                (default: /wiki/Page_title)
            site_name: Value of {{SITENAME}}
            grammar_forms: case -> word -> form overrides for {{GRAMMAR}}
            parse_cache: Parsed-message cache (default: shared cache)
            profiles: Language profile cache (default: shared cache)
            max_depth: Nested message and construct depth limit

        Raises:
            ValueError: If locale code is empty or has invalid format,
                or max_depth is not positive
        """
        if not locale:
            msg = "Locale code cannot be empty"
            raise ValueError(msg)
        if not is_valid_locale_format(locale):
            msg = f"Invalid locale code format: '{locale}'"
            raise ValueError(msg)
        if max_depth <= 0:
            msg = f"max_depth must be positive, got {max_depth}"
            raise ValueError(msg)

        self._locale = locale
        self._messages: MessageSource | Mapping[str, str] = messages if messages is not None else {}
        self._title_resolver = title_resolver if title_resolver is not None else default_title_resolver
        self._site_name = site_name
        self._grammar_forms = grammar_forms or {}
        self._parse_cache = parse_cache if parse_cache is not None else _shared_parse_cache
        self._profiles = profiles if profiles is not None else _shared_profiles
        self._max_depth = max_depth
        self._evaluator = self._make_evaluator(self._profiles.get(locale))

        logger.info(
            "MessageEngine initialized for locale: %s (profile=%s)",
            locale,
            self._evaluator.profile.locale_code,
        )

    def _make_evaluator(self, profile: LanguageProfile) -> MessageEvaluator:
        return MessageEvaluator(
            profile,
            lookup=self._messages.get,
            parse=self._parse_cache.get_or_parse,
            title_resolver=self._title_resolver,
            site_name=self._site_name,
            grammar_forms=self._grammar_forms,
            max_depth=self._max_depth,
        )

    @property
    def locale(self) -> str:
        """Locale code this engine was created for."""
        return self._locale

    @property
    def profile(self) -> LanguageProfile:
        """Language profile currently used for rendering."""
        return self._evaluator.profile

    @property
    def parse_cache(self) -> ParseCache:
        """Parsed-message cache used by this engine."""
        return self._parse_cache

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return f"MessageEngine(locale={self._locale!r}, profile={self.profile.locale_code!r})"

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def format_message(
        self, key: str, /, *args: Argument
    ) -> tuple[RenderedNode, tuple[MessageError, ...]]:
        """Render a message to a RenderedNode tree with error reporting.

        Args:
            key: Message key [positional-only]
            *args: Positional arguments for $1, $2, ...

        Returns:
            Tuple of (rendered, errors)
            - rendered: Best-effort output tree ("[key]" for a missing message)
            - errors: Tuple of errors encountered (immutable)

        Example:
            >>> node, errors = engine.format_message("doesnt-exist")
            >>> to_text(node)
            '[doesnt-exist]'
            >>> type(errors[0]).__name__
            'MessageReferenceError'
        """
        raw = self._messages.get(key)
        if raw is None:
            logger.debug("Message '%s' not found", key)
            error = MessageReferenceError(ErrorTemplate.message_not_found(key))
            return (Escaped(FALLBACK_MISSING_MESSAGE.format(key=key)), (error,))

        result, errors = self._evaluator.evaluate_message(key, raw, args)
        if errors:
            logger.debug("Message '%s' rendered with %d error(s)", key, len(errors))
            for err in errors:
                logger.debug("  - %s: %s", type(err).__name__, err)
        return (result, errors)

    def render(
        self,
        key: str,
        /,
        *args: Argument,
        options: RenderOptions | None = None,
        **legacy: object,
    ) -> str | RenderedNode:
        """Render a message, discarding collected errors.

        Args:
            key: Message key [positional-only]
            *args: Positional arguments for $1, $2, ...
            options: Output options (default: HTML string)
            **legacy: Deprecated keyword form of the options (format=...)

        Returns:
            HTML or plain-text string, or the RenderedNode tree for
            RenderFormat.NODE

        Raises:
            MessageUsageError: If legacy keywords are combined with options=,
                or an unknown keyword / option value is passed
        """
        resolved = self._resolve_options(options, legacy)
        node, _errors = self.format_message(key, *args)
        return render_node(node, resolved.format)

    @staticmethod
    def _resolve_options(options: RenderOptions | None, legacy: Mapping[str, object]) -> RenderOptions:
        for name, value in legacy.items():
            if name not in _LEGACY_OPTIONS:
                raise MessageUsageError(ErrorTemplate.invalid_render_option(name, value))

        if legacy:
            if options is not None:
                raise MessageUsageError(ErrorTemplate.conflicting_render_options(list(legacy)))
            warn_deprecated(
                "render(format=...)",
                removal_version=_LEGACY_REMOVAL_VERSION,
                alternative="render(..., options=RenderOptions(format=...))",
                stacklevel=4,
            )
            return RenderOptions(format=legacy["format"])  # type: ignore[arg-type]

        if options is None:
            return _DEFAULT_OPTIONS
        if not isinstance(options, RenderOptions):
            raise MessageUsageError(ErrorTemplate.invalid_render_option("options", options))
        return options

    def html(self, key: str, /, *args: Argument) -> str:
        """Render a message to HTML."""
        node, _errors = self.format_message(key, *args)
        return to_html(node)

    def text(self, key: str, /, *args: Argument) -> str:
        """Render a message to plain text."""
        node, _errors = self.format_message(key, *args)
        return to_text(node)

    @deprecated(removal_version=_LEGACY_REMOVAL_VERSION, alternative="MessageEngine.text")
    def plain(self, key: str, /, *args: Argument) -> str:
        """Render a message to plain text."""
        return self.text(key, *args)

    # ------------------------------------------------------------------
    # Introspection and locale data
    # ------------------------------------------------------------------

    def has_message(self, key: str) -> bool:
        """Check if the message source has a message for key."""
        return self._messages.get(key) is not None

    def introspect(self, key: str) -> MessageIntrospection | None:
        """Static analysis of a message (None when the key is absent)."""
        raw = self._messages.get(key)
        if raw is None:
            return None
        return introspect_message(raw, parse=self._parse_cache.get_or_parse)

    async def load_locale(self, fetch: LocaleFetcher) -> LanguageProfile:
        """Await locale data from fetch and switch to the resulting profile.

        The fetched profile replaces the cached one for this locale. A
        cancelled or failed fetch leaves the engine on its current profile.
        """
        profile = await self._profiles.load(self._locale, fetch, replace=True)
        self._evaluator = self._make_evaluator(profile)
        logger.info("MessageEngine locale data loaded for: %s", self._locale)
        return profile

