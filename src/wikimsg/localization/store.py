"""MessageStore - key to raw message mapping with a locale fallback chain.

The engine only reads a store, through get(). Everything else here is for
the code that fills it: bulk loading from bundles, single edits, hot
reloads. Every write bumps `version`, so callers can tell that the
messages changed since they last looked.

Python 3.13+.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from threading import RLock

from wikimsg.enums import LoadStatus
from wikimsg.localization.loading import BundleLoadResult, LoadSummary, MessageLoader
from wikimsg.localization.types import LocaleCode, MessageKey, RawMessage

__all__ = ["MessageStore"]

logger = logging.getLogger(__name__)

# Longest error text included in load warnings
_LOG_TRUNCATE_WARNING: int = 100


class MessageStore:
    """Thread-safe mutable store of raw messages.

    Lookups that miss fall through to the fallback store, so a chain
    pt-br -> pt -> en answers with the most specific translation.

    Example:
        >>> en = MessageStore({"hello": "Hello", "bye": "Bye"}, locale="en")
        >>> de = MessageStore({"hello": "Hallo"}, locale="de", fallback=en)
        >>> de.get("hello"), de.get("bye"), de.get("missing")
        ('Hallo', 'Bye', None)
    """

    __slots__ = ("_fallback", "_load_summary", "_locale", "_lock", "_messages", "_version")

    def __init__(
        self,
        messages: Mapping[MessageKey, RawMessage] | None = None,
        *,
        locale: LocaleCode | None = None,
        fallback: "MessageStore | None" = None,
    ) -> None:
        """Initialize store.

        Args:
            messages: Initial messages (copied)
            locale: Locale of these messages (informational)
            fallback: Store consulted for keys this store lacks
        """
        self._messages: dict[MessageKey, RawMessage] = dict(messages or {})
        self._locale = locale
        self._fallback = fallback
        self._lock = RLock()
        self._version = 0
        self._load_summary: LoadSummary | None = None

    @classmethod
    def from_loader(cls, loader: MessageLoader, locales: Iterable[LocaleCode]) -> "MessageStore":
        """Build a fallback chain from bundles, first locale first.

        A locale whose bundle is missing or broken contributes an empty
        store, so the chain still reaches the later locales. The outcome
        of each load is available from load_summary().

        Raises:
            ValueError: If locales is empty
        """
        locale_list = list(locales)
        if not locale_list:
            msg = "At least one locale is required"
            raise ValueError(msg)

        *preferred, last = locale_list
        messages, result = _load_bundle(loader, last)
        store = cls(messages, locale=last)
        results = [result]
        for locale in reversed(preferred):
            messages, result = _load_bundle(loader, locale)
            store = cls(messages, locale=locale, fallback=store)
            results.append(result)

        store._load_summary = LoadSummary(tuple(reversed(results)))
        return store

    @property
    def locale(self) -> LocaleCode | None:
        """Locale of the messages held directly by this store."""
        return self._locale

    @property
    def fallback(self) -> "MessageStore | None":
        """Next store in the fallback chain."""
        return self._fallback

    @property
    def version(self) -> int:
        """Write counter; increases on every change to this store."""
        with self._lock:
            return self._version

    def load_summary(self) -> LoadSummary | None:
        """Outcome of from_loader(); None for stores built directly."""
        return self._load_summary

    # ------------------------------------------------------------------
    # Reading (the engine's side)
    # ------------------------------------------------------------------

    def get(self, key: MessageKey, /) -> RawMessage | None:
        """Raw message for key, searching the fallback chain."""
        with self._lock:
            raw = self._messages.get(key)
        if raw is None and self._fallback is not None:
            return self._fallback.get(key)
        return raw

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.get(key) is not None

    def keys(self) -> frozenset[MessageKey]:
        """All keys visible through this store, fallbacks included."""
        with self._lock:
            own = frozenset(self._messages)
        if self._fallback is not None:
            return own | self._fallback.keys()
        return own

    def __iter__(self) -> Iterator[MessageKey]:
        return iter(sorted(self.keys()))

    def __len__(self) -> int:
        return len(self.keys())

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        with self._lock:
            count = len(self._messages)
        fallback = self._fallback.locale if self._fallback is not None else None
        return f"MessageStore(locale={self._locale!r}, messages={count}, fallback={fallback!r})"

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def set(self, key: MessageKey, raw: RawMessage) -> None:
        """Add or replace one message."""
        with self._lock:
            self._messages[key] = raw
            self._version += 1

    def update(self, messages: Mapping[MessageKey, RawMessage]) -> None:
        """Add or replace many messages at once."""
        with self._lock:
            self._messages.update(messages)
            self._version += 1

    def remove(self, key: MessageKey) -> bool:
        """Remove a message from this store (not from fallbacks).

        Returns:
            True if the key was present
        """
        with self._lock:
            if key not in self._messages:
                return False
            del self._messages[key]
            self._version += 1
            return True

    def replace_all(self, messages: Mapping[MessageKey, RawMessage]) -> None:
        """Swap in a fresh set of messages (hot reload)."""
        with self._lock:
            self._messages = dict(messages)
            self._version += 1


def _load_bundle(
    loader: MessageLoader, locale: LocaleCode
) -> tuple[Mapping[MessageKey, RawMessage], BundleLoadResult]:
    """Load one locale's bundle; a missing or broken bundle yields no messages."""
    source_path = loader.describe_path(locale)
    try:
        messages = loader.load(locale)
    except FileNotFoundError:
        logger.debug("No message bundle for locale '%s' at %s", locale, source_path)
        return {}, BundleLoadResult(locale, LoadStatus.NOT_FOUND, source_path=source_path)
    except (OSError, ValueError) as e:
        logger.warning(
            "Failed to load message bundle %s: %.*s",
            source_path,
            _LOG_TRUNCATE_WARNING,
            str(e),
        )
        return {}, BundleLoadResult(locale, LoadStatus.ERROR, error=e, source_path=source_path)

    logger.info("Loaded %d message(s) for locale '%s'", len(messages), locale)
    return messages, BundleLoadResult(
        locale,
        LoadStatus.SUCCESS,
        source_path=source_path,
        message_count=len(messages),
    )
