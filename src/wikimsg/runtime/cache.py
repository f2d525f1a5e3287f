"""Thread-safe LRU cache for parsed messages.

Architecture:
    - Thread-safe using threading.RLock (reentrant lock)
    - LRU eviction via OrderedDict
    - Keyed by the raw message text, not the message key: a hot-reloaded
      translation is new text, so it can never be served a stale AST

Parse-error nodes (Junk) are cached like any other tree. They are
parsed without a message key; the evaluator fills the key in when it
renders the inline error.

Python 3.13+.
"""

from collections import OrderedDict
from threading import RLock

from wikimsg.constants import DEFAULT_CACHE_SIZE
from wikimsg.syntax.ast import Node
from wikimsg.syntax.parser import MessageParser

__all__ = ["ParseCache"]


class ParseCache:
    """Thread-safe LRU cache of raw message text -> AST.

    Attributes:
        maxsize: Maximum number of cache entries
        hits: Number of cache hits (for metrics)
        misses: Number of cache misses (for metrics)

    Example:
        >>> cache = ParseCache(maxsize=2)
        >>> tree = cache.get_or_parse("Found $1 {{PLURAL:$1|item|items}}")
        >>> cache.get_or_parse("Found $1 {{PLURAL:$1|item|items}}") is tree
        True
        >>> cache.hits, cache.misses
        (1, 1)
    """

    __slots__ = ("_cache", "_hits", "_lock", "_maxsize", "_misses", "_parser")

    def __init__(
        self,
        maxsize: int = DEFAULT_CACHE_SIZE,
        *,
        parser: MessageParser | None = None,
    ) -> None:
        """Initialize parse cache.

        Args:
            maxsize: Maximum number of entries (default: 1000)
            parser: Parser used on cache misses (default: MessageParser())

        Raises:
            ValueError: If maxsize is not positive
        """
        if maxsize <= 0:
            msg = "maxsize must be positive"
            raise ValueError(msg)

        self._cache: OrderedDict[str, Node] = OrderedDict()
        self._maxsize = maxsize
        self._parser = parser if parser is not None else MessageParser()
        self._lock = RLock()
        self._hits = 0
        self._misses = 0

    def get(self, raw: str) -> Node | None:
        """Get the cached AST for raw text, or None on a miss."""
        with self._lock:
            if raw in self._cache:
                self._cache.move_to_end(raw)
                self._hits += 1
                return self._cache[raw]

            self._misses += 1
            return None

    def put(self, raw: str, node: Node) -> None:
        """Store an AST. Evicts the LRU entry if the cache is full."""
        with self._lock:
            if raw in self._cache:
                self._cache.move_to_end(raw)
            elif len(self._cache) >= self._maxsize:
                self._cache.popitem(last=False)

            self._cache[raw] = node

    def get_or_parse(self, raw: str) -> Node:
        """Return the cached AST for raw text, parsing it on a miss.

        Parsing happens outside the lock; two threads missing on the same
        text may both parse it, and either tree is correct.
        """
        node = self.get(raw)
        if node is None:
            node = self._parser.parse(raw)
            self.put(raw, node)
        return node

    def clear(self) -> None:
        """Clear all cached entries and reset metrics."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def get_stats(self) -> dict[str, int | float]:
        """Get cache statistics.

        Returns:
            Dict with keys:
            - size (int): Current number of cached entries
            - maxsize (int): Maximum cache capacity
            - hits (int): Number of cache hits
            - misses (int): Number of cache misses
            - hit_rate (float): Hit rate as percentage (0.0-100.0)
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0

            return {
                "size": len(self._cache),
                "maxsize": self._maxsize,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 2),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    @property
    def maxsize(self) -> int:
        """Maximum cache size."""
        return self._maxsize

    @property
    def hits(self) -> int:
        """Number of cache hits."""
        with self._lock:
            return self._hits

    @property
    def misses(self) -> int:
        """Number of cache misses."""
        with self._lock:
            return self._misses
