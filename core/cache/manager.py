"""Translation cache manager.

Keeps translation results in memory with least-recently-used eviction and a time-to-live.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import TYPE_CHECKING, ClassVar

from models.cache_models import CacheEntry, CacheStatistics
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from models.translation_models import TranslationRequest, TranslationResponse

__all__: list[str] = ["TranslationCacheManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class TranslationCacheManager:
    """LRU + TTL cache for translation responses.

    Entries live in an ``OrderedDict`` ordered from least to most recently used, so touching
    and evicting are both constant time. An entry older than the TTL counts as absent even
    while it is still stored; ``get`` drops it lazily and ``clean_expired`` sweeps all of them.

    Attributes:
        DEFAULT_MAX_SIZE (ClassVar[int]): Default capacity in entries.
        DEFAULT_TTL_SEC (ClassVar[float]): Default entry lifetime in seconds (24 hours).
    """

    DEFAULT_MAX_SIZE: ClassVar[int] = 1000
    DEFAULT_TTL_SEC: ClassVar[float] = 24 * 60 * 60.0

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        ttl: float = DEFAULT_TTL_SEC,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache manager.

        Args:
            max_size (int): Maximum number of entries, at least 1.
            ttl (float): Entry lifetime in seconds.
            clock (Callable[[], float]): Time source in seconds. Tests pass a fake clock.
        """
        if max_size < 1:
            msg: str = f"Cache size must be at least 1: {max_size}"
            raise ValueError(msg)
        self.max_size: int = max_size
        self.ttl: float = ttl
        self._clock: Callable[[], float] = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        logger.debug("TranslationCacheManager created (max_size=%d, ttl=%.0f sec)", max_size, ttl)

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def generate_key(request: TranslationRequest) -> str:
        return StringUtils.generate_cache_key(request.text, request.source_lang, request.target_lang)

    def get(self, request: TranslationRequest) -> TranslationResponse | None:
        """Look up a fresh response for a request.

        A hit moves the entry to the most recently used position.

        Args:
            request (TranslationRequest): Request whose key is looked up.

        Returns:
            TranslationResponse | None: The stored response, or None on a miss or an expired entry.
        """
        key: str = self.generate_key(request)
        entry: CacheEntry | None = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock(), self.ttl):
            del self._entries[key]
            logger.debug("Cache entry expired: '%s'", key[:50])
            return None

        self._entries.move_to_end(key)
        return entry.response

    def set(self, request: TranslationRequest, response: TranslationResponse) -> None:
        """Store a response for a request.

        When the cache is full and the key is new, the least recently used entry is evicted first.

        Args:
            request (TranslationRequest): Request the response answers.
            response (TranslationResponse): Response to store.
        """
        key: str = self.generate_key(request)
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache entry evicted: '%s'", evicted[:50])
        self._entries[key] = CacheEntry(response=response, written_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Translation cache cleared")

    def clear_by_provider(self, provider_id: str) -> int:
        """Remove every entry served by a provider.

        Returns:
            int: Number of entries removed.
        """
        keys: list[str] = [key for key, entry in self._entries.items() if entry.response.provider == provider_id]
        for key in keys:
            del self._entries[key]
        logger.info("Removed %d cache entries for provider '%s'", len(keys), provider_id)
        return len(keys)

    def clean_expired(self) -> int:
        """Remove every expired entry.

        Returns:
            int: Number of entries removed.
        """
        now: float = self._clock()
        keys: list[str] = [key for key, entry in self._entries.items() if entry.is_expired(now, self.ttl)]
        for key in keys:
            del self._entries[key]
        if keys:
            logger.info("Removed %d expired cache entries", len(keys))
        return len(keys)

    def get_stats(self) -> CacheStatistics:
        size: int = len(self._entries)
        return CacheStatistics(
            size=size,
            max_size=self.max_size,
            ttl=self.ttl,
            usage=f"{size / self.max_size * 100:.2f}%",
        )
