"""Models for translation cache data.

Defines the cache entry and the cache statistics snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin, LetterCase, dataclass_json

from models.translation_models import TranslationResponse

__all__: list[str] = ["CacheEntry", "CacheStatistics"]


@dataclass
class CacheEntry:
    """Translation cache entry data.

    Attributes:
        response (TranslationResponse): Stored translation result.
        written_at (float): Clock value at the time of writing, in seconds.
    """

    response: TranslationResponse
    written_at: float

    def is_expired(self, now: float, ttl: float) -> bool:
        return now - self.written_at > ttl


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class CacheStatistics(DataClassJsonMixin):
    """Cache usage statistics.

    Attributes:
        size (int): Number of stored entries, expired ones included until evicted.
        max_size (int): Capacity.
        ttl (float): Entry lifetime in seconds.
        usage (str): Fill level as a percentage string, e.g. '12.50%'.
    """

    size: int = 0
    max_size: int = 0
    ttl: float = 0.0
    usage: str = "0.00%"
