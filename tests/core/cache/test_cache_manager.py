from __future__ import annotations

import pytest

from core.cache.manager import TranslationCacheManager
from models.translation_models import TranslationRequest, TranslationResponse


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now: float = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def request_for(text: str, source: str = "en", target: str = "ja") -> TranslationRequest:
    return TranslationRequest(text=text, source_lang=source, target_lang=target)


def response_for(text: str, provider: str = "google") -> TranslationResponse:
    return TranslationResponse(translated_text=f"<{text}>", provider=provider)


def test_set_and_get(clock: FakeClock) -> None:
    cache = TranslationCacheManager(10, 60.0, clock=clock)
    cache.set(request_for("hello"), response_for("hello"))

    cached = cache.get(request_for("hello"))

    assert cached is not None
    assert cached.translated_text == "<hello>"
    assert cache.get(request_for("hello", target="de")) is None
    assert len(cache) == 1


def test_key_depends_on_languages_and_text_prefix() -> None:
    long_text = "a" * 150

    key = TranslationCacheManager.generate_key(request_for(long_text))

    assert key == f"en:ja:{'a' * 100}..."
    assert TranslationCacheManager.generate_key(request_for("hi", source="auto")) == "auto:ja:hi"


def test_texts_sharing_long_prefix_share_entry(clock: FakeClock) -> None:
    cache = TranslationCacheManager(10, 60.0, clock=clock)
    cache.set(request_for("x" * 100 + "first"), response_for("first"))

    cached = cache.get(request_for("x" * 100 + "second"))

    assert cached is not None
    assert cached.translated_text == "<first>"


def test_expired_entry_is_removed_on_get(clock: FakeClock) -> None:
    cache = TranslationCacheManager(10, 60.0, clock=clock)
    cache.set(request_for("hello"), response_for("hello"))

    clock.advance(60.0)
    assert cache.get(request_for("hello")) is not None

    clock.advance(0.1)
    assert cache.get(request_for("hello")) is None
    assert len(cache) == 0


def test_lru_eviction_when_full(clock: FakeClock) -> None:
    cache = TranslationCacheManager(2, 60.0, clock=clock)
    cache.set(request_for("one"), response_for("one"))
    cache.set(request_for("two"), response_for("two"))

    # Touching 'one' makes 'two' the least recently used entry.
    assert cache.get(request_for("one")) is not None
    cache.set(request_for("three"), response_for("three"))

    assert cache.get(request_for("two")) is None
    assert cache.get(request_for("one")) is not None
    assert cache.get(request_for("three")) is not None
    assert len(cache) == 2


def test_overwrite_existing_key_does_not_evict(clock: FakeClock) -> None:
    cache = TranslationCacheManager(2, 60.0, clock=clock)
    cache.set(request_for("one"), response_for("one"))
    cache.set(request_for("two"), response_for("two"))

    clock.advance(30.0)
    cache.set(request_for("one"), response_for("one again"))
    clock.advance(40.0)

    cached = cache.get(request_for("one"))
    assert cached is not None
    assert cached.translated_text == "<one again>"
    assert cache.get(request_for("two")) is None


def test_clear_by_provider(clock: FakeClock) -> None:
    cache = TranslationCacheManager(10, 60.0, clock=clock)
    cache.set(request_for("one"), response_for("one", "google"))
    cache.set(request_for("two"), response_for("two", "deepl"))
    cache.set(request_for("three"), response_for("three", "deepl"))

    assert cache.clear_by_provider("deepl") == 2
    assert cache.clear_by_provider("baidu") == 0
    assert len(cache) == 1


def test_clean_expired(clock: FakeClock) -> None:
    cache = TranslationCacheManager(10, 60.0, clock=clock)
    cache.set(request_for("old"), response_for("old"))
    clock.advance(50.0)
    cache.set(request_for("new"), response_for("new"))
    clock.advance(20.0)

    assert cache.clean_expired() == 1
    assert cache.get(request_for("new")) is not None


def test_clear_and_stats(clock: FakeClock) -> None:
    cache = TranslationCacheManager(8, 120.0, clock=clock)
    cache.set(request_for("one"), response_for("one"))

    stats = cache.get_stats()
    assert stats.size == 1
    assert stats.max_size == 8
    assert stats.ttl == 120.0
    assert stats.usage == "12.50%"

    cache.clear()
    assert cache.get_stats().usage == "0.00%"


def test_defaults_and_invalid_size() -> None:
    cache = TranslationCacheManager()

    assert cache.max_size == 1000
    assert cache.ttl == 86400.0
    with pytest.raises(ValueError, match="at least 1"):
        TranslationCacheManager(0)
