from __future__ import annotations

import json
from datetime import date

import pytest

from core.stats.manager import StatsManager
from core.trans.interface import TranslationQuotaExceededError
from models.translation_models import TranslationResponse, UsageInfo


class FakeToday:
    def __init__(self, current: date) -> None:
        self.current: date = current

    def __call__(self) -> date:
        return self.current


@pytest.fixture
def today() -> FakeToday:
    return FakeToday(date(2024, 5, 1))


@pytest.fixture
def stats(today: FakeToday) -> StatsManager:
    return StatsManager(today=today, clock=lambda: 1714521600.0)


def response(
    provider: str = "openai", characters: int = 5, tokens: int = 40, cost: float = 0.01
) -> TranslationResponse:
    return TranslationResponse(
        translated_text="x", provider=provider, usage=UsageInfo(characters=characters, tokens=tokens, cost=cost)
    )


def test_record_success_updates_every_bucket(stats: StatsManager) -> None:
    stats.record_success(response())
    stats.record_success(response(characters=10, tokens=60, cost=0.02))

    snapshot = stats.get_stats()
    assert snapshot.total.requests == 2
    assert snapshot.total.successes == 2
    assert snapshot.total.characters == 15
    assert snapshot.total.tokens == 100
    assert snapshot.total.cost == pytest.approx(0.03)
    assert snapshot.today.requests == 2
    assert snapshot.today.cost == pytest.approx(0.03)
    assert snapshot.by_provider["openai"].characters == 15
    assert snapshot.last_reset == "2024-05-01"


def test_record_success_without_usage_counts_request_only(stats: StatsManager) -> None:
    stats.record_success(TranslationResponse(translated_text="x", provider="google"))

    snapshot = stats.get_stats()
    assert snapshot.total.requests == 1
    assert snapshot.total.characters == 0


def test_record_failure_keeps_recent_errors(stats: StatsManager) -> None:
    for index in range(12):
        stats.record_failure("deepl", TranslationQuotaExceededError(f"quota {index}", provider="deepl"))

    provider = stats.get_provider_stats("deepl")
    assert provider is not None
    assert provider.requests == 12
    assert provider.failures == 12
    assert provider.success_rate == "0.00%"
    assert len(provider.errors) == 10
    assert provider.errors[0].message == "quota 2"
    assert provider.errors[-1].code == 429
    assert provider.errors[-1].timestamp == 1714521600.0
    assert stats.get_stats().total.failures == 12


def test_record_failure_with_plain_exception(stats: StatsManager) -> None:
    stats.record_failure("google", RuntimeError("socket closed"))

    provider = stats.get_provider_stats("google")
    assert provider is not None
    assert provider.errors[0].message == "socket closed"
    assert provider.errors[0].code is None


def test_success_rate(stats: StatsManager) -> None:
    stats.record_success(response("google"))
    stats.record_success(response("google"))
    stats.record_failure("google", RuntimeError("boom"))

    provider = stats.get_provider_stats("google")
    assert provider is not None
    assert provider.success_rate == "66.67%"


def test_response_time_is_moving_average(stats: StatsManager) -> None:
    for value in range(1, 102):
        stats.record_response_time("google", float(value))

    provider = stats.get_provider_stats("google")
    assert provider is not None
    # Only the latest 100 samples (2..101) count.
    assert provider.average_response_time == pytest.approx(51.5)
    assert provider.requests == 0


def test_daily_bucket_resets_on_date_change(stats: StatsManager, today: FakeToday) -> None:
    stats.record_success(response())
    today.current = date(2024, 5, 2)

    stats.record_success(response(characters=3, tokens=0, cost=0.0))

    snapshot = stats.get_stats()
    assert snapshot.today.requests == 1
    assert snapshot.today.characters == 3
    assert snapshot.total.requests == 2
    assert snapshot.last_reset == "2024-05-02"


def test_response_time_after_date_change_resets_daily_bucket(stats: StatsManager, today: FakeToday) -> None:
    stats.record_success(response())
    today.current = date(2024, 5, 2)

    stats.record_response_time("openai", 120.0)

    snapshot = stats.get_stats()
    assert snapshot.today.requests == 0
    assert snapshot.today.cost == 0
    assert snapshot.total.requests == 1
    assert snapshot.last_reset == "2024-05-02"


def test_cache_hits_are_counted(stats: StatsManager) -> None:
    stats.record_cache_hit()
    stats.record_cache_hit()

    snapshot = stats.get_stats()
    assert snapshot.total.cache_hits == 2
    assert snapshot.total.requests == 0


def test_snapshot_is_detached(stats: StatsManager) -> None:
    stats.record_success(response())
    snapshot = stats.get_stats()

    stats.record_success(response())

    assert snapshot.total.requests == 1
    assert snapshot.by_provider["openai"].requests == 1


def test_unknown_provider_returns_none(stats: StatsManager) -> None:
    assert stats.get_provider_stats("missing") is None


def test_clear(stats: StatsManager, today: FakeToday) -> None:
    stats.record_success(response())
    today.current = date(2024, 6, 1)

    stats.clear()

    snapshot = stats.get_stats()
    assert snapshot.total.requests == 0
    assert snapshot.by_provider == {}
    assert snapshot.last_reset == "2024-06-01"


def test_export_is_camel_case_json(stats: StatsManager) -> None:
    stats.record_success(response())
    stats.record_cache_hit()

    exported = json.loads(stats.export())

    assert exported["total"]["cacheHits"] == 1
    assert exported["byProvider"]["openai"]["successRate"] == "100.00%"
    assert exported["lastReset"] == "2024-05-01"
    assert stats.export().startswith("{\n  ")
