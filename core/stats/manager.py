"""Usage statistics aggregation for translation providers."""

from __future__ import annotations

import json
import time
from dataclasses import replace
from datetime import date
from typing import TYPE_CHECKING

from models.stats_models import ErrorRecord, ProviderStats, StatsSnapshot, TodayStats, TotalStats
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from models.stats_models import ProviderStatsSnapshot
    from models.translation_models import TranslationResponse

__all__: list[str] = ["StatsManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class StatsManager:
    """Aggregates per-provider, total and daily usage figures.

    The daily bucket resets lazily: every recording first compares the current date with the
    date of the last reset and starts a new bucket when they differ.

    Args:
        today (Callable[[], date]): Source of the current date. Tests pass a fake one.
        clock (Callable[[], float]): Source of epoch seconds for error timestamps.
    """

    def __init__(
        self,
        *,
        today: Callable[[], date] = date.today,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._today: Callable[[], date] = today
        self._clock: Callable[[], float] = clock
        self._by_provider: dict[str, ProviderStats] = {}
        self._total: TotalStats = TotalStats()
        self._today_stats: TodayStats = TodayStats()
        self._last_reset: date = today()

    def _provider(self, provider_id: str) -> ProviderStats:
        stats: ProviderStats | None = self._by_provider.get(provider_id)
        if stats is None:
            stats = self._by_provider[provider_id] = ProviderStats()
        return stats

    def _check_daily_reset(self) -> None:
        current: date = self._today()
        if current != self._last_reset:
            logger.info("Daily statistics reset (%s -> %s)", self._last_reset.isoformat(), current.isoformat())
            self._today_stats = TodayStats()
            self._last_reset = current

    def record_success(self, response: TranslationResponse) -> None:
        """Count a successful translation against the provider that served it."""
        self._check_daily_reset()
        stats: ProviderStats = self._provider(response.provider)
        stats.requests += 1
        stats.successes += 1
        self._total.requests += 1
        self._total.successes += 1
        self._today_stats.requests += 1

        usage = response.usage
        if usage is None:
            return
        characters: int = usage.characters or 0
        tokens: int = usage.tokens or 0
        cost: float = usage.cost or 0.0
        stats.characters += characters
        stats.tokens += tokens
        stats.cost += cost
        self._total.characters += characters
        self._total.tokens += tokens
        self._total.cost += cost
        self._today_stats.characters += characters
        self._today_stats.tokens += tokens
        self._today_stats.cost += cost

    def record_failure(self, provider_id: str, error: BaseException) -> None:
        """Count a failed translation and keep the error in the provider's recent error log."""
        self._check_daily_reset()
        stats: ProviderStats = self._provider(provider_id)
        stats.requests += 1
        stats.failures += 1
        stats.errors.append(
            ErrorRecord(
                message=getattr(error, "message", None) or str(error),
                code=getattr(error, "code", None),
                timestamp=self._clock(),
            )
        )
        self._total.requests += 1
        self._total.failures += 1
        self._today_stats.requests += 1

    def record_response_time(self, provider_id: str, response_time_ms: float) -> None:
        self._check_daily_reset()
        stats: ProviderStats = self._provider(provider_id)
        stats.response_times.append(response_time_ms)
        stats.average_response_time = sum(stats.response_times) / len(stats.response_times)

    def record_cache_hit(self) -> None:
        self._check_daily_reset()
        self._total.cache_hits += 1

    def get_stats(self) -> StatsSnapshot:
        """Return a snapshot detached from the live counters."""
        return StatsSnapshot(
            total=replace(self._total),
            today=replace(self._today_stats),
            by_provider={provider_id: stats.snapshot() for provider_id, stats in self._by_provider.items()},
            last_reset=self._last_reset.isoformat(),
        )

    def get_provider_stats(self, provider_id: str) -> ProviderStatsSnapshot | None:
        stats: ProviderStats | None = self._by_provider.get(provider_id)
        return stats.snapshot() if stats is not None else None

    def clear(self) -> None:
        self._by_provider.clear()
        self._total = TotalStats()
        self._today_stats = TodayStats()
        self._last_reset = self._today()
        logger.info("Statistics cleared")

    def export(self) -> str:
        """Serialize the current statistics as indented camelCase JSON."""
        return json.dumps(self.get_stats().to_dict(), indent=2, ensure_ascii=False)
