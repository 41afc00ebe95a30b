"""Models for usage statistics.

``ProviderStats`` is the mutable record owned by ``core.stats.manager.StatsManager``.
Everything else is a read-only snapshot handed out to callers and exported as camelCase JSON.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin, LetterCase, dataclass_json

__all__: list[str] = [
    "ErrorRecord",
    "ProviderStats",
    "ProviderStatsSnapshot",
    "StatsSnapshot",
    "TodayStats",
    "TotalStats",
]

RESPONSE_TIME_WINDOW: int = 100
ERROR_LOG_SIZE: int = 10


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class ErrorRecord(DataClassJsonMixin):
    message: str
    code: str | int | None
    timestamp: float


@dataclass
class ProviderStats:
    """Per-provider counters.

    Attributes:
        requests (int): Requests attributed to the provider.
        successes (int): Successful requests.
        failures (int): Failed requests.
        characters (int): Characters billed.
        tokens (int): Tokens billed.
        cost (float): Accumulated cost.
        average_response_time (float): Mean of ``response_times`` in milliseconds.
        response_times (deque[float]): Most recent response times in milliseconds.
        errors (deque[ErrorRecord]): Most recent failures.
    """

    requests: int = 0
    successes: int = 0
    failures: int = 0
    characters: int = 0
    tokens: int = 0
    cost: float = 0.0
    average_response_time: float = 0.0
    response_times: deque[float] = field(default_factory=lambda: deque(maxlen=RESPONSE_TIME_WINDOW))
    errors: deque[ErrorRecord] = field(default_factory=lambda: deque(maxlen=ERROR_LOG_SIZE))

    @property
    def success_rate(self) -> str:
        if self.requests == 0:
            return "0%"
        return f"{self.successes / self.requests * 100:.2f}%"

    def snapshot(self) -> ProviderStatsSnapshot:
        return ProviderStatsSnapshot(
            requests=self.requests,
            successes=self.successes,
            failures=self.failures,
            characters=self.characters,
            tokens=self.tokens,
            cost=self.cost,
            average_response_time=self.average_response_time,
            success_rate=self.success_rate,
            errors=list(self.errors),
        )


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class ProviderStatsSnapshot(DataClassJsonMixin):
    requests: int = 0
    successes: int = 0
    failures: int = 0
    characters: int = 0
    tokens: int = 0
    cost: float = 0.0
    average_response_time: float = 0.0
    success_rate: str = "0%"
    errors: list[ErrorRecord] = field(default_factory=list)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class TotalStats(DataClassJsonMixin):
    requests: int = 0
    successes: int = 0
    failures: int = 0
    characters: int = 0
    tokens: int = 0
    cost: float = 0.0
    cache_hits: int = 0


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class TodayStats(DataClassJsonMixin):
    requests: int = 0
    characters: int = 0
    tokens: int = 0
    cost: float = 0.0


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class StatsSnapshot(DataClassJsonMixin):
    """Point-in-time copy of all statistics.

    Attributes:
        total (TotalStats): Totals since the last clear.
        today (TodayStats): Totals since the last daily reset.
        by_provider (dict[str, ProviderStatsSnapshot]): Per-provider figures.
        last_reset (str): ISO date of the last daily reset.
    """

    total: TotalStats
    today: TodayStats
    by_provider: dict[str, ProviderStatsSnapshot]
    last_reset: str
