"""Data models for TransRouter.

This package contains dataclass definitions for configuration, translation requests and responses,
provider metadata, cache entries, usage statistics and speech synthesis.
"""

from __future__ import annotations

from models.cache_models import CacheEntry, CacheStatistics
from models.config_models import AdapterConfig, Config, ManagerConfig, ManagerOptions, ProviderEntryConfig
from models.language_models import COMMON_LANGUAGES
from models.speech_models import SpeechSettings, SynthesisRequest, SynthesisResponse
from models.stats_models import ErrorRecord, ProviderStatsSnapshot, StatsSnapshot, TodayStats, TotalStats
from models.translation_models import (
    Language,
    LanguageDetectionResult,
    ProviderInfo,
    QuotaInfo,
    TranslationOptions,
    TranslationRequest,
    TranslationResponse,
    UsageInfo,
    ValidationResult,
)

__all__: list[str] = [
    "COMMON_LANGUAGES",
    "AdapterConfig",
    "CacheEntry",
    "CacheStatistics",
    "Config",
    "ErrorRecord",
    "Language",
    "LanguageDetectionResult",
    "ManagerConfig",
    "ManagerOptions",
    "ProviderEntryConfig",
    "ProviderInfo",
    "ProviderStatsSnapshot",
    "QuotaInfo",
    "SpeechSettings",
    "StatsSnapshot",
    "SynthesisRequest",
    "SynthesisResponse",
    "TodayStats",
    "TotalStats",
    "TranslationOptions",
    "TranslationRequest",
    "TranslationResponse",
    "UsageInfo",
    "ValidationResult",
]
