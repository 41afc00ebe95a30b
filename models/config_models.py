"""Configuration data models.

Two families live here:

* The INI section dataclasses (``Config`` and friends) filled by ``config.loader.ConfigLoader``.
  Field names are upper case to match the keys in ``transrouter.ini``.
* The runtime configuration consumed by the translation manager (``ManagerConfig`` and friends).
  These are JSON friendly (camelCase keys) so a settings store can hand them over as plain dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from dataclasses_json import DataClassJsonMixin, LetterCase, dataclass_json

__all__: list[str] = [
    "AdapterConfig",
    "Config",
    "ManagerConfig",
    "ManagerOptions",
    "ProviderEntryConfig",
]

DEFAULT_TIMEOUT_SEC: float = 30.0
DEFAULT_RETRY_COUNT: int = 3


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class AdapterConfig(DataClassJsonMixin):
    """Credentials and tuning handed to a single provider adapter.

    Attributes:
        api_key (str | None): API key, app id or secret id depending on the provider.
        api_secret (str | None): Secondary secret (app secret, secret key).
        endpoint (str | None): Override for the provider's base URL.
        region (str | None): Cloud region, where the provider has one.
        model (str | None): Model name for AI providers.
        temperature (float | None): Sampling temperature for AI providers.
        max_tokens (int | None): Completion token limit for AI providers.
        timeout (float | None): Per-call deadline in seconds.
        retries (int | None): Number of attempts for transient failures.
        proxy (str | None): HTTP proxy URL.
        extra (dict[str, Any]): Provider specific settings without a dedicated field.
    """

    api_key: str | None = None
    api_secret: str | None = None
    endpoint: str | None = None
    region: str | None = None
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    timeout: float | None = None
    retries: int | None = None
    proxy: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class ProviderEntryConfig(AdapterConfig):
    enabled: bool = False

    def adapter_config(self) -> AdapterConfig:
        """Return the adapter part of this entry as an independent copy."""
        return AdapterConfig(
            api_key=self.api_key,
            api_secret=self.api_secret,
            endpoint=self.endpoint,
            region=self.region,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
            retries=self.retries,
            proxy=self.proxy,
            extra=dict(self.extra),
        )


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class ManagerOptions(DataClassJsonMixin):
    auto_fallback: bool = True
    cache_results: bool = True
    parallel_translation: bool = False
    retry_count: int = DEFAULT_RETRY_COUNT
    timeout: float = DEFAULT_TIMEOUT_SEC
    formality: str = "default"
    domain: str | None = None


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class ManagerConfig(DataClassJsonMixin):
    """Snapshot of the translation manager configuration.

    Replaced wholesale on reconfiguration, never edited in place.

    Attributes:
        primary_provider (str): Provider id tried first during fallback.
        fallback_providers (list[str]): Provider ids tried in order after the primary.
        providers (dict[str, ProviderEntryConfig]): Per-provider settings keyed by provider id.
        options (ManagerOptions): Behaviour switches.
        language_pair_preferences (dict[str, str]): Preferred provider per 'src-tgt' pair.
    """

    primary_provider: str = "google"
    fallback_providers: list[str] = field(default_factory=list)
    providers: dict[str, ProviderEntryConfig] = field(default_factory=dict)
    options: ManagerOptions = field(default_factory=ManagerOptions)
    language_pair_preferences: dict[str, str] = field(default_factory=dict)

    def enabled_providers(self) -> list[str]:
        return [provider_id for provider_id, entry in self.providers.items() if entry.enabled]


@dataclass
class General:
    DEBUG: bool = False
    VERSION: str = ""
    LOG_FILE: str = ""
    LOG_LEVEL: str = "INFO"


@dataclass
class Translation:
    PRIMARY_PROVIDER: str = "google"
    FALLBACK_PROVIDERS: list[str] = field(default_factory=list)
    AUTO_FALLBACK: bool = True
    CACHE_RESULTS: bool = True
    PARALLEL_TRANSLATION: bool = False
    RETRY_COUNT: int = DEFAULT_RETRY_COUNT
    TIMEOUT: float = DEFAULT_TIMEOUT_SEC
    FORMALITY: str = "default"
    DOMAIN: str = ""
    LANGUAGE_PAIR_PREFERENCES: dict[str, str] = field(default_factory=dict)


@dataclass
class Providers:
    ENABLED: list[str] = field(default_factory=list)
    SETTINGS: dict[str, dict[str, Any]] = field(default_factory=dict)


@dataclass
class Cache:
    MAX_SIZE: int = 1000
    TTL: float = 24 * 60 * 60.0


@dataclass
class Speech:
    ENABLED: bool = False
    PROVIDER: str = "youdao"
    VOICE_NAME: str = "youxiaoqin"
    SPEED: float = 1.0
    VOLUME: float = 1.0
    FORMAT: str = "mp3"


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    TRANSLATION: Translation = field(default_factory=Translation)
    PROVIDERS: Providers = field(default_factory=Providers)
    CACHE: Cache = field(default_factory=Cache)
    SPEECH: Speech = field(default_factory=Speech)
