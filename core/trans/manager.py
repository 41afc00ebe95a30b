from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from enum import Enum, auto
from typing import TYPE_CHECKING

from core.cache.manager import TranslationCacheManager
from core.stats.manager import StatsManager
from core.trans.interface import (
    AllProvidersFailedError,
    ManagerNotInitializedError,
    NoProviderAvailableError,
    ProviderUnavailableError,
)
from core.trans.registry import AdapterRegistry, create_default_registry
from models.translation_models import ValidationResult
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from core.trans.interface import TransInterface
    from models.cache_models import CacheStatistics
    from models.config_models import AdapterConfig, ManagerConfig, ProviderEntryConfig
    from models.stats_models import ProviderStatsSnapshot, StatsSnapshot
    from models.translation_models import (
        LanguageDetectionResult,
        ProviderCategory,
        ProviderInfo,
        QuotaInfo,
        TranslationRequest,
        TranslationResponse,
    )


__all__: list[str] = ["ManagerState", "TransManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class ManagerState(Enum):
    UNINITIALIZED = auto()
    INITIALIZING = auto()
    READY = auto()


class TransManager:
    """Manager routing translation requests across the configured providers.

    The manager builds its working set of adapters from a ``ManagerConfig``, selects a provider
    for each request, falls back to other providers on failure, caches results and records
    usage statistics. It exclusively owns its cache and statistics aggregator.

    Args:
        registry (AdapterRegistry | None): Adapter registry. The built-in registry is used when omitted.
        cache_max_size (int): Capacity of the result cache.
        cache_ttl (float): Lifetime of cached results in seconds.
        clock (Callable[[], float] | None): Time source for the cache, for tests.
    """

    def __init__(
        self,
        registry: AdapterRegistry | None = None,
        *,
        cache_max_size: int = TranslationCacheManager.DEFAULT_MAX_SIZE,
        cache_ttl: float = TranslationCacheManager.DEFAULT_TTL_SEC,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.registry: AdapterRegistry = registry if registry is not None else create_default_registry()
        self.cache_manager: TranslationCacheManager = TranslationCacheManager(
            cache_max_size, cache_ttl, clock=clock or time.monotonic
        )
        self.stats_manager: StatsManager = StatsManager()
        self._config: ManagerConfig | None = None
        self._adapters: dict[str, TransInterface] = {}
        self._state: ManagerState = ManagerState.UNINITIALIZED

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def config(self) -> ManagerConfig:
        """The active configuration snapshot.

        Raises:
            ManagerNotInitializedError: If ``initialize`` has not completed.
        """
        if self._config is None or self._state is not ManagerState.READY:
            msg = "TransManager not initialized"
            raise ManagerNotInitializedError(msg)
        return self._config

    @property
    def working_providers(self) -> list[str]:
        """Ids of the configured and validated providers in configuration order."""
        return list(self._adapters)

    async def initialize(self, config: ManagerConfig) -> None:
        """Build the working set of adapters from a configuration.

        Every enabled provider is created through the registry and validated. Providers that
        fail validation are logged and skipped, as are providers whose creation or validation
        raises. The manager becomes ready even if no provider validated.

        Args:
            config (ManagerConfig): Configuration snapshot to apply.
        """
        logger.info("TransManager initialization started")
        self._state = ManagerState.INITIALIZING
        self._config = config
        self._adapters.clear()

        for provider_id, entry in config.providers.items():
            if not entry.enabled:
                logger.debug("Provider disabled: '%s'", provider_id)
                continue

            adapter_config: AdapterConfig = self._merge_defaults(entry, config)
            try:
                adapter: TransInterface = self.registry.create(provider_id, adapter_config)
                validation: ValidationResult = await adapter.validate_config()
            except Exception as err:  # noqa: BLE001
                logger.error("Provider '%s' initialization failed: %s", provider_id, err)
                continue

            if validation.valid:
                self._adapters[provider_id] = adapter
                logger.info("Translation provider initialized: '%s'", provider_id)
            else:
                logger.warning("Provider '%s' validation failed: %s", provider_id, validation.message)

        self._state = ManagerState.READY
        logger.info("TransManager initialized with %d providers: %s", len(self._adapters), self.working_providers)

    async def update_config(self, config: ManagerConfig) -> None:
        await self.initialize(config)

    @staticmethod
    def _merge_defaults(entry: ProviderEntryConfig, config: ManagerConfig) -> AdapterConfig:
        adapter_config: AdapterConfig = entry.adapter_config()
        if adapter_config.timeout is None:
            adapter_config.timeout = config.options.timeout
        if adapter_config.retries is None:
            adapter_config.retries = config.options.retry_count
        return adapter_config

    def _apply_default_options(self, request: TranslationRequest) -> TranslationRequest:
        """Fill formality and domain from the manager options when the request leaves them unset."""
        options = self.config.options
        changes: dict[str, str] = {}
        if request.options.formality == "default" and options.formality != "default":
            changes["formality"] = options.formality
        if request.options.domain is None and options.domain:
            changes["domain"] = options.domain
        if not changes:
            return request
        return replace(request, options=replace(request.options, **changes))

    def _supports(self, provider_id: str, request: TranslationRequest) -> bool:
        adapter: TransInterface | None = self._adapters.get(provider_id)
        return adapter is not None and adapter.is_language_pair_supported(request.source_lang, request.target_lang)

    def select_provider(self, request: TranslationRequest) -> str:
        """Choose the provider that should serve a request.

        The first candidate that is in the working set and supports the language pair wins:
        the request's preferred provider, the configured preference for the pair, the registry's
        recommendation, the primary provider, then any working provider.

        Raises:
            NoProviderAvailableError: If no working provider supports the language pair.
        """
        config: ManagerConfig = self.config
        pair_key: str = f"{request.source_lang}-{request.target_lang}"
        candidates: tuple[str | None, ...] = (
            request.options.preferred_provider,
            config.language_pair_preferences.get(pair_key),
            self.registry.recommend(request.source_lang, request.target_lang),
            config.primary_provider,
        )
        for candidate in candidates:
            if candidate and self._supports(candidate, request):
                return candidate

        for provider_id in self._adapters:
            if self._supports(provider_id, request):
                return provider_id

        msg: str = f"No available translation provider for {pair_key}"
        raise NoProviderAvailableError(msg)

    async def translate_with_fallback(
        self, request: TranslationRequest, primary_provider_id: str
    ) -> TranslationResponse:
        """Translate with the given provider first, then the configured fallbacks.

        Candidates are tried strictly one after another. Candidates outside the working set or
        without support for the language pair are skipped.

        Args:
            request (TranslationRequest): Request to translate.
            primary_provider_id (str): Provider tried first.

        Returns:
            TranslationResponse: The first successful response.

        Raises:
            Exception: The first failure when auto fallback is off, otherwise the last failure, unchanged.
            AllProvidersFailedError: If no candidate could be tried at all.
        """
        config: ManagerConfig = self.config
        candidates: list[str] = [primary_provider_id]
        if config.options.auto_fallback:
            candidates.extend(config.fallback_providers)

        last_error: Exception | None = None
        for provider_id in dict.fromkeys(candidates):
            if not self._supports(provider_id, request):
                continue

            try:
                logger.debug("Translating with '%s'", provider_id)
                response: TranslationResponse = await self._adapters[provider_id].translate(request)
            except Exception as err:  # noqa: BLE001
                logger.error("Provider '%s' failed: %s", provider_id, err)
                if not config.options.auto_fallback:
                    raise
                last_error = err
                continue

            if provider_id != primary_provider_id:
                logger.info("Fallback to '%s' succeeded", provider_id)
            return response

        if last_error is not None:
            raise last_error
        msg = "All translation providers failed"
        raise AllProvidersFailedError(msg)

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        """Translate a request using the cache, provider selection and fallback.

        Args:
            request (TranslationRequest): Request to translate.

        Returns:
            TranslationResponse: The translation. Cache hits are returned as copies with ``cached=True``.

        Raises:
            ManagerNotInitializedError: If called before ``initialize``.
            NoProviderAvailableError: If no working provider supports the language pair.
            Exception: The failure of the last fallback candidate, re-raised unchanged.
        """
        config: ManagerConfig = self.config
        request = self._apply_default_options(request)

        if config.options.cache_results:
            cached: TranslationResponse | None = self.cache_manager.get(request)
            if cached is not None:
                logger.debug("Cache hit: '%s'", self.cache_manager.generate_key(request)[:50])
                self.stats_manager.record_cache_hit()
                return replace(cached, cached=True)

        provider_id: str = self.select_provider(request)
        logger.debug("Selected provider: '%s'", provider_id)

        started: float = time.perf_counter()
        try:
            response: TranslationResponse = await self.translate_with_fallback(request, provider_id)
        except Exception as err:
            self.stats_manager.record_failure(provider_id, err)
            raise

        self.stats_manager.record_response_time(response.provider, (time.perf_counter() - started) * 1000)
        if config.options.cache_results:
            self.cache_manager.set(request, response)
        self.stats_manager.record_success(response)
        return response

    async def detect_language(self, text: str, provider_id: str | None = None) -> LanguageDetectionResult:
        """Detect the language of a text with the given provider, the primary provider by default.

        Raises:
            ProviderUnavailableError: If the provider is not in the working set.
        """
        target_id: str = provider_id or self.config.primary_provider
        return await self._require_adapter(target_id).detect_language(text)

    async def parallel_translate(
        self, request: TranslationRequest, provider_ids: list[str]
    ) -> dict[str, TranslationResponse]:
        """Translate the same request with several providers concurrently.

        Providers outside the working set or without support for the pair are skipped.
        A failing provider is logged and recorded; it never cancels the others.

        Returns:
            dict[str, TranslationResponse]: Successful responses keyed by provider id.
        """
        request = self._apply_default_options(request)
        results: dict[str, TranslationResponse] = {}

        async def _run(provider_id: str) -> None:
            if not self._supports(provider_id, request):
                return
            try:
                response: TranslationResponse = await self._adapters[provider_id].translate(request)
            except Exception as err:  # noqa: BLE001
                logger.error("Parallel translation with '%s' failed: %s", provider_id, err)
                self.stats_manager.record_failure(provider_id, err)
                return
            results[provider_id] = response
            self.stats_manager.record_success(response)

        await asyncio.gather(*(_run(provider_id) for provider_id in dict.fromkeys(provider_ids)))
        return results

    async def batch_translate(self, requests: list[TranslationRequest]) -> list[TranslationResponse]:
        """Translate several requests concurrently. The first failure propagates."""
        return list(await asyncio.gather(*(self.translate(request) for request in requests)))

    def get_available_providers(self) -> list[ProviderInfo]:
        return self.registry.list_providers()

    def get_providers_by_category(self, category: ProviderCategory) -> list[ProviderInfo]:
        return self.registry.list_providers_by_category(category)

    async def get_quota(self, provider_id: str) -> QuotaInfo | None:
        """Return the provider's quota, or None when unavailable, unsupported or failing."""
        adapter: TransInterface | None = self._adapters.get(provider_id)
        if adapter is None:
            return None
        try:
            return await adapter.get_quota()
        except Exception as err:  # noqa: BLE001
            logger.warning("Quota lookup for '%s' failed: %s", provider_id, err)
            return None

    def get_stats(self) -> StatsSnapshot:
        return self.stats_manager.get_stats()

    def get_provider_stats(self, provider_id: str) -> ProviderStatsSnapshot | None:
        return self.stats_manager.get_provider_stats(provider_id)

    def get_cache_stats(self) -> CacheStatistics:
        return self.cache_manager.get_stats()

    def clear_cache(self) -> None:
        self.cache_manager.clear()

    def clear_cache_by_provider(self, provider_id: str) -> int:
        return self.cache_manager.clear_by_provider(provider_id)

    def clean_expired_cache(self) -> int:
        return self.cache_manager.clean_expired()

    def clear_stats(self) -> None:
        self.stats_manager.clear()

    def export_stats(self) -> str:
        return self.stats_manager.export()

    def is_provider_available(self, provider_id: str) -> bool:
        return provider_id in self._adapters

    async def validate_provider(self, provider_id: str) -> ValidationResult:
        adapter: TransInterface | None = self._adapters.get(provider_id)
        if adapter is None:
            return ValidationResult(valid=False, message="Provider not found")
        return await adapter.validate_config()

    def _require_adapter(self, provider_id: str) -> TransInterface:
        if self._state is not ManagerState.READY:
            msg = "TransManager not initialized"
            raise ManagerNotInitializedError(msg)
        adapter: TransInterface | None = self._adapters.get(provider_id)
        if adapter is None:
            msg = f"Provider not found: {provider_id}"
            raise ProviderUnavailableError(msg, provider=provider_id)
        return adapter

    async def shutdown(self) -> None:
        """Close every working adapter and return to the uninitialized state."""
        logger.info("TransManager shutdown started")
        for provider_id, adapter in self._adapters.items():
            try:
                await adapter.close()
            except Exception as err:  # noqa: BLE001
                logger.error("Error closing provider '%s': %s", provider_id, err)
        self._adapters.clear()
        self._config = None
        self._state = ManagerState.UNINITIALIZED
        logger.info("TransManager shutdown completed")
