"""Registry and factory for translation provider adapters.

The registry maps provider ids to adapter factories and keeps one configured instance per id.
It is an ordinary object: each manager (and each test) works with its own registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from core.trans.interface import TransInterface, UnknownProviderError
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from models.config_models import AdapterConfig
    from models.translation_models import ProviderCategory, ProviderInfo

__all__: list[str] = ["DEFAULT_RECOMMENDATION", "AdapterFactory", "AdapterRegistry", "create_default_registry"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

type AdapterFactory = Callable[[], TransInterface]

DEFAULT_RECOMMENDATION: Final[str] = "google"


def _both_ways(provider_id: str, *pairs: tuple[str, str]) -> dict[str, str]:
    table: dict[str, str] = {}
    for first, second in pairs:
        table[f"{first}-{second}"] = provider_id
        table[f"{second}-{first}"] = provider_id
    return table


# Language pair ("source-target") to the provider known to handle it best.
_RECOMMENDATIONS: Final[dict[str, str]] = {
    **_both_ways("baidu", ("zh-CN", "en"), ("zh-TW", "en")),
    **_both_ways("youdao", ("zh-CN", "ja")),
    **_both_ways("deepl", *((lang, "en") for lang in ("de", "fr", "es", "it", "pt", "nl", "pl", "ru"))),
}


class AdapterRegistry:
    """Provider id to adapter factory mapping with a per-id singleton cache."""

    def __init__(self) -> None:
        self._factories: dict[str, AdapterFactory] = {}
        self._instances: dict[str, TransInterface] = {}

    @property
    def registered_ids(self) -> list[str]:
        """Registered provider ids in registration order."""
        return list(self._factories)

    def register(self, provider_id: str, factory: AdapterFactory) -> None:
        """Register an adapter factory. A later registration for the same id replaces the earlier one."""
        if provider_id in self._factories:
            logger.debug("Replacing adapter registration for '%s'", provider_id)
        self._factories[provider_id] = factory

    def create(self, provider_id: str, config: AdapterConfig) -> TransInterface:
        """Return the configured adapter for a provider id.

        The instance is created on first use and reused afterwards; every call reapplies the configuration.

        Args:
            provider_id (str): Registered provider id.
            config (AdapterConfig): Configuration handed to ``configure``.

        Returns:
            TransInterface: The singleton adapter instance for ``provider_id``.

        Raises:
            UnknownProviderError: If no factory is registered for ``provider_id``.
        """
        factory: AdapterFactory | None = self._factories.get(provider_id)
        if factory is None:
            msg: str = f"Unknown provider: {provider_id}"
            raise UnknownProviderError(msg, provider=provider_id)

        instance: TransInterface | None = self._instances.get(provider_id)
        if instance is None:
            instance = factory()
            self._instances[provider_id] = instance
            logger.debug("Adapter instance created: '%s'", provider_id)
        instance.configure(config)
        return instance

    def list_providers(self) -> list[ProviderInfo]:
        """Collect provider information from a throwaway instance of every registered adapter.

        Providers whose information cannot be read are logged and left out.
        """
        providers: list[ProviderInfo] = []
        for provider_id, factory in self._factories.items():
            try:
                providers.append(factory().get_provider_info())
            except Exception as err:  # noqa: BLE001
                logger.error("Failed to get provider info for '%s': %s", provider_id, err)
        return providers

    def list_providers_by_category(self, category: ProviderCategory) -> list[ProviderInfo]:
        return [info for info in self.list_providers() if info.category == category]

    @staticmethod
    def recommend(source_lang: str, target_lang: str) -> str:
        """Recommend a provider for a language pair, ``"google"`` when the pair has no specialist."""
        return _RECOMMENDATIONS.get(f"{source_lang}-{target_lang}", DEFAULT_RECOMMENDATION)

    def is_pair_supported(self, provider_id: str, source_lang: str, target_lang: str) -> bool:
        factory: AdapterFactory | None = self._factories.get(provider_id)
        if factory is None:
            return False
        return factory().is_language_pair_supported(source_lang, target_lang)

    def get_instance(self, provider_id: str) -> TransInterface | None:
        return self._instances.get(provider_id)

    def clear_instances(self) -> None:
        self._instances.clear()


def create_default_registry() -> AdapterRegistry:
    """Build a registry holding every built-in adapter."""
    from core.trans.engines import (  # noqa: PLC0415
        BaiduTranslation,
        ClaudeTranslation,
        DeeplTranslation,
        GeminiTranslation,
        GoogleTranslation,
        MicrosoftTranslation,
        OpenAITranslation,
        TencentTranslation,
        YoudaoTranslation,
    )

    registry = AdapterRegistry()
    adapter_classes: tuple[type[TransInterface], ...] = (
        GoogleTranslation,
        BaiduTranslation,
        DeeplTranslation,
        MicrosoftTranslation,
        YoudaoTranslation,
        TencentTranslation,
        OpenAITranslation,
        ClaudeTranslation,
        GeminiTranslation,
    )
    for adapter_class in adapter_classes:
        registry.register(adapter_class.PROVIDER_INFO.id, adapter_class)
    logger.debug("Default registry initialized with %d providers", len(registry.registered_ids))
    return registry
