from __future__ import annotations

from typing import ClassVar

import pytest

from core.trans.engines import GoogleTranslation
from core.trans.interface import TransInterface, UnknownProviderError
from core.trans.registry import AdapterRegistry, create_default_registry
from models.config_models import AdapterConfig
from models.translation_models import (
    Language,
    LanguageDetectionResult,
    PricingInfo,
    ProviderInfo,
    TranslationRequest,
    TranslationResponse,
)


class StubAdapter(TransInterface):
    PROVIDER_INFO: ClassVar[ProviderInfo]

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        return TranslationResponse(translated_text=request.text, provider=self.provider_id)

    async def detect_language(self, text: str) -> LanguageDetectionResult:
        return LanguageDetectionResult(language="en")


def adapter_class(provider_id: str, codes: tuple[str, ...] = ("en", "ja")) -> type[StubAdapter]:
    info = ProviderInfo(
        id=provider_id,
        name=provider_id,
        display_name=provider_id,
        description="stub",
        category="traditional",
        supported_languages=tuple(Language(code, code, code) for code in codes),
        features=(),
        requires_api_key=False,
        requires_api_secret=False,
        pricing=PricingInfo(model="free", billing_unit="character"),
    )
    return type(f"Stub_{provider_id}", (StubAdapter,), {"PROVIDER_INFO": info})


def test_create_returns_configured_singleton() -> None:
    registry = AdapterRegistry()
    registry.register("google", adapter_class("google"))

    first = registry.create("google", AdapterConfig(api_key="k1"))
    second = registry.create("google", AdapterConfig(api_key="k2"))

    assert first is second
    assert second.config.api_key == "k2"
    assert registry.get_instance("google") is first


def test_configure_copies_config() -> None:
    registry = AdapterRegistry()
    registry.register("google", adapter_class("google"))
    config = AdapterConfig(api_key="k1", extra={"formality": "less"})

    adapter = registry.create("google", config)
    config.extra["formality"] = "more"

    assert adapter.config.extra == {"formality": "less"}


def test_create_unknown_provider_raises() -> None:
    registry = AdapterRegistry()

    with pytest.raises(UnknownProviderError) as exc_info:
        registry.create("nope", AdapterConfig())

    assert exc_info.value.provider == "nope"
    assert exc_info.value.code == 404


def test_register_same_id_replaces_factory() -> None:
    registry = AdapterRegistry()
    registry.register("google", adapter_class("google"))
    replacement = adapter_class("google", ("en", "ko"))
    registry.register("google", replacement)

    assert registry.registered_ids == ["google"]
    assert isinstance(registry.create("google", AdapterConfig()), replacement)


def test_clear_instances_forces_new_instance() -> None:
    registry = AdapterRegistry()
    registry.register("google", adapter_class("google"))
    first = registry.create("google", AdapterConfig())

    registry.clear_instances()

    assert registry.get_instance("google") is None
    assert registry.create("google", AdapterConfig()) is not first


def test_list_providers_skips_broken_factories() -> None:
    registry = AdapterRegistry()
    registry.register("google", adapter_class("google"))

    def broken() -> GoogleTranslation:
        msg = "cannot build"
        raise RuntimeError(msg)

    registry.register("broken", broken)
    registry.register("deepl", adapter_class("deepl"))

    assert [info.id for info in registry.list_providers()] == ["google", "deepl"]


def test_is_pair_supported() -> None:
    registry = AdapterRegistry()
    registry.register("baidu", adapter_class("baidu", ("zh-CN", "en")))

    assert registry.is_pair_supported("baidu", "en", "zh-CN")
    assert registry.is_pair_supported("baidu", "auto", "en")
    assert not registry.is_pair_supported("baidu", "en", "ja")
    assert not registry.is_pair_supported("nope", "en", "zh-CN")


@pytest.mark.parametrize(
    ("source", "target", "expected"),
    [
        ("zh-CN", "en", "baidu"),
        ("en", "zh-TW", "baidu"),
        ("ja", "zh-CN", "youdao"),
        ("de", "en", "deepl"),
        ("en", "ru", "deepl"),
        ("en", "ja", "google"),
        ("auto", "en", "google"),
    ],
)
def test_recommend(source: str, target: str, expected: str) -> None:
    assert AdapterRegistry.recommend(source, target) == expected


def test_default_registry_holds_every_builtin_adapter() -> None:
    registry = create_default_registry()

    assert registry.registered_ids == [
        "google",
        "baidu",
        "deepl",
        "microsoft",
        "youdao",
        "tencent",
        "openai",
        "claude",
        "gemini",
    ]
    categories = {info.id: info.category for info in registry.list_providers()}
    assert categories["openai"] == "ai"
    assert categories["google"] == "traditional"
    assert {info.id for info in registry.list_providers_by_category("ai")} == {"openai", "claude", "gemini"}


def test_default_registry_instances_are_independent() -> None:
    first = create_default_registry()
    second = create_default_registry()

    adapter = first.create("google", AdapterConfig(api_key="key"))

    assert second.get_instance("google") is None
    assert isinstance(adapter, GoogleTranslation)
