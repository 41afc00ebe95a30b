from __future__ import annotations

import dataclasses

import pytest

from models.language_models import (
    get_language,
    get_language_name,
    get_native_language_name,
    is_language_supported,
)
from models.translation_models import (
    QuotaInfo,
    TranslationOptions,
    TranslationRequest,
    TranslationResponse,
    UsageInfo,
)


def test_request_defaults_to_auto_source() -> None:
    request = TranslationRequest(text="hello", target_lang="ja")

    assert request.source_lang == "auto"
    assert request.options == TranslationOptions()
    assert request.language_pair == "auto-ja"


def test_request_with_empty_source_falls_back_to_auto() -> None:
    request = TranslationRequest(text="hello", target_lang="ja", source_lang="")

    assert request.source_lang == "auto"


@pytest.mark.parametrize(("text", "target"), [("", "ja"), ("hello", "")])
def test_request_rejects_missing_text_or_target(text: str, target: str) -> None:
    with pytest.raises(ValueError, match="must"):
        TranslationRequest(text=text, target_lang=target)


def test_request_is_immutable() -> None:
    request = TranslationRequest(text="hello", target_lang="ja")

    with pytest.raises(dataclasses.FrozenInstanceError):
        request.text = "bye"  # type: ignore[misc]


def test_request_json_uses_camel_case() -> None:
    request = TranslationRequest(
        text="hello",
        target_lang="ja",
        source_lang="en",
        options=TranslationOptions(formality="formal", preferred_provider="deepl"),
    )

    data = request.to_dict()

    assert data["targetLang"] == "ja"
    assert data["sourceLang"] == "en"
    assert data["options"]["preferredProvider"] == "deepl"
    assert data["options"]["preserveFormatting"] is False
    assert TranslationRequest.from_dict(data) == request


def test_response_from_dict_builds_nested_usage() -> None:
    response = TranslationResponse.from_dict(
        {
            "translatedText": "こんにちは",
            "provider": "openai",
            "timestamp": 1.0,
            "usage": {"characters": 5, "tokens": 12, "cost": 0.001},
        }
    )

    assert response.usage == UsageInfo(characters=5, tokens=12, cost=0.001)
    assert response.cached is False
    assert response.alternatives == []


def test_cached_copy_leaves_original_untouched() -> None:
    response = TranslationResponse(translated_text="hola", provider="google")

    cached = dataclasses.replace(response, cached=True)

    assert cached.cached is True
    assert response.cached is False
    assert cached.timestamp == response.timestamp


def test_quota_remaining_never_negative() -> None:
    assert QuotaInfo(used=200, limit=500).remaining == 300
    assert QuotaInfo(used=600, limit=500).remaining == 0


def test_language_catalog_lookup() -> None:
    japanese = get_language("ja")

    assert japanese is not None
    assert japanese.native_name == "日本語"
    assert get_language_name("zh-CN") == "Chinese (Simplified)"
    assert get_language_name("xx") == "xx"
    assert get_native_language_name("ko") == "한국어"
    assert get_native_language_name("xx") == "xx"
    assert is_language_supported("auto") is True
    assert is_language_supported("klingon") is False
