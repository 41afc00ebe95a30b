from __future__ import annotations

from typing import ClassVar

import pytest

from core.trans.interface import (
    InvalidCredentialsError,
    NotSupportedLanguagesError,
    TransInterface,
    TranslateExceptionError,
    TranslationServerError,
    TranslationTimeoutError,
)
from models.config_models import AdapterConfig
from models.translation_models import (
    Language,
    LanguageDetectionResult,
    PricingInfo,
    ProviderInfo,
    TranslationRequest,
    TranslationResponse,
)


class EchoEngine(TransInterface):
    PROVIDER_INFO: ClassVar[ProviderInfo] = ProviderInfo(
        id="echo",
        name="echo",
        display_name="Echo",
        description="Returns the input",
        category="local",
        supported_languages=(Language("en", "English", "English"), Language("ja", "Japanese", "日本語")),
        features=(),
        requires_api_key=True,
        requires_api_secret=True,
        pricing=PricingInfo(model="free", billing_unit="character"),
    )
    verify_error: ClassVar[BaseException | None] = None

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        self.ensure_language_pair(request.source_lang, request.target_lang)
        return TranslationResponse(translated_text=request.text.upper(), provider=self.provider_id)

    async def detect_language(self, text: str) -> LanguageDetectionResult:
        return LanguageDetectionResult(language="en", confidence=1.0)

    async def _verify_credentials(self) -> None:
        if EchoEngine.verify_error is not None:
            raise EchoEngine.verify_error


@pytest.fixture(autouse=True)
def reset_verify_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(EchoEngine, "verify_error", None)


def configured(api_key: str | None = "key", api_secret: str | None = "secret") -> EchoEngine:
    engine = EchoEngine()
    engine.configure(AdapterConfig(api_key=api_key, api_secret=api_secret))
    return engine


def test_defaults_before_configure() -> None:
    engine = EchoEngine()

    assert engine.provider_id == "echo"
    assert engine.request_timeout == 30.0
    assert engine.retry_attempts == 3
    assert engine.get_provider_info() is EchoEngine.PROVIDER_INFO
    assert [lang.code for lang in engine.get_supported_languages()] == ["en", "ja"]


def test_configure_overrides_timeout_and_retries() -> None:
    engine = EchoEngine()
    engine.configure(AdapterConfig(timeout=5.0, retries=1))

    assert engine.request_timeout == 5.0
    assert engine.retry_attempts == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("api_key", "api_secret", "message"),
    [
        (None, "secret", "API key is required"),
        ("key", None, "API secret is required"),
    ],
)
async def test_validate_config_requires_credentials(api_key: str | None, api_secret: str | None, message: str) -> None:
    result = await configured(api_key, api_secret).validate_config()

    assert result.valid is False
    assert result.message == message


@pytest.mark.asyncio
async def test_validate_config_reports_rejected_credentials() -> None:
    EchoEngine.verify_error = InvalidCredentialsError("Invalid API key", provider="echo")

    result = await configured().validate_config()

    assert result.valid is False
    assert result.message == "Invalid API key"
    assert result.details == {"code": 401}


@pytest.mark.asyncio
async def test_validate_config_never_raises() -> None:
    EchoEngine.verify_error = RuntimeError("unexpected")

    result = await configured().validate_config()

    assert result.valid is False
    assert result.message == "unexpected"


@pytest.mark.asyncio
async def test_validate_config_success() -> None:
    result = await configured().validate_config()

    assert result.valid is True


def test_language_pair_support() -> None:
    engine = EchoEngine()

    assert engine.is_language_pair_supported("en", "ja")
    assert engine.is_language_pair_supported("auto", "ja")
    assert not engine.is_language_pair_supported("en", "fr")
    assert not engine.is_language_pair_supported("auto", "auto")

    with pytest.raises(NotSupportedLanguagesError) as exc_info:
        engine.ensure_language_pair("fr", "en")

    assert exc_info.value.code == 400
    assert exc_info.value.details == {"source_lang": "fr", "target_lang": "en"}
    assert exc_info.value.provider == "echo"


@pytest.mark.asyncio
async def test_batch_translate_runs_every_request() -> None:
    engine = configured()

    responses = await engine.batch_translate(
        [TranslationRequest(text="a", target_lang="ja"), TranslationRequest(text="b", target_lang="ja")]
    )

    assert [response.translated_text for response in responses] == ["A", "B"]
    assert await engine.get_quota() is None


def test_exception_string_includes_provider() -> None:
    assert str(TranslateExceptionError("plain")) == "plain"
    assert str(TranslationServerError("boom", status=502, provider="google")) == "[google] boom"
    assert TranslationServerError("boom", status=502).code == 502
    assert TranslationTimeoutError("slow", timeout=2.5).details == {"timeout": 2.5}
