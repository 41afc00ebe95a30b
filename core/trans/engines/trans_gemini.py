"""Google Gemini (Generative Language API) translation implementation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Final

from core.trans.engines.llm_prompt import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    build_detection_prompt,
    build_system_prompt,
    parse_detection_reply,
)
from core.trans.interface import TransInterface, TranslateExceptionError
from core.trans.request_helper import ProviderRequester, retry_with_backoff
from models.language_models import COMMON_LANGUAGES
from models.translation_models import (
    LanguageDetectionResult,
    PricingInfo,
    ProviderFeature,
    ProviderInfo,
    TranslationRequest,
    TranslationResponse,
    UsageInfo,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["GeminiTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_ENDPOINT: Final[str] = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL: Final[str] = "gemini-1.5-flash"

# USD per million tokens as (input, output).
_COST_PER_1M_TOKENS: Final[dict[str, tuple[float, float]]] = {
    "flash": (0.075, 0.30),
    "pro": (1.25, 5.00),
}


def estimate_cost(model: str, prompt_tokens: int, output_tokens: int) -> float:
    rates: tuple[float, float] = next(
        (rate for family, rate in _COST_PER_1M_TOKENS.items() if family in model), _COST_PER_1M_TOKENS["flash"]
    )
    return (prompt_tokens * rates[0] + output_tokens * rates[1]) / 1_000_000


class GeminiTranslation(TransInterface):
    PROVIDER_INFO: ClassVar[ProviderInfo] = ProviderInfo(
        id="gemini",
        name="Gemini",
        display_name="Google Gemini",
        description="Translation with Google's Gemini models, generous free tier",
        category="ai",
        supported_languages=COMMON_LANGUAGES,
        features=(
            ProviderFeature(name="context", description="Uses surrounding context"),
            ProviderFeature(name="glossary", description="Honours term glossaries"),
        ),
        requires_api_key=True,
        requires_api_secret=False,
        pricing=PricingInfo(
            model="freemium",
            billing_unit="token",
            free_quota="Free tier with per-minute request limits",
            paid_pricing="Depends on the model",
        ),
        homepage="https://ai.google.dev",
        documentation="https://ai.google.dev/api/generate-content",
    )

    def __init__(self) -> None:
        super().__init__()
        self._requester: ProviderRequester = ProviderRequester(self.provider_id)

    def _on_configured(self) -> None:
        self._requester.apply_config(self._config)

    @property
    def _endpoint(self) -> str:
        return (self._config.endpoint or DEFAULT_ENDPOINT).rstrip("/")

    @property
    def _model(self) -> str:
        return self._config.model or DEFAULT_MODEL

    async def _generate(self, system_prompt: str, user_text: str, temperature: float) -> dict[str, Any]:
        body: dict[str, Any] = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_text}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": self._config.max_tokens or DEFAULT_MAX_TOKENS,
            },
        }
        return await retry_with_backoff(
            lambda: self._requester.post(
                f"{self._endpoint}/models/{self._model}:generateContent",
                params={"key": self._config.api_key or ""},
                json_body=body,
            ),
            attempts=self.retry_attempts,
        )

    def _reply_text(self, data: Any) -> str:
        try:
            return str(data["candidates"][0]["content"]["parts"][0]["text"]).strip()
        except (IndexError, KeyError, TypeError) as err:
            msg = "Unexpected response format from Gemini"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        self.ensure_language_pair(request.source_lang, request.target_lang)
        temperature: float = (
            self._config.temperature if self._config.temperature is not None else DEFAULT_TEMPERATURE
        )
        data: dict[str, Any] = await self._generate(build_system_prompt(request), request.text, temperature)
        translated_text: str = self._reply_text(data)

        metadata: dict[str, Any] = data.get("usageMetadata") or {}
        prompt_tokens: int = int(metadata.get("promptTokenCount") or 0)
        output_tokens: int = int(metadata.get("candidatesTokenCount") or 0)
        total_tokens: int = int(metadata.get("totalTokenCount") or prompt_tokens + output_tokens)
        logger.info("translation completed (%s > %s) with %s", request.source_lang, request.target_lang, self._model)
        return TranslationResponse(
            translated_text=translated_text,
            provider=self.provider_id,
            model=self._model,
            usage=UsageInfo(
                characters=len(request.text),
                tokens=total_tokens,
                cost=estimate_cost(self._model, prompt_tokens, output_tokens),
            ),
        )

    async def detect_language(self, text: str) -> LanguageDetectionResult:
        data: dict[str, Any] = await self._generate(
            "You are a language identification service.", build_detection_prompt(text), 0.0
        )
        try:
            return parse_detection_reply(self._reply_text(data))
        except ValueError as err:
            raise TranslateExceptionError(str(err), provider=self.provider_id) from err

    async def _verify_credentials(self) -> None:
        await self._requester.get(f"{self._endpoint}/models", params={"key": self._config.api_key or ""})

    async def close(self) -> None:
        await self._requester.close()
