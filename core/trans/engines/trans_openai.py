"""OpenAI chat completions translation implementation."""

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

__all__: list[str] = ["OpenAITranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_ENDPOINT: Final[str] = "https://api.openai.com/v1"
DEFAULT_MODEL: Final[str] = "gpt-3.5-turbo"

# USD per 1,000 tokens. Longest matching prefix wins.
_COST_PER_1K_TOKENS: Final[dict[str, float]] = {
    "gpt-4-turbo": 0.01,
    "gpt-4": 0.03,
    "gpt-3.5-turbo": 0.002,
}


def estimate_cost(model: str, total_tokens: int) -> float:
    for prefix in sorted(_COST_PER_1K_TOKENS, key=len, reverse=True):
        if model.startswith(prefix):
            return total_tokens / 1000 * _COST_PER_1K_TOKENS[prefix]
    return total_tokens / 1000 * _COST_PER_1K_TOKENS[DEFAULT_MODEL]


class OpenAITranslation(TransInterface):
    PROVIDER_INFO: ClassVar[ProviderInfo] = ProviderInfo(
        id="openai",
        name="OpenAI",
        display_name="OpenAI GPT",
        description="Context aware translation with OpenAI chat models",
        category="ai",
        supported_languages=COMMON_LANGUAGES,
        features=(
            ProviderFeature(name="context", description="Uses surrounding context"),
            ProviderFeature(name="glossary", description="Honours term glossaries"),
            ProviderFeature(name="formality", description="Formal or informal register"),
        ),
        requires_api_key=True,
        requires_api_secret=False,
        pricing=PricingInfo(model="usage-based", billing_unit="token", paid_pricing="Depends on the model"),
        homepage="https://openai.com",
        documentation="https://platform.openai.com/docs/api-reference/chat",
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

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.api_key or ''}", "Content-Type": "application/json"}

    async def _complete(self, system_prompt: str, user_text: str, *, temperature: float) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_text},
            ],
            "temperature": temperature,
            "max_tokens": self._config.max_tokens or DEFAULT_MAX_TOKENS,
        }
        return await retry_with_backoff(
            lambda: self._requester.post(f"{self._endpoint}/chat/completions", json_body=body, headers=self._headers()),
            attempts=self.retry_attempts,
        )

    def _reply_text(self, data: Any) -> str:
        try:
            return str(data["choices"][0]["message"]["content"]).strip()
        except (IndexError, KeyError, TypeError) as err:
            msg = "Unexpected response format from OpenAI"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        self.ensure_language_pair(request.source_lang, request.target_lang)
        temperature: float = (
            self._config.temperature if self._config.temperature is not None else DEFAULT_TEMPERATURE
        )
        data: dict[str, Any] = await self._complete(build_system_prompt(request), request.text, temperature=temperature)
        translated_text: str = self._reply_text(data)

        usage: dict[str, Any] = data.get("usage") or {}
        total_tokens: int = int(usage.get("total_tokens") or 0)
        model: str = str(data.get("model") or self._model)
        logger.info("translation completed (%s > %s) with %s", request.source_lang, request.target_lang, model)
        return TranslationResponse(
            translated_text=translated_text,
            provider=self.provider_id,
            model=model,
            usage=UsageInfo(
                characters=len(request.text),
                tokens=total_tokens,
                cost=estimate_cost(model, total_tokens),
            ),
        )

    async def detect_language(self, text: str) -> LanguageDetectionResult:
        data: dict[str, Any] = await self._complete(
            "You are a language identification service.", build_detection_prompt(text), temperature=0.0
        )
        reply: str = self._reply_text(data)
        try:
            return parse_detection_reply(reply)
        except ValueError as err:
            raise TranslateExceptionError(str(err), provider=self.provider_id) from err

    async def _verify_credentials(self) -> None:
        await self._requester.get(f"{self._endpoint}/models", headers=self._headers())

    async def close(self) -> None:
        await self._requester.close()
