"""Anthropic Messages API translation implementation."""

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

__all__: list[str] = ["ClaudeTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_ENDPOINT: Final[str] = "https://api.anthropic.com/v1"
DEFAULT_MODEL: Final[str] = "claude-3-sonnet-20240229"
DETECTION_MODEL: Final[str] = "claude-3-haiku-20240307"
API_VERSION: Final[str] = "2023-06-01"

# USD per million tokens as (input, output), matched on the model family name.
_COST_PER_1M_TOKENS: Final[dict[str, tuple[float, float]]] = {
    "opus": (15.0, 75.0),
    "sonnet": (3.0, 15.0),
    "haiku": (0.25, 1.25),
}


def estimate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    rates: tuple[float, float] = next(
        (rate for family, rate in _COST_PER_1M_TOKENS.items() if family in model), _COST_PER_1M_TOKENS["sonnet"]
    )
    return (input_tokens * rates[0] + output_tokens * rates[1]) / 1_000_000


class ClaudeTranslation(TransInterface):
    PROVIDER_INFO: ClassVar[ProviderInfo] = ProviderInfo(
        id="claude",
        name="Claude",
        display_name="Anthropic Claude",
        description="Nuanced, context aware translation with Claude models",
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
        homepage="https://www.anthropic.com",
        documentation="https://docs.anthropic.com/en/api/messages",
    )

    def __init__(self) -> None:
        super().__init__()
        self._requester: ProviderRequester = ProviderRequester(self.provider_id)

    def _on_configured(self) -> None:
        self._requester.apply_config(self._config)

    @property
    def _endpoint(self) -> str:
        return (self._config.endpoint or DEFAULT_ENDPOINT).rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._config.api_key or "",
            "anthropic-version": API_VERSION,
            "content-type": "application/json",
        }

    async def _message(self, model: str, system_prompt: str, user_text: str, temperature: float) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": model,
            "max_tokens": self._config.max_tokens or DEFAULT_MAX_TOKENS,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_text}],
            "temperature": temperature,
        }
        return await retry_with_backoff(
            lambda: self._requester.post(f"{self._endpoint}/messages", json_body=body, headers=self._headers()),
            attempts=self.retry_attempts,
        )

    def _reply_text(self, data: Any) -> str:
        try:
            return "".join(block["text"] for block in data["content"] if block.get("type") == "text").strip()
        except (KeyError, TypeError) as err:
            msg = "Unexpected response format from Claude"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        self.ensure_language_pair(request.source_lang, request.target_lang)
        model: str = self._config.model or DEFAULT_MODEL
        temperature: float = (
            self._config.temperature if self._config.temperature is not None else DEFAULT_TEMPERATURE
        )
        data: dict[str, Any] = await self._message(model, build_system_prompt(request), request.text, temperature)
        translated_text: str = self._reply_text(data)

        usage: dict[str, Any] = data.get("usage") or {}
        input_tokens: int = int(usage.get("input_tokens") or 0)
        output_tokens: int = int(usage.get("output_tokens") or 0)
        logger.info("translation completed (%s > %s) with %s", request.source_lang, request.target_lang, model)
        return TranslationResponse(
            translated_text=translated_text,
            provider=self.provider_id,
            model=str(data.get("model") or model),
            usage=UsageInfo(
                characters=len(request.text),
                tokens=input_tokens + output_tokens,
                cost=estimate_cost(model, input_tokens, output_tokens),
            ),
        )

    async def detect_language(self, text: str) -> LanguageDetectionResult:
        data: dict[str, Any] = await self._message(
            DETECTION_MODEL, "You are a language identification service.", build_detection_prompt(text), 0.0
        )
        try:
            return parse_detection_reply(self._reply_text(data))
        except ValueError as err:
            raise TranslateExceptionError(str(err), provider=self.provider_id) from err

    async def _verify_credentials(self) -> None:
        await self._requester.get(f"{self._endpoint}/models", headers=self._headers())

    async def close(self) -> None:
        await self._requester.close()
