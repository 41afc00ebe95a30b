"""Microsoft Translator (Azure AI Translator) v3 implementation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Final

from core.trans.interface import TransInterface, TranslateExceptionError
from core.trans.request_helper import ProviderRequester, retry_with_backoff
from models.language_models import COMMON_LANGUAGES
from models.translation_models import (
    AUTO_DETECT,
    LanguageDetectionResult,
    PricingInfo,
    ProviderFeature,
    ProviderInfo,
    RateLimitInfo,
    TranslationRequest,
    TranslationResponse,
    UsageInfo,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["MicrosoftTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_ENDPOINT: Final[str] = "https://api.cognitive.microsofttranslator.com"
DEFAULT_REGION: Final[str] = "global"
API_VERSION: Final[str] = "3.0"

_LANG_CODES: Final[dict[str, str]] = {"zh-CN": "zh-Hans", "zh-TW": "zh-Hant"}
_REVERSE_CODES: Final[dict[str, str]] = {value.lower(): key for key, value in _LANG_CODES.items()}


class MicrosoftTranslation(TransInterface):
    """Microsoft Translator adapter.

    ``AdapterConfig.api_key`` is the subscription key and ``AdapterConfig.region`` the resource region.
    """

    PROVIDER_INFO: ClassVar[ProviderInfo] = ProviderInfo(
        id="microsoft",
        name="Microsoft",
        display_name="Microsoft Translator",
        description="Azure AI Translator with a large free tier",
        category="traditional",
        supported_languages=COMMON_LANGUAGES,
        features=(
            ProviderFeature(name="language_detection", description="Dedicated language detection endpoint"),
            ProviderFeature(name="alternatives", description="Detection alternatives"),
        ),
        requires_api_key=True,
        requires_api_secret=False,
        pricing=PricingInfo(
            model="freemium",
            billing_unit="character",
            free_quota="2,000,000 characters per month",
            paid_pricing="$10 per million characters",
        ),
        rate_limit=RateLimitInfo(characters_per_request=50000),
        homepage="https://azure.microsoft.com/products/ai-services/ai-translator",
        documentation="https://learn.microsoft.com/azure/ai-services/translator/reference/v3-0-reference",
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
            "Ocp-Apim-Subscription-Key": self._config.api_key or "",
            "Ocp-Apim-Subscription-Region": self._config.region or DEFAULT_REGION,
            "Content-Type": "application/json",
        }

    @staticmethod
    def _to_provider_code(code: str) -> str:
        return _LANG_CODES.get(code, code)

    @staticmethod
    def _from_provider_code(code: str) -> str:
        return _REVERSE_CODES.get(code.lower(), code)

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        self.ensure_language_pair(request.source_lang, request.target_lang)
        params: dict[str, str] = {"api-version": API_VERSION, "to": self._to_provider_code(request.target_lang)}
        if request.source_lang != AUTO_DETECT:
            params["from"] = self._to_provider_code(request.source_lang)

        data: Any = await retry_with_backoff(
            lambda: self._requester.post(
                f"{self._endpoint}/translate",
                params=params,
                json_body=[{"text": request.text}],
                headers=self._headers(),
            ),
            attempts=self.retry_attempts,
        )

        try:
            item: dict[str, Any] = data[0]
            translated_text: str = item["translations"][0]["text"]
        except (IndexError, KeyError, TypeError) as err:
            msg = "Unexpected response format from Microsoft Translator"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err

        detected: dict[str, Any] = item.get("detectedLanguage") or {}
        detected_lang: str | None = self._from_provider_code(detected["language"]) if "language" in detected else None
        logger.info("translation completed (%s > %s)", detected_lang or request.source_lang, request.target_lang)
        return TranslationResponse(
            translated_text=translated_text,
            provider=self.provider_id,
            detected_source_language=detected_lang,
            confidence=detected.get("score"),
            usage=UsageInfo(characters=len(request.text)),
        )

    async def detect_language(self, text: str) -> LanguageDetectionResult:
        data: Any = await retry_with_backoff(
            lambda: self._requester.post(
                f"{self._endpoint}/detect",
                params={"api-version": API_VERSION},
                json_body=[{"text": text}],
                headers=self._headers(),
            ),
            attempts=self.retry_attempts,
        )
        try:
            item: dict[str, Any] = data[0]
            return LanguageDetectionResult(
                language=self._from_provider_code(item["language"]),
                confidence=float(item.get("score", 0.0)),
                alternatives=[
                    {"language": self._from_provider_code(alt["language"]), "confidence": alt.get("score", 0.0)}
                    for alt in item.get("alternatives", [])
                ],
            )
        except (IndexError, KeyError, TypeError, ValueError) as err:
            msg = "Unexpected detection response format from Microsoft Translator"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err

    async def _verify_credentials(self) -> None:
        await self._requester.post(
            f"{self._endpoint}/detect",
            params={"api-version": API_VERSION},
            json_body=[{"text": "test"}],
            headers=self._headers(),
        )

    async def close(self) -> None:
        await self._requester.close()
