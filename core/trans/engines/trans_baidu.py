"""Baidu Translate (general text translation) implementation.

Requests are signed with MD5(appid + query + salt + secret). Baidu reports errors in the body
with HTTP 200, so ``error_code`` is mapped onto the translation exceptions here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Final

from core.trans.interface import (
    InvalidCredentialsError,
    NotSupportedLanguagesError,
    TransInterface,
    TranslateExceptionError,
    TranslationQuotaExceededError,
    TranslationServerError,
)
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
from utils.crypto_utils import CryptoUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["BaiduTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_ENDPOINT: Final[str] = "https://fanyi-api.baidu.com/api/trans/vip"

_LANG_CODES: Final[dict[str, str]] = {
    "auto": "auto",
    "zh-CN": "zh",
    "zh-TW": "cht",
    "ja": "jp",
    "ko": "kor",
    "fr": "fra",
    "es": "spa",
    "ar": "ara",
    "vi": "vie",
}
_REVERSE_CODES: Final[dict[str, str]] = {value: key for key, value in _LANG_CODES.items()}

_CREDENTIAL_ERRORS: Final[frozenset[str]] = frozenset({"52003", "54001", "58000", "90107"})
_QUOTA_ERRORS: Final[frozenset[str]] = frozenset({"54003", "54004", "54005", "58002"})
_LANGUAGE_ERRORS: Final[frozenset[str]] = frozenset({"58001"})


class BaiduTranslation(TransInterface):
    """Baidu Translate adapter.

    ``AdapterConfig.api_key`` holds the App ID and ``AdapterConfig.api_secret`` the secret key.
    """

    PROVIDER_INFO: ClassVar[ProviderInfo] = ProviderInfo(
        id="baidu",
        name="Baidu",
        display_name="Baidu Translate",
        description="Baidu general text translation, strong on Chinese",
        category="traditional",
        supported_languages=COMMON_LANGUAGES,
        features=(ProviderFeature(name="language_detection", description="Dedicated language detection endpoint"),),
        requires_api_key=True,
        requires_api_secret=True,
        pricing=PricingInfo(
            model="freemium",
            billing_unit="character",
            free_quota="50,000 characters per month (standard edition)",
            paid_pricing="CNY 49 per million characters",
        ),
        rate_limit=RateLimitInfo(requests_per_second=1, characters_per_request=6000),
        homepage="https://fanyi-api.baidu.com",
        documentation="https://fanyi-api.baidu.com/doc/21",
    )

    def __init__(self) -> None:
        super().__init__()
        self._requester: ProviderRequester = ProviderRequester(self.provider_id)

    def _on_configured(self) -> None:
        self._requester.apply_config(self._config)

    @property
    def _endpoint(self) -> str:
        return (self._config.endpoint or DEFAULT_ENDPOINT).rstrip("/")

    @staticmethod
    def _to_provider_code(code: str) -> str:
        return _LANG_CODES.get(code, code)

    @staticmethod
    def _from_provider_code(code: str) -> str:
        return _REVERSE_CODES.get(code, code)

    def _signed_params(self, text: str) -> dict[str, str]:
        salt: str = CryptoUtils.random_salt()
        app_id: str = self._config.api_key or ""
        sign: str = CryptoUtils.md5_hex(f"{app_id}{text}{salt}{self._config.api_secret or ''}")
        return {"q": text, "appid": app_id, "salt": salt, "sign": sign}

    def _raise_for_error(self, data: Any, source_lang: str = "", target_lang: str = "") -> None:
        if not isinstance(data, dict):
            msg = "Unexpected response format from Baidu"
            raise TranslateExceptionError(msg, provider=self.provider_id)
        code: str = str(data.get("error_code") or "")
        if not code or code == "52000":
            return
        message: str = f"Baidu error {code}: {data.get('error_msg', 'unknown error')}"
        if code in _CREDENTIAL_ERRORS:
            raise InvalidCredentialsError(message, code=code, provider=self.provider_id)
        if code in _QUOTA_ERRORS:
            raise TranslationQuotaExceededError(message, code=code, provider=self.provider_id)
        if code in _LANGUAGE_ERRORS:
            raise NotSupportedLanguagesError(
                message, source_lang=source_lang, target_lang=target_lang, provider=self.provider_id, code=code
            )
        # 52001 (timeout) and 52002 (system error) are transient on Baidu's side.
        raise TranslationServerError(message, status=500, provider=self.provider_id, details={"error_code": code})

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        self.ensure_language_pair(request.source_lang, request.target_lang)

        async def _send() -> Any:
            params: dict[str, str] = self._signed_params(request.text)
            params["from"] = self._to_provider_code(request.source_lang)
            params["to"] = self._to_provider_code(request.target_lang)
            data: Any = await self._requester.get(f"{self._endpoint}/translate", params=params)
            self._raise_for_error(data, request.source_lang, request.target_lang)
            return data

        data: dict[str, Any] = await retry_with_backoff(_send, attempts=self.retry_attempts)
        try:
            translated_text: str = "\n".join(item["dst"] for item in data["trans_result"])
        except (KeyError, TypeError) as err:
            msg = "Unexpected response format from Baidu"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err

        detected: str | None = self._from_provider_code(data["from"]) if data.get("from") else None
        logger.info("translation completed (%s > %s)", detected or request.source_lang, request.target_lang)
        return TranslationResponse(
            translated_text=translated_text,
            provider=self.provider_id,
            detected_source_language=detected if request.source_lang == AUTO_DETECT else None,
            usage=UsageInfo(characters=len(request.text)),
        )

    async def detect_language(self, text: str) -> LanguageDetectionResult:
        async def _send() -> Any:
            data: Any = await self._requester.get(f"{self._endpoint}/language", params=self._signed_params(text))
            self._raise_for_error(data)
            return data

        data: dict[str, Any] = await retry_with_backoff(_send, attempts=self.retry_attempts)
        try:
            language: str = data["data"]["src"]
        except (KeyError, TypeError) as err:
            msg = "Unexpected detection response format from Baidu"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err
        return LanguageDetectionResult(language=self._from_provider_code(language), confidence=1.0)

    async def _verify_credentials(self) -> None:
        params: dict[str, str] = self._signed_params("test")
        params.update({"from": "en", "to": "zh"})
        data: Any = await self._requester.get(f"{self._endpoint}/translate", params=params)
        self._raise_for_error(data, "en", "zh-CN")

    async def close(self) -> None:
        await self._requester.close()
