"""Youdao AI translation (text translation API) implementation.

Requests use the v3 signature: SHA256(appKey + input + salt + curtime + appSecret), where input is the
query abbreviated as described in ``StringUtils.abbreviate_for_signature``.
"""

from __future__ import annotations

import time
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
    TranslationRequest,
    TranslationResponse,
    UsageInfo,
)
from utils.crypto_utils import CryptoUtils
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["YoudaoTranslation", "youdao_signed_form"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_ENDPOINT: Final[str] = "https://openapi.youdao.com/api"
DETECTION_CONFIDENCE: Final[float] = 0.8

_LANG_CODES: Final[dict[str, str]] = {"zh-CN": "zh-CHS", "zh-TW": "zh-CHT"}
_REVERSE_CODES: Final[dict[str, str]] = {value: key for key, value in _LANG_CODES.items()}

_CREDENTIAL_ERRORS: Final[frozenset[str]] = frozenset({"108", "110", "111", "202"})
_QUOTA_ERRORS: Final[frozenset[str]] = frozenset({"401", "411", "412"})
_LANGUAGE_ERRORS: Final[frozenset[str]] = frozenset({"102"})


def youdao_signed_form(app_key: str, app_secret: str, text: str) -> dict[str, str]:
    """Build the signing fields shared by Youdao's translation and speech APIs.

    Args:
        app_key (str): Application key.
        app_secret (str): Application secret.
        text (str): Text being sent in the request.

    Returns:
        dict[str, str]: appKey, salt, curtime, signType and sign.
    """
    salt: str = CryptoUtils.random_salt()
    curtime: str = str(int(time.time()))
    sign: str = CryptoUtils.sha256_hex(
        f"{app_key}{StringUtils.abbreviate_for_signature(text)}{salt}{curtime}{app_secret}"
    )
    return {"appKey": app_key, "salt": salt, "curtime": curtime, "signType": "v3", "sign": sign}


class YoudaoTranslation(TransInterface):
    """Youdao adapter. ``api_key`` is the app key and ``api_secret`` the app secret."""

    PROVIDER_INFO: ClassVar[ProviderInfo] = ProviderInfo(
        id="youdao",
        name="Youdao",
        display_name="Youdao Translate",
        description="NetEase Youdao translation, strong on Chinese, Japanese and Korean",
        category="traditional",
        supported_languages=COMMON_LANGUAGES,
        features=(ProviderFeature(name="speech", description="Companion text-to-speech API"),),
        requires_api_key=True,
        requires_api_secret=True,
        pricing=PricingInfo(
            model="paid",
            billing_unit="character",
            paid_pricing="CNY 48 per million characters",
            details="Trial credit for new accounts",
        ),
        homepage="https://ai.youdao.com",
        documentation="https://ai.youdao.com/DOCSIRMA/html/trans/api/wbfy/index.html",
    )

    def __init__(self) -> None:
        super().__init__()
        self._requester: ProviderRequester = ProviderRequester(self.provider_id)

    def _on_configured(self) -> None:
        self._requester.apply_config(self._config)

    @staticmethod
    def _to_provider_code(code: str) -> str:
        return _LANG_CODES.get(code, code)

    @staticmethod
    def _from_provider_code(code: str) -> str:
        return _REVERSE_CODES.get(code, code)

    def _raise_for_error(self, data: Any, source_lang: str, target_lang: str) -> None:
        if not isinstance(data, dict):
            msg = "Unexpected response format from Youdao"
            raise TranslateExceptionError(msg, provider=self.provider_id)
        code: str = str(data.get("errorCode", "0"))
        if code == "0":
            return
        message: str = f"Youdao error {code}"
        if code in _CREDENTIAL_ERRORS:
            raise InvalidCredentialsError(message, code=code, provider=self.provider_id)
        if code in _QUOTA_ERRORS:
            raise TranslationQuotaExceededError(message, code=code, provider=self.provider_id)
        if code in _LANGUAGE_ERRORS:
            raise NotSupportedLanguagesError(
                message, source_lang=source_lang, target_lang=target_lang, provider=self.provider_id, code=code
            )
        raise TranslationServerError(message, status=500, provider=self.provider_id, details={"error_code": code})

    async def _send(self, text: str, source_lang: str, target_lang: str) -> dict[str, Any]:
        form: dict[str, str] = youdao_signed_form(self._config.api_key or "", self._config.api_secret or "", text)
        form.update(
            {
                "q": text,
                "from": self._to_provider_code(source_lang),
                "to": self._to_provider_code(target_lang),
            }
        )
        data: Any = await self._requester.post(self._config.endpoint or DEFAULT_ENDPOINT, form=form)
        self._raise_for_error(data, source_lang, target_lang)
        return data

    def _detected_language(self, data: dict[str, Any]) -> str | None:
        # 'l' looks like 'en2zh-CHS'.
        pair: str = str(data.get("l") or "")
        if "2" not in pair:
            return None
        return self._from_provider_code(pair.split("2")[0])

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        self.ensure_language_pair(request.source_lang, request.target_lang)
        data: dict[str, Any] = await retry_with_backoff(
            lambda: self._send(request.text, request.source_lang, request.target_lang),
            attempts=self.retry_attempts,
        )
        try:
            translated_text: str = "\n".join(data["translation"])
        except (KeyError, TypeError) as err:
            msg = "Unexpected response format from Youdao"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err

        detected: str | None = self._detected_language(data)
        logger.info("translation completed (%s > %s)", detected or request.source_lang, request.target_lang)
        return TranslationResponse(
            translated_text=translated_text,
            provider=self.provider_id,
            detected_source_language=detected,
            usage=UsageInfo(characters=len(request.text)),
        )

    async def detect_language(self, text: str) -> LanguageDetectionResult:
        """Detect the language from the language pair Youdao reports for a translation into English."""
        data: dict[str, Any] = await retry_with_backoff(
            lambda: self._send(text, AUTO_DETECT, "en"),
            attempts=self.retry_attempts,
        )
        detected: str | None = self._detected_language(data)
        if detected is None:
            msg = "Youdao did not report a source language"
            raise TranslateExceptionError(msg, provider=self.provider_id)
        return LanguageDetectionResult(language=detected, confidence=DETECTION_CONFIDENCE)

    async def _verify_credentials(self) -> None:
        await self._send("test", "en", "zh-CN")

    async def close(self) -> None:
        await self._requester.close()
