from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Final

from deepl import DeepLClient, TextResult, Usage
from deepl.exceptions import (
    AuthorizationException,
    ConnectionException,
    DeepLException,
    QuotaExceededException,
    TooManyRequestsException,
)

from core.trans.interface import (
    InvalidCredentialsError,
    NotSupportedLanguagesError,
    TransInterface,
    TranslateExceptionError,
    TranslationNetworkError,
    TranslationQuotaExceededError,
    TranslationServerError,
)
from core.trans.request_helper import retry_with_backoff, run_blocking
from models.language_models import COMMON_LANGUAGES
from models.translation_models import (
    AUTO_DETECT,
    LanguageDetectionResult,
    PricingInfo,
    ProviderFeature,
    ProviderInfo,
    QuotaInfo,
    RateLimitInfo,
    TranslationRequest,
    TranslationResponse,
    UsageInfo,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

__all__: list[str] = ["DeeplTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

_SUPPORTED_CODES: Final[frozenset[str]] = frozenset(
    {"auto", "zh-CN", "zh-TW", "en", "ja", "ko", "fr", "de", "es", "ru", "it", "pt", "ar", "id", "nl", "pl", "tr"}
)

# DeepL rejects bare 'EN' and 'PT' as targets and distinguishes Chinese scripts on the target side only.
_TARGET_CODES: Final[dict[str, str]] = {
    "en": "EN-US",
    "pt": "PT-PT",
    "zh-CN": "ZH-HANS",
    "zh-TW": "ZH-HANT",
}

_FORMALITY: Final[dict[str, str]] = {"formal": "prefer_more", "informal": "prefer_less"}

DETECTION_SAMPLE_LENGTH: Final[int] = 100
DETECTION_CONFIDENCE: Final[float] = 0.9


class DeeplTranslation(TransInterface):
    PROVIDER_INFO: ClassVar[ProviderInfo] = ProviderInfo(
        id="deepl",
        name="DeepL",
        display_name="DeepL Translator",
        description="High quality neural machine translation, strongest on European languages",
        category="traditional",
        supported_languages=tuple(lang for lang in COMMON_LANGUAGES if lang.code in _SUPPORTED_CODES),
        features=(
            ProviderFeature(name="formality", description="Formal or informal register"),
            ProviderFeature(name="preserve_formatting", description="Keeps whitespace and punctuation"),
            ProviderFeature(name="usage_api", description="Character usage reporting"),
        ),
        requires_api_key=True,
        requires_api_secret=False,
        pricing=PricingInfo(
            model="freemium",
            billing_unit="character",
            free_quota="500,000 characters per month",
            paid_pricing="$25 per million characters",
            details="Keys ending in ':fx' use the free API host",
        ),
        rate_limit=RateLimitInfo(characters_per_request=128000),
        homepage="https://www.deepl.com",
        documentation="https://developers.deepl.com/docs",
    )

    def __init__(self) -> None:
        super().__init__()
        self.__inst: DeepLClient | None = None

    def _on_configured(self) -> None:
        self.__inst = None

    @property
    def _inst(self) -> DeepLClient:
        if self.__inst is None:
            if not self._config.api_key:
                msg = "API key is required"
                raise InvalidCredentialsError(msg, provider=self.provider_id)
            try:
                # Authentication happens on the first API call, not here.
                self.__inst = DeepLClient(
                    self._config.api_key,
                    server_url=self._config.endpoint or None,
                    proxy=self._config.proxy or None,
                )
            except (AttributeError, ValueError) as err:
                msg = "An error occurred while creating the DeepL client instance"
                raise TranslateExceptionError(msg, provider=self.provider_id) from err
            logger.debug("'%s': 'set instance'", self.__class__.__name__)
        return self.__inst

    @staticmethod
    def _source_code(code: str) -> str | None:
        if code == AUTO_DETECT:
            return None
        return code.split("-")[0].upper()

    @staticmethod
    def _target_code(code: str) -> str:
        return _TARGET_CODES.get(code, code.upper())

    async def _call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a DeepL client method in a worker thread and translate DeepL exceptions."""
        try:
            return await run_blocking(self.provider_id, self.request_timeout, func, *args, **kwargs)
        except AuthorizationException as err:
            msg = "Authorisation failed. Please check your authentication key"
            raise InvalidCredentialsError(msg, provider=self.provider_id) from err
        except QuotaExceededException as err:
            msg = "DeepL character quota exceeded"
            raise TranslationQuotaExceededError(msg, provider=self.provider_id) from err
        except TooManyRequestsException as err:
            msg = "DeepL rate limit reached"
            raise TranslationQuotaExceededError(msg, provider=self.provider_id) from err
        except ConnectionException as err:
            msg = "An error occurred when connecting to the DeepL server"
            raise TranslationNetworkError(msg, provider=self.provider_id) from err
        except DeepLException as err:
            status: int = getattr(err, "http_status_code", None) or 500
            msg = f"An anomaly occurred during the translation process at DeepL: {err}"
            raise TranslationServerError(msg, status=status, provider=self.provider_id) from err

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        self.ensure_language_pair(request.source_lang, request.target_lang)
        source: str | None = self._source_code(request.source_lang)
        target: str = self._target_code(request.target_lang)
        logger.debug("'text': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", request.text, source, target)

        kwargs: dict[str, Any] = {"source_lang": source, "target_lang": target}
        formality: str | None = _FORMALITY.get(request.options.formality)
        if formality:
            kwargs["formality"] = formality
        if request.options.preserve_formatting:
            kwargs["preserve_formatting"] = True
        if request.options.context:
            kwargs["context"] = request.options.context

        try:
            results: TextResult | list[TextResult] = await retry_with_backoff(
                lambda: self._call(self._inst.translate_text, request.text, **kwargs),
                attempts=self.retry_attempts,
            )
        except ValueError as err:
            msg: str = f"Languages not supported by DeepL. Source: '{request.source_lang}'. Target: '{target}'."
            raise NotSupportedLanguagesError(
                msg, source_lang=request.source_lang, target_lang=request.target_lang, provider=self.provider_id
            ) from err

        result: TextResult = self._first_result(results)
        logger.info("translation completed (%s > %s)", source, target)
        billed: int | None = getattr(result, "billed_characters", None)
        return TranslationResponse(
            translated_text=result.text,
            provider=self.provider_id,
            detected_source_language=result.detected_source_lang.lower() if result.detected_source_lang else None,
            usage=UsageInfo(characters=billed if billed is not None else len(request.text)),
        )

    def _first_result(self, results: TextResult | list[TextResult]) -> TextResult:
        if isinstance(results, list):
            if not results:
                msg = "DeepL returned an empty result"
                raise TranslateExceptionError(msg, provider=self.provider_id)
            return results[0]
        return results

    async def detect_language(self, text: str) -> LanguageDetectionResult:
        """Detect the language by translating a short sample into English.

        DeepL has no dedicated detection endpoint; the detected source language of the
        sample translation is used instead.
        """
        sample: str = text[:DETECTION_SAMPLE_LENGTH]
        results: TextResult | list[TextResult] = await retry_with_backoff(
            lambda: self._call(self._inst.translate_text, sample, target_lang=self._target_code("en")),
            attempts=self.retry_attempts,
        )
        result: TextResult = self._first_result(results)
        logger.debug("Detected language: '%s'", result.detected_source_lang)
        return LanguageDetectionResult(language=result.detected_source_lang.lower(), confidence=DETECTION_CONFIDENCE)

    async def get_quota(self) -> QuotaInfo | None:
        usage: Usage = await self._call(self._inst.get_usage)
        if usage.character is None:
            return None
        return QuotaInfo(used=usage.character.count or 0, limit=usage.character.limit or 0, unit="characters")

    async def _verify_credentials(self) -> None:
        await self._call(self._inst.get_usage)

    async def close(self) -> None:
        if self.__inst is not None:
            self.__inst.close()
        self.__inst = None
        logger.debug("'%s' process termination", self.__class__.__name__)
