"""Google Cloud Translation API Basic (v2) implementation.

Uses the google-cloud-translate client with an API key appended to every request.
The client is synchronous, so each call runs in a worker thread under the adapter deadline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

import requests
from google.api_core.exceptions import BadRequest, Forbidden, GoogleAPIError, TooManyRequests, Unauthorized
from google.auth.credentials import AnonymousCredentials
from google.auth.exceptions import TransportError
from google.auth.transport.requests import AuthorizedSession
from google.cloud import translate_v2 as translate

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
    RateLimitInfo,
    TranslationRequest,
    TranslationResponse,
    UsageInfo,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

__all__: list[str] = ["APIKeySession", "GoogleTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class APIKeySession:
    """HTTP session that appends the API key to every request URL."""

    def __init__(self, api_key: str) -> None:
        self.api_key: str = api_key
        self._session: AuthorizedSession = AuthorizedSession(AnonymousCredentials())

    def request(self, method: str, url: str, **kwargs):
        separator: str = "&" if "?" in url else "?"
        return self._session.request(method, f"{url}{separator}key={self.api_key}", **kwargs)

    def close(self) -> None:
        self._session.close()


class GoogleTranslation(TransInterface):
    """Google Cloud Translation (v2) adapter.

    The API key comes from ``AdapterConfig.api_key``; ``AdapterConfig.endpoint`` overrides the API host.
    """

    PROVIDER_INFO: ClassVar[ProviderInfo] = ProviderInfo(
        id="google",
        name="Google",
        display_name="Google Translate",
        description="Google Cloud Translation API, broad language coverage",
        category="traditional",
        supported_languages=COMMON_LANGUAGES,
        features=(
            ProviderFeature(name="language_detection", description="Dedicated language detection endpoint"),
            ProviderFeature(name="batch_translation", description="Multiple texts per request"),
        ),
        requires_api_key=True,
        requires_api_secret=False,
        pricing=PricingInfo(
            model="freemium",
            billing_unit="character",
            free_quota="500,000 characters per month",
            paid_pricing="$20 per million characters",
        ),
        rate_limit=RateLimitInfo(characters_per_request=30000),
        homepage="https://cloud.google.com/translate",
        documentation="https://cloud.google.com/translate/docs/reference/rest/v2/translate",
    )

    def __init__(self) -> None:
        super().__init__()
        self.__client: translate.Client | None = None
        self.__session: APIKeySession | None = None

    def _on_configured(self) -> None:
        # The client is rebuilt lazily with the new key.
        self._drop_client()

    @property
    def _client(self) -> translate.Client:
        if self.__client is None:
            api_key: str | None = self._config.api_key
            if not api_key:
                msg = "API key is required"
                raise InvalidCredentialsError(msg, provider=self.provider_id)
            self.__session = APIKeySession(api_key)
            client_options: dict[str, str] | None = (
                {"api_endpoint": self._config.endpoint} if self._config.endpoint else None
            )
            self.__client = translate.Client(
                credentials=AnonymousCredentials(), _http=self.__session, client_options=client_options
            )
            logger.debug("'%s': 'set instance'", self.__class__.__name__)
        return self.__client

    def _drop_client(self) -> None:
        if self.__session is not None:
            self.__session.close()
        self.__session = None
        self.__client = None

    async def _call(
        self,
        func: Callable[..., Any],
        *args: Any,
        source_lang: str = "",
        target_lang: str = "",
        **kwargs: Any,
    ) -> Any:
        """Run a client method in a worker thread and translate Google exceptions."""
        try:
            return await run_blocking(self.provider_id, self.request_timeout, func, *args, **kwargs)
        except (Unauthorized, Forbidden) as err:
            msg: str = f"Invalid API key: {err.message}"
            raise InvalidCredentialsError(msg, code=err.code, provider=self.provider_id) from err
        except BadRequest as err:
            # Google reports a rejected API key as 400.
            if "api key" in str(err.message).lower():
                msg = f"Invalid API key: {err.message}"
                raise InvalidCredentialsError(msg, provider=self.provider_id) from err
            msg = f"Unsupported language pair (src: '{source_lang}', tgt: '{target_lang}'): {err.message}"
            raise NotSupportedLanguagesError(
                msg, source_lang=source_lang, target_lang=target_lang, provider=self.provider_id
            ) from err
        except TooManyRequests as err:
            msg = f"Rate limit exceeded: {err.message}"
            raise TranslationQuotaExceededError(msg, provider=self.provider_id) from err
        except GoogleAPIError as err:
            status: int = getattr(err, "code", None) or 500
            msg = f"Google API error: {err}"
            raise TranslationServerError(msg, status=status, provider=self.provider_id) from err
        except (requests.exceptions.RequestException, TransportError) as err:
            msg = f"Network error: {err}"
            raise TranslationNetworkError(msg, provider=self.provider_id) from err

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        self.ensure_language_pair(request.source_lang, request.target_lang)
        source: str | None = None if request.source_lang == AUTO_DETECT else request.source_lang
        logger.debug("'text': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", request.text, source, request.target_lang)

        result: dict[str, Any] = await retry_with_backoff(
            lambda: self._call(
                self._client.translate,
                request.text,
                target_language=request.target_lang,
                source_language=source,
                format_="text",
                source_lang=request.source_lang,
                target_lang=request.target_lang,
            ),
            attempts=self.retry_attempts,
        )

        try:
            translated_text: str = result["translatedText"]
        except (KeyError, TypeError) as err:
            msg = "Unexpected response format from Google"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err

        detected: str | None = result.get("detectedSourceLanguage") or source
        logger.info("translation completed (%s > %s)", detected, request.target_lang)
        return TranslationResponse(
            translated_text=translated_text,
            provider=self.provider_id,
            detected_source_language=detected,
            usage=UsageInfo(characters=len(request.text)),
        )

    async def detect_language(self, text: str) -> LanguageDetectionResult:
        detection: dict[str, Any] = await retry_with_backoff(
            lambda: self._call(self._client.detect_language, text),
            attempts=self.retry_attempts,
        )
        logger.debug("Language detection result: %s", detection)
        try:
            return LanguageDetectionResult(
                language=detection["language"],
                confidence=float(detection.get("confidence") or 0.0),
            )
        except (KeyError, TypeError, ValueError) as err:
            msg = "Unexpected detection response format from Google"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err

    async def _verify_credentials(self) -> None:
        await self._call(self._client.detect_language, "test")

    async def close(self) -> None:
        self._drop_client()
        logger.debug("'%s' process termination", self.__class__.__name__)
