"""Tencent Machine Translation (TMT) implementation with TC3-HMAC-SHA256 request signing."""

from __future__ import annotations

import json
import time
from datetime import UTC, datetime
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

__all__: list[str] = ["TencentTranslation", "tc3_authorization"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

SERVICE: Final[str] = "tmt"
DEFAULT_HOST: Final[str] = "tmt.tencentcloudapi.com"
DEFAULT_REGION: Final[str] = "ap-guangzhou"
API_VERSION: Final[str] = "2018-03-21"
ALGORITHM: Final[str] = "TC3-HMAC-SHA256"
CONTENT_TYPE: Final[str] = "application/json; charset=utf-8"
SIGNED_HEADERS: Final[str] = "content-type;host"

_LANG_CODES: Final[dict[str, str]] = {"zh-CN": "zh"}
_REVERSE_CODES: Final[dict[str, str]] = {"zh": "zh-CN"}


def tc3_authorization(
    *,
    secret_id: str,
    secret_key: str,
    host: str,
    payload: str,
    timestamp: int,
    service: str = SERVICE,
) -> str:
    """Compute the TC3-HMAC-SHA256 Authorization header value.

    Args:
        secret_id (str): Tencent Cloud SecretId.
        secret_key (str): Tencent Cloud SecretKey.
        host (str): Request host.
        payload (str): Exact JSON body sent with the request.
        timestamp (int): Request time in epoch seconds, also sent as X-TC-Timestamp.
        service (str): Service name used in the credential scope.

    Returns:
        str: The Authorization header value.
    """
    date: str = datetime.fromtimestamp(timestamp, tz=UTC).strftime("%Y-%m-%d")
    canonical_request: str = "\n".join(
        [
            "POST",
            "/",
            "",
            f"content-type:{CONTENT_TYPE}\nhost:{host}\n",
            SIGNED_HEADERS,
            CryptoUtils.sha256_hex(payload),
        ]
    )
    credential_scope: str = f"{date}/{service}/tc3_request"
    string_to_sign: str = "\n".join(
        [ALGORITHM, str(timestamp), credential_scope, CryptoUtils.sha256_hex(canonical_request)]
    )

    secret_date: bytes = CryptoUtils.hmac_sha256(f"TC3{secret_key}", date)
    secret_service: bytes = CryptoUtils.hmac_sha256(secret_date, service)
    secret_signing: bytes = CryptoUtils.hmac_sha256(secret_service, "tc3_request")
    signature: str = CryptoUtils.hmac_sha256_hex(secret_signing, string_to_sign)

    return (
        f"{ALGORITHM} Credential={secret_id}/{credential_scope}, "
        f"SignedHeaders={SIGNED_HEADERS}, Signature={signature}"
    )


class TencentTranslation(TransInterface):
    """Tencent TMT adapter.

    ``api_key`` is the SecretId, ``api_secret`` the SecretKey and ``region`` the API region.
    """

    PROVIDER_INFO: ClassVar[ProviderInfo] = ProviderInfo(
        id="tencent",
        name="Tencent",
        display_name="Tencent Machine Translation",
        description="Tencent Cloud machine translation with a monthly free allowance",
        category="traditional",
        supported_languages=COMMON_LANGUAGES,
        features=(ProviderFeature(name="language_detection", description="Dedicated language detection action"),),
        requires_api_key=True,
        requires_api_secret=True,
        pricing=PricingInfo(
            model="freemium",
            billing_unit="character",
            free_quota="5,000,000 characters per month",
            paid_pricing="CNY 58 per million characters",
        ),
        rate_limit=RateLimitInfo(requests_per_second=5, characters_per_request=6000),
        homepage="https://cloud.tencent.com/product/tmt",
        documentation="https://cloud.tencent.com/document/api/551/15619",
    )

    def __init__(self) -> None:
        super().__init__()
        self._requester: ProviderRequester = ProviderRequester(self.provider_id)

    def _on_configured(self) -> None:
        self._requester.apply_config(self._config)

    @property
    def _host(self) -> str:
        endpoint: str = self._config.endpoint or DEFAULT_HOST
        return endpoint.removeprefix("https://").removeprefix("http://").rstrip("/")

    @staticmethod
    def _to_provider_code(code: str) -> str:
        return _LANG_CODES.get(code, code)

    @staticmethod
    def _from_provider_code(code: str) -> str:
        return _REVERSE_CODES.get(code, code)

    def _raise_for_error(self, error: dict[str, Any], source_lang: str = "", target_lang: str = "") -> None:
        code: str = str(error.get("Code", ""))
        message: str = f"Tencent error {code}: {error.get('Message', 'unknown error')}"
        if code.startswith("AuthFailure"):
            raise InvalidCredentialsError(message, code=code, provider=self.provider_id)
        if "LimitExceeded" in code or code in {"FailedOperation.NoFreeAmount", "FailedOperation.ServiceIsolate"}:
            raise TranslationQuotaExceededError(message, code=code, provider=self.provider_id)
        if code.startswith("UnsupportedOperation"):
            raise NotSupportedLanguagesError(
                message, source_lang=source_lang, target_lang=target_lang, provider=self.provider_id, code=code
            )
        raise TranslationServerError(message, status=500, provider=self.provider_id, details={"error_code": code})

    async def _call(
        self, action: str, payload: dict[str, Any], source_lang: str = "", target_lang: str = ""
    ) -> dict[str, Any]:
        body: str = json.dumps(payload)
        timestamp: int = int(time.time())
        host: str = self._host
        headers: dict[str, str] = {
            "Authorization": tc3_authorization(
                secret_id=self._config.api_key or "",
                secret_key=self._config.api_secret or "",
                host=host,
                payload=body,
                timestamp=timestamp,
            ),
            "Content-Type": CONTENT_TYPE,
            "Host": host,
            "X-TC-Action": action,
            "X-TC-Timestamp": str(timestamp),
            "X-TC-Version": API_VERSION,
            "X-TC-Region": self._config.region or DEFAULT_REGION,
        }
        data: Any = await self._requester.post(f"https://{host}", json_body=payload, headers=headers)
        try:
            response: dict[str, Any] = data["Response"]
        except (KeyError, TypeError) as err:
            msg = "Unexpected response format from Tencent"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err
        if "Error" in response:
            self._raise_for_error(response["Error"], source_lang, target_lang)
        return response

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        self.ensure_language_pair(request.source_lang, request.target_lang)
        payload: dict[str, Any] = {
            "SourceText": request.text,
            "Source": self._to_provider_code(request.source_lang),
            "Target": self._to_provider_code(request.target_lang),
            "ProjectId": 0,
        }
        response: dict[str, Any] = await retry_with_backoff(
            lambda: self._call("TextTranslate", payload, request.source_lang, request.target_lang),
            attempts=self.retry_attempts,
        )
        try:
            translated_text: str = response["TargetText"]
        except KeyError as err:
            msg = "Unexpected response format from Tencent"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err

        detected: str | None = self._from_provider_code(response["Source"]) if response.get("Source") else None
        logger.info("translation completed (%s > %s)", detected or request.source_lang, request.target_lang)
        return TranslationResponse(
            translated_text=translated_text,
            provider=self.provider_id,
            detected_source_language=detected if request.source_lang == AUTO_DETECT else None,
            usage=UsageInfo(characters=len(request.text)),
        )

    async def detect_language(self, text: str) -> LanguageDetectionResult:
        response: dict[str, Any] = await retry_with_backoff(
            lambda: self._call("LanguageDetect", {"Text": text, "ProjectId": 0}),
            attempts=self.retry_attempts,
        )
        try:
            return LanguageDetectionResult(language=self._from_provider_code(response["Lang"]), confidence=1.0)
        except KeyError as err:
            msg = "Unexpected detection response format from Tencent"
            raise TranslateExceptionError(msg, provider=self.provider_id) from err

    async def _verify_credentials(self) -> None:
        await self._call("LanguageDetect", {"Text": "test", "ProjectId": 0})

    async def close(self) -> None:
        await self._requester.close()
