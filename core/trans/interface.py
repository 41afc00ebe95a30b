"""This module defines the abstract base class for translation providers and the translation exceptions.

Every provider adapter derives from ``TransInterface`` and publishes a ``ProviderInfo`` as a class attribute.
Adapters report problems only through the ``TranslateExceptionError`` hierarchy so the manager can decide
between retry, fallback and propagation without knowing the provider.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from models.config_models import AdapterConfig
from models.translation_models import AUTO_DETECT, ValidationResult
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.translation_models import (
        Language,
        LanguageDetectionResult,
        ProviderInfo,
        QuotaInfo,
        TranslationRequest,
        TranslationResponse,
    )

__all__: list[str] = [
    "AllProvidersFailedError",
    "InvalidCredentialsError",
    "ManagerNotInitializedError",
    "NoProviderAvailableError",
    "NotSupportedLanguagesError",
    "ProviderUnavailableError",
    "TransInterface",
    "TranslateExceptionError",
    "TranslationNetworkError",
    "TranslationQuotaExceededError",
    "TranslationServerError",
    "TranslationTimeoutError",
    "UnknownProviderError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_ADAPTER_TIMEOUT_SEC: float = 30.0
DEFAULT_ADAPTER_RETRIES: int = 3


class TranslateExceptionError(Exception):
    """An error occurred during the translation process.

    Attributes:
        message (str): Human readable description.
        code (int | str | None): Numeric error class (HTTP-like) or a provider specific code.
        provider (str | None): Id of the provider that raised the error.
        details (dict[str, Any]): Additional structured context.
    """

    default_code: ClassVar[int | None] = None

    def __init__(
        self,
        message: str,
        *,
        code: int | str | None = None,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.code: int | str | None = code if code is not None else self.default_code
        self.provider: str | None = provider
        self.details: dict[str, Any] = details or {}

    def __str__(self) -> str:
        if self.provider:
            return f"[{self.provider}] {self.message}"
        return self.message


class InvalidCredentialsError(TranslateExceptionError):
    """The API key or secret was rejected or is missing."""

    default_code = 401


class TranslationQuotaExceededError(TranslateExceptionError):
    """The provider's quota or rate limit has been exceeded."""

    default_code = 429


class NotSupportedLanguagesError(TranslateExceptionError):
    """An unsupported language code was specified."""

    default_code = 400

    def __init__(self, message: str, *, source_lang: str, target_lang: str, **kwargs: Any) -> None:
        details: dict[str, Any] = {"source_lang": source_lang, "target_lang": target_lang}
        details.update(kwargs.pop("details", None) or {})
        super().__init__(message, details=details, **kwargs)


class TranslationNetworkError(TranslateExceptionError):
    """The provider could not be reached."""

    default_code = 0


class TranslationTimeoutError(TranslateExceptionError):
    """The provider did not answer within the deadline."""

    default_code = 408

    def __init__(self, message: str, *, timeout: float, **kwargs: Any) -> None:
        super().__init__(message, details={"timeout": timeout}, **kwargs)
        self.timeout: float = timeout


class TranslationServerError(TranslateExceptionError):
    """The provider answered with an error status."""

    def __init__(self, message: str, *, status: int, **kwargs: Any) -> None:
        super().__init__(message, code=status, **kwargs)
        self.status: int = status


class UnknownProviderError(TranslateExceptionError):
    """No adapter is registered under the requested provider id."""

    default_code = 404


class ProviderUnavailableError(TranslateExceptionError):
    """The provider is not part of the configured and validated working set."""

    default_code = 404


class NoProviderAvailableError(TranslateExceptionError):
    """No configured provider supports the requested language pair."""


class AllProvidersFailedError(TranslateExceptionError):
    """Every fallback candidate was skipped or failed."""


class ManagerNotInitializedError(TranslateExceptionError):
    """An operation was attempted before the manager was initialized."""


class TransInterface(ABC):
    """Abstract base class for translation providers.

    Subclasses set ``PROVIDER_INFO`` and implement ``translate`` and ``detect_language``.
    Optional capabilities (quota, credential check) have inert defaults.
    Shared timeout and retry behaviour is not inherited; adapters compose
    ``core.trans.request_helper.ProviderRequester`` and ``retry_with_backoff`` around each call.

    Attributes:
        PROVIDER_INFO (ClassVar[ProviderInfo]): Metadata describing the provider.
    """

    PROVIDER_INFO: ClassVar[ProviderInfo]

    def __init__(self) -> None:
        self._config: AdapterConfig = AdapterConfig()

    @property
    def provider_id(self) -> str:
        return self.PROVIDER_INFO.id

    @property
    def config(self) -> AdapterConfig:
        return self._config

    @property
    def request_timeout(self) -> float:
        """Per-call deadline in seconds."""
        return self._config.timeout if self._config.timeout is not None else DEFAULT_ADAPTER_TIMEOUT_SEC

    @property
    def retry_attempts(self) -> int:
        return self._config.retries if self._config.retries is not None else DEFAULT_ADAPTER_RETRIES

    def configure(self, config: AdapterConfig) -> None:
        """Store a copy of the adapter configuration. Performs no I/O.

        Args:
            config (AdapterConfig): Credentials and tuning for this provider.
        """
        self._config = dataclasses.replace(config, extra=dict(config.extra))
        self._on_configured()
        logger.debug("'%s' configured", self.provider_id)

    def _on_configured(self) -> None:
        """Hook for subclasses to rebuild clients after ``configure``."""

    async def validate_config(self) -> ValidationResult:
        """Check that the configuration is usable.

        Required credentials are checked first, then a lightweight live request is made.
        This method never raises.

        Returns:
            ValidationResult: Outcome of the checks.
        """
        info: ProviderInfo = self.PROVIDER_INFO
        if info.requires_api_key and not self._config.api_key:
            return ValidationResult(valid=False, message="API key is required")
        if info.requires_api_secret and not self._config.api_secret:
            return ValidationResult(valid=False, message="API secret is required")

        try:
            await self._verify_credentials()
        except TranslateExceptionError as err:
            logger.warning("Configuration check failed for '%s': %s", self.provider_id, err)
            return ValidationResult(valid=False, message=err.message, details={"code": err.code})
        except Exception as err:  # noqa: BLE001
            logger.error("Unexpected error while validating '%s': %s", self.provider_id, err)
            return ValidationResult(valid=False, message=str(err))
        return ValidationResult(valid=True, message="Configuration is valid")

    async def _verify_credentials(self) -> None:
        """Perform a lightweight live request that fails on bad credentials.

        Raises:
            TranslateExceptionError: If the provider rejects the request.
        """

    def get_provider_info(self) -> ProviderInfo:
        return self.PROVIDER_INFO

    def get_supported_languages(self) -> tuple[Language, ...]:
        return self.PROVIDER_INFO.supported_languages

    def is_language_pair_supported(self, source_lang: str, target_lang: str) -> bool:
        """Check whether the provider accepts the language pair.

        'auto' is accepted as a source whenever the target is supported.
        """
        codes: frozenset[str] = self.PROVIDER_INFO.language_codes
        return (source_lang == AUTO_DETECT or source_lang in codes) and target_lang in codes

    def ensure_language_pair(self, source_lang: str, target_lang: str) -> None:
        """Raise ``NotSupportedLanguagesError`` if the pair is not supported."""
        if not self.is_language_pair_supported(source_lang, target_lang):
            msg: str = f"Language pair not supported: {source_lang} -> {target_lang}"
            raise NotSupportedLanguagesError(
                msg, source_lang=source_lang, target_lang=target_lang, provider=self.provider_id
            )

    @abstractmethod
    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        """Translate the request text.

        Args:
            request (TranslationRequest): The request to translate.

        Returns:
            TranslationResponse: Translation result with ``provider`` set to this adapter's id.

        Raises:
            InvalidCredentialsError: If the credentials are rejected.
            TranslationQuotaExceededError: If the quota or rate limit is exceeded.
            NotSupportedLanguagesError: If the language pair is not supported.
            TranslationNetworkError: If the provider cannot be reached.
            TranslationTimeoutError: If the call exceeds its deadline.
            TranslationServerError: If the provider reports an error.
        """
        raise NotImplementedError

    @abstractmethod
    async def detect_language(self, text: str) -> LanguageDetectionResult:
        """Detect the language of the text.

        Raises:
            TranslateExceptionError: If detection fails.
        """
        raise NotImplementedError

    async def get_quota(self) -> QuotaInfo | None:
        """Return the current quota, or None when the provider has no quota API."""
        return None

    async def batch_translate(self, requests: list[TranslationRequest]) -> list[TranslationResponse]:
        """Translate several requests one after another."""
        return [await self.translate(request) for request in requests]

    async def close(self) -> None:
        """Release network resources held by the adapter."""
