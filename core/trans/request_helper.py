"""Outbound request helpers shared by the provider adapters.

``ProviderRequester`` wraps ``AsyncHttp`` with a hard per-call deadline and maps transport and
status failures onto the translation exception hierarchy. Bodies that cannot be decoded count as a bad gateway.
``retry_with_backoff`` re-runs a coroutine factory with exponential backoff for transient failures.
``run_blocking`` gives SDK based adapters the same deadline for calls executed in a worker thread.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Final

from core.trans.interface import (
    InvalidCredentialsError,
    TranslateExceptionError,
    TranslationNetworkError,
    TranslationQuotaExceededError,
    TranslationServerError,
    TranslationTimeoutError,
)
from handlers.async_comm import (
    AsyncCommError,
    AsyncCommHTTPStatusError,
    AsyncCommTimeoutError,
    AsyncHttp,
    HTTPMethod,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Awaitable, Callable, Mapping

    from models.config_models import AdapterConfig

__all__: list[str] = [
    "DEFAULT_RETRY_ATTEMPTS",
    "DEFAULT_RETRY_BASE_DELAY_SEC",
    "DEFAULT_TIMEOUT_SEC",
    "ProviderRequester",
    "is_retryable",
    "retry_with_backoff",
    "run_blocking",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_TIMEOUT_SEC: Final[float] = 30.0
DEFAULT_RETRY_ATTEMPTS: Final[int] = 3
DEFAULT_RETRY_BASE_DELAY_SEC: Final[float] = 1.0

_BAD_GATEWAY_STATUS: Final[int] = 502
_CREDENTIAL_STATUSES: Final[frozenset[int]] = frozenset({401, 403})
_RETRYABLE_ERRORS: Final[tuple[type[TranslateExceptionError], ...]] = (
    TranslationNetworkError,
    TranslationTimeoutError,
    TranslationServerError,
)


def is_retryable(err: BaseException) -> bool:
    """Return True for transient failures worth another attempt.

    Credential failures are never retried, including server errors carrying 401 or 403.
    """
    if isinstance(err, InvalidCredentialsError):
        return False
    if isinstance(err, TranslationServerError) and err.status in _CREDENTIAL_STATUSES:
        return False
    return isinstance(err, _RETRYABLE_ERRORS)


async def retry_with_backoff[T](
    func: Callable[[], Awaitable[T]],
    *,
    attempts: int = DEFAULT_RETRY_ATTEMPTS,
    base_delay: float = DEFAULT_RETRY_BASE_DELAY_SEC,
) -> T:
    """Await ``func()`` until it succeeds, retrying transient failures.

    The delay before attempt ``n + 1`` is ``base_delay * 2 ** (n - 1)``.
    Non-retryable errors are raised immediately without sleeping.

    Args:
        func (Callable[[], Awaitable[T]]): Factory producing a fresh awaitable per attempt.
        attempts (int): Maximum number of attempts, at least 1.
        base_delay (float): Delay before the second attempt in seconds.

    Returns:
        T: The result of the first successful attempt.

    Raises:
        TranslateExceptionError: The last error when all attempts fail, or the first non-retryable error.
    """
    attempts = max(attempts, 1)
    for attempt in range(1, attempts + 1):
        try:
            return await func()
        except TranslateExceptionError as err:
            if not is_retryable(err) or attempt == attempts:
                raise
            delay: float = base_delay * (2 ** (attempt - 1))
            logger.info("Attempt %d/%d failed (%s). Retrying in %.1f sec", attempt, attempts, err, delay)
            await asyncio.sleep(delay)

    msg = "Retry loop exited without a result"
    raise RuntimeError(msg)


async def run_blocking[T](provider_id: str, timeout: float, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking SDK call in a worker thread under a deadline.

    Args:
        provider_id (str): Provider id used in the timeout error.
        timeout (float): Deadline in seconds. Zero or negative disables it.
        func (Callable[..., T]): Blocking callable.
        *args: Positional arguments for ``func``.
        **kwargs: Keyword arguments for ``func``.

    Returns:
        T: The return value of ``func``.

    Raises:
        TranslationTimeoutError: If the deadline expires first.
    """
    try:
        async with asyncio.timeout(timeout if timeout > 0 else None):
            return await asyncio.to_thread(func, *args, **kwargs)
    except TimeoutError as err:
        msg: str = f"Request timed out after {timeout} sec"
        raise TranslationTimeoutError(msg, timeout=timeout, provider=provider_id) from err


class ProviderRequester:
    """HTTP access for a single adapter instance.

    Every call runs under ``asyncio.timeout`` so the deadline also covers connection setup
    and body decoding. The session is owned by this object and released by ``close``.

    Args:
        provider_id (str): Provider id stamped on raised errors.
        timeout (float): Per-call deadline in seconds.
        proxy (str | None): Optional proxy URL.
        http (AsyncHttp | None): Client to use. A new one is created when omitted.
    """

    def __init__(
        self,
        provider_id: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        proxy: str | None = None,
        http: AsyncHttp | None = None,
    ) -> None:
        self.provider_id: str = provider_id
        self.timeout: float = timeout
        self.http: AsyncHttp = http if http is not None else AsyncHttp(proxy=proxy)

    async def request(
        self,
        method: HTTPMethod,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any | None = None,
        form: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Send a request and return the decoded body.

        Raises:
            TranslationTimeoutError: If the deadline expires.
            InvalidCredentialsError: On HTTP 401 or 403.
            TranslationQuotaExceededError: On HTTP 429.
            TranslationServerError: On any other status of 400 and above.
            TranslationNetworkError: If the provider cannot be reached.
            TranslationServerError: With status 502 if the response body cannot be decoded.
        """
        try:
            async with asyncio.timeout(self.timeout if self.timeout > 0 else None):
                return await self.http.request(
                    method,
                    url=url,
                    params=params,
                    json_body=json_body,
                    form=form,
                    headers=headers,
                    total_timeout=0,
                )
        except (TimeoutError, AsyncCommTimeoutError) as err:
            msg: str = f"Request timed out after {self.timeout} sec"
            raise TranslationTimeoutError(msg, timeout=self.timeout, provider=self.provider_id) from err
        except AsyncCommHTTPStatusError as err:
            raise self._status_error(err) from err
        except AsyncCommError as err:
            msg = f"Network error: {err}"
            raise TranslationNetworkError(msg, provider=self.provider_id) from err
        except ValueError as err:
            msg = f"Malformed response body: {err}"
            raise TranslationServerError(msg, status=_BAD_GATEWAY_STATUS, provider=self.provider_id) from err

    def apply_config(self, config: AdapterConfig, default_timeout: float = DEFAULT_TIMEOUT_SEC) -> None:
        """Take over the deadline and proxy from an adapter configuration."""
        self.timeout = config.timeout if config.timeout is not None else default_timeout
        self.http.proxy = config.proxy

    async def get(self, url: str, **kwargs: Any) -> Any:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        return await self.request("POST", url, **kwargs)

    def _status_error(self, err: AsyncCommHTTPStatusError) -> TranslateExceptionError:
        message: str = self._extract_message(err.payload) or err.reason or f"HTTP {err.status}"
        details: dict[str, Any] = {"status": err.status}
        if err.status in _CREDENTIAL_STATUSES:
            return InvalidCredentialsError(
                f"Invalid API key: {message}", code=err.status, provider=self.provider_id, details=details
            )
        if err.status == 429:
            return TranslationQuotaExceededError(
                f"Quota exceeded: {message}", provider=self.provider_id, details=details
            )
        return TranslationServerError(message, status=err.status, provider=self.provider_id, details=details)

    @staticmethod
    def _extract_message(payload: Any) -> str:
        """Pull a human readable message out of common error body shapes."""
        if isinstance(payload, str):
            return payload.strip()[:200]
        if not isinstance(payload, dict):
            return ""
        error: Any = payload.get("error", payload)
        if isinstance(error, dict):
            return str(error.get("message") or error.get("Message") or "")
        if isinstance(error, str):
            return error
        return str(payload.get("message") or "")

    async def close(self) -> None:
        await self.http.close()
