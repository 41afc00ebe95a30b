"""Asynchronous HTTP communication utilities.

This module provides the ``AsyncHttp`` client used by every REST based provider adapter.
Responses are decoded according to their Content-Type by pluggable handlers, and transport
problems are reported through the ``AsyncCommError`` hierarchy so callers never see aiohttp
exceptions directly.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Final, Literal, Self

import aiohttp
from aiohttp.client import ClientSession

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Mapping

    from aiohttp.client import ClientResponse


__all__: list[str] = [
    "AsyncCommError",
    "AsyncCommHTTPStatusError",
    "AsyncCommInvalidContentTypeError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

CONNECT_TIMEOUT: Final[float] = 1.0
DEFAULT_TOTAL_TIMEOUT: Final[float] = 10.0


class AsyncHttp:
    """Asynchronous HTTP client for making requests and handling responses.

    The aiohttp session is created lazily on the first request (or when entering the context),
    so instances can be constructed outside a running event loop.
    Status codes of 400 and above raise ``AsyncCommHTTPStatusError`` carrying the decoded body.
    """

    def __init__(self, *, proxy: str | None = None) -> None:
        """Initialize the AsyncHttp client.

        The default handlers include:
            - "text/plain", "text/html": Decodes bytes to a UTF-8 string.
            - "application/json": Parses bytes as JSON.
            - "audio/mpeg", "audio/mp3", "audio/wav", "application/octet-stream": Returns raw bytes.

        Args:
            proxy (str | None): Proxy URL applied to every request.
        """
        logger.debug("%s initializing", self.__class__.__name__)
        self.__session: ClientSession | None = None
        self.proxy: str | None = proxy
        self.content_handlers: dict[str, Callable[[bytes], Any]] = {}

        self.add_handler("text/plain", lambda x: x.decode("utf-8"))
        self.add_handler("text/html", lambda x: x.decode("utf-8"))
        self.add_handler("application/json", lambda x: json.loads(x.decode("utf-8")))
        for binary_type in ("audio/mpeg", "audio/mp3", "audio/wav", "application/octet-stream"):
            self.add_handler(binary_type, bytes)

    async def __aenter__(self) -> Self:
        logger.debug("%s entering context", self.__class__.__name__)
        self.initialize_session(suppress_already_log=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        logger.debug("%s exiting context", self.__class__.__name__)
        await self.close()

    def initialize_session(self, *, suppress_already_log: bool = False) -> None:
        """Create the aiohttp session if there is no open one.

        Must be called from within a running event loop.

        Args:
            suppress_already_log (bool): If True, do not log when the session is already initialized.
        """
        if self.__session is None or self.__session.closed:
            self.__session = ClientSession()
            logger.debug("%s session initialized", self.__class__.__name__)
        elif not suppress_already_log:
            logger.debug("%s session already initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        """Get the current aiohttp session, creating it if necessary."""
        self.initialize_session(suppress_already_log=True)
        if self.__session is None:
            msg = "Session is not initialized"
            raise RuntimeError(msg)
        return self.__session

    @property
    def is_open(self) -> bool:
        return self.__session is not None and not self.__session.closed

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.__session and not self.__session.closed:
            await self.__session.close()
            logger.debug("%s session closed", self.__class__.__name__)
        self.__session = None

    async def get(
        self,
        *,
        url: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        total_timeout: float = DEFAULT_TOTAL_TIMEOUT,
    ) -> Any:
        """Perform an asynchronous HTTP GET request.

        Args:
            url (str): The URL to send the GET request to.
            params (Mapping[str, str] | None): Optional query parameters.
            headers (Mapping[str, str] | None): Optional request headers.
            total_timeout (float): Total timeout for the request in seconds.

        Returns:
            Any: The decoded response body.
        """
        return await self.request("GET", url=url, params=params, headers=headers, total_timeout=total_timeout)

    async def post(
        self,
        *,
        url: str,
        params: Mapping[str, str] | None = None,
        json_body: Any | None = None,
        form: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        total_timeout: float = DEFAULT_TOTAL_TIMEOUT,
    ) -> Any:
        """Perform an asynchronous HTTP POST request.

        Args:
            url (str): The URL to send the POST request to.
            params (Mapping[str, str] | None): Optional query parameters.
            json_body (Any | None): Body serialized as JSON.
            form (Mapping[str, str] | None): Body sent as application/x-www-form-urlencoded.
            headers (Mapping[str, str] | None): Optional request headers.
            total_timeout (float): Total timeout for the request in seconds.

        Returns:
            Any: The decoded response body.
        """
        return await self.request(
            "POST",
            url=url,
            params=params,
            json_body=json_body,
            form=form,
            headers=headers,
            total_timeout=total_timeout,
        )

    async def request(
        self,
        method: HTTPMethod,
        *,
        url: str,
        params: Mapping[str, str] | None = None,
        json_body: Any | None = None,
        form: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        total_timeout: float = DEFAULT_TOTAL_TIMEOUT,
    ) -> Any:
        """Perform an asynchronous HTTP request.

        Args:
            method (HTTPMethod): The HTTP method to use.
            url (str): The URL to send the request to.
            params (Mapping[str, str] | None): Optional query parameters.
            json_body (Any | None): Body serialized as JSON.
            form (Mapping[str, str] | None): Body sent as a URL-encoded form.
            headers (Mapping[str, str] | None): Optional request headers.
            total_timeout (float): Total timeout in seconds. Zero or negative disables the timeout.

        Returns:
            Any: The decoded response body, or None for an empty body.

        Raises:
            AsyncCommTimeoutError: If the server did not answer in time.
            AsyncCommHTTPStatusError: If the server answered with a status of 400 or above.
            AsyncCommInvalidContentTypeError: If no handler is registered for the response type.
            AsyncCommError: For any other transport failure.
        """
        logger.debug("[%s] url=%s params=%s timeout=%s", method, url, params, total_timeout)
        kwargs: dict[str, Any] = {}
        if params is not None:
            kwargs["params"] = dict(params)
        if json_body is not None:
            kwargs["json"] = json_body
        if form is not None:
            kwargs["data"] = dict(form)
        if headers is not None:
            kwargs["headers"] = dict(headers)

        try:
            async with self.session.request(
                method=method,
                url=url,
                timeout=self._client_timeout(total_timeout),
                proxy=self.proxy,
                **kwargs,
            ) as resp:
                if resp.status >= 400:
                    payload: Any = await self._decode_error_body(resp)
                    msg: str = f"Error response from the server: status='{resp.status}'"
                    raise AsyncCommHTTPStatusError(msg, status=resp.status, reason=resp.reason, payload=payload)
                return await self.decode_response(resp)

        except TimeoutError as err:
            logger.debug(err)
            msg = "Timeout due to a lack of response from the server."
            raise AsyncCommTimeoutError(msg) from err
        except ConnectionResetError as err:
            logger.debug(err)
            msg = "The connection to the server has been disconnected."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientConnectorError as err:
            logger.debug(err)
            msg = "The server could not be reached."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientError as err:
            logger.debug(err)
            msg = f"HTTP client error: {err}"
            raise AsyncCommError(msg) from err

    @staticmethod
    def _client_timeout(total_timeout: float) -> aiohttp.ClientTimeout:
        if total_timeout <= 0:
            return aiohttp.ClientTimeout(total=None)
        if total_timeout < CONNECT_TIMEOUT:
            # A connect timeout longer than the total timeout would never fire.
            return aiohttp.ClientTimeout(total=total_timeout)
        return aiohttp.ClientTimeout(connect=CONNECT_TIMEOUT, total=total_timeout)

    async def decode_response(self, resp: ClientResponse) -> Any:
        """Parse the response body according to its Content-Type.

        Args:
            resp (ClientResponse): The response object from the aiohttp request.

        Returns:
            Any: The parsed response data, or None for an empty body.

        Raises:
            AsyncCommInvalidContentTypeError: If no handler is registered for the content type.
        """
        content_type: str = resp.headers.get("Content-Type", "").split(";")[0].strip().lower()
        logger.debug("'Content-Type': '%s'", content_type)

        raw: bytes = await resp.read()
        if not raw:
            logger.debug("Received empty response")
            return None

        handler: Callable[[bytes], Any] | None = self.content_handlers.get(content_type)
        if handler:
            return handler(raw)

        msg: str = f"Unknown Content-Type '{content_type}'"
        raise AsyncCommInvalidContentTypeError(msg)

    async def _decode_error_body(self, resp: ClientResponse) -> Any:
        """Decode an error body, falling back to text when the content type is unexpected."""
        try:
            return await self.decode_response(resp)
        except (AsyncCommInvalidContentTypeError, UnicodeDecodeError, json.JSONDecodeError):
            raw: bytes = await resp.read()
            return raw.decode("utf-8", errors="replace")

    def add_handler(self, content_type: str, handler: Callable[[bytes], Any]) -> None:
        """Add a custom handler for a specific content type.

        Args:
            content_type (str): The content type to handle (e.g., "text/plain", "application/json").
            handler (Callable[[bytes], Any]): A function that takes bytes and returns the parsed data.
        """
        if self.content_handlers.get(content_type):
            logger.warning("Handler for content type '%s' already exists, replacing it", content_type)
        self.content_handlers[content_type] = handler


class AsyncCommError(Exception):
    """Base class for asynchronous communication errors."""

    def __init__(self, msg: str | BaseException) -> None:
        self.msg: str = str(msg)
        super().__init__(self.msg)


class AsyncCommTimeoutError(AsyncCommError):
    """A request did not complete within its timeout."""


class AsyncCommInvalidContentTypeError(AsyncCommError):
    """The response had a content type with no registered handler."""


class AsyncCommHTTPStatusError(AsyncCommError):
    """The server answered with an error status.

    Attributes:
        status (int): HTTP status code.
        reason (str | None): HTTP reason phrase.
        payload (Any): Decoded response body (JSON object, text or bytes).
    """

    def __init__(self, msg: str, *, status: int, reason: str | None = None, payload: Any = None) -> None:
        super().__init__(msg)
        self.status: int = status
        self.reason: str | None = reason
        self.payload: Any = payload
