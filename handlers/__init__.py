"""Network communication handlers for TransRouter.

This package provides the asynchronous HTTP client shared by the provider adapters.
"""

from handlers.async_comm import (
    AsyncCommError,
    AsyncCommHTTPStatusError,
    AsyncCommInvalidContentTypeError,
    AsyncCommTimeoutError,
    AsyncHttp,
)

__all__: list[str] = [
    "AsyncCommError",
    "AsyncCommHTTPStatusError",
    "AsyncCommInvalidContentTypeError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
]
