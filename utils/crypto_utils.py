"""Hashing and request signing helpers used by the provider adapters."""

from __future__ import annotations

import hashlib
import hmac
import secrets

__all__: list[str] = ["CryptoUtils"]


class CryptoUtils:
    """Thin wrappers around hashlib and hmac that work on UTF-8 text."""

    @staticmethod
    def md5_hex(value: str) -> str:
        # Baidu's request signature is defined on MD5; it is not used for anything security relevant here.
        return hashlib.md5(value.encode("utf-8"), usedforsecurity=False).hexdigest()

    @staticmethod
    def sha256_hex(value: str | bytes) -> str:
        data: bytes = value.encode("utf-8") if isinstance(value, str) else value
        return hashlib.sha256(data).hexdigest()

    @staticmethod
    def hmac_sha256(key: str | bytes, message: str) -> bytes:
        raw_key: bytes = key.encode("utf-8") if isinstance(key, str) else key
        return hmac.new(raw_key, message.encode("utf-8"), hashlib.sha256).digest()

    @staticmethod
    def hmac_sha256_hex(key: str | bytes, message: str) -> str:
        return CryptoUtils.hmac_sha256(key, message).hex()

    @staticmethod
    def hash_text(text: str) -> str:
        """Return a SHA-256 digest of the text, used for compact cache keys."""
        return CryptoUtils.sha256_hex(text)

    @staticmethod
    def random_salt(nbytes: int = 8) -> str:
        return secrets.token_hex(nbytes)
