from __future__ import annotations

import unicodedata
from typing import Final

__all__: list[str] = ["StringUtils"]

CACHE_KEY_TEXT_LIMIT: Final[int] = 100  # Number of characters of source text kept in a manager cache key.
ADAPTER_KEY_TEXT_LIMIT: Final[int] = 50  # Number of characters of source text kept in an adapter cache key.
SIGNATURE_TEXT_LIMIT: Final[int] = 20  # Texts longer than this are abbreviated before signing.
ELLIPSIS: Final[str] = "..."


class StringUtils:
    """Utility class for string manipulation and processing.

    Provides static methods for type coercion, truncation and the text based keys
    used by the translation cache and the provider adapters.
    """

    @staticmethod
    def ensure_str(value: str | None) -> str:
        """Ensure that the value is a string, returning an empty string if None.

        Note: Does not use strip() to preserve significant whitespace.

        Args:
            value (str | None): The value to ensure as a string.

        Returns:
            str: The value as a string, or empty string if None.
        """
        if not isinstance(value, str):
            value = str(value) if value is not None else ""
        return value

    @staticmethod
    def truncate(value: str, limit: int, suffix: str = "") -> str:
        """Cut a string to at most ``limit`` characters.

        Args:
            value (str): The string to truncate.
            limit (int): Maximum number of characters kept. Zero or negative keeps everything.
            suffix (str): Appended only when the string was actually cut.

        Returns:
            str: The truncated string.
        """
        value = StringUtils.ensure_str(value)
        if limit <= 0 or len(value) <= limit:
            return value
        return value[:limit] + suffix

    @staticmethod
    def compress_blanks(value: str) -> str:
        """Compress multiple consecutive spaces into a single space and strip both ends."""
        value = StringUtils.ensure_str(value)
        return " ".join(value.split())

    @staticmethod
    def normalize_text(text: str) -> str:
        """Normalize text using Unicode NFC normalization.

        Args:
            text (str): Text to normalize.

        Returns:
            str: Normalized text.
        """
        return unicodedata.normalize("NFC", text)

    @staticmethod
    def generate_cache_key(text: str, source_lang: str, target_lang: str) -> str:
        """Generate the manager cache key for a translation request.

        Only the first ``CACHE_KEY_TEXT_LIMIT`` characters of the text take part in the key,
        followed by '...' when the text is longer.

        Args:
            text (str): Source text.
            source_lang (str): Source language code.
            target_lang (str): Target language code.

        Returns:
            str: Key in the form 'source:target:text'.
        """
        return f"{source_lang}:{target_lang}:{StringUtils.truncate(text, CACHE_KEY_TEXT_LIMIT, ELLIPSIS)}"

    @staticmethod
    def generate_adapter_cache_key(provider_id: str, text: str, source_lang: str, target_lang: str) -> str:
        """Generate a memoization key for use inside a single adapter."""
        return f"{provider_id}:{source_lang}:{target_lang}:{StringUtils.truncate(text, ADAPTER_KEY_TEXT_LIMIT)}"

    @staticmethod
    def abbreviate_for_signature(text: str) -> str:
        """Abbreviate text the way signed Youdao requests expect.

        Texts of up to 20 characters are used as is. Longer texts become the first 10 characters,
        the total length and the last 10 characters.

        Args:
            text (str): Text to be signed.

        Returns:
            str: Abbreviated text.
        """
        if len(text) <= SIGNATURE_TEXT_LIMIT:
            return text
        return f"{text[:10]}{len(text)}{text[-10:]}"
