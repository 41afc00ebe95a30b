from __future__ import annotations

import pytest

from utils.string_utils import StringUtils


@pytest.mark.parametrize(("value", "expected"), [(None, ""), (12, "12"), ("  x ", "  x ")])
def test_ensure_str(value: object, expected: str) -> None:
    assert StringUtils.ensure_str(value) == expected  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("value", "limit", "suffix", "expected"),
    [
        ("abcdef", 3, "...", "abc..."),
        ("abc", 3, "...", "abc"),
        ("abcdef", 0, "...", "abcdef"),
        ("abcdef", 4, "", "abcd"),
    ],
)
def test_truncate(value: str, limit: int, suffix: str, expected: str) -> None:
    assert StringUtils.truncate(value, limit, suffix) == expected


def test_compress_blanks() -> None:
    assert StringUtils.compress_blanks("  hello   big\tworld ") == "hello big world"


def test_normalize_text_composes_characters() -> None:
    assert StringUtils.normalize_text("é") == "é"


def test_generate_cache_key() -> None:
    assert StringUtils.generate_cache_key("hello", "en", "ja") == "en:ja:hello"
    assert StringUtils.generate_cache_key("b" * 101, "auto", "de") == f"auto:de:{'b' * 100}..."


def test_generate_adapter_cache_key_truncates_without_suffix() -> None:
    assert StringUtils.generate_adapter_cache_key("deepl", "c" * 80, "en", "fr") == f"deepl:en:fr:{'c' * 50}"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("short text", "short text"),
        ("a" * 20, "a" * 20),
        ("abcdefghijklmnopqrstuvwxyz", "abcdefghij26qrstuvwxyz"),
    ],
)
def test_abbreviate_for_signature(text: str, expected: str) -> None:
    assert StringUtils.abbreviate_for_signature(text) == expected
