"""Language catalog shared by the provider adapters."""

from __future__ import annotations

from typing import Final

from models.translation_models import Language

__all__: list[str] = [
    "AUTO_LANGUAGE",
    "COMMON_LANGUAGES",
    "get_language",
    "get_language_name",
    "get_native_language_name",
    "is_language_supported",
]

AUTO_LANGUAGE: Final[Language] = Language(code="auto", name="Auto Detect", native_name="Auto Detect")

COMMON_LANGUAGES: Final[tuple[Language, ...]] = (
    AUTO_LANGUAGE,
    Language(code="zh-CN", name="Chinese (Simplified)", native_name="简体中文"),
    Language(code="zh-TW", name="Chinese (Traditional)", native_name="繁體中文"),
    Language(code="en", name="English", native_name="English"),
    Language(code="ja", name="Japanese", native_name="日本語"),
    Language(code="ko", name="Korean", native_name="한국어"),
    Language(code="fr", name="French", native_name="Français"),
    Language(code="de", name="German", native_name="Deutsch"),
    Language(code="es", name="Spanish", native_name="Español"),
    Language(code="ru", name="Russian", native_name="Русский"),
    Language(code="it", name="Italian", native_name="Italiano"),
    Language(code="pt", name="Portuguese", native_name="Português"),
    Language(code="ar", name="Arabic", native_name="العربية"),
    Language(code="hi", name="Hindi", native_name="हिन्दी"),
    Language(code="th", name="Thai", native_name="ไทย"),
    Language(code="vi", name="Vietnamese", native_name="Tiếng Việt"),
    Language(code="id", name="Indonesian", native_name="Bahasa Indonesia"),
    Language(code="ms", name="Malay", native_name="Bahasa Melayu"),
    Language(code="nl", name="Dutch", native_name="Nederlands"),
    Language(code="pl", name="Polish", native_name="Polski"),
    Language(code="tr", name="Turkish", native_name="Türkçe"),
)

_BY_CODE: Final[dict[str, Language]] = {lang.code: lang for lang in COMMON_LANGUAGES}


def get_language(code: str) -> Language | None:
    return _BY_CODE.get(code)


def get_language_name(code: str) -> str:
    """Return the English name for a language code, or the code itself when unknown."""
    lang: Language | None = _BY_CODE.get(code)
    return lang.name if lang else code


def get_native_language_name(code: str) -> str:
    lang: Language | None = _BY_CODE.get(code)
    return lang.native_name if lang else code


def is_language_supported(code: str) -> bool:
    return code in _BY_CODE
