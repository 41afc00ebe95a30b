"""Prompt construction and reply parsing shared by the large language model adapters."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any, Final

from models.language_models import get_language_name, is_language_supported
from models.translation_models import AUTO_DETECT, LanguageDetectionResult

if TYPE_CHECKING:
    from models.translation_models import TranslationRequest

__all__: list[str] = [
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_TEMPERATURE",
    "build_detection_prompt",
    "build_system_prompt",
    "parse_detection_reply",
]

DEFAULT_TEMPERATURE: Final[float] = 0.3
DEFAULT_MAX_TOKENS: Final[int] = 2000

_FORMALITY_HINTS: Final[dict[str, str]] = {
    "formal": "Use a formal, polite register.",
    "informal": "Use a casual, conversational register.",
}

_JSON_OBJECT: Final[re.Pattern[str]] = re.compile(r"\{.*\}", re.DOTALL)
_LANGUAGE_CODE: Final[re.Pattern[str]] = re.compile(r"\b([a-z]{2}(?:-[A-Z]{2})?)\b")


def build_system_prompt(request: TranslationRequest) -> str:
    """Compose the system prompt for a translation request.

    Args:
        request (TranslationRequest): The request being translated.

    Returns:
        str: Instructions covering languages, register, context, domain and glossary.
    """
    target: str = get_language_name(request.target_lang)
    if request.source_lang == AUTO_DETECT:
        lines: list[str] = [f"You are a professional translator. Translate the user's text into {target}."]
    else:
        source: str = get_language_name(request.source_lang)
        lines = [f"You are a professional translator. Translate the user's text from {source} into {target}."]

    options = request.options
    if options.formality in _FORMALITY_HINTS:
        lines.append(_FORMALITY_HINTS[options.formality])
    if options.context:
        lines.append(f"Context: {options.context}")
    if options.domain:
        lines.append(f"The text belongs to the {options.domain} domain; use its established terminology.")
    if options.glossary:
        lines.append("Always use these term translations:")
        lines.extend(f"- {term} => {translation}" for term, translation in options.glossary.items())
    if options.preserve_formatting:
        lines.append("Preserve line breaks, whitespace and markup exactly.")
    lines.append("Reply with the translation only, without explanations or quotation marks.")
    return "\n".join(lines)


def build_detection_prompt(text: str) -> str:
    return (
        "Identify the language of the following text. Reply only with JSON of the form "
        '{"language": "<ISO 639-1 code, or zh-CN / zh-TW for Chinese>", "confidence": <0.0-1.0>}.\n\n'
        f"Text: {text}"
    )


def parse_detection_reply(reply: str) -> LanguageDetectionResult:
    """Extract a detection result from a model reply.

    JSON replies are preferred; otherwise the first token that is a known language code is used.

    Raises:
        ValueError: If no language can be found in the reply.
    """
    match: re.Match[str] | None = _JSON_OBJECT.search(reply)
    if match:
        try:
            data: Any = json.loads(match.group(0))
        except json.JSONDecodeError:
            data = None
        if isinstance(data, dict) and data.get("language"):
            return LanguageDetectionResult(
                language=str(data["language"]), confidence=float(data.get("confidence") or 0.0)
            )

    for code in _LANGUAGE_CODE.findall(reply):
        if is_language_supported(code):
            return LanguageDetectionResult(language=code, confidence=0.5)
    msg: str = f"No language code in reply: {reply!r}"
    raise ValueError(msg)
