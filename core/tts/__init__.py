"""Speech synthesis management.

This package provides text-to-speech through pluggable provider implementations
and a manager that builds the configured provider from the speech settings.
"""

from core.tts.interface import (
    SpeechExceptionError,
    SpeechInterface,
    SpeechNotReadyError,
    SpeechProviderError,
    SpeechTextError,
)
from core.tts.manager import SpeechManager

__all__: list[str] = [
    "SpeechExceptionError",
    "SpeechInterface",
    "SpeechManager",
    "SpeechNotReadyError",
    "SpeechProviderError",
    "SpeechTextError",
]
