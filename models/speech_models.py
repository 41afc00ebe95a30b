"""Data models for speech synthesis requests and results."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Literal

__all__: list[str] = ["AudioFormat", "SpeechSettings", "SynthesisRequest", "SynthesisResponse"]

type AudioFormat = Literal["mp3", "wav"]

SUPPORTED_FORMATS: tuple[str, ...] = ("mp3", "wav")


@dataclass
class SpeechSettings:
    """Speech synthesis settings.

    Attributes:
        enabled (bool): Whether speech synthesis may be used.
        provider (str): Speech provider id.
        voice_name (str): Provider voice identifier.
        speed (float): Speaking rate, 1.0 is normal.
        volume (float): Output volume, 1.0 is normal.
        format (str): Audio container ('mp3' or 'wav').
    """

    enabled: bool = False
    provider: str = "youdao"
    voice_name: str = "youxiaoqin"
    speed: float = 1.0
    volume: float = 1.0
    format: str = "mp3"


@dataclass(frozen=True)
class SynthesisRequest:
    text: str
    voice_name: str | None = None
    speed: float | None = None
    volume: float | None = None
    format: str | None = None


@dataclass(frozen=True)
class SynthesisResponse:
    """Synthesized audio.

    Attributes:
        audio (bytes): Encoded audio data.
        format (str): Audio container of ``audio``.
        provider (str): Id of the provider that produced the audio.
    """

    audio: bytes
    format: str
    provider: str

    @property
    def audio_base64(self) -> str:
        return base64.b64encode(self.audio).decode("ascii")

    @property
    def mime_type(self) -> str:
        return "audio/mpeg" if self.format == "mp3" else f"audio/{self.format}"
