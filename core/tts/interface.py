"""Speech synthesis provider contract and exceptions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from models.speech_models import SpeechSettings

if TYPE_CHECKING:
    from models.config_models import AdapterConfig
    from models.speech_models import SynthesisRequest, SynthesisResponse

__all__: list[str] = [
    "SpeechExceptionError",
    "SpeechInterface",
    "SpeechNotReadyError",
    "SpeechProviderError",
    "SpeechTextError",
]


class SpeechExceptionError(Exception):
    """Base class for speech synthesis exceptions."""


class SpeechNotReadyError(SpeechExceptionError):
    """Speech synthesis is disabled or the provider lacks credentials."""


class SpeechTextError(SpeechExceptionError):
    """The text cannot be synthesized (empty or too long)."""


class SpeechProviderError(SpeechExceptionError):
    """The provider rejected the request or could not be reached.

    Attributes:
        code (str | None): Provider error code, when the provider returned one.
    """

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code: str | None = code


class SpeechInterface(ABC):
    """Abstract base class for speech synthesis providers.

    A provider holds the current ``SpeechSettings`` (voice, speed, volume, format) and the
    credentials of its ``AdapterConfig``; both can be replaced at any time with ``update_config``.
    """

    PROVIDER_ID: ClassVar[str]

    def __init__(self, settings: SpeechSettings | None = None, config: AdapterConfig | None = None) -> None:
        self.settings: SpeechSettings = settings if settings is not None else SpeechSettings()
        self.config: AdapterConfig | None = config

    def update_config(self, settings: SpeechSettings, config: AdapterConfig | None) -> None:
        self.settings = settings
        self.config = config

    @abstractmethod
    def is_ready(self) -> bool:
        """Return True when the provider has everything it needs to synthesize."""

    @abstractmethod
    async def synthesize(self, request: SynthesisRequest) -> SynthesisResponse:
        """Synthesize speech for a request.

        Raises:
            SpeechNotReadyError: If the provider is not ready.
            SpeechTextError: If the text is empty or too long.
            SpeechProviderError: If the provider fails.
        """

    async def close(self) -> None:  # noqa: B027
        """Release provider resources. The default holds none."""
