from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from core.tts.engines.youdao_tts import YoudaoSpeech
from core.tts.interface import SpeechNotReadyError
from models.speech_models import SpeechSettings
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from core.tts.interface import SpeechInterface
    from models.config_models import AdapterConfig
    from models.speech_models import SynthesisRequest, SynthesisResponse


__all__: list[str] = ["SpeechManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class SpeechManager:
    """SpeechManager selects and drives the configured speech synthesis provider.

    The provider is rebuilt (or reconfigured in place) whenever settings change. Synthesis is
    only possible while speech is enabled and the provider has its credentials.

    Attributes:
        PROVIDERS (ClassVar[dict[str, type[SpeechInterface]]]): Speech providers by id.
    """

    PROVIDERS: ClassVar[dict[str, type[SpeechInterface]]] = {YoudaoSpeech.PROVIDER_ID: YoudaoSpeech}

    def __init__(self, settings: SpeechSettings | None = None, provider_config: AdapterConfig | None = None) -> None:
        self.settings: SpeechSettings = settings if settings is not None else SpeechSettings()
        self.provider: SpeechInterface | None = None
        self.update_settings(self.settings, provider_config)

    def update_settings(self, settings: SpeechSettings, provider_config: AdapterConfig | None) -> None:
        """Apply new speech settings and provider credentials.

        Args:
            settings (SpeechSettings): Speech settings.
            provider_config (AdapterConfig | None): Credentials of the selected provider.
        """
        self.settings = settings
        if not settings.enabled:
            self.provider = None
            logger.debug("Speech synthesis disabled")
            return

        provider_class: type[SpeechInterface] | None = self.PROVIDERS.get(settings.provider)
        if provider_class is None:
            logger.error("Unknown speech provider: '%s'", settings.provider)
            self.provider = None
            return

        if isinstance(self.provider, provider_class):
            self.provider.update_config(settings, provider_config)
        else:
            self.provider = provider_class(settings, provider_config)
        if not self.provider.is_ready():
            logger.warning("Speech provider '%s' is missing credentials", settings.provider)

    def is_enabled(self) -> bool:
        return self.settings.enabled and self.provider is not None and self.provider.is_ready()

    async def synthesize(self, request: SynthesisRequest) -> SynthesisResponse:
        """Synthesize speech with the configured provider.

        Raises:
            SpeechNotReadyError: If speech synthesis is disabled or not configured.
        """
        if not self.is_enabled() or self.provider is None:
            msg = "Speech synthesis service is not enabled"
            raise SpeechNotReadyError(msg)
        return await self.provider.synthesize(request)

    async def close(self) -> None:
        if self.provider is not None:
            await self.provider.close()
