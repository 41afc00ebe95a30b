"""Youdao text-to-speech (ttsapi) implementation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Final

from core.trans.engines.trans_youdao import youdao_signed_form
from core.tts.interface import SpeechInterface, SpeechNotReadyError, SpeechProviderError, SpeechTextError
from handlers.async_comm import AsyncCommError, AsyncCommHTTPStatusError, AsyncCommTimeoutError, AsyncHttp
from models.speech_models import SUPPORTED_FORMATS, SynthesisResponse
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import AdapterConfig
    from models.speech_models import SpeechSettings, SynthesisRequest

__all__: list[str] = ["YoudaoSpeech", "describe_error_code"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_ENDPOINT: Final[str] = "https://openapi.youdao.com/ttsapi"
MAX_TEXT_BYTES: Final[int] = 2048
DEFAULT_TIMEOUT_SEC: Final[float] = 30.0

_ERROR_MESSAGES: Final[dict[str, str]] = {
    "101": "Missing required parameter or invalid parameter",
    "102": "Unsupported language",
    "103": "Text too long",
    "104": "Unsupported API type",
    "105": "Unsupported signature type",
    "106": "Unsupported response type",
    "107": "Unsupported transport encryption type",
    "108": "Invalid or disabled application key",
    "109": "Invalid batchLog format",
    "110": "No valid instance of the service",
    "111": "Invalid or banned developer account",
    "112": "Request frequency limited",
    "113": "Query text must not be empty",
    "114": "Unsupported audio format",
    "201": "Decryption failed, the app key and app secret probably do not match",
    "202": "Signature check failed",
    "203": "Service unavailable",
    "205": "Invalid API endpoint",
    "301": "Insufficient account balance",
    "302": "Speech service is not activated",
    "303": "Call frequency limit exceeded",
}


def describe_error_code(code: str | int) -> str:
    key = str(code)
    return _ERROR_MESSAGES.get(key, f"Speech synthesis failed, error code: {key}")


class YoudaoSpeech(SpeechInterface):
    """Youdao speech synthesis.

    ``api_key`` is the application key and ``api_secret`` the application secret, shared with the
    Youdao translation provider.
    """

    PROVIDER_ID: ClassVar[str] = "youdao"

    def __init__(self, settings: SpeechSettings | None = None, config: AdapterConfig | None = None) -> None:
        super().__init__(settings, config)
        self.http: AsyncHttp = AsyncHttp(proxy=config.proxy if config is not None else None)

    def update_config(self, settings: SpeechSettings, config: AdapterConfig | None) -> None:
        super().update_config(settings, config)
        self.http.proxy = config.proxy if config is not None else None

    def is_ready(self) -> bool:
        return bool(self.config is not None and self.config.api_key and self.config.api_secret)

    @staticmethod
    def _validate_text(text: str) -> None:
        size: int = len(text.encode("utf-8"))
        if size == 0:
            msg = "Cannot synthesize empty text"
            raise SpeechTextError(msg)
        if size > MAX_TEXT_BYTES:
            msg = f"Text too long: {size} bytes (maximum {MAX_TEXT_BYTES})"
            raise SpeechTextError(msg)

    def _build_form(self, request: SynthesisRequest) -> dict[str, str]:
        if self.config is None:
            msg = "Youdao speech credentials are not configured"
            raise SpeechNotReadyError(msg)
        audio_format: str = request.format or self.settings.format or "mp3"
        if audio_format not in SUPPORTED_FORMATS:
            msg = f"Unsupported audio format: {audio_format}"
            raise SpeechTextError(msg)
        speed: float = request.speed if request.speed is not None else self.settings.speed
        volume: float = request.volume if request.volume is not None else self.settings.volume
        return {
            "q": request.text,
            "voiceName": request.voice_name or self.settings.voice_name,
            "format": audio_format,
            "speed": str(speed),
            "volume": str(volume),
            **youdao_signed_form(self.config.api_key or "", self.config.api_secret or "", request.text),
        }

    async def synthesize(self, request: SynthesisRequest) -> SynthesisResponse:
        if not self.is_ready():
            msg = "Speech synthesis is not enabled or credentials are missing"
            raise SpeechNotReadyError(msg)
        self._validate_text(request.text)
        form: dict[str, str] = self._build_form(request)
        endpoint: str = (self.config.endpoint if self.config is not None else None) or DEFAULT_ENDPOINT
        timeout: float = (self.config.timeout if self.config is not None else None) or DEFAULT_TIMEOUT_SEC

        try:
            data: Any = await self.http.post(url=endpoint, form=form, total_timeout=timeout)
        except AsyncCommHTTPStatusError as err:
            code: Any = err.payload.get("errorCode") if isinstance(err.payload, dict) else None
            if code is None:
                msg = f"Speech synthesis failed: HTTP {err.status}"
                raise SpeechProviderError(msg) from err
            raise SpeechProviderError(describe_error_code(code), code=str(code)) from err
        except AsyncCommTimeoutError as err:
            msg = f"Speech synthesis timed out after {timeout} sec"
            raise SpeechProviderError(msg) from err
        except AsyncCommError as err:
            msg = f"Speech synthesis failed: {err}"
            raise SpeechProviderError(msg) from err

        if isinstance(data, bytes):
            logger.info("Speech synthesized: %d bytes of %s", len(data), form["format"])
            return SynthesisResponse(audio=data, format=form["format"], provider=self.PROVIDER_ID)

        if isinstance(data, dict):
            code = data.get("errorCode", "unknown")
            raise SpeechProviderError(describe_error_code(code), code=str(code))

        msg = "Speech synthesis failed: unexpected response type"
        raise SpeechProviderError(msg)

    async def close(self) -> None:
        await self.http.close()
