from __future__ import annotations

import logging
from typing import ClassVar
from unittest.mock import AsyncMock

import pytest

from core.tts.engines.youdao_tts import YoudaoSpeech
from core.tts.interface import SpeechInterface, SpeechNotReadyError
from core.tts.manager import SpeechManager
from models.config_models import AdapterConfig
from models.speech_models import SpeechSettings, SynthesisRequest, SynthesisResponse


class DummySpeech(SpeechInterface):
    PROVIDER_ID: ClassVar[str] = "dummy"
    closed: ClassVar[int] = 0

    def is_ready(self) -> bool:
        return self.config is not None and bool(self.config.api_key)

    async def synthesize(self, request: SynthesisRequest) -> SynthesisResponse:
        return SynthesisResponse(audio=request.text.encode(), format=self.settings.format, provider=self.PROVIDER_ID)

    async def close(self) -> None:
        DummySpeech.closed += 1


@pytest.fixture(autouse=True)
def register_dummy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(SpeechManager, "PROVIDERS", {**SpeechManager.PROVIDERS, "dummy": DummySpeech})
    monkeypatch.setattr(DummySpeech, "closed", 0)


def enabled(provider: str = "dummy", **kwargs) -> SpeechSettings:
    return SpeechSettings(enabled=True, provider=provider, **kwargs)


def test_disabled_by_default() -> None:
    manager = SpeechManager()

    assert manager.provider is None
    assert manager.is_enabled() is False


@pytest.mark.asyncio
async def test_synthesize_when_disabled_raises() -> None:
    manager = SpeechManager(SpeechSettings(enabled=False), AdapterConfig(api_key="key"))

    with pytest.raises(SpeechNotReadyError):
        await manager.synthesize(SynthesisRequest(text="hi"))


@pytest.mark.asyncio
async def test_synthesize_with_ready_provider() -> None:
    manager = SpeechManager(enabled(format="wav"), AdapterConfig(api_key="key"))

    result = await manager.synthesize(SynthesisRequest(text="hi"))

    assert manager.is_enabled() is True
    assert result.audio == b"hi"
    assert result.format == "wav"


@pytest.mark.asyncio
async def test_missing_credentials_keep_manager_disabled(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)

    manager = SpeechManager(enabled(), AdapterConfig())

    assert isinstance(manager.provider, DummySpeech)
    assert manager.is_enabled() is False
    assert any("missing credentials" in rec.message for rec in caplog.records)
    with pytest.raises(SpeechNotReadyError):
        await manager.synthesize(SynthesisRequest(text="hi"))


def test_unknown_provider_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR)

    manager = SpeechManager(enabled("nope"), AdapterConfig(api_key="key"))

    assert manager.provider is None
    assert any("Unknown speech provider" in rec.message for rec in caplog.records)


def test_update_settings_reconfigures_same_provider_in_place() -> None:
    manager = SpeechManager(enabled(), AdapterConfig())
    provider = manager.provider

    manager.update_settings(enabled(voice_name="other"), AdapterConfig(api_key="key"))

    assert manager.provider is provider
    assert manager.is_enabled() is True
    assert manager.provider is not None
    assert manager.provider.settings.voice_name == "other"


def test_update_settings_switches_provider_class() -> None:
    manager = SpeechManager(enabled(), AdapterConfig(api_key="key"))

    manager.update_settings(enabled("youdao"), AdapterConfig(api_key="app", api_secret="secret"))

    assert isinstance(manager.provider, YoudaoSpeech)
    assert manager.is_enabled() is True

    manager.update_settings(SpeechSettings(enabled=False), None)
    assert manager.provider is None


@pytest.mark.asyncio
async def test_close_closes_provider() -> None:
    manager = SpeechManager(enabled(), AdapterConfig(api_key="key"))

    await manager.close()

    assert DummySpeech.closed == 1


@pytest.mark.asyncio
async def test_youdao_provider_is_driven_through_manager() -> None:
    manager = SpeechManager(enabled("youdao"), AdapterConfig(api_key="app", api_secret="secret"))
    assert isinstance(manager.provider, YoudaoSpeech)
    manager.provider.http.post = AsyncMock(return_value=b"ID3")

    result = await manager.synthesize(SynthesisRequest(text="你好"))

    assert result.audio == b"ID3"
    assert result.provider == "youdao"
