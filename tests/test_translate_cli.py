from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

import pytest

import translate_cli
from core.trans.interface import UnknownProviderError
from models.speech_models import SynthesisResponse
from models.translation_models import LanguageDetectionResult, TranslationResponse

if TYPE_CHECKING:
    from pathlib import Path

    from models.config_models import ManagerConfig
    from models.translation_models import TranslationRequest


class DummyLoggerUtils:
    levels: ClassVar[list[str]] = []

    def __init__(self, filename: str = "") -> None:
        _ = filename

    def set_level(self, level: str) -> None:
        DummyLoggerUtils.levels.append(level)


class DummyTransManager:
    instances: ClassVar[list[DummyTransManager]] = []
    failure: ClassVar[Exception | None] = None

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs: dict[str, Any] = kwargs
        self.config: ManagerConfig | None = None
        self.requests: list[TranslationRequest] = []
        self.working_providers: list[str] = []
        self.shut_down: bool = False
        DummyTransManager.instances.append(self)

    async def initialize(self, config: ManagerConfig) -> None:
        self.config = config
        self.working_providers = config.enabled_providers()

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        if DummyTransManager.failure is not None:
            raise DummyTransManager.failure
        self.requests.append(request)
        return TranslationResponse(translated_text="你好", provider="google", detected_source_language="en")

    async def parallel_translate(self, request: TranslationRequest, providers: list[str]) -> dict[str, Any]:
        self.requests.append(request)
        return {p: TranslationResponse(translated_text=f"{p}-text", provider=p) for p in providers}

    async def detect_language(self, text: str, provider_id: str | None = None) -> LanguageDetectionResult:
        _ = text, provider_id
        return LanguageDetectionResult(language="ja", confidence=0.9)

    def export_stats(self) -> str:
        return '{"total": {}}'

    async def shutdown(self) -> None:
        self.shut_down = True


class DummySpeechManager:
    def __init__(self, settings: Any, config: Any) -> None:
        self.settings = settings
        self.config = config
        self.closed: bool = False

    async def synthesize(self, request: Any) -> SynthesisResponse:
        return SynthesisResponse(audio=request.text.encode(), format="mp3", provider="youdao")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def patch_collaborators(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(DummyLoggerUtils, "levels", [])
    monkeypatch.setattr(DummyTransManager, "instances", [])
    monkeypatch.setattr(DummyTransManager, "failure", None)
    monkeypatch.setattr(translate_cli, "LoggerUtils", DummyLoggerUtils)
    monkeypatch.setattr(translate_cli, "TransManager", DummyTransManager)
    monkeypatch.setattr(translate_cli, "SpeechManager", DummySpeechManager)


@pytest.fixture
def ini_path(tmp_path: Path) -> Path:
    path = tmp_path / "transrouter.ini"
    path.write_text(
        '[TRANSLATION]\nPRIMARY_PROVIDER = "google"\n\n'
        '[PROVIDERS]\nENABLED = ["google"]\n\n'
        "[CACHE]\nMAX_SIZE = 10\nTTL = 60\n",
        encoding="utf-8",
    )
    return path


def test_parser_requires_command_and_target(capsys: pytest.CaptureFixture[str]) -> None:
    parser = translate_cli.build_parser()

    with pytest.raises(SystemExit):
        parser.parse_args(["translate", "hello"])

    args = parser.parse_args(["translate", "hello", "--to", "ja", "--compare", "google", "deepl"])
    assert args.source == "auto"
    assert args.compare == ["google", "deepl"]
    assert "--to" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_translate_command(ini_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    status = await translate_cli.main(["--config", str(ini_path), "translate", "hello", "--to", "zh-CN", "--stats"])

    assert status == 0
    manager = DummyTransManager.instances[0]
    assert manager.kwargs == {"cache_max_size": 10, "cache_ttl": 60.0}
    assert manager.requests[0].target_lang == "zh-CN"
    assert manager.requests[0].source_lang == "auto"
    assert manager.shut_down is True
    out = capsys.readouterr().out
    assert "[google] 你好" in out
    assert "detected source: en" in out
    assert '{"total": {}}' in out
    assert DummyLoggerUtils.levels == ["INFO"]


@pytest.mark.asyncio
async def test_compare_and_debug(ini_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    status = await translate_cli.main(
        ["--config", str(ini_path), "--debug", "translate", "hi", "--to", "ja", "--compare", "google", "deepl"]
    )

    assert status == 0
    out = capsys.readouterr().out
    assert "[google] google-text" in out
    assert "[deepl] deepl-text" in out
    assert DummyLoggerUtils.levels == ["DEBUG"]


@pytest.mark.asyncio
async def test_detect_command(ini_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    status = await translate_cli.main(["--config", str(ini_path), "detect", "こんにちは"])

    assert status == 0
    assert "ja (confidence 0.90)" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_translation_failure_returns_error_status(ini_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    DummyTransManager.failure = UnknownProviderError("Provider not found: papago")

    status = await translate_cli.main(["--config", str(ini_path), "translate", "hello", "--to", "ja"])

    assert status == 1
    assert "Translation failed: Provider not found: papago" in capsys.readouterr().err
    assert DummyTransManager.instances[0].shut_down is True


@pytest.mark.asyncio
async def test_no_working_provider(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "empty.ini"
    path.write_text("[PROVIDERS]\nENABLED = []\n", encoding="utf-8")

    status = await translate_cli.main(["--config", str(path), "translate", "hello", "--to", "ja"])

    assert status == 1
    assert "No translation provider" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_missing_config_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    status = await translate_cli.main(["--config", str(tmp_path / "nope.ini"), "providers"])

    assert status == 1
    assert "Failed to load configuration file" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_speak_writes_audio(ini_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    output = tmp_path / "out.mp3"

    status = await translate_cli.main(["--config", str(ini_path), "speak", "ni hao", "--output", str(output)])

    assert status == 0
    assert output.read_bytes() == b"ni hao"
    assert "Saved 6 bytes of mp3 audio" in capsys.readouterr().out
