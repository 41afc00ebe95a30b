from __future__ import annotations

import logging
from textwrap import dedent
from typing import TYPE_CHECKING

import pytest

from config.loader import (
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigLoader,
    ConfigTypeError,
    ConfigValueError,
)

if TYPE_CHECKING:
    from pathlib import Path


MINIMAL_INI: str = """
    [TRANSLATION]
    PRIMARY_PROVIDER = "deepl"
    FALLBACK_PROVIDERS = ["google"]
    TIMEOUT = 12
    RETRY_COUNT = "2"
    FORMALITY = "formal"
    DOMAIN = "medical"
    LANGUAGE_PAIR_PREFERENCES = {"en-ja": "deepl"}

    [PROVIDERS]
    ENABLED = ["deepl", "google"]
    SETTINGS = {
        "deepl": {"api_key": "file-key", "timeout": 5.0, "glossary": "g1"},
        "openai": {"model": "gpt-4o"}}

    [CACHE]
    MAX_SIZE = 50
    TTL = 600
    """


def _write_ini(tmp_path: Path, content: str) -> Path:
    ini_path: Path = tmp_path / "transrouter.ini"
    ini_path.write_text(dedent(content), encoding="utf-8")
    return ini_path


def _load(tmp_path: Path, content: str, **kwargs) -> ConfigLoader:
    ini_path: Path = _write_ini(tmp_path, content)
    return ConfigLoader(config_filename=str(ini_path), script_name="test", **kwargs)


def test_config_loader_raises_for_missing_file(tmp_path: Path) -> None:
    ini_path: Path = tmp_path / "missing.ini"
    with pytest.raises(ConfigFileNotFoundError, match="missing.ini"):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_config_loader_reads_sections(tmp_path: Path) -> None:
    loader = _load(tmp_path, MINIMAL_INI, environ={})

    translation = loader.config.TRANSLATION
    assert translation.PRIMARY_PROVIDER == "deepl"
    assert translation.FALLBACK_PROVIDERS == ["google"]
    assert translation.TIMEOUT == 12.0
    assert translation.RETRY_COUNT == 2
    assert loader.config.CACHE.MAX_SIZE == 50
    assert loader.config.CACHE.TTL == 600.0
    assert loader.config.SPEECH.ENABLED is False
    assert loader.config.GENERAL.DEBUG is False


def test_debug_flag_overrides_file(tmp_path: Path) -> None:
    loader = _load(tmp_path, "[GENERAL]\nDEBUG = False\n", debug=True)

    assert loader.config.GENERAL.DEBUG is True


def test_provider_config_splits_extra_and_prefers_environment(tmp_path: Path) -> None:
    loader = _load(tmp_path, MINIMAL_INI, environ={"DEEPL_API_KEY": "env-key", "DEEPL_API_SECRET": "env-secret"})

    entry = loader.provider_config("deepl")

    assert entry.enabled is True
    assert entry.api_key == "env-key"
    assert entry.api_secret == "env-secret"
    assert entry.timeout == 5.0
    assert entry.extra == {"glossary": "g1"}


def test_provider_config_for_unlisted_provider(tmp_path: Path) -> None:
    loader = _load(tmp_path, MINIMAL_INI, environ={})

    entry = loader.provider_config("baidu")

    assert entry.enabled is False
    assert entry.api_key is None
    assert entry.extra == {}


def test_build_manager_config(tmp_path: Path) -> None:
    loader = _load(tmp_path, MINIMAL_INI, environ={"GOOGLE_API_KEY": "g-key"})

    config = loader.build_manager_config()

    assert config.primary_provider == "deepl"
    assert config.fallback_providers == ["google"]
    assert list(config.providers) == ["deepl", "google", "openai"]
    assert config.enabled_providers() == ["deepl", "google"]
    assert config.providers["google"].api_key == "g-key"
    assert config.providers["openai"].model == "gpt-4o"
    assert config.options.timeout == 12.0
    assert config.options.retry_count == 2
    assert config.options.formality == "formal"
    assert config.options.domain == "medical"
    assert config.language_pair_preferences == {"en-ja": "deepl"}


def test_empty_domain_becomes_none(tmp_path: Path) -> None:
    loader = _load(tmp_path, '[TRANSLATION]\nDOMAIN = ""\n', environ={})

    assert loader.build_manager_config().options.domain is None


def test_build_speech_settings(tmp_path: Path) -> None:
    loader = _load(
        tmp_path,
        """
        [PROVIDERS]
        SETTINGS = {"youdao": {"endpoint": "https://tts.example.test"}}

        [SPEECH]
        ENABLED = True
        VOICE_NAME = "youxiaomei"
        SPEED = 1.5
        FORMAT = "wav"
        """,
        environ={"YOUDAO_API_KEY": "app", "YOUDAO_API_SECRET": "secret"},
    )

    settings, credentials = loader.build_speech_settings()

    assert settings.enabled is True
    assert settings.provider == "youdao"
    assert settings.voice_name == "youxiaomei"
    assert settings.speed == 1.5
    assert settings.format == "wav"
    assert credentials.api_key == "app"
    assert credentials.api_secret == "secret"
    assert credentials.endpoint == "https://tts.example.test"


def test_unknown_provider_only_warns(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)

    loader = _load(tmp_path, '[PROVIDERS]\nENABLED = ["google", "papago"]\n')

    assert loader.config.PROVIDERS.ENABLED == ["google", "papago"]
    assert any("papago" in rec.message for rec in caplog.records)


@pytest.mark.parametrize(
    ("content", "error"),
    [
        ("[TRANSLATION]\nAUTO_FALLBACK = maybe\n", ConfigValueError),
        ("[TRANSLATION]\nTIMEOUT = soon\n", ConfigValueError),
        ("[TRANSLATION]\nTIMEOUT = 0\n", ConfigValueError),
        ("[CACHE]\nMAX_SIZE = -1\n", ConfigValueError),
        ('[TRANSLATION]\nFORMALITY = "casual"\n', ConfigValueError),
        ('[SPEECH]\nFORMAT = "flac"\n', ConfigValueError),
        ("[PROVIDERS]\nENABLED = 1\n", ConfigTypeError),
        ('[PROVIDERS]\nSETTINGS = ["google"]\n', ConfigTypeError),
        ('[TRANSLATION]\nPRIMARY_PROVIDER = "google\n', ConfigFormatError),
        ("[TRANSLATION]\nPRIMARY_PROVIDER = google\n", ConfigValueError),
    ],
)
def test_invalid_values_raise(tmp_path: Path, content: str, error: type[ConfigFormatError]) -> None:
    with pytest.raises(error):
        _load(tmp_path, content)


def test_malformed_file_raises_format_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigFormatError):
        _load(tmp_path, "not an ini file\n")
