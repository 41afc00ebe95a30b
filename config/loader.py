"""Configuration file loader and validator.

Handles reading, formatting, and validating settings from the INI configuration file,
and turns them into the runtime configuration of the translation and speech managers.
Raises exceptions for any issues encountered during loading.
"""

from __future__ import annotations

import ast
import configparser
import os
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from models.config_models import AdapterConfig, Config, ManagerConfig, ManagerOptions, ProviderEntryConfig
from models.speech_models import SUPPORTED_FORMATS, SpeechSettings
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Mapping
    from dataclasses import Field as DataclassField
else:
    from dataclasses import Field as DataclassField

__all__: list[str] = [
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

ALLOWED_PROVIDERS: Final[list[str]] = [
    "google",
    "deepl",
    "microsoft",
    "baidu",
    "youdao",
    "tencent",
    "openai",
    "claude",
    "gemini",
]
ALLOWED_FORMALITY: Final[list[str]] = ["default", "formal", "informal"]
ALLOWED_SPEECH_PROVIDERS: Final[list[str]] = ["youdao"]

_ADAPTER_FIELDS: Final[frozenset[str]] = frozenset(f.name for f in fields(AdapterConfig)) - {"extra"}


class ConfigLoaderError(Exception):
    """An error occurred while processing the configuration file."""


class ConfigFileNotFoundError(ConfigLoaderError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigLoaderError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration file contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration file contains an invalid type."""


class ConfigLoader:
    """Handles loading and validation of configuration settings.

    This class reads the configuration file, applies formatting rules, and validates settings.
    It raises exceptions for any issues encountered during the loading process.

    Args:
        config_filename (str): INI file name to load.
        script_name (str): Executing script name, used in error messaging.
        debug (bool): Force debug mode regardless of the file.
        environ (Mapping[str, str] | None): Environment used for credential lookup. Defaults to ``os.environ``.

    Raises:
        ConfigFileNotFoundError: If the configuration file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains invalid values/types.
    """

    def __init__(
        self,
        *,
        config_filename: str,
        script_name: str,
        debug: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        config_path = Path(config_filename)
        msg: str
        if not config_path.exists():
            msg = (
                f"Configuration file '{config_filename}' not found. "
                f"Please create '{config_filename}' in the same directory as '{script_name}'."
            )
            raise ConfigFileNotFoundError(msg)

        parser: ConfigParser = ConfigParser()

        try:
            parser.read(config_filename, encoding="utf-8")
        except configparser.Error as err:
            msg = f"Failed to parse configuration file '{config_filename}': {err}"
            raise ConfigFormatError(msg) from None

        self.environ: Mapping[str, str] = environ if environ is not None else os.environ
        self.config = Config()
        self._convert_settings(parser)
        if debug:
            self.config.GENERAL.DEBUG = True
        self._validate_settings()

    def _convert_settings(self, parser: ConfigParser) -> None:
        """Convert configuration settings from the parser to the Config object.

        Raises:
            ConfigFormatError: If a value cannot be parsed or coerced to the expected type.
        """
        formatter = _ConfigFormatter(self.config, parser)
        for section in fields(self.config):
            if not parser.has_section(section.name):
                logger.debug("Skipping undefined section: '%s'", section.name)
                continue
            self._convert_section_field(parser, formatter, section)

    def _convert_section_field(
        self, parser: ConfigParser, formatter: _ConfigFormatter, section: DataclassField[Any]
    ) -> None:
        for key in fields(getattr(self.config, section.name)):
            if not parser.has_option(section.name, key.name):
                logger.debug("Skipping undefined setting: '%s.%s'", section.name, key.name)
                continue

            formatted_value = formatter.apply_format(section, key)
            setattr(getattr(self.config, section.name), key.name, formatted_value)

    def _validate_settings(self) -> None:
        """Validate provider names, option values and numeric limits.

        Raises:
            ConfigFormatError: If validation fails for any setting.
        """
        try:
            self._inspect_defined_item("TRANSLATION", "PRIMARY_PROVIDER", ALLOWED_PROVIDERS)
            self._inspect_defined_item("TRANSLATION", "FALLBACK_PROVIDERS", ALLOWED_PROVIDERS)
            self._inspect_defined_item("PROVIDERS", "ENABLED", ALLOWED_PROVIDERS)
            self._inspect_defined_item("SPEECH", "PROVIDER", ALLOWED_SPEECH_PROVIDERS)
            self._validate_choice("TRANSLATION", "FORMALITY", ALLOWED_FORMALITY)
            self._validate_choice("SPEECH", "FORMAT", list(SUPPORTED_FORMATS))
            self._validate_positive("TRANSLATION", "RETRY_COUNT")
            self._validate_positive("TRANSLATION", "TIMEOUT")
            self._validate_positive("CACHE", "MAX_SIZE")
            self._validate_positive("CACHE", "TTL")
            self._validate_mapping("PROVIDERS", "SETTINGS")
            self._validate_mapping("TRANSLATION", "LANGUAGE_PAIR_PREFERENCES")
        except (AttributeError, TypeError, ValueError) as err:
            msg: str = f"Invalid configuration value: {err}"
            raise ConfigFormatError(msg) from None

    def _inspect_defined_item(self, section_name: str, key_name: str, defined_list: list[str]) -> None:
        """Verify that configuration values match allowed options.

        Logs warnings for unrecognized values but does not raise exceptions.

        Raises:
            ConfigTypeError: If the configured value is neither list nor str.
        """
        value: str | list[str] = getattr(getattr(self.config, section_name), key_name)
        field_name: str = f"{section_name}.{key_name}"

        if isinstance(value, (list, str)):
            values: list[str] = value if isinstance(value, list) else [value]
            for val in values:
                if val not in defined_list:
                    logger.warning("Unknown value '%s' is set for '%s'", val, field_name)
        else:
            msg: str = f"Unsupported type used for '{field_name}': {type(value)}"
            raise ConfigTypeError(msg)

    def _validate_choice(self, section_name: str, key_name: str, allowed: list[str]) -> None:
        """Raises ConfigValueError if the value is not one of ``allowed``."""
        value: Any = getattr(getattr(self.config, section_name), key_name)
        if value not in allowed:
            msg: str = f"Unsupported value used for '{section_name}.{key_name}': {value} (allowed: {allowed})"
            raise ConfigValueError(msg)

    def _validate_positive(self, section_name: str, key_name: str) -> None:
        value: int | float = getattr(getattr(self.config, section_name), key_name)
        if value <= 0:
            msg: str = f"'{section_name}.{key_name}' must be greater than zero: {value}"
            raise ConfigValueError(msg)

    def _validate_mapping(self, section_name: str, key_name: str) -> None:
        value: Any = getattr(getattr(self.config, section_name), key_name)
        if not isinstance(value, dict):
            msg: str = f"Unsupported type used for '{section_name}.{key_name}': {type(value)}"
            raise ConfigTypeError(msg)

    def provider_config(self, provider_id: str) -> ProviderEntryConfig:
        """Build the settings of one provider.

        Values come from ``PROVIDERS.SETTINGS[provider_id]``; keys that are not adapter fields
        go to ``extra``. ``<PROVIDER>_API_KEY`` and ``<PROVIDER>_API_SECRET`` environment
        variables take precedence over credentials in the file.

        Args:
            provider_id (str): Provider id.

        Returns:
            ProviderEntryConfig: Settings with ``enabled`` taken from ``PROVIDERS.ENABLED``.
        """
        settings: dict[str, Any] = dict(self.config.PROVIDERS.SETTINGS.get(provider_id, {}))
        known: dict[str, Any] = {key: value for key, value in settings.items() if key in _ADAPTER_FIELDS}
        extra: dict[str, Any] = {key: value for key, value in settings.items() if key not in _ADAPTER_FIELDS}

        prefix: str = provider_id.upper()
        if api_key := self.environ.get(f"{prefix}_API_KEY"):
            known["api_key"] = api_key
        if api_secret := self.environ.get(f"{prefix}_API_SECRET"):
            known["api_secret"] = api_secret

        try:
            return ProviderEntryConfig(enabled=provider_id in self.config.PROVIDERS.ENABLED, extra=extra, **known)
        except TypeError as err:
            msg: str = f"Invalid settings for provider '{provider_id}': {err}"
            raise ConfigTypeError(msg) from err

    def build_manager_config(self) -> ManagerConfig:
        """Turn the loaded settings into a translation manager configuration."""
        translation = self.config.TRANSLATION
        provider_ids: list[str] = list(
            dict.fromkeys([*self.config.PROVIDERS.ENABLED, *self.config.PROVIDERS.SETTINGS.keys()])
        )
        return ManagerConfig(
            primary_provider=translation.PRIMARY_PROVIDER,
            fallback_providers=list(translation.FALLBACK_PROVIDERS),
            providers={provider_id: self.provider_config(provider_id) for provider_id in provider_ids},
            options=ManagerOptions(
                auto_fallback=translation.AUTO_FALLBACK,
                cache_results=translation.CACHE_RESULTS,
                parallel_translation=translation.PARALLEL_TRANSLATION,
                retry_count=translation.RETRY_COUNT,
                timeout=translation.TIMEOUT,
                formality=translation.FORMALITY,
                domain=translation.DOMAIN or None,
            ),
            language_pair_preferences=dict(translation.LANGUAGE_PAIR_PREFERENCES),
        )

    def build_speech_settings(self) -> tuple[SpeechSettings, AdapterConfig]:
        """Return the speech settings and the credentials of the speech provider."""
        speech = self.config.SPEECH
        settings = SpeechSettings(
            enabled=speech.ENABLED,
            provider=speech.PROVIDER,
            voice_name=speech.VOICE_NAME,
            speed=speech.SPEED,
            volume=speech.VOLUME,
            format=speech.FORMAT,
        )
        return settings, self.provider_config(speech.PROVIDER).adapter_config()


class _ConfigFormatter:
    """Converts INI string values to typed Python objects (bool, int, float, str, list, dict)."""

    def __init__(self, config: Config, parser: ConfigParser) -> None:
        self.config: Config = config
        self.parser: ConfigParser = parser

    def apply_format(self, section: DataclassField[Any], key: DataclassField[Any]) -> Any:
        """Convert INI value to the expected Python type based on the Config field type.

        Raises:
            ConfigValueError: If a value cannot be coerced to the expected type.
            ConfigFormatError: If literal evaluation fails due to invalid syntax.
            ConfigTypeError: If an unexpected type is encountered during coercion.
        """
        formatters: dict[
            type[bool | int | float], Callable[[DataclassField[Any], DataclassField[Any]], bool | int | float]
        ] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_float,
        }

        formatter: Callable[[DataclassField[Any], DataclassField[Any]], bool | int | float] | None = formatters.get(
            type(getattr(getattr(self.config, section.name), key.name))
        )
        if formatter:
            try:
                return formatter(section, key)
            except ValueError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigValueError(msg) from err
            except TypeError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigTypeError(msg) from err

        value_str: str = self.parser[section.name][key.name]
        try:
            return ast.literal_eval(value_str)
        except ValueError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigFormatError(msg) from err

    def _bare_value(self, section: DataclassField[Any], key: DataclassField[Any]) -> str:
        """Raw INI value with one level of quoting removed, so that TIMEOUT = "30" reads like TIMEOUT = 30."""
        value: str = self.parser.get(section.name, key.name).strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1].strip()
        return value

    def parse_as_float(self, section: DataclassField[Any], key: DataclassField[Any]) -> float:
        return float(self._bare_value(section, key))

    def parse_as_integer(self, section: DataclassField[Any], key: DataclassField[Any]) -> int:
        """Convert INI string to integer. Fractional values such as '10.0' are accepted and truncated."""
        return int(float(self._bare_value(section, key)))

    def parse_as_boolean(self, section: DataclassField[Any], key: DataclassField[Any]) -> bool:
        """Convert INI string to boolean."""
        return self.parser.getboolean(section.name, key.name)
