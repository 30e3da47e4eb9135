"""Configuration file loader and validator.

Handles reading, formatting, and validating settings from the INI configuration file.
Raises exceptions for any issues encountered during loading.
"""

from __future__ import annotations

import ast
import configparser
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

from core.trans.engines.const_languages import LANGUAGES
from models.config_models import Config
from models.region_models import REGIONAL_CONFIGS
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from dataclasses import Field as DataclassField
else:
    from dataclasses import Field as DataclassField

__all__: list[str] = [
    "Config",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

ALLOWED_TRANSLATION_ENGINES: list[str] = ["gemini", "relay"]


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

    Args:
        config_filename (str): INI file name to load.
        script_name (str): Executing script name, used in error messaging.
        **args: Command-line overrides. Recognised keys: ``region``, ``engine`` (list of names),
            ``debug``. None values are ignored.

    Raises:
        ConfigFileNotFoundError: If the configuration file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains invalid values/types.
    """

    def __init__(
        self,
        *,
        config_filename: str,
        script_name: str,
        **args: Any,
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

        self.config = Config()
        self._convert_settings(parser)
        self.config.GENERAL.SCRIPT_NAME = script_name

        if args.get("region") is not None:
            self.config.TRANSLATION.REGION = args["region"]
        if args.get("engine"):
            self.config.TRANSLATION.ENGINE = list(args["engine"])
        if args.get("debug", False):
            self.config.GENERAL.DEBUG = True
            self.config.GENERAL.LOG_LEVEL = "DEBUG"
        self._validate_settings()

    def _convert_settings(self, parser: ConfigParser) -> None:
        """Copy every known section/key from the parser into the Config object.

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
        """Validate region, engines, languages and numeric limits.

        Raises:
            ConfigFormatError: If validation fails for any setting.
        """
        self._inspect_defined_item("TRANSLATION", "ENGINE", ALLOWED_TRANSLATION_ENGINES)
        self._validate_choice("TRANSLATION", "REGION", list(REGIONAL_CONFIGS))
        for key_name in ("SOURCE_LANGUAGE", "TARGET_LANGUAGE", "DEFAULT_SOURCE_LANGUAGE"):
            self._validate_choice("TRANSLATION", key_name, list(LANGUAGES))
        self._validate_range("TRANSLATION", "PROVIDER_TIMEOUT", minimum=0.0, inclusive=False)
        self._validate_range("TRANSLATION", "DEFAULT_CONFIDENCE", minimum=0.0, maximum=1.0)
        self._validate_range("CACHE", "TTL_SEC", minimum=0.0, inclusive=False)
        self._validate_range("CACHE", "MAX_ENTRIES", minimum=0)
        self._validate_range("CACHE", "INFLIGHT_TIMEOUT", minimum=0.0, inclusive=False)
        self._validate_endpoints()

    def _inspect_defined_item(self, section_name: str, key_name: str, defined_list: list[str]) -> None:
        """Warn about values outside the allowed options.

        Raises:
            ConfigTypeError: If the configured value is neither list nor str.
        """
        value: Any = getattr(getattr(self.config, section_name), key_name)
        field_name: str = f"{section_name}.{key_name}"

        if not isinstance(value, (list, str)):
            msg: str = f"Unsupported type used for '{field_name}': {type(value)}"
            raise ConfigTypeError(msg)

        values: list[str] = value if isinstance(value, list) else [value]
        for val in values:
            if val not in defined_list:
                logger.warning("Unknown value '%s' is set for '%s'", val, field_name)

    def _validate_choice(self, section_name: str, key_name: str, choices: list[str]) -> None:
        """Check that a string setting is one of ``choices``.

        Raises:
            ConfigValueError: If the value is not allowed.
        """
        value: Any = getattr(getattr(self.config, section_name), key_name)
        if value not in choices:
            msg: str = f"Unsupported value for '{section_name}.{key_name}': {value!r} (allowed: {', '.join(choices)})"
            raise ConfigValueError(msg)

    def _validate_range(
        self,
        section_name: str,
        key_name: str,
        *,
        minimum: float,
        maximum: float | None = None,
        inclusive: bool = True,
    ) -> None:
        """Check a numeric setting against its bounds.

        Raises:
            ConfigValueError: If the value is out of range.
        """
        value: float = getattr(getattr(self.config, section_name), key_name)
        field_name: str = f"{section_name}.{key_name}"
        too_small: bool = value < minimum if inclusive else value <= minimum
        too_large: bool = maximum is not None and value > maximum
        if too_small or too_large:
            bound: str = f"{'>=' if inclusive else '>'} {minimum}"
            if maximum is not None:
                bound += f" and <= {maximum}"
            msg: str = f"'{field_name}' must be {bound}: {value}"
            raise ConfigValueError(msg)

    def _validate_endpoints(self) -> None:
        """Check that relay endpoints are HTTP(S) URLs keyed by label.

        Raises:
            ConfigTypeError: If ENDPOINTS is not a mapping of strings.
            ConfigValueError: If a URL is not HTTP(S).
        """
        endpoints: Any = self.config.RELAY.ENDPOINTS
        if not isinstance(endpoints, dict) or not all(
            isinstance(label, str) and isinstance(url, str) for label, url in endpoints.items()
        ):
            msg: str = f"'RELAY.ENDPOINTS' must be a mapping of label to URL: {endpoints!r}"
            raise ConfigTypeError(msg)

        for label, url in endpoints.items():
            if not url.startswith(("http://", "https://")):
                msg = f"Relay endpoint '{label}' is not an HTTP(S) URL: {url!r}"
                raise ConfigValueError(msg)

        if "relay" in self.config.TRANSLATION.ENGINE and not endpoints:
            logger.warning("'relay' engine is enabled but RELAY.ENDPOINTS is empty")


class _ConfigFormatter:
    """Converts INI string values to typed Python objects (bool, int, float, str, list, dict)."""

    def __init__(self, config: Config, parser: ConfigParser) -> None:
        self.config: Config = config
        self.parser: ConfigParser = parser

    def apply_format(self, section: DataclassField[Any], key: DataclassField[Any]) -> Any:
        """Convert an INI value to the type of the matching Config field default.

        Raises:
            ConfigValueError: If a value cannot be coerced to the expected type.
            ConfigFormatError: If literal evaluation fails due to invalid syntax.
            ConfigTypeError: If the literal has a different type than the field.
        """
        default: Any = getattr(getattr(self.config, section.name), key.name)
        formatters: dict[type, Callable[[DataclassField[Any], DataclassField[Any]], bool | int | float]] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_float,
        }

        formatter: Callable[[DataclassField[Any], DataclassField[Any]], bool | int | float] | None = formatters.get(
            type(default)
        )
        if formatter:
            try:
                return formatter(section, key)
            except ValueError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigValueError(msg) from err

        value_str: str = self.parser[section.name][key.name]
        try:
            value: Any = ast.literal_eval(value_str)
        except ValueError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigFormatError(msg) from err

        if not isinstance(value, type(default)):
            msg = f"Expected {type(default).__name__} for {section.name}.{key.name}, got {type(value).__name__}"
            raise ConfigTypeError(msg)
        return value

    def parse_as_float(self, section: DataclassField[Any], key: DataclassField[Any]) -> float:
        """Convert INI string to float."""
        value: str = self.parser.get(section.name, key.name)
        for char in ("'", '"'):
            value = value.removeprefix(char).removesuffix(char)
        return float(value)

    def parse_as_integer(self, section: DataclassField[Any], key: DataclassField[Any]) -> int:
        """Convert INI string to integer."""
        value: str = self.parser.get(section.name, key.name)
        for char in ("'", '"'):
            value = value.removeprefix(char).removesuffix(char)
        return int(float(value))

    def parse_as_boolean(self, section: DataclassField[Any], key: DataclassField[Any]) -> bool:
        """Convert INI string to boolean."""
        return self.parser.getboolean(section.name, key.name)
