"""
Configuration management for xbee_io.

This module provides centralized configuration management, supporting:
- Loading from JSON config files
- Environment variable overrides
- Validation of all settings
- Applying the configured log level
"""

import os
import json
import logging
from dataclasses import dataclass, asdict
from typing import Optional, List
from pathlib import Path

from xbee_io.constants import (
    SERIAL_PORT_DEFAULT, SERIAL_BAUDRATE_DEFAULT, SERIAL_TIMEOUT_DEFAULT,
    SOURCE_SIM, SOURCE_SERIAL,
)
from xbee_io.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

VALID_BAUDRATES = (1200, 2400, 4800, 9600, 19200, 38400, 57600, 115200, 230400)
VALID_SOURCES = (SOURCE_SIM, SOURCE_SERIAL)


@dataclass
class SerialSettings:
    """Serial transport settings.

    Attributes:
        port: Serial device (e.g., '/dev/ttyUSB0', 'COM3')
        baudrate: Radio interface data rate (XBee BD setting)
        timeout: Read timeout in seconds
    """
    port: str = SERIAL_PORT_DEFAULT
    baudrate: int = SERIAL_BAUDRATE_DEFAULT
    timeout: float = SERIAL_TIMEOUT_DEFAULT

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if not self.port or not isinstance(self.port, str):
            errors.append("Serial port must be a non-empty string")
        if self.baudrate not in VALID_BAUDRATES:
            errors.append(f"Baudrate must be one of {VALID_BAUDRATES}")
        if not isinstance(self.timeout, (int, float)) or self.timeout < 0:
            errors.append("Serial timeout must be a non-negative number")
        return errors


@dataclass
class FramerSettings:
    """Framing behaviour.

    Attributes:
        verify_checksum: Validate the trailing checksum byte before emitting a
            frame. Off by default: the checksum byte is consumed and ignored.
    """
    verify_checksum: bool = False

    def validate(self) -> List[str]:
        errors = []
        if not isinstance(self.verify_checksum, bool):
            errors.append("verify_checksum must be a boolean")
        return errors


@dataclass
class AppSettings:
    """Application-level settings.

    Attributes:
        log_level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
        source: Byte source the API reads from ('sim' or 'serial')
    """
    log_level: str = 'INFO'
    source: str = SOURCE_SIM

    def validate(self) -> List[str]:
        errors = []
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.log_level.upper() not in valid_levels:
            errors.append(f"Log level must be one of {valid_levels}")
        if self.source not in VALID_SOURCES:
            errors.append(f"Source must be one of {VALID_SOURCES}")
        return errors


def _parse_bool(value: str) -> bool:
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


class ConfigManager:
    """Single source of truth for xbee_io configuration.

    Sources, later ones overriding earlier ones:
    1. Default values
    2. Environment variables (XBEE_PORT, XBEE_BAUDRATE, XBEE_TIMEOUT,
       XBEE_VERIFY_CHECKSUM, XBEE_SOURCE, LOG_LEVEL)
    3. JSON config file (explicit path, else ~/.xbee_io/config.json)

    Attributes:
        serial_settings: Serial transport configuration
        framer_settings: Framing configuration
        app_settings: Application-level configuration
    """

    def __init__(self, config_file: Optional[str] = None, strict: bool = False):
        """Initialize ConfigManager.

        Args:
            config_file: Optional path to a JSON config file
            strict: Raise ConfigurationError on invalid values instead of
                logging a warning
        """
        self.serial_settings = SerialSettings()
        self.framer_settings = FramerSettings()
        self.app_settings = AppSettings()
        self._config_file: Optional[str] = config_file

        self._load_from_environment()
        if config_file:
            self._load_from_file(config_file)
        else:
            self._load_from_default_locations()

        errors = self.validate()
        if errors:
            if strict:
                raise ConfigurationError(f"Invalid configuration: {errors}", errors=errors)
            logger.warning(f"Configuration validation errors: {errors}")

    @property
    def config_file(self) -> Optional[str]:
        return self._config_file

    def _load_from_environment(self) -> None:
        """Load configuration from environment variables."""
        port = os.environ.get('XBEE_PORT')
        if port:
            self.serial_settings.port = port

        baudrate = os.environ.get('XBEE_BAUDRATE')
        if baudrate:
            try:
                self.serial_settings.baudrate = int(baudrate)
            except (ValueError, TypeError):
                logger.warning(f"Invalid XBEE_BAUDRATE environment variable: {baudrate}")

        timeout = os.environ.get('XBEE_TIMEOUT')
        if timeout:
            try:
                self.serial_settings.timeout = float(timeout)
            except (ValueError, TypeError):
                logger.warning(f"Invalid XBEE_TIMEOUT environment variable: {timeout}")

        verify = os.environ.get('XBEE_VERIFY_CHECKSUM')
        if verify:
            self.framer_settings.verify_checksum = _parse_bool(verify)

        log_level = os.environ.get('LOG_LEVEL')
        if log_level:
            self.app_settings.log_level = log_level.upper()

        source = os.environ.get('XBEE_SOURCE')
        if source:
            self.app_settings.source = source.strip().lower()

    def _load_from_file(self, file_path: str) -> bool:
        """Load configuration from a JSON file.

        Returns:
            True if loaded successfully, False otherwise
        """
        if not os.path.exists(file_path):
            logger.debug(f"Config file not found: {file_path}")
            return False

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file {file_path}: {e}")
            return False
        except OSError as e:
            logger.error(f"Failed to read config file {file_path}: {e}", exc_info=True)
            return False

        serial_data = data.get('serial_settings', {})
        if 'port' in serial_data:
            self.serial_settings.port = str(serial_data['port'])
        if 'baudrate' in serial_data:
            try:
                self.serial_settings.baudrate = int(serial_data['baudrate'])
            except (ValueError, TypeError):
                logger.warning(f"Invalid baudrate in config: {serial_data['baudrate']}")
        if 'timeout' in serial_data:
            try:
                self.serial_settings.timeout = float(serial_data['timeout'])
            except (ValueError, TypeError):
                logger.warning(f"Invalid timeout in config: {serial_data['timeout']}")

        framer_data = data.get('framer_settings', {})
        if 'verify_checksum' in framer_data:
            self.framer_settings.verify_checksum = bool(framer_data['verify_checksum'])

        app_data = data.get('app_settings', {})
        if 'log_level' in app_data:
            self.app_settings.log_level = str(app_data['log_level']).upper()
        if 'source' in app_data:
            self.app_settings.source = str(app_data['source']).lower()

        self._config_file = file_path
        logger.info(f"Loaded configuration from {file_path}")
        return True

    def _load_from_default_locations(self) -> None:
        """Try loading from the user config file."""
        user_config_file = Path.home() / '.xbee_io' / 'config.json'
        if user_config_file.exists():
            self._load_from_file(str(user_config_file))

    def save_to_file(self, file_path: Optional[str] = None) -> bool:
        """Save current configuration to a JSON file.

        Args:
            file_path: Optional path to save to. If None, uses the loaded
                config file or ~/.xbee_io/config.json.

        Returns:
            True if saved successfully, False otherwise
        """
        save_path = file_path or self._config_file
        if not save_path:
            save_path = str(Path.home() / '.xbee_io' / 'config.json')

        data = {
            'serial_settings': asdict(self.serial_settings),
            'framer_settings': asdict(self.framer_settings),
            'app_settings': asdict(self.app_settings),
        }
        try:
            os.makedirs(os.path.dirname(os.path.abspath(save_path)), exist_ok=True)
            with open(save_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save config file {save_path}: {e}", exc_info=True)
            return False

        self._config_file = save_path
        logger.info(f"Saved configuration to {save_path}")
        return True

    def validate(self) -> List[str]:
        """Validate all configuration settings.

        Returns:
            List of error messages (empty if all valid)
        """
        errors = []
        errors.extend(self.serial_settings.validate())
        errors.extend(self.framer_settings.validate())
        errors.extend(self.app_settings.validate())
        return errors


def configure_logging(level: str = 'INFO') -> None:
    """Apply a log level to the root logger, installing a handler if none exists."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))
