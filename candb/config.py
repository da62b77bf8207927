"""
Configuration management for candb.

This module provides centralized configuration management, supporting:
- Loading from JSON config files
- Environment variable fallback
- Validation of all settings
- A single logging configuration entry point
"""

import os
import json
import codecs
import logging
from dataclasses import dataclass, asdict
from typing import List, Optional, Union
from pathlib import Path

from candb.constants import (
    DBC_ENCODING_DEFAULT, DBC_DECODE_ERRORS_DEFAULT, DESIGNATED_ATTRIBUTE_DEFAULT
)
from candb.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
VALID_DECODE_ERRORS = {'strict', 'replace', 'ignore'}


def configure_logging(level: Union[str, 'AppSettings', None] = None) -> None:
    """Configure root logging for applications embedding candb.

    Args:
        level: Logging level name, or AppSettings whose ``log_level`` is
               used. Defaults to the LOG_LEVEL environment variable, or
               'INFO' when that is unset.
    """
    if isinstance(level, AppSettings):
        level = level.log_level
    level_name = (level or os.environ.get('LOG_LEVEL') or 'INFO').upper()
    if level_name not in VALID_LOG_LEVELS:
        logger.warning(f"Unknown log level {level_name!r}, falling back to INFO")
        level_name = 'INFO'
    logging.basicConfig(
        level=getattr(logging, level_name),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


@dataclass
class LoaderSettings:
    """DBC loading settings.

    Attributes:
        encoding: Text encoding of DBC files (single byte per character)
        decode_errors: Codec error policy applied while decoding file bytes
        designated_attribute: Signal attribute key kept by frame-centric views
        skip_blank_lines: Whether blank lines are dropped before tokenizing
    """
    encoding: str = DBC_ENCODING_DEFAULT
    decode_errors: str = DBC_DECODE_ERRORS_DEFAULT
    designated_attribute: str = DESIGNATED_ATTRIBUTE_DEFAULT
    skip_blank_lines: bool = True

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if not self.encoding or not isinstance(self.encoding, str):
            errors.append("Encoding must be a non-empty string")
        else:
            try:
                codecs.lookup(self.encoding)
            except LookupError:
                errors.append(f"Unknown encoding: {self.encoding}")
        if self.decode_errors not in VALID_DECODE_ERRORS:
            errors.append(f"Decode error policy must be one of {sorted(VALID_DECODE_ERRORS)}")
        if not self.designated_attribute or not isinstance(self.designated_attribute, str):
            errors.append("Designated attribute must be a non-empty string")
        return errors


@dataclass
class AppSettings:
    """Application-level configuration settings.

    Attributes:
        log_level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
    """
    log_level: str = 'INFO'

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"Log level must be one of {sorted(VALID_LOG_LEVELS)}")
        return errors


class ConfigManager:
    """Centralized configuration manager for candb.

    Settings are loaded from multiple sources with priority:
    1. JSON config file (highest priority)
    2. Environment variables
    3. Default values (lowest priority)

    Attributes:
        loader_settings: DBC loading configuration
        app_settings: Application-level configuration
        _config_file: Path to JSON config file (if loaded)
    """

    def __init__(self, config_file: Optional[str] = None):
        """Initialize ConfigManager.

        Args:
            config_file: Optional path to JSON config file. If None, will try
                        ~/.candb/config.json
        """
        self.loader_settings = LoaderSettings()
        self.app_settings = AppSettings()
        self._config_file: Optional[str] = config_file

        self._load_from_environment()
        if config_file:
            self._load_from_file(config_file)
        else:
            self._load_from_default_locations()

        errors = self.validate()
        if errors:
            logger.warning(f"Configuration validation errors: {errors}")

    @property
    def config_file(self) -> Optional[str]:
        return self._config_file

    def _load_from_environment(self) -> None:
        """Load configuration from environment variables."""
        encoding = os.environ.get('CANDB_ENCODING')
        if encoding:
            self.loader_settings.encoding = encoding

        designated = os.environ.get('CANDB_DESIGNATED_ATTRIBUTE')
        if designated:
            self.loader_settings.designated_attribute = designated

        log_level = os.environ.get('LOG_LEVEL')
        if log_level:
            self.app_settings.log_level = log_level.upper()

    def _load_from_file(self, file_path: str) -> bool:
        """Load configuration from JSON file.

        Args:
            file_path: Path to JSON config file

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
            logger.error(f"Failed to load config file {file_path}: {e}", exc_info=True)
            return False

        if 'loader_settings' in data:
            loader_data = data['loader_settings']
            if 'encoding' in loader_data:
                self.loader_settings.encoding = str(loader_data['encoding'])
            if 'decode_errors' in loader_data:
                self.loader_settings.decode_errors = str(loader_data['decode_errors'])
            if 'designated_attribute' in loader_data:
                self.loader_settings.designated_attribute = str(loader_data['designated_attribute'])
            if 'skip_blank_lines' in loader_data:
                self.loader_settings.skip_blank_lines = bool(loader_data['skip_blank_lines'])

        if 'app_settings' in data:
            app_data = data['app_settings']
            if 'log_level' in app_data:
                self.app_settings.log_level = str(app_data['log_level']).upper()

        self._config_file = file_path
        logger.info(f"Loaded configuration from {file_path}")
        return True

    def _load_from_default_locations(self) -> None:
        """Try loading from the user config file."""
        user_config_file = Path.home() / '.candb' / 'config.json'
        if user_config_file.exists():
            self._load_from_file(str(user_config_file))

    def save_to_file(self, file_path: Optional[str] = None) -> bool:
        """Save current configuration to JSON file.

        Args:
            file_path: Optional path to save to. If None, uses _config_file or creates user config.

        Returns:
            True if saved successfully, False otherwise
        """
        save_path = file_path or self._config_file
        if not save_path:
            user_config_dir = Path.home() / '.candb'
            user_config_dir.mkdir(exist_ok=True)
            save_path = str(user_config_dir / 'config.json')

        data = {
            'loader_settings': asdict(self.loader_settings),
            'app_settings': asdict(self.app_settings),
        }

        try:
            parent = os.path.dirname(save_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
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
        errors.extend(self.loader_settings.validate())
        errors.extend(self.app_settings.validate())
        return errors

    def require_valid(self) -> None:
        """Raise ConfigurationError for the first invalid setting, if any."""
        errors = self.validate()
        if errors:
            raise ConfigurationError(errors[0], expected='; '.join(errors))
