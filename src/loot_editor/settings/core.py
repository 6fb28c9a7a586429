"""
Core settings management for the loot editor.
"""

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QSettings

from .types import ConfigVersion, ValidationResult
from .validation import SettingsValidator
from .logging import LoggingSettings
from .scan import ScanSettings

logger = logging.getLogger(__name__)

ORGANIZATION = "badgersnacks"
APPLICATION = "loot_editor"


class AppSettings:
    """
    Configuration management using QSettings.

    Provides type-safe access to application settings with automatic
    cross-platform storage and validation.
    """

    def __init__(self, profile: str = "default", settings: Optional[QSettings] = None):
        """Initialize settings with organization, application name, and profile.

        Args:
            profile: Settings profile name (default: "default")
            settings: Pre-built QSettings to use instead of the platform store
                (e.g. an INI file in tests)
        """
        self.settings = settings if settings is not None else QSettings(ORGANIZATION, APPLICATION)
        self.profile = profile

        # Profile group: badgersnacks/loot_editor/default/...
        self.settings.beginGroup(profile)

        self._validator = SettingsValidator(self)
        self._logging = LoggingSettings(self.settings)
        self._scan = ScanSettings(self.settings)

        self._ensure_version()

        logger.debug(
            f"Settings initialized for profile '{profile}', stored at: {self.settings.fileName()}"
        )

    def _ensure_version(self) -> None:
        current_version = str(self.settings.value("app/version", ""))
        if not current_version:
            self.settings.setValue("app/version", ConfigVersion.CURRENT.value)
            self.settings.setValue("app/first_run", True)
            self.settings.sync()
            logger.info("First run detected, initializing configuration")
        elif current_version != ConfigVersion.CURRENT.value:
            logger.warning(
                f"Unknown configuration version {current_version}, "
                f"expected {ConfigVersion.CURRENT.value}"
            )

    # === SUBSYSTEM ACCESS ===

    @property
    def logging(self) -> LoggingSettings:
        """Access logging settings subsystem."""
        return self._logging

    @property
    def scan(self) -> ScanSettings:
        """Access scan settings subsystem."""
        return self._scan

    # === VERSION AND FIRST RUN ===

    @property
    def is_first_run(self) -> bool:
        """Check if this is the first run of the application."""
        return self._get_bool("app/first_run", True)

    def set_first_run_complete(self) -> None:
        """Mark first run as complete."""
        self.settings.setValue("app/first_run", False)
        self.settings.sync()

    @property
    def version(self) -> str:
        """Get configuration version."""
        return self._get_str("app/version", ConfigVersion.CURRENT.value)

    # === HELPER METHODS ===

    def _get_str(self, key: str, default: str = "") -> str:
        """Type-safe string retrieval from settings."""
        value = self.settings.value(key, default)
        return str(value) if value is not None else default

    def _get_bool(self, key: str, default: bool = False) -> bool:
        """Type-safe boolean retrieval from settings."""
        value = self.settings.value(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes")
        return bool(value) if value is not None else default

    # === LOGGING SETTINGS (DELEGATED) ===

    @property
    def console_logging(self) -> bool:
        """Check if console logging is enabled."""
        return self._logging.console_logging

    @console_logging.setter
    def console_logging(self, value: bool) -> None:
        """Set console logging enabled state."""
        self._logging.console_logging = value

    @property
    def console_log_level(self) -> str:
        """Get console logging level."""
        return self._logging.console_log_level

    @console_log_level.setter
    def console_log_level(self, value: str) -> None:
        """Set console logging level."""
        self._logging.console_log_level = value

    @property
    def console_use_colors(self) -> bool:
        """Check if console should use colors."""
        return self._logging.console_use_colors

    @console_use_colors.setter
    def console_use_colors(self, value: bool) -> None:
        """Set console color usage."""
        self._logging.console_use_colors = value

    @property
    def file_logging(self) -> bool:
        """Check if file logging is enabled."""
        return self._logging.file_logging

    @file_logging.setter
    def file_logging(self, value: bool) -> None:
        """Set file logging enabled state."""
        self._logging.file_logging = value

    @property
    def log_file_path(self) -> str:
        """Get log file path (read-only)."""
        return self._logging.log_file_path

    @property
    def log_file_absolute_path(self) -> Path:
        """Get absolute path to log file."""
        return self._logging.log_file_absolute_path

    # === SCAN SETTINGS (DELEGATED) ===

    @property
    def max_workers(self) -> int:
        """Get background worker count (0 = automatic)."""
        return self._scan.max_workers

    @max_workers.setter
    def max_workers(self, value: int) -> None:
        """Set background worker count."""
        self._scan.max_workers = value

    @property
    def include_vanilla(self) -> bool:
        """Check if the vanilla jar is scanned."""
        return self._scan.include_vanilla

    @include_vanilla.setter
    def include_vanilla(self, value: bool) -> None:
        """Set whether the vanilla jar is scanned."""
        self._scan.include_vanilla = value

    @property
    def include_world_saves(self) -> bool:
        """Check if world datapacks are scanned."""
        return self._scan.include_world_saves

    @include_world_saves.setter
    def include_world_saves(self, value: bool) -> None:
        """Set whether world datapacks are scanned."""
        self._scan.include_world_saves = value

    # === VALIDATION ===

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        return self._validator.validate()

    # === UTILITY METHODS ===

    def get_settings_file_path(self) -> str:
        """Get the file path where settings are stored."""
        return self.settings.fileName()

    def sync(self) -> None:
        """Force synchronization of settings to storage."""
        self.settings.sync()
