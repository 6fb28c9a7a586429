"""
Settings validation system for the loot editor.
"""

import logging
from typing import List, TYPE_CHECKING

from .logging import VALID_LEVELS
from .types import ValidationResult

if TYPE_CHECKING:
    from .core import AppSettings

logger = logging.getLogger(__name__)


class SettingsValidator:
    """Validates configuration settings."""

    def __init__(self, settings: "AppSettings"):
        self.settings = settings

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        errors: List[str] = []
        warnings: List[str] = []

        level = self.settings.console_log_level
        if level.upper() not in VALID_LEVELS:
            errors.append(f"Unknown console log level: {level}")

        if self.settings.max_workers < 0:
            errors.append(f"Worker count must not be negative: {self.settings.max_workers}")

        if not self.settings.console_logging and not self.settings.file_logging:
            warnings.append("Both console and file logging are disabled")

        if not self.settings.include_vanilla:
            warnings.append("Vanilla loot tables are excluded from scans")

        return ValidationResult(
            is_valid=len(errors) == 0, errors=errors, warnings=warnings
        )
