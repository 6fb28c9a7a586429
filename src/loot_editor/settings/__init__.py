"""
Settings package for the loot editor.

Application settings use Qt's QSettings for cross-platform storage;
per-modpack export settings are read from the modpack itself.

Usage:
    from loot_editor.settings import AppSettings, ValidationResult

    settings = AppSettings()
    result = settings.validate()
"""

from .core import AppSettings
from .export import ExportSettings
from .logging import LoggingSettings
from .scan import ScanSettings
from .types import ConfigVersion, ConfigError, ValidationResult

__all__ = [
    "AppSettings",
    "ConfigVersion",
    "ConfigError",
    "ExportSettings",
    "LoggingSettings",
    "ScanSettings",
    "ValidationResult",
]
