"""
Discovery-related settings: worker count and optional sources.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)


class ScanSettings:
    """Manages modpack scan settings."""

    def __init__(self, settings: "QSettings"):
        self.settings = settings

    def _get_bool(self, key: str, default: bool = False) -> bool:
        """Type-safe boolean retrieval from settings."""
        value = self.settings.value(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes")
        return bool(value) if value is not None else default

    @property
    def max_workers(self) -> int:
        """Worker threads for background tasks (0 = derive from CPU count)."""
        value = self.settings.value("scan/max_workers", 0)
        try:
            return int(str(value)) if value is not None else 0
        except (ValueError, TypeError):
            return 0

    @max_workers.setter
    def max_workers(self, value: int) -> None:
        if value >= 0:
            self.settings.setValue("scan/max_workers", value)
            self.settings.sync()
        else:
            logger.warning(
                f"Invalid worker count: {value}, keeping current: {self.max_workers}"
            )

    @property
    def include_vanilla(self) -> bool:
        """Whether the vanilla game jar is scanned."""
        return self._get_bool("scan/include_vanilla", True)

    @include_vanilla.setter
    def include_vanilla(self, value: bool) -> None:
        self.settings.setValue("scan/include_vanilla", value)
        self.settings.sync()

    @property
    def include_world_saves(self) -> bool:
        """Whether per-world datapacks under ``saves`` are scanned."""
        return self._get_bool("scan/include_world_saves", True)

    @include_world_saves.setter
    def include_world_saves(self, value: bool) -> None:
        self.settings.setValue("scan/include_world_saves", value)
        self.settings.sync()
