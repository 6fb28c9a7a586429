"""
Per-modpack export settings (``loot-editor-b/export-settings.json``).

Unlike the application settings these live inside the modpack, so every
pack can point its override datapack somewhere else.
"""

import logging
from pathlib import Path
from typing import Optional

import orjson

from ..utils.json_io import read_json

EXPORT_SETTINGS_FILE = Path("loot-editor-b") / "export-settings.json"
PACK_ROOT_KEY = "packRoot"


class ExportSettings:
    """Resolves a custom export datapack root for a modpack."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def settings_file(self, modpack_root: Path) -> Path:
        return Path(modpack_root) / EXPORT_SETTINGS_FILE

    def resolve_pack_root(self, modpack_root: Path) -> Optional[Path]:
        """Return the configured pack root, or None when none is configured.

        Relative values resolve against ``modpack_root``.
        """
        settings_file = self.settings_file(modpack_root)
        if not settings_file.is_file():
            return None
        try:
            data = read_json(settings_file)
        except (OSError, orjson.JSONDecodeError) as e:
            self.logger.warning(f"Ignoring unreadable export settings {settings_file}: {e}")
            return None

        value = data.get(PACK_ROOT_KEY) if isinstance(data, dict) else None
        if not isinstance(value, str) or not value.strip():
            return None
        pack_root = Path(value.strip())
        if not pack_root.is_absolute():
            pack_root = Path(modpack_root) / pack_root
        self.logger.debug(f"Using custom export root {pack_root}")
        return pack_root
