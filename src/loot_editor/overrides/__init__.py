"""
Override persistence: replacement tables, their manifest, the global loot
modifiers that activate them, and upkeep of the exported datapack.
"""

from .datapack import DataPackService, PACK_FOLDER, Version, pack_format_for
from .manifest import OverrideEntry, OverrideManifest, OverrideManifestService
from .modifiers import LootModifierWriter
from .paths import LOOT_EDITOR_NAMESPACE, OverridePaths
from .store import OverrideStore

__all__ = [
    "DataPackService",
    "LOOT_EDITOR_NAMESPACE",
    "LootModifierWriter",
    "OverrideEntry",
    "OverrideManifest",
    "OverrideManifestService",
    "OverridePaths",
    "OverrideStore",
    "PACK_FOLDER",
    "Version",
    "pack_format_for",
]
