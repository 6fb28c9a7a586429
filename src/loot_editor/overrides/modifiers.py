"""
Writers for the global loot modifier documents that redirect a loot table
request to its replacement at runtime.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from ..loot_tables.models import LootId
from ..utils.json_io import write_json
from .manifest import OverrideManifest
from .paths import OverridePaths

MODIFIER_TYPE = "loot_editor_loader:replace_table"
TABLE_CONDITION = "neoforge:loot_table_id"


class LootModifierWriter:
    """Emits the per-target modifier files and the aggregate list."""

    def __init__(self, paths: Optional[OverridePaths] = None):
        self.paths = paths or OverridePaths()

    @staticmethod
    def modifier_document(target: LootId, replacement: LootId) -> Dict[str, Any]:
        return {
            "type": MODIFIER_TYPE,
            "conditions": [
                {"condition": TABLE_CONDITION, "loot_table": target.as_string()}
            ],
            "replacement": replacement.as_string(),
        }

    def global_list_document(self, manifest: OverrideManifest) -> Dict[str, Any]:
        targets = sorted(
            (entry.target_id for entry in manifest.overrides),
            key=lambda target: target.as_string(),
        )
        return {
            "replace": False,
            "entries": [self.paths.modifier_id(target).as_string() for target in targets],
        }

    def write_modifier(self, pack_root: Path, target: LootId, replacement: LootId) -> Path:
        return write_json(
            self.paths.modifier_file(pack_root, target),
            self.modifier_document(target, replacement),
        )

    def write_global_list(self, pack_root: Path, manifest: OverrideManifest) -> Path:
        return write_json(
            self.paths.global_modifiers_file(pack_root),
            self.global_list_document(manifest),
        )
