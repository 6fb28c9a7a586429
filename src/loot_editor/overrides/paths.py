"""
Directory layout of the override data inside the exported datapack.
"""

from pathlib import Path

from ..loot_tables.models import CURRENT_LOOT_DIRECTORY, LootId

LOOT_EDITOR_NAMESPACE = "loot_editor"
LOOT_MODIFIERS_DIR = "loot_modifiers"
META_DIR = "meta"
REPLACEMENTS_DIR = "replacements"
MANIFEST_FILE = "loot_overrides.json"
GLOBAL_MODIFIERS_FILE = "global_loot_modifiers.json"

# Source label of tables surfaced through the override manifest
OVERRIDE_LABEL = "Loot Editor Override"


class OverridePaths:
    """Maps target loot ids to replacement/modifier ids and files."""

    @staticmethod
    def _namespace_root(pack_root: Path) -> Path:
        return Path(pack_root) / "data" / LOOT_EDITOR_NAMESPACE

    @staticmethod
    def _with_json(root: Path, relative_path: str) -> Path:
        *parents, name = relative_path.split("/")
        return root.joinpath(*parents, f"{name}.json")

    def replacement_id(self, target: LootId) -> LootId:
        return LootId(
            LOOT_EDITOR_NAMESPACE,
            f"{REPLACEMENTS_DIR}/{target.namespace}/{target.path}",
        )

    def replacement_root(self, pack_root: Path) -> Path:
        return self._namespace_root(pack_root) / CURRENT_LOOT_DIRECTORY / REPLACEMENTS_DIR

    def replacement_file(self, pack_root: Path, target: LootId) -> Path:
        return self._with_json(
            self.replacement_root(pack_root) / target.namespace, target.path
        )

    def modifier_id(self, target: LootId) -> LootId:
        return LootId(LOOT_EDITOR_NAMESPACE, f"{target.namespace}/{target.path}")

    def modifier_file(self, pack_root: Path, target: LootId) -> Path:
        root = self._namespace_root(pack_root) / LOOT_MODIFIERS_DIR / target.namespace
        return self._with_json(root, target.path)

    def global_modifiers_file(self, pack_root: Path) -> Path:
        return self._namespace_root(pack_root) / LOOT_MODIFIERS_DIR / GLOBAL_MODIFIERS_FILE

    def manifest_file(self, pack_root: Path) -> Path:
        return self._namespace_root(pack_root) / META_DIR / MANIFEST_FILE

    def is_replacement_path(self, pack_root: Path, candidate: Path) -> bool:
        """Check whether ``candidate`` lies inside the replacement tree."""
        replacement_root = self.replacement_root(pack_root).resolve()
        return Path(candidate).resolve().is_relative_to(replacement_root)
