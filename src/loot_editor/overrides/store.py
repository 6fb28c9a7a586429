"""
Override store: keeps the manifest and its derived artifacts consistent.

Every change rewrites the replacement document, the manifest, the
per-target modifier and the global modifier list as whole files. Calls
are not safe against concurrent writers on the same pack root; the caller
serializes them.
"""

import logging
from pathlib import Path
from typing import Optional

from ..loot_tables.models import LootDocument, LootId
from ..utils.json_io import write_json
from .manifest import OverrideManifest, OverrideManifestService
from .modifiers import LootModifierWriter
from .paths import OverridePaths


class OverrideStore:
    """Facade over manifest, replacement and modifier persistence."""

    def __init__(self, paths: Optional[OverridePaths] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.paths = paths or OverridePaths()
        self.manifests = OverrideManifestService(self.paths)
        self.modifiers = LootModifierWriter(self.paths)

    def load_manifest(self, pack_root: Path) -> OverrideManifest:
        return self.manifests.load(pack_root)

    def write_replacement(self, pack_root: Path, target: LootId, document: LootDocument) -> Path:
        """Write ``document`` at the replacement path derived from ``target``."""
        return write_json(self.paths.replacement_file(pack_root, target), document)

    def write_modifier(self, pack_root: Path, target: LootId, replacement: LootId) -> Path:
        return self.modifiers.write_modifier(pack_root, target, replacement)

    def write_global_list(self, pack_root: Path, manifest: OverrideManifest) -> Path:
        return self.modifiers.write_global_list(pack_root, manifest)

    def apply(self, pack_root: Path, target: LootId, document: LootDocument) -> LootId:
        """Store ``document`` as the replacement for ``target``.

        Returns:
            The replacement id now mapped to ``target``

        Raises:
            OSError: Any write failure, after which the store may hold the
                artifacts flushed before the failure
        """
        replacement = self.paths.replacement_id(target)
        self.write_replacement(pack_root, target, document)

        manifest = self.load_manifest(pack_root).upsert(target, replacement)
        self.manifests.save(pack_root, manifest)
        self.write_modifier(pack_root, target, replacement)
        self.write_global_list(pack_root, manifest)

        self.logger.info(
            f"Override {target} -> {replacement} written "
            f"({len(manifest.overrides)} override(s) in {pack_root})"
        )
        return replacement
