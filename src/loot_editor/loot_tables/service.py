"""
Main service for loading, saving and creating loot tables.

Tables that cannot be edited in place (archive members, vanilla tables,
files in the override tree) are saved through the override store, which
keeps the replacement file, manifest and modifiers consistent.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import orjson

from ..errors import ArchiveEntryMissing, InvalidRoot, TargetExists
from ..overrides.datapack import (
    DataPackService,
    PACK_FOLDER,
    normalize_namespace,
    normalize_table_path,
)
from ..overrides.paths import OVERRIDE_LABEL
from ..overrides.store import OverrideStore
from ..pools.codec import expand, parse_entries
from ..utils.json_io import dumps, read_json, write_json
from .models import (
    CURRENT_LOOT_DIRECTORY,
    LootDocument,
    LootId,
    LootPoolEntryModel,
    LootTableDescriptor,
    LootTableTemplate,
    SourceType,
)
from .readers import open_view

KUBEJS_FORK_LABEL = "KubeJS Override"


def _require_root(modpack_root: Optional[Path]) -> Path:
    if modpack_root is None or not Path(modpack_root).is_dir():
        raise InvalidRoot(f"Modpack root {modpack_root} is not a directory")
    return Path(modpack_root)


class LootTableService:
    """Central place for reading and writing loot table JSON."""

    def __init__(
        self,
        data_packs: Optional[DataPackService] = None,
        overrides: Optional[OverrideStore] = None,
    ):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.data_packs = data_packs or DataPackService()
        self.overrides = overrides or OverrideStore()

    # === READING ===

    def load(self, descriptor: LootTableDescriptor) -> LootDocument:
        """Read the document behind ``descriptor``.

        Raises:
            ArchiveEntryMissing: If the recorded archive member is gone
            SourceUnreadable: If the archive cannot be opened
            OSError: If a plain file cannot be read
        """
        if not descriptor.is_archive_entry:
            return read_json(descriptor.container_path)

        with open_view(descriptor.container_path) as view:
            if not view.is_file(descriptor.archive_entry):
                raise ArchiveEntryMissing(
                    f"{descriptor.archive_entry} not found in {descriptor.container_path}"
                )
            return orjson.loads(view.read_bytes(descriptor.archive_entry))

    def extract_entries(self, document: Optional[LootDocument]) -> List[LootPoolEntryModel]:
        """Logical rows for every physical entry (pool links are not applied)."""
        if document is None:
            return []
        return [parsed.row for parsed in parse_entries(document)]

    def rebuild_table(
        self, template: Optional[LootDocument], rows: Sequence[LootPoolEntryModel]
    ) -> LootDocument:
        """Single-pool document from ``rows``; pool references are ignored."""
        plain_rows = [row.with_enchantment_pool(None) for row in rows]
        return expand(template, plain_rows, lambda pool_id: None).document

    def to_json(self, document: LootDocument) -> str:
        return dumps(document).decode("utf-8")

    # === WRITING ===

    def save_to_preferred_location(
        self, modpack_root: Path, descriptor: LootTableDescriptor, document: LootDocument
    ) -> LootTableDescriptor:
        """Save in place when possible, otherwise as an override.

        Returns:
            An editable descriptor pointing at the written file

        Raises:
            InvalidRoot: If ``modpack_root`` is not a directory
            IdentityRequired: If the descriptor has a blank namespace or path
        """
        modpack_root = _require_root(modpack_root)
        # Checked before anything is written
        normalize_namespace(descriptor.namespace)
        normalize_table_path(descriptor.table_path)
        pack_root = self.data_packs.ensure_pack_root(modpack_root)
        container = descriptor.container_path
        in_override_tree = self.overrides.paths.is_replacement_path(pack_root, container)
        in_place = (
            descriptor.editable
            and not descriptor.is_archive_entry
            and Path(container).is_file()
            and not in_override_tree
        )

        if in_place:
            write_json(container, document)
            self.logger.info(f"Saved {descriptor.qualified_name} in place at {container}")
            saved = LootTableDescriptor(
                descriptor.namespace,
                descriptor.table_path,
                Path(container),
                None,
                descriptor.source_display,
                descriptor.source_type,
                True,
            )
        else:
            target = LootId(descriptor.namespace, descriptor.table_path)
            self.overrides.apply(pack_root, target, document)
            saved = LootTableDescriptor(
                descriptor.namespace,
                descriptor.table_path,
                self.overrides.paths.replacement_file(pack_root, target),
                None,
                OVERRIDE_LABEL,
                SourceType.DATAPACK,
                True,
            )

        self._sync_worlds(modpack_root)
        return saved

    def create_table(
        self,
        modpack_root: Path,
        namespace: str,
        table_path: str,
        template: LootTableTemplate = LootTableTemplate.GENERIC_CHEST,
    ) -> LootTableDescriptor:
        """Write a new template table into the export datapack.

        Raises:
            IdentityRequired: If the namespace or path is blank
            TargetExists: If the table file already exists (it is left untouched)
        """
        modpack_root = _require_root(modpack_root)
        normalized_namespace = normalize_namespace(namespace)
        normalized_path = normalize_table_path(table_path)
        target = self.data_packs.resolve_loot_table_path(
            modpack_root, normalized_namespace, normalized_path
        )
        if target.exists():
            raise TargetExists(f"Loot table already exists: {normalized_namespace}:{normalized_path}")

        write_json(target, template.build_document())
        self.logger.info(f"Created {normalized_namespace}:{normalized_path} from {template.label} template")
        self._sync_worlds(modpack_root)
        return LootTableDescriptor(
            normalized_namespace,
            normalized_path,
            target,
            None,
            f"Datapack: {PACK_FOLDER}",
            SourceType.DATAPACK,
            True,
        )

    def kubejs_path(self, modpack_root: Path, namespace: str, table_path: str) -> Path:
        *parents, name = table_path.split("/")
        root = Path(modpack_root) / "kubejs" / "data" / namespace / CURRENT_LOOT_DIRECTORY
        return root.joinpath(*parents, f"{name}.json")

    def fork_to_kubejs(
        self, modpack_root: Path, descriptor: LootTableDescriptor
    ) -> LootTableDescriptor:
        """Copy a table into ``kubejs/data`` so it can be edited there.

        Raises:
            TargetExists: If a KubeJS copy already exists
        """
        modpack_root = _require_root(modpack_root)
        document = self.load(descriptor)
        target = self.kubejs_path(modpack_root, descriptor.namespace, descriptor.table_path)
        if target.exists():
            raise TargetExists(f"Target table already exists at {target}")

        write_json(target, document)
        self.logger.info(f"Forked {descriptor.qualified_name} to {target}")
        return LootTableDescriptor(
            descriptor.namespace,
            descriptor.table_path,
            target,
            None,
            KUBEJS_FORK_LABEL,
            SourceType.KUBEJS,
            True,
        )

    def export_to_datapack(
        self, modpack_root: Path, descriptor: LootTableDescriptor
    ) -> LootTableDescriptor:
        """Save the current content of ``descriptor`` to its preferred location."""
        return self.save_to_preferred_location(modpack_root, descriptor, self.load(descriptor))

    def sync_world_datapacks(self, modpack_root: Path) -> List[Path]:
        return self.data_packs.sync_world_datapacks(_require_root(modpack_root))

    def _sync_worlds(self, modpack_root: Path) -> None:
        """World sync after a write; failures are logged only."""
        try:
            worlds = self.data_packs.sync_world_datapacks(modpack_root)
        except OSError as e:
            self.logger.warning(f"Failed to propagate datapack to worlds under {modpack_root}: {e}")
            return
        if worlds:
            self.logger.info(f"Propagated {PACK_FOLDER} datapack to {len(worlds)} world(s)")
