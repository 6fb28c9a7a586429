"""
Reconciliation of descriptors that share an identity across sources.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from ..overrides.datapack import DataPackService
from ..overrides.paths import OverridePaths
from .models import DescriptorList, LootTableDescriptor, SourceType

# Priority scores, highest wins
REPLACEMENT_PRIORITY = 4
PRIMARY_DATAPACK_PRIORITY = 3
DEFAULT_PRIORITY = 2
WORLD_SAVE_PRIORITY = 1


def _is_within(candidate: Path, root: Path) -> bool:
    return Path(candidate).resolve().is_relative_to(root.resolve())


class DescriptorReconciler:
    """Keeps one descriptor per ``(source_type, qualified_name)``.

    Replacement-tree copies beat the primary ``datapacks`` folder, which
    beats every other source, which beats world-save mirrors. Ties keep the
    first descriptor seen.
    """

    def __init__(
        self,
        modpack_root: Path,
        export_root: Optional[Path] = None,
        paths: Optional[OverridePaths] = None,
        data_packs: Optional[DataPackService] = None,
    ):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.modpack_root = Path(modpack_root)
        if export_root is None:
            export_root = (data_packs or DataPackService()).resolve_pack_root(self.modpack_root)
        self.export_root = Path(export_root)
        self.paths = paths or OverridePaths()

    def priority(self, descriptor: LootTableDescriptor) -> int:
        if descriptor.source_type != SourceType.DATAPACK:
            return DEFAULT_PRIORITY
        container = descriptor.container_path
        if self.paths.is_replacement_path(self.export_root, container):
            return REPLACEMENT_PRIORITY
        if _is_within(container, self.modpack_root / "datapacks"):
            return PRIMARY_DATAPACK_PRIORITY
        if _is_within(container, self.modpack_root / "saves"):
            return WORLD_SAVE_PRIORITY
        return DEFAULT_PRIORITY

    def reconcile(self, descriptors: Iterable[LootTableDescriptor]) -> DescriptorList:
        """Deduplicate ``descriptors`` and sort them for presentation."""
        kept: Dict[Tuple[SourceType, str], Tuple[int, LootTableDescriptor]] = {}
        total = 0
        for descriptor in descriptors:
            total += 1
            key = (descriptor.source_type, descriptor.qualified_name)
            score = self.priority(descriptor)
            current = kept.get(key)
            if current is None or score > current[0]:
                kept[key] = (score, descriptor)

        result = sorted((descriptor for _, descriptor in kept.values()), key=LootTableDescriptor.sort_key)
        if total != len(result):
            self.logger.debug(f"Reconciled {total} descriptors into {len(result)}")
        return result

    def replace(
        self, descriptors: Iterable[LootTableDescriptor], updated: LootTableDescriptor
    ) -> DescriptorList:
        """Swap in the descriptor returned by a save and reconcile again.

        The first descriptor with the same qualified name is replaced;
        ``updated`` is appended when there is none.
        """
        result = list(descriptors)
        for index, descriptor in enumerate(result):
            if descriptor.qualified_name == updated.qualified_name:
                result[index] = updated
                self.logger.debug(f"Updated descriptor {updated.qualified_name}")
                break
        else:
            result.append(updated)
            self.logger.debug(f"Added descriptor {updated.qualified_name}")
        return self.reconcile(result)
