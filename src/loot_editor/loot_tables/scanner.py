"""
Discovery of every loot table reachable from a modpack root.

Sources, in scan order:

- ``datapacks/*`` (directories and ``.zip`` archives, with embedded packs)
- the editor's export datapack and its override manifest
- ``saves/<world>/datapacks/*``
- ``kubejs/data`` and its ``_loot_dump`` snapshot
- ``mods/*.jar`` (``data`` root and embedded packs)
- the vanilla game jar located through ``minecraftinstance.json``

A source that cannot be read is skipped; only a root that is not a
directory fails the scan.
"""

import logging
import zipfile
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from ..errors import InvalidRoot, SourceUnreadable
from ..instance import resolve_vanilla_jar
from ..overrides.datapack import DataPackService
from ..overrides.manifest import OverrideManifestService
from ..overrides.paths import LOOT_EDITOR_NAMESPACE, OVERRIDE_LABEL, REPLACEMENTS_DIR, OverridePaths
from .models import DescriptorList, LOOT_DIRECTORY_NAMES, LootTableDescriptor, SourceType
from .readers import ArchiveView, is_archive, open_view

if TYPE_CHECKING:
    from ..settings import ScanSettings

DATA_ROOT = "data"
PACK_META = "pack.mcmeta"
LOOT_DUMP_NAMESPACE = "_loot_dump"

EXPORT_LABEL = "Loot Editor Export"


def _is_replacement(namespace: str, table_path: str) -> bool:
    return namespace == LOOT_EDITOR_NAMESPACE and table_path.startswith(f"{REPLACEMENTS_DIR}/")


class ModpackScanner:
    """Walks a modpack and produces descriptors for every loot table it finds."""

    def __init__(
        self,
        settings: Optional["ScanSettings"] = None,
        data_packs: Optional[DataPackService] = None,
        paths: Optional[OverridePaths] = None,
    ):
        """Initialize the scanner.

        Args:
            settings: Optional scan settings (``include_vanilla``,
                ``include_world_saves``); everything is scanned without them
            data_packs: Resolves the export datapack root
            paths: Override layout
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.settings = settings
        self.data_packs = data_packs or DataPackService()
        self.paths = paths or OverridePaths()
        self.manifests = OverrideManifestService(self.paths)

    def scan(self, modpack_root: Path) -> DescriptorList:
        """Discover every loot table under ``modpack_root``.

        Returns:
            Descriptors sorted by source type, namespace and table path

        Raises:
            InvalidRoot: If ``modpack_root`` is not a directory
        """
        if modpack_root is None or not Path(modpack_root).is_dir():
            raise InvalidRoot(f"Modpack root {modpack_root} is not a directory")
        modpack_root = Path(modpack_root)
        self.logger.info(f"Scanning modpack at {modpack_root}")

        descriptors: DescriptorList = []
        self._scan_datapacks(modpack_root / "datapacks", "Datapack: ", descriptors)
        self._scan_export_root(modpack_root, descriptors)
        if self.settings is None or self.settings.include_world_saves:
            self._scan_world_saves(modpack_root / "saves", descriptors)
        self._scan_kubejs(modpack_root / "kubejs", descriptors)
        self._scan_mods(modpack_root / "mods", descriptors)
        if self.settings is None or self.settings.include_vanilla:
            self._scan_vanilla(modpack_root, descriptors)

        descriptors.sort(key=LootTableDescriptor.sort_key)
        self.logger.info(f"Found {len(descriptors)} loot tables in {modpack_root}")
        return descriptors

    # === SOURCE VISITS ===

    def _visit(
        self,
        location: Path,
        label: str,
        source_type: SourceType,
        editable: bool,
        sink: DescriptorList,
        data_root: str = DATA_ROOT,
        embedded: bool = True,
        skip_namespaces: tuple[str, ...] = (),
    ) -> None:
        """Mount ``location`` once and scan it; failures skip the whole source."""
        found: DescriptorList = []
        try:
            with open_view(location) as view:
                self._scan_data_root(
                    view, data_root, label, source_type, editable, found, skip_namespaces
                )
                if embedded:
                    self._scan_embedded(view, "", label, editable, found)
        except (SourceUnreadable, OSError, zipfile.BadZipFile) as e:
            self.logger.debug(f"Skipping source {location}: {e}")
            return
        sink.extend(found)

    def _scan_data_root(
        self,
        view: ArchiveView,
        data_root: str,
        label: str,
        source_type: SourceType,
        editable: bool,
        sink: DescriptorList,
        skip_namespaces: tuple[str, ...] = (),
    ) -> None:
        """Collect the tables below ``<data_root>/<namespace>/loot_table(s)``."""
        if not view.is_dir(data_root):
            return
        namespaces = sorted(
            (entry for entry in view.list(data_root) if entry.is_dir), key=lambda e: e.name
        )
        for namespace_entry in namespaces:
            namespace = namespace_entry.name
            if namespace in skip_namespaces:
                continue
            for directory_name in LOOT_DIRECTORY_NAMES:
                loot_dir = f"{namespace_entry.path}/{directory_name}"
                if not view.is_dir(loot_dir):
                    continue
                for member in view.walk_files(loot_dir):
                    if not member.endswith(".json"):
                        continue
                    table_path = member[len(loot_dir) + 1: -len(".json")]
                    if not table_path or _is_replacement(namespace, table_path):
                        continue
                    sink.append(
                        self._descriptor(view, member, namespace, table_path, label, source_type, editable)
                    )

    def _scan_embedded(
        self, view: ArchiveView, base: str, label: str, editable: bool, sink: DescriptorList
    ) -> None:
        """Scan child directories of ``base`` that are datapacks themselves."""
        children = sorted((entry for entry in view.list(base) if entry.is_dir), key=lambda e: e.name)
        for child in children:
            if child.name == DATA_ROOT:
                continue
            if not (view.is_file(f"{child.path}/{PACK_META}") and view.is_dir(f"{child.path}/{DATA_ROOT}")):
                continue
            child_label = f"{label} (Datapack {child.name})"
            self._scan_data_root(
                view, f"{child.path}/{DATA_ROOT}", child_label, SourceType.DATAPACK, editable, sink
            )
            self._scan_embedded(view, child.path, child_label, editable, sink)

    @staticmethod
    def _descriptor(
        view: ArchiveView,
        member: str,
        namespace: str,
        table_path: str,
        label: str,
        source_type: SourceType,
        editable: bool,
    ) -> LootTableDescriptor:
        file_path = view.file_path(member)
        if file_path is not None:
            return LootTableDescriptor(
                namespace, table_path, file_path, None, label, source_type, editable
            )
        return LootTableDescriptor(
            namespace, table_path, view.location, member, label, source_type, False
        )

    # === SOURCE KINDS ===

    def _scan_datapacks(self, datapacks_dir: Path, prefix: str, sink: DescriptorList) -> None:
        if not datapacks_dir.is_dir():
            return
        for pack in sorted(datapacks_dir.iterdir()):
            label = f"{prefix}{pack.name}"
            if pack.is_dir():
                self._visit(pack, label, SourceType.DATAPACK, True, sink)
            elif pack.is_file() and pack.suffix.lower() == ".zip":
                self._visit(pack, label, SourceType.DATAPACK, False, sink)

    def _scan_world_saves(self, saves_dir: Path, sink: DescriptorList) -> None:
        if not saves_dir.is_dir():
            return
        for world in sorted(saves_dir.iterdir()):
            if world.is_dir():
                self._scan_datapacks(world / "datapacks", f"World {world.name}: ", sink)

    def _scan_kubejs(self, kubejs_dir: Path, sink: DescriptorList) -> None:
        if not (kubejs_dir / DATA_ROOT).is_dir():
            return
        self._visit(
            kubejs_dir,
            "KubeJS",
            SourceType.KUBEJS,
            True,
            sink,
            embedded=False,
            skip_namespaces=(LOOT_DUMP_NAMESPACE,),
        )
        if (kubejs_dir / DATA_ROOT / LOOT_DUMP_NAMESPACE).is_dir():
            self._visit(
                kubejs_dir,
                "Loot Dump",
                SourceType.LOOT_DUMP,
                False,
                sink,
                data_root=f"{DATA_ROOT}/{LOOT_DUMP_NAMESPACE}",
                embedded=False,
            )

    def _scan_mods(self, mods_dir: Path, sink: DescriptorList) -> None:
        if not mods_dir.is_dir():
            return
        for jar in sorted(mods_dir.glob("*.jar")):
            if is_archive(jar) and jar.is_file():
                self._visit(jar, f"Mod Jar: {jar.name}", SourceType.MOD_JAR, False, sink)

    def _scan_vanilla(self, modpack_root: Path, sink: DescriptorList) -> None:
        jar = resolve_vanilla_jar(modpack_root)
        if jar is None:
            self.logger.debug(f"No vanilla jar found for {modpack_root}")
            return
        self._visit(jar, "Minecraft", SourceType.VANILLA, False, sink, embedded=False)

    def _scan_export_root(self, modpack_root: Path, sink: DescriptorList) -> None:
        """Surface the export datapack and the tables it overrides."""
        export_root = self.data_packs.resolve_pack_root(modpack_root)
        primary_datapacks = (modpack_root / "datapacks").resolve()
        if export_root.is_dir() and export_root.resolve().parent != primary_datapacks:
            self.logger.debug(f"Scanning export datapack at {export_root}")
            self._visit(export_root, EXPORT_LABEL, SourceType.DATAPACK, True, sink, embedded=False)

        manifest = self.manifests.load(export_root)
        for entry in manifest.overrides:
            target = entry.target_id
            replacement_file = self.paths.replacement_file(export_root, target)
            if not replacement_file.is_file():
                self.logger.warning(f"Override {target} points to missing file {replacement_file}")
                continue
            sink.append(
                LootTableDescriptor(
                    target.namespace,
                    target.path,
                    replacement_file,
                    None,
                    OVERRIDE_LABEL,
                    SourceType.DATAPACK,
                    False,
                )
            )
