"""
Creation and upkeep of the editor's own datapack.

The pack lives at ``<modpack>/datapacks/loot_editor`` unless the modpack's
export settings point elsewhere. Its ``pack.mcmeta`` carries the
``pack_format`` matching the instance's Minecraft version.
"""

import logging
import shutil
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple

import orjson

from ..errors import IdentityRequired
from ..instance import minecraft_version, read_instance
from ..loot_tables.models import CURRENT_LOOT_DIRECTORY
from ..settings.export import ExportSettings
from ..utils.json_io import read_json, write_json

PACK_FOLDER = "loot_editor"
PACK_DESCRIPTION = "Loot Editor datapack exports"
PACK_META_FILE = "pack.mcmeta"
DEFAULT_PACK_FORMAT = 71


class Version(NamedTuple):
    """Dotted game version, compared component-wise."""

    major: int
    minor: int
    patch: int
    build: int = 0

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["Version"]:
        """Parse the leading ``digits.digits...`` run of ``raw``."""
        if not raw or not raw.strip():
            return None
        digits = ""
        for char in raw.strip():
            if not (char.isdigit() or char == "."):
                break
            digits += char
        if not digits:
            return None

        parts = digits.split(".")

        def part(index: int) -> int:
            try:
                return int(parts[index])
            except (IndexError, ValueError):
                return 0

        return cls(part(0), part(1), part(2))

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        return f"{text}.{self.build}" if self.build > 0 else text


# (first version, last version or None, pack_format), newest first
PACK_FORMAT_RULES: List[Tuple[Version, Optional[Version], int]] = [
    (Version(1, 21, 5), None, 71),
    (Version(1, 21, 4), Version(1, 21, 4), 61),
    (Version(1, 21, 2), Version(1, 21, 3, 99), 57),
    (Version(1, 21, 0), Version(1, 21, 1, 99), 48),
    (Version(1, 20, 5), Version(1, 20, 6, 99), 41),
    (Version(1, 20, 3), Version(1, 20, 4, 99), 32),
    (Version(1, 20, 2), Version(1, 20, 2, 99), 18),
    (Version(1, 20, 0), Version(1, 20, 1, 99), 15),
    (Version(1, 19, 4), Version(1, 19, 4, 99), 12),
    (Version(1, 19, 0), Version(1, 19, 3, 99), 10),
    (Version(1, 18, 2), Version(1, 18, 2, 99), 9),
    (Version(1, 18, 0), Version(1, 18, 1, 99), 8),
    (Version(1, 17, 0), Version(1, 17, 1, 99), 7),
    (Version(1, 16, 2), Version(1, 16, 5, 99), 6),
    (Version(1, 15, 0), Version(1, 16, 1, 99), 5),
    (Version(1, 13, 0), Version(1, 14, 4, 99), 4),
]


def pack_format_for(version: Optional[Version]) -> int:
    """Map a game version to its datapack ``pack_format``."""
    if version is None:
        return DEFAULT_PACK_FORMAT
    for first, last, pack_format in PACK_FORMAT_RULES:
        if version >= first and (last is None or version <= last):
            return pack_format
    return DEFAULT_PACK_FORMAT


def normalize_namespace(namespace: Optional[str]) -> str:
    """Trim and lower-case a namespace.

    Raises:
        IdentityRequired: If the namespace is blank
    """
    if namespace is None or not namespace.strip():
        raise IdentityRequired("Namespace is required")
    return namespace.strip().lower()


def normalize_table_path(table_path: Optional[str]) -> str:
    """Trim, use ``/`` separators and drop a ``.json`` suffix.

    Raises:
        IdentityRequired: If the path is blank
    """
    if table_path is None or not table_path.strip():
        raise IdentityRequired("Table path is required")
    normalized = table_path.strip().replace("\\", "/")
    if normalized.endswith(".json"):
        normalized = normalized[: -len(".json")]
    if not normalized.strip("/"):
        raise IdentityRequired("Table path is required")
    return normalized


class DataPackService:
    """Handles creation and upkeep of the loot editor datapack."""

    def __init__(self, export_settings: Optional[ExportSettings] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.export_settings = export_settings or ExportSettings()

    def resolve_pack_root(self, modpack_root: Path) -> Path:
        """Configured export root, or ``<modpack>/datapacks/loot_editor``."""
        configured = self.export_settings.resolve_pack_root(modpack_root)
        if configured is not None:
            return configured
        return Path(modpack_root) / "datapacks" / PACK_FOLDER

    def ensure_pack_root(self, modpack_root: Path) -> Path:
        """Create the pack with its ``data`` directory and ``pack.mcmeta``."""
        pack_root = self.resolve_pack_root(modpack_root)
        pack_root.mkdir(parents=True, exist_ok=True)
        self._write_pack_meta(pack_root, self.resolve_pack_format(modpack_root))
        (pack_root / "data").mkdir(exist_ok=True)
        return pack_root

    def resolve_pack_format(self, modpack_root: Path) -> int:
        instance = read_instance(modpack_root)
        version = Version.parse(minecraft_version(instance)) if instance else None
        pack_format = pack_format_for(version)
        self.logger.debug(f"Using pack_format {pack_format} for game version {version}")
        return pack_format

    def _write_pack_meta(self, pack_root: Path, pack_format: int) -> None:
        pack_meta = pack_root / PACK_META_FILE
        if pack_meta.is_file():
            try:
                existing = read_json(pack_meta)
                pack = existing.get("pack") if isinstance(existing, dict) else None
                if isinstance(pack, dict) and pack.get("pack_format") == pack_format:
                    return
            except (OSError, orjson.JSONDecodeError) as e:
                self.logger.warning(f"Rewriting unreadable {pack_meta}: {e}")
        write_json(
            pack_meta,
            {"pack": {"pack_format": pack_format, "description": PACK_DESCRIPTION}},
        )
        self.logger.info(f"Wrote {pack_meta} (pack_format {pack_format})")

    def resolve_loot_table_path(self, modpack_root: Path, namespace: str, table_path: str) -> Path:
        """Primary datapack file for ``namespace:table_path``.

        Creates the pack and the file's parent directory, not the file.
        """
        normalized_namespace = normalize_namespace(namespace)
        normalized_path = normalize_table_path(table_path)
        pack_root = self.ensure_pack_root(modpack_root)
        *parents, name = normalized_path.strip("/").split("/")
        target = (pack_root / "data" / normalized_namespace / CURRENT_LOOT_DIRECTORY).joinpath(
            *parents, f"{name}.json"
        )
        target.parent.mkdir(parents=True, exist_ok=True)
        return target

    def sync_world_datapacks(self, modpack_root: Path) -> List[Path]:
        """Mirror the pack into every world under ``saves``.

        Returns:
            The worlds that were updated; failing worlds are logged and skipped
        """
        pack_root = self.ensure_pack_root(modpack_root)
        saves_dir = Path(modpack_root) / "saves"
        if not saves_dir.is_dir():
            return []

        updated: List[Path] = []
        for world in sorted(saves_dir.iterdir()):
            if not world.is_dir() or not (world / "level.dat").exists():
                continue
            target = world / "datapacks" / PACK_FOLDER
            if target.resolve() == pack_root.resolve():
                continue
            try:
                if target.exists():
                    shutil.rmtree(target)
                shutil.copytree(pack_root, target)
            except OSError as e:
                self.logger.warning(f"Failed to sync datapack into {world}: {e}")
                continue
            updated.append(world)
            self.logger.info(f"Synced {PACK_FOLDER} datapack into world {world.name}")
        return updated
