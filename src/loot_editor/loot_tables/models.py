"""
Data models for loot table discovery and editing.

Loot table documents stay plain dicts (opaque trees copied verbatim);
only identifiers, descriptors and the editor's logical rows are typed.
"""

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, TypeAlias

# Type aliases for clarity
LootDocument: TypeAlias = Dict[str, Any]
"""A loot table JSON document as parsed by orjson."""

LootEntryNode: TypeAlias = Dict[str, Any]
"""A single physical entry inside a loot pool."""

# Directory names used for loot tables (legacy first, renamed in 1.21)
LOOT_DIRECTORY_NAMES = ("loot_tables", "loot_table")
CURRENT_LOOT_DIRECTORY = "loot_table"

DEFAULT_ENTRY_TYPE = "minecraft:item"
DEFAULT_TABLE_TYPE = "minecraft:generic"


@dataclass(frozen=True, order=True)
class LootId:
    """Simple ``namespace:path`` identifier."""

    namespace: str
    path: str

    def __post_init__(self) -> None:
        if not self.namespace or not self.path:
            raise ValueError(f"Invalid loot id: {self.namespace!r}:{self.path!r}")

    @classmethod
    def parse(cls, text: str) -> "LootId":
        """Parse ``namespace:path``.

        Raises:
            ValueError: Unless there is exactly one separator with text on
                both sides
        """
        if text is None:
            raise ValueError("Loot id is required")
        namespace, sep, path = text.partition(":")
        if not sep or not namespace or not path or ":" in path:
            raise ValueError(f"Invalid loot id: {text}")
        return cls(namespace, path)

    def as_string(self) -> str:
        return f"{self.namespace}:{self.path}"

    def __str__(self) -> str:
        return self.as_string()


class SourceType(Enum):
    """Kind of source a loot table was discovered in.

    Declaration order is the presentation order.
    """

    DATAPACK = "Datapack"
    KUBEJS = "KubeJS"
    MOD_JAR = "Mod Jar"
    LOOT_DUMP = "Loot Dump"
    VANILLA = "Minecraft"
    UNKNOWN = "Unknown"

    @property
    def label(self) -> str:
        """Human readable label."""
        return self.value

    @property
    def order(self) -> int:
        """Sort position of this source type."""
        return list(SourceType).index(self)


@dataclass(frozen=True)
class LootTableDescriptor:
    """Where a loot table lives and whether it can be edited in place.

    Attributes:
        namespace: Namespace directory the table was found under
        table_path: Path below the loot table directory, without ``.json``
        container_path: The file itself, or the archive holding it
        archive_entry: Member name inside ``container_path`` for archive-backed tables
        source_display: Label shown to the user (e.g. ``Mod Jar: foo.jar``)
        source_type: Kind of source
        editable: True only for standalone files that can be overwritten in place
    """

    namespace: str
    table_path: str
    container_path: Path
    archive_entry: Optional[str]
    source_display: str
    source_type: SourceType
    editable: bool

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}:{self.table_path}"

    @property
    def loot_id(self) -> LootId:
        return LootId(self.namespace, self.table_path)

    @property
    def is_archive_entry(self) -> bool:
        return bool(self.archive_entry and self.archive_entry.strip())

    def sort_key(self) -> tuple[int, str, str]:
        return (self.source_type.order, self.namespace, self.table_path)

    def to_manifest(self) -> Dict[str, Any]:
        """Convert to the scan manifest table shape."""
        node: Dict[str, Any] = {
            "id": self.qualified_name,
            "namespace": self.namespace,
            "path": self.table_path,
            "sourceType": self.source_type.name,
            "sourceLabel": self.source_type.label,
            "sourceDisplay": self.source_display,
            "editable": self.editable,
            "containerPath": str(self.container_path),
        }
        if self.archive_entry is not None:
            node["archiveEntry"] = self.archive_entry
        return node


@dataclass
class LootPoolEntryModel:
    """Logical, editor-facing row.

    A row carrying ``enchantment_pool_id`` is expanded into one physical
    entry per pool option when the table is saved.
    """

    item_id: str
    weight: float
    entry_type: str = DEFAULT_ENTRY_TYPE
    min_count: int = 1
    max_count: int = 1
    enchantment_pool_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.item_id is None or self.entry_type is None:
            raise ValueError("item_id and entry_type are required")
        self.weight = float(self.weight)
        if self.min_count < 1:
            self.min_count = 1
        if self.max_count < self.min_count:
            self.max_count = self.min_count

    def with_weight(self, weight: float) -> "LootPoolEntryModel":
        return replace(self, weight=weight)

    def with_counts(self, min_count: int, max_count: int) -> "LootPoolEntryModel":
        return replace(self, min_count=min_count, max_count=max_count)

    def with_enchantment_pool(self, pool_id: Optional[str]) -> "LootPoolEntryModel":
        return replace(self, enchantment_pool_id=pool_id)


class LootTableTemplate(Enum):
    """Starting points offered when creating a new table."""

    GENERIC_CHEST = ("minecraft:chest", "minecraft:stone", "Chest / Container")
    ENTITY_DROPS = ("minecraft:entity", "minecraft:rotten_flesh", "Entity Drops")
    BLOCK_DROPS = ("minecraft:block", "minecraft:stone", "Block Drops")

    @property
    def loot_type(self) -> str:
        return self.value[0]

    @property
    def default_entry(self) -> str:
        return self.value[1]

    @property
    def label(self) -> str:
        return self.value[2]

    def build_document(self) -> LootDocument:
        """Minimal table: one roll, one default entry."""
        return {
            "type": self.loot_type,
            "pools": [
                {
                    "rolls": 1,
                    "entries": [
                        {
                            "type": DEFAULT_ENTRY_TYPE,
                            "name": self.default_entry,
                            "weight": 1,
                        }
                    ],
                }
            ],
        }


DescriptorList: TypeAlias = List[LootTableDescriptor]
"""A list of discovered descriptors."""
