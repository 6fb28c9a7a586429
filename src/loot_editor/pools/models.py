"""
Data models for enchantment pools and the links that remember which
physical loot entries were generated from a pool.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

DEFAULT_POOL_NAMESPACE = "loot_editor"


@dataclass(frozen=True)
class EnchantmentPoolEntry:
    """A single weighted enchantment option inside a pool."""

    enchantment_id: str
    weight: float
    min_level: int = 1
    max_level: int = 1

    def __post_init__(self) -> None:
        if not self.enchantment_id:
            raise ValueError("enchantment_id is required")
        if self.weight <= 0:
            raise ValueError(f"weight must be > 0, got {self.weight}")
        min_level = max(1, int(self.min_level))
        object.__setattr__(self, "weight", float(self.weight))
        object.__setattr__(self, "min_level", min_level)
        object.__setattr__(self, "max_level", max(min_level, int(self.max_level)))

    def with_levels(self, min_level: int, max_level: int) -> "EnchantmentPoolEntry":
        return replace(self, min_level=min_level, max_level=max_level)

    def with_weight(self, weight: float) -> "EnchantmentPoolEntry":
        return replace(self, weight=weight)


@dataclass(frozen=True)
class EnchantmentPool:
    """Reusable set of weighted enchantments that loot rows can reference.

    ``namespace`` defaults to ``loot_editor`` and is lower-cased. ``name`` is
    lower-cased with spaces replaced by underscores; it may not contain
    ``:`` or ``/``.
    """

    namespace: Optional[str]
    name: str
    display_name: Optional[str] = None
    treasure_allowed: bool = False
    entries: Tuple[EnchantmentPoolEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        namespace = (self.namespace or "").strip().lower() or DEFAULT_POOL_NAMESPACE
        if self.name is None or not self.name.strip():
            raise ValueError("Pool name is required")
        name = self.name.strip().lower().replace(" ", "_")
        if ":" in name or "/" in name:
            raise ValueError("Pool name must not contain namespace separators or slashes")
        display_name = (self.display_name or "").strip() or name

        object.__setattr__(self, "namespace", namespace)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "display_name", display_name)
        object.__setattr__(self, "entries", tuple(self.entries))

    @property
    def id(self) -> str:
        return f"{self.namespace}:{self.name}"

    @property
    def total_weight(self) -> float:
        return sum(entry.weight for entry in self.entries)

    def with_entries(self, entries: List[EnchantmentPoolEntry]) -> "EnchantmentPool":
        return replace(self, entries=tuple(entries))

    def with_treasure_allowed(self, allowed: bool) -> "EnchantmentPool":
        return replace(self, treasure_allowed=allowed)

    def with_display_name(self, display_name: Optional[str]) -> "EnchantmentPool":
        return replace(self, display_name=display_name)


@dataclass(frozen=True)
class LinkedEnchantment:
    """The enchantment and levels recorded for one generated entry."""

    enchantment_id: str
    weight: float
    min_level: int
    max_level: int


@dataclass(frozen=True)
class EnchantmentPoolLink:
    """Records that one logical row was expanded from a pool.

    Attributes:
        order_index: Position of the row in the logical row list
        pool_id: Pool that was expanded
        item_id: Item shared by every generated entry
        entry_type: Entry type shared by every generated entry
        weight: Weight of the logical row before distribution
        min_count: Minimum count of the row
        max_count: Maximum count of the row
        enchantments: One tuple per generated entry, in pool order
    """

    order_index: int
    pool_id: str
    item_id: str
    entry_type: str
    weight: float
    min_count: int
    max_count: int
    enchantments: Tuple[LinkedEnchantment, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EnchantmentDescriptor:
    """Registry entry for an enchantment offered to pools."""

    id: str
    namespace: str
    display_name: str
