"""
Storage for enchantment pool definitions.

Pools live at ``kubejs/data/<namespace>/enchantment_pools/<name>.json``::

    {"display_name": ..., "treasure_allowed": ...,
     "entries": [{"enchantment": ..., "weight": ..., "min_level": ..., "max_level": ...}]}
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import orjson

from ..errors import PoolUnresolved
from ..utils.json_io import json_number, read_json, write_json
from .models import DEFAULT_POOL_NAMESPACE, EnchantmentPool, EnchantmentPoolEntry

POOLS_DIRECTORY = "enchantment_pools"
FALLBACK_ENCHANTMENT = "minecraft:unbreaking"


def sanitize_name(raw: Optional[str]) -> str:
    """Turn free text into a pool name (``pool`` when blank)."""
    if raw is None or not raw.strip():
        return "pool"
    return raw.strip().lower().replace(" ", "_")


def split_pool_id(pool_id: str) -> tuple[str, str]:
    """Split ``namespace:name``; a bare name belongs to ``loot_editor``."""
    namespace, separator, name = pool_id.partition(":")
    if not separator:
        return DEFAULT_POOL_NAMESPACE, namespace
    return namespace, name


class EnchantmentPoolService:
    """Reads and writes pool definitions under ``kubejs/data``."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @staticmethod
    def _kubejs_data(modpack_root: Path) -> Path:
        return Path(modpack_root) / "kubejs" / "data"

    def pool_file(self, modpack_root: Path, namespace: str, name: str) -> Path:
        return self._kubejs_data(modpack_root) / namespace / POOLS_DIRECTORY / f"{name}.json"

    def list_pools(self, modpack_root: Path) -> List[EnchantmentPool]:
        """Every readable pool, sorted case-insensitively by id."""
        kubejs_data = self._kubejs_data(modpack_root)
        if not kubejs_data.is_dir():
            return []

        pools: List[EnchantmentPool] = []
        for pool_file in kubejs_data.glob(f"*/{POOLS_DIRECTORY}/*.json"):
            pool = self._load_pool(pool_file)
            if pool is not None:
                pools.append(pool)
        pools.sort(key=lambda pool: pool.id.lower())
        return pools

    def find_pool(self, modpack_root: Path, pool_id: Optional[str]) -> Optional[EnchantmentPool]:
        if pool_id is None or not pool_id.strip():
            return None
        namespace, name = split_pool_id(pool_id.strip())
        pool_file = self.pool_file(modpack_root, namespace, name)
        if not pool_file.is_file():
            return None
        return self._load_pool(pool_file)

    def require_pool(self, modpack_root: Path, pool_id: str) -> EnchantmentPool:
        """Like `find_pool`, but a missing or unreadable pool is an error.

        Raises:
            PoolUnresolved: If no readable pool has this id
        """
        pool = self.find_pool(modpack_root, pool_id)
        if pool is None:
            raise PoolUnresolved(f"Enchantment pool not found: {pool_id}")
        return pool

    def save_pool(self, modpack_root: Path, pool: EnchantmentPool) -> EnchantmentPool:
        pool_file = self.pool_file(modpack_root, pool.namespace, pool.name)
        write_json(pool_file, self.to_dict(pool))
        self.logger.info(f"Saved enchantment pool {pool.id} ({len(pool.entries)} entries)")
        return pool

    def delete_pool(self, modpack_root: Path, pool_id: str) -> bool:
        """Delete a pool file; returns False when there was nothing to delete."""
        pool = self.find_pool(modpack_root, pool_id)
        if pool is None:
            return False
        self.pool_file(modpack_root, pool.namespace, pool.name).unlink(missing_ok=True)
        self.logger.info(f"Deleted enchantment pool {pool.id}")
        return True

    @staticmethod
    def to_dict(pool: EnchantmentPool) -> Dict[str, Any]:
        return {
            "display_name": pool.display_name,
            "treasure_allowed": pool.treasure_allowed,
            "entries": [
                {
                    "enchantment": entry.enchantment_id,
                    "weight": json_number(entry.weight),
                    "min_level": entry.min_level,
                    "max_level": entry.max_level,
                }
                for entry in pool.entries
            ],
        }

    def _load_pool(self, pool_file: Path) -> Optional[EnchantmentPool]:
        """Parse a pool file; unreadable or invalid files yield None."""
        namespace = pool_file.parent.parent.name
        name = pool_file.stem
        try:
            raw = read_json(pool_file)
            if not isinstance(raw, dict):
                raise ValueError("pool definition must be a JSON object")
            entries = [
                EnchantmentPoolEntry(
                    str(item.get("enchantment", FALLBACK_ENCHANTMENT)),
                    float(item.get("weight", 1)),
                    int(item.get("min_level", 1)),
                    int(item.get("max_level", 1)),
                )
                for item in raw.get("entries") or []
            ]
            return EnchantmentPool(
                namespace,
                name,
                raw.get("display_name") or name,
                raw.get("treasure_allowed") is True,
                tuple(entries),
            )
        except (OSError, orjson.JSONDecodeError, ValueError, TypeError, AttributeError) as e:
            self.logger.warning(f"Skipping unreadable enchantment pool {pool_file}: {e}")
            return None
