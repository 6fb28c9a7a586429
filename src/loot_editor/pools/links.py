"""
Persistence of pool links, stored beside the modpack's KubeJS data at
``kubejs/data/loot_editor/pool_links/<namespace>/<path>.json``.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

import orjson

from ..loot_tables.models import DEFAULT_ENTRY_TYPE, LootId
from ..utils.json_io import json_number, read_json, write_json
from .models import DEFAULT_POOL_NAMESPACE, EnchantmentPoolLink, LinkedEnchantment

LINKS_DIRECTORY = "pool_links"


def link_to_dict(link: EnchantmentPoolLink) -> Dict[str, Any]:
    return {
        "order": link.order_index,
        "pool": link.pool_id,
        "item": link.item_id,
        "entry_type": link.entry_type,
        "weight": json_number(link.weight),
        "min_count": link.min_count,
        "max_count": link.max_count,
        "enchantments": [
            {
                "id": enchantment.enchantment_id,
                "weight": json_number(enchantment.weight),
                "min_level": enchantment.min_level,
                "max_level": enchantment.max_level,
            }
            for enchantment in link.enchantments
        ],
    }


def link_from_dict(node: Dict[str, Any]) -> EnchantmentPoolLink:
    enchantments = tuple(
        LinkedEnchantment(
            str(item["id"]),
            float(item.get("weight", 1.0)),
            int(item.get("min_level", 1)),
            int(item.get("max_level", 1)),
        )
        for item in node.get("enchantments") or []
    )
    return EnchantmentPoolLink(
        order_index=int(node.get("order", 0)),
        pool_id=str(node["pool"]),
        item_id=str(node["item"]),
        entry_type=str(node.get("entry_type", DEFAULT_ENTRY_TYPE)),
        weight=float(node.get("weight", 1.0)),
        min_count=int(node.get("min_count", 1)),
        max_count=int(node.get("max_count", 1)),
        enchantments=enchantments,
    )


class EnchantmentPoolLinkService:
    """Loads and saves the pool links of a table."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def link_file(self, modpack_root: Path, table: LootId) -> Path:
        *parents, name = table.path.split("/")
        root = Path(modpack_root) / "kubejs" / "data" / DEFAULT_POOL_NAMESPACE / LINKS_DIRECTORY
        return root.joinpath(table.namespace, *parents, f"{name}.json")

    def load_links(self, modpack_root: Path, table: LootId) -> List[EnchantmentPoolLink]:
        """Stored links for ``table``; missing or unreadable files yield none."""
        link_file = self.link_file(modpack_root, table)
        if not link_file.is_file():
            return []
        try:
            data = read_json(link_file)
            return [link_from_dict(node) for node in data.get("links") or []]
        except (OSError, orjson.JSONDecodeError, KeyError, ValueError, TypeError, AttributeError) as e:
            self.logger.warning(f"Ignoring unreadable pool links {link_file}: {e}")
            return []

    def save_links(
        self, modpack_root: Path, table: LootId, links: Sequence[EnchantmentPoolLink]
    ) -> None:
        """Write the links for ``table``, or delete the file when there are none."""
        link_file = self.link_file(modpack_root, table)
        if not links:
            if link_file.exists():
                link_file.unlink()
                self.logger.debug(f"Removed pool links for {table}")
            return
        write_json(
            link_file,
            {"table": table.as_string(), "links": [link_to_dict(link) for link in links]},
        )
        self.logger.debug(f"Saved {len(links)} pool link(s) for {table}")
