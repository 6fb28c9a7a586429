"""Tests for enchantment pool storage, pool links and the enchantment registry."""

from pathlib import Path

import orjson
import pytest

from loot_editor.errors import PoolUnresolved
from loot_editor.loot_tables.models import LootId
from loot_editor.pools import (
    EnchantmentDataService,
    EnchantmentPool,
    EnchantmentPoolEntry,
    EnchantmentPoolLink,
    EnchantmentPoolLinkService,
    EnchantmentPoolService,
    LinkedEnchantment,
    sanitize_name,
)
from loot_editor.pools.enchantments import VANILLA_ENCHANTMENTS, describe

TABLE = LootId("minecraft", "chests/simple_dungeon")


class TestPoolModels:
    """Test pool normalization rules."""

    def test_name_and_namespace_are_normalized(self) -> None:
        pool = EnchantmentPool(None, " Sharp Tools ")
        assert pool.id == "loot_editor:sharp_tools"
        assert pool.display_name == "sharp_tools"

    def test_invalid_names(self) -> None:
        with pytest.raises(ValueError):
            EnchantmentPool("ns", "a/b")
        with pytest.raises(ValueError):
            EnchantmentPool("ns", "  ")

    def test_entry_levels_are_clamped(self) -> None:
        entry = EnchantmentPoolEntry("minecraft:sharpness", 2, 0, -1)
        assert (entry.min_level, entry.max_level) == (1, 1)
        assert entry.with_levels(3, 2).max_level == 3

    def test_entry_weight_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            EnchantmentPoolEntry("minecraft:sharpness", 0)

    def test_sanitize_name(self) -> None:
        assert sanitize_name("  My Pool ") == "my_pool"
        assert sanitize_name(None) == "pool"


class TestEnchantmentPoolService:
    """Test pool files under kubejs/data."""

    def test_save_find_list_delete(self, modpack: Path) -> None:
        service = EnchantmentPoolService()
        pool = EnchantmentPool(
            "loot_editor",
            "tools",
            "Tool Enchants",
            True,
            (EnchantmentPoolEntry("minecraft:efficiency", 3, 1, 5),),
        )
        service.save_pool(modpack, pool)

        pool_file = modpack / "kubejs" / "data" / "loot_editor" / "enchantment_pools" / "tools.json"
        assert orjson.loads(pool_file.read_bytes()) == {
            "display_name": "Tool Enchants",
            "treasure_allowed": True,
            "entries": [
                {"enchantment": "minecraft:efficiency", "weight": 3, "min_level": 1, "max_level": 5}
            ],
        }
        assert service.find_pool(modpack, "loot_editor:tools") == pool
        assert service.find_pool(modpack, "tools") == pool
        assert service.list_pools(modpack) == [pool]

        assert service.delete_pool(modpack, "loot_editor:tools")
        assert not pool_file.exists()
        assert not service.delete_pool(modpack, "loot_editor:tools")

    def test_list_is_sorted_and_skips_invalid(self, modpack: Path) -> None:
        service = EnchantmentPoolService()
        service.save_pool(modpack, EnchantmentPool("zeta", "b"))
        service.save_pool(modpack, EnchantmentPool("alpha", "a"))
        broken = service.pool_file(modpack, "alpha", "broken")
        broken.write_text("[1, 2")
        (modpack / "kubejs" / "data" / "alpha" / "loot_table").mkdir()
        (modpack / "kubejs" / "data" / "alpha" / "loot_table" / "t.json").write_text("{}")

        assert [pool.id for pool in service.list_pools(modpack)] == ["alpha:a", "zeta:b"]

    def test_require_pool(self, modpack: Path) -> None:
        with pytest.raises(PoolUnresolved):
            EnchantmentPoolService().require_pool(modpack, "loot_editor:missing")


class TestEnchantmentPoolLinkService:
    """Test pool link persistence."""

    def test_round_trip_and_format(self, modpack: Path) -> None:
        service = EnchantmentPoolLinkService()
        link = EnchantmentPoolLink(
            order_index=2,
            pool_id="loot_editor:books",
            item_id="minecraft:book",
            entry_type="minecraft:item",
            weight=8.0,
            min_count=1,
            max_count=1,
            enchantments=(LinkedEnchantment("minecraft:smite", 1.0, 1, 3),),
        )
        service.save_links(modpack, TABLE, [link])

        link_file = (
            modpack / "kubejs" / "data" / "loot_editor" / "pool_links" / "minecraft" / "chests" / "simple_dungeon.json"
        )
        assert orjson.loads(link_file.read_bytes()) == {
            "table": "minecraft:chests/simple_dungeon",
            "links": [
                {
                    "order": 2,
                    "pool": "loot_editor:books",
                    "item": "minecraft:book",
                    "entry_type": "minecraft:item",
                    "weight": 8,
                    "min_count": 1,
                    "max_count": 1,
                    "enchantments": [
                        {"id": "minecraft:smite", "weight": 1, "min_level": 1, "max_level": 3}
                    ],
                }
            ],
        }
        assert service.load_links(modpack, TABLE) == [link]

    def test_empty_links_delete_the_file(self, modpack: Path) -> None:
        service = EnchantmentPoolLinkService()
        link = EnchantmentPoolLink(0, "loot_editor:x", "minecraft:book", "minecraft:item", 1.0, 1, 1)
        service.save_links(modpack, TABLE, [link])
        service.save_links(modpack, TABLE, [])
        assert not service.link_file(modpack, TABLE).exists()
        assert service.load_links(modpack, TABLE) == []

    def test_unreadable_links_are_ignored(self, modpack: Path) -> None:
        service = EnchantmentPoolLinkService()
        link_file = service.link_file(modpack, TABLE)
        link_file.parent.mkdir(parents=True)
        link_file.write_text('{"links": [{"order": 0}]}')
        assert service.load_links(modpack, TABLE) == []


class TestEnchantmentDataService:
    """Test the enchantment registry."""

    def test_vanilla_fallback(self, modpack: Path) -> None:
        descriptors = EnchantmentDataService().load(modpack)
        ids = [d.id for d in descriptors]
        assert len(ids) == len(set(ids)) == len(VANILLA_ENCHANTMENTS)
        assert "minecraft:fortune" in ids

    def test_dump_is_parsed_deduplicated_and_sorted(self, modpack: Path) -> None:
        dump = modpack / "ct_dumps" / "enchantment.txt"
        dump.parent.mkdir()
        dump.write_text(
            "Enchantments:\n"
            "<enchantment:mymod:frost_touch>\n"
            "<enchantment:minecraft:sharpness>\n"
            "<enchantment:MINECRAFT:Sharpness>\n"
            "garbage\n",
            encoding="utf-8",
        )
        descriptors = EnchantmentDataService().load(modpack)
        assert [d.id for d in descriptors] == ["minecraft:sharpness", "mymod:frost_touch"]
        assert descriptors[1].display_name == "Frost Touch"

    def test_describe_defaults_namespace(self) -> None:
        descriptor = describe("fire_aspect")
        assert descriptor.id == "minecraft:fire_aspect"
        assert descriptor.display_name == "Fire Aspect"
