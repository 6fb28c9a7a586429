"""Tests for expanding pool rows into loot entries and collapsing them back."""

from typing import Dict, Optional

import pytest

from loot_editor.errors import PoolUnresolved
from loot_editor.loot_tables.models import LootPoolEntryModel
from loot_editor.pools.codec import (
    collapse,
    distributed_weight,
    expand,
    parse_count_range,
    parse_entries,
    single_enchantment,
)
from loot_editor.pools.links import link_to_dict
from loot_editor.pools.models import EnchantmentPool, EnchantmentPoolEntry
from loot_editor.utils.json_io import dumps

BOOKS = EnchantmentPool(
    "loot_editor",
    "books",
    entries=(
        EnchantmentPoolEntry("minecraft:sharpness", 1),
        EnchantmentPoolEntry("minecraft:smite", 1, 1, 3),
        EnchantmentPoolEntry("minecraft:looting", 2, 2, 2),
    ),
)
EMPTY = EnchantmentPool("loot_editor", "empty")
PAIR = EnchantmentPool(
    "loot_editor",
    "pair",
    entries=(
        EnchantmentPoolEntry("minecraft:unbreaking", 1),
        EnchantmentPoolEntry("minecraft:mending", 1),
    ),
)


def resolver(*pools: EnchantmentPool):
    known: Dict[str, EnchantmentPool] = {pool.id: pool for pool in pools}

    def resolve(pool_id: str) -> Optional[EnchantmentPool]:
        return known.get(pool_id)

    return resolve


def plain(item: str, weight: float = 1, min_count: int = 1, max_count: int = 1) -> LootPoolEntryModel:
    return LootPoolEntryModel(item, weight, min_count=min_count, max_count=max_count)


def pooled(item: str, weight: float, pool: EnchantmentPool) -> LootPoolEntryModel:
    return LootPoolEntryModel(item, weight, enchantment_pool_id=pool.id)


class TestExpand:
    """Test row expansion."""

    def test_plain_rows(self) -> None:
        result = expand(None, [plain("minecraft:diamond", 5), plain("minecraft:coal", 1, 2, 4)], resolver())
        assert result.links == []
        assert result.document == {
            "type": "minecraft:generic",
            "pools": [
                {
                    "rolls": 1,
                    "entries": [
                        {"type": "minecraft:item", "name": "minecraft:diamond", "weight": 5},
                        {
                            "type": "minecraft:item",
                            "name": "minecraft:coal",
                            "weight": 1,
                            "functions": [
                                {
                                    "function": "minecraft:set_count",
                                    "count": {"type": "minecraft:uniform", "min": 2, "max": 4},
                                }
                            ],
                        },
                    ],
                }
            ],
        }

    def test_pool_row_distributes_weight(self) -> None:
        result = expand(None, [pooled("minecraft:book", 8, BOOKS)], resolver(BOOKS))
        entries = result.document["pools"][0]["entries"]

        assert [entry["weight"] for entry in entries] == [2, 2, 4]
        assert entries[0]["functions"] == [
            {
                "function": "minecraft:set_enchantments",
                "enchantments": {"minecraft:sharpness": 1},
                "add": False,
            }
        ]
        assert entries[1]["functions"][0]["enchantments"] == {
            "minecraft:smite": {"type": "minecraft:uniform", "min": 1, "max": 3}
        }

        (link,) = result.links
        assert link.order_index == 0
        assert link.pool_id == "loot_editor:books"
        assert link.weight == 8
        assert [e.enchantment_id for e in link.enchantments] == [
            "minecraft:sharpness",
            "minecraft:smite",
            "minecraft:looting",
        ]

    def test_weight_never_below_one(self) -> None:
        assert distributed_weight(1, 1, 100) == 1
        assert distributed_weight(10, 1, 0) == 10

    def test_weight_rounds_half_up(self) -> None:
        result = expand(None, [pooled("minecraft:book", 5, PAIR)], resolver(PAIR))
        assert [entry["weight"] for entry in result.document["pools"][0]["entries"]] == [3, 3]
        assert distributed_weight(1, 1, 2) == 1
        assert distributed_weight(7, 1, 2) == 4

    def test_treasure_flag(self) -> None:
        treasure = BOOKS.with_treasure_allowed(True)
        result = expand(None, [pooled("minecraft:book", 4, treasure)], resolver(treasure))
        functions = result.document["pools"][0]["entries"][0]["functions"]
        assert functions[-1]["treasure"] is True

    def test_count_function_precedes_enchantments(self) -> None:
        row = LootPoolEntryModel("minecraft:book", 4, min_count=2, max_count=2, enchantment_pool_id=BOOKS.id)
        entry = expand(None, [row], resolver(BOOKS)).document["pools"][0]["entries"][0]
        assert [f["function"] for f in entry["functions"]] == [
            "minecraft:set_count",
            "minecraft:set_enchantments",
        ]
        assert entry["functions"][0]["count"] == 2

    def test_unresolved_pool_emits_plain_entry(self) -> None:
        def missing(pool_id: str) -> EnchantmentPool:
            raise PoolUnresolved(pool_id)

        result = expand(None, [pooled("minecraft:book", 3, BOOKS)], missing)
        assert result.links == []
        assert result.document["pools"][0]["entries"] == [
            {"type": "minecraft:item", "name": "minecraft:book", "weight": 3}
        ]

    def test_template_fields_and_rolls_are_kept(self) -> None:
        template = {
            "type": "minecraft:chest",
            "random_sequence": "minecraft:chests/simple_dungeon",
            "pools": [
                {"rolls": {"type": "minecraft:uniform", "min": 1, "max": 3}, "entries": []},
                {"rolls": 2, "entries": []},
            ],
        }
        result = expand(template, [plain("minecraft:apple")], resolver())

        assert result.document["random_sequence"] == "minecraft:chests/simple_dungeon"
        assert len(result.document["pools"]) == 1
        assert result.document["pools"][0]["rolls"] == {"type": "minecraft:uniform", "min": 1, "max": 3}
        assert len(template["pools"]) == 2


class TestParsing:
    """Test physical entry parsing."""

    @pytest.mark.parametrize(
        "functions, expected",
        [
            (None, (1, 1)),
            ([{"function": "minecraft:set_count", "count": 3}], (3, 3)),
            ([{"function": "minecraft:set_count", "count": 0}], (1, 1)),
            ([{"function": "minecraft:set_count", "count": {"min": 2.4, "max": 5.6}}], (2, 6)),
            ([{"function": "minecraft:set_count", "count": {"type": "minecraft:binomial", "n": 3}}], (1, 1)),
            ([{"function": "minecraft:set_count", "count": {"min": 5, "max": 2}}], (5, 5)),
            ([{"function": "minecraft:set_count", "count": {"min": 2.5, "max": 3.5}}], (3, 4)),
        ],
    )
    def test_count_range(self, functions, expected) -> None:
        assert parse_count_range(functions) == expected

    def test_entries_across_pools(self) -> None:
        document = {
            "pools": [
                {"entries": [{"type": "minecraft:item", "name": "a", "weight": 2}]},
                {"entries": [{"type": "minecraft:tag", "id": "b"}, {"weight": 3}, "junk"]},
            ]
        }
        parsed = parse_entries(document)
        assert [p.position for p in parsed] == [0, 1, 2]
        assert [p.row.item_id for p in parsed] == ["a", "b", "unknown"]
        assert parsed[1].row.entry_type == "minecraft:tag"
        assert parsed[1].row.weight == 1.0
        assert parsed[2].row.entry_type == "minecraft:item"

    def test_single_enchantment_requires_one_of_each(self) -> None:
        one = {"functions": [{"function": "minecraft:set_enchantments", "enchantments": {"x:y": 2}}]}
        two = {
            "functions": [
                {"function": "minecraft:set_enchantments", "enchantments": {"x:y": 2, "x:z": 1}}
            ]
        }
        assert single_enchantment(one) == ("x:y", 2, 2)
        assert single_enchantment(two) is None
        assert single_enchantment({}) is None


class TestCollapse:
    """Test folding generated entries back into rows."""

    def test_round_trip(self) -> None:
        rows = [
            plain("minecraft:diamond", 5),
            pooled("minecraft:book", 8, BOOKS),
            plain("minecraft:coal", 1, 2, 4),
        ]
        first = expand(None, rows, resolver(BOOKS))

        collapsed = collapse(first.document, first.links)
        assert collapsed == rows

        second = expand(first.document, collapsed, resolver(BOOKS))
        assert second.document == first.document
        assert second.links == first.links

    def test_without_links_every_entry_is_a_row(self) -> None:
        result = expand(None, [pooled("minecraft:book", 8, BOOKS)], resolver(BOOKS))
        rows = collapse(result.document, [])
        assert [row.weight for row in rows] == [2, 2, 4]
        assert all(row.enchantment_pool_id is None for row in rows)

    def test_partial_match_degrades_to_individual_rows(self) -> None:
        rows = [plain("minecraft:diamond"), pooled("minecraft:book", 8, BOOKS)]
        result = expand(None, rows, resolver(BOOKS))
        entries = result.document["pools"][0]["entries"]
        del entries[2]

        collapsed = collapse(result.document, result.links)
        assert [row.item_id for row in collapsed] == ["minecraft:diamond", "minecraft:book", "minecraft:book"]
        assert all(row.enchantment_pool_id is None for row in collapsed)

    def test_changed_count_breaks_the_link(self) -> None:
        result = expand(None, [pooled("minecraft:book", 8, BOOKS)], resolver(BOOKS))
        for entry in result.document["pools"][0]["entries"]:
            entry["functions"].insert(0, {"function": "minecraft:set_count", "count": 2})

        collapsed = collapse(result.document, result.links)
        assert len(collapsed) == 3

    def test_zero_option_pool_keeps_its_row(self) -> None:
        rows = [plain("minecraft:apple"), pooled("minecraft:book", 4, EMPTY), plain("minecraft:bread")]
        result = expand(None, rows, resolver(EMPTY))

        assert len(result.document["pools"][0]["entries"]) == 2
        assert result.links[0].enchantments == ()
        assert collapse(result.document, result.links) == rows

    def test_pool_row_first(self) -> None:
        rows = [pooled("minecraft:book", 8, BOOKS), plain("minecraft:apple")]
        result = expand(None, rows, resolver(BOOKS))
        assert collapse(result.document, result.links) == rows

    def test_link_order_beyond_entries_is_appended(self) -> None:
        rows = [plain("minecraft:apple"), pooled("minecraft:book", 4, EMPTY)]
        result = expand(None, rows, resolver(EMPTY))
        assert collapse(result.document, result.links) == rows

    def test_several_pool_rows_serialize_identically(self) -> None:
        rows = [
            pooled("minecraft:book", 8, BOOKS),
            plain("minecraft:diamond", 5),
            pooled("minecraft:book", 8, BOOKS),
            pooled("minecraft:enchanted_book", 5, PAIR),
            plain("minecraft:coal", 1, 2, 4),
        ]
        first = expand(None, rows, resolver(BOOKS, PAIR))
        assert len(first.links) == 3

        collapsed = collapse(first.document, first.links)
        assert collapsed == rows

        second = expand(first.document, collapsed, resolver(BOOKS, PAIR))
        assert dumps(second.document) == dumps(first.document)
        assert [dumps(link_to_dict(link)) for link in second.links] == [
            dumps(link_to_dict(link)) for link in first.links
        ]
