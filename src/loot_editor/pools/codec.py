"""
Conversion between logical loot rows and physical loot table JSON.

`expand` turns rows into a single-pool document. A row that references an
enchantment pool becomes one physical entry per pool option, and an
`EnchantmentPoolLink` records the group. `collapse` uses those links to
fold the generated entries back into one row.

Round trip: for rows whose pools all resolve, ``expand -> collapse ->
expand`` produces the same document and links as the first ``expand``.
Matching relies on the physical entry order being unchanged between
saves.
"""

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from ..errors import PoolUnresolved
from ..loot_tables.models import (
    DEFAULT_ENTRY_TYPE,
    DEFAULT_TABLE_TYPE,
    LootDocument,
    LootEntryNode,
    LootPoolEntryModel,
)
from ..utils.json_io import json_number
from .models import EnchantmentPool, EnchantmentPoolEntry, EnchantmentPoolLink, LinkedEnchantment

logger = logging.getLogger(__name__)

SET_COUNT = "minecraft:set_count"
SET_ENCHANTMENTS = "minecraft:set_enchantments"
UNIFORM = "minecraft:uniform"
UNKNOWN_ITEM = "unknown"

PoolResolver = Callable[[str], Optional[EnchantmentPool]]
"""Looks up a pool by id; returns None (or raises PoolUnresolved) when missing."""


@dataclass
class ExpansionResult:
    """Physical document plus the links describing its pool groups."""

    document: LootDocument
    links: List[EnchantmentPoolLink] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedEntry:
    """A physical entry with its position and derived logical fields."""

    position: int
    row: LootPoolEntryModel
    node: LootEntryNode


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _range(min_value: int, max_value: int) -> Any:
    if min_value == max_value:
        return min_value
    return {"type": UNIFORM, "min": min_value, "max": max_value}


# === EXPANSION ===


def _set_count_function(row: LootPoolEntryModel) -> Dict[str, Any]:
    return {"function": SET_COUNT, "count": _range(row.min_count, row.max_count)}


def _set_enchantments_function(option: EnchantmentPoolEntry, treasure_allowed: bool) -> Dict[str, Any]:
    function: Dict[str, Any] = {
        "function": SET_ENCHANTMENTS,
        "enchantments": {option.enchantment_id: _range(option.min_level, option.max_level)},
        "add": False,
    }
    if treasure_allowed:
        function["treasure"] = True
    return function


def build_entry(row: LootPoolEntryModel) -> LootEntryNode:
    """Plain physical entry for a row (count function only when not 1..1)."""
    node: LootEntryNode = {
        "type": row.entry_type,
        "name": row.item_id,
        "weight": json_number(row.weight),
    }
    if row.min_count != 1 or row.max_count != 1:
        node["functions"] = [_set_count_function(row)]
    return node


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def distributed_weight(row_weight: float, option_weight: float, total_weight: float) -> int:
    """Share of ``row_weight`` given to one option (never below 1)."""
    if total_weight <= 0:
        total_weight = 1
    return max(1, round_half_up(row_weight * option_weight / total_weight))


def _resolve(resolve_pool: PoolResolver, pool_id: str) -> Optional[EnchantmentPool]:
    try:
        pool = resolve_pool(pool_id)
    except PoolUnresolved as e:
        logger.debug(f"Pool {pool_id} unresolved: {e}")
        return None
    if pool is None:
        logger.debug(f"Pool {pool_id} unresolved, emitting a plain entry")
    return pool


def _base_document(template: Optional[LootDocument]) -> Tuple[LootDocument, Any]:
    root: LootDocument = copy.deepcopy(template) if isinstance(template, dict) else {}
    if not isinstance(root.get("type"), str):
        root["type"] = DEFAULT_TABLE_TYPE

    rolls: Any = 1
    pools = root.get("pools")
    if isinstance(pools, list) and pools and isinstance(pools[0], dict) and "rolls" in pools[0]:
        rolls = copy.deepcopy(pools[0]["rolls"])
    return root, rolls


def expand(
    template: Optional[LootDocument],
    rows: Sequence[LootPoolEntryModel],
    resolve_pool: PoolResolver,
) -> ExpansionResult:
    """Build a single-pool document from ``rows``.

    Args:
        template: Document whose top-level fields are kept (deep copied)
        rows: Logical rows in editor order
        resolve_pool: Pool lookup used for rows with ``enchantment_pool_id``

    Returns:
        The new document and one link per expanded pool row
    """
    root, rolls = _base_document(template)
    entries: List[LootEntryNode] = []
    links: List[EnchantmentPoolLink] = []

    for index, row in enumerate(rows):
        pool = _resolve(resolve_pool, row.enchantment_pool_id) if row.enchantment_pool_id else None
        if pool is None:
            entries.append(build_entry(row))
            continue

        total_weight = pool.total_weight
        linked: List[LinkedEnchantment] = []
        for option in pool.entries:
            node = build_entry(row)
            node["weight"] = distributed_weight(row.weight, option.weight, total_weight)
            node.setdefault("functions", []).append(
                _set_enchantments_function(option, pool.treasure_allowed)
            )
            entries.append(node)
            linked.append(
                LinkedEnchantment(option.enchantment_id, option.weight, option.min_level, option.max_level)
            )

        links.append(
            EnchantmentPoolLink(
                order_index=index,
                pool_id=pool.id,
                item_id=row.item_id,
                entry_type=row.entry_type,
                weight=row.weight,
                min_count=row.min_count,
                max_count=row.max_count,
                enchantments=tuple(linked),
            )
        )

    root["pools"] = [{"rolls": rolls, "entries": entries}]
    return ExpansionResult(root, links)


# === PARSING ===


def parse_count_range(functions: Any) -> Tuple[int, int]:
    """Count range from the first usable ``set_count`` function (1..1 otherwise)."""
    if not isinstance(functions, list):
        return 1, 1
    for function in functions:
        if not isinstance(function, dict) or function.get("function") != SET_COUNT:
            continue
        count = function.get("count")
        if _is_number(count):
            value = max(1, int(count))
            return value, value
        if isinstance(count, dict) and _is_number(count.get("min")) and _is_number(count.get("max")):
            min_count = max(1, round_half_up(count["min"]))
            return min_count, max(min_count, round_half_up(count["max"]))
    return 1, 1


def _item_id(node: LootEntryNode) -> str:
    for key in ("name", "id"):
        value = node.get(key)
        if isinstance(value, str):
            return value
    return UNKNOWN_ITEM


def parse_entry(position: int, node: LootEntryNode) -> ParsedEntry:
    entry_type = node.get("type")
    weight = node.get("weight")
    min_count, max_count = parse_count_range(node.get("functions"))
    row = LootPoolEntryModel(
        item_id=_item_id(node),
        weight=float(weight) if _is_number(weight) else 1.0,
        entry_type=entry_type if isinstance(entry_type, str) else DEFAULT_ENTRY_TYPE,
        min_count=min_count,
        max_count=max_count,
    )
    return ParsedEntry(position, row, node)


def parse_entries(document: LootDocument) -> List[ParsedEntry]:
    """Every physical entry of every pool, numbered in document order."""
    parsed: List[ParsedEntry] = []
    pools = document.get("pools") if isinstance(document, dict) else None
    if not isinstance(pools, list):
        return parsed
    for pool in pools:
        entries = pool.get("entries") if isinstance(pool, dict) else None
        if not isinstance(entries, list):
            continue
        for node in entries:
            if not isinstance(node, dict):
                logger.debug(f"Skipping non-object loot entry: {node!r}")
                continue
            parsed.append(parse_entry(len(parsed), node))
    return parsed


# === COLLAPSE ===


def _level_range(value: Any) -> Optional[Tuple[int, int]]:
    if _is_number(value):
        return int(value), int(value)
    if isinstance(value, dict):
        min_level = value.get("min", 1)
        max_level = value.get("max", min_level)
        if _is_number(min_level) and _is_number(max_level):
            return int(min_level), int(max_level)
    return None


def single_enchantment(node: LootEntryNode) -> Optional[Tuple[str, int, int]]:
    """``(id, min, max)`` when the entry has exactly one one-enchantment ``set_enchantments``."""
    functions = node.get("functions")
    if not isinstance(functions, list):
        return None
    matches = [
        function
        for function in functions
        if isinstance(function, dict) and function.get("function") == SET_ENCHANTMENTS
    ]
    if len(matches) != 1:
        return None
    enchantments = matches[0].get("enchantments")
    if not isinstance(enchantments, dict) or len(enchantments) != 1:
        return None
    (enchantment_id, value), = enchantments.items()
    levels = _level_range(value)
    if levels is None:
        return None
    return enchantment_id, levels[0], levels[1]


def _matches(parsed: ParsedEntry, link: EnchantmentPoolLink, enchantment: LinkedEnchantment) -> bool:
    row = parsed.row
    if (
        row.item_id != link.item_id
        or row.entry_type != link.entry_type
        or row.min_count != link.min_count
        or row.max_count != link.max_count
    ):
        return False
    return single_enchantment(parsed.node) == (
        enchantment.enchantment_id,
        enchantment.min_level,
        enchantment.max_level,
    )


def _claim(
    parsed_entries: List[ParsedEntry], link: EnchantmentPoolLink, claimed: Set[int]
) -> Optional[Set[int]]:
    """Positions claimed by ``link``, or None if any tuple is unmatched."""
    taken: Set[int] = set()
    for enchantment in link.enchantments:
        match = next(
            (
                parsed
                for parsed in parsed_entries
                if parsed.position not in claimed
                and parsed.position not in taken
                and _matches(parsed, link, enchantment)
            ),
            None,
        )
        if match is None:
            return None
        taken.add(match.position)
    return taken


def collapse(document: LootDocument, links: Sequence[EnchantmentPoolLink]) -> List[LootPoolEntryModel]:
    """Rebuild the logical rows of ``document`` using its stored links.

    Links that no longer match the document in full are ignored and their
    entries stay visible as individual rows.
    """
    parsed_entries = parse_entries(document)
    claimed: Set[int] = set()
    aggregated: List[Tuple[int, LootPoolEntryModel]] = []

    for link in links:
        taken = _claim(parsed_entries, link, claimed)
        if taken is None:
            logger.debug(f"Pool link for {link.pool_id} at row {link.order_index} no longer matches")
            continue
        claimed |= taken
        aggregated.append(
            (
                link.order_index,
                LootPoolEntryModel(
                    item_id=link.item_id,
                    weight=link.weight,
                    entry_type=link.entry_type,
                    min_count=link.min_count,
                    max_count=link.max_count,
                    enchantment_pool_id=link.pool_id,
                ),
            )
        )

    # Stable sort keeps link order for equal indices
    aggregated.sort(key=lambda item: item[0])
    pending = list(aggregated)
    rows: List[LootPoolEntryModel] = []
    for parsed in parsed_entries:
        while pending and pending[0][0] <= len(rows):
            rows.append(pending.pop(0)[1])
        if parsed.position not in claimed:
            rows.append(parsed.row)
    rows.extend(row for _, row in pending)
    return rows
