"""
Registry of enchantments available in a modpack.

Uses a CraftTweaker dump (``ct_dumps/enchantment.txt``) when the pack has
one, otherwise the vanilla list.
"""

import logging
from pathlib import Path
from typing import List

from .models import EnchantmentDescriptor

DUMP_FILE = Path("ct_dumps") / "enchantment.txt"
DUMP_PREFIX = "<enchantment:"
DUMP_SUFFIX = ">"

VANILLA_ENCHANTMENTS = (
    "minecraft:aqua_affinity",
    "minecraft:bane_of_arthropods",
    "minecraft:binding_curse",
    "minecraft:blast_protection",
    "minecraft:channeling",
    "minecraft:depth_strider",
    "minecraft:efficiency",
    "minecraft:feather_falling",
    "minecraft:fire_aspect",
    "minecraft:fire_protection",
    "minecraft:flame",
    "minecraft:fortune",
    "minecraft:frost_walker",
    "minecraft:impaling",
    "minecraft:infinity",
    "minecraft:knockback",
    "minecraft:looting",
    "minecraft:loyalty",
    "minecraft:luck_of_the_sea",
    "minecraft:lure",
    "minecraft:mending",
    "minecraft:multishot",
    "minecraft:piercing",
    "minecraft:power",
    "minecraft:projectile_protection",
    "minecraft:protection",
    "minecraft:punch",
    "minecraft:quick_charge",
    "minecraft:respiration",
    "minecraft:riptide",
    "minecraft:sharpness",
    "minecraft:smite",
    "minecraft:soul_speed",
    "minecraft:swift_sneak",
    "minecraft:sweeping",
    "minecraft:thorns",
    "minecraft:unbreaking",
)


def describe(enchantment_id: str) -> EnchantmentDescriptor:
    """Build a descriptor; ids without a namespace belong to ``minecraft``."""
    normalized = enchantment_id.strip().lower()
    namespace, separator, name = normalized.partition(":")
    if not separator:
        namespace, name = "minecraft", normalized
    display_name = " ".join(part.capitalize() for part in name.split("_") if part)
    return EnchantmentDescriptor(f"{namespace}:{name}", namespace, display_name)


class EnchantmentDataService:
    """Loads the enchantment registry of a modpack."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @staticmethod
    def vanilla() -> List[EnchantmentDescriptor]:
        return [describe(enchantment_id) for enchantment_id in VANILLA_ENCHANTMENTS]

    def load(self, modpack_root: Path) -> List[EnchantmentDescriptor]:
        dump = Path(modpack_root) / DUMP_FILE
        if not dump.is_file():
            return self.vanilla()
        try:
            lines = dump.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Unable to read enchantment dump {dump}: {e}")
            return self.vanilla()

        descriptors: dict[str, EnchantmentDescriptor] = {}
        for line in lines:
            line = line.strip()
            if not (line.startswith(DUMP_PREFIX) and line.endswith(DUMP_SUFFIX)):
                continue
            raw_id = line[len(DUMP_PREFIX):-len(DUMP_SUFFIX)]
            if not raw_id.strip():
                continue
            descriptor = describe(raw_id)
            descriptors.setdefault(descriptor.id, descriptor)

        if not descriptors:
            return self.vanilla()
        self.logger.debug(f"Loaded {len(descriptors)} enchantments from {dump}")
        return sorted(descriptors.values(), key=lambda d: d.id.lower())
