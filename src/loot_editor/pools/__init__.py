"""
Enchantment pools: reusable weighted enchantment sets, the links that
tie generated loot entries back to them, and the expand/collapse codec.
"""

from .codec import ExpansionResult, collapse, expand, parse_count_range, parse_entries
from .enchantments import EnchantmentDataService
from .links import EnchantmentPoolLinkService
from .models import (
    EnchantmentDescriptor,
    EnchantmentPool,
    EnchantmentPoolEntry,
    EnchantmentPoolLink,
    LinkedEnchantment,
)
from .service import EnchantmentPoolService, sanitize_name

__all__ = [
    "EnchantmentDataService",
    "EnchantmentDescriptor",
    "EnchantmentPool",
    "EnchantmentPoolEntry",
    "EnchantmentPoolLink",
    "EnchantmentPoolLinkService",
    "EnchantmentPoolService",
    "ExpansionResult",
    "LinkedEnchantment",
    "collapse",
    "expand",
    "parse_count_range",
    "parse_entries",
    "sanitize_name",
]
