"""
Loot Editor: discovery, reconciliation and editing of Minecraft loot tables

Scans a modpack instance (datapacks, world saves, KubeJS, mod jars and the
vanilla jar), persists edits in place or through an override datapack, and
keeps enchantment-pool entries editable as single rows.
"""

__version__ = "0.1.0"
__author__ = "Loot Editor Contributors"

# Core service imports
from .loot_tables.scanner import ModpackScanner
from .loot_tables.reconciler import DescriptorReconciler
from .loot_tables.service import LootTableService
from .editing import SessionState, TableSession
from .pools import EnchantmentPoolService, EnchantmentPoolLinkService
from .overrides import DataPackService, OverrideStore
from .utils.logging_config import setup_logging

# Main data models
from .loot_tables.models import (
    LootId, LootTableDescriptor, LootPoolEntryModel, LootTableTemplate, SourceType
)
from .pools.models import EnchantmentPool, EnchantmentPoolEntry, EnchantmentPoolLink

__all__ = [
    # Services
    'ModpackScanner',
    'DescriptorReconciler',
    'LootTableService',
    'TableSession',
    'SessionState',
    'EnchantmentPoolService',
    'EnchantmentPoolLinkService',
    'DataPackService',
    'OverrideStore',

    # Logging
    'setup_logging',

    # Data models
    'LootId',
    'LootTableDescriptor',
    'LootPoolEntryModel',
    'LootTableTemplate',
    'SourceType',
    'EnchantmentPool',
    'EnchantmentPoolEntry',
    'EnchantmentPoolLink',
]
