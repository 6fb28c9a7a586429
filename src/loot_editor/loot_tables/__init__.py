"""
Loot table identities, descriptors and the views used to read them.

The scanner, reconciler and service live in their own modules and are
imported from there.
"""

from .models import (
    LootDocument,
    LootId,
    LootPoolEntryModel,
    LootTableDescriptor,
    LootTableTemplate,
    SourceType,
)
from .readers import ArchiveView, DirectoryView, ZipView, open_view

__all__ = [
    "ArchiveView",
    "DirectoryView",
    "LootDocument",
    "LootId",
    "LootPoolEntryModel",
    "LootTableDescriptor",
    "LootTableTemplate",
    "SourceType",
    "ZipView",
    "open_view",
]
