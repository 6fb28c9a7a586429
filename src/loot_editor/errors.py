"""
Error taxonomy for the loot table engine.

Discovery absorbs per-source failures; user-initiated writes propagate
the first error they hit.
"""


class LootEditorError(Exception):
    """Base class for all loot editor errors."""
    pass


class InvalidRoot(LootEditorError):
    """Raised when the modpack root is missing or not a directory."""
    pass


class SourceUnreadable(LootEditorError):
    """Raised when a single archive, file or descriptor cannot be read."""
    pass


class IdentityRequired(LootEditorError):
    """Raised when a namespace or table path is blank."""
    pass


class ManifestCorrupt(LootEditorError):
    """Raised when the override manifest cannot be parsed."""
    pass


class PoolUnresolved(LootEditorError):
    """Raised when a row references an enchantment pool that does not exist."""
    pass


class TargetExists(LootEditorError):
    """Raised when create/fork would overwrite an existing file."""
    pass


class ArchiveEntryMissing(LootEditorError):
    """Raised when an archive member requested for loading no longer exists."""
    pass
