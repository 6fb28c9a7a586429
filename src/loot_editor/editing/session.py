"""
Editing session for a single loot table.

States::

    UNLOADED -> LOADED_CLEAN <-> LOADED_DIRTY
    LOADED_DIRTY -> SAVED -> LOADED_CLEAN (against the written descriptor)

Rows are the logical view: pool-generated entries are collapsed on load
and expanded again on save.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

from ..loot_tables.models import LootDocument, LootPoolEntryModel, LootTableDescriptor
from ..loot_tables.service import LootTableService
from ..pools.codec import ExpansionResult, collapse, expand
from ..pools.links import EnchantmentPoolLinkService
from ..pools.models import EnchantmentPool
from ..pools.service import EnchantmentPoolService


class SessionState(Enum):
    """Lifecycle of a table editing session."""

    UNLOADED = "unloaded"
    LOADED_CLEAN = "loaded_clean"
    LOADED_DIRTY = "loaded_dirty"
    SAVED = "saved"


class TableSession:
    """Holds the logical rows of one table between load and save."""

    def __init__(
        self,
        modpack_root: Path,
        descriptor: LootTableDescriptor,
        service: Optional[LootTableService] = None,
        pools: Optional[EnchantmentPoolService] = None,
        links: Optional[EnchantmentPoolLinkService] = None,
    ):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.modpack_root = Path(modpack_root)
        self.descriptor = descriptor
        self.service = service or LootTableService()
        self.pools = pools or EnchantmentPoolService()
        self.links = links or EnchantmentPoolLinkService()

        self._state = SessionState.UNLOADED
        self._document: Optional[LootDocument] = None
        self._rows: List[LootPoolEntryModel] = []
        self._snapshot: List[LootPoolEntryModel] = []

    # === STATE ===

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_dirty(self) -> bool:
        return self._state == SessionState.LOADED_DIRTY

    @property
    def document(self) -> Optional[LootDocument]:
        """Document as last loaded or saved."""
        return self._document

    @property
    def rows(self) -> List[LootPoolEntryModel]:
        return list(self._rows)

    def _set_state(self, state: SessionState) -> None:
        if state != self._state:
            self.logger.debug(
                f"{self.descriptor.qualified_name}: {self._state.value} -> {state.value}"
            )
        self._state = state

    def _require_loaded(self) -> None:
        if self._state == SessionState.UNLOADED:
            raise RuntimeError(f"Table {self.descriptor.qualified_name} is not loaded")

    def _resolve_pool(self, pool_id: str) -> EnchantmentPool:
        return self.pools.require_pool(self.modpack_root, pool_id)

    # === LIFECYCLE ===

    def load(self) -> List[LootPoolEntryModel]:
        """Read the table and collapse pool-generated entries into rows."""
        document = self.service.load(self.descriptor)
        links = self.links.load_links(self.modpack_root, self.descriptor.loot_id)
        self._document = document
        self._rows = collapse(document, links)
        self._snapshot = list(self._rows)
        self._set_state(SessionState.LOADED_CLEAN)
        self.logger.info(
            f"Loaded {self.descriptor.qualified_name} ({len(self._rows)} rows, {len(links)} pool links)"
        )
        return self.rows

    def preview(self) -> ExpansionResult:
        """Document and links the current rows would save as (nothing is written)."""
        self._require_loaded()
        return expand(self._document, self._rows, self._resolve_pool)

    def save(self) -> LootTableDescriptor:
        """Expand the rows, persist links and document, and continue on the result.

        Returns:
            The descriptor of the written table
        """
        self._require_loaded()
        result = expand(self._document, self._rows, self._resolve_pool)
        self.links.save_links(self.modpack_root, self.descriptor.loot_id, result.links)
        saved = self.service.save_to_preferred_location(
            self.modpack_root, self.descriptor, result.document
        )
        self._set_state(SessionState.SAVED)
        self.logger.info(f"Saved {saved.qualified_name} to {saved.container_path}")

        self.descriptor = saved
        self._document = result.document
        self._snapshot = list(self._rows)
        self._set_state(SessionState.LOADED_CLEAN)
        return saved

    def revert(self) -> List[LootPoolEntryModel]:
        """Drop unsaved edits."""
        self._require_loaded()
        self._rows = list(self._snapshot)
        self._set_state(SessionState.LOADED_CLEAN)
        return self.rows

    # === ROW EDITS ===

    def add_row(self, row: LootPoolEntryModel, index: Optional[int] = None) -> None:
        self._require_loaded()
        if index is None:
            self._rows.append(row)
        else:
            self._rows.insert(index, row)
        self._set_state(SessionState.LOADED_DIRTY)

    def replace_row(self, index: int, row: LootPoolEntryModel) -> None:
        self._require_loaded()
        self._rows[index] = row
        self._set_state(SessionState.LOADED_DIRTY)

    def remove_row(self, index: int) -> LootPoolEntryModel:
        self._require_loaded()
        row = self._rows.pop(index)
        self._set_state(SessionState.LOADED_DIRTY)
        return row

    def set_rows(self, rows: Sequence[LootPoolEntryModel]) -> None:
        self._require_loaded()
        self._rows = list(rows)
        self._set_state(SessionState.LOADED_DIRTY)
