"""
Override manifest: which loot tables are replaced, and by what.

The manifest is a value; `OverrideManifest.upsert` returns a new one.
`OverrideManifestService` reads and writes it as
``{"overrides": [{"target": ..., "replacement": ...}]}``.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Tuple

import orjson

from ..errors import ManifestCorrupt
from ..loot_tables.models import LootId
from ..utils.json_io import read_json, write_json
from .paths import OverridePaths


@dataclass(frozen=True)
class OverrideEntry:
    """One target -> replacement mapping (ids kept in string form)."""

    target: str
    replacement: str

    @property
    def target_id(self) -> LootId:
        return LootId.parse(self.target)

    @property
    def replacement_id(self) -> LootId:
        return LootId.parse(self.replacement)


@dataclass(frozen=True)
class OverrideManifest:
    """Ordered list of overrides, unique by target."""

    overrides: Tuple[OverrideEntry, ...] = field(default_factory=tuple)

    def upsert(self, target: LootId, replacement: LootId) -> "OverrideManifest":
        """Add or update the mapping for ``target``.

        An existing entry keeps its position; an unchanged entry leaves the
        manifest as is.
        """
        target_text = target.as_string()
        replacement_text = replacement.as_string()
        updated = list(self.overrides)
        for index, entry in enumerate(updated):
            if entry.target == target_text:
                if entry.replacement != replacement_text:
                    updated[index] = OverrideEntry(target_text, replacement_text)
                    return OverrideManifest(tuple(updated))
                return self
        updated.append(OverrideEntry(target_text, replacement_text))
        return OverrideManifest(tuple(updated))

    def replacement_for(self, target: LootId) -> Optional[LootId]:
        lookup = target.as_string()
        for entry in self.overrides:
            if entry.target == lookup:
                return entry.replacement_id
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "overrides": [
                {"target": entry.target, "replacement": entry.replacement}
                for entry in self.overrides
            ]
        }

    @classmethod
    def from_dict(cls, data: Any) -> "OverrideManifest":
        """Build a manifest from parsed JSON.

        Raises:
            ManifestCorrupt: If the document does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ManifestCorrupt("Override manifest must be a JSON object")
        raw = data.get("overrides") or []
        if not isinstance(raw, list):
            raise ManifestCorrupt("'overrides' must be a list")

        manifest = cls()
        for item in raw:
            if not isinstance(item, dict):
                raise ManifestCorrupt(f"Invalid override entry: {item!r}")
            try:
                target = LootId.parse(str(item["target"]))
                replacement = LootId.parse(str(item["replacement"]))
            except (KeyError, ValueError) as e:
                raise ManifestCorrupt(f"Invalid override entry {item!r}: {e}") from e
            manifest = manifest.upsert(target, replacement)
        return manifest


class OverrideManifestService:
    """Reads and writes the manifest file of an export root."""

    def __init__(self, paths: Optional[OverridePaths] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.paths = paths or OverridePaths()

    def load(self, pack_root: Path) -> OverrideManifest:
        """Return the stored manifest; missing or corrupt files read as empty."""
        manifest_file = self.paths.manifest_file(pack_root)
        if not manifest_file.is_file():
            return OverrideManifest()
        try:
            return OverrideManifest.from_dict(read_json(manifest_file))
        except (OSError, orjson.JSONDecodeError, ManifestCorrupt) as e:
            self.logger.warning(
                f"Failed to read override manifest at {manifest_file}, starting fresh: {e}"
            )
            return OverrideManifest()

    def save(self, pack_root: Path, manifest: OverrideManifest) -> Path:
        return write_json(self.paths.manifest_file(pack_root), manifest.to_dict())
