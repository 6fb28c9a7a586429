"""Tests for descriptor reconciliation."""

from pathlib import Path

from conftest import chest_table, make_zip
from loot_editor.loot_tables.models import LootId, LootTableDescriptor, SourceType
from loot_editor.loot_tables.reconciler import DescriptorReconciler
from loot_editor.loot_tables.scanner import ModpackScanner
from loot_editor.loot_tables.service import LootTableService
from loot_editor.overrides.paths import OVERRIDE_LABEL, OverridePaths


def datapack(container: Path, name: str = "chests/a", label: str = "Datapack") -> LootTableDescriptor:
    return LootTableDescriptor("ns", name, container, None, label, SourceType.DATAPACK, True)


class TestDescriptorReconciler:
    """Test priority-based deduplication."""

    def test_primary_datapack_beats_world_mirror(self, modpack: Path) -> None:
        world_copy = datapack(modpack / "saves" / "W" / "datapacks" / "p" / "a.json", label="World")
        primary = datapack(modpack / "datapacks" / "p" / "a.json", label="Primary")

        result = DescriptorReconciler(modpack).reconcile([world_copy, primary])
        assert result == [primary]

    def test_replacement_beats_primary(self, modpack: Path) -> None:
        export_root = modpack / "datapacks" / "loot_editor"
        replacement_file = OverridePaths().replacement_file(export_root, LootId("ns", "chests/a"))
        override = datapack(replacement_file, label="Override")
        primary = datapack(modpack / "datapacks" / "p" / "a.json", label="Primary")

        reconciler = DescriptorReconciler(modpack, export_root)
        assert reconciler.priority(override) > reconciler.priority(primary)
        assert reconciler.reconcile([primary, override]) == [override]

    def test_ties_keep_first(self, modpack: Path) -> None:
        first = datapack(modpack / "elsewhere" / "one.json", label="One")
        second = datapack(modpack / "elsewhere" / "two.json", label="Two")
        assert DescriptorReconciler(modpack).reconcile([first, second]) == [first]

    def test_different_source_types_coexist(self, modpack: Path) -> None:
        pack = datapack(modpack / "datapacks" / "p" / "a.json")
        jar = LootTableDescriptor(
            "ns", "chests/a", modpack / "mods" / "m.jar", "data/ns/loot_table/chests/a.json",
            "Mod Jar: m.jar", SourceType.MOD_JAR, False,
        )
        result = DescriptorReconciler(modpack).reconcile([jar, pack])
        assert result == [pack, jar]

    def test_result_is_sorted(self, modpack: Path) -> None:
        b = datapack(modpack / "datapacks" / "p" / "b.json", name="b")
        a = datapack(modpack / "datapacks" / "p" / "a.json", name="a")
        assert [d.table_path for d in DescriptorReconciler(modpack).reconcile([b, a])] == ["a", "b"]

    def test_replace_swaps_matching_descriptor(self, modpack: Path) -> None:
        jar = LootTableDescriptor(
            "ns", "chests/a", modpack / "mods" / "m.jar", "data/ns/loot_table/chests/a.json",
            "Mod Jar: m.jar", SourceType.MOD_JAR, False,
        )
        other = datapack(modpack / "datapacks" / "p" / "b.json", name="b")
        saved = datapack(modpack / "datapacks" / "loot_editor" / "a.json", label="Saved")

        result = DescriptorReconciler(modpack).replace([jar, other], saved)
        assert saved in result
        assert jar not in result
        assert len(result) == 2

    def test_replace_appends_unknown(self, modpack: Path) -> None:
        existing = datapack(modpack / "datapacks" / "p" / "b.json", name="b")
        created = datapack(modpack / "datapacks" / "loot_editor" / "new.json", name="new")
        result = DescriptorReconciler(modpack).replace([existing], created)
        assert [d.table_path for d in result] == ["b", "new"]


class TestSavedOverrideVisibility:
    """Test that a saved override wins after rescanning."""

    def test_default_export_root_prefers_saved_override(self, modpack: Path) -> None:
        make_zip(
            modpack / "datapacks" / "tweaks.zip",
            {"data/minecraft/loot_table/chests/x.json": chest_table("minecraft:stick")},
        )
        scanner = ModpackScanner()
        (original,) = scanner.scan(modpack)

        LootTableService().save_to_preferred_location(modpack, original, chest_table("minecraft:diamond"))

        reconciler = DescriptorReconciler(modpack)
        assert reconciler.export_root == modpack / "datapacks" / "loot_editor"
        (kept,) = reconciler.reconcile(scanner.scan(modpack))
        assert kept.source_display == OVERRIDE_LABEL
        assert LootTableService().load(kept) == chest_table("minecraft:diamond")
