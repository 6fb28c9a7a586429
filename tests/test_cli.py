"""Tests for the headless command line."""

from pathlib import Path

import orjson
import pytest

from conftest import chest_table, make_zip, write_table
from loot_editor.__main__ import main
from loot_editor.settings import AppSettings


@pytest.fixture
def scanned_modpack(modpack: Path) -> Path:
    table = chest_table("minecraft:diamond")
    write_table(modpack / "datapacks" / "custom" / "data" / "ns" / "loot_table" / "a.json", table)
    write_table(modpack / "saves" / "W" / "datapacks" / "custom" / "data" / "ns" / "loot_table" / "a.json", table)
    make_zip(modpack / "mods" / "m.jar", {"data/ns/loot_table/a.json": table})
    return modpack


class TestScanCommand:
    """Test ``scan``."""

    def test_writes_manifest(self, scanned_modpack: Path, tmp_path: Path, app_settings: AppSettings, capsys) -> None:
        output = tmp_path / "out" / "manifest.json"
        assert main(["scan", str(scanned_modpack), str(output)], settings=app_settings) == 0

        manifest = orjson.loads(output.read_bytes())
        assert manifest["source"] == "jar_scan"
        assert manifest["packRoot"] == str(scanned_modpack.absolute())
        assert manifest["entries"] == 3 == len(manifest["tables"])
        jar_table = next(t for t in manifest["tables"] if t["sourceType"] == "MOD_JAR")
        assert jar_table["archiveEntry"] == "data/ns/loot_table/a.json"
        assert jar_table["editable"] is False

        out = capsys.readouterr().out
        assert "Scanned 3 loot tables" in out
        assert "  DATAPACK: 2" in out
        assert "  MOD_JAR: 1" in out

    def test_reconcile_flag(self, scanned_modpack: Path, tmp_path: Path, app_settings: AppSettings) -> None:
        output = tmp_path / "manifest.json"
        assert main(["scan", str(scanned_modpack), str(output), "--reconcile"], settings=app_settings) == 0

        tables = orjson.loads(output.read_bytes())["tables"]
        assert [(t["sourceType"], t["sourceDisplay"]) for t in tables] == [
            ("DATAPACK", "Datapack: custom"),
            ("MOD_JAR", "Mod Jar: m.jar"),
        ]

    def test_invalid_root(self, tmp_path: Path, app_settings: AppSettings) -> None:
        output = tmp_path / "manifest.json"
        assert main(["scan", str(tmp_path / "missing"), str(output)], settings=app_settings) == 1
        assert not output.exists()


class TestCheckSettingsCommand:
    """Test ``check-settings``."""

    def test_valid_settings(self, app_settings: AppSettings, capsys) -> None:
        assert main(["check-settings"], settings=app_settings) == 0
        assert "Settings file:" in capsys.readouterr().out

    def test_invalid_settings(self, app_settings: AppSettings) -> None:
        app_settings.settings.setValue("logging/console_level", "LOUD")
        assert main(["check-settings"], settings=app_settings) == 1
