"""Shared fixtures: throwaway modpack trees, archives and INI-backed settings."""

import zipfile
from pathlib import Path
from typing import Any, Dict, Union

import orjson
import pytest
from PySide6.QtCore import QSettings

from loot_editor.settings import AppSettings

Member = Union[bytes, str, Dict[str, Any]]


def chest_table(*items: str) -> Dict[str, Any]:
    """Single-pool chest table with one weight-1 entry per item."""
    return {
        "type": "minecraft:chest",
        "pools": [
            {
                "rolls": 1,
                "entries": [{"type": "minecraft:item", "name": item, "weight": 1} for item in items],
            }
        ],
    }


def write_table(path: Path, document: Dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(orjson.dumps(document))
    return path


def make_zip(path: Path, members: Dict[str, Member]) -> Path:
    """Create a zip/jar whose members are dicts (JSON), str or bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in members.items():
            if isinstance(content, dict):
                content = orjson.dumps(content)
            archive.writestr(name, content)
    return path


@pytest.fixture
def modpack(tmp_path: Path) -> Path:
    """Empty modpack root nested as ``<minecraft>/Instances/pack``."""
    root = tmp_path / "minecraft" / "Instances" / "pack"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def app_settings(tmp_path: Path) -> AppSettings:
    """AppSettings stored in a temporary INI file instead of the user store."""
    qsettings = QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
    return AppSettings(settings=qsettings)
