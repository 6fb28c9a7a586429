"""
Reader for the launcher's ``minecraftinstance.json`` descriptor.

Two consumers need the game version: discovery (to find the vanilla jar)
and the datapack service (to pick a ``pack_format``). They read slightly
different fields, so both lookups live here.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import orjson

INSTANCE_FILE = "minecraftinstance.json"

logger = logging.getLogger(__name__)


def read_instance(modpack_root: Path) -> Optional[Dict[str, Any]]:
    """Return the parsed instance descriptor, or None if missing or malformed."""
    instance_file = Path(modpack_root) / INSTANCE_FILE
    if not instance_file.is_file():
        return None
    try:
        data = orjson.loads(instance_file.read_bytes())
    except (OSError, orjson.JSONDecodeError) as e:
        logger.debug(f"Unable to read instance descriptor {instance_file}: {e}")
        return None
    return data if isinstance(data, dict) else None


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _nested_version_json(instance: Dict[str, Any]) -> Dict[str, Any]:
    """Parse ``baseModLoader.versionJson``, which is JSON embedded in a string."""
    base_loader = instance.get("baseModLoader")
    if not isinstance(base_loader, dict):
        return {}
    raw = _text(base_loader.get("versionJson"))
    if not raw:
        return {}
    try:
        nested = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        logger.debug(f"Malformed versionJson in instance descriptor: {e}")
        return {}
    return nested if isinstance(nested, dict) else {}


def vanilla_version(instance: Dict[str, Any]) -> Optional[str]:
    """Version used to locate the vanilla jar.

    Prefers ``versionJson.inheritsFrom``, falls back to ``gameVersion``.
    """
    return _text(_nested_version_json(instance).get("inheritsFrom")) or _text(
        instance.get("gameVersion")
    )


def minecraft_version(instance: Dict[str, Any]) -> Optional[str]:
    """Version used to pick the datapack ``pack_format``."""
    base_loader = instance.get("baseModLoader")
    if isinstance(base_loader, dict):
        version = _text(base_loader.get("minecraftVersion"))
        if version:
            return version
    nested = _nested_version_json(instance)
    return (
        _text(nested.get("inheritsFrom"))
        or _text(nested.get("id"))
        or _text(instance.get("minecraftVersion"))
        or _text(instance.get("gameVersion"))
    )


def resolve_vanilla_jar(modpack_root: Path) -> Optional[Path]:
    """Locate ``<install>/versions/<v>/<v>.jar``.

    The install directory is ``Install`` two levels above the modpack root
    (``<minecraft>/Instances/<pack>``).
    """
    modpack_root = Path(modpack_root)
    instance = read_instance(modpack_root)
    if instance is None:
        return None
    version = vanilla_version(instance)
    if not version:
        return None
    minecraft_dir = modpack_root.absolute().parent.parent
    install_dir = minecraft_dir / "Install"
    if not install_dir.is_dir():
        return None
    jar = install_dir / "versions" / version / f"{version}.jar"
    return jar if jar.is_file() else None
