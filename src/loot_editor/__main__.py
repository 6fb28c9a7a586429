"""
Headless entry point for the loot editor.
Usage: python -m loot_editor scan <pack_root> <output> [--reconcile]
       python -m loot_editor check-settings
"""

import argparse
import logging
import sys
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from . import __version__
from .errors import InvalidRoot
from .loot_tables.models import DescriptorList
from .loot_tables.reconciler import DescriptorReconciler
from .loot_tables.scanner import ModpackScanner
from .overrides.datapack import DataPackService
from .settings import AppSettings
from .utils.json_io import write_json
from .utils.logging_config import setup_logging


def build_manifest(pack_root: Path, descriptors: DescriptorList) -> dict:
    """Scan manifest consumed by external tooling."""
    return {
        "source": "jar_scan",
        "generated": datetime.now(timezone.utc).isoformat(),
        "packRoot": str(pack_root),
        "entries": len(descriptors),
        "tables": [descriptor.to_manifest() for descriptor in descriptors],
    }


def run_scan(args: argparse.Namespace, settings: AppSettings) -> int:
    logger = logging.getLogger(f"{__name__}.scan")
    pack_root = Path(args.pack_root).absolute()
    output = Path(args.output).absolute()

    data_packs = DataPackService()
    scanner = ModpackScanner(settings=settings.scan, data_packs=data_packs)
    try:
        descriptors = scanner.scan(pack_root)
    except InvalidRoot as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.reconcile:
        reconciler = DescriptorReconciler(pack_root, data_packs.resolve_pack_root(pack_root))
        descriptors = reconciler.reconcile(descriptors)

    write_json(output, build_manifest(pack_root, descriptors))
    print(f"Scanned {len(descriptors)} loot tables. Manifest written to {output}")
    counts = Counter(descriptor.source_type for descriptor in descriptors)
    for source_type in sorted(counts, key=lambda s: s.order):
        print(f"  {source_type.name}: {counts[source_type]}")
    return 0


def run_check_settings(args: argparse.Namespace, settings: AppSettings) -> int:
    print(f"Settings file: {settings.get_settings_file_path()}")
    validation = settings.validate()
    for warning in validation.warnings:
        print(f"Warning: {warning}")
    for error in validation.errors:
        print(f"Error: {error}", file=sys.stderr)
    return 0 if validation.is_valid else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loot-editor", description="Loot table discovery and override tooling"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Write a manifest of every loot table in a modpack")
    scan.add_argument("pack_root", help="Root of the modpack instance (mods/, kubejs/, ...)")
    scan.add_argument("output", help="Destination JSON file (directories are created)")
    scan.add_argument(
        "--reconcile",
        action="store_true",
        help="Keep one descriptor per source type and table id",
    )
    scan.set_defaults(handler=run_scan)

    check = subparsers.add_parser("check-settings", help="Validate application settings")
    check.set_defaults(handler=run_check_settings)
    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[AppSettings] = None) -> int:
    """Command line entry point."""
    args = build_parser().parse_args(argv)
    if settings is None:
        settings = AppSettings()
    setup_logging(settings)
    return args.handler(args, settings)


if __name__ == "__main__":
    sys.exit(main())
