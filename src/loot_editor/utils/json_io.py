"""
JSON helpers built on orjson.

All documents written by the editor go through `write_json` so that the
same value always produces the same bytes.
"""

from pathlib import Path
from typing import Any

import orjson

WRITE_OPTIONS = orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE


def dumps(data: Any) -> bytes:
    """Serialize ``data`` as pretty-printed JSON bytes."""
    return orjson.dumps(data, option=WRITE_OPTIONS)


def read_json(path: Path) -> Any:
    """Read and parse a JSON file (orjson works with bytes)."""
    return orjson.loads(Path(path).read_bytes())


def write_json(path: Path, data: Any) -> Path:
    """Overwrite ``path`` with ``data``, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps(data))
    return path


def json_number(value: float) -> int | float:
    """Write integral floats as JSON integers."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
