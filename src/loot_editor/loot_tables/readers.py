"""
Uniform read access to a root of namespaced data.

A root is either a real directory or a zip/jar archive. Both are exposed
through `ArchiveView`, addressed with ``/``-separated relative paths
(``""`` is the root). Views are context managers: an archive is mounted
on enter and closed on exit, so callers scan it fully inside one
``with`` block.
"""

import logging
import zipfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import IO, Iterator, List, Optional

from ..errors import SourceUnreadable

ARCHIVE_SUFFIXES = (".zip", ".jar")


def _join(base: str, name: str) -> str:
    return f"{base}/{name}" if base else name


def _normalize(path: str) -> str:
    return path.replace("\\", "/").strip("/")


@dataclass(frozen=True)
class ArchiveEntry:
    """A child of a directory inside a view."""

    name: str
    path: str
    is_dir: bool


class ArchiveView(ABC):
    """Read-only view over a directory tree."""

    def __init__(self, location: Path):
        self.location = Path(location)

    @abstractmethod
    def list(self, path: str = "") -> List[ArchiveEntry]:
        """Return the direct children of ``path`` (empty if it is not a directory)."""

    @abstractmethod
    def open(self, path: str) -> IO[bytes]:
        """Open a file for binary reading.

        Raises:
            FileNotFoundError: If ``path`` is not a file in this view
        """

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        """Check whether ``path`` is a directory."""

    @abstractmethod
    def is_file(self, path: str) -> bool:
        """Check whether ``path`` is a regular file."""

    def exists(self, path: str) -> bool:
        return self.is_dir(path) or self.is_file(path)

    def read_bytes(self, path: str) -> bytes:
        with self.open(path) as handle:
            return handle.read()

    def walk_files(self, path: str) -> Iterator[str]:
        """Yield every file below ``path`` recursively, depth first in name order."""
        for entry in sorted(self.list(path), key=lambda e: e.name):
            if entry.is_dir:
                yield from self.walk_files(entry.path)
            else:
                yield entry.path

    def file_path(self, path: str) -> Optional[Path]:
        """Real filesystem path of ``path``, or None for archive members."""
        return None

    def close(self) -> None:
        pass

    def __enter__(self) -> "ArchiveView":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class DirectoryView(ArchiveView):
    """View backed by a plain directory."""

    def _resolve(self, path: str) -> Path:
        normalized = _normalize(path)
        return self.location / normalized if normalized else self.location

    def list(self, path: str = "") -> List[ArchiveEntry]:
        target = self._resolve(path)
        if not target.is_dir():
            return []
        base = _normalize(path)
        return [
            ArchiveEntry(child.name, _join(base, child.name), child.is_dir())
            for child in target.iterdir()
        ]

    def open(self, path: str) -> IO[bytes]:
        target = self._resolve(path)
        if not target.is_file():
            raise FileNotFoundError(f"{path} not found in {self.location}")
        return target.open("rb")

    def is_dir(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def is_file(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def file_path(self, path: str) -> Optional[Path]:
        return self._resolve(path)


class ZipView(ArchiveView):
    """View backed by a zip or jar archive.

    Zip files need not contain explicit directory records, so directories
    are inferred from member names.
    """

    def __init__(self, location: Path):
        super().__init__(location)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        try:
            self._zip = zipfile.ZipFile(self.location)
        except (OSError, zipfile.BadZipFile) as e:
            raise SourceUnreadable(f"Cannot open archive {self.location}: {e}") from e
        try:
            self._index_members()
        except Exception:
            self._zip.close()
            raise

    def _index_members(self) -> None:
        self._files: set[str] = set()
        self._children: dict[str, dict[str, bool]] = {"": {}}
        for info in self._zip.infolist():
            name = _normalize(info.filename)
            if not name:
                continue
            parts = PurePosixPath(name).parts
            # Register every ancestor directory
            for depth in range(len(parts) - 1):
                parent = "/".join(parts[:depth])
                current = "/".join(parts[: depth + 1])
                self._children.setdefault(parent, {})[parts[depth]] = True
                self._children.setdefault(current, {})
            parent = "/".join(parts[:-1])
            if info.is_dir():
                self._children.setdefault(parent, {})[parts[-1]] = True
                self._children.setdefault(name, {})
            else:
                self._children.setdefault(parent, {}).setdefault(parts[-1], False)
                self._files.add(name)

    def list(self, path: str = "") -> List[ArchiveEntry]:
        base = _normalize(path)
        children = self._children.get(base)
        if children is None:
            return []
        return [
            ArchiveEntry(name, _join(base, name), is_dir)
            for name, is_dir in children.items()
        ]

    def open(self, path: str) -> IO[bytes]:
        name = _normalize(path)
        if name not in self._files:
            raise FileNotFoundError(f"{path} not found in {self.location}")
        return self._zip.open(name)

    def is_dir(self, path: str) -> bool:
        return _normalize(path) in self._children

    def is_file(self, path: str) -> bool:
        return _normalize(path) in self._files

    def close(self) -> None:
        self._zip.close()


def is_archive(path: Path) -> bool:
    return path.suffix.lower() in ARCHIVE_SUFFIXES


@contextmanager
def open_view(location: Path) -> Iterator[ArchiveView]:
    """Mount ``location`` for the duration of the ``with`` block.

    Raises:
        SourceUnreadable: If the location is neither a directory nor a readable archive
    """
    location = Path(location)
    if location.is_dir():
        view: ArchiveView = DirectoryView(location)
    elif location.is_file():
        view = ZipView(location)
    else:
        raise SourceUnreadable(f"Source does not exist: {location}")
    try:
        yield view
    finally:
        view.close()
