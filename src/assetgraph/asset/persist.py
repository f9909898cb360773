"""Write asset files to disk and read them back.

Each file is written atomically (temp file + ``os.replace``), but a set
of files is not: an interrupted run can leave some of an asset's files
on disk and not others. Assets that do something hazardous must treat
any of their files as evidence that an attempt was made.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from assetgraph.asset.base import AssetFile
from assetgraph.log import logger

logger = logger.getChild(__name__)

DIR_MODE = 0o750
FILE_MODE = 0o640


class FileFetcher(Protocol):
    """Read-only access to persisted asset files."""

    def fetch_by_name(self, name: str) -> AssetFile | None: ...

    def fetch_by_pattern(self, pattern: str) -> list[AssetFile]: ...


def _is_partial_write(path: Path) -> bool:
    return path.name.startswith(".") and path.name.endswith(".tmp")


def write_file(directory: Path, file: AssetFile) -> Path:
    """Atomically write one asset file under ``directory``.

    Args:
        directory: Asset directory
        file: File to write

    Returns:
        Path of the written file
    """
    path = Path(directory, file.filename)
    path.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(file.data)
        os.chmod(tmp_name, FILE_MODE)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


def write_files(directory: str | Path, files: Iterable[AssetFile]) -> list[Path]:
    """Write asset files under ``directory``, creating parents as needed.

    Args:
        directory: Asset directory
        files: Files to write

    Returns:
        Paths written, in order
    """
    directory = Path(directory)
    written = []
    for file in files:
        path = write_file(directory, file)
        logger.debug("Wrote %s", path)
        written.append(path)
    return written


class DiskFileFetcher:
    """FileFetcher backed by an asset directory on disk."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def fetch_by_name(self, name: str) -> AssetFile | None:
        """Return the named file, or None if it isn't on disk."""
        path = self.directory / name
        if not path.is_file():
            return None
        return AssetFile(filename=name, data=path.read_bytes())

    def fetch_by_pattern(self, pattern: str) -> list[AssetFile]:
        """Return all files matching a glob relative to the directory, sorted by name."""
        if not self.directory.is_dir():
            return []
        files = []
        for path in sorted(self.directory.glob(pattern)):
            if path.is_file() and not _is_partial_write(path):
                rel = path.relative_to(self.directory).as_posix()
                files.append(AssetFile(filename=rel, data=path.read_bytes()))
        return files
