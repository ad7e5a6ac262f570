"""Directory-backed snapshot persistence with atomic replacement."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

from logs import get_logger
from snapshot.contract import SNAPSHOT_SUFFIX, TEMP_SUFFIX, snapshot_filename

logger = get_logger("store")


class IOFailure(OSError):
    """Raised when the cache directory or a snapshot cannot be written."""


class SnapshotStore:
    """One snapshot file per identifier inside a single directory.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so readers observe either the previous
    snapshot or the complete new one.
    """

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def ensure(self) -> None:
        """Create the directory (and parents) if it does not exist."""
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Cannot create cache directory {self._directory}: {exc}"
            raise IOFailure(msg) from exc

    def path_for(self, identifier: str) -> Path:
        return self._directory / snapshot_filename(identifier)

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def write(self, path: Path, content: bytes) -> None:
        """Atomically replace ``path`` with ``content``.

        Raises:
            IOFailure: If the temporary file cannot be written or renamed.
        """
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=TEMP_SUFFIX, dir=path.parent
            )
        except OSError as exc:
            msg = f"Cannot create temporary file for {path}: {exc}"
            raise IOFailure(msg) from exc

        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError as exc:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            msg = f"Cannot write snapshot {path}: {exc}"
            raise IOFailure(msg) from exc
        logger.debug("wrote snapshot %s (%d bytes)", path.name, len(content))

    def read(self, path: Path) -> bytes | None:
        """Return the file content, or None when the file does not exist."""
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def delete(self, path: Path) -> bool:
        """Remove ``path`` if present. Returns True when a file was removed."""
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("could not delete %s: %s", path, exc)
            return False
        logger.debug("deleted snapshot %s", path.name)
        return True

    def delete_all(self) -> int:
        """Remove every snapshot and stray temporary file in the directory.

        Returns:
            Number of snapshot files removed.
        """
        if not self._directory.is_dir():
            return 0
        removed = sum(1 for path in self.list_snapshots() if self.delete(path))
        for stray in sorted(self._directory.glob(f"*{TEMP_SUFFIX}")):
            self.delete(stray)
        return removed

    def list_snapshots(self) -> list[Path]:
        """Snapshot files in the directory, sorted by name."""
        if not self._directory.is_dir():
            return []
        return sorted(
            path
            for path in self._directory.glob(f"*{SNAPSHOT_SUFFIX}")
            if path.is_file()
        )


__all__ = ["IOFailure", "SnapshotStore"]
