"""Integrity and determinism verification for a snapshot directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from logs import get_logger
from snapshot.contract import snapshot_filename
from snapshot.reader import CorruptSnapshot, load_snapshot, read_header
from snapshot.writer import dump_snapshot
from store.disk import SnapshotStore

logger = get_logger("verify")


@dataclass(frozen=True)
class VerificationResult:
    ok: bool
    corrupt: tuple[str, ...] = field(default_factory=tuple)
    unstable: tuple[str, ...] = field(default_factory=tuple)
    checked: int = 0


def verify_snapshots(cache_dir: Path) -> VerificationResult:
    """Verify that every snapshot in ``cache_dir`` is sound and stable.

    Each snapshot is reconstructed and serialized again; the result must be
    byte-identical to the file on disk. Snapshots that fail to load, or that
    are stored under a filename other than the one derived from their
    identifier, are reported as corrupt.

    Args:
        cache_dir: Directory containing snapshot files.

    Returns:
        VerificationResult with sorted file names of corrupt and unstable
        snapshots and the number of files checked.

    Raises:
        FileNotFoundError: If cache_dir does not exist.
        NotADirectoryError: If cache_dir is not a directory.
    """
    if not cache_dir.exists():
        msg = f"Cache directory does not exist: {cache_dir}"
        raise FileNotFoundError(msg)
    if not cache_dir.is_dir():
        msg = f"Cache path is not a directory: {cache_dir}"
        raise NotADirectoryError(msg)

    store = SnapshotStore(cache_dir)
    corrupt: list[str] = []
    unstable: list[str] = []
    checked = 0
    for path in store.list_snapshots():
        data = store.read(path)
        if data is None:
            continue
        checked += 1
        try:
            header = read_header(data)
            descriptor = load_snapshot(data)
        except CorruptSnapshot as exc:
            logger.debug("corrupt snapshot %s: %s", path.name, exc)
            corrupt.append(path.name)
            continue
        if path.name != snapshot_filename(header.identifier):
            logger.debug("snapshot %s is misnamed for %s", path.name, header.identifier)
            corrupt.append(path.name)
            continue
        if dump_snapshot(descriptor, identifier=header.identifier) != data:
            unstable.append(path.name)

    corrupt.sort()
    unstable.sort()
    return VerificationResult(
        ok=not corrupt and not unstable,
        corrupt=tuple(corrupt),
        unstable=tuple(unstable),
        checked=checked,
    )
