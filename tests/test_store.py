from __future__ import annotations

import os
from pathlib import Path

import pytest

from snapshot.contract import snapshot_filename
from store import IOFailure, SnapshotStore


def test_ensure_creates_nested_directory(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path / "a" / "b" / "cache")

    store.ensure()

    assert store.directory.is_dir()


def test_ensure_fails_when_path_is_a_file(tmp_path: Path) -> None:
    blocker = tmp_path / "cache"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(IOFailure, match="Cannot create cache directory"):
        SnapshotStore(blocker / "inner").ensure()


def test_write_then_read(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path)
    path = store.path_for("Acme.Widget")

    store.write(path, b"first")
    store.write(path, b"second")

    assert path.name == snapshot_filename("Acme.Widget")
    assert store.read(path) == b"second"
    assert [p.name for p in tmp_path.iterdir()] == [path.name]


def test_read_missing_returns_none(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path)

    assert store.read(store.path_for("Missing")) is None
    assert not store.exists(store.path_for("Missing"))


def test_failed_rename_removes_temp_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = SnapshotStore(tmp_path)
    path = store.path_for("Acme.Widget")

    def _fail_replace(src: str, dst: str) -> None:
        raise PermissionError("denied")

    monkeypatch.setattr(os, "replace", _fail_replace)

    with pytest.raises(IOFailure, match="Cannot write snapshot"):
        store.write(path, b"content")

    assert list(tmp_path.iterdir()) == []


def test_delete_ignores_missing_files(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path)
    path = store.path_for("Acme.Widget")
    store.write(path, b"x")

    assert store.delete(path) is True
    assert store.delete(path) is False


def test_delete_all_removes_snapshots_and_stray_temp_files(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path)
    for identifier in ("A", "B"):
        store.write(store.path_for(identifier), b"x")
    (tmp_path / ".crashed.snapshot.jsonl.abc.tmp").write_bytes(b"partial")
    (tmp_path / "notes.txt").write_text("keep", encoding="utf-8")

    assert len(store.list_snapshots()) == 2
    assert store.delete_all() == 2
    assert [p.name for p in tmp_path.iterdir()] == ["notes.txt"]


def test_list_snapshots_is_sorted(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path)
    for identifier in ("Zeta", "Alpha", "Mid"):
        store.write(store.path_for(identifier), b"x")

    names = [p.name for p in store.list_snapshots()]

    assert names == sorted(names)


def test_missing_directory_lists_nothing(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path / "absent")

    assert store.list_snapshots() == []
    assert store.delete_all() == 0
