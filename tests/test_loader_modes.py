from __future__ import annotations

from pathlib import Path

import pytest

from descriptors import SymbolDescriptor, SymbolKind
from fixtures.sample_symbols import (
    AcmeWidget,
    Renderable,
    Timestamps,
    Tolerances,
    Widget,
)
from introspect import NotFound, PythonIntrospector
from loader import (
    LoaderNotInitialized,
    ModeKind,
    RefreshMode,
    SymbolLoader,
    open_loader,
)
from snapshot import CorruptSnapshot, snapshot_filename


class CountingFacility:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self._inner = PythonIntrospector(
            registry={
                "Acme.Widget": AcmeWidget,
                "Shop.Widget": Widget,
                "Shop.Renderable": Renderable,
                "Shop.Timestamps": Timestamps,
                "Shop.Tolerances": Tolerances,
            }
        )

    def describe(self, kind: SymbolKind, identifier: str) -> SymbolDescriptor:
        self.calls.append(identifier)
        return self._inner.describe(kind, identifier)


def _loader(cache_dir: Path) -> tuple[SymbolLoader, CountingFacility]:
    facility = CountingFacility()
    return SymbolLoader(facility).init(cache_dir), facility


def _snapshots(cache_dir: Path) -> list[str]:
    return sorted(p.name for p in cache_dir.glob("*.snapshot.jsonl"))


def test_acme_widget_scenario(tmp_path: Path) -> None:
    cache_dir = tmp_path / "D"
    loader, _ = _loader(cache_dir)

    widget = loader.resolve(SymbolKind.CLASS, "Acme.Widget")

    assert widget.get_property("price").type == "float"
    assert widget.get_property("name").type == "str"
    assert widget.get_method("render").return_type == "str"
    assert widget.get_method("render").argument_count == 0
    assert _snapshots(cache_dir) == [snapshot_filename("Acme.Widget")]

    loader.clear_instance_cache()
    again = loader.resolve(SymbolKind.CLASS, "Acme.Widget")

    assert again == widget
    assert again is not widget

    loader.clear_cache()
    assert list(cache_dir.iterdir()) == []


def test_fastest_returns_same_instance(tmp_path: Path) -> None:
    loader, facility = _loader(tmp_path)

    first = loader.get_class("Shop.Widget")
    second = loader.get_class("Shop.Widget")

    assert first is second
    assert facility.calls == ["Shop.Widget"]
    assert loader.cached_identifiers() == ["Shop.Widget"]


def test_fastest_reads_snapshot_written_by_another_loader(tmp_path: Path) -> None:
    writer, _ = _loader(tmp_path)
    original = writer.get_class("Shop.Widget")

    reader, facility = _loader(tmp_path)
    restored = reader.get_class("Shop.Widget")

    assert facility.calls == []
    assert restored == original
    assert restored is not original


def test_round_trip_through_loader_matches_live(tmp_path: Path) -> None:
    loader, _ = _loader(tmp_path)
    for identifier, kind in (
        ("Shop.Widget", SymbolKind.CLASS),
        ("Shop.Renderable", SymbolKind.INTERFACE),
        ("Shop.Timestamps", SymbolKind.TRAIT),
    ):
        live = loader.resolve(kind, identifier)
        loader.clear_instance_cache()
        assert loader.resolve(kind, identifier) == live


def test_reloaded_nan_default_equals_first_instance(tmp_path: Path) -> None:
    loader, facility = _loader(tmp_path)
    first = loader.get_class("Shop.Tolerances")

    loader.clear_instance_cache()
    again = loader.get_class("Shop.Tolerances")

    assert again == first
    assert again is not first
    assert facility.calls == ["Shop.Tolerances"]


def test_refresh_all_recomputes_every_time(tmp_path: Path) -> None:
    loader, facility = _loader(tmp_path)
    loader.set_mode("refresh")

    first = loader.get_class("Shop.Widget")
    second = loader.get_class("Shop.Widget")

    assert first is not second
    assert first == second
    assert facility.calls == ["Shop.Widget", "Shop.Widget"]
    assert _snapshots(tmp_path) == [snapshot_filename("Shop.Widget")]


def test_refresh_all_rewrites_corrupt_snapshot(tmp_path: Path) -> None:
    loader, _ = _loader(tmp_path)
    path = tmp_path / snapshot_filename("Shop.Widget")
    path.write_bytes(b"garbage")

    loader.set_mode(RefreshMode.refresh_all())
    loader.get_class("Shop.Widget")

    loader.set_mode("fastest").clear_instance_cache()
    assert loader.get_class("Shop.Widget").name == "Shop.Widget"


def test_selective_refresh_only_listed_identifiers(tmp_path: Path) -> None:
    loader, facility = _loader(tmp_path)
    loader.get_class("Shop.Widget")
    loader.get_class("Acme.Widget")
    facility.calls.clear()

    loader.set_mode(["Acme.Widget"])
    widget = loader.get_class("Shop.Widget")
    loader.get_class("Shop.Widget")
    loader.get_class("Acme.Widget")
    loader.get_class("Acme.Widget")

    assert facility.calls == ["Acme.Widget", "Acme.Widget"]
    assert loader.get_class("Shop.Widget") is widget
    assert loader.mode.kind is ModeKind.SELECTIVE


def test_mode_change_takes_effect_immediately(tmp_path: Path) -> None:
    loader, facility = _loader(tmp_path)
    first = loader.get_class("Shop.Widget")

    loader.set_mode("refresh")
    refreshed = loader.get_class("Shop.Widget")
    loader.set_mode("fastest")

    assert refreshed is not first
    assert loader.get_class("Shop.Widget") is refreshed
    assert len(facility.calls) == 2


def test_unknown_mode_string_is_rejected(tmp_path: Path) -> None:
    loader, _ = _loader(tmp_path)

    with pytest.raises(ValueError, match="Unknown refresh mode"):
        loader.set_mode("sometimes")


def test_clear_cache_single_identifier(tmp_path: Path) -> None:
    loader, facility = _loader(tmp_path)
    loader.get_class("Shop.Widget")
    loader.get_class("Acme.Widget")

    loader.clear_cache("Shop.Widget")

    assert _snapshots(tmp_path) == [snapshot_filename("Acme.Widget")]
    assert loader.cached_identifiers() == ["Acme.Widget"]
    assert not loader.is_cached("Shop.Widget")
    loader.clear_cache("Never.Cached")

    loader.get_class("Shop.Widget")
    assert facility.calls.count("Shop.Widget") == 2


def test_clear_cache_all_empties_directory_and_memory(tmp_path: Path) -> None:
    loader, _ = _loader(tmp_path)
    loader.get_class("Shop.Widget")
    loader.get_class("Acme.Widget")

    loader.clear_cache()

    assert _snapshots(tmp_path) == []
    assert loader.cached_identifiers() == []


def test_clear_instance_cache_keeps_files(tmp_path: Path) -> None:
    loader, facility = _loader(tmp_path)
    first = loader.get_class("Shop.Widget")
    before = _snapshots(tmp_path)

    loader.clear_instance_cache()

    assert loader.cached_identifiers() == []
    assert loader.is_cached("Shop.Widget")
    second = loader.get_class("Shop.Widget")
    assert second == first
    assert second is not first
    assert _snapshots(tmp_path) == before
    assert facility.calls == ["Shop.Widget"]


def test_unknown_identifier_raises_without_write(tmp_path: Path) -> None:
    loader, _ = _loader(tmp_path)

    with pytest.raises(NotFound):
        loader.get_class("Acme.DoesNotExist")

    assert list(tmp_path.iterdir()) == []
    assert loader.cached_identifiers() == []


def test_corrupt_snapshot_surfaces_in_fastest_mode(tmp_path: Path) -> None:
    loader, facility = _loader(tmp_path)
    (tmp_path / snapshot_filename("Shop.Widget")).write_bytes(b"{}\n")

    with pytest.raises(CorruptSnapshot):
        loader.get_class("Shop.Widget")

    loader.clear_cache("Shop.Widget")
    assert loader.get_class("Shop.Widget").name == "Shop.Widget"
    assert facility.calls == ["Shop.Widget"]


def test_use_before_init_raises(tmp_path: Path) -> None:
    loader = SymbolLoader(CountingFacility())

    assert not loader.initialized
    with pytest.raises(LoaderNotInitialized):
        loader.get_class("Shop.Widget")
    with pytest.raises(LoaderNotInitialized):
        loader.clear_cache()


def test_init_creates_directory(tmp_path: Path) -> None:
    cache_dir = tmp_path / "nested" / "cache"

    loader = SymbolLoader(CountingFacility()).init(cache_dir)

    assert cache_dir.is_dir()
    assert loader.cache_dir == cache_dir


def test_shutdown_drops_memory_but_keeps_files(tmp_path: Path) -> None:
    loader, _ = _loader(tmp_path)
    loader.get_class("Shop.Widget")

    loader.shutdown()

    assert not loader.initialized
    assert _snapshots(tmp_path) == [snapshot_filename("Shop.Widget")]
    with pytest.raises(LoaderNotInitialized):
        loader.get_class("Shop.Widget")


def test_open_loader_context(tmp_path: Path) -> None:
    facility = CountingFacility()

    with open_loader(tmp_path / "cache", facility=facility, mode="refresh") as loader:
        loader.get_interface("Shop.Renderable")
        assert loader.mode.kind is ModeKind.REFRESH

    assert not loader.initialized
    assert facility.calls == ["Shop.Renderable"]


def test_descriptor_kind_follows_request(tmp_path: Path) -> None:
    loader, _ = _loader(tmp_path)

    assert loader.get_trait("Shop.Timestamps").kind is SymbolKind.TRAIT
    assert loader.get_interface("Shop.Renderable").kind is SymbolKind.INTERFACE
