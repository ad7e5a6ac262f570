"""Tiered symbol resolution: memory, then persisted snapshot, then live."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Self

from descriptors.models import SymbolDescriptor, SymbolKind
from introspect.python import PythonIntrospector
from loader.config import SymcacheConfig, resolve_cache_dir
from loader.errors import LoaderNotInitialized
from loader.modes import RefreshMode
from logs import get_logger
from snapshot.reader import load_snapshot
from snapshot.writer import dump_snapshot
from store.disk import SnapshotStore

if TYPE_CHECKING:
    from introspect.facility import IntrospectionFacility

logger = get_logger("loader")


class SymbolLoader:
    """Process-wide cache of symbol descriptors.

    A loader is inert until :meth:`init` attaches it to a cache directory.
    Each request consults the refresh mode, then the memory tier, then the
    persisted snapshot, and only then asks the introspection facility.
    Freshly computed descriptors are written back to both tiers.
    """

    def __init__(self, facility: IntrospectionFacility | None = None) -> None:
        self._facility: IntrospectionFacility = facility or PythonIntrospector()
        self._mode = RefreshMode.fastest()
        self._store: SnapshotStore | None = None
        self._memory: dict[str, SymbolDescriptor] = {}

    # ------------------------------------------------------------------
    # Lifecycle

    def init(self, cache_dir: Path | str) -> Self:
        """Attach to ``cache_dir``, creating it if absent.

        Raises:
            IOFailure: If the directory cannot be created.
        """
        store = SnapshotStore(cache_dir)
        store.ensure()
        self._store = store
        self._memory = {}
        logger.debug("loader attached to %s", store.directory)
        return self

    def shutdown(self) -> None:
        """Drop the memory tier and detach. Snapshot files are left alone."""
        if self._store is not None:
            logger.debug("loader detached from %s", self._store.directory)
        self._memory = {}
        self._store = None

    @property
    def initialized(self) -> bool:
        return self._store is not None

    @property
    def cache_dir(self) -> Path:
        return self._require_store().directory

    @property
    def facility(self) -> IntrospectionFacility:
        return self._facility

    @property
    def mode(self) -> RefreshMode:
        return self._mode

    def set_mode(self, mode: RefreshMode | str | Iterable[str]) -> Self:
        """Switch the refresh mode; applies to the next request."""
        self._mode = RefreshMode.coerce(mode)
        logger.debug("refresh mode set to %s", self._mode.kind.value)
        return self

    def _require_store(self) -> SnapshotStore:
        if self._store is None:
            msg = "SymbolLoader.init() must be called before use"
            raise LoaderNotInitialized(msg)
        return self._store

    # ------------------------------------------------------------------
    # Resolution

    def resolve(self, kind: SymbolKind | str, identifier: str) -> SymbolDescriptor:
        """Return the descriptor for ``identifier``.

        Raises:
            LoaderNotInitialized: If :meth:`init` has not been called.
            NotFound: If the facility cannot locate ``identifier``.
            CorruptSnapshot: If the persisted snapshot cannot be read back.
            IOFailure: If a fresh snapshot cannot be written.
        """
        store = self._require_store()
        kind = SymbolKind(kind)
        needs_refresh = self._mode.needs_refresh(identifier)

        if not needs_refresh:
            cached = self._memory.get(identifier)
            if cached is not None:
                logger.debug("memory hit: %s", identifier)
                return cached

        path = store.path_for(identifier)
        if not needs_refresh:
            data = store.read(path)
            if data is not None:
                logger.debug("snapshot hit: %s (%s)", identifier, path.name)
                descriptor = load_snapshot(data, expected_identifier=identifier)
                self._memory[identifier] = descriptor
                return descriptor

        logger.debug(
            "introspecting %s (%s)",
            identifier,
            "refresh" if needs_refresh else "miss",
        )
        descriptor = self._facility.describe(kind, identifier)
        store.write(path, dump_snapshot(descriptor, identifier=identifier))
        self._memory[identifier] = descriptor
        return descriptor

    def get_class(self, identifier: str) -> SymbolDescriptor:
        return self.resolve(SymbolKind.CLASS, identifier)

    def get_interface(self, identifier: str) -> SymbolDescriptor:
        return self.resolve(SymbolKind.INTERFACE, identifier)

    def get_trait(self, identifier: str) -> SymbolDescriptor:
        return self.resolve(SymbolKind.TRAIT, identifier)

    # ------------------------------------------------------------------
    # Invalidation

    def clear_cache(self, identifier: str | None = None) -> None:
        """Remove one identifier, or everything, from both tiers."""
        store = self._require_store()
        if identifier is None:
            removed = store.delete_all()
            self._memory.clear()
            logger.debug("cleared %d snapshots", removed)
            return
        store.delete(store.path_for(identifier))
        self._memory.pop(identifier, None)

    def clear_instance_cache(self) -> None:
        """Empty the memory tier only."""
        self._memory.clear()

    def cached_identifiers(self) -> list[str]:
        """Identifiers currently held in memory, in load order."""
        return list(self._memory)

    def is_cached(self, identifier: str) -> bool:
        """Whether either tier holds ``identifier``."""
        store = self._require_store()
        return identifier in self._memory or store.exists(store.path_for(identifier))


@contextmanager
def open_loader(
    source: SymcacheConfig | Path | str,
    *,
    root: Path | None = None,
    facility: IntrospectionFacility | None = None,
    mode: RefreshMode | str | Iterable[str] | None = None,
) -> Iterator[SymbolLoader]:
    """Yield an initialized loader and shut it down on exit.

    ``source`` is either a cache directory or a :class:`SymcacheConfig`.
    A config supplies the cache directory (relative to ``root``), the
    refresh mode and the aliases of the default facility.
    """
    if isinstance(source, SymcacheConfig):
        cache_dir = resolve_cache_dir(root or Path.cwd(), source.cache_dir)
        if facility is None:
            facility = PythonIntrospector(aliases=source.aliases)
        if mode is None:
            mode = source.refresh_mode()
    else:
        cache_dir = Path(source)

    loader = SymbolLoader(facility)
    if mode is not None:
        loader.set_mode(mode)
    loader.init(cache_dir)
    try:
        yield loader
    finally:
        loader.shutdown()


__all__ = ["SymbolLoader", "open_loader"]
