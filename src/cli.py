"""Command-line interface for symcache."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import orjson

from descriptors.models import SymbolDescriptor, SymbolKind
from introspect.errors import NotFound
from introspect.python import PythonIntrospector
from loader.config import (
    ConfigError,
    SymcacheConfig,
    load_config,
    resolve_cache_dir,
)
from loader.loader import open_loader
from loader.modes import RefreshMode
from logs import configure_logging
from snapshot.reader import CorruptSnapshot, load_snapshot
from snapshot.writer import snapshot_records
from store.disk import IOFailure, SnapshotStore
from verify.verify import verify_snapshots


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root",
        default=".",
        help="Project root holding symcache.toml (default: .)",
    )
    parser.add_argument(
        "--cache-dir",
        default=None,
        help="Snapshot directory (default: config cache_dir)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="symcache")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log records to this file",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser(
        "resolve", help="Resolve a symbol through the cache and print it"
    )
    resolve_parser.add_argument("identifier", help="Symbol identifier")
    resolve_parser.add_argument(
        "--kind",
        choices=[kind.value for kind in SymbolKind],
        default=SymbolKind.CLASS.value,
        help="Symbol kind (default: class)",
    )
    resolve_parser.add_argument(
        "--refresh",
        action="store_true",
        help="Bypass cached tiers and recompute",
    )
    _add_common_paths(resolve_parser)

    show_parser = subparsers.add_parser(
        "show", help="Print a persisted snapshot without introspecting"
    )
    show_parser.add_argument("identifier", help="Symbol identifier")
    _add_common_paths(show_parser)

    clear_parser = subparsers.add_parser("clear", help="Clear cached snapshots")
    clear_parser.add_argument(
        "identifier", nargs="?", default=None, help="Identifier (default: all)"
    )
    _add_common_paths(clear_parser)

    verify_parser = subparsers.add_parser(
        "verify", help="Verify integrity and determinism of snapshots"
    )
    _add_common_paths(verify_parser)

    return parser


def _resolve_cache_dir(
    root: Path, cache_dir: str | None, config: SymcacheConfig | None = None
) -> Path:
    if cache_dir is None:
        if config is None:
            config = load_config(root)
        return resolve_cache_dir(root, config.cache_dir)
    return Path(cache_dir).expanduser().resolve()


def _print_symbol(identifier: str, symbol: SymbolDescriptor) -> None:
    payload = {
        "identifier": identifier,
        "kind": symbol.kind.value,
        "records": snapshot_records(symbol),
    }
    data = orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)
    sys.stdout.write(data.decode("utf-8") + "\n")


def _handle_resolve(
    root: Path, identifier: str, kind: str, refresh: bool, cache_dir: str | None
) -> int:
    config = load_config(root)
    resolved_cache_dir = _resolve_cache_dir(root, cache_dir, config)
    mode = RefreshMode.refresh_all() if refresh else config.refresh_mode()
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    facility = PythonIntrospector(aliases=config.aliases)
    try:
        with open_loader(resolved_cache_dir, facility=facility, mode=mode) as loader:
            symbol = loader.resolve(kind, identifier)
    except NotFound as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    except CorruptSnapshot as exc:
        sys.stderr.write(f"error: {exc}\n")
        sys.stderr.write("hint: run 'symcache clear IDENTIFIER' or use --refresh\n")
        return 1
    _print_symbol(identifier, symbol)
    return 0


def _handle_show(root: Path, identifier: str, cache_dir: str | None) -> int:
    store = SnapshotStore(_resolve_cache_dir(root, cache_dir))
    data = store.read(store.path_for(identifier))
    if data is None:
        sys.stderr.write(f"error: no snapshot for {identifier}\n")
        return 2
    try:
        symbol = load_snapshot(data, expected_identifier=identifier)
    except CorruptSnapshot as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    _print_symbol(identifier, symbol)
    return 0


def _handle_clear(root: Path, identifier: str | None, cache_dir: str | None) -> int:
    with open_loader(_resolve_cache_dir(root, cache_dir)) as loader:
        loader.clear_cache(identifier)
    return 0


def _handle_verify(root: Path, cache_dir: str | None) -> int:
    resolved_cache_dir = _resolve_cache_dir(root, cache_dir)
    try:
        result = verify_snapshots(resolved_cache_dir)
    except (FileNotFoundError, NotADirectoryError) as exc:
        sys.stderr.write(f"cache-dir: {resolved_cache_dir}\n")
        sys.stderr.write(f"error: {exc}\n")
        return 2
    if not result.ok:
        for label, names in (
            ("corrupt", result.corrupt),
            ("unstable", result.unstable),
        ):
            for name in names:
                sys.stderr.write(f"{label}: {name}\n")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    log_file = Path(args.log_file).expanduser() if args.log_file else None
    configure_logging(verbose=args.verbose, log_file=log_file)

    root = Path(args.root).expanduser().resolve()

    try:
        if args.command == "resolve":
            return _handle_resolve(
                root, args.identifier, args.kind, args.refresh, args.cache_dir
            )

        if args.command == "show":
            return _handle_show(root, args.identifier, args.cache_dir)

        if args.command == "clear":
            return _handle_clear(root, args.identifier, args.cache_dir)

        if args.command == "verify":
            return _handle_verify(root, args.cache_dir)
    except (ConfigError, IOFailure) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
