from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

from loader.modes import RefreshMode

CONFIG_FILENAME = "symcache.toml"

DEFAULT_CACHE_DIR = ".symcache"

ModeName = Literal["fastest", "refresh"]


class SymcacheConfig(BaseModel):
    """Configuration for the symbol loader."""

    model_config = ConfigDict(extra="forbid")

    cache_dir: str = Field(
        default=DEFAULT_CACHE_DIR,
        description="Directory holding persisted snapshots",
    )
    mode: ModeName = Field(
        default="fastest",
        description="Refresh mode used when no selective refresh list is given",
    )
    refresh: list[str] = Field(
        default_factory=list,
        description="Identifiers to recompute on every request (selective mode)",
    )
    aliases: dict[str, str] = Field(
        default_factory=dict,
        description="Identifier -> dotted import path of the class",
    )

    @field_validator("refresh", mode="before")
    @classmethod
    def validate_refresh(cls, v: Any) -> Any:
        """Reject blank identifiers in the refresh list."""
        if v is None:
            return []
        if not isinstance(v, list):
            msg = "refresh must be a list of identifiers"
            raise TypeError(msg)
        for identifier in v:
            if not isinstance(identifier, str) or not identifier.strip():
                msg = f"Invalid refresh identifier: {identifier!r}"
                raise ValueError(msg)
        return v

    def refresh_mode(self) -> RefreshMode:
        """Selective when ``refresh`` lists identifiers, else ``mode``."""
        if self.refresh:
            return RefreshMode.selective(self.refresh)
        return RefreshMode.coerce(self.mode)


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_cache_dir(root: Path, cache_dir: str) -> Path:
    """Resolve a config-provided cache_dir against the project root.

    Relative paths are anchored at ``root``; absolute paths and ``~`` are
    honored as given.
    """
    if not cache_dir or not cache_dir.strip():
        msg = "cache_dir must be a non-empty path"
        raise ConfigError(msg)

    path = Path(cache_dir).expanduser()
    if not path.is_absolute():
        path = Path(root) / path

    try:
        return path.resolve()
    except OSError as exc:
        msg = f"Failed to resolve cache_dir '{cache_dir}': {exc}"
        raise ConfigError(msg) from exc


def load_config(root: Path) -> SymcacheConfig:
    """Load configuration from symcache.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return SymcacheConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return SymcacheConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
