"""Store configuration: location, format and matching semantics.

Configuration comes from YAML files, then ``DOCLITE_*`` environment
variables, then explicit arguments, later sources winning.
"""

import os
from pathlib import Path
from typing import Any, Literal

import msgspec
import yaml

from doclite.core.models import ExistsSemantics

DEFAULT_DB_NAME = "doclite.db"
GZIP_SUFFIX = ".gz"

BackendName = Literal["file", "sqlite", "memory"]


class StoreConfig(msgspec.Struct, kw_only=True):
    """Settings for opening a store.

    ``db_path`` wins when given; otherwise the path is ``db_dir/db_name``.
    """

    db_name: str = DEFAULT_DB_NAME
    db_dir: str | None = None
    db_path: str | None = None
    backend: BackendName = "file"
    use_gzip: bool = False
    strict: bool = False
    exists_semantics: Literal["presence", "truthy"] = "presence"
    indent: int | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "StoreConfig":
        """Build from a plain mapping, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__struct_fields__}
        try:
            return msgspec.convert(known, cls, strict=False)
        except msgspec.ValidationError as e:
            raise ValueError(f"Invalid store configuration: {e}") from e

    @classmethod
    def from_path(cls, location: str | Path, **overrides: Any) -> "StoreConfig":
        """Interpret a single location argument.

        An existing directory becomes ``db_dir``; anything else is taken as
        the full path of the database file.
        """
        path = Path(location).expanduser().resolve()
        if path.is_dir():
            data = {"db_dir": str(path)}
        else:
            data = {
                "db_name": path.name,
                "db_dir": str(path.parent),
                "db_path": str(path),
            }
        return cls.from_mapping({**data, **overrides})

    @property
    def exists(self) -> ExistsSemantics:
        """The ``$exists`` semantics as an enum."""
        return ExistsSemantics(self.exists_semantics)

    def resolve_path(self) -> Path:
        """Full path of the database file."""
        if self.db_path:
            return Path(self.db_path).expanduser().resolve()
        base = Path(self.db_dir).expanduser() if self.db_dir else default_data_dir()
        name = self.db_name.lstrip("/") or DEFAULT_DB_NAME
        return (base / name).resolve()

    @property
    def gzip_enabled(self) -> bool:
        """Compression is on when asked for or implied by the file name."""
        return self.use_gzip or self.resolve_path().name.endswith(GZIP_SUFFIX)


def default_data_dir() -> Path:
    """Directory used when no location is configured."""
    if env_dir := os.environ.get("DOCLITE_DATA_DIR"):
        return Path(env_dir)

    xdg_data_home = Path(
        os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
    )
    return xdg_data_home / "doclite"


def get_config_paths() -> list[Path]:
    """Configuration files in precedence order (last wins)."""
    xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return [
        xdg_config_home / "doclite" / "config.yaml",
        Path(".doclite.yaml"),
        Path("doclite.yaml"),
    ]


def read_config_file(path: Path) -> dict[str, Any]:
    """Load one YAML configuration file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")
    except OSError as e:
        raise ValueError(f"Error reading config file: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def env_overrides() -> dict[str, Any]:
    """Settings taken from ``DOCLITE_*`` environment variables."""
    overrides: dict[str, Any] = {}
    if db_path := os.environ.get("DOCLITE_DB_PATH"):
        overrides["db_path"] = db_path
    if backend := os.environ.get("DOCLITE_BACKEND"):
        overrides["backend"] = backend
    if gzip_flag := os.environ.get("DOCLITE_GZIP"):
        overrides["use_gzip"] = _parse_flag(gzip_flag)
    if strict_flag := os.environ.get("DOCLITE_STRICT"):
        overrides["strict"] = _parse_flag(strict_flag)
    return overrides


def _parse_flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_config(path: Path | None = None, **overrides: Any) -> StoreConfig:
    """Load configuration from files, environment and explicit overrides.

    Args:
        path: Explicit config file; replaces the default search paths.
        **overrides: Final values; None entries are ignored.
    """
    data: dict[str, Any] = {}
    paths = [path] if path else get_config_paths()
    for config_path in paths:
        if config_path.exists():
            data = merge_configs(data, read_config_file(config_path))

    data = merge_configs(data, env_overrides())
    data = merge_configs(data, {k: v for k, v in overrides.items() if v is not None})
    return StoreConfig.from_mapping(data)


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge configuration dictionaries, later ones winning."""
    result: dict[str, Any] = {}
    for config in configs:
        result = _deep_merge(result, config)
    return result


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
