"""
System configuration for Folio.

One configuration for the whole system, loaded from YAML:

    accounting:  how positions and costs are computed (WHAT the numbers mean)
    storage:     where ledger entries live
    logging:     how the system reports what it does

Lookup order for the config file:
    1. Explicit path passed to SystemConfig.load() / get_system_config()
    2. $FOLIO_CONFIG
    3. ./config/folio.yaml
    4. Built-in defaults

String values may reference environment variables as ${VAR}; undefined
variables keep their placeholder.
"""

import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from folio.system.log_system import LoggingConfig as LoggerConfig

CONFIG_ENV_VAR = "FOLIO_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/folio.yaml")

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class CostBasisScope(str, Enum):
    """Which trades feed the moving-average cost of a position query."""

    HISTORY = "history"  # every trade up to `till`, regardless of `from`
    WINDOW = "window"  # only trades inside [from, till]


class StorageBackend(str, Enum):
    """Ledger entry store implementation."""

    MEMORY = "memory"
    SQLITE = "sqlite"


@dataclass
class AccountingConfig:
    """Accounting policies for the position and cash queries."""

    cost_basis_scope: CostBasisScope = CostBasisScope.HISTORY
    display_decimals: int = 4
    drop_flat_positions: bool = True

    def __post_init__(self) -> None:
        self.cost_basis_scope = CostBasisScope(self.cost_basis_scope)
        if self.display_decimals < 0:
            raise ValueError(f"display_decimals must be >= 0, got {self.display_decimals}")


@dataclass
class StorageConfig:
    """Ledger storage configuration."""

    backend: StorageBackend = StorageBackend.MEMORY
    sqlite_path: str = "data/folio.db"

    def __post_init__(self) -> None:
        self.backend = StorageBackend(self.backend)


@dataclass
class LoggingConfig:
    """Logging section as written in the config file."""

    level: str = "INFO"
    format: str = "console"
    timestamp_format: str = "compact"
    enable_file: bool = False
    file_path: str = "logs/folio.log"
    file_level: str = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3

    def to_logger_config(self) -> LoggerConfig:
        """Convert to the LoggerFactory configuration model."""
        return LoggerConfig(
            level=self.level,  # type: ignore[arg-type]
            format=self.format,  # type: ignore[arg-type]
            timestamp_format=self.timestamp_format,  # type: ignore[arg-type]
            enable_file=self.enable_file,
            file_path=Path(self.file_path),
            file_level=self.file_level,  # type: ignore[arg-type]
            file_rotation=self.file_rotation,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class SystemConfig:
    """Complete system configuration."""

    accounting: AccountingConfig = field(default_factory=AccountingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "SystemConfig":
        """
        Load configuration, merging file values over built-in defaults.

        Args:
            path: Explicit config file. Missing files fall back to defaults.

        Returns:
            SystemConfig instance
        """
        config_path = _resolve_config_path(path)

        data: dict[str, Any] = {}
        if config_path is not None and config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}

        return cls._from_dict(_substitute_env_vars(data))

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        merged = _deep_merge(_defaults(), data)
        return cls(
            accounting=AccountingConfig(**merged["accounting"]),
            storage=StorageConfig(**merged["storage"]),
            logging=LoggingConfig(**merged["logging"]),
        )


def _defaults() -> dict[str, Any]:
    return {
        "accounting": {
            "cost_basis_scope": CostBasisScope.HISTORY.value,
            "display_decimals": 4,
            "drop_flat_positions": True,
        },
        "storage": {
            "backend": StorageBackend.MEMORY.value,
            "sqlite_path": "data/folio.db",
        },
        "logging": {},
    }


def _resolve_config_path(path: Path | str | None) -> Path | None:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH
    return None


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base. Override wins on conflict."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(value: Any) -> Any:
    """Replace ${VAR} references in strings, recursing into dicts and lists."""
    if isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]
    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


_system_config: SystemConfig | None = None


def get_system_config(path: Path | str | None = None) -> SystemConfig:
    """Get the system config singleton. An explicit path always reloads."""
    global _system_config
    if path is not None:
        _system_config = SystemConfig.load(path)
    elif _system_config is None:
        _system_config = SystemConfig.load()
    return _system_config


def reload_system_config(path: Path | str | None = None) -> SystemConfig:
    """Force a reload of the system config singleton."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
