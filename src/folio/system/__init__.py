"""
System configuration package.

Exports:
    - SystemConfig: Complete system configuration dataclass
    - get_system_config: Get system config singleton
    - reload_system_config: Force reload system config
    - LoggerFactory: Factory for creating configured loggers
    - LoggingConfig: Logging configuration model
"""

from folio.system.config import (
    AccountingConfig,
    CostBasisScope,
    StorageBackend,
    StorageConfig,
    SystemConfig,
    get_system_config,
    reload_system_config,
)
from folio.system.log_system import LoggerFactory, LoggingConfig

__all__ = [
    "AccountingConfig",
    "CostBasisScope",
    "StorageBackend",
    "StorageConfig",
    "SystemConfig",
    "get_system_config",
    "reload_system_config",
    "LoggerFactory",
    "LoggingConfig",
]
