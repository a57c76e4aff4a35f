"""Structured logging for Folio.

structlog renders every record, including records from plain stdlib
loggers, through one processor chain. Console output goes to stderr;
an optional JSON-lines file can run at its own level.

Log time is written under ``log_timestamp`` so a ledger field called
``timestamp`` on a trade or cash event is never overwritten.
"""

import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

import structlog
from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
TimestampFormat = Literal["iso", "compact", "time"]

DEFAULT_LOG_FILE = Path("logs/folio.log")

# strftime patterns; "{cs}" is filled with hundredths of a second
_TIMESTAMP_PATTERNS: dict[str, str] = {
    "compact": "%y%m%d-%H%M%S.{cs}",  # 120305-100000.12
    "time": "%H:%M:%S.{cs}",  # 10:00:00.12
}

_LEVEL_COLORS = {
    "debug": "\033[36m",
    "info": "\033[32m",
    "warning": "\033[33m",
    "error": "\033[31m",
    "critical": "\033[35m",
}
_RESET = "\033[0m"
_DIM = "\033[90m"


class LoggingConfig(BaseModel):
    """Logging settings, usually built from the ``logging`` section of the system config.

    What each level shows:

    - INFO: portfolio lifecycle, recorded trades and cash, ledger loads
    - DEBUG: store setup and per-query accounting results
    - WARNING: query bounds ignored as malformed, failed validation
    - ERROR: storage failures
    """

    level: LogLevel = Field(default="INFO", description="Console log level")
    format: Literal["console", "json"] = Field(default="console", description="Console output format")
    timestamp_format: TimestampFormat = Field(
        default="compact",
        description="iso (2012-03-05T10:00:00.123456+00:00), compact (120305-100000.12) or time (10:00:00.12)",
    )
    enable_file: bool = Field(default=False, description="Also write JSON lines to file_path")
    file_path: Path | None = Field(default=None, description="Log file, logs/folio.log when unset")
    file_level: LogLevel = Field(default="WARNING", description="File log level")
    file_rotation: bool = Field(default=True, description="Roll the file over at max_file_size_mb")
    max_file_size_mb: int = Field(default=10, gt=0, description="Size in MB that triggers a rollover")
    backup_count: int = Field(default=3, ge=0, description="Rolled-over files kept")


def format_log_timestamp(now: datetime, fmt: str) -> str:
    """Render a UTC instant in one of the configured timestamp formats."""
    pattern = _TIMESTAMP_PATTERNS.get(fmt)
    if pattern is None:
        return now.isoformat()
    return now.strftime(pattern.format(cs=f"{now.microsecond // 10000:02d}"))


def _timestamper(fmt: str) -> Any:
    def stamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict["log_timestamp"] = format_log_timestamp(datetime.now(timezone.utc), fmt)
        return event_dict

    return stamp


def _render_console(logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
    """One line per record: time, coloured level, event, then key=value pairs."""
    stamp = event_dict.pop("log_timestamp", "")
    level = str(event_dict.pop("level", "info")).lower()
    event = event_dict.pop("event", "")
    source = event_dict.pop("logger", "")

    line = f"{stamp} [{_LEVEL_COLORS.get(level, '')}{level}{_RESET}] {event}"
    context = " ".join(f"{key}={value}" for key, value in sorted(event_dict.items()) if not key.startswith("_"))
    if context:
        line += f" {_DIM}|{_RESET} {context}"
    if source and source != "folio":
        line += f" {_DIM}({source}){_RESET}"
    return line


def _file_handler(config: LoggingConfig, path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    if config.file_rotation:
        return RotatingFileHandler(
            path,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(path, encoding="utf-8")


class LoggerFactory:
    """
    Process-wide logging setup and logger access.

    Example:
        LoggerFactory.configure(get_system_config().logging.to_logger_config())
        logger = LoggerFactory.get_logger()
        logger.info("portfolio_service.trade_recorded", sid="600036", quantity="100")
    """

    _config: LoggingConfig | None = None
    _configured: bool = False

    @classmethod
    def configure(cls, config: LoggingConfig | None = None) -> None:
        """
        Install handlers on the root logger and configure structlog.

        Calling it again replaces the previous setup.

        Args:
            config: Settings to apply; defaults when None
        """
        config = config or LoggingConfig()
        if config.enable_file and config.file_path is None:
            config.file_path = DEFAULT_LOG_FILE
        cls._config = config

        shared: list[Any] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _timestamper(config.timestamp_format),
            structlog.processors.StackInfoRenderer(),
        ]

        console = logging.StreamHandler(sys.stderr)
        console.setLevel(config.level)
        console.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=_render_console if config.format == "console" else structlog.processors.JSONRenderer(),
                foreign_pre_chain=shared,
            )
        )
        handlers: list[logging.Handler] = [console]

        if config.enable_file:
            assert config.file_path is not None
            to_file = _file_handler(config, config.file_path)
            to_file.setLevel(config.file_level)
            to_file.setFormatter(
                structlog.stdlib.ProcessorFormatter(
                    processor=structlog.processors.JSONRenderer(),
                    foreign_pre_chain=shared,
                )
            )
            handlers.append(to_file)

        logging.basicConfig(level=min(h.level for h in handlers), handlers=handlers, force=True)

        exceptions: list[Any]
        if config.format == "console":
            exceptions = [
                structlog.dev.set_exc_info,
                structlog.processors.ExceptionRenderer(structlog.dev.plain_traceback),  # type: ignore[arg-type]
            ]
        else:
            exceptions = [structlog.processors.format_exc_info]

        structlog.configure(
            processors=[*shared, *exceptions, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        cls._configured = True

    @classmethod
    def get_logger(cls, name: str | None = None):
        """
        Return a structlog logger, configuring defaults on first use.

        Args:
            name: Logger name; the calling module's __name__ when None
        """
        if not cls._configured:
            cls.configure()

        if name is None:
            frame = sys._getframe(1)
            name = frame.f_globals.get("__name__", "folio")

        return structlog.get_logger(name)

    @classmethod
    def get_config(cls) -> LoggingConfig:
        return cls._config if cls._config is not None else LoggingConfig()

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def reset(cls) -> None:
        """Drop every root handler and structlog setting (used by tests)."""
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        root.setLevel(logging.NOTSET)
        cls._config = None
        cls._configured = False
        structlog.reset_defaults()
