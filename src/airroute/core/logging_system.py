"""Logging setup for the route engine and its command-line harness.

Configuration comes from a YAML file (``config/logging.yaml``) or built-in
defaults. Each start rotates the combined log file, keeping the last few
runs. Route diagnostics are never reported through logging: they are
returned in ``ExpansionResult.errors``. Logging carries trace output only.

Platform-specific log locations:
    - macOS: ~/Library/Logs/AirRoute/airroute.log
    - Linux: ~/.airroute/logs/airroute.log
    - Windows: %AppData%/AirRoute/Logs/airroute.log

Typical usage example:
    from airroute.core.logging_system import get_logger, initialize_logging

    initialize_logging("config/logging.yaml")
    log = get_logger("airroute.cli")
    log.info("Expanding %s", route)
"""

import logging
import os
import platform
import time
from pathlib import Path
from typing import Any

import yaml

DEFAULT_LOG_FILENAME = "airroute.log"

_logging_config: dict[str, Any] = {}
_loggers_cache: dict[str, logging.Logger] = {}
_initialized = False


class LoggingError(Exception):
    """Raised when logging system operations fail."""


def get_platform_log_dir() -> Path:
    """Get platform-specific log directory.

    Returns:
        Path to the platform-appropriate log directory.

    Examples:
        >>> get_platform_log_dir()
        PosixPath('/home/user/.airroute/logs')
    """
    system = platform.system()

    if system == "Darwin":
        return Path.home() / "Library" / "Logs" / "AirRoute"
    elif system == "Windows":
        appdata = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return appdata / "AirRoute" / "Logs"
    else:
        return Path.home() / ".airroute" / "logs"


def rotate_logs(
    log_dir: Path, log_filename: str = DEFAULT_LOG_FILENAME, keep_count: int = 5
) -> None:
    """Rotate logs on startup, keeping the last N runs.

    ``airroute.log`` becomes ``airroute.log.1``, older files shift up by one
    and anything past ``keep_count`` is deleted.

    Args:
        log_dir: Directory containing log files.
        log_filename: Base name of the log file.
        keep_count: Number of old logs to keep.
    """
    log_file = log_dir / log_filename
    if not log_file.exists():
        return

    oldest_log = log_dir / f"{log_filename}.{keep_count}"
    if oldest_log.exists():
        oldest_log.unlink()

    for i in range(keep_count - 1, 0, -1):
        old_log = log_dir / f"{log_filename}.{i}"
        if old_log.exists():
            old_log.rename(log_dir / f"{log_filename}.{i + 1}")

    log_file.rename(log_dir / f"{log_filename}.1")


def initialize_logging(
    config_path: str | Path | None = None,
    use_platform_dir: bool = True,
    console_level: str | None = None,
) -> None:
    """Initialize the logging system.

    Should be called once at startup, before any logging occurs.

    Args:
        config_path: Path to a logging configuration YAML file.
            If None, uses the built-in defaults.
        use_platform_dir: If True, write logs to the platform log directory
            instead of the ``log_dir`` from the configuration.
        console_level: Overrides the console handler level (e.g. "DEBUG").

    Raises:
        LoggingError: If the configuration cannot be loaded.
    """
    global _logging_config, _initialized

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise LoggingError(f"Logging config file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise LoggingError(f"Failed to load logging config: {e}") from e

        _logging_config = _merge_with_defaults(loaded)
    else:
        _logging_config = _get_default_config()

    if use_platform_dir:
        _logging_config["log_dir"] = str(get_platform_log_dir())

    if console_level:
        _logging_config["console"]["level"] = console_level.upper()

    _close_root_handlers()

    log_dir = Path(_logging_config["log_dir"])
    combined = _logging_config["combined_log"]
    if combined.get("enabled", True):
        log_dir.mkdir(parents=True, exist_ok=True)
        rotate_logs(
            log_dir,
            combined.get("filename", DEFAULT_LOG_FILENAME),
            combined.get("backup_count", 5),
        )

    _loggers_cache.clear()
    _configure_root_logger()
    _initialized = True

    # Module loggers are created with logging.getLogger, so apply overrides now.
    for name in _logging_config.get("components") or {}:
        get_logger(name)


def _get_default_config() -> dict[str, Any]:
    return {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "date_format": "%Y-%m-%d %H:%M:%S",
        "log_dir": "logs",
        "combined_log": {
            "enabled": True,
            "filename": DEFAULT_LOG_FILENAME,
            "backup_count": 5,
        },
        "console": {
            "enabled": True,
            "level": "WARNING",
        },
        "components": {},
    }


def _merge_with_defaults(loaded: dict[str, Any]) -> dict[str, Any]:
    config = _get_default_config()
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key] = {**config[key], **value}
        else:
            config[key] = value
    return config


def _close_root_handlers() -> None:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()


def _configure_root_logger() -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers do the filtering

    console = _logging_config["console"]
    if console.get("enabled", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(_level(console.get("level", "WARNING")))
        console_handler.setFormatter(_get_formatter())
        root_logger.addHandler(console_handler)

    combined = _logging_config["combined_log"]
    if combined.get("enabled", True):
        log_file = Path(_logging_config["log_dir"]) / combined.get(
            "filename", DEFAULT_LOG_FILENAME
        )
        # Already rotated on startup, so start a fresh file.
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(_level(_logging_config.get("level", "INFO")))
        file_handler.setFormatter(_get_formatter())
        root_logger.addHandler(file_handler)


def _level(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise LoggingError(f"Unknown log level: {name}")
    return level


class MillisecondFormatter(logging.Formatter):
    """Formatter that appends milliseconds with a dot separator."""

    def formatTime(self, record, datefmt=None):
        ct = self.converter(record.created)
        s = time.strftime(datefmt or "%Y-%m-%d %H:%M:%S", ct)
        return f"{s}.{int(record.msecs):03d}"


def _get_formatter() -> logging.Formatter:
    return MillisecondFormatter(
        _logging_config.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
        _logging_config.get("date_format", "%Y-%m-%d %H:%M:%S"),
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a component.

    Loggers are cached. A component can be given its own level, or be
    disabled, under the ``components`` section of the logging config.

    Args:
        name: Logger name (typically a dotted module or component name).

    Returns:
        Configured logger instance.

    Examples:
        >>> log = get_logger("airroute.cli")
        >>> log.debug("Loaded %d airways", count)
    """
    if not _initialized:
        initialize_logging()

    if name in _loggers_cache:
        return _loggers_cache[name]

    logger = logging.getLogger(name)
    component_config = _logging_config.get("components", {}).get(name, {})

    if component_config.get("enabled", True):
        if "level" in component_config:
            logger.setLevel(_level(component_config["level"]))
    else:
        logger.disabled = True

    _loggers_cache[name] = logger
    return logger


def shutdown_logging() -> None:
    """Flush and close all handlers.

    The next ``get_logger`` or ``initialize_logging`` call starts over.
    """
    global _initialized

    logging.shutdown()
    _close_root_handlers()
    _loggers_cache.clear()
    _initialized = False
