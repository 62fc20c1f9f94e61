from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ENGINE_LOGGER_NAME = "AudioFocus.Engine"
LOG_DIR_ENV_VAR = "AUDIOFOCUS_LOG_DIR"
PROPAGATE_ENV_VAR = "AUDIOFOCUS_PROPAGATE_LOGS"
LOG_FILENAME = "audiofocus-engine.log"
_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


class ReleaseLogLevelFilter(logging.Filter):
    """Promote debug logs to INFO in release mode so diagnostics stay visible."""

    def __init__(self, release_mode: bool) -> None:
        super().__init__()
        self._release_mode = release_mode

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - logging shim
        if self._release_mode and record.levelno == logging.DEBUG:
            record.levelno = logging.INFO
            record.levelname = "INFO"
        return True


def resolve_logs_dir(base_path: Optional[Path] = None, log_dir_name: str = "AudioFocus") -> Path:
    """
    Resolve the directory to store engine logs.

    Strategy:
    - Use AUDIOFOCUS_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `<base_path or cwd>/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        try:
            candidates.append(Path(env_override).expanduser())
        except Exception:
            pass

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / "logs")
    candidates.append(cache_home / "logs")
    candidates.append((base_path or Path.cwd()) / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except Exception:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str = LOG_FILENAME,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter or logging.Formatter(_FORMAT))
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


def configure_engine_logger(
    debug_enabled: bool,
    *,
    log_dir: Optional[Path] = None,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """Set level, release filter and propagation on the engine's root logger.

    A file handler is attached when ``log_dir`` or ``handler`` is given; calling
    again never stacks duplicate handlers. The release filter is installed on
    that handler too, since logger filters skip records from child loggers.
    """
    logger = logging.getLogger(ENGINE_LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug_enabled))
    logger.propagate = os.environ.get(PROPAGATE_ENV_VAR, "").lower() in {"1", "true", "yes", "on"}
    _install_release_filter(logger, debug_enabled)
    target = handler
    if target is None and log_dir is not None:
        target = build_rotating_file_handler(log_dir)
    if target is not None:
        for existing in list(logger.handlers):
            if getattr(existing, "_audiofocus_handler", False):
                logger.removeHandler(existing)
                existing.close()
        _install_release_filter(target, debug_enabled)
        setattr(target, "_audiofocus_handler", True)
        logger.addHandler(target)
    return logger


def _install_release_filter(filterer: logging.Filterer, debug_enabled: bool) -> None:
    for existing in list(filterer.filters):
        if isinstance(existing, ReleaseLogLevelFilter):
            filterer.removeFilter(existing)
    filterer.addFilter(ReleaseLogLevelFilter(release_mode=not debug_enabled))
