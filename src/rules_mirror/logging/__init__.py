from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

from rules_mirror.config.models import LoggingSettings

# Library loggers that are chatty at INFO; kept at WARNING unless DEBUG is requested.
_QUIET_LOGGERS = ("mcp", "mcp.server.lowlevel.server")


def _resolve_level(name: str) -> int:
    level = logging.getLevelNamesMapping().get(name.strip().upper())
    if level is None:
        raise ValueError(f"Invalid logging level: {name}")
    return level


def _build_file_handler(settings: LoggingSettings, formatter: logging.Formatter, level: int) -> Optional[logging.Handler]:
    file_path = settings.file.path.strip()
    if not file_path:
        return None

    file_path_obj = Path(file_path)
    file_path_obj.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=str(file_path_obj),
        when="midnight",
        interval=1,
        backupCount=settings.file.rotation.backup_count,
        encoding="utf-8",
    )
    handler.suffix = "%Y-%m-%d"
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def init_logging(settings: LoggingSettings, *, level_override: Optional[str] = None) -> None:
    """
    Initialize application logging.

    Console output goes to stderr only. When serving over stdio, stdout carries
    protocol messages and must never receive log lines.
    """

    root_logger = logging.getLogger()
    level = _resolve_level(level_override or settings.level)
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        fmt="[%(asctime)s][%(levelname)s][%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    try:
        file_handler = _build_file_handler(settings, formatter, level)
    except OSError:
        root_logger.error(
            "File logging handler failed to initialize. path=%s",
            settings.file.path,
            exc_info=True,
        )
        return
    if file_handler is not None:
        root_logger.addHandler(file_handler)


__all__ = ["init_logging"]
