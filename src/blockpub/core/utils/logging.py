"""Structured logging setup"""

import atexit
import sys
from pathlib import Path
from typing import IO, Optional

import structlog


VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_log_file: Optional[IO[str]] = None
_log_path: Optional[Path] = None


def close_log_file() -> None:
    """Close the file opened by configure_logging, if any."""
    global _log_file, _log_path
    if _log_file is not None and not _log_file.closed:
        _log_file.close()
    _log_file = None
    _log_path = None


atexit.register(close_log_file)


def _open_log_file(path: Path) -> IO[str]:
    """Reuse the open handle for path, or close it and open path for appending."""
    global _log_file, _log_path
    path = path.resolve()
    if _log_file is not None and not _log_file.closed and _log_path == path:
        return _log_file
    close_log_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    _log_file = path.open("a", encoding="utf-8")
    _log_path = path
    return _log_file


def configure_logging(level: str = "INFO", log_file: str | Path | None = None) -> None:
    """Configure structlog to emit JSON lines.

    Lines go to log_file (parent directories are created) or stderr when no
    file is given. Only one log file is held open at a time; it is closed on
    reconfiguration and at interpreter exit. Unknown levels fall back to INFO.

    Log levels:
    - DEBUG: style patches, stale ids ignored by the editor
    - INFO: block added/moved/deleted, documents saved, uploads
    - WARNING: upload failures
    - ERROR: persistence failures
    """
    level = level.upper()
    if level not in VALID_LEVELS:
        level = "INFO"

    if log_file:
        factory = structlog.WriteLoggerFactory(file=_open_log_file(Path(log_file)))
    else:
        close_log_file()
        factory = structlog.PrintLoggerFactory(file=sys.stderr)

    # loggers are rebuilt per call so none keeps a handle closed by a later configure
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=factory,
        cache_logger_on_first_use=False,
    )
