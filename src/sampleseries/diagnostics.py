from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOGGER_NAME = "sampleseries"
CONSOLE_FORMAT = "%(asctime)s.%(msecs)03d - %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"
FILE_FORMAT = "%(asctime)s - %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

_MARKER = "_sampleseries_diagnostics"


class Diagnostics:
    """Write-only message sink backed by the ``sampleseries`` logger.

    Delivery problems are handled by the logging handlers themselves
    (``Handler.handleError``), so callers never see an exception.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(LOGGER_NAME)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def record(self, message: str) -> None:
        self._logger.info(message)

    def record_failure(self, message: str, exc: BaseException) -> None:
        self._logger.error(message, exc_info=(type(exc), exc, exc.__traceback__))


def _mark(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _MARKER, True)
    return handler


def _file_handler(path: Path) -> logging.FileHandler:
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
    return handler


def _fallback_handler(fallback_file: Path) -> logging.FileHandler:
    fallback_file.parent.mkdir(parents=True, exist_ok=True)
    if not fallback_file.exists():
        with fallback_file.open("a", encoding="utf-8") as fh:
            fh.write(f"Log started at: {datetime.now():%Y-%m-%d %H:%M:%S}\n")
    return _file_handler(fallback_file)


def open_log_handler(
    log_dir: Path,
    log_file: str,
    fallback_file: Path,
) -> tuple[Optional[logging.FileHandler], Optional[str]]:
    """Open the primary log file, switching to ``fallback_file`` on failure.

    Returns the handler (None when neither location is writable) and a notice
    describing any fallback that happened.
    """
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return _file_handler(log_dir / log_file), None
    except PermissionError:
        notice = f"Unable to write to {log_dir}, using fallback log at {fallback_file}"
    except OSError as exc:
        notice = f"Log directory {log_dir} unavailable ({exc}), using fallback log at {fallback_file}"
    try:
        return _fallback_handler(fallback_file), notice
    except OSError as exc:
        return None, f"{notice}; fallback failed: {exc}"


def configure_diagnostics(
    level: int = logging.INFO,
    *,
    log_dir: Optional[Path] = None,
    log_file: str = "application_log.txt",
    fallback_file: Optional[Path] = None,
    console: bool = True,
) -> Diagnostics:
    """Install console and file handlers on the package logger.

    Handlers installed by an earlier call are closed and replaced. Passing
    ``log_dir=None`` disables file logging.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, _MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    if console:
        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
        logger.addHandler(_mark(stream))

    notice = None
    if log_dir is not None:
        fallback = fallback_file or Path(log_dir) / f"fallback_{log_file}"
        handler, notice = open_log_handler(Path(log_dir), log_file, Path(fallback))
        if handler is not None:
            logger.addHandler(_mark(handler))
    if notice:
        logger.warning(notice)
    return Diagnostics(logger)
