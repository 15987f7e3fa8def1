# dumpcolor/utils.py
from __future__ import annotations

import atexit
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union

__all__ = ["setup", "reconfigure", "shutdown", "get_logger", "log"]

# ---- internal globals ----
_log_name = "dumpcolor"
log = logging.getLogger(_log_name)
log.addHandler(logging.NullHandler())
log.setLevel(logging.WARNING)
log.propagate = False

_q: Optional[queue.SimpleQueue] = None
_listener: Optional[QueueListener] = None
_configured = False


def setup(
    log_dir: Optional[Union[str, os.PathLike]] = None,
    level: Union[int, str] = "WARNING",
    console: bool = True,
    filename: str = "dumpcolor.log",
    rotate_when: str = "midnight",
    rotate_backup: int = 7,
    encoding: str = "utf-8",
) -> logging.Logger:
    """
    Configure async logging. Call once at program start (e.g., in main).
    - console output always goes to stderr; stdout carries the rendered capture.
    - log_dir=None logs to the console only; with a directory, also write a
      file rotated daily, keeping rotate_backup copies.
    - level accepts "DEBUG"/"INFO"/"WARNING"/"ERROR".
    """
    global _q, _listener, _configured

    if _configured:
        return log  # idempotent

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    log.setLevel(level)

    fmt = "[%(asctime)s] %(levelname).1s %(process)d %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers = []
    if console:
        h = logging.StreamHandler(sys.stderr)
        h.setFormatter(formatter)
        h.setLevel(level)
        handlers.append(h)

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=str(log_path / filename),
            when=rotate_when,
            backupCount=rotate_backup,
            encoding=encoding,
            utc=False,
            delay=True,
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        handlers.append(file_handler)

    # the hot loop only enqueues; handler I/O happens on the listener thread
    _q = queue.SimpleQueue()
    qh = QueueHandler(_q)
    qh.setLevel(level)

    _clear_handlers(log)
    log.addHandler(qh)

    _listener = QueueListener(_q, *handlers, respect_handler_level=True)
    _listener.start()
    atexit.register(shutdown)

    _configured = True
    return log


def _clear_handlers(logger: logging.Logger) -> None:
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()


def shutdown() -> None:
    """Drain the queue and stop the listener. Safe to call more than once."""
    global _listener, _configured
    if _listener:
        _listener.stop()
        _listener = None
    _configured = False


def reconfigure(**kwargs) -> logging.Logger:
    """Tear down the running setup and apply new settings, e.g. once a config file is read."""
    shutdown()
    return setup(**kwargs)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a child logger: get_logger("stages") -> dumpcolor.stages
    """
    if not name:
        return log
    return logging.getLogger(f"{_log_name}.{name}")
