"""Logging utilities for cartpy.

cartpy logs through loguru and is silent by default: the package calls
``logger.disable("cartpy")`` at import.  Use :func:`enable_logging` to add a
stderr handler that only shows cartpy records, and the returned
:class:`LoggingHandle` to remove it again.
"""

from __future__ import annotations

import contextlib
import sys
import threading
from typing import TYPE_CHECKING, ClassVar, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: str = __name__.split(".")[0]

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["short", "full"]

_SHORT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{function}</cyan> - "
    "<level>{message}</level> {extra}"
)
_FULL_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> {extra}"
)


class LoggingHandle:
    """Handle owning the stderr handler added by :func:`enable_logging`.

    Usable as a context manager.  The cartpy logger stays enabled while any
    handle is open; closing the last one disables it again, so fits return to
    being silent.

    Examples
    --------
    >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
    ...     DecisionTreeClassifier().fit(X, y)
    """

    _open: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._open.add(handler_id)

    @property
    def is_open(self) -> bool:
        return self.handler_id is not None

    def disable(self) -> None:
        """Remove the handler; calling it again does nothing."""
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._open.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._open:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        self.disable()


def enable_logging(*, level: LogLevel = "INFO", log_format: LogFormat = "short") -> LoggingHandle:
    """Enable cartpy logging to stderr.

    Parameters
    ----------
    level : {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}, default="INFO"
        Minimum level shown.  ``"INFO"`` reports one line per fit; ``"DEBUG"``
        adds one line per split and leaf.
    log_format : {"short", "full"}, default="short"
        ``"full"`` adds module and line number to every record.

    Returns
    -------
    LoggingHandle
        Handle used to remove the handler again.
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sys.stderr,
        level=level,
        filter=_is_cartpy_record,
        format=_SHORT_FORMAT if log_format == "short" else _FULL_FORMAT,
    )
    return LoggingHandle(handler_id)


def _is_cartpy_record(record: Record) -> bool:
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
