"""
ClassiCore Structured Logger
============================

Provides :class:`ClassiLogger`, a logging facade that writes Rich console
output to stderr and, optionally, plain or JSON-lines records to a rotating
log file.

Every record carries the component name (``tool_name``) and the operation
currently in progress (``encode``, ``analyze`` ...), plus any keyword
arguments passed to the log call as a structured ``extra`` mapping.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

_CONTEXT_FIELDS = ("tool_name", "operation", "family")


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single-line JSON object.

    Output fields::

        {
          "timestamp": "...",
          "level": "INFO",
          "logger": "classicore.engine",
          "message": "...",
          "tool_name": "engine",
          "operation": "encode",
          "family": "vigenere",
          "extra": { ... },
          "exc_info": "..."
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr in _CONTEXT_FIELDS:
            val = getattr(record, attr, None)
            if val is not None:
                entry[attr] = val

        extra = getattr(record, "classi_extra", None)
        if extra is not None:
            entry["extra"] = extra

        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class _ColorConsoleHandler(RichHandler):
    """:class:`rich.logging.RichHandler` bound to a stderr console with the
    ClassiCore level palette."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(
            console=Console(theme=_LOG_THEME, stderr=True),
            show_path=False,
            show_time=True,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=False,
            **kwargs,
        )


class ClassiLogger:
    """Context-aware logger bound to one ClassiCore component.

    Usage::

        log = ClassiLogger("engine", log_level="DEBUG")
        with log.operation("encode", family="caesar"):
            log.debug("Key normalised", key_length=5)
        with log.timed("kasiski search") as timer:
            ...
        print(timer.elapsed)

    Args:
        tool_name:       Component name, appended to the ``classicore.`` logger.
        log_level:       Minimum severity (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file:        Rotating log-file path. ``None`` or ``""`` disables it.
        json_logs:       If ``True`` the file handler emits JSON lines.
        max_bytes:       Maximum log-file size before rotation.
        backup_count:    Number of rotated backup files to keep.
        console_output:  If ``True`` attach the Rich stderr handler.
    """

    def __init__(
        self,
        tool_name: str,
        *,
        log_level: str = "WARNING",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 5_242_880,
        backup_count: int = 3,
        console_output: bool = True,
    ) -> None:
        self._tool_name = tool_name
        self._operation: str | None = None
        self._family: str | None = None

        level = getattr(logging, log_level.upper(), logging.WARNING)
        self._logger = logging.getLogger(f"classicore.{tool_name}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        self._logger.handlers.clear()

        if console_output:
            self._logger.addHandler(_ColorConsoleHandler(level=level))

        if log_file:
            file_path = Path(log_file)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(
                filename=str(file_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            fh.setLevel(level)
            if json_logs:
                fh.setFormatter(_JSONFormatter())
            else:
                fh.setFormatter(
                    logging.Formatter(
                        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                        datefmt="%Y-%m-%dT%H:%M:%S%z",
                    )
                )
            self._logger.addHandler(fh)

    # ------------------------------------------------------------------ #
    #  Operation scope
    # ------------------------------------------------------------------ #

    class _OperationContext:
        """Temporarily binds an operation (and cipher family) name."""

        def __init__(
            self, parent: ClassiLogger, operation: str, family: str | None
        ) -> None:
            self._parent = parent
            self._operation = operation
            self._family = family
            self._prev: tuple[str | None, str | None] = (None, None)

        def __enter__(self) -> ClassiLogger:
            self._prev = (self._parent._operation, self._parent._family)
            self._parent._operation = self._operation
            self._parent._family = self._family
            return self._parent

        def __exit__(self, *exc: Any) -> None:
            self._parent._operation, self._parent._family = self._prev

    def operation(self, name: str, family: str | None = None) -> _OperationContext:
        """Return a context manager that tags records with *name* and *family*."""
        return self._OperationContext(self, name, family)

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    def _enrich(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        extra = kwargs.pop("extra", {}) or {}

        structured: dict[str, Any] = {}
        for key in list(kwargs):
            if key not in ("exc_info", "stack_info", "stacklevel"):
                structured[key] = kwargs.pop(key)

        extra["tool_name"] = self._tool_name
        extra["operation"] = self._operation
        extra["family"] = self._family
        if structured:
            extra["classi_extra"] = structured

        kwargs["extra"] = extra
        return kwargs

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **self._enrich(kwargs))

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **self._enrich(kwargs))

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **self._enrich(kwargs))

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **self._enrich(kwargs))

    # ------------------------------------------------------------------ #
    #  Timing helper
    # ------------------------------------------------------------------ #

    class _TimingContext:
        """Measures wall time; ``elapsed`` is frozen once the block exits."""

        def __init__(self, logger_inst: ClassiLogger, label: str) -> None:
            self._logger = logger_inst
            self._label = label
            self._start: float = 0.0
            self._stop: float | None = None

        def __enter__(self) -> ClassiLogger._TimingContext:
            self._start = time.perf_counter()
            self._logger.debug("Started: %s", self._label)
            return self

        def __exit__(self, exc_type: Any, *exc: Any) -> None:
            self._stop = time.perf_counter()
            if exc_type is None:
                self._logger.debug(
                    "Completed: %s (%.4f sec)", self._label, self.elapsed
                )

        @property
        def elapsed(self) -> float:
            end = self._stop if self._stop is not None else time.perf_counter()
            return end - self._start

    def timed(self, label: str) -> _TimingContext:
        """Context manager that logs start / finish and exposes elapsed time."""
        return self._TimingContext(self, label)

    @property
    def tool_name(self) -> str:
        return self._tool_name

    @property
    def underlying(self) -> logging.Logger:
        """Direct access to the stdlib :class:`logging.Logger`."""
        return self._logger
