"""Logging for nativegen.

Every module logs through ``get_logger(__name__)``; the ``nativegen`` logger
owns the handlers. Console output is split by level (errors go to stderr) and
a directory can be configured for a plain text log and a JSON lines log.

Records emitted while a class or a function is being generated carry the
element in a ``target`` attribute, e.g. ``GL15.glBufferData``.
"""

import contextlib
import contextvars
import datetime as _dt
import json
import logging as _logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

_ROOT = "nativegen"

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(target)s%(message)s"
_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(target)s%(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

_LEVEL_COLORS = {
    _logging.DEBUG: "\033[36m",
    _logging.INFO: "\033[37m",
    _logging.WARNING: "\033[33m",
    _logging.ERROR: "\033[31m",
    _logging.CRITICAL: "\033[41m",
}
_RESET = "\033[0m"

_target: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("nativegen_target", default=None)

# Attributes of a bare LogRecord; anything else was passed through ``extra``
_RECORD_ATTRS = frozenset(_logging.makeLogRecord({}).__dict__) | {"message", "asctime", "target"}


@dataclass
class LoggingState:
    log_dir: Optional[str]
    text_log_path: Optional[str]
    jsonl_log_path: Optional[str]
    console_level: int
    file_level: int


_state: Optional[LoggingState] = None


def get_logger(name: Optional[str] = None) -> _logging.Logger:
    if name is None or name == _ROOT:
        return _logging.getLogger(_ROOT)
    if not name.startswith(f"{_ROOT}."):
        name = f"{_ROOT}.{name}"
    return _logging.getLogger(name)


@contextlib.contextmanager
def generation_target(name: str) -> Iterator[None]:
    """Tag the records logged inside the block with ``name``.

    Nested targets are joined with a dot, so a function inside a class shows
    up as ``GL15.glBufferData``.
    """
    outer = _target.get()
    token = _target.set(f"{outer}.{name}" if outer else name)
    try:
        yield
    finally:
        _target.reset(token)


def current_target() -> Optional[str]:
    return _target.get()


def _level(value, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    if value.isdigit():
        return int(value)
    level = _logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value.upper()}")
    return level


class _TargetFilter(_logging.Filter):
    def filter(self, record: _logging.LogRecord) -> bool:
        target = _target.get()
        record.target = f"[{target}] " if target else ""
        record.target_name = target
        return True


class _BelowLevel(_logging.Filter):
    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: _logging.LogRecord) -> bool:
        return record.levelno < self.level


class _ConsoleFormatter(_logging.Formatter):
    def __init__(self, use_color: bool) -> None:
        super().__init__(_CONSOLE_FORMAT, _DATEFMT)
        self.use_color = use_color

    def format(self, record: _logging.LogRecord) -> str:
        message = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno) if self.use_color else None
        return f"{color}{message}{_RESET}" if color else message


class _JsonLinesFormatter(_logging.Formatter):
    def format(self, record: _logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, _DATEFMT),
            "level": record.levelname,
            "logger": record.name,
            "target": getattr(record, "target_name", None),
            "message": record.getMessage(),
            "lineno": record.lineno,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key == "target_name":
                continue
            try:
                json.dumps(value)
            except TypeError:
                value = repr(value)
            payload[key] = value
        return json.dumps(payload, ensure_ascii=False)


def _stream_handler(stream, level: int, use_color: bool) -> _logging.Handler:
    handler = _logging.StreamHandler(stream=stream)
    handler.setLevel(level)
    handler.addFilter(_TargetFilter())
    handler.setFormatter(_ConsoleFormatter(use_color and stream.isatty()))
    return handler


def _file_handler(path: str, level: int, formatter: _logging.Formatter) -> _logging.Handler:
    handler = _logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.addFilter(_TargetFilter())
    handler.setFormatter(formatter)
    return handler


def _log_file_name(pattern: str, timestamp_format: str, suffix: Optional[str] = None) -> str:
    name = pattern.format(timestamp=_dt.datetime.now().strftime(timestamp_format), pid=os.getpid())
    if suffix is not None:
        name = f"{os.path.splitext(name)[0]}{suffix}"
    return name


def _reset_handlers(logger: _logging.Logger) -> None:
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def configure_logging(
    config: Dict[str, Any],
    *,
    console_level_override: Optional[str] = None,
    log_dir_override: Optional[str] = None,
    enable_jsonl_override: Optional[bool] = None,
    force_reconfigure: bool = False,
) -> LoggingState:
    """Install the handlers of the ``nativegen`` logger from the [logging] table.

    Without ``force_reconfigure`` an already configured logger is left as-is.
    """
    global _state

    logger = get_logger()
    if logger.handlers and not force_reconfigure:
        return _state  # type: ignore[return-value]

    cfg: Dict[str, Any] = (config or {}).get("logging", {})
    console_level = _level(console_level_override, _level(cfg.get("console_level"), _logging.INFO))
    file_level = _level(cfg.get("file_level"), _logging.DEBUG)
    use_color = bool(cfg.get("color", True))
    jsonl_enabled = bool(cfg.get("jsonl", False) if enable_jsonl_override is None else enable_jsonl_override)

    log_dir = log_dir_override or cfg.get("dir") or None
    if log_dir:
        log_dir = os.path.abspath(log_dir)

    _reset_handlers(logger)
    logger.propagate = False

    stdout = _stream_handler(sys.stdout, console_level, use_color)
    stdout.addFilter(_BelowLevel(_logging.ERROR))
    logger.addHandler(stdout)
    logger.addHandler(_stream_handler(sys.stderr, max(console_level, _logging.ERROR), use_color))

    text_log_path = None
    jsonl_log_path = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        pattern = cfg.get("filename_pattern", "nativegen-{timestamp}.log")
        timestamp_format = cfg.get("timestamp_format", "%Y%m%dT%H%M%S")

        text_log_path = os.path.join(log_dir, _log_file_name(pattern, timestamp_format))
        logger.addHandler(_file_handler(text_log_path, file_level, _logging.Formatter(_FILE_FORMAT, _DATEFMT)))
        if jsonl_enabled:
            jsonl_log_path = os.path.join(log_dir, _log_file_name(pattern, timestamp_format, ".jsonl"))
            logger.addHandler(_file_handler(jsonl_log_path, file_level, _JsonLinesFormatter()))
        logger.setLevel(min(console_level, file_level))
    else:
        logger.setLevel(console_level)

    _state = LoggingState(
        log_dir=log_dir,
        text_log_path=text_log_path,
        jsonl_log_path=jsonl_log_path,
        console_level=console_level,
        file_level=file_level,
    )
    return _state


def get_logging_state() -> Optional[LoggingState]:
    return _state


def is_configured() -> bool:
    return bool(get_logger().handlers)
