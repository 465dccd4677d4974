"""Levelled logging with named filters that route records to writers."""

from __future__ import annotations

import enum
import os
import re
import sys
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Protocol, TextIO


class Level(enum.IntEnum):
    """Severity of a log record, from least to most severe."""

    FINEST = 0
    FINE = 1
    DEBUG = 2
    TRACE = 3
    INFO = 4
    WARNING = 5
    ERROR = 6
    CRITICAL = 7


_SHORT_NAMES = {
    Level.FINEST: "FNST",
    Level.FINE: "FINE",
    Level.DEBUG: "DEBG",
    Level.TRACE: "TRAC",
    Level.INFO: "INFO",
    Level.WARNING: "WARN",
    Level.ERROR: "EROR",
    Level.CRITICAL: "CRIT",
}


def _coerce_level(level: Any) -> Level:
    """Map any value to a Level; unknown values become INFO."""
    try:
        return Level(level)
    except ValueError:
        return Level.INFO


@dataclass
class LogRecord:
    """A single message on its way to the writers."""

    level: Level = Level.INFO
    message: str = ""
    source: str = ""
    created: datetime = field(default_factory=datetime.now)


def format_log_record(record: LogRecord) -> str:
    """Render a record as one line: date, time, level, source and message."""
    stamp = record.created.strftime("%Y/%m/%d %H:%M:%S")
    name = _SHORT_NAMES.get(_coerce_level(record.level), "INFO")
    return f"[{stamp}] [{name}] ({record.source}) {record.message}\n"


class LogWriter(Protocol):
    def log_write(self, record: LogRecord) -> None: ...

    def close(self) -> None: ...


class ConsoleLogWriter:
    """Writes formatted records to a stream, standard output by default."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()
        self._closed = False

    def log_write(self, record: LogRecord) -> None:
        with self._lock:
            if self._closed:
                return
            stream = self._stream if self._stream is not None else sys.stdout
            stream.write(format_log_record(record))
            stream.flush()

    def close(self) -> None:
        with self._lock:
            self._closed = True


class FileLogWriter:
    """Appends formatted records to a file, optionally rotating an old one away."""

    def __init__(self, fname: str | os.PathLike, rotate: bool = False) -> None:
        self.filename = os.fspath(fname)
        self._lock = threading.Lock()
        if rotate and os.path.exists(self.filename):
            n = 1
            while os.path.exists(f"{self.filename}.{n:03d}"):
                n += 1
            os.replace(self.filename, f"{self.filename}.{n:03d}")
        self._file: TextIO | None = open(self.filename, "a", encoding="utf-8")

    def log_write(self, record: LogRecord) -> None:
        with self._lock:
            if self._file is None:
                return
            self._file.write(format_log_record(record))
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None


class CallbackLogWriter:
    """Hands each formatted record to a callable."""

    def __init__(self, handler: Callable[[str], None]) -> None:
        self._handler = handler
        self._lock = threading.Lock()
        self._closed = False

    def log_write(self, record: LogRecord) -> None:
        with self._lock:
            if self._closed:
                return
            line = format_log_record(record)
        self._handler(line)

    def close(self) -> None:
        with self._lock:
            self._closed = True


_VERB = re.compile(r"%([-+# 0]*\d*(?:\.\d+)?)([vsdqtTxXfeg%])")


def _go_str(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _go_format(fmt: str, args: tuple) -> str:
    remaining = list(args)

    def repl(m: re.Match) -> str:
        flags, verb = m.group(1), m.group(2)
        if verb == "%":
            return "%"
        if not remaining:
            return f"%!{verb}(MISSING)"
        value = remaining.pop(0)
        if verb in "vs":
            return ("%" + flags + "s") % _go_str(value)
        if verb == "q":
            escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        if verb == "t":
            return _go_str(bool(value))
        if verb == "T":
            return type(value).__name__
        try:
            return ("%" + flags + verb) % value
        except (TypeError, ValueError):
            return f"%!{verb}({_go_str(value)})"

    return _VERB.sub(repl, fmt)


def _message(arg0: Any, args: tuple) -> str:
    if callable(arg0):
        return _go_str(arg0(*args))
    if isinstance(arg0, str):
        return _go_format(arg0, args) if args else arg0
    return " ".join(_go_str(a) for a in (arg0, *args))


class Logger:
    """Dispatches messages to every named filter whose level admits them."""

    def __init__(self) -> None:
        self._filters: dict[str, tuple[Level, LogWriter]] = {}
        self._lock = threading.Lock()

    def add_filter(self, name: str, level: Any, writer: LogWriter) -> None:
        with self._lock:
            self._filters[name] = (_coerce_level(level), writer)

    def _dispatch(self, level: Level, msg: str) -> None:
        with self._lock:
            targets = [w for lvl, w in self._filters.values() if level >= lvl]
        if not targets:
            return
        record = LogRecord(level=level, message=msg)
        for writer in targets:
            writer.log_write(record)

    def _log(self, level: Level, arg0: Any, args: tuple) -> str:
        msg = _message(arg0, args)
        self._dispatch(level, msg)
        return msg

    def finest(self, arg0: Any, *args: Any) -> None:
        self._log(Level.FINEST, arg0, args)

    def fine(self, arg0: Any, *args: Any) -> None:
        self._log(Level.FINE, arg0, args)

    def debug(self, arg0: Any, *args: Any) -> None:
        self._log(Level.DEBUG, arg0, args)

    def trace(self, arg0: Any, *args: Any) -> None:
        self._log(Level.TRACE, arg0, args)

    def info(self, arg0: Any, *args: Any) -> None:
        self._log(Level.INFO, arg0, args)

    def warn(self, arg0: Any, *args: Any) -> str:
        """Log at WARNING and return the message."""
        return self._log(Level.WARNING, arg0, args)

    def error(self, arg0: Any, *args: Any) -> str:
        """Log at ERROR and return the message."""
        return self._log(Level.ERROR, arg0, args)

    def critical(self, arg0: Any, *args: Any) -> str:
        """Log at CRITICAL and return the message."""
        return self._log(Level.CRITICAL, arg0, args)

    def logf(self, level: Any, fmt: str, *args: Any) -> None:
        self._dispatch(_coerce_level(level), _go_format(fmt, args))

    def close(self) -> None:
        """Close every writer and drop all filters."""
        with self._lock:
            writers = [w for _, w in self._filters.values()]
            self._filters.clear()
        for writer in writers:
            writer.close()


GLOBAL = Logger()
GLOBAL.add_filter("stdout", Level.DEBUG, ConsoleLogWriter())


def add_filter(name: str, level: Any, writer: LogWriter) -> None:
    GLOBAL.add_filter(name, level, writer)


def finest(arg0: Any, *args: Any) -> None:
    GLOBAL.finest(arg0, *args)


def fine(arg0: Any, *args: Any) -> None:
    GLOBAL.fine(arg0, *args)


def debug(arg0: Any, *args: Any) -> None:
    GLOBAL.debug(arg0, *args)


def trace(arg0: Any, *args: Any) -> None:
    GLOBAL.trace(arg0, *args)


def info(arg0: Any, *args: Any) -> None:
    GLOBAL.info(arg0, *args)


def warn(arg0: Any, *args: Any) -> str:
    return GLOBAL.warn(arg0, *args)


def error(arg0: Any, *args: Any) -> str:
    return GLOBAL.error(arg0, *args)


def critical(arg0: Any, *args: Any) -> str:
    return GLOBAL.critical(arg0, *args)


def logf(level: Any, fmt: str, *args: Any) -> None:
    GLOBAL.logf(level, fmt, *args)


def close() -> None:
    GLOBAL.close()