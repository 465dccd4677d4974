import io

import pytest

from limecore import log
from limecore.log import (
    CallbackLogWriter,
    ConsoleLogWriter,
    FileLogWriter,
    Level,
    Logger,
    LogRecord,
    format_log_record,
)


class Recorder:
    def __init__(self):
        self.messages = []
        self.closed = False

    def log_write(self, record):
        self.messages.append(record.message)

    def close(self):
        self.closed = True


ALL_LEVELS = [Level.FINEST, Level.FINE, Level.DEBUG, Level.TRACE, Level.INFO,
              Level.WARNING, Level.ERROR, Level.CRITICAL, 999]


def test_global_log_formats_message():
    rec = Recorder()
    log.add_filter("globaltest", Level.FINEST, rec)
    try:
        log.info("Testing: %s %s", "hello", "world")
    finally:
        log.GLOBAL.close()
    assert rec.messages == ["Testing: hello world"]
    assert rec.closed


def test_global_functions_return_messages():
    rec = Recorder()
    log.add_filter("test", Level.FINEST, rec)
    log.finest("testing finest")
    log.fine("testing fine")
    log.debug("testing debug")
    log.logf(Level.TRACE, "testing trace")
    assert log.warn("testing warn") == "testing warn"
    assert log.error("testing %d", 3) == "testing 3"
    assert log.critical("testing critical") == "testing critical"
    log.logf(Level.FINE, "testing logf")
    log.close()
    assert len(rec.messages) == 8
    assert rec.closed


def test_logf_at_every_level():
    logger = Logger()
    rec = Recorder()
    logger.add_filter("test", Level.FINEST, rec)
    text = "a distinctive string"
    for lvl in ALL_LEVELS:
        logger.logf(lvl, text)
    assert len(rec.messages) == 9
    assert all(text in m for m in rec.messages)


def test_filter_level_threshold():
    logger = Logger()
    rec = Recorder()
    logger.add_filter("warn", Level.WARNING, rec)
    logger.debug("no")
    logger.info("no")
    logger.warn("yes")
    logger.critical("also")
    assert rec.messages == ["yes", "also"]


def test_unknown_filter_level_is_info():
    logger = Logger()
    rec = Recorder()
    logger.add_filter("x", 999, rec)
    logger.debug("dropped")
    logger.info("kept")
    assert rec.messages == ["kept"]


def test_close_clears_filters():
    logger = Logger()
    rec = Recorder()
    logger.add_filter("x", Level.FINEST, rec)
    logger.close()
    logger.info("after")
    assert rec.messages == []
    assert rec.closed


def test_go_verbs():
    logger = Logger()
    rec = Recorder()
    logger.add_filter("x", Level.FINEST, rec)
    logger.info("%v %t %q %05d %%", True, False, "s", 42)
    logger.info("%s %s", "one")
    logger.info(1, 2)
    assert rec.messages == ['true false "s" 00042 %', "one %!s(MISSING)", "1 2"]


def test_format_log_record():
    line = format_log_record(LogRecord(level=Level.ERROR, message="boom"))
    assert line.endswith("[EROR] () boom\n")
    assert line.startswith("[")


def test_callback_writer():
    lines = []
    writer = CallbackLogWriter(lines.append)
    writer.log_write(LogRecord(message="hi"))
    writer.close()
    writer.log_write(LogRecord(message="ignored"))
    assert len(lines) == 1
    assert lines[0].endswith("hi\n")


def test_console_writer():
    stream = io.StringIO()
    writer = ConsoleLogWriter(stream)
    writer.log_write(LogRecord(level=Level.INFO, message="out"))
    writer.close()
    assert "[INFO]" in stream.getvalue()
    assert stream.getvalue().endswith("out\n")


@pytest.mark.parametrize("rotate", [False, True])
def test_file_writer(tmp_path, rotate):
    path = tmp_path / "testfile"
    path.write_text("old\n")
    writer = FileLogWriter(path, rotate)
    writer.log_write(LogRecord(message="new entry"))
    writer.close()
    content = path.read_text()
    assert "new entry" in content
    assert ("old" in content) is (not rotate)
    assert (tmp_path / "testfile.001").exists() is rotate