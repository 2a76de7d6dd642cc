"""Tests for the buffered diagnostics handler."""

import logging

from dvdchap.diagnostics import DiagnosticBuffer, capture_diagnostics, level_name


class TestLevelName:
    def test_known_levels(self) -> None:
        assert level_name(logging.DEBUG) == "DEBUG"
        assert level_name(logging.INFO) == "INFO"
        assert level_name(logging.WARNING) == "WARN"
        assert level_name(logging.ERROR) == "ERROR"
        assert level_name(logging.CRITICAL) == "ERROR"

    def test_unknown_level(self) -> None:
        assert level_name(5) == "unknown"


class TestDiagnosticBuffer:
    def test_collects_formatted_messages(self) -> None:
        log = logging.getLogger("dvdchap.test.buffer")
        buffer = DiagnosticBuffer()
        log.addHandler(buffer)
        log.setLevel(logging.DEBUG)
        try:
            log.warning("Unable to read %s", "VTS_01_0.IFO")
            log.debug("plain")
        finally:
            log.removeHandler(buffer)
        assert buffer.messages == [("WARN", "Unable to read VTS_01_0.IFO"), ("DEBUG", "plain")]
        assert buffer.lines() == ["[WARN] Unable to read VTS_01_0.IFO", "[DEBUG] plain"]
        assert len(buffer) == 2

    def test_respects_handler_level(self) -> None:
        log = logging.getLogger("dvdchap.test.level")
        buffer = DiagnosticBuffer(logging.WARNING)
        log.addHandler(buffer)
        log.setLevel(logging.DEBUG)
        try:
            log.info("ignored")
            log.error("kept")
        finally:
            log.removeHandler(buffer)
        assert buffer.lines() == ["[ERROR] kept"]


class TestCaptureDiagnostics:
    def test_captures_child_loggers(self) -> None:
        with capture_diagnostics() as buffer:
            logging.getLogger("dvdchap.ifo.disc").info("Opened VIDEO_TS.IFO")
        assert ("INFO", "Opened VIDEO_TS.IFO") in buffer.messages

    def test_restores_logger_state(self) -> None:
        logger = logging.getLogger("dvdchap")
        before_level = logger.level
        before_handlers = list(logger.handlers)
        with capture_diagnostics():
            assert logger.getEffectiveLevel() <= logging.DEBUG
        assert logger.level == before_level
        assert logger.handlers == before_handlers

    def test_stops_capturing_after_exit(self) -> None:
        with capture_diagnostics() as buffer:
            pass
        logging.getLogger("dvdchap").warning("after")
        assert len(buffer) == 0
