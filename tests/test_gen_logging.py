"""Tests for logging setup."""

import logging

from servergen.gen_logging import _GenFormatter, configure_logging, get_logger


class TestGetLogger:
    """Logger names live under the servergen hierarchy."""

    def test_root(self):
        assert get_logger().name == "servergen"
        assert get_logger("servergen").name == "servergen"

    def test_module_name_shortened(self):
        assert get_logger("servergen.codegen").name == "servergen.codegen"
        assert get_logger("codegen").name == "servergen.codegen"


class TestConfigureLogging:
    """Levels follow the verbose/quiet flags."""

    def test_default_info(self):
        configure_logging()
        assert logging.getLogger("servergen").level == logging.INFO

    def test_verbose(self):
        configure_logging(verbose=True)
        assert logging.getLogger("servergen").level == logging.DEBUG

    def test_quiet(self):
        configure_logging(quiet=True)
        assert logging.getLogger("servergen").level == logging.WARNING

    def test_single_handler(self):
        logger = logging.getLogger("servergen")
        before = len(logger.handlers)
        configure_logging()
        configure_logging(verbose=True)
        assert len(logger.handlers) <= before + 1


class TestFormatter:
    """Lines look like ``[time] [LEVEL] [target] message``."""

    def _record(self, level, msg, **extra):
        record = logging.LogRecord("servergen.codegen", level, __file__, 1, msg, (), None)
        record.__dict__.update(extra)
        return record

    def test_with_target(self):
        line = _GenFormatter().format(self._record(logging.INFO, "Generating main.py...", target="python-fastapi"))
        assert line.endswith("] [INFO] [python-fastapi] Generating main.py...")
        assert line.startswith("[")

    def test_warning_label(self):
        line = _GenFormatter().format(self._record(logging.WARNING, "careful"))
        assert line.endswith("] [WARN] careful")
