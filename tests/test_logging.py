"""Tests for setup_logging."""

import io
import logging

from rich.console import Console
from rich.logging import RichHandler

from pluginwatch.core.logging import LOGGER_NAME, setup_logging


class TestSetupLogging:
    def test_installs_single_rich_handler(self):
        setup_logging()
        logger = setup_logging()
        handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1
        assert logger.name == LOGGER_NAME
        assert logger.propagate is False

    def test_levels(self):
        assert setup_logging(verbose=False).level == logging.INFO
        assert setup_logging(verbose=True).level == logging.DEBUG

    def test_module_loggers_routed(self):
        buf = io.StringIO()
        setup_logging(console=Console(file=buf, width=200))
        logging.getLogger("pluginwatch.plugins.synchronizer").info("hello from sync")
        logging.getLogger("pluginwatch.plugins.synchronizer").debug("hidden detail")
        assert "hello from sync" in buf.getvalue()
        assert "hidden detail" not in buf.getvalue()
