import io
import logging

from driftscan.log import configure_logging


class TestConfigureLogging:
    def setup_method(self):
        self.teardown_method()

    def teardown_method(self):
        logger = logging.getLogger("driftscan")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    def test_single_handler(self):
        configure_logging()
        logger = configure_logging(logging.DEBUG)
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_child_loggers_write_through(self):
        stream = io.StringIO()
        configure_logging(logging.INFO, stream=stream)
        logging.getLogger("driftscan.analyzer").info("scanned %d files", 3)
        assert stream.getvalue() == "[INFO] driftscan.analyzer: scanned 3 files\n"
