# File: tests/test_logger.py
import logging

from site_harvest.logger import init_logging, logger


def test_init_logging_replaces_handlers_and_writes_file(tmp_path):
    log_file = tmp_path / "harvest.log"
    try:
        lg = init_logging("DEBUG", log_file=log_file, log_format="%(levelname)s %(message)s")
        assert lg is logger
        assert lg.level == logging.DEBUG
        assert len(lg.handlers) == 2
        assert not lg.propagate

        logger.debug("crawl started")
        for handler in lg.handlers:
            handler.flush()
        assert "DEBUG crawl started" in log_file.read_text(encoding="utf-8")

        lg = init_logging("WARNING")
        assert len(lg.handlers) == 1
        assert lg.level == logging.WARNING
    finally:
        init_logging()
