import io
import logging

from imagelink.utils.logging import CONSOLE_HANDLER_NAME, attach_console_handler


def _named(logger):
    return [h for h in logger.handlers if h.get_name() == CONSOLE_HANDLER_NAME]


def test_handler_installed_once_and_relevelled():
    stream = io.StringIO()
    logger = logging.getLogger("imagelink.test-console")
    try:
        first = attach_console_handler(logger.name, stream=stream)
        second = attach_console_handler(logger.name, verbose=True, stream=stream)

        assert first is second
        assert len(_named(logger)) == 1
        assert second.level == logging.DEBUG
        assert logger.level == logging.DEBUG
    finally:
        for handler in _named(logger):
            logger.removeHandler(handler)


def test_quiet_mode_only_shows_warnings():
    stream = io.StringIO()
    logger = logging.getLogger("imagelink.test-quiet")
    logger.propagate = False
    try:
        attach_console_handler(logger.name, stream=stream)
        logger.info("cache hit")
        logger.warning("disk write failed")

        output = stream.getvalue()
        assert "cache hit" not in output
        assert "WARNING" in output
        assert "disk write failed" in output
    finally:
        for handler in _named(logger):
            logger.removeHandler(handler)
