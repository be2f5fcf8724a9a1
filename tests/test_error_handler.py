import logging
from unittest.mock import Mock

from imagelink.errors import NetworkError, NoConnectivityError
from imagelink.errors.handler import ErrorHandler, ErrorOccurredEvent, ErrorSeverity
from imagelink.events.bus import EventBus


def _handler():
    logger = Mock(spec=logging.Logger)
    event_bus = Mock(spec=EventBus)
    return ErrorHandler(logger, event_bus), logger, event_bus


def test_handle_error_logs_and_publishes():
    handler, logger, event_bus = _handler()

    error = NetworkError("connection refused")
    text = handler.handle(error, ErrorSeverity.ERROR, context={"url": "http://x"})

    assert text == "connection refused"
    logger.error.assert_called()
    event = event_bus.publish.call_args[0][0]
    assert isinstance(event, ErrorOccurredEvent)
    assert event.error is error
    assert event.severity == ErrorSeverity.ERROR
    assert event.context == {"url": "http://x"}


def test_custom_message_is_returned():
    handler, _logger, event_bus = _handler()

    text = handler.handle(NetworkError("reset"), message="Failed to load the image list: reset")

    assert text == "Failed to load the image list: reset"
    assert event_bus.publish.call_args[0][0].message == text


def test_ui_callback():
    handler, _logger, _bus = _handler()
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(RuntimeError("ui error"), ErrorSeverity.CRITICAL)

    callback.assert_called_with("ui error", ErrorSeverity.CRITICAL)


def test_warnings_stay_out_of_the_ui():
    handler, logger, _bus = _handler()
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(NoConnectivityError("offline"), ErrorSeverity.WARNING)

    callback.assert_not_called()
    logger.warning.assert_called()
