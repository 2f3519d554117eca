import logging
from unittest.mock import MagicMock

from upstream_proxy.utils.traced_requests import traced_request


def _tracer_with_span():
    span = MagicMock()
    tracer = MagicMock()
    tracer.start_as_current_span.return_value.__enter__.return_value = span
    return tracer, span


def test_span_gets_attributes_and_start_message_is_logged(caplog):
    tracer, span = _tracer_with_span()

    with caplog.at_level(logging.INFO, logger="uvicorn.error"):
        with traced_request(
            tracer,
            "proxy_request",
            "Proxying request GET / to http://upstream.test:80",
            extra_attrs={"proxy.method": "GET"},
        ) as yielded:
            assert yielded is span

    tracer.start_as_current_span.assert_called_once_with("proxy_request")
    span.set_attribute.assert_called_once_with("proxy.method", "GET")
    assert [r.getMessage() for r in caplog.records] == [
        "Proxying request GET / to http://upstream.test:80"
    ]


def test_without_extra_attributes():
    tracer, span = _tracer_with_span()

    with traced_request(tracer, "proxy_request", "start"):
        pass

    span.set_attribute.assert_not_called()
