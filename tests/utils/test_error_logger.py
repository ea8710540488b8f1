import logging

import httpx

from link_preview.utils.error_logger import log_error, log_http_error


def test_log_error_records_structured_fields(caplog):
    with caplog.at_level(logging.ERROR):
        try:
            raise ValueError("bad bytes")
        except ValueError as e:
            log_error("thumbnail", e, operation="derive", context={"size": 3})

    record = caplog.records[-1]
    assert record.name == "error.thumbnail"
    assert record.component == "thumbnail"
    assert record.operation == "derive"
    assert record.context_data == {"size": 3}
    assert record.error_type == "ValueError"
    assert record.exc_info is not None


def test_warning_level_skips_traceback(caplog):
    with caplog.at_level(logging.WARNING):
        log_error("group_invite", ConnectionError("offline"), level=logging.WARNING)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert not record.exc_info


def test_log_http_error_includes_response_details(caplog):
    request = httpx.Request("GET", "https://example.com/")
    response = httpx.Response(503, request=request, headers={"Retry-After": "5"})

    with caplog.at_level(logging.WARNING):
        log_http_error("preview_http_client", "https://example.com/", response=response)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.http_details["status_code"] == 503
    assert record.http_details["method"] == "GET"
    assert record.context_data == {"url": "https://example.com/"}
    assert "503" in record.error_message


def test_response_without_request_is_tolerated(caplog):
    with caplog.at_level(logging.WARNING):
        log_http_error("preview_http_client", "https://example.com/", response=httpx.Response(404))

    assert "request_url" not in caplog.records[-1].http_details
