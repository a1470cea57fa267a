import logging

from starlette.requests import Request

from utils.error_responder import error_response, log_unhandled_async
from utils.errors import BadRequestError, StoreFault, UploadValidationError


def _request(method="POST", path="/addStudent"):
    return Request({"type": "http", "method": method, "path": path, "headers": [], "query_string": b""})


def test_log_unhandled_async_logs_at_error(caplog):
    exc = RuntimeError("task blew up")

    with caplog.at_level(logging.ERROR):
        log_unhandled_async(None, {"message": "Task exception was never retrieved", "exception": exc})

    records = [r for r in caplog.records if r.getMessage().startswith("Unhandled Rejection")]
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert records[0].exc_info[1] is exc
    assert "Task exception was never retrieved" in records[0].getMessage()


def test_bad_request_errors_are_400_with_message():
    r = error_response(_request(), BadRequestError("Malformed JSON body."))
    assert r.status_code == 400
    assert r.body == b"Malformed JSON body."

    r = error_response(_request(), UploadValidationError("Only one image file may be uploaded per request."))
    assert r.status_code == 400


def test_store_fault_hides_details():
    r = error_response(_request("GET", "/"), StoreFault(statement="SELECT secret FROM students"))
    assert r.status_code == 500
    assert r.body == b"Database error"


def test_other_errors_are_generic_500():
    r = error_response(_request("GET", "/"), KeyError("internal"))
    assert r.status_code == 500
    assert r.body == b"Internal Server Error"
