import httpx
import pytest

from taskrelay.exceptions import (
    ErrorKind,
    MissingTaskIdError,
    SubmissionHTTPError,
    TaskFailedError,
    ToolNetworkError,
    classify_error,
    get_error_response,
)


class ResponseCarrier(Exception):
    def __init__(self, response):
        super().__init__("carrier")
        self.response = response


def test_classify_http_status_error():
    request = httpx.Request("GET", "https://browser.test")
    response = httpx.Response(500, request=request)
    error = httpx.HTTPStatusError("boom", request=request, response=response)

    assert classify_error(error=error) is ErrorKind.HTTP
    assert get_error_response(error=error) is response


def test_classify_foreign_error_carrying_response():
    assert classify_error(error=ResponseCarrier(httpx.Response(429))) is ErrorKind.HTTP


def test_classify_ignores_non_response_attribute():
    assert classify_error(error=ResponseCarrier({"status": 500})) is ErrorKind.UNEXPECTED


@pytest.mark.parametrize(
    "error",
    [
        httpx.ConnectError("refused"),
        httpx.ReadTimeout("timeout"),
        TypeError("fetch failed"),
        ToolNetworkError("Network error: refused"),
    ],
)
def test_classify_network_errors(error):
    assert classify_error(error=error) is ErrorKind.NETWORK


@pytest.mark.parametrize(
    "error",
    [
        ValueError("bad"),
        TaskFailedError(task_id="t", error="boom"),
        MissingTaskIdError(response_data={}),
    ],
)
def test_classify_unexpected_errors(error):
    assert classify_error(error=error) is ErrorKind.UNEXPECTED


def test_submission_http_error_message():
    response = httpx.Response(503, text="down")

    error = SubmissionHTTPError(response=response, body="down")

    assert str(error) == "Failed to send instructions: 503 Service Unavailable - down"
    assert classify_error(error=error) is ErrorKind.HTTP
    assert get_error_response(error=error) is response


def test_task_failed_error_message():
    error = TaskFailedError(task_id="task-1", error={"reason": "captcha"})

    assert str(error) == "Task task-1 failed: {'reason': 'captcha'}"
