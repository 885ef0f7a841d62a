"""
Taskrelay-specific runtime exceptions and error classification.
"""

from __future__ import annotations

import typing as t
from enum import StrEnum

import httpx


class ErrorKind(StrEnum):
    HTTP = "http"
    NETWORK = "network"
    UNEXPECTED = "unexpected"


class TaskRelayError(Exception):
    """
    Base class for errors raised by the task lifecycle client.

    Attributes
    ----------
    kind : ErrorKind
        Classification used by the tool wrapper.
    """

    kind: t.ClassVar[ErrorKind] = ErrorKind.UNEXPECTED


class SubmissionHTTPError(TaskRelayError):
    """
    Non-2xx response to an instruction submission.

    Parameters
    ----------
    response : httpx.Response
        Response returned by the task API.
    body : str
        Response body text, empty when it could not be read.
    """

    kind = ErrorKind.HTTP

    def __init__(self, *, response: httpx.Response, body: str) -> None:
        self.response = response
        self.status_code = response.status_code
        self.status_text = response.reason_phrase
        self.body = body
        super().__init__(
            f"Failed to send instructions: {self.status_code} {self.status_text} - {body}"
        )


class MissingTaskIdError(TaskRelayError):
    """
    Submission succeeded but the response carried no task identifier.
    """

    def __init__(self, *, response_data: t.Any = None) -> None:
        self.response_data = response_data
        super().__init__("No task ID received from API after sending instructions")


class TaskFailedError(TaskRelayError):
    """
    Remote task reached the ``failed`` status.

    Parameters
    ----------
    task_id : str
        Remote task identifier.
    error : typing.Any
        Opaque error payload reported by the task API.
    """

    def __init__(self, *, task_id: str, error: t.Any) -> None:
        self.task_id = task_id
        self.error = error
        super().__init__(f"Task {task_id} failed: {error}")


class PollCancelledError(TaskRelayError):
    """
    Poll loop stopped because its cancel event was set.
    """

    def __init__(self, *, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Polling of task {task_id} was cancelled")


class ToolHTTPError(TaskRelayError):
    """
    Normalized HTTP failure raised by a wrapped tool.
    """

    kind = ErrorKind.HTTP

    def __init__(self, message: str, *, response: httpx.Response, body: str) -> None:
        self.response = response
        self.status_code = response.status_code
        self.body = body
        super().__init__(message)


class ToolNetworkError(TaskRelayError):
    """
    Normalized network failure raised by a wrapped tool.
    """

    kind = ErrorKind.NETWORK


def get_error_response(*, error: BaseException) -> httpx.Response | None:
    """
    Return the HTTP response carried by an error, if any.

    Parameters
    ----------
    error : BaseException
        Error to inspect.

    Returns
    -------
    httpx.Response | None
        Embedded response, or ``None``.
    """
    response = getattr(error, "response", None)
    return response if isinstance(response, httpx.Response) else None


def classify_error(*, error: BaseException) -> ErrorKind:
    """
    Classify an error raised at the HTTP boundary.

    Parameters
    ----------
    error : BaseException
        Error to classify.

    Returns
    -------
    ErrorKind
        ``HTTP`` when the error carries a response, ``NETWORK`` for transport
        and type errors, ``UNEXPECTED`` otherwise.
    """
    if isinstance(error, TaskRelayError):
        return error.kind
    if get_error_response(error=error) is not None:
        return ErrorKind.HTTP
    if isinstance(error, (httpx.RequestError, TypeError)):
        return ErrorKind.NETWORK
    return ErrorKind.UNEXPECTED
