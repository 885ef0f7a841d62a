"""
Task lifecycle client.
Submits instruction batches to the browser automation task API and polls
the created task until it reaches a terminal status.
"""

from __future__ import annotations

import asyncio
import dataclasses
import time
import typing as t

import httpx
import structlog

from taskrelay.config import DEFAULT_BASE_URL, ClientSettings
from taskrelay.context import ExecutionContext, Logger
from taskrelay.exceptions import (
    MissingTaskIdError,
    PollCancelledError,
    SubmissionHTTPError,
    TaskFailedError,
)
from taskrelay.headers import HeadersFactory
from taskrelay.models import (
    InstructionsPayload,
    SubmitTaskResponse,
    TaskStatusResponse,
    ToolResult,
)
from taskrelay.progress import estimate_progress, report_progress
from taskrelay.utils.logging import logging_context

log = structlog.get_logger(__name__)


async def read_response_text(*, response: httpx.Response, log: Logger) -> str:
    """
    Read a response body without letting the read itself fail the caller.

    Parameters
    ----------
    response : httpx.Response
        Response whose body should be read.
    log : Logger
        Logger receiving read failures.

    Returns
    -------
    str
        Body text, or an empty string if it could not be read.
    """
    try:
        await response.aread()
        return response.text
    except Exception as error:
        log.error("Failed to read error response text", error=str(error))
        return ""


class TaskClient:
    """
    Submit instructions and poll tasks on the browser automation task API.

    Notes
    -----
    A new ``httpx.AsyncClient`` is opened per request through
    ``_client_factory``; the client holds no connections between calls.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        poll_interval_seconds: float = 3.0,
        submit_delay_seconds: float = 1.0,
        request_timeout_seconds: float = 30.0,
    ):
        """
        Initialize the task client.

        Parameters
        ----------
        base_url : str
            Task API base URL.
        poll_interval_seconds : float
            Wait between two status requests of a non-terminal task.
        submit_delay_seconds : float
            Wait after receiving a submission response.
        request_timeout_seconds : float
            Timeout applied to each HTTP request.
        """
        self._base_url = base_url.rstrip("/")
        self._poll_interval_seconds = poll_interval_seconds
        self._submit_delay_seconds = submit_delay_seconds
        self._client_factory: t.Callable[[], httpx.AsyncClient] = lambda: httpx.AsyncClient(
            timeout=request_timeout_seconds
        )
        self._sleep: t.Callable[[float], t.Awaitable[t.Any]] = asyncio.sleep

        log.debug(
            event="Initialized TaskClient",
            base_url=self._base_url,
            poll_interval_seconds=poll_interval_seconds,
            submit_delay_seconds=submit_delay_seconds,
            request_timeout_seconds=request_timeout_seconds,
        )

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> TaskClient:
        return cls(
            base_url=settings.base_url,
            poll_interval_seconds=settings.poll_interval_seconds,
            submit_delay_seconds=settings.submit_delay_seconds,
            request_timeout_seconds=settings.request_timeout_seconds,
        )

    def build_task_url(self, *, task_id: str) -> str:
        return f"{self._base_url}/api/v1/tasks/{task_id}"

    def build_instructions_url(self, *, execution_id: str) -> str:
        return f"{self._base_url}/api/v1/tasks/{execution_id}/instructions"

    async def _wait(
        self,
        *,
        task_id: str,
        delay: float,
        cancel_event: asyncio.Event | None,
    ) -> None:
        """
        Wait between two polls, ending early if the cancel event is set.

        Parameters
        ----------
        task_id : str
            Task being polled.
        delay : float
            Seconds to wait.
        cancel_event : asyncio.Event | None
            Optional cancellation signal.
        """
        if cancel_event is None:
            await self._sleep(delay)
            return
        if not cancel_event.is_set():
            try:
                await asyncio.wait_for(cancel_event.wait(), timeout=delay)
            except TimeoutError:
                return
        raise PollCancelledError(task_id=task_id)

    async def _fetch_status(
        self,
        *,
        task_id: str,
        headers_factory: HeadersFactory,
    ) -> TaskStatusResponse:
        async with self._client_factory() as client:
            response = await client.get(
                url=self.build_task_url(task_id=task_id),
                headers=headers_factory(),
            )
            payload = response.json()
        return TaskStatusResponse.model_validate(payload)

    async def poll_task_result(
        self,
        task_id: str,
        headers_factory: HeadersFactory,
        context: ExecutionContext,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> t.Any:
        """
        Poll a task until it reaches a terminal status.

        Parameters
        ----------
        task_id : str
            Remote task identifier.
        headers_factory : HeadersFactory
            Factory producing fresh request headers.
        context : ExecutionContext
            Logger, optional progress reporter and task instructions.
        cancel_event : asyncio.Event | None, optional
            When set, the pending wait ends and ``PollCancelledError`` is raised.

        Returns
        -------
        typing.Any
            The task ``result`` payload, unchanged.

        Raises
        ------
        TaskFailedError
            If the task reports the ``failed`` status.
        """
        task_log = context.log
        instruction = context.instruction_label
        idx = 0
        started_at = time.monotonic()
        with logging_context(task_id=task_id):
            while True:
                status_response = await self._fetch_status(
                    task_id=task_id,
                    headers_factory=headers_factory,
                )
                status = status_response.status
                elapsed_sec = int(time.monotonic() - started_at)
                task_log.info(
                    f'Executing instruction "{instruction}". Status: {status}. '
                    f"Progress: {estimate_progress(idx)}%, Time: {elapsed_sec}s"
                )
                progress_index = idx
                idx += 1
                await report_progress(
                    reporter=context.report_progress,
                    progress=str(progress_index),
                    total="100",
                    message=(
                        f'Executing instruction "{instruction}". Status: {status}. '
                        f"Progress: {estimate_progress(idx)}%, Time: {elapsed_sec}s"
                    ),
                )

                if status_response.is_success:
                    message = (
                        f'Task "{instruction}" successfully completed. '
                        f"Execution time: {elapsed_sec}s"
                    )
                    await report_progress(
                        reporter=context.report_progress,
                        progress=100,
                        total=100,
                        message=message,
                    )
                    task_log.info(message, task_id=task_id, result=status_response.result)
                    return status_response.result

                if status_response.is_failed:
                    task_log.error(
                        "Task poll failed",
                        task_id=task_id,
                        error=status_response.error,
                    )
                    await report_progress(
                        reporter=context.report_progress,
                        progress=100,
                        total=100,
                        message=f'Task "{instruction}" failed.',
                    )
                    raise TaskFailedError(task_id=task_id, error=status_response.error)

                await self._wait(
                    task_id=task_id,
                    delay=self._poll_interval_seconds,
                    cancel_event=cancel_event,
                )

    async def send_session_instructions(
        self,
        execution_id: str,
        instructions: t.Sequence[t.Mapping[str, t.Any]],
        headers_factory: HeadersFactory,
        context: ExecutionContext,
        project_name: str | None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> dict[str, t.Any]:
        """
        Submit instructions to a session and wait for the created task.

        Parameters
        ----------
        execution_id : str
            Session execution identifier.
        instructions : typing.Sequence[typing.Mapping[str, typing.Any]]
            Ordered instruction descriptors.
        headers_factory : HeadersFactory
            Factory producing fresh request headers.
        context : ExecutionContext
            Logger and optional progress reporter.
        project_name : str | None
            Project the task is filed under.
        cancel_event : asyncio.Event | None, optional
            Forwarded to ``poll_task_result``.

        Returns
        -------
        dict[str, typing.Any]
            ``{"content": [{"type": "text", "text": ...}]}`` where the text is the
            JSON encoding of ``{"executionId", "result"}``.

        Raises
        ------
        SubmissionHTTPError
            If the API answers with a non-2xx status.
        MissingTaskIdError
            If the response carries no ``executionId``.
        """
        task_log = context.log
        url = self.build_instructions_url(execution_id=execution_id)
        payload = InstructionsPayload(
            instructions=[dict(instruction) for instruction in instructions],
            project=project_name,
        )
        task_log.info(
            "Sending instructions to session",
            url=url,
            execution_id=execution_id,
            instructions_count=len(instructions),
        )
        async with self._client_factory() as client:
            response = await client.post(
                url=url,
                headers=headers_factory(),
                json=payload.model_dump(by_alias=True),
            )
            if not response.is_success:
                error_text = await read_response_text(response=response, log=task_log)
                task_log.error(
                    "Failed to send instructions",
                    status=response.status_code,
                    status_text=response.reason_phrase,
                    error=error_text,
                )
                raise SubmissionHTTPError(response=response, body=error_text)
            data = response.json()

        submit_response = SubmitTaskResponse.model_validate(data if isinstance(data, dict) else {})
        task_id = submit_response.task_id
        await self._sleep(self._submit_delay_seconds)
        task_log.info(
            "Received task ID from API after sending instructions",
            task_id=task_id,
            response_data=data,
        )
        if not task_id:
            task_log.error("No task_id received after sending instructions", response_data=data)
            raise MissingTaskIdError(response_data=data)

        result = await self.poll_task_result(
            task_id,
            headers_factory,
            dataclasses.replace(context, instructions=tuple(instructions)),
            cancel_event=cancel_event,
        )
        return ToolResult.from_task_result(task_id=task_id, result=result).model_dump()
