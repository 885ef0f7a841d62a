import json
import typing as t

import httpx


class FakeTaskAPI:
    """
    Emulate the task submission and status endpoints used in tests.

    Parameters
    ----------
    statuses : list[dict[str, typing.Any]]
        Status payloads returned by successive status requests. The last
        payload is repeated once the list is exhausted.
    submit_status_code : int
        Status code of the submission response.
    submit_payload : dict[str, typing.Any] | str | None
        JSON payload (or raw text) of the submission response.
    """

    def __init__(
        self,
        *,
        statuses: list[dict[str, t.Any]] | None = None,
        submit_status_code: int = 200,
        submit_payload: dict[str, t.Any] | str | None = None,
    ) -> None:
        self.statuses = statuses or [{"status": "finalized", "result": {"ok": True}}]
        self.submit_status_code = submit_status_code
        self.submit_payload = (
            submit_payload if submit_payload is not None else {"executionId": "task-1"}
        )
        self.requests: list[httpx.Request] = []
        self.poll_count = 0

    @property
    def submit_requests(self) -> list[httpx.Request]:
        return [request for request in self.requests if request.method == "POST"]

    @property
    def poll_requests(self) -> list[httpx.Request]:
        return [request for request in self.requests if request.method == "GET"]

    def _handle_submit(self, *, request: httpx.Request) -> httpx.Response:
        if isinstance(self.submit_payload, str):
            return httpx.Response(status_code=self.submit_status_code, text=self.submit_payload)
        return httpx.Response(status_code=self.submit_status_code, json=self.submit_payload)

    def _handle_status(self, *, task_id: str) -> httpx.Response:
        index = min(self.poll_count, len(self.statuses) - 1)
        self.poll_count += 1
        return httpx.Response(status_code=200, json={"id": task_id, **self.statuses[index]})

    def handler(self, request: httpx.Request) -> httpx.Response:
        """
        Dispatch incoming requests to mock handlers.

        Parameters
        ----------
        request : httpx.Request
            Incoming HTTP request.

        Returns
        -------
        httpx.Response
            Mock response.
        """
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path.endswith("/instructions"):
            return self._handle_submit(request=request)

        if request.method == "GET" and path.startswith("/api/v1/tasks/"):
            return self._handle_status(task_id=path.split("/")[-1])

        return httpx.Response(status_code=404, json={"error": "not found"})


def request_json(request: httpx.Request) -> t.Any:
    return json.loads(request.read())


def make_task_transport(api: FakeTaskAPI) -> httpx.MockTransport:
    return httpx.MockTransport(handler=api.handler)
