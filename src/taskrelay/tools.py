"""
Tool invocation wrapper adding call counting, timing, structured logging
and error normalization around async tool functions.
"""

from __future__ import annotations

import functools
import time
import typing as t
from dataclasses import dataclass, field

from taskrelay.client import read_response_text
from taskrelay.context import ExecutionContext
from taskrelay.exceptions import (
    ErrorKind,
    ToolHTTPError,
    ToolNetworkError,
    classify_error,
    get_error_response,
)

ToolFn = t.Callable[[t.Any, ExecutionContext], t.Awaitable[t.Any]]


@dataclass
class DebugStats:
    """
    Caller-owned invocation counters, keyed by tool name.
    """

    tool_calls: dict[str, int] = field(default_factory=dict)

    def record_call(self, name: str) -> int:
        count = self.tool_calls.get(name, 0) + 1
        self.tool_calls[name] = count
        return count


def _duration_ms(started_at: float) -> int:
    return int((time.perf_counter() - started_at) * 1000)


def create_tool_fn(debug_stats: DebugStats) -> t.Callable[[str, ToolFn], ToolFn]:
    """
    Build a wrapper factory bound to a counter store.

    Parameters
    ----------
    debug_stats : DebugStats
        Counter store incremented on every wrapped call.

    Returns
    -------
    typing.Callable[[str, ToolFn], ToolFn]
        ``wrap(name, fn)`` returning the instrumented tool.
    """

    def wrap(name: str, fn: ToolFn) -> ToolFn:
        @functools.wraps(fn)
        async def tool(params: t.Any, context: ExecutionContext) -> t.Any:
            log = context.log
            debug_stats.record_call(name)
            started_at = time.perf_counter()
            log.info(f"[{name}] Executing tool", params=params)
            try:
                result = await fn(params, context)
                log.info(f"[{name}] Tool succeeded", duration_ms=_duration_ms(started_at))
                return result
            except Exception as error:
                kind = classify_error(error=error)
                response = get_error_response(error=error)
                if kind is ErrorKind.HTTP and response is not None:
                    error_text = await read_response_text(response=response, log=log)
                    log.error(
                        f"[{name}] HTTP error",
                        status=response.status_code,
                        status_text=response.reason_phrase,
                        body=error_text,
                    )
                    detail = error_text or response.reason_phrase or "Unknown HTTP error"
                    raise ToolHTTPError(
                        f"HTTP {response.status_code}: {detail}",
                        response=response,
                        body=error_text,
                    ) from error
                if kind is ErrorKind.NETWORK:
                    log.error(f"[{name}] Fetch error", error=str(error))
                    if isinstance(error, ToolNetworkError):
                        raise
                    raise ToolNetworkError(f"Network error: {error}") from error
                log.error(
                    f"[{name}] Unexpected error",
                    error=str(error),
                    error_type=type(error).__name__,
                )
                raise
            finally:
                log.info(f"[{name}] Tool finished", duration_ms=_duration_ms(started_at))

        return tool

    return wrap
