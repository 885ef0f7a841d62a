from .client import TaskClient as TaskClient
from .config import ClientSettings as ClientSettings
from .context import ExecutionContext as ExecutionContext
from .exceptions import MissingTaskIdError as MissingTaskIdError
from .exceptions import SubmissionHTTPError as SubmissionHTTPError
from .exceptions import TaskFailedError as TaskFailedError
from .headers import create_api_headers as create_api_headers
from .progress import estimate_progress as estimate_progress
from .tools import DebugStats as DebugStats
from .tools import create_tool_fn as create_tool_fn

__all__ = [
    "TaskClient",
    "ClientSettings",
    "ExecutionContext",
    "MissingTaskIdError",
    "SubmissionHTTPError",
    "TaskFailedError",
    "create_api_headers",
    "estimate_progress",
    "DebugStats",
    "create_tool_fn",
]
