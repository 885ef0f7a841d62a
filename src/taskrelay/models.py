import json
import typing as t
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

TASK_TYPE = "crawler_automation"
DEFAULT_COUNTRY = "US"


class TaskStatus(StrEnum):
    FINALIZED = "finalized"
    AWAITING = "awaiting"
    STOPPED = "stopped"
    FAILED = "failed"


SUCCESS_STATUSES = frozenset({TaskStatus.FINALIZED, TaskStatus.AWAITING, TaskStatus.STOPPED})


class Instruction(BaseModel):
    """Single browser action descriptor. Unknown fields are passed through."""

    model_config = ConfigDict(extra="allow")

    action: str


class GeoLocation(BaseModel):
    country: str = DEFAULT_COUNTRY


class InstructionsPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    geo_location: GeoLocation = Field(default_factory=GeoLocation, alias="geoLocation")
    awaitable: bool = True
    instructions: list[dict[str, t.Any]]
    project: str | None
    type: str = TASK_TYPE


class SubmitTaskResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    execution_id: t.Any = Field(default=None, alias="executionId")

    @property
    def task_id(self) -> str | None:
        if self.execution_id is None or self.execution_id == "":
            return None
        return str(self.execution_id)


class TaskStatusResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: t.Any = None
    result: t.Any = None
    error: t.Any = None

    @property
    def is_success(self) -> bool:
        return isinstance(self.status, str) and self.status in SUCCESS_STATUSES

    @property
    def is_failed(self) -> bool:
        return self.status == TaskStatus.FAILED


class TextContent(BaseModel):
    type: t.Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    content: list[TextContent]

    @classmethod
    def from_task_result(cls, task_id: str, result: t.Any) -> "ToolResult":
        text = json.dumps({"executionId": task_id, "result": result}, indent=2)
        return cls(content=[TextContent(text=text)])
