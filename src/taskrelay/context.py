"""
Per-call collaborators handed to the task client and wrapped tools.
"""

from __future__ import annotations

import typing as t
from dataclasses import dataclass, field

import structlog

from taskrelay.progress import ProgressReporter


class Logger(t.Protocol):
    """
    Structured logger capability. Any structlog bound logger satisfies it.
    """

    def info(self, event: str, **kw: t.Any) -> t.Any: ...

    def error(self, event: str, **kw: t.Any) -> t.Any: ...


@dataclass(frozen=True)
class ExecutionContext:
    """
    Collaborators for a single submit or poll call.

    Parameters
    ----------
    log : Logger
        Structured logger receiving task lifecycle events.
    report_progress : ProgressReporter | None
        Optional progress reporter, checked with ``callable`` before use.
    instructions : typing.Sequence[typing.Mapping[str, typing.Any]]
        Instructions of the current task, used to label progress messages.
    """

    log: Logger = field(default_factory=lambda: structlog.get_logger("taskrelay"))
    report_progress: ProgressReporter | None = None
    instructions: t.Sequence[t.Mapping[str, t.Any]] = ()

    @property
    def instruction_label(self) -> str:
        """
        Action of the first instruction, or ``"unknown"``.
        """
        if not self.instructions:
            return "unknown"
        return self.instructions[0].get("action") or "unknown"
