"""
Synthetic progress estimation and reporting for task polling.
"""

from __future__ import annotations

import inspect
import random
import typing as t


class ProgressUpdate(t.TypedDict):
    """
    Payload passed to a progress reporter.
    """

    progress: str | int
    total: str | int
    message: str


ProgressReporter = t.Callable[[ProgressUpdate], t.Any]


def estimate_progress(idx: int) -> int:
    """
    Map a poll index to a plausible progress percentage.

    The estimate never reaches 100: completion is only signalled by the
    remote task status.

    Parameters
    ----------
    idx : int
        Zero-based poll index.

    Returns
    -------
    int
        Progress estimate in ``[0, 99]``.
    """
    if idx < 0:
        raise ValueError(f"Poll index must be non-negative, got {idx}")
    if idx < 10:
        # slope is re-sampled on every call
        return idx * random.randint(2, 5)
    if idx < 20:
        return 50 + (idx - 10) * 3
    if idx < 25:
        return 80 + (idx - 20) * 2
    if idx < 32:
        return 90 + (idx - 25)
    return 99


async def report_progress(
    *,
    reporter: ProgressReporter | None,
    progress: str | int,
    total: str | int,
    message: str,
) -> None:
    """
    Send a progress update if a usable reporter is present.

    Parameters
    ----------
    reporter : ProgressReporter | None
        Optional reporter. Non-callable values are ignored.
    progress : str | int
        Current progress value.
    total : str | int
        Progress total.
    message : str
        Human-readable progress message.
    """
    if not callable(reporter):
        return
    outcome = reporter(ProgressUpdate(progress=progress, total=total, message=message))
    if inspect.isawaitable(outcome):
        await outcome
