"""
Tests for the progress estimator in taskrelay.progress.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from taskrelay.progress import estimate_progress, report_progress


@pytest.mark.parametrize("idx", range(0, 60))
def test_estimate_is_bounded_integer(idx: int):
    value = estimate_progress(idx)
    assert isinstance(value, int)
    assert 0 <= value < 100


@pytest.mark.parametrize("idx", [32, 33, 100, 10_000])
def test_estimate_is_capped_at_99(idx: int):
    assert {estimate_progress(idx) for _ in range(5)} == {99}


@pytest.mark.parametrize(
    ("idx", "expected"),
    [(10, 50), (15, 65), (19, 77), (20, 80), (24, 88), (25, 90), (31, 96)],
)
def test_estimate_deterministic_bands(idx: int, expected: int):
    assert [estimate_progress(idx) for _ in range(3)] == [expected] * 3


def test_estimate_deterministic_band_formula():
    for idx in range(10, 20):
        assert estimate_progress(idx) == 50 + (idx - 10) * 3


def test_estimate_early_band_uses_random_slope():
    with patch("taskrelay.progress.random.randint", return_value=4) as randint:
        assert estimate_progress(7) == 28
    randint.assert_called_once_with(2, 5)


def test_estimate_early_band_range():
    for idx in range(10):
        assert 2 * idx <= estimate_progress(idx) <= 5 * idx


def test_estimate_rejects_negative_index():
    with pytest.raises(ValueError):
        estimate_progress(-1)


@pytest.mark.asyncio
async def test_report_progress_calls_reporter():
    reporter = MagicMock(return_value=None)

    await report_progress(reporter=reporter, progress="3", total="100", message="m")

    reporter.assert_called_once_with({"progress": "3", "total": "100", "message": "m"})


@pytest.mark.asyncio
async def test_report_progress_awaits_coroutine_reporter():
    reporter = AsyncMock()

    await report_progress(reporter=reporter, progress=100, total=100, message="done")

    reporter.assert_awaited_once_with({"progress": 100, "total": 100, "message": "done"})


@pytest.mark.asyncio
@pytest.mark.parametrize("reporter", [None, "report", 42])
async def test_report_progress_skips_missing_reporter(reporter):
    await report_progress(reporter=reporter, progress=1, total=1, message="m")
