"""
Unit tests for the batch helpers.

Tests run_batch / run_batch_sync including:
- Result collection and input-order view
- Progress callback and progress logging
- Error propagation
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Tuple

import pytest

from jobpool.errors import JobError, StuckSchedulerError
from jobpool.parallel.batch import BatchResult, run_batch, run_batch_sync
from jobpool.types import IndexedResult


async def square_after_delay(value: int, index: int) -> int:
    await asyncio.sleep(0.001 * (5 - index))
    return value * value


class TestBatchResult:
    """Tests for BatchResult dataclass."""

    def test_in_input_order(self) -> None:
        """Test values are reordered by input index."""
        batch = BatchResult(
            results=[IndexedResult(2, "c"), IndexedResult(0, "a"), IndexedResult(1, "b")],
            total_time_ms=12.0,
            throughput_rps=250.0,
        )

        assert batch.in_input_order() == ["a", "b", "c"]
        assert batch.completed_count == 3


class TestRunBatch:
    """Tests for run_batch."""

    @pytest.mark.asyncio
    async def test_collects_all_results(self) -> None:
        """Test every input is processed and progress is reported."""
        progress: List[Tuple[int, int]] = []

        batch = await run_batch(
            square_after_delay,
            [1, 2, 3, 4],
            max_at_once=2,
            progress_callback=lambda done, total: progress.append((done, total)),
        )

        assert batch.in_input_order() == [1, 4, 9, 16]
        assert progress == [(1, 4), (2, 4), (3, 4), (4, 4)]
        assert batch.total_time_ms > 0
        assert batch.throughput_rps > 0

    @pytest.mark.asyncio
    async def test_empty_batch(self) -> None:
        """Test running an empty batch."""
        batch = await run_batch(square_after_delay, [], max_at_once=5)

        assert batch.results == []
        assert batch.completed_count == 0

    @pytest.mark.asyncio
    async def test_progress_logging(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test progress lines are logged at the configured interval."""
        caplog.set_level(logging.INFO, logger="jobpool")

        await run_batch(square_after_delay, [1, 2, 3, 4], max_at_once=4, progress_interval=2)

        messages = [record.getMessage() for record in caplog.records]
        assert "Progress: 2/4 (50.0%)" in messages
        assert "Progress: 4/4 (100.0%)" in messages
        assert any(message.startswith("Batch complete: 4 jobs") for message in messages)

    @pytest.mark.asyncio
    async def test_job_error_propagates(self) -> None:
        """Test the first failure ends the batch."""

        async def flaky(value: int, index: int) -> int:
            if value == 3:
                raise ValueError("bad input")
            return value

        with pytest.raises(JobError) as excinfo:
            await run_batch(flaky, [1, 2, 3], max_at_once=1)
        assert excinfo.value.index == 2

    @pytest.mark.asyncio
    async def test_stuck_scheduler_propagates(self) -> None:
        """Test a never-acceptable input ends the batch."""
        with pytest.raises(StuckSchedulerError):
            await run_batch(
                square_after_delay,
                [1, 2],
                max_at_once=2,
                is_candidate_acceptable=lambda index, running: index == 0,
            )


class TestRunBatchSync:
    """Tests for the synchronous wrapper."""

    def test_sync_wrapper(self) -> None:
        """Test run_batch_sync drives its own event loop."""
        batch = run_batch_sync(square_after_delay, [2, 3], max_at_once=2)

        assert batch.in_input_order() == [4, 9]
