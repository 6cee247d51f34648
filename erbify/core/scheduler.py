"""
Batch scheduling: fixed lanes of sequential work, all lanes in parallel.
"""

import asyncio
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from erbify.config import LANE_COUNT, SOURCE_FORMAT
from erbify.core.models import (
    BatchPlan,
    BatchResult,
    ConversionOutcome,
    ConversionTask,
    plan_batches,
)
from erbify.core.progress import ProgressReporter
from erbify.core.retry_manager import RetryingConverter


class BatchScheduler:
    """
    Splits the input into ``lane_count`` contiguous lanes and runs them together.

    Inside a lane, a task starts only after the previous task's whole retry
    sequence has finished. The number of lanes is the only bound on how many
    requests are in flight.
    """

    def __init__(self, converter: RetryingConverter,
                 lane_count: int = LANE_COUNT,
                 source_format: str = SOURCE_FORMAT,
                 reporter: Optional[ProgressReporter] = None,
                 model: str = ""):
        if lane_count < 1:
            raise ValueError("lane_count must be at least 1")
        self.converter = converter
        self.lane_count = lane_count
        self.source_format = source_format
        self.reporter = reporter or converter.reporter
        self.model = model

    def plan(self, files: Sequence[Union[str, Path]]) -> BatchPlan:
        return plan_batches(files, self.lane_count, self.source_format)

    async def _run_lane(self, lane: int, tasks: Sequence[ConversionTask],
                        total: int) -> List[Tuple[ConversionTask, ConversionOutcome]]:
        results = []
        for task in tasks:
            self.reporter.file_started(lane, task.index, total, task.path)
            outcome = await self.converter.convert_with_retry(task, lane=lane)
            results.append((task, outcome))
        return results

    async def run(self, files: Sequence[Union[str, Path]]) -> BatchResult:
        """
        Convert every file and wait for all lanes to finish.

        Args:
            files: Paths to convert, in order

        Returns:
            BatchResult with one final outcome per input file, in input order
        """
        if not files:
            return BatchResult()

        plan = self.plan(files)
        counters = self.converter.counters
        start = time.monotonic()

        self.reporter.batch_started(plan.total, self.lane_count, self.source_format,
                                    plan.lanes[0][0].target_format, self.model)

        lane_results = await asyncio.gather(*(
            self._run_lane(lane, tasks, plan.total)
            for lane, tasks in enumerate(plan.lanes)
            if tasks
        ))

        outcomes = [pair for results in lane_results for pair in results]
        self.reporter.batch_finished(counters.snapshot())

        return BatchResult(
            outcomes=outcomes,
            converted=sum(1 for _, o in outcomes if o.ok and not o.skipped),
            skipped=sum(1 for _, o in outcomes if o.ok and o.skipped),
            failed=sum(1 for _, o in outcomes if not o.ok),
            duration=time.monotonic() - start
        )
