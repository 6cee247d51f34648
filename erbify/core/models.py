"""
Data structures shared by the converter, retry layer and scheduler.
"""

import asyncio
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from erbify.config import TARGET_FORMAT


@dataclass(frozen=True)
class ConversionTask:
    """
    A single file waiting to be converted.

    Attributes:
        path: Location of the source template
        source_format: Dialect tag of the file, e.g. "haml"
        target_format: Dialect tag of the output, always "erb"
        index: Position of the file in the input list (0-based)
    """
    path: Path
    source_format: str
    target_format: str = TARGET_FORMAT
    index: int = 0


@dataclass(frozen=True)
class Success:
    """Outcome of an attempt that finished.

    ``skipped`` marks an empty input that was left in place; ``output_path``
    is then the untouched input path.
    """
    output_path: Path
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Outcome of an attempt that raised somewhere along the way."""
    reason: str
    recoverable: bool = True
    error_type: str = ""
    retry_after: Optional[float] = None

    @property
    def ok(self) -> bool:
        return False


ConversionOutcome = Union[Success, Failure]


@dataclass
class RetryState:
    """Attempt bookkeeping for one task while it is being processed."""
    max_attempts: int
    attempt: int = 0
    last_outcome: Optional[ConversionOutcome] = None

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts

    def record(self, outcome: ConversionOutcome) -> None:
        self.attempt += 1
        self.last_outcome = outcome


@dataclass(frozen=True)
class BatchPlan:
    """Ordered lanes, each an ordered run of tasks taken from the input list."""
    lanes: Tuple[Tuple[ConversionTask, ...], ...]

    @property
    def total(self) -> int:
        return sum(len(lane) for lane in self.lanes)

    def lane_sizes(self) -> Tuple[int, ...]:
        return tuple(len(lane) for lane in self.lanes)

    def tasks(self) -> Tuple[ConversionTask, ...]:
        """All tasks in input order."""
        return tuple(task for lane in self.lanes for task in lane)


def plan_batches(files: Sequence[Union[str, Path]], lane_count: int,
                 source_format: str) -> BatchPlan:
    """
    Split ``files`` into ``lane_count`` contiguous chunks.

    Chunk size is ceil(total / lane_count); when there are fewer files than
    lanes the trailing lanes are empty.

    Args:
        files: Input paths, in the order given by the caller
        lane_count: Number of lanes to produce
        source_format: Dialect tag stamped on every task

    Returns:
        BatchPlan with exactly ``lane_count`` lanes
    """
    if lane_count < 1:
        raise ValueError("lane_count must be at least 1")

    tasks = [
        ConversionTask(path=Path(f), source_format=source_format, index=i)
        for i, f in enumerate(files)
    ]
    chunk_size = math.ceil(len(tasks) / lane_count) if tasks else 0
    lanes = tuple(
        tuple(tasks[i * chunk_size:(i + 1) * chunk_size])
        for i in range(lane_count)
    )
    return BatchPlan(lanes=lanes)


class ProgressCounters:
    """
    Process-wide counters updated from every lane.

    Increments go through an asyncio.Lock so concurrent lanes never lose an
    update. ``converted`` only ever grows and is bumped by the converter's
    success path.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self.converted = 0
        self.skipped = 0
        self.failed = 0
        self.retries = 0

    async def increment(self, name: str, amount: int = 1) -> int:
        """Add ``amount`` to counter ``name`` and return its new value."""
        if name not in ("converted", "skipped", "failed", "retries"):
            raise KeyError(name)
        async with self._lock:
            value = getattr(self, name) + amount
            setattr(self, name, value)
            return value

    def snapshot(self) -> Dict[str, int]:
        return {
            'converted': self.converted,
            'skipped': self.skipped,
            'failed': self.failed,
            'retries': self.retries,
        }


@dataclass
class BatchResult:
    """Summary of a finished batch run."""
    outcomes: List[Tuple[ConversionTask, ConversionOutcome]] = field(default_factory=list)
    converted: int = 0
    skipped: int = 0
    failed: int = 0
    duration: float = 0.0

    @property
    def total(self) -> int:
        return len(self.outcomes)
