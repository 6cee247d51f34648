"""
Retry policy around single-file conversion.

Each file gets a bounded number of attempts. Failures flagged as not
recoverable (rejected API key, missing file, undecodable input...) end the
loop early unless ``retry_all_failures`` is set. A 429 answer carrying Retry-After
pauses for that long, capped by ``max_rate_limit_wait``.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from erbify.config import MAX_CONVERSION_ATTEMPTS, RETRY_DELAY_SECONDS, RETRY_ALL_FAILURES, RATE_LIMIT_MAX_WAIT
from erbify.core.converter import FileConverter
from erbify.core.models import ConversionTask, ConversionOutcome, RetryState, ProgressCounters
from erbify.core.progress import ProgressReporter


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_attempts: Total attempts per file, first one included
        delay: Seconds to wait between attempts (0 retries immediately)
        retry_all_failures: Retry even failures marked as not recoverable
        max_rate_limit_wait: Upper bound on a wait requested by a 429 answer
    """
    max_attempts: int = MAX_CONVERSION_ATTEMPTS
    delay: float = RETRY_DELAY_SECONDS
    retry_all_failures: bool = RETRY_ALL_FAILURES
    max_rate_limit_wait: float = RATE_LIMIT_MAX_WAIT


class RetryingConverter:
    """Calls FileConverter until it succeeds or the attempts run out."""

    def __init__(
        self,
        converter: FileConverter,
        config: Optional[RetryConfig] = None,
        counters: Optional[ProgressCounters] = None,
        reporter: Optional[ProgressReporter] = None
    ):
        """
        Args:
            converter: Performs one attempt
            config: Retry configuration
            counters: Shared counters, defaults to the converter's
            reporter: Progress output, defaults to the converter's
        """
        self.converter = converter
        self.config = config or RetryConfig()
        if self.config.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.counters = counters or converter.counters
        self.reporter = reporter or converter.reporter

    def _wait_before_retry(self, outcome: ConversionOutcome) -> float:
        """Seconds to pause before the next attempt."""
        wait = self.config.delay
        if outcome.retry_after:
            wait = max(wait, min(outcome.retry_after, self.config.max_rate_limit_wait))
        return wait

    def _should_retry(self, outcome: ConversionOutcome, state: RetryState) -> bool:
        if outcome.ok or state.exhausted:
            return False
        return outcome.recoverable or self.config.retry_all_failures

    async def convert_with_retry(self, task: ConversionTask, lane: int = 0) -> ConversionOutcome:
        """
        Convert ``task`` with up to ``max_attempts`` attempts.

        Args:
            task: File to convert
            lane: Lane running the task, used in progress lines

        Returns:
            The first Success, or the last Failure
        """
        state = RetryState(max_attempts=self.config.max_attempts)

        while True:
            outcome = await self.converter.convert(task)
            state.record(outcome)

            if outcome.ok:
                return outcome

            if not self._should_retry(outcome, state):
                await self.counters.increment("failed")
                self.reporter.file_abandoned(lane, task.path, state.attempt, outcome.reason)
                return outcome

            await self.counters.increment("retries")
            self.reporter.retrying(lane, task.path, state.attempt,
                                   self.config.max_attempts - 1, outcome.reason)

            wait = self._wait_before_retry(outcome)
            if wait > 0:
                await asyncio.sleep(wait)
