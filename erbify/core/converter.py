"""
Single-file conversion: read, translate, write the new file, remove the old one.
"""

from typing import Optional

from erbify.core.exceptions import (
    FileReadError,
    FileWriteError,
    classify_error,
    describe_error,
)
from erbify.core.llm.client import TranslationClient
from erbify.core.models import ConversionTask, ConversionOutcome, Success, Failure, ProgressCounters
from erbify.core.progress import ProgressReporter
from erbify.utils.file_utils import derive_output_path, read_text, write_text_atomic, remove_file


class FileConverter:
    """
    Runs one conversion attempt for a task and reports the outcome.

    ``convert`` never raises for errors in the attempt itself; they come back
    as a Failure. Cancellation still propagates.
    """

    def __init__(self, client: TranslationClient,
                 counters: Optional[ProgressCounters] = None,
                 reporter: Optional[ProgressReporter] = None):
        self.client = client
        self.counters = counters or ProgressCounters()
        self.reporter = reporter or ProgressReporter()

    async def convert(self, task: ConversionTask) -> ConversionOutcome:
        """
        Convert the file at ``task.path``.

        Args:
            task: File to convert

        Returns:
            Success with the output path, a skipped Success for empty input,
            or Failure with the error message
        """
        try:
            return await self._convert(task)
        except Exception as e:
            reason = describe_error(e)
            self.reporter.attempt_failed(task.path, reason)
            return Failure(
                reason=reason,
                recoverable=classify_error(e),
                error_type=type(e).__name__,
                retry_after=getattr(e, 'retry_after', None)
            )

    async def _convert(self, task: ConversionTask) -> ConversionOutcome:
        try:
            content = await read_text(task.path)
        except UnicodeDecodeError as e:
            raise FileReadError(f"{task.path} is not valid UTF-8: {e.reason}",
                                {'path': str(task.path)}) from e

        if not content.strip():
            await self.counters.increment("skipped")
            self.reporter.file_skipped(task.path)
            return Success(output_path=task.path, skipped=True)

        converted = await self.client.translate(content, task.source_format)

        output_path = derive_output_path(task.path, task.source_format, task.target_format)
        try:
            await write_text_atomic(output_path, converted)
        except OSError as e:
            raise FileWriteError(f"Could not write {output_path}: {describe_error(e)}",
                                 {'path': str(output_path)},
                                 recoverable=classify_error(e)) from e

        # Writing over the input already replaced it
        if output_path.resolve() != task.path.resolve():
            try:
                await remove_file(task.path)
            except OSError as e:
                raise FileWriteError(f"Wrote {output_path} but could not remove {task.path}: {describe_error(e)}",
                                     {'path': str(task.path)},
                                     recoverable=classify_error(e)) from e

        converted_count = await self.counters.increment("converted")
        self.reporter.file_converted(task.path, output_path, converted_count)
        return Success(output_path=output_path)
