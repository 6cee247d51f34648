"""
Human-readable progress lines for a conversion run.

The reporter only formats and emits; nothing it does changes what the
scheduler or converter decide.
"""

from pathlib import Path
from typing import Dict, Optional

from erbify.utils.unified_logger import UnifiedLogger, LogType, get_logger


class ProgressReporter:
    """Emits status lines for batch, file and retry events."""

    def __init__(self, logger: Optional[UnifiedLogger] = None):
        self.logger = logger or get_logger()

    def batch_started(self, total: int, lanes: int, source_format: str,
                      target_format: str, model: str = "") -> None:
        data = {
            'total': total,
            'lanes': lanes,
            'source_format': source_format,
            'target_format': target_format,
        }
        if model:
            data['model'] = model
        self.logger.info(f"Found {total} files. Starting conversion...", LogType.BATCH_START, data)

    def no_files(self) -> None:
        self.logger.info("No files given, nothing to convert.")

    def file_started(self, lane: int, index: int, total: int, path: Path) -> None:
        self.logger.info(f"[Lane {lane + 1}] Processing {index + 1}/{total}: {path}",
                         LogType.FILE_START,
                         {'lane': lane, 'index': index, 'total': total, 'path': str(path)})

    def retrying(self, lane: int, path: Path, retry: int, max_retries: int, reason: str) -> None:
        self.logger.warning(f"[Lane {lane + 1}] Trying again: {retry}/{max_retries} ({path})",
                            LogType.FILE_RETRY,
                            {'lane': lane, 'retry': retry, 'max_retries': max_retries,
                             'path': str(path), 'reason': reason})

    def file_converted(self, path: Path, output_path: Path, converted: int) -> None:
        self.logger.info(f"Converted to: {output_path} (converted: {converted})",
                         LogType.FILE_SUCCESS,
                         {'path': str(path), 'output_path': str(output_path), 'converted': converted})

    def file_skipped(self, path: Path) -> None:
        self.logger.warning(f"Skipping empty file: {path}", LogType.FILE_SKIPPED, {'path': str(path)})

    def attempt_failed(self, path: Path, reason: str) -> None:
        self.logger.error(f"Failed to convert {path}: {reason}", LogType.FILE_FAILURE,
                          {'path': str(path), 'reason': reason})

    def file_abandoned(self, lane: int, path: Path, attempts: int, reason: str) -> None:
        self.logger.error(f"[Lane {lane + 1}] Giving up on {path} after {attempts} attempt(s): {reason}",
                          LogType.FILE_FAILURE,
                          {'lane': lane, 'path': str(path), 'attempts': attempts,
                           'reason': reason, 'final': True})

    def batch_finished(self, counters: Dict[str, int]) -> None:
        self.logger.info("All operations complete.", LogType.BATCH_END, dict(counters))
