"""
Command-line interface for template conversion
"""
import sys
import argparse
import asyncio
from typing import List, Optional

from erbify.core.exceptions import ConfigurationError
from erbify.core.progress import ProgressReporter
from erbify.utils.unified_logger import get_logger, setup_cli_logger, LogType


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="erbify",
        description="Convert template files (HAML by default) to ERB using Google Gemini. "
                    "Each converted file replaces its original."
    )
    parser.add_argument("files", nargs="*",
                        help="Template files to convert. Put -- before paths that start with a dash.")
    return parser


async def run_conversion(files: List[str], config):
    """Wire the pipeline together and convert ``files``."""
    # These modules read configuration at import time
    from erbify.core.converter import FileConverter
    from erbify.core.llm.client import TranslationClient
    from erbify.core.llm.providers import GeminiProvider
    from erbify.core.models import ProgressCounters
    from erbify.core.retry_manager import RetryConfig, RetryingConverter
    from erbify.core.scheduler import BatchScheduler

    provider = GeminiProvider(
        api_key=config.api_key,
        model=config.model,
        thinking_level=config.thinking_level,
        timeout=config.timeout,
        max_connections=config.lane_count
    )
    reporter = ProgressReporter()
    counters = ProgressCounters()

    async with TranslationClient(provider) as client:
        converter = FileConverter(client, counters=counters, reporter=reporter)
        retrying = RetryingConverter(converter, RetryConfig(
            max_attempts=config.max_attempts,
            delay=config.retry_delay,
            retry_all_failures=config.retry_all_failures,
            max_rate_limit_wait=config.rate_limit_max_wait
        ))
        scheduler = BatchScheduler(retrying, lane_count=config.lane_count,
                                   source_format=config.source_format,
                                   reporter=reporter, model=config.model)
        return await scheduler.run(files)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        from erbify.config import ConversionConfig
        config = ConversionConfig.from_env()
        config.validate()
    except ConfigurationError as e:
        get_logger().critical(f"Configuration error: {e.message}", LogType.ERROR_DETAIL,
                              {'details': str(e)})
        return 1

    logger = setup_cli_logger(enable_colors=config.enable_colors)

    if not args.files:
        ProgressReporter(logger).no_files()
        return 0

    logger.debug("Configuration loaded", data=config.to_dict())

    try:
        asyncio.run(run_conversion(args.files, config))
    except KeyboardInterrupt:
        logger.warning("Interrupted, remaining files were not converted.")
        return 130

    # Per-file failures are reported in the log, not in the exit status
    return 0


if __name__ == "__main__":
    sys.exit(main())
