"""
Centralized configuration
"""
import os
import logging
from pathlib import Path
from dataclasses import dataclass
from dotenv import load_dotenv

from erbify.core.exceptions import ConfigurationError

# Setup debug logger for configuration
_config_logger = logging.getLogger('config')

# Load .env from the current working directory if it exists
_env_file = Path.cwd() / '.env'
load_dotenv(_env_file)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, '').strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).strip().lower() == 'true'


# Load from environment variables with defaults
GOOGLE_API_KEY = os.getenv('GOOGLE_API_KEY', '') or os.getenv('GEMINI_API_KEY', '')
SOURCE_FORMAT = os.getenv('FORMAT', 'haml').strip().lstrip('.') or 'haml'
TARGET_FORMAT = 'erb'

GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-3-pro-preview')
GEMINI_API_BASE = 'https://generativelanguage.googleapis.com/v1beta'
GEMINI_THINKING_LEVEL = os.getenv('GEMINI_THINKING_LEVEL', 'LOW')
REQUEST_TIMEOUT = _env_int('REQUEST_TIMEOUT', 900)

# Scheduling and retry
LANE_COUNT = _env_int('LANE_COUNT', 8)
MAX_CONVERSION_ATTEMPTS = _env_int('MAX_CONVERSION_ATTEMPTS', 4)
RETRY_DELAY_SECONDS = _env_float('RETRY_DELAY_SECONDS', 0.0)
RATE_LIMIT_MAX_WAIT = _env_float('RATE_LIMIT_MAX_WAIT', 60.0)
RETRY_ALL_FAILURES = _env_bool('RETRY_ALL_FAILURES', False)

DEBUG_MODE = _env_bool('DEBUG_MODE', False)

if DEBUG_MODE:
    _config_logger.setLevel(logging.DEBUG)
    _config_logger.debug(f"SOURCE_FORMAT: {SOURCE_FORMAT}")
    _config_logger.debug(f"GEMINI_MODEL: {GEMINI_MODEL}")
    _config_logger.debug(f"LANE_COUNT: {LANE_COUNT}")
    _config_logger.debug(f"MAX_CONVERSION_ATTEMPTS: {MAX_CONVERSION_ATTEMPTS}")
    _config_logger.debug(f"GOOGLE_API_KEY: {'***' + GOOGLE_API_KEY[-4:] if GOOGLE_API_KEY else '(not set)'}")


@dataclass
class ConversionConfig:
    """Settings for one conversion run"""

    api_key: str = GOOGLE_API_KEY
    source_format: str = SOURCE_FORMAT
    model: str = GEMINI_MODEL
    thinking_level: str = GEMINI_THINKING_LEVEL
    timeout: int = REQUEST_TIMEOUT

    lane_count: int = LANE_COUNT
    max_attempts: int = MAX_CONVERSION_ATTEMPTS
    retry_delay: float = RETRY_DELAY_SECONDS
    rate_limit_max_wait: float = RATE_LIMIT_MAX_WAIT
    retry_all_failures: bool = RETRY_ALL_FAILURES

    enable_colors: bool = True

    @classmethod
    def from_env(cls) -> 'ConversionConfig':
        """Create config from the environment loaded at import time"""
        return cls(enable_colors=os.environ.get('NO_COLOR') is None)

    def validate(self) -> None:
        """
        Check settings that would make the run impossible.

        Raises:
            ConfigurationError: If the API key is missing or a count is not positive
        """
        if not self.api_key:
            raise ConfigurationError(
                "GOOGLE_API_KEY is not set. Add it to your environment or a .env file."
            )
        if self.lane_count < 1:
            raise ConfigurationError("LANE_COUNT must be at least 1",
                                     {'lane_count': self.lane_count})
        if self.max_attempts < 1:
            raise ConfigurationError("MAX_CONVERSION_ATTEMPTS must be at least 1",
                                     {'max_attempts': self.max_attempts})
        if self.retry_delay < 0:
            raise ConfigurationError("RETRY_DELAY_SECONDS cannot be negative",
                                     {'retry_delay': self.retry_delay})
        if self.rate_limit_max_wait < 0:
            raise ConfigurationError("RATE_LIMIT_MAX_WAIT cannot be negative",
                                     {'rate_limit_max_wait': self.rate_limit_max_wait})

    def to_dict(self) -> dict:
        """Convert to dictionary for logging, with the key masked"""
        return {
            'api_key': '***' + self.api_key[-4:] if self.api_key else '(not set)',
            'source_format': self.source_format,
            'model': self.model,
            'thinking_level': self.thinking_level,
            'timeout': self.timeout,
            'lane_count': self.lane_count,
            'max_attempts': self.max_attempts,
            'retry_delay': self.retry_delay,
            'rate_limit_max_wait': self.rate_limit_max_wait,
            'retry_all_failures': self.retry_all_failures,
        }
