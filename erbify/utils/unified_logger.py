"""
Console logging for erbify.

Every lane of a run writes through one UnifiedLogger. Each call prints a
timestamped, optionally colored line and hands a structured entry to an
optional callback (tests use it to inspect what was reported).
"""
import sys
import os
from datetime import datetime
from typing import Optional, Dict, Any, Callable
from enum import Enum


class LogLevel(Enum):
    """Log levels, ordered by severity"""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class LogType(Enum):
    """Kind of event a log line describes"""
    GENERAL = "general"
    BATCH_START = "batch_start"
    BATCH_END = "batch_end"
    FILE_START = "file_start"
    FILE_RETRY = "file_retry"
    FILE_SUCCESS = "file_success"
    FILE_SKIPPED = "file_skipped"
    FILE_FAILURE = "file_failure"
    LLM_REQUEST = "llm_request"
    LLM_RESPONSE = "llm_response"
    ERROR_DETAIL = "error_detail"


class Palette:
    """ANSI coloring, switched off for NO_COLOR and non-tty output"""

    CODES = {
        'yellow': '\033[93m',
        'white': '\033[97m',
        'gray': '\033[90m',
        'orange': '\033[38;5;214m',
        'green': '\033[92m',
        'red': '\033[91m',
    }
    RESET = '\033[0m'

    def __init__(self, enabled: bool = True):
        self.enabled = enabled and os.environ.get('NO_COLOR') is None and sys.stdout.isatty()

    def paint(self, text: str, color: str) -> str:
        if not self.enabled:
            return text
        return f"{self.CODES[color]}{text}{self.RESET}"


_LEVEL_COLORS = {
    LogLevel.DEBUG: 'gray',
    LogLevel.INFO: 'white',
    LogLevel.WARNING: 'yellow',
    LogLevel.ERROR: 'red',
    LogLevel.CRITICAL: 'red',
}

# Per-event colors win over the level color
_TYPE_COLORS = {
    LogType.FILE_SUCCESS: 'green',
    LogType.FILE_RETRY: 'yellow',
    LogType.FILE_SKIPPED: 'yellow',
    LogType.FILE_FAILURE: 'red',
}


class UnifiedLogger:
    """
    Logger shared by the CLI, the scheduler lanes and the translation client.

    Lines below ``min_level`` are dropped entirely, including the structured
    entry. Batch start/end, service request/response and error details get
    multi-line renderings; everything else is a single line.
    """

    def __init__(self,
                 name: str = "erbify",
                 console_output: bool = True,
                 enable_colors: bool = True,
                 min_level: LogLevel = LogLevel.INFO,
                 storage_callback: Optional[Callable[[Dict[str, Any]], None]] = None):
        """
        Args:
            name: Logger name
            console_output: Print lines to stdout
            enable_colors: Allow ANSI colors (still off for NO_COLOR or non-tty output)
            min_level: Lowest level that is emitted
            storage_callback: Receives each structured entry
        """
        self.name = name
        self.console_output = console_output
        self.min_level = min_level
        self.storage_callback = storage_callback
        self.palette = Palette(enable_colors)
        self.batch_started_at: Optional[datetime] = None

        self._renderers = {
            LogType.BATCH_START: self._render_batch_start,
            LogType.BATCH_END: self._render_batch_end,
            LogType.LLM_REQUEST: self._render_request,
            LogType.LLM_RESPONSE: self._render_response,
            LogType.ERROR_DETAIL: self._render_error_detail,
        }

    def set_colors(self, enabled: bool) -> None:
        self.palette = Palette(enabled)

    @staticmethod
    def _clock() -> str:
        return datetime.now().strftime("%H:%M:%S")

    def render(self, level: LogLevel, message: str, log_type: LogType,
               data: Dict[str, Any]) -> str:
        """Build the console text for one event."""
        renderer = self._renderers.get(log_type)
        if renderer:
            return renderer(message, data)

        color = _TYPE_COLORS.get(log_type, _LEVEL_COLORS[level])
        tag = "" if level in (LogLevel.DEBUG, LogLevel.INFO) else f"[{level.name}] "
        return self.palette.paint(f"[{self._clock()}] {tag}{message}", color)

    def _render_batch_start(self, message: str, data: Dict[str, Any]) -> str:
        self.batch_started_at = datetime.now()
        paint = self.palette.paint
        lines = [paint(message, 'yellow')]
        if 'source_format' in data:
            lines.append(paint(f"Formats: {data['source_format']} -> {data.get('target_format', 'erb')}", 'white'))
        for key, label in (('model', 'Model'), ('lanes', 'Lanes')):
            if key in data:
                lines.append(paint(f"{label}: {data[key]}", 'gray'))
        return '\n'.join(lines)

    def _render_batch_end(self, message: str, data: Dict[str, Any]) -> str:
        paint = self.palette.paint
        lines = ["", paint(message, 'white')]
        if self.batch_started_at:
            lines.append(paint(f"Duration: {datetime.now() - self.batch_started_at}", 'gray'))
        lines.append(paint(f"Converted: {data.get('converted', 0)}", 'white'))
        if data.get('skipped'):
            lines.append(paint(f"Skipped (empty): {data['skipped']}", 'yellow'))
        if data.get('retries'):
            lines.append(paint(f"Retries: {data['retries']}", 'gray'))
        if data.get('failed'):
            lines.append(paint(f"Failed: {data['failed']}", 'red'))
        return '\n'.join(lines)

    def _render_request(self, message: str, data: Dict[str, Any]) -> str:
        paint = self.palette.paint
        lines = [paint(f"[{self._clock()}] -> {message} ({data.get('model', '?')})", 'yellow')]
        lines.append(paint(data.get('prompt', ''), 'orange'))
        return '\n'.join(lines)

    def _render_response(self, message: str, data: Dict[str, Any]) -> str:
        paint = self.palette.paint
        lines = [paint(f"[{self._clock()}] <- {message}", 'green')]
        if 'execution_time' in data:
            lines.append(paint(f"{data['execution_time']:.2f}s, tokens in={data.get('prompt_tokens', 0)} "
                               f"out={data.get('completion_tokens', 0)}", 'gray'))
        lines.append(paint(data.get('response', ''), 'green'))
        return '\n'.join(lines)

    def _render_error_detail(self, message: str, data: Dict[str, Any]) -> str:
        paint = self.palette.paint
        lines = [paint(f"[{self._clock()}] ERROR: {message}", 'red')]
        if data.get('details'):
            lines.append(paint(f"Details: {data['details']}", 'red'))
        return '\n'.join(lines)

    def _print(self, text: str) -> None:
        try:
            print(text, flush=True)
        except UnicodeEncodeError:
            # Legacy console codepages cannot print every character
            print(text.encode('ascii', 'replace').decode('ascii'), flush=True)

    def log(self, level: LogLevel, message: str,
            log_type: LogType = LogType.GENERAL,
            data: Optional[Dict[str, Any]] = None):
        """Emit one event at ``level``."""
        if level.value < self.min_level.value:
            return

        data = data or {}
        if self.console_output:
            self._print(self.render(level, message, log_type, data))

        if self.storage_callback:
            self.storage_callback({
                'timestamp': datetime.now().isoformat(),
                'logger': self.name,
                'level': level.name,
                'type': log_type.value,
                'message': message,
                'data': data
            })

    def debug(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.DEBUG, message, log_type, data)

    def info(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.INFO, message, log_type, data)

    def warning(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.WARNING, message, log_type, data)

    def error(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.ERROR, message, log_type, data)

    def critical(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.CRITICAL, message, log_type, data)


_global_logger: Optional[UnifiedLogger] = None


def get_logger(**kwargs) -> UnifiedLogger:
    """
    Return the process-wide logger, creating it on first use.

    Keyword arguments are passed to UnifiedLogger only when it is created.
    """
    global _global_logger
    if _global_logger is None:
        _global_logger = UnifiedLogger(**kwargs)
    return _global_logger


def setup_cli_logger(enable_colors: bool = True) -> UnifiedLogger:
    """Configure the process-wide logger for terminal use."""
    # Lazy: get_logger() must work even when config fails to load
    from erbify.config import DEBUG_MODE

    logger = get_logger()
    logger.console_output = True
    logger.min_level = LogLevel.DEBUG if DEBUG_MODE else LogLevel.INFO
    logger.set_colors(enable_colors)
    return logger
