"""
Logging service for the leak probe
"""

import inspect
import logging
import os
import sys
from enum import Enum
from typing import Callable, List

# Module loggers (logging.getLogger(__name__)) are children of this one,
# so their records reach the same handlers.
ROOT_LOGGER_NAME = "nmt_leak_probe"

LOG_FORMAT = "%(asctime)s - %(filename)s:%(lineno)d - %(levelname)s - %(message)s"


class LogLevel(Enum):
    """Log levels"""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LoggingService:
    """Centralized logging service that can be injected"""

    def __init__(self, level: int = logging.DEBUG):
        self._handlers: List[Callable[[str, LogLevel], None]] = []
        self._logger = logging.getLogger(ROOT_LOGGER_NAME)
        self._logger.setLevel(level)

        # Remove any existing handlers to avoid duplicates
        self._logger.handlers = [
            h for h in self._logger.handlers if not isinstance(h, CallbackHandler)
        ]

        handler = CallbackHandler(self)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        self._logger.addHandler(handler)

    def add_handler(self, handler: Callable[[str, LogLevel], None]):
        """Add a log handler callback"""
        self._handlers.append(handler)

    def remove_handler(self, handler: Callable[[str, LogLevel], None]):
        """Remove a log handler callback"""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def set_level(self, level: int):
        """Change the threshold for the service and its callback handler"""
        self._logger.setLevel(level)
        for handler in self._logger.handlers:
            if isinstance(handler, CallbackHandler):
                handler.setLevel(level)

    def _log_with_caller_info(self, level: int, message: str, exc_info=None):
        """Log message with actual caller's file and line info"""
        # Skip this method and the public method that called it
        frame = inspect.currentframe()
        if frame and frame.f_back and frame.f_back.f_back:
            caller_frame = frame.f_back.f_back
            filename = os.path.basename(caller_frame.f_code.co_filename)
            lineno = caller_frame.f_lineno

            if not self._logger.isEnabledFor(level):
                return
            if exc_info is True:
                exc_info = sys.exc_info()
            record = self._logger.makeRecord(
                self._logger.name, level, filename, lineno, message, args=(), exc_info=exc_info
            )
            self._logger.handle(record)
        else:
            self._logger.log(level, message, exc_info=exc_info)

    def debug(self, message: str):
        """Log debug message"""
        self._log_with_caller_info(logging.DEBUG, message)

    def info(self, message: str):
        """Log info message"""
        self._log_with_caller_info(logging.INFO, message)

    def warning(self, message: str):
        """Log warning message"""
        self._log_with_caller_info(logging.WARNING, message)

    def error(self, message: str, exc_info=None):
        """Log error message"""
        self._log_with_caller_info(logging.ERROR, message, exc_info=exc_info)

    def critical(self, message: str):
        """Log critical message"""
        self._log_with_caller_info(logging.CRITICAL, message)

    def _emit_to_handlers(self, message: str, level: LogLevel):
        """Emit message to all registered handlers"""
        for handler in self._handlers:
            try:
                handler(message, level)
            except Exception as e:
                # Don't let handler errors break logging
                print(f"Error in log handler: {e}", file=sys.stderr)


class CallbackHandler(logging.Handler):
    """Logging handler that routes records to the service's callbacks"""

    def __init__(self, logging_service: LoggingService):
        super().__init__()
        self.logging_service = logging_service

    def emit(self, record):
        """Emit a log record"""
        try:
            msg = self.format(record)
            level = LogLevel(record.levelno)
            self.logging_service._emit_to_handlers(msg, level)
        except Exception:
            self.handleError(record)
