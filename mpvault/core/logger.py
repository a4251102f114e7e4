"""
Logging and Error Tracking

Central logging setup for mpvault plus a small tracker that collects the
non-fatal failures (missing images, stylesheets, articles) of an archiving run.
"""

import logging
import logging.handlers
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any


APP_NAME = "mpvault"


class VaultLogger:
    """
    Sets up the 'mpvault' logger hierarchy.

    Library modules log through logging.getLogger(__name__), which lands under
    'mpvault.*', so configuring the root 'mpvault' logger here covers them all.
    """

    def __init__(self, log_dir: str = "logs", app_name: str = APP_NAME):
        """
        Args:
            log_dir: Directory to store log files
            app_name: Name of the top-level logger and of the log files
        """
        self.log_dir = Path(log_dir)
        self.app_name = app_name
        self.loggers: Dict[str, logging.Logger] = {}

    def setup_logger(self, level: int = logging.INFO) -> logging.Logger:
        """
        Attach file, console and error-file handlers to the application logger.

        Args:
            level: Level for the application logger and the console

        Returns:
            Configured logger instance
        """
        logger = logging.getLogger(self.app_name)
        logger.setLevel(min(level, logging.DEBUG))

        # Prevent duplicate handlers
        if logger.handlers:
            return logger

        self.log_dir.mkdir(parents=True, exist_ok=True)

        detailed_formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        )

        file_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / f"{self.app_name}.log",
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(console_formatter)

        error_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / f"{self.app_name}_errors.log",
            maxBytes=5*1024*1024,  # 5MB
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(detailed_formatter)

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)
        logger.addHandler(error_handler)

        self.loggers['main'] = logger
        return logger

    def get_logger(self, name: str) -> logging.Logger:
        """Get a child logger of the application logger."""
        full_name = f"{self.app_name}.{name}"

        if full_name not in self.loggers:
            self.loggers[full_name] = logging.getLogger(full_name)

        return self.loggers[full_name]

    def log_system_info(self):
        logger = self.get_logger('system')

        logger.info("=== mpvault started ===")
        logger.info(f"Python version: {sys.version}")
        logger.info(f"Platform: {sys.platform}")
        logger.info(f"Working directory: {os.getcwd()}")
        logger.info(f"Log directory: {self.log_dir.absolute()}")


class ErrorTracker:
    """
    Collects errors and warnings that were logged but did not stop the run.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.errors: list = []
        self.warnings: list = []

    def log_error(self,
                  error: Exception,
                  context: str = None,
                  url: str = None,
                  additional_info: Dict[str, Any] = None) -> str:
        """
        Log an error with context information.

        Args:
            error: The exception that occurred
            context: What was being done, e.g. 'image' or 'stylesheet'
            url: URL being processed when the error occurred
            additional_info: Extra details kept with the record

        Returns:
            Error ID for tracking
        """
        error_id = f"ERR_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{len(self.errors):03d}"

        error_data = {
            'id': error_id,
            'timestamp': datetime.now(),
            'type': type(error).__name__,
            'message': str(error),
            'context': context,
            'url': url,
            'traceback': traceback.format_exc(),
            'additional_info': additional_info or {}
        }
        self.errors.append(error_data)

        log_message = f"[{error_id}] {error_data['type']}: {error_data['message']}"
        if context:
            log_message += f" (Context: {context})"
        if url:
            log_message += f" (URL: {url})"

        self.logger.error(log_message)
        self.logger.debug(f"[{error_id}] Full traceback:\n{error_data['traceback']}")

        return error_id

    def log_warning(self,
                    message: str,
                    context: str = None,
                    url: str = None) -> str:
        """
        Log a warning with context information.

        Returns:
            Warning ID for tracking
        """
        warning_id = f"WARN_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{len(self.warnings):03d}"

        self.warnings.append({
            'id': warning_id,
            'timestamp': datetime.now(),
            'message': message,
            'context': context,
            'url': url
        })

        log_message = f"[{warning_id}] {message}"
        if context:
            log_message += f" (Context: {context})"
        if url:
            log_message += f" (URL: {url})"

        self.logger.warning(log_message)

        return warning_id

    def get_error_summary(self) -> Dict[str, Any]:
        return {
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'error_types': self._count_error_types(),
            'recent_errors': self.errors[-5:] if self.errors else [],
            'recent_warnings': self.warnings[-5:] if self.warnings else []
        }

    def _count_error_types(self) -> Dict[str, int]:
        type_counts = {}
        for error in self.errors:
            error_type = error['type']
            type_counts[error_type] = type_counts.get(error_type, 0) + 1
        return type_counts


# Global logger instance
_logger_instance: Optional[VaultLogger] = None


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger under the application logger.

    Does not attach handlers; call initialize_logging() for that.
    """
    global _logger_instance

    if _logger_instance is None:
        _logger_instance = VaultLogger()

    return _logger_instance.get_logger(name or 'main')


def initialize_logging(log_dir: str = "logs", level: int = logging.INFO) -> logging.Logger:
    """
    Initialize the global logging system.

    Args:
        log_dir: Directory for log files
        level: Console logging level
    """
    global _logger_instance
    _logger_instance = VaultLogger(log_dir)
    logger = _logger_instance.setup_logger(level)
    _logger_instance.log_system_info()
    return logger
