#!/usr/bin/env python3
"""
ProofAlign Configuration & Logging Module
=========================================
Centralized application configuration, structured logging, and the
error hierarchy shared by the alignment engine, the HTTP API and the CLI.

Version: module v1.2
"""

import os
import sys
import json
import logging
import uuid
import time
import functools
import threading
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable
from pathlib import Path
from dataclasses import dataclass, field
from contextlib import contextmanager

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5                # Number of log backup files to keep
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
VALID_LOG_FORMATS = ('json', 'text')

__version__ = "1.2.0"
VERSION = __version__
APP_NAME = "ProofAlign"

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

@dataclass
class AppConfig:
    """Application configuration with safe defaults."""

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # Options: json, text
    log_to_file: bool = False
    log_to_console: bool = True
    log_dir: Path = field(default_factory=lambda: Path(__file__).parent / 'logs')

    def __post_init__(self):
        """Normalize values and apply environment overrides."""
        self.log_level = (self.log_level or "INFO").upper()
        self.log_format = (self.log_format or "json").lower()
        self.log_dir = Path(self.log_dir)

        if self.log_to_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        # Quieter logs in production environment
        if os.environ.get('PA_ENV', 'development').lower() == 'production':
            self.log_level = "WARNING"

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load configuration from environment variables."""
        kwargs: Dict[str, Any] = dict(
            log_level=os.environ.get('PA_LOG_LEVEL', 'INFO'),
            log_format=os.environ.get('PA_LOG_FORMAT', 'json'),
            log_to_file=os.environ.get('PA_LOG_TO_FILE', 'false').lower() == 'true',
            log_to_console=os.environ.get('PA_LOG_TO_CONSOLE', 'true').lower() == 'true',
        )
        if os.environ.get('PA_LOG_DIR'):
            kwargs['log_dir'] = Path(os.environ['PA_LOG_DIR'])
        return cls(**kwargs)

    def validate(self) -> tuple:
        """Validate configuration and return (is_valid, errors)."""
        errors = []

        if self.log_level not in VALID_LOG_LEVELS:
            errors.append(f"Invalid log_level: {self.log_level}. Must be one of {', '.join(VALID_LOG_LEVELS)}")

        if self.log_format not in VALID_LOG_FORMATS:
            errors.append(f"Invalid log_format: {self.log_format}. Must be 'json' or 'text'")

        return (len(errors) == 0, errors)


# Global config instance
_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Get or create the global configuration."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config():
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

class StructuredLogger:
    """Thread-safe structured JSON logger with correlation IDs."""

    _local = threading.local()

    def __init__(self, name: str, config: Optional[AppConfig] = None):
        self.name = name
        self.config = config or get_config()
        self._setup_logger()

    def _setup_logger(self):
        """Configure the underlying Python logger."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(getattr(logging, self.config.log_level, logging.INFO))
        self.logger.handlers.clear()
        self.logger.propagate = False

        if self.config.log_format == 'json':
            formatter = JsonFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
            )

        # Console handler
        if self.config.log_to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        # File handler with rotation
        if self.config.log_to_file:
            from logging.handlers import RotatingFileHandler
            self.config.log_dir.mkdir(parents=True, exist_ok=True)
            log_file = self.config.log_dir / f"{self.name.lower()}.log"
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        if not self.logger.handlers:
            self.logger.addHandler(logging.NullHandler())

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        """Set correlation ID for current thread."""
        cls._local.correlation_id = correlation_id

    @classmethod
    def get_correlation_id(cls) -> str:
        """Get correlation ID for current thread."""
        return getattr(cls._local, 'correlation_id', None) or str(uuid.uuid4())[:8]

    @classmethod
    def new_correlation_id(cls) -> str:
        """Generate and set a new correlation ID."""
        correlation_id = str(uuid.uuid4())[:12]
        cls.set_correlation_id(correlation_id)
        return correlation_id

    def _build_log_record(self, level: str, message: str, **kwargs) -> Dict[str, Any]:
        """Build a structured log record."""
        return {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': level,
            'logger': self.name,
            'correlation_id': self.get_correlation_id(),
            'message': message,
            **kwargs
        }

    def _render(self, level: str, message: str, **kwargs) -> str:
        if self.config.log_format == 'json':
            return json.dumps(self._build_log_record(level, message, **kwargs), default=str)
        return message

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._render('DEBUG', message, **kwargs))

    def info(self, message: str, **kwargs):
        """Log info message."""
        self.logger.info(self._render('INFO', message, **kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self.logger.warning(self._render('WARNING', message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional exception info."""
        if exc_info and self.config.log_format == 'json':
            import traceback
            kwargs['traceback'] = traceback.format_exc()
        self.logger.error(self._render('ERROR', message, **kwargs), exc_info=exc_info)

    def exception(self, message: str, **kwargs):
        """Log exception with full traceback."""
        self.error(message, exc_info=True, **kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self.logger.critical(self._render('CRITICAL', message, **kwargs))

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Context manager for logging operation start/end with timing."""
        start_time = time.time()
        self.info(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
            duration_ms = (time.time() - start_time) * 1000
            self.info(f"{operation} completed", operation=operation, status='completed',
                      duration_ms=round(duration_ms, 2), **context)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.error(f"{operation} failed: {e}", operation=operation, status='failed',
                       duration_ms=round(duration_ms, 2), exc_info=True, **context)
            raise


class JsonFormatter(logging.Formatter):
    """JSON log formatter for records that did not come through StructuredLogger."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        # StructuredLogger already rendered a JSON document
        if message.startswith('{') and message.endswith('}'):
            return message

        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': message,
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


# Factory function for getting loggers
def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name, get_config())


# =============================================================================
# ERROR HANDLING UTILITIES
# =============================================================================

class ProofAlignError(Exception):
    """Base exception for ProofAlign."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 status_code: int = 500, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API response dict."""
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class ValidationError(ProofAlignError):
    """Input validation error."""
    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400,
                         details={'field': field, **kwargs})


class ConfigurationError(ValidationError):
    """Invalid alignment option value. Raised before any matching work starts."""
    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, field=field, **kwargs)
        self.code = "CONFIGURATION_ERROR"
        self.field = field


class FileError(ProofAlignError):
    """File handling error."""
    def __init__(self, message: str, filename: Optional[str] = None, **kwargs):
        super().__init__(message, code="FILE_ERROR", status_code=400,
                         details={'filename': filename, **kwargs})


class ProcessingError(ProofAlignError):
    """Alignment or export processing error."""
    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        super().__init__(message, code="PROCESSING_ERROR", status_code=500,
                         details={'stage': stage, **kwargs})


def handle_errors(logger: Optional[StructuredLogger] = None):
    """Decorator for standardized error handling."""
    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            _logger = logger or get_logger(func.__module__)
            try:
                return func(*args, **kwargs)
            except ProofAlignError:
                raise  # Re-raise our custom errors
            except FileNotFoundError as e:
                _logger.error(f"File not found: {e}", exc_info=True)
                raise FileError(f"File not found: {e}", filename=getattr(e, 'filename', None))
            except PermissionError as e:
                _logger.error(f"Permission denied: {e}", exc_info=True)
                raise FileError(f"Permission denied: {e}", filename=getattr(e, 'filename', None))
            except ValueError as e:
                _logger.error(f"Validation error: {e}", exc_info=True)
                raise ValidationError(str(e))
            except Exception as e:
                _logger.exception(f"Unexpected error in {func.__name__}: {e}")
                raise ProcessingError(f"An unexpected error occurred: {type(e).__name__}",
                                      stage=func.__name__)
        return wrapper
    return decorator
