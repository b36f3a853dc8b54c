"""
Structured logging configuration

Provides JSON-formatted logging with structured fields for:
- Upload outcomes per slot
- Reconciliation and export runs
- Operation timing
"""

import logging
import logging.config
import json
import time
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from contextlib import contextmanager

# Attributes every LogRecord carries; anything else came in through `extra=`
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}


class StructuredLogFormatter(logging.Formatter):
    """One JSON object per record: level, logger, message and event fields"""

    def __init__(self, extra_fields: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.extra_fields = dict(extra_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        payload = dict(self.extra_fields)
        payload.update(
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage()
        )

        event_fields = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if event_fields:
            payload['extra'] = event_fields

        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)

        # default=str covers Paths, dates and other non-JSON event values
        return json.dumps(payload, default=str, separators=(',', ':'))


class ReconLogger:
    """
    Structured logger for reconciliation events

    Provides methods for logging events with a consistent structure
    """

    def __init__(self, logger_name: str):
        self.logger = logging.getLogger(logger_name)
        self.component = logger_name.split('.')[-1]

    def _log_structured(self, level: int, event_type: str, message: str, **kwargs):
        """Log structured event"""
        log_data = {
            'event_type': event_type,
            'component': self.component,
            'event_timestamp': datetime.now(timezone.utc).isoformat(),
            **kwargs
        }
        self.logger.log(level, message, extra=log_data)

    def upload_event(self, slot: str, ok: bool, message: str, **kwargs):
        """Log the outcome of an upload into a slot"""
        self._log_structured(
            level=logging.INFO if ok else logging.ERROR,
            event_type=f"upload.{'loaded' if ok else 'failed'}",
            message=message,
            slot=slot,
            **kwargs
        )

    def reconcile_event(self, message: str, **kwargs):
        """Log a reconciliation run"""
        self._log_structured(
            level=logging.INFO,
            event_type="reconcile.run",
            message=message,
            **kwargs
        )

    def export_event(self, filename: str, message: str, **kwargs):
        """Log an export"""
        self._log_structured(
            level=logging.INFO,
            event_type="export.document",
            message=message,
            export_filename=filename,
            **kwargs
        )

    def performance_event(self, metric_name: str, value: float, unit: str,
                          message: str, **kwargs):
        """Log performance metric"""
        self._log_structured(
            level=logging.DEBUG,
            event_type="performance.metric",
            message=message,
            metric_name=metric_name,
            metric_value=value,
            metric_unit=unit,
            **kwargs
        )


@contextmanager
def operation_timer(logger: ReconLogger, operation: str, **context):
    """Context manager to time an operation"""
    start_time = time.perf_counter()
    success = True
    try:
        yield
    except Exception:
        success = False
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.performance_event(
            metric_name=f"{operation}_duration",
            value=duration_ms,
            unit="milliseconds",
            message=f"Completed {operation}",
            operation=operation,
            success=success,
            **context
        )


def configure_structured_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = True,
    extra_fields: Optional[Dict[str, Any]] = None
):
    """
    Configure logging for the bill_recon package

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional rotating log file, in addition to stderr
        json_format: Emit one JSON object per line instead of plain text
        extra_fields: Extra fields to include in every JSON record
    """
    if json_format:
        formatter = {'()': StructuredLogFormatter, 'extra_fields': extra_fields or {}}
    else:
        formatter = {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        }

    # stderr keeps command output on stdout clean
    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'level': log_level,
            'formatter': 'recon',
            'stream': 'ext://sys.stderr'
        }
    }
    if log_file:
        handlers['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'level': log_level,
            'formatter': 'recon',
            'filename': log_file,
            'maxBytes': 5 * 1024 * 1024,
            'backupCount': 3
        }

    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {'recon': formatter},
        'handlers': handlers,
        'loggers': {
            'bill_recon': {
                'level': log_level,
                'handlers': list(handlers),
                'propagate': False
            }
        }
    })
