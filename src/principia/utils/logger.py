"""
Enhanced Logging Utilities

Provides structured logging with:
- JSON formatting for production
- Cycle timing
- Trading-specific log helpers (decisions, trades, risk alerts)
"""

import logging
import json
import sys
import time
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional


_EXTRA_FIELDS = (
    'pair',
    'action',
    'force',
    'side',
    'dry_run',
    'success',
    'execution_time',
    'alert_type',
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class PerformanceLogger:
    """Logger for tracking performance metrics."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._lock = threading.Lock()
        self._start_times = {}

    @contextmanager
    def timer(self, operation: str, **context):
        """Context manager for timing operations."""
        start_time = time.time()
        operation_id = f"{operation}_{threading.get_ident()}_{start_time}"

        try:
            with self._lock:
                self._start_times[operation_id] = start_time
            yield
        finally:
            execution_time = time.time() - start_time

            with self._lock:
                self._start_times.pop(operation_id, None)

            extra = {'execution_time': execution_time, **context}
            self.logger.debug(f"Operation completed: {operation} in {execution_time:.3f}s", extra=extra)


class TradingLogger:
    """Specialized logger for trading operations."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.performance = PerformanceLogger(self.logger)

    def decision_event(self, pair: str, action: str, force: float, **context):
        """Log an engine decision that changes position."""
        extra = {
            'pair': pair,
            'action': action,
            'force': force,
            **context
        }
        self.logger.info(f"Decision: {action.upper()} {pair} (force={force:.3f})", extra=extra)

    def trade_event(self, pair: str, side: str, success: bool, dry_run: bool, **context):
        """Log a trade attempt."""
        extra = {
            'pair': pair,
            'side': side,
            'success': success,
            'dry_run': dry_run,
            **context
        }
        mode = "DRY RUN" if dry_run else "LIVE"
        if success:
            self.logger.info(f"Trade {side.upper()} {pair} executed ({mode})", extra=extra)
        else:
            reason = context.get('reason', 'unknown')
            self.logger.warning(f"Trade {side.upper()} {pair} not executed ({mode}): {reason}", extra=extra)

    def risk_alert(self, alert_type: str, severity: str, message: str, **context):
        """Log risk management alerts."""
        extra = {
            'alert_type': alert_type,
            'severity': severity,
            **context
        }
        if severity.lower() in ['high', 'critical']:
            self.logger.error(f"Risk Alert [{alert_type}]: {message}", extra=extra)
        else:
            self.logger.warning(f"Risk Alert [{alert_type}]: {message}", extra=extra)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False
) -> logging.Logger:
    """
    Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON formatting

    Returns:
        Configured root logger
    """
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, str(log_level).upper()))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_trading_logger(name: str) -> TradingLogger:
    """Get a trading-specific logger instance."""
    return TradingLogger(name)


def get_performance_logger(name: str) -> PerformanceLogger:
    """Get a performance logger instance."""
    return PerformanceLogger(logging.getLogger(name))
