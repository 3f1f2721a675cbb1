"""
Logging for OFI Feature Construction
====================================

This module wraps Python logging with:
- Categorized log records (feature, training, regression)
- Structured (JSON) output for machine parsing
- Latency measurement for the training and regression steps

FEATURE PIPELINE LOGGING CONSIDERATIONS:
========================================

1. VOLUME:
   - Per-pair feature values are logged at DEBUG only; a day of
     snapshots is millions of pairs
   - Training and fitting are logged at INFO with their timings

2. NUMERIC DEGENERACY:
   - Zero depth and non-positive mid prices produce non-finite
     features; these are logged at WARNING with the offending
     timestamp so the driver can discard the observation

3. OUTPUT:
   - Human-readable console format by default
   - JSON lines when ``structured_logs`` is enabled in the config

Keyword context passed to the logging helpers lands in the record's
``extra_data`` mapping, so context keys never clash with the helpers'
own ``level`` and ``message`` parameters.
"""

import json
import logging
import sys
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Deque, Dict, Optional

import numpy as np


class LogCategory(Enum):
    """
    Log categories for filtering and routing.
    """
    FEATURE = "feature"
    TRAINING = "training"
    REGRESSION = "regression"
    PERFORMANCE = "performance"
    SYSTEM = "system"


@dataclass
class LatencyMeasurement:
    """
    One timed block, in ``time.perf_counter_ns()`` units.
    """
    operation: str
    start_ns: int
    end_ns: int = 0
    category: LogCategory = LogCategory.PERFORMANCE
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ns(self) -> int:
        return self.end_ns - self.start_ns

    @property
    def duration_us(self) -> float:
        return self.duration_ns / 1000.0

    @property
    def duration_ms(self) -> float:
        return self.duration_ns / 1_000_000.0


class LatencyTracker:
    """
    Rolling latency history per operation name.

    Training and fitting run a handful of times per session, so the window
    is small and statistics are recomputed from it on demand.
    """

    def __init__(self, window_size: int = 1000):
        self._window_size = window_size
        self._history: Dict[str, Deque[int]] = {}
        self._lock = threading.Lock()

    def record(self, measurement: LatencyMeasurement) -> None:
        with self._lock:
            history = self._history.setdefault(
                measurement.operation, deque(maxlen=self._window_size)
            )
            history.append(measurement.duration_ns)

    def get_stats(self, operation: str) -> Dict[str, float]:
        """
        Summary of the retained durations for ``operation``.

        Returns an empty dict for operations never measured.
        """
        with self._lock:
            history = self._history.get(operation)
            durations = np.fromiter(history, dtype=np.int64) if history else None
        return self._summarize(durations)

    def get_all_stats(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            snapshot = {
                op: np.fromiter(history, dtype=np.int64)
                for op, history in self._history.items()
            }
        return {op: self._summarize(durations) for op, durations in snapshot.items()}

    def reset(self) -> None:
        with self._lock:
            self._history.clear()

    @staticmethod
    def _summarize(durations: Optional[np.ndarray]) -> Dict[str, float]:
        if durations is None or durations.size == 0:
            return {}
        p50, p99 = np.percentile(durations, [50, 99])
        return {
            "count": int(durations.size),
            "min_ns": int(durations.min()),
            "max_ns": int(durations.max()),
            "mean_ns": float(durations.mean()),
            "p50_ns": float(p50),
            "p99_ns": float(p99),
        }


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per record.

    ``category``, ``latency_ns`` and ``extra_data`` are copied through when
    the record carries them.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for attr, key in (("category", "category"),
                          ("latency_ns", "latency_ns"),
                          ("extra_data", "data")):
            value = getattr(record, attr, None)
            if value is not None:
                payload[key] = value

        return json.dumps(payload, default=str)


CONSOLE_FORMAT = logging.Formatter(
    '%(asctime)s.%(msecs)03d | %(levelname)-8s | %(message)s',
    datefmt='%H:%M:%S'
)


class OFILogger:
    """
    Categorized logger shared by the feature calculators and the models.
    """

    _instance: Optional['OFILogger'] = None
    _latency_tracker: LatencyTracker = LatencyTracker()

    def __init__(self, name: str = "ofi_features", level: int = logging.INFO):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)

        self._handler = logging.StreamHandler(sys.stderr)
        self._handler.setFormatter(CONSOLE_FORMAT)
        self._logger.handlers = [self._handler]

    @classmethod
    def get_instance(cls) -> 'OFILogger':
        if cls._instance is None:
            cls._instance = OFILogger()
        return cls._instance

    @classmethod
    def get_latency_tracker(cls) -> LatencyTracker:
        return cls._latency_tracker

    def set_level(self, level: str) -> None:
        self._logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    def set_structured(self, structured: bool) -> None:
        """Switch the handler between console and JSON output."""
        self._handler.setFormatter(StructuredFormatter() if structured else CONSOLE_FORMAT)

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def log(
        self,
        level: int,
        message: str,
        /,
        category: LogCategory = LogCategory.SYSTEM,
        latency_ns: Optional[int] = None,
        **context
    ) -> None:
        """
        Emit ``message`` tagged with ``category``.

        Any other keyword becomes part of the record's ``extra_data``;
        ``level`` and ``message`` are positional-only so a context key of
        the same name is allowed.
        """
        extra = {"category": category.value, "extra_data": context}
        if latency_ns is not None:
            extra["latency_ns"] = latency_ns
        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, /, **context) -> None:
        self.log(logging.DEBUG, message, **context)

    def info(self, message: str, /, **context) -> None:
        self.log(logging.INFO, message, **context)

    def warning(self, message: str, /, **context) -> None:
        self.log(logging.WARNING, message, **context)

    @contextmanager
    def measure_latency(
        self,
        operation: str,
        category: LogCategory = LogCategory.PERFORMANCE,
        log_level: int = logging.DEBUG,
        **metadata
    ):
        """
        Time the enclosed block, record it in the shared tracker and log it.

        Usage:
            with logger.measure_latency("integrated_ofi.train", book_level=10):
                ...
        """
        measurement = LatencyMeasurement(
            operation=operation,
            start_ns=time.perf_counter_ns(),
            category=category,
            metadata=metadata,
        )
        try:
            yield measurement
        finally:
            measurement.end_ns = time.perf_counter_ns()
            self._latency_tracker.record(measurement)
            self.log(
                log_level,
                f"{operation} took {measurement.duration_ms:.3f}ms",
                category=category,
                latency_ns=measurement.duration_ns,
                **metadata
            )

    def log_feature(self, feature_name: str, timestamp: Any, value: Any, **context) -> None:
        """Per-pair feature value; skipped entirely unless DEBUG is on."""
        if not self._logger.isEnabledFor(logging.DEBUG):
            return
        self.log(
            logging.DEBUG,
            f"FEATURE: {feature_name} @ {timestamp} = {value}",
            category=LogCategory.FEATURE,
            feature_name=feature_name,
            timestamp=timestamp,
            **context
        )

    def log_model(
        self,
        model_name: str,
        message: str,
        category: LogCategory = LogCategory.TRAINING,
        **context
    ) -> None:
        self.log(
            logging.INFO,
            f"MODEL [{model_name}]: {message}",
            category=category,
            model_name=model_name,
            **context
        )


# Global logger instance
logger = OFILogger.get_instance()


def get_logger() -> OFILogger:
    return logger


def get_latency_stats() -> Dict[str, Dict[str, float]]:
    """Latency statistics for every operation timed so far."""
    return OFILogger.get_latency_tracker().get_all_stats()


def configure_logging(config) -> OFILogger:
    """Apply the logging fields of an OFIConfig to the global logger."""
    logger.set_level(config.log_level)
    logger.set_structured(config.structured_logs)
    return logger
