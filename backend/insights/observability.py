"""
Module: observability.py
Description: Logging, metrics and timing for the insights engine.

Features:
    - Structured logging with per-report context (user, as_of)
    - In-memory counters, gauges and analyzer timings
    - timed_block context manager used around every report section

Usage:
    from insights.observability import logger, metrics, timed_block

    with timed_block("insights.anomalies"):
        anomalies = detector.detect()

Author: Smart Financial Coach Team
"""

import time
import logging
from contextvars import ContextVar
from typing import Dict, Any, List, Optional
from collections import defaultdict
from contextlib import contextmanager

from config import LOG_LEVEL, SERVICE_NAME


_report_context: ContextVar[Dict[str, Any]] = ContextVar("insights_report_context", default={})


# =============================================================================
# Structured Logger
# =============================================================================

class StructuredLogger:
    """
    Logger that appends key=value fields to every message.

    Report fields (user_id, as_of) live in a ContextVar so two reports
    computed concurrently never see each other's fields.
    """

    FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    def __init__(self, name: str = SERVICE_NAME, level: str = LOG_LEVEL):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(self.FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            self.logger.addHandler(handler)

    def bind(self, **fields) -> None:
        """Attach fields to every log line of the current report."""
        _report_context.set({**_report_context.get(), **fields})

    def unbind(self) -> None:
        _report_context.set({})

    def render(self, message: str, **fields) -> str:
        merged = {**_report_context.get(), **fields}
        if not merged:
            return message
        return message + " | " + " | ".join(f"{k}={v}" for k, v in merged.items())

    def debug(self, message: str, **fields) -> None:
        self.logger.debug(self.render(message, **fields))

    def info(self, message: str, **fields) -> None:
        self.logger.info(self.render(message, **fields))

    def warning(self, message: str, **fields) -> None:
        self.logger.warning(self.render(message, **fields))

    def error(self, message: str, **fields) -> None:
        self.logger.error(self.render(message, **fields))

    def exception(self, message: str, **fields) -> None:
        """Error level, with the active traceback."""
        self.logger.exception(self.render(message, **fields))


# =============================================================================
# Metrics Collector
# =============================================================================

class MetricsCollector:
    """
    Process-wide diagnostics for report generation.

    Counters: reports started/completed, degraded sections, skipped records,
    anomalies and notifications. Gauges: sizes of the last report.
    Timings: milliseconds per report section, newest MAX_TIMINGS kept.
    """

    MAX_TIMINGS = 1000

    def __init__(self):
        self.counters: Dict[str, int] = defaultdict(int)
        self.gauges: Dict[str, float] = {}
        self.timings: Dict[str, List[float]] = defaultdict(list)

    @staticmethod
    def key(name: str, tags: Optional[Dict[str, str]] = None) -> str:
        """'name' or 'name:tag1=a,tag2=b' with tags in sorted order."""
        if not tags:
            return name
        return name + ":" + ",".join(f"{k}={v}" for k, v in sorted(tags.items()))

    def increment(self, name: str, value: int = 1, tags: Optional[Dict[str, str]] = None) -> None:
        self.counters[self.key(name, tags)] += value

    def gauge(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        self.gauges[self.key(name, tags)] = value

    def timing(self, name: str, duration_ms: float, tags: Optional[Dict[str, str]] = None) -> None:
        samples = self.timings[self.key(name, tags)]
        samples.append(duration_ms)
        del samples[:-self.MAX_TIMINGS]

    def reset(self) -> None:
        self.counters.clear()
        self.gauges.clear()
        self.timings.clear()


# =============================================================================
# Timing
# =============================================================================

@contextmanager
def timed_block(name: str):
    """
    Time a block, counting `<name>.success` or `<name>.error`.

    Example:
        with timed_block("insights.health_score"):
            score = calculator.calculate()
    """
    start = time.perf_counter()
    try:
        yield
        metrics.increment(f"{name}.success")
    except Exception:
        metrics.increment(f"{name}.error")
        raise
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        metrics.timing(name, duration_ms)
        logger.debug(f"{name} completed", duration_ms=f"{duration_ms:.2f}")


# =============================================================================
# Global Instances
# =============================================================================

logger = StructuredLogger()

metrics = MetricsCollector()


# =============================================================================
# Report Events
# =============================================================================

def log_report_start(as_of, transaction_count: int, user_id: Optional[str] = None) -> None:
    fields = {"as_of": as_of.isoformat()}
    if user_id:
        fields["user_id"] = user_id[:8]
    logger.bind(**fields)
    logger.info("Insights report started", transactions=transaction_count)
    metrics.increment("reports.started")


def log_report_complete(counts: Dict[str, int]) -> None:
    """Log section sizes, keep them as last_report.* gauges and drop the report fields."""
    logger.info("Insights report completed", **counts)
    metrics.increment("reports.completed")
    for section, count in counts.items():
        metrics.gauge(f"last_report.{section}", count)
    logger.unbind()


def log_section_degraded(section: str, error: Exception) -> None:
    """Log an analyzer failure that was replaced with an empty section."""
    logger.exception("Insights section degraded", section=section, error=str(error))
    metrics.increment("reports.degraded_sections", tags={"section": section})


def log_anomaly_detected(severity: str, amount: float) -> None:
    logger.debug("Anomaly detected", severity=severity, amount=f"${amount:.2f}")
    metrics.increment("anomalies.detected", tags={"severity": severity})
