"""
Prometheus metrics for checkpoint and record verification.

Environment Variables:
    METRICS_ENABLED: Start the /metrics HTTP exporter in the CLI (true/false) - default: false
    METRICS_PORT: HTTP port for /metrics endpoint - default: 8080

Usage:
    from logtrust.metrics import start_metrics_server, track_checkpoint

    start_metrics_server(enabled=True, port=8080)
    track_checkpoint("ok")

Metrics are created lazily on first use so importing the library never touches
the default Prometheus registry.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Generator, Optional

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

CHECKPOINT_OUTCOMES = (
    "ok",
    "unknown_key",
    "malformed",
    "signature_invalid",
    "unsupported_algorithm",
)

CHECKPOINT_VERIFICATIONS: Optional[Counter] = None
RECORD_VERDICTS: Optional[Counter] = None
VALIDATE_DURATION: Optional[Histogram] = None

_metrics_initialized = False
_metrics_lock = threading.Lock()


def init_metrics() -> None:
    """
    Initialize Prometheus metrics (idempotent, thread-safe).
    """
    global CHECKPOINT_VERIFICATIONS, RECORD_VERDICTS, VALIDATE_DURATION
    global _metrics_initialized

    if _metrics_initialized:
        return

    with _metrics_lock:
        if _metrics_initialized:
            return

        CHECKPOINT_VERIFICATIONS = Counter(
            "logtrust_checkpoint_verifications_total",
            "Checkpoint verifications by outcome",
            labelnames=["outcome"],
        )

        RECORD_VERDICTS = Counter(
            "logtrust_record_verdicts_total",
            "Package log record verdicts",
            labelnames=["verdict"],
        )

        VALIDATE_DURATION = Histogram(
            "logtrust_validate_duration_seconds",
            "Duration of batch record validation in seconds",
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0),
        )

        _metrics_initialized = True
        logger.debug("Prometheus metrics initialized")


def start_metrics_server(enabled: bool, port: int) -> None:
    """
    Start Prometheus metrics HTTP server in a daemon thread.

    Args:
        enabled: Whether to start the server (METRICS_ENABLED)
        port: HTTP port for /metrics (METRICS_PORT)
    """
    if not enabled:
        logger.debug("Metrics server disabled")
        return

    init_metrics()
    start_http_server(port)
    logger.info("Metrics server listening on :%d/metrics", port)


def track_checkpoint(outcome: str) -> None:
    """Count one checkpoint verification outcome."""
    init_metrics()
    CHECKPOINT_VERIFICATIONS.labels(outcome=outcome).inc()


def track_verdict(valid: bool) -> None:
    """Count one record verdict."""
    init_metrics()
    RECORD_VERDICTS.labels(verdict="valid" if valid else "invalid").inc()


@contextmanager
def track_validate_duration() -> Generator[None, None, None]:
    """Time a batch validation."""
    init_metrics()
    with VALIDATE_DURATION.time():
        yield
