"""
Prometheus metrics for background removal requests.

Metrics Provided:
    - removal_requests_total: Counter for removal requests by status and error kind
    - removal_duration_seconds: Histogram for signed upload latency
    - upload_bytes_total: Counter for image bytes sent to the service
    - download_requests_total: Counter for result downloads by status
    - active_removals: Gauge for in-flight removal requests

Usage:
    from bgremove.utils.metrics import get_metrics

    metrics = get_metrics()
    with metrics.track_removal():
        url = await remove_background(image, credentials)
    metrics.record_removal_success(bytes_uploaded=image.size_bytes)

    # Start metrics server:
    python -m bgremove.utils.metrics --port 9090
"""

import os
import signal
from contextlib import nullcontext
from typing import Any, ContextManager, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram, start_http_server

from bgremove.utils.logging import get_logger

logger = get_logger(__name__)


class PrometheusMetrics:
    """
    Centralized Prometheus metrics for background removal.

    Example:
        >>> metrics = PrometheusMetrics(registry=CollectorRegistry())
        >>> metrics.record_removal_failure(kind="authentication")
    """

    def __init__(self, enabled: bool = True, registry: Optional[CollectorRegistry] = None) -> None:
        """
        Initialize metrics collectors.

        Args:
            enabled: Whether metrics collection is enabled
            registry: Custom Prometheus registry (uses default if None)
        """
        self.enabled = enabled
        self.registry = registry if registry is not None else REGISTRY

        if not self.enabled:
            logger.debug("Metrics collection disabled")
            return

        self.removal_requests = Counter(
            name="removal_requests_total",
            documentation="Total number of background removal requests",
            labelnames=["status", "kind"],  # success/failure, error kind or "none"
            registry=self.registry,
        )

        self.removal_duration = Histogram(
            name="removal_duration_seconds",
            documentation="Time spent in the signed upload round trip",
            buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
            registry=self.registry,
        )

        self.upload_bytes = Counter(
            name="upload_bytes_total",
            documentation="Total image bytes uploaded for background removal",
            registry=self.registry,
        )

        self.download_requests = Counter(
            name="download_requests_total",
            documentation="Total number of result downloads",
            labelnames=["status"],
            registry=self.registry,
        )

        self.active_removals = Gauge(
            name="active_removals",
            documentation="Number of background removal requests in flight",
            registry=self.registry,
        )

        logger.debug("PrometheusMetrics initialized")

    def track_removal(self) -> ContextManager[Any]:
        """Context manager timing a removal request and counting it as in flight."""
        if not self.enabled:
            return nullcontext()
        return _TrackedRemoval(self)

    def record_removal_success(self, bytes_uploaded: int) -> None:
        if not self.enabled:
            return
        self.removal_requests.labels(status="success", kind="none").inc()
        self.upload_bytes.inc(bytes_uploaded)

    def record_removal_failure(self, kind: str) -> None:
        """
        Record a failed removal request.

        Args:
            kind: Error kind value (authentication, network, ...)
        """
        if not self.enabled:
            return
        self.removal_requests.labels(status="failure", kind=kind).inc()

    def record_download(self, success: bool) -> None:
        if not self.enabled:
            return
        self.download_requests.labels(status="success" if success else "failure").inc()


class _TrackedRemoval:
    def __init__(self, metrics: PrometheusMetrics) -> None:
        self._metrics = metrics
        self._timer = metrics.removal_duration.time()

    def __enter__(self) -> "_TrackedRemoval":
        self._metrics.active_removals.inc()
        self._timer.__enter__()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._timer.__exit__(*exc_info)
        self._metrics.active_removals.dec()


# ============================================================================
# Global Metrics Instance
# ============================================================================

_metrics_instance: Optional[PrometheusMetrics] = None


def get_metrics() -> PrometheusMetrics:
    """
    Get global metrics instance (singleton).

    Collection can be switched off with ``METRICS_ENABLED=false``.
    """
    global _metrics_instance

    if _metrics_instance is None:
        enabled = os.getenv("METRICS_ENABLED", "true").lower() == "true"
        _metrics_instance = PrometheusMetrics(enabled=enabled)

    return _metrics_instance


def start_metrics_server(port: int = 9090, addr: str = "0.0.0.0") -> None:
    """
    Start Prometheus metrics HTTP server.

    Note:
        Blocks forever - run in separate thread or process
    """
    logger.info(f"Starting Prometheus metrics server on {addr}:{port}")

    try:
        start_http_server(port=port, addr=addr)
        logger.info(f"Metrics server running at http://{addr}:{port}/metrics")
        signal.pause()
    except KeyboardInterrupt:
        logger.info("Metrics server shutting down")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="bgremove metrics server")
    parser.add_argument("--port", type=int, default=9090, help="Metrics server port (default: 9090)")
    parser.add_argument("--addr", type=str, default="0.0.0.0", help="Address to bind to (default: 0.0.0.0)")
    args = parser.parse_args()

    start_metrics_server(port=args.port, addr=args.addr)
