"""
Prometheus metrics for publish runs.

A publish run is a short-lived process, so nothing scrapes it directly.
Each run records into its own registry and, when a textfile path is
configured, writes the registry in exposition format for node_exporter's
textfile collector.

Metrics Provided:
    - ads_publish_objects_total: Counter of objects by kind and outcome
    - ads_publish_bytes_total: Counter of uploaded bytes
    - ads_storage_errors_total: Counter of storage errors by operation
    - ads_publish_duration_seconds: Gauge with the wall time of the run

Usage:
    from ads_publisher.utils.metrics import PublishMetrics

    metrics = PublishMetrics()
    with metrics.track_run():
        ...
    metrics.record_object(kind="media", status="uploaded", size=1024)
    metrics.write_textfile("/var/lib/node_exporter/ads_publish.prom")
"""

import time
from contextlib import contextmanager
from typing import Iterator, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, write_to_textfile

from ads_publisher.utils.logging import get_logger

logger = get_logger(__name__)

OBJECT_KINDS = ("media", "manifest")
OBJECT_STATUSES = ("uploaded", "skipped", "failed")


class PublishMetrics:
    """
    Prometheus collectors for one publish run.

    Example:
        >>> metrics = PublishMetrics()
        >>> metrics.record_object(kind="media", status="skipped")
        >>> metrics.value("ads_publish_objects_total", kind="media", status="skipped")
        1.0
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        self.objects = Counter(
            name="ads_publish_objects_total",
            documentation="Objects processed by the publisher",
            labelnames=["kind", "status"],
            registry=self.registry,
        )

        self.bytes_uploaded = Counter(
            name="ads_publish_bytes_total",
            documentation="Bytes written to object storage",
            registry=self.registry,
        )

        self.storage_errors = Counter(
            name="ads_storage_errors_total",
            documentation="Object storage errors",
            labelnames=["operation", "error_type"],
            registry=self.registry,
        )

        self.run_duration = Gauge(
            name="ads_publish_duration_seconds",
            documentation="Wall time of the last publish run",
            registry=self.registry,
        )

        self.last_success = Gauge(
            name="ads_publish_last_success_timestamp_seconds",
            documentation="Unix time of the last run that finished without raising",
            registry=self.registry,
        )

        # Pre-create label combinations so zero counts are exported
        for kind in OBJECT_KINDS:
            for status in OBJECT_STATUSES:
                self.objects.labels(kind=kind, status=status)

    @contextmanager
    def track_run(self) -> Iterator[None]:
        """Time the enclosed block; stamp last_success if it does not raise."""
        start = time.time()
        try:
            yield
        finally:
            self.run_duration.set(time.time() - start)
        self.last_success.set_to_current_time()

    def record_object(self, kind: str, status: str, size: int = 0) -> None:
        """
        Record the outcome for one object.

        Args:
            kind: "media" or "manifest"
            status: "uploaded", "skipped" or "failed"
            size: Bytes written (only counted for uploads)
        """
        self.objects.labels(kind=kind, status=status).inc()
        if status == "uploaded" and size:
            self.bytes_uploaded.inc(size)

    def record_storage_error(self, operation: str, error_type: str) -> None:
        self.storage_errors.labels(operation=operation, error_type=error_type).inc()

    def value(self, name: str, **labels: str) -> float:
        """Current sample value from this registry (0.0 if absent)."""
        sample = self.registry.get_sample_value(name, labels or None)
        return sample if sample is not None else 0.0

    def write_textfile(self, path: str) -> None:
        """Write the registry to ``path`` for the node_exporter textfile collector."""
        logger.info(f"Writing metrics to {path}")
        write_to_textfile(path, self.registry)
