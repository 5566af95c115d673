import logging
import threading

from prometheus_client import CollectorRegistry, Counter, Gauge, REGISTRY, start_http_server

from .metrics import Metrics, OperationCounts, Totals


logger = logging.getLogger(__name__)


class PrometheusExporter:
    def __init__(self, metrics: Metrics, port: int = 8000, registry: CollectorRegistry | None = None) -> None:
        self.metrics = metrics
        self.port = port
        self.registry = registry or REGISTRY
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        self.requests_total = Counter(
            "storeinfo_requests_total", "Listing page requests issued", registry=self.registry
        )
        self.bytes_total = Counter(
            "storeinfo_bytes_total", "Listing page bytes downloaded", registry=self.registry
        )
        self.transport_errors_total = Counter(
            "storeinfo_transport_errors_total", "Listing page requests that failed in transport", registry=self.registry
        )
        self.operations_total = Counter(
            "storeinfo_operations_total",
            "Fetcher operations by outcome",
            ["operation", "outcome"],
            registry=self.registry,
        )
        self.avg_request_duration_seconds = Gauge(
            "storeinfo_avg_request_duration_seconds", "Average request duration in seconds", registry=self.registry
        )

        self._last = Totals()

    def start(self) -> None:
        start_http_server(self.port, registry=self.registry)
        logger.info("Prometheus metrics server started on port %d", self.port)
        self._thread = threading.Thread(target=self._update_loop, name="prometheus-updater", daemon=True)
        self._thread.start()

    def _update_loop(self) -> None:
        while not self._stop_event.is_set():
            self.update()
            self._stop_event.wait(1.0)

    def update(self) -> None:
        """Push the growth since the previous update into the Prometheus counters."""
        totals = self.metrics.snapshot()
        last = self._last

        if totals.requests > last.requests:
            self.requests_total.inc(totals.requests - last.requests)
        if totals.bytes > last.bytes:
            self.bytes_total.inc(totals.bytes - last.bytes)
        if totals.transport_errors > last.transport_errors:
            self.transport_errors_total.inc(totals.transport_errors - last.transport_errors)
        for operation, counts in totals.operations.items():
            previous = last.operations.get(operation, OperationCounts())
            if counts.ok > previous.ok:
                self.operations_total.labels(operation=operation, outcome="ok").inc(counts.ok - previous.ok)
            if counts.failed > previous.failed:
                self.operations_total.labels(operation=operation, outcome="failed").inc(counts.failed - previous.failed)

        if totals.requests:
            self.avg_request_duration_seconds.set(totals.avg_request_ms / 1000.0)
        self._last = totals

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2.0)
        self.update()
