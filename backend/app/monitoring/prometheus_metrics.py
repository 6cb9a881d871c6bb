"""
Prometheus metrics module for SocietyHub.

Service timings come from ``@BaseService.measure_operation``; the realtime
transport and notification engine record their own domain counters here.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Custom registry so repeated imports in tests never collide with the default one
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "societyhub_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "societyhub_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "societyhub_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

ws_connections_open = Gauge(
    "societyhub_ws_connections_open",
    "Number of authenticated realtime connections currently open",
    registry=REGISTRY,
)

ws_frames_total = Counter(
    "societyhub_ws_frames_total",
    "Inbound realtime frames by type and outcome",
    ["frame_type", "outcome"],  # outcome: ok | error
    registry=REGISTRY,
)

notifications_total = Counter(
    "societyhub_notifications_total",
    "Notification primitive outcomes",
    ["notification_type", "outcome"],  # created | suppressed | failed
    registry=REGISTRY,
)

notification_broadcast_batches_total = Counter(
    "societyhub_notification_broadcast_batches_total",
    "Batches processed by the all-users broadcast",
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade over the module-level collectors."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'ConversationService')
            operation: Operation/method name (e.g., 'send_message')
            duration: Operation duration in seconds
            status: 'success' or 'error'
            error_type: Exception class name when status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def ws_connection_opened() -> None:
        ws_connections_open.inc()

    @staticmethod
    def ws_connection_closed() -> None:
        ws_connections_open.dec()

    @staticmethod
    def record_ws_frame(frame_type: str, outcome: str) -> None:
        ws_frames_total.labels(frame_type=frame_type, outcome=outcome).inc()

    @staticmethod
    def record_notification(notification_type: str, outcome: str) -> None:
        notifications_total.labels(notification_type=notification_type, outcome=outcome).inc()

    @staticmethod
    def record_broadcast_batch() -> None:
        notification_broadcast_batches_total.inc()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
