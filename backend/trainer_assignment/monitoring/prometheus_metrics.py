"""
Prometheus metrics for the assignment engine.

Service timings are fed by ``@BaseService.measure_operation``; the domain
counters record assignment outcomes and slot races so operators can see how
often the uniqueness guard, rather than the eligibility check, decides a
booking.
"""

from threading import Lock
from time import monotonic
from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Custom registry so tests and embedding apps do not collide with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "trainer_assignment_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "trainer_assignment_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "trainer_assignment_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

assignment_outcomes_total = Counter(
    "trainer_assignment_outcomes_total",
    "Terminal outcome of each auto-assignment attempt",
    ["result"],
    registry=REGISTRY,
)

schedule_slot_conflicts_total = Counter(
    "trainer_assignment_schedule_slot_conflicts_total",
    "Assignments lost to a concurrent booking of the same trainer slots",
    ["stage"],
    registry=REGISTRY,
)

visibility_sync_failures_total = Counter(
    "trainer_assignment_visibility_sync_failures_total",
    "Calendar mirror failures after a committed assignment",
    registry=REGISTRY,
)

trainer_directory_requests_total = Counter(
    "trainer_assignment_trainer_directory_requests_total",
    "Requests made to the trainer directory",
    ["status"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    _cache_lock: Lock = Lock()
    _cache_payload: Optional[bytes] = None
    _cache_ts: Optional[float] = None
    _cache_ttl_seconds: float = 1.0

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
            service: Service name (e.g., 'AutoTrainerAssignmentService')
            operation: Operation name (e.g., 'process_purchase')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def inc_assignment_outcome(result: str) -> None:
        """Count a terminal purchase status (ASSIGNED, WAITLISTED, ...)."""
        assignment_outcomes_total.labels(result=result).inc()
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def inc_slot_conflict(stage: str) -> None:
        """Count a lost slot race; stage is 'recheck' or 'insert'."""
        schedule_slot_conflicts_total.labels(stage=stage).inc()
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def inc_visibility_sync_failure() -> None:
        visibility_sync_failures_total.inc()
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def inc_trainer_directory_request(status: str) -> None:
        trainer_directory_requests_total.labels(status=status).inc()
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def get_metrics() -> bytes:
        """
        Generate Prometheus metrics in exposition format.

        Returns:
            Metrics data in Prometheus text format
        """
        now = monotonic()
        payload = PrometheusMetrics._cache_payload
        ts = PrometheusMetrics._cache_ts

        if payload is not None and ts is not None and (now - ts) <= PrometheusMetrics._cache_ttl_seconds:
            return payload

        with PrometheusMetrics._cache_lock:
            payload = PrometheusMetrics._cache_payload
            ts = PrometheusMetrics._cache_ts
            if payload is None or ts is None or (now - ts) > PrometheusMetrics._cache_ttl_seconds:
                PrometheusMetrics._cache_payload = cast(bytes, generate_latest(REGISTRY))
                PrometheusMetrics._cache_ts = monotonic()
                payload = PrometheusMetrics._cache_payload

        return cast(bytes, payload)

    @staticmethod
    def get_content_type() -> str:
        return cast(str, CONTENT_TYPE_LATEST)

    @staticmethod
    def _invalidate_cache() -> None:
        with PrometheusMetrics._cache_lock:
            PrometheusMetrics._cache_ts = None
            PrometheusMetrics._cache_payload = None


# Singleton instance
prometheus_metrics = PrometheusMetrics()
