"""Registry metrics utilities."""
from .base import CounterMetric, DistributionMetric, track_duration
from .exporters import PrometheusExporter
from .registry import (
    DEFAULT_METRIC_DEFINITIONS,
    OPERATION_DURATION_SECONDS,
    OPERATION_FAILURES_TOTAL,
    OPERATIONS_TOTAL,
    TICKETS_ISSUED_TOTAL,
    MetricDefinition,
    MetricsRegistry,
)

__all__ = [
    "CounterMetric",
    "DEFAULT_METRIC_DEFINITIONS",
    "DistributionMetric",
    "MetricDefinition",
    "MetricsRegistry",
    "OPERATIONS_TOTAL",
    "OPERATION_DURATION_SECONDS",
    "OPERATION_FAILURES_TOTAL",
    "PrometheusExporter",
    "TICKETS_ISSUED_TOTAL",
    "track_duration",
]
