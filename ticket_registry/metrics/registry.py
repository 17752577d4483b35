"""In-memory metrics registry and the registry's default metric set."""
from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Iterable, Mapping, MutableMapping, Tuple

from .base import CounterMetric, DistributionMetric, Metric

OPERATIONS_TOTAL = "ticket_registry_operations_total"
OPERATION_FAILURES_TOTAL = "ticket_registry_operation_failures_total"
TICKETS_ISSUED_TOTAL = "ticket_registry_tickets_issued_total"
OPERATION_DURATION_SECONDS = "ticket_registry_operation_duration_seconds"


@dataclass(frozen=True)
class MetricDefinition:
    name: str
    metric_type: str
    description: str
    label_names: Tuple[str, ...] = ()


DEFAULT_METRIC_DEFINITIONS: Tuple[MetricDefinition, ...] = (
    MetricDefinition(
        name=OPERATIONS_TOTAL,
        metric_type="counter",
        description="Registry operations that completed successfully.",
        label_names=("operation",),
    ),
    MetricDefinition(
        name=OPERATION_FAILURES_TOTAL,
        metric_type="counter",
        description="Registry operations rejected with a typed error.",
        label_names=("operation", "code"),
    ),
    MetricDefinition(
        name=TICKETS_ISSUED_TOTAL,
        metric_type="counter",
        description="Tickets minted through single or batch issuance.",
    ),
    MetricDefinition(
        name=OPERATION_DURATION_SECONDS,
        metric_type="distribution",
        description="Time spent inside registry operations in seconds.",
        label_names=("operation",),
    ),
)


class MetricsRegistry:
    """Registry that holds metric instances by name."""

    def __init__(self) -> None:
        self._metrics: MutableMapping[str, Metric] = {}
        self._lock = Lock()

    def _get_or_create(self, name: str, factory: Callable[[], Metric], expected: type) -> Metric:
        with self._lock:
            if name not in self._metrics:
                self._metrics[name] = factory()
            metric = self._metrics[name]
        if not isinstance(metric, expected):
            raise TypeError(f"Metric '{name}' already exists with a different type")
        return metric

    def counter(self, name: str, *, description: str = "", label_names: Iterable[str] | None = None) -> CounterMetric:
        return self._get_or_create(  # type: ignore[return-value]
            name,
            lambda: CounterMetric(name, description=description, label_names=label_names),
            CounterMetric,
        )

    def distribution(
        self, name: str, *, description: str = "", label_names: Iterable[str] | None = None
    ) -> DistributionMetric:
        return self._get_or_create(  # type: ignore[return-value]
            name,
            lambda: DistributionMetric(name, description=description, label_names=label_names),
            DistributionMetric,
        )

    def metrics(self) -> Tuple[Metric, ...]:
        with self._lock:
            return tuple(self._metrics.values())

    def snapshot(self) -> Dict[str, Mapping[Tuple[str, ...], Mapping[str, float]]]:
        with self._lock:
            return {name: metric.snapshot() for name, metric in self._metrics.items()}

    def register_defaults(self) -> "MetricsRegistry":
        for definition in DEFAULT_METRIC_DEFINITIONS:
            if definition.metric_type == "counter":
                self.counter(definition.name, description=definition.description, label_names=definition.label_names)
            elif definition.metric_type == "distribution":
                self.distribution(
                    definition.name, description=definition.description, label_names=definition.label_names
                )
            else:  # pragma: no cover
                raise ValueError(f"Unsupported metric type: {definition.metric_type}")
        return self
