"""Render registry metrics for external monitoring systems."""
from __future__ import annotations

import logging

from .registry import MetricsRegistry

logger = logging.getLogger(__name__)


def _format_labels(label_names: tuple[str, ...], values: tuple[str, ...]) -> str:
    if not values:
        return ""
    pairs = ",".join(f'{name}="{value}"' for name, value in zip(label_names, values))
    return "{" + pairs + "}"


class PrometheusExporter:
    """Generate Prometheus text exposition output from a :class:`MetricsRegistry`."""

    def __init__(self, registry: MetricsRegistry) -> None:
        self.registry = registry

    def build_payload(self) -> str:
        lines: list[str] = []
        for metric in self.registry.metrics():
            lines.append(f"# HELP {metric.name} {metric.description}")
            lines.append(f"# TYPE {metric.name} {metric.metric_type}")
            for labels, values in sorted(metric.snapshot().items()):
                label_text = _format_labels(metric.label_names, labels)
                if "value" in values:
                    lines.append(f"{metric.name}{label_text} {values['value']}")
                else:
                    lines.append(f"{metric.name}_count{label_text} {values['count']}")
                    lines.append(f"{metric.name}_sum{label_text} {values['sum']}")
        return "\n".join(lines)

    def export(self) -> str:
        payload = self.build_payload()
        logger.debug("Generated metrics payload: %s", payload)
        return payload
