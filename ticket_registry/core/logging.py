"""Logging and tracing setup for a running ticket registry."""

from __future__ import annotations

import logging
from logging.config import dictConfig

from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor, SpanExporter

from ticket_registry.core.config import Settings

REGISTRY_LOGGER = "ticket_registry"


def configure_logging(settings: Settings) -> logging.Logger:
    """Attach a stream handler to the ``ticket_registry`` logger tree.

    Records still propagate, so handlers installed on the root logger by the
    host application keep seeing registry events. The root logger is left alone.
    """

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "registry": {"format": f"[{settings.environment}] {settings.log_format}"},
            },
            "handlers": {
                "registry": {
                    "class": "logging.StreamHandler",
                    "formatter": "registry",
                    "level": level,
                }
            },
            "loggers": {
                REGISTRY_LOGGER: {"handlers": ["registry"], "level": level, "propagate": True},
            },
        }
    )
    return logging.getLogger(REGISTRY_LOGGER)


def tracing_resource(settings: Settings) -> Resource:
    return Resource.create(
        {
            "service.name": settings.otel_service_name,
            "service.namespace": settings.app_name,
            "deployment.environment": settings.environment,
        }
    )


def otlp_headers(raw: str | None) -> dict[str, str]:
    """Split ``"key=value,key2=value2"``; items without a key or ``=`` are dropped."""

    headers: dict[str, str] = {}
    for item in (raw or "").split(","):
        key, sep, value = item.partition("=")
        if sep and key.strip():
            headers[key.strip()] = value.strip()
    return headers


def _otlp_exporter(settings: Settings) -> OTLPSpanExporter:
    headers = otlp_headers(settings.otel_exporter_otlp_headers)
    return OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint, headers=headers or None)


def init_tracer(settings: Settings, *, exporter: SpanExporter | None = None) -> TracerProvider | None:
    """Build a tracer provider for one registry, or ``None`` when tracing is disabled.

    The provider is not installed globally; callers hand it to the registry and
    shut it down themselves. An explicit ``exporter`` is flushed synchronously,
    the OTLP exporter is batched.
    """

    if not settings.otel_enabled:
        return None

    provider = TracerProvider(resource=tracing_resource(settings))
    if exporter is not None:
        provider.add_span_processor(SimpleSpanProcessor(exporter))
    else:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(settings)))
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    if provider is not None:
        provider.shutdown()
