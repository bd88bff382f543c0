"""OpenTelemetry tracing for the S3 ILM Operator.

Spans always go through the global tracer. Until ``initialize_tracing``
installs an SDK provider they are non-recording, so callers never need to
check whether tracing is on.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span

from .constants import CONTROLLER_NAME, KIND_ILM_POLICY

logger = logging.getLogger(__name__)

TRACER_NAME = "s3_ilm_operator"


def initialize_tracing() -> bool:
    """Export spans over OTLP when ``OTEL_TRACES_ENABLED`` is true.

    Environment Variables:
        OTEL_TRACES_ENABLED: Turn exporting on (default: false)
        OTEL_SERVICE_NAME: Service name (default: s3-ilm-operator)
        OTEL_EXPORTER_OTLP_ENDPOINT: Collector endpoint (default: http://localhost:4317)

    Returns:
        True if an exporting tracer provider was installed
    """
    if os.getenv("OTEL_TRACES_ENABLED", "false").lower() != "true":
        return False

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: os.getenv("OTEL_SERVICE_NAME", CONTROLLER_NAME)}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    trace.set_tracer_provider(provider)
    logger.info(f"Exporting traces to {endpoint}")
    return True


@contextmanager
def policy_span(name: str, meta: dict[str, Any] | None = None, **attributes: Any) -> Iterator[Span]:
    """Open a span for work on an ILMPolicy.

    Keyword attributes are recorded under the ``lifecycle.`` namespace;
    None values are skipped. Exceptions are recorded on the span by the SDK.
    """
    span_attributes: dict[str, Any] = {"k8s.resource.kind": KIND_ILM_POLICY}
    if meta is not None:
        span_attributes["k8s.namespace.name"] = meta.get("namespace", "default")
        span_attributes["k8s.resource.name"] = meta.get("name", "unknown")
    span_attributes.update(_lifecycle_attributes(attributes))

    with trace.get_tracer(TRACER_NAME).start_as_current_span(name, attributes=span_attributes) as span:
        yield span


def annotate(**attributes: Any) -> None:
    """Add ``lifecycle.`` attributes to the current span."""
    trace.get_current_span().set_attributes(_lifecycle_attributes(attributes))


def _lifecycle_attributes(attributes: dict[str, Any]) -> dict[str, Any]:
    return {f"lifecycle.{key}": value for key, value in attributes.items() if value is not None}
