"""
OpenTelemetry setup.

A console page is one inbound request followed by one or more backend
calls, so two instrumentations are enough: FastAPI for the page and httpx
for the calls it makes. Spans are exported over OTLP/gRPC.
"""

import os
from typing import Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .logging_config import get_logger

logger = get_logger(__name__)

UNTRACED_PATHS = ("/health", "/metrics", "/static")


def configure_opentelemetry(
    service_name: str,
    service_version: str,
    otlp_endpoint: Optional[str] = None,
    enable_tracing: bool = False,
) -> bool:
    """
    Install the global tracer provider and instrument httpx.

    Returns:
        True when tracing was switched on
    """
    if not enable_tracing:
        return False

    endpoint = otlp_endpoint or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "localhost:4317")
    provider = TracerProvider(
        resource=Resource.create(
            {
                SERVICE_NAME: service_name,
                SERVICE_VERSION: service_version,
                "deployment.environment": os.getenv("ENVIRONMENT", "development"),
            }
        )
    )
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True)))
    trace.set_tracer_provider(provider)
    HTTPXClientInstrumentor().instrument()

    logger.info(
        "Tracing enabled",
        extra={"extra_fields": {"otlp_endpoint": endpoint, "service": service_name}},
    )
    return True


def instrument_fastapi(app: FastAPI, untraced_paths: tuple = UNTRACED_PATHS) -> None:
    """Trace inbound requests except health, metrics and static assets."""
    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=",".join(untraced_paths),
        tracer_provider=trace.get_tracer_provider(),
    )
