"""
OpenTelemetry instrumentation for the dashboard.

Traces incoming requests and the outgoing httpx calls to the inventory API.
Disabled unless ``ENABLE_TRACING`` is set.
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


def configure_opentelemetry(
    service_name: str,
    service_version: str,
    enable_tracing: bool,
    otlp_endpoint: Optional[str] = None,
) -> bool:
    """
    Install a tracer provider exporting over OTLP/gRPC.

    Args:
        service_name: Reported service name
        service_version: Reported service version
        enable_tracing: When False nothing is installed
        otlp_endpoint: Collector endpoint, defaults to OTEL_EXPORTER_OTLP_ENDPOINT

    Returns:
        Whether tracing was configured
    """
    if not enable_tracing:
        return False

    if otlp_endpoint is None:
        otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "localhost:4317")

    resource = Resource.create(
        {
            SERVICE_NAME: service_name,
            SERVICE_VERSION: service_version,
            "deployment.environment": os.getenv("ENVIRONMENT", "development"),
        }
    )

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
    )
    trace.set_tracer_provider(tracer_provider)

    HTTPXClientInstrumentor().instrument()

    logger.info(
        "OpenTelemetry tracing enabled",
        extra={"extra_fields": {"otlp_endpoint": otlp_endpoint}},
    )
    return True


def instrument_fastapi(app: FastAPI, excluded_urls: str = "/health,/metrics,/static") -> None:
    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=excluded_urls,
        tracer_provider=trace.get_tracer_provider(),
    )
