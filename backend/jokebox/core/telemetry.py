"""OpenTelemetry setup shared by the API server and the console viewer.

The server instruments FastAPI; the viewer instruments its outbound httpx
calls. Both export spans over OTLP gRPC with B3 propagation, and any
setup failure leaves the process running untraced.
"""

from __future__ import annotations

import logging
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.b3 import B3MultiFormat
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

SERVICE_NAMESPACE = "jokebox"


def configure_opentelemetry(
    service_name: str,
    service_version: str,
    otlp_endpoint: str,
    otlp_headers: str | None = None,
    enabled: bool = False,
) -> bool:
    """Install a tracer provider exporting to ``otlp_endpoint``.

    Args:
        service_name: ``service.name`` resource attribute
        service_version: ``service.version`` resource attribute
        otlp_endpoint: OTLP gRPC collector endpoint
        otlp_headers: Optional exporter headers (``key=value,...``)
        enabled: Tracing switch; nothing is installed when False

    Returns:
        True when a provider was installed.
    """
    if not enabled:
        logger.info("OpenTelemetry tracing is disabled for %s", service_name)
        return False

    try:
        set_global_textmap(B3MultiFormat())
        provider = TracerProvider(
            resource=Resource.create(
                {
                    "service.name": service_name,
                    "service.version": service_version,
                    "service.namespace": SERVICE_NAMESPACE,
                }
            )
        )
        provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(endpoint=otlp_endpoint, headers=otlp_headers)
            )
        )
        trace.set_tracer_provider(provider)
    except Exception as exc:
        logger.warning("Failed to configure OpenTelemetry: %s", exc)
        logger.info("%s will continue without tracing", service_name)
        return False

    logger.info(
        "OpenTelemetry configured for service '%s' (OTLP endpoint %s)",
        service_name,
        otlp_endpoint,
    )
    return True


def instrument_fastapi(app: Any, enabled: bool = False) -> None:
    """Trace incoming requests on the API server."""
    if not enabled:
        return

    try:
        FastAPIInstrumentor.instrument_app(app)
        logger.info("FastAPI instrumentation enabled")
    except Exception as exc:
        logger.warning("Failed to instrument FastAPI: %s", exc)


def instrument_httpx(enabled: bool = False) -> None:
    """Trace outgoing httpx requests; the viewer's fetches and probes."""
    if not enabled:
        return

    try:
        HTTPXClientInstrumentor().instrument()
        logger.info("HTTPX client instrumentation enabled")
    except Exception as exc:
        logger.warning("Failed to instrument HTTPX: %s", exc)


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(SERVICE_NAMESPACE)
