import logging
from typing import Optional

import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

# OpenTelemetry
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor


# 1. Structlog processor: ties every log line to the active request span
def add_otel_ids(logger, log_method, event_dict):
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = trace.format_trace_id(ctx.trace_id)
        event_dict["span_id"] = trace.format_span_id(ctx.span_id)
    return event_dict


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


# 2. JSON logs on stdout, one object per event
def configure_logging(service_name: str = "storefront", log_level: str = "INFO"):
    level = _resolve_level(log_level)

    # uvicorn and SQLAlchemy still log through the stdlib
    logging.basicConfig(format="%(message)s", level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_otel_ids,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)


# 3. Tracing; spans are always created, exported only when a collector is configured
def configure_tracing(app: FastAPI, service_name: str, otlp_endpoint: Optional[str]):
    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    trace.set_tracer_provider(provider)

    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )

    FastAPIInstrumentor.instrument_app(app)


# 4. Prometheus: HTTP metrics plus the checkout counters, served at /metrics
def configure_metrics(app: FastAPI):
    Instrumentator().instrument(app).expose(app, include_in_schema=False)


def setup_observability(
    app: FastAPI,
    service_name: str,
    log_level: str = "INFO",
    otlp_endpoint: Optional[str] = None,
):
    """
    Bootstraps logging, tracing and metrics for the app.
    Call once from main.py, before routers are mounted.
    """
    configure_logging(service_name, log_level)
    configure_tracing(app, service_name, otlp_endpoint)
    configure_metrics(app)
