import logging

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from hotelhub.core.config import settings
from hotelhub.core.db import engine


# no-op until setup_telemetry installs a provider
tracer = trace.get_tracer("hotelhub")

log = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _provider() -> TracerProvider:
    resource = Resource.create({
        "service.name": settings.service_name,
        "deployment.environment": settings.env,
    })
    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=f"{settings.otlp_endpoint}/v1/traces")
    provider.add_span_processor(BatchSpanProcessor(exporter))
    return provider


def setup_telemetry(app) -> None:
    if not settings.telemetry_enabled:
        log.info("telemetry disabled")
        return

    trace.set_tracer_provider(_provider())
    FastAPIInstrumentor.instrument_app(app)
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)
    log.info("exporting traces to %s", settings.otlp_endpoint)
