"""OpenTelemetry tracing for the dashboard service.

Off by default (TELEMETRY_ENABLED=false). When enabled, spans from the
traced decorator (upstream calls, department lookup, task fetches, the
dashboard build) are exported to the console or to an OTLP gRPC collector,
and FastAPI, logging and optionally Redis are instrumented.
"""

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from taskboard.core.config import Settings

logger = logging.getLogger(__name__)

# Health probes would otherwise dominate the trace volume
_EXCLUDED_URLS = "/api/v1/health"


def build_exporter(kind: str, otlp_endpoint: str | None) -> SpanExporter | None:
    """Return the span exporter for kind ("console", "otlp" or "none").

    "otlp" without an endpoint, and unknown kinds, fall back to console.
    """
    if kind == "none":
        return None
    if kind == "otlp" and otlp_endpoint:
        return OTLPSpanExporter(
            endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://")
        )
    if kind != "console":
        logger.warning("Unusable span exporter %r, using console", kind)
    return ConsoleSpanExporter()


class Telemetry:
    """Tracer provider plus the instrumentations started for one app."""

    def __init__(
        self,
        provider: TracerProvider,
        *,
        instrument_redis: bool = False,
    ) -> None:
        self.provider = provider
        self.instrument_redis = instrument_redis
        self._app: FastAPI | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Telemetry":
        """Build the provider (resource, sampler, exporter) from settings."""
        resource = Resource(
            attributes={
                SERVICE_NAME: settings.app_name,
                SERVICE_VERSION: settings.app_version,
                "deployment.environment": settings.telemetry_environment,
                "taskboard.department": settings.department_name,
            }
        )
        provider = TracerProvider(
            resource=resource,
            sampler=TraceIdRatioBased(settings.telemetry_sample_rate),
        )
        exporter = build_exporter(settings.telemetry_exporter, settings.telemetry_otlp_endpoint)
        if exporter is not None:
            provider.add_span_processor(BatchSpanProcessor(exporter))
        return cls(provider, instrument_redis=settings.cache_backend == "redis")

    def start(self, app: FastAPI) -> None:
        """Install the provider globally and instrument app, logging and Redis."""
        trace.set_tracer_provider(self.provider)
        FastAPIInstrumentor.instrument_app(
            app, tracer_provider=self.provider, excluded_urls=_EXCLUDED_URLS
        )
        self._app = app
        # Adds otelTraceID/otelSpanID to records; the log format stays ours
        LoggingInstrumentor().instrument(tracer_provider=self.provider, set_logging_format=False)
        if self.instrument_redis:
            RedisInstrumentor().instrument(tracer_provider=self.provider)
        logger.info("Tracing started (redis instrumented: %s)", self.instrument_redis)

    def shutdown(self) -> None:
        """Undo the instrumentation and flush pending spans."""
        if self._app is not None:
            FastAPIInstrumentor.uninstrument_app(self._app)
            LoggingInstrumentor().uninstrument()
            if self.instrument_redis:
                RedisInstrumentor().uninstrument()
            self._app = None
        try:
            self.provider.shutdown()
        except Exception:
            logger.exception("Flushing spans on shutdown failed")
        logger.info("Tracing stopped")
