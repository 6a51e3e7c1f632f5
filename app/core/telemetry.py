"""
Telemetry: search pipeline metrics, HTTP metrics and tracing.

Pipeline metrics are module-level prometheus_client collectors so every
component records into the same registry that /metrics exposes.
"""
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import Counter, Gauge, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

from app.config import Settings, get_settings

# Routes whose traffic would drown the search metrics
UNMETERED_ROUTES = ["/metrics", "/health", "/health/ready", "/docs", "/redoc", "/openapi.json"]


SEARCH_REQUESTS = Counter(
    "movie_search_requests_total",
    "Movie searches by ranking branch and outcome",
    ["branch", "outcome"],
)

SEARCH_LATENCY = Histogram(
    "movie_search_duration_seconds",
    "End-to-end movie search latency",
    ["branch"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

CATALOG_CACHE_LOOKUPS = Counter(
    "catalog_cache_lookups_total",
    "Catalog cache lookups by kind and result",
    ["kind", "result"],
)

CIRCUIT_STATE = Gauge(
    "circuit_breaker_state",
    "Circuit breaker state (0=closed, 1=half_open, 2=open)",
    ["name"],
)


def setup_telemetry(app: FastAPI) -> None:
    """Attach /metrics and OTLP tracing according to settings."""
    settings = get_settings()

    if settings.ENABLE_PROMETHEUS:
        _setup_metrics(app)

    if settings.ENABLE_OTEL:
        _setup_tracing(app, settings)


def _setup_metrics(app: FastAPI) -> None:
    instrumentator = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=UNMETERED_ROUTES,
        env_var_name="ENABLE_METRICS",
        inprogress_name="movie_api_requests_inprogress",
        inprogress_labels=True,
    )
    instrumentator.instrument(app).expose(app, include_in_schema=False)


def _setup_tracing(app: FastAPI, settings: Settings) -> None:
    resource = Resource.create(attributes={
        "service.name": settings.APP_NAME,
        "service.version": settings.APP_VERSION,
        "deployment.environment": "development" if settings.DEBUG else "production",
    })
    provider = TracerProvider(resource=resource)

    # Collector endpoint falls back to the exporter default (localhost:4317)
    if settings.OTEL_EXPORTER_ENDPOINT:
        exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_ENDPOINT)
    else:
        exporter = OTLPSpanExporter()
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=provider,
        excluded_urls=",".join(UNMETERED_ROUTES[:3]),
    )
