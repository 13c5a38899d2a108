"""
Observability setup:
  - OpenTelemetry distributed tracing → Jaeger (via OTLP gRPC)
  - Prometheus metrics for the toggle/recount write paths and listings

Both are initialised once at startup and injected into FastAPI via middleware.
"""
import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from prometheus_client import Counter, Histogram

from app.config import settings

logger = logging.getLogger(__name__)

# ─────────────────────────── Prometheus Metrics ───────────────────────────
FOLLOW_TOGGLES_TOTAL = Counter(
    "follow_toggles_total",
    "Follow toggles by resulting action",
    ["action"],  # 'follow' or 'unfollow'
)

LIKE_TOGGLES_TOTAL = Counter(
    "like_toggles_total",
    "Like toggles by target type and resulting action",
    ["target", "action"],  # target: 'post' | 'comment'; action: 'like' | 'unlike'
)

POSTS_CREATED_TOTAL = Counter(
    "posts_created_total",
    "Total number of posts created",
)

POSTS_DELETED_TOTAL = Counter(
    "posts_deleted_total",
    "Total number of posts deleted by their owner",
)

COMMENTS_CREATED_TOTAL = Counter(
    "comments_created_total",
    "Total number of comments created",
)

SESSION_LOOKUP_ERRORS_TOTAL = Counter(
    "session_lookup_errors_total",
    "Session lookups that failed and were treated as anonymous",
)

LISTING_LATENCY = Histogram(
    "listing_latency_seconds",
    "Latency of paginated listing queries",
    ["listing"],  # 'posts' | 'user_posts' | 'comments' | 'followers' | 'following'
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)


# ─────────────────────────── OpenTelemetry Setup ──────────────────────────
def setup_tracing() -> None:
    """Configure the global OTel TracerProvider with OTLP/Jaeger export."""
    if not settings.tracing_enabled:
        logger.info("OTel tracing disabled by configuration")
        return

    resource = Resource.create(
        {
            "service.name": settings.service_name,
            "deployment.environment": settings.environment,
        }
    )

    provider = TracerProvider(resource=resource)

    try:
        otlp_exporter = OTLPSpanExporter(
            endpoint=settings.otel_exporter_otlp_endpoint,
            insecure=True,
        )
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
        logger.info(
            "OTel tracing configured → %s", settings.otel_exporter_otlp_endpoint
        )
    except Exception as exc:
        logger.warning("Could not connect to OTLP exporter: %s — traces disabled", exc)

    trace.set_tracer_provider(provider)

    # Auto-instrument the outbound libraries so their spans appear in traces
    HTTPXClientInstrumentor().instrument()
    SQLAlchemyInstrumentor().instrument()


def instrument_app(app) -> None:  # noqa: ANN001
    """Call after app is created to add FastAPI request spans."""
    if settings.tracing_enabled:
        FastAPIInstrumentor.instrument_app(app)
