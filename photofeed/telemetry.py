"""
Observability setup:
  - Logging: stdlib logging, level chosen by environment
  - OpenTelemetry distributed tracing → Jaeger (via OTLP gRPC)
  - Prometheus metrics: events published, notify failures, write conflicts

Everything is initialised once at startup; the FastAPI instrumentation is
attached after the app object exists.
"""
import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from prometheus_client import Counter

from photofeed.config import settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"

# ─────────────────────────── Prometheus Metrics ───────────────────────────
EVENTS_PUBLISHED_TOTAL = Counter(
    "events_published_total",
    "Action events acknowledged by Kafka",
    ["topic"],
)

NOTIFY_FAILURES_TOTAL = Counter(
    "notify_failures_total",
    "Action events that could not be published after a committed write",
    ["topic"],
)

WRITE_CONFLICTS_TOTAL = Counter(
    "write_conflicts_total",
    "Writes rejected by a uniqueness or foreign-key constraint",
    ["op", "kind"],  # kind: 'unique' | 'foreign_key'
)


# ─────────────────────────── Logging ─────────────────────────────────────
def setup_logging(environment: str = settings.environment) -> None:
    """DEBUG for local/development environments, INFO everywhere else."""
    level = logging.DEBUG if environment in ("local", "development") else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # aiokafka is chatty at DEBUG
    logging.getLogger("aiokafka").setLevel(max(level, logging.INFO))


# ─────────────────────────── OpenTelemetry Setup ──────────────────────────
def setup_tracing() -> None:
    """Configure the global OTel TracerProvider with OTLP/Jaeger export."""
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

    # Auto-instrument the DB driver so statements show up as child spans
    SQLAlchemyInstrumentor().instrument()


def instrument_app(app) -> None:  # noqa: ANN001
    """Call after app is created to add FastAPI request spans."""
    FastAPIInstrumentor.instrument_app(app)
