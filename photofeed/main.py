"""
photofeed API — entry point.

Startup sequence:
  1. Configure logging and OTel tracing (→ Jaeger via OTLP)
  2. Create tables if not present (TiDB)
  3. Start the Kafka producer (event notifier)
  4. Initialise the MinIO client & bucket
  5. Expose Prometheus /metrics endpoint
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import make_asgi_app
from starlette.concurrency import run_in_threadpool

from photofeed.clients.kafka_producer import notifier
from photofeed.clients.minio_client import photo_store
from photofeed.config import settings
from photofeed.database import engine, init_db
from photofeed.routers import follow, like, photos, posts, users
from photofeed.routers.errors import register_exception_handlers
from photofeed.telemetry import instrument_app, setup_logging, setup_tracing

setup_logging()
logger = logging.getLogger(__name__)

# Set up tracing before the app is created so all imports are instrumented
if settings.otel_enabled:
    setup_tracing()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown of all external connections."""
    logger.info("Starting photofeed API (env=%s)", settings.environment)

    await init_db()
    await notifier.start()
    await run_in_threadpool(photo_store.init)   # boto3 is not async

    logger.info("All services connected. API ready.")
    yield

    logger.info("Shutting down...")
    await notifier.stop()
    await engine.dispose()


app = FastAPI(
    title="photofeed API",
    description=(
        "Users, posts, photos, likes and follows; every mutation is "
        "published to Kafka after it is committed."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(users.router, prefix="/api", tags=["Users"])
app.include_router(follow.router, prefix="/api", tags=["Follow"])
app.include_router(like.router, prefix="/api", tags=["Likes"])
app.include_router(posts.router, prefix="/api", tags=["Posts"])
app.include_router(photos.router, prefix="/api", tags=["Photos"])

# ── Prometheus metrics endpoint ────────────────────────────────────────────
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
if settings.otel_enabled:
    instrument_app(app)


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "service": settings.service_name}
