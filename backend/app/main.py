"""
Space Booking API - application entry point.

Owners list spaces, clients request bookings, and the booking core
guarantees that:
- overlapping single-day bookings on one space are never both accepted,
  even under concurrent requests (per-space calendar claim)
- prices are always computed server-side from the space's price policy
- status changes follow the booking state machine, with optimistic
  locking against concurrent owner actions and payment callbacks
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings
from app.core.logging import setup_logging, get_logger
from app.core.metrics import metrics_endpoint
from app.api.errors import register_exception_handlers
from app.api.router import api_router
from app.api.middleware import RequestLoggingMiddleware
from app.services.cache_service import get_redis, close_redis, get_cache_stats
from app.services.strategy_factory import get_notifier

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        notifier=type(get_notifier()).__name__,
        mobile_money_enabled=settings.MOBILE_MONEY_ENABLED,
    )

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Space booking marketplace API with conflict-safe reservations",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    cache_stats = await get_cache_stats()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": cache_stats,
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_endpoint()
