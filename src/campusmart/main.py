import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from campusmart.api.v1 import deliveries, orders, pickups, schedules
from campusmart.core.config import settings
from campusmart.core.database import engine
from campusmart.core.redis import close_redis
from campusmart.middleware.metrics import PrometheusMiddleware, metrics_endpoint
from campusmart.middleware.rate_limit import RateLimitMiddleware
from campusmart.services.exceptions import (
    AuthorizationError,
    ConflictError,
    IneligibleScheduleError,
    InternalError,
    LogisticsError,
    NotFoundError,
    ScheduleInactiveError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first; the first matching family wins
ERROR_STATUS: list[tuple[type[LogisticsError], int]] = [
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (IneligibleScheduleError, status.HTTP_403_FORBIDDEN),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ScheduleInactiveError, status.HTTP_409_CONFLICT),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InternalError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(error: LogisticsError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting application...")

    yield

    logger.info("Shutting down, closing connections")
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="CampusMart Logistics",
    version="1.0.0",
    description="Pickup and delivery slot scheduling for the campus marketplace",
    lifespan=lifespan,
)


@app.exception_handler(LogisticsError)
async def logistics_error_handler(request: Request, exc: LogisticsError) -> JSONResponse:
    """Render domain errors as {"detail": {"code", "message"}}."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )


# Prometheus Metrics Middleware (must be first to capture all requests)
app.add_middleware(PrometheusMiddleware)

# Rate Limiting Middleware (must be before CORS)
app.add_middleware(
    RateLimitMiddleware,
    user_limit=settings.RATE_LIMIT_USER,
    ip_limit=settings.RATE_LIMIT_IP,
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include API routers
app.include_router(schedules.router, prefix="/api/v1/schedules", tags=["schedules"])
app.include_router(pickups.router, prefix="/api/v1/pickups", tags=["pickups"])
app.include_router(deliveries.router, prefix="/api/v1/deliveries", tags=["deliveries"])
app.include_router(orders.router, prefix="/api/v1/orders", tags=["orders"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Prometheus metrics endpoint
app.add_route("/metrics", metrics_endpoint)
