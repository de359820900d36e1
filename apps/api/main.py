"""
FastAPI application entry point.

This module sets up the Attune API with middleware, exception handlers
and routers.
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from routers import events, estimates, summaries
from core.config import settings
from core.cache import get_redis_client
from core.logging import setup_logging
from core.exceptions import APIException
from core.security_headers import SecurityHeadersMiddleware
import logging
import time
from typing import List

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Attune API",
    description="Wellness event logging with daily rollups, rolling trends and supportive insights",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)


LOCAL_DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def allowed_origins() -> List[str]:
    """DEBUG allows any origin; otherwise CORS_ORIGINS (comma-separated), else local dev servers."""
    if settings.DEBUG:
        return ["*"]
    if settings.CORS_ORIGINS:
        return [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]
    return LOCAL_DEV_ORIGINS


app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
)

app.add_middleware(SecurityHeadersMiddleware)


# Request logging middleware
def _request_fields(request: Request) -> dict:
    return {
        "method": request.method,
        "path": request.url.path,
        "user_id": request.headers.get("X-User-Id"),
    }


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log each request and its response status with timing."""
    start_time = time.time()
    fields = _request_fields(request)

    logger.info(
        f"Request: {request.method} {request.url.path}",
        extra={"extra_fields": {**fields, "client_ip": request.client.host if request.client else None}},
    )

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            f"Request failed: {request.method} {request.url.path}",
            exc_info=True,
            extra={"extra_fields": {**fields, "error": str(e)}},
        )
        raise

    process_time = time.time() - start_time
    logger.info(
        f"Response: {request.method} {request.url.path} - {response.status_code}",
        extra={
            "extra_fields": {
                **fields,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2),
            }
        },
    )
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Consistent body for expected API errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code},
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra={"extra_fields": _request_fields(request)},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/health")
async def health():
    """
    Health check for load balancers and uptime monitors.

    Redis only backs the advisory insight cache, so an unreachable Redis
    reports "degraded" rather than failing the check.
    """
    redis_status = "unavailable"
    try:
        client = get_redis_client()
        if client:
            client.ping()
            redis_status = "healthy"
    except Exception as e:
        logger.warning(f"Health check Redis ping failed: {e}")
        redis_status = "error"

    return {
        "status": "healthy" if redis_status == "healthy" else "degraded",
        "redis": redis_status,
        "insight_cache_enabled": settings.INSIGHT_CACHE_ENABLED,
        "environment": settings.ENVIRONMENT,
        "timestamp": time.time(),
    }


@app.get("/ping")
async def ping():
    """
    Minimal ping endpoint for uptime monitors.
    No dependencies checked - just confirms the API is responding.
    """
    return {"pong": True}


# Include routers
app.include_router(events.router)
app.include_router(estimates.router)
app.include_router(summaries.router)
