from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from slowapi.errors import RateLimitExceeded
import logging
import time
import uuid

from . import __version__
from .config import settings
from .database import create_tables
from .exceptions import ReservationError
from .utils.logging_config import setup_logging, get_logger, set_request_context, clear_request_context
from .utils.rate_limiter import limiter

from .routers import reservations, health

logger = logging.getLogger(__name__)
request_logger = get_logger("campsite.requests")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    setup_logging(settings.log_level, json_format=settings.log_json)
    logger.info(f"Starting campsite API ({settings.environment})")

    create_tables()

    yield

    logger.info("Shutting down campsite API")


app = FastAPI(
    title="Campsite Reservation API",
    description="Availability and reservations for the campsite",
    version=__version__,
    lifespan=lifespan
)

# Rate limiter state
app.state.limiter = limiter


# ================================
# CORS MIDDLEWARE - MUST BE FIRST!
# ================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])
        request.state.request_id = request_id
        set_request_context(request_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            request_logger.api_request(request.method, request.url.path, response.status_code, duration_ms)
        finally:
            clear_request_context()
        response.headers["X-Request-ID"] = request_id
        return response


# Add other middleware AFTER CORS
app.add_middleware(RequestIdMiddleware)
app.add_middleware(SecurityHeadersMiddleware)


# ================================
# ERROR HANDLERS
# ================================

def error_response(status_code: int, error: str, details: list, headers: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "status": status_code,
            "error": error,
            "details": details,
        },
        headers=headers,
    )


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError):
    logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    headers = {"Retry-After": "1"} if exc.retryable else None
    return error_response(exc.status_code, exc.title, exc.details, headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        details.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    logger.warning(f"{request.method} {request.url.path} rejected: {details}")
    return error_response(400, "Validation error", details)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return error_response(429, "Too many requests", ["Too many requests, please retry later"])


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} crashed")
    return error_response(500, "Server-side error", ["Unexpected server error"])


# Include routers
app.include_router(reservations.router)
app.include_router(health.router)


@app.get("/")
def root():
    return {
        "message": "Campsite Reservation API",
        "version": __version__,
        "docs": "/docs",
        "status": "running",
    }
