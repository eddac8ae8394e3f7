"""
Textbook Market Orders - Main FastAPI Application.

REST layer for the order lifecycle: seller commitment, automatic
expiry of uncommitted orders and deadline reminders.
"""
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
import logging
import time

from api.responses import CORS_HEADERS, crash_response, error_response
from api.routes import commit, expiry, health, reminders
from core.domain.errors import OrderLifecycleError
from core.infrastructure.database.config import close_database, init_database
from core.settings import get_app_settings


# Setup logging
logging.basicConfig(
    level=get_app_settings().service.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# =============================================================================
# CREATE FASTAPI APP
# =============================================================================

app = FastAPI(
    title="Textbook Market - Order Lifecycle API",
    description="""
    Order lifecycle service for the textbook marketplace.

    Features:
    - Seller commitment to paid orders
    - Automatic expiry and refund of uncommitted orders
    - Commit and collection reminders
    """,
    version=get_app_settings().service.version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# =============================================================================
# REQUEST LOGGING MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing."""
    start_time = time.time()

    # Log request
    logger.info(f"→ {request.method} {request.url.path}")

    # Process request
    response = await call_next(request)

    # Calculate duration
    duration = time.time() - start_time

    # Log response
    logger.info(
        f"← {request.method} {request.url.path} "
        f"[{response.status_code}] ({duration:.3f}s)"
    )

    return response


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def cors_headers(request: Request, call_next):
    """
    Answer every preflight with a bare 200 and stamp CORS headers on
    every other response.
    """
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=dict(CORS_HEADERS))

    response = await call_next(request)
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(OrderLifecycleError)
async def lifecycle_error_handler(request: Request, exc: OrderLifecycleError):
    """Map lifecycle errors to their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"Lifecycle failure on {request.url.path}: {exc}")
        return crash_response(exc, status_code=exc.status_code)

    logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed JSON and schema errors are client errors (400)."""
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    message = "Invalid request: " + "; ".join(problems) if problems else "Invalid request"
    return error_response(400, message)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return crash_response(exc)


# =============================================================================
# STARTUP/SHUTDOWN EVENTS
# =============================================================================

@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    settings = get_app_settings()
    logger.info(f"🚀 {settings.service.name} starting up...")
    if settings.database.create_tables:
        await init_database()
    logger.info("📚 Swagger UI available at: /docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    logger.info("👋 Shutting down...")
    await close_database()


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

app.include_router(
    health.router,
    tags=["Health"]
)

app.include_router(
    commit.router,
    tags=["Commitment"]
)

app.include_router(
    expiry.router,
    tags=["Expiry"]
)

app.include_router(
    reminders.router,
    tags=["Reminders"]
)
