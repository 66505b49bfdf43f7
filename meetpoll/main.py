"""Main FastAPI application."""
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from meetpoll.api.v1.router import api_router
from meetpoll.api.deps import get_db
from meetpoll.core.config import settings
from meetpoll.core.rate_limit import limiter
from meetpoll.core.logging_config import setup_logging, get_logger
from meetpoll.middleware import LoggingMiddleware

# Initialize structured logging
setup_logging(level=settings.LOG_LEVEL, json_logs=settings.ENVIRONMENT == "production")
logger = get_logger(__name__)

if settings.ENVIRONMENT == "production":
    settings.validate_production_config()

logger.info(
    "application_starting",
    app_title=settings.APP_TITLE,
    app_version=settings.APP_VERSION,
    environment=settings.ENVIRONMENT,
    finalize_inline=settings.FINALIZE_INLINE,
)

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Storage failures are logged server-side and reported generically."""
    logger.error("database_error", error=str(exc), exception_type=type(exc).__name__)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Must be added before other middleware for proper request tracking
app.add_middleware(LoggingMiddleware)


@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    """Add X-API-Version header to all responses for version tracking."""
    response = await call_next(request)
    response.headers["X-API-Version"] = settings.APP_VERSION
    return response


# CORS middleware - configured for cookie-based auth
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,  # Required for cookies
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-API-Version"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
        - status: "healthy" or "unhealthy"
        - database: connection status
        - environment: current environment setting
        - finalization: which downstream side effects are enabled

    Returns 503 if database is unreachable.
    """
    finalization = settings.finalization_config()
    health_status = {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "database": {"status": "connected"},
        "finalization": {
            "inline": settings.FINALIZE_INLINE,
            "video_booking": finalization.video_booking_enabled,
            "calendar": finalization.calendar_enabled,
            "notifications": finalization.notifications_enabled,
        },
    }

    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        health_status["status"] = "unhealthy"
        health_status["database"]["status"] = f"error: {str(e)}"
        logger.error("health_check_failed", error=str(e))
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
