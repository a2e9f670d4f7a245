from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from glownexa.core.config import settings
from glownexa.core.exceptions import RateLimitExceeded
from glownexa.core.monitoring import contact_rejections_total, setup_metrics
from glownexa.core.redis import get_redis, close_redis
from glownexa.database import connect_to_mongo, close_mongo_connection, db
from glownexa.middleware.security_headers import SecurityHeadersMiddleware
from glownexa.api.v1 import contact, auth, skin_analysis, media
from glownexa.services.mail_service import mail_service

# Configure logging
logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME} Backend...")
    connect_to_mongo()
    get_redis()  # Initialize Redis connection for rate limiting

    if not settings.CONTACT_TO_EMAIL:
        logger.warning("CONTACT_TO_EMAIL is not set; contact messages will fail")
    await mail_service.verify_connection()

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Closing database connections...")
    close_mongo_connection()
    close_redis()

    logger.info("Application shutdown complete")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="GlowNexa - contact relay, analysis history and media API",
    lifespan=lifespan
)

if settings.ENABLE_METRICS:
    instrumentator = setup_metrics(app)
    instrumentator.instrument(app).expose(app, endpoint="/metrics")

app.add_middleware(SecurityHeadersMiddleware)

# CORS - only the browser app may call the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

# Include routers
app.include_router(contact.router, prefix="/api", tags=["Contact"])
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(skin_analysis.router, prefix="/api/v1/analyses", tags=["Analyses"])
app.include_router(media.router, prefix="/api/v1/media", tags=["Media"])

# Health check endpoint
@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Health check with dependency status"""
    health_status = "healthy"

    db_status = "healthy"
    try:
        if db.client is None:
            db_status = "not_connected"
            health_status = "degraded"
        else:
            db.client.admin.command('ping')
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "unhealthy"
        health_status = "degraded"

    redis_status = "healthy"
    try:
        redis = get_redis()
        if redis:
            redis.ping()
        else:
            redis_status = "not_configured"
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        redis_status = "unhealthy"

    return {
        "status": health_status,
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": "development" if settings.DEBUG else "production",
        "database": db_status,
        "redis": redis_status,
    }

@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.APP_NAME} Backend",
        "version": settings.APP_VERSION,
        "docs": "/docs"
    }

@app.exception_handler(RateLimitExceeded)
async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    if request.url.path.endswith("/contact"):
        contact_rejections_total.labels(reason="rate_limited").inc()
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"success": False, "error": exc.message},
        headers={"Retry-After": str(exc.retry_after)}
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # The contact relay answers unreadable bodies in its own {success, error} shape
    if request.url.path.endswith("/contact"):
        contact_rejections_total.labels(reason="missing_fields").inc()
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Missing required fields"}
        )
    return await request_validation_exception_handler(request, exc)

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )
