"""
Main FastAPI application
Study stacks, learning progress and AI-generated quizzes
"""
from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
import logging
import os
import time

from app.config import settings
from app.database import engine, init_db
from app.api import stacks, resources, quizzes, ai
from app.utils.cache import cache_service
from app.utils.rate_limiter import rate_limiter

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Monitoring and docs routes are never throttled
RATE_LIMIT_EXEMPT = {"/health", "/docs", "/redoc", "/openapi.json"}


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Study stacks with learning progress and AI-generated multiple-choice quizzes",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    """Throttle per user (X-User-Id) or per client IP"""

    if request.url.path not in RATE_LIMIT_EXEMPT:
        try:
            await rate_limiter.check_rate_limit(request)
        except HTTPException as e:
            return JSONResponse(
                status_code=e.status_code,
                content=e.detail,
                headers={"Retry-After": str(e.detail["retry_after"])}
            )

    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, caller and timing for every request"""

    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    caller = request.headers.get("X-User-Id") or "anonymous"
    logger.info(
        f"{request.method} {request.url.path} [{caller}] - "
        f"Status: {response.status_code} - "
        f"Duration: {elapsed:.3f}s"
    )

    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything a router did not turn into an HTTPException"""

    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later.",
            "detail": str(exc) if settings.DEBUG else None
        }
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "http_error",
            "message": exc.detail,
            "status_code": exc.status_code
        },
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Body, path and query validation failures (bad ids, question counts, answers)"""

    return JSONResponse(
        status_code=422,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
            "status_code": 422
        }
    )


def _database_reachable() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring

    Reports the database and Redis; Redis being down only disables
    shared rate-limit counters, so it does not make the service unhealthy.
    """
    database_ok = _database_reachable()

    return {
        "status": "healthy" if database_ok else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": "connected" if database_ok else "unavailable",
        "redis": "connected" if cache_service.ping() else "unavailable",
        "ai_configured": bool(settings.GEMINI_API_KEY),
        "timestamp": time.time()
    }


@app.get("/")
async def root():
    return {
        "message": "Study Stacks & AI Quiz API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "stacks": "/api/v1/stacks",
            "resources": "/api/v1/stacks/{stack_id}/resources",
            "quizzes": "/api/v1/stacks/{stack_id}/quizzes",
            "ai": "/api/v1/ai/quiz"
        }
    }


app.include_router(stacks.router)
app.include_router(resources.router)
app.include_router(quizzes.router)
app.include_router(ai.router)


@app.on_event("startup")
async def startup_event():
    """Create tables and the upload directory"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)

    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set; quiz generation will fail until it is configured")
    logger.info(f"Quiz generation model: {settings.GEMINI_MODEL}")

    if not cache_service.available:
        logger.warning("Redis unavailable; rate limits are tracked per process")


@app.on_event("shutdown")
async def shutdown_event():
    """Release the Redis connection pool"""
    logger.info("Shutting down application")
    cache_service.close()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
