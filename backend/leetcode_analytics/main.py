from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from contextlib import asynccontextmanager
import logging
import structlog

from leetcode_analytics.core.config import settings, validate_settings
from leetcode_analytics.services.store import analytics_store

logging.basicConfig(format="%(message)s", level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if not settings.DEBUG else structlog.dev.ConsoleRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"Starting {settings.PROJECT_NAME} API", version=settings.VERSION, debug=settings.DEBUG)

    # Validate settings
    try:
        validate_settings()
        logger.info("Configuration validated successfully")
    except ValueError as e:
        logger.error("Configuration validation failed", error=str(e))
        logger.warning("Some features may not work correctly")

    # Load the first snapshot so the dashboard has data immediately
    try:
        snapshot = await analytics_store.refresh()
        logger.info("Initial snapshot loaded", questions=len(snapshot.questions), source=snapshot.metadata.source)
    except Exception as e:
        logger.warning("Failed to load initial snapshot", error=str(e))
        logger.info("Continuing without data; upload a CSV or trigger a refresh")

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME} API")


app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Aggregates LeetCode company interview questions and serves filterable analytics",
    version=settings.VERSION,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,  # Only expose docs in debug mode
    redoc_url="/api/redoc" if settings.DEBUG else None
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add trusted host middleware for security
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.ALLOWED_HOSTS
)

# Include routers
from leetcode_analytics.api.routes import analytics, process_csv, webhook

app.include_router(process_csv.router, prefix="/api/process-csv", tags=["process-csv"])
app.include_router(webhook.router, prefix="/api/webhook", tags=["webhook"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": f"{settings.PROJECT_NAME} API",
        "version": settings.VERSION,
        "status": "running",
        "docs": "/api/docs" if settings.DEBUG else "disabled",
        "endpoints": {
            "health": "/health",
            "process_csv": "/api/process-csv",
            "webhook": "/api/webhook",
            "analytics": "/api/analytics"
        }
    }


@app.get("/health", tags=["health"])
async def health_check_endpoint():
    """Health check endpoint with snapshot status"""
    snapshot = analytics_store.snapshot
    if snapshot is None:
        return {
            "status": "degraded",
            "snapshot": {"status": "not_loaded"},
            "environment": {
                "csv_source_url": settings.CSV_SOURCE_URL,
                "local_csv_path": settings.LOCAL_CSV_PATH,
                "debug": settings.DEBUG
            }
        }

    return {
        "status": "healthy",
        "snapshot": {
            "status": "loaded",
            "source": snapshot.metadata.source,
            "processed_at": snapshot.metadata.processed_at,
            "questions": len(snapshot.questions),
            "companies": len(snapshot.companies),
            "refreshes": analytics_store.refresh_count
        },
        "environment": {
            "csv_source_url": settings.CSV_SOURCE_URL,
            "local_csv_path": settings.LOCAL_CSV_PATH,
            "debug": settings.DEBUG
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "leetcode_analytics.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
