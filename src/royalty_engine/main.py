"""
Royalty Engine - Revenue Distribution Service
FastAPI backend for split models, recording payments and pass metering
"""

from contextlib import asynccontextmanager
from typing import Dict, Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import earnings, passes, recording, works
from .core.config import get_settings
from .core.errors import EngineError, PassAlreadyActiveError, PassExpiredError
from .core.logging import setup_logging
from .database.connection import database_manager

# Global settings
settings = get_settings()

# Setup logging
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events"""

    # Startup
    logger.info("Starting royalty engine...")

    try:
        await database_manager.initialize()
        logger.info("Database connections initialized")

        # Fails fast on a misconfigured fee split
        pricing = settings.get_pricing_config()
        settings.get_metering_config()
        logger.info(
            f"Pricing: {pricing.price_per_block} USDC per {pricing.block_size_bars}-bar block, "
            f"split {pricing.platform_cut_percent}/{pricing.creators_cut_percent}/{pricing.remixer_stake_percent}"
        )

        logger.info("Royalty engine started successfully")

    except Exception as e:
        logger.error(f"Failed to start royalty engine: {e}")
        raise

    yield

    # Shutdown
    logger.info("Shutting down royalty engine...")

    try:
        await database_manager.close()
        logger.info("Database connections closed")

    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


# Create FastAPI application
app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Royalty and revenue distribution for creative works",
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(EngineError)
async def engine_exception_handler(request: Request, exc: EngineError):
    """Map typed engine rejections to their HTTP status"""
    content: Dict[str, Any] = {"error": type(exc).__name__, "detail": exc.reason}
    if isinstance(exc, (PassAlreadyActiveError, PassExpiredError)) and exc.expires_at:
        content["expires_at"] = exc.expires_at.isoformat()
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": str(exc)}
    )


# Health check endpoint
@app.get("/health")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint"""
    db_status = await database_manager.check_health()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "services": {
            "database": "healthy" if db_status else "unhealthy"
        }
    }


# API Routes
app.include_router(works.router, prefix="/api/v1", tags=["Splits & Works"])
app.include_router(earnings.router, prefix="/api/v1", tags=["Earnings"])
app.include_router(recording.router, prefix="/api/v1", tags=["Recording"])
app.include_router(passes.router, prefix="/api/v1", tags=["Passes"])


if __name__ == "__main__":
    uvicorn.run(
        "royalty_engine.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
