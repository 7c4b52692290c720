"""Main FastAPI application entry point."""
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from filedrop import logging_client
from filedrop.api import files
from filedrop.config import settings
from filedrop.dependencies import close_resources, get_coordinator, init_resources
from filedrop.exceptions import NotFoundError, StorageFailure, UploadRejectedError
from filedrop.models.responses import HealthResponse
from filedrop.services.coordinator import ConsistencyCoordinator

# Initialize logger
logger = logging_client.setup_logger(
    'filedrop',
    level=settings.LOG_LEVEL,
    log_host=settings.LOGGING_HOST,
    log_port=settings.LOGGING_PORT
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager: acquire storage/cache, release on shutdown."""
    logger.info(f"Starting {settings.APP_NAME}...")

    await init_resources()

    if await get_coordinator().cache_available():
        logger.info("✅ Redis: OK")
    else:
        logger.warning("⚠️  Redis: FAIL (serving without metadata cache)")

    logger.info(f"🚀 {settings.APP_NAME} ready on {settings.HOST}:{settings.PORT}")
    logger.info(f"🚀 Upload directory: {settings.UPLOAD_DIR}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_resources()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan
)

app.include_router(files.router, prefix="/api", tags=["files"])


# ============================================================================
# Error mapping: client errors carry a message, server errors stay generic
# ============================================================================

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"error": "File not found"})


@app.exception_handler(UploadRejectedError)
async def upload_rejected_handler(request: Request, exc: UploadRejectedError):
    logger.info(f"Upload rejected: {exc}")
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(StorageFailure)
async def storage_failure_handler(request: Request, exc: StorageFailure):
    logger.error(f"❌ Storage failure on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal storage error"})


@app.get("/api/health", response_model=HealthResponse)
async def health_check(coordinator: ConsistencyCoordinator = Depends(get_coordinator)):
    """Health check with live (uncached) Redis reachability."""
    return HealthResponse(
        status="OK",
        redis=await coordinator.cache_available(),
        timestamp=datetime.now(timezone.utc)
    )


@app.get("/")
async def root():
    """Root endpoint with API documentation."""
    return {
        "message": "filedrop API",
        "version": settings.VERSION,
        "endpoints": {
            "health": "/api/health",
            "docs": "/docs",
            "upload": "POST /api/upload",
            "download": "GET /api/download/{file_id}",
            "files": "GET /api/files",
            "delete": "DELETE /api/files/{file_id}"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("filedrop.main:app", host=settings.HOST, port=settings.PORT)
