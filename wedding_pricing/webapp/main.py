"""
FastAPI application entry point for the wedding pricing API.

Run with:
    uvicorn wedding_pricing.webapp.main:app --reload

Open: http://127.0.0.1:8000/docs
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from wedding_pricing.webapp.exceptions import AppException
from wedding_pricing.webapp.routes import get_app_config, router
from wedding_pricing.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    config = get_app_config()
    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
    )
    logger.info("Wedding pricing API starting...")
    yield
    logger.info("Wedding pricing API shutting down...")


app = FastAPI(
    title="Wedding Package Pricing",
    description="Package estimates in IDR with display conversions to USD, EUR, GBP and AUD",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render application errors as JSON."""
    logger.warning(f"{exc.error_code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.middleware("http")
async def error_handling_middleware(request: Request, call_next):
    """Global error handling middleware."""
    start_time = time.time()
    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.exception(f"Unhandled error processing {request.url.path}: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": {"path": str(request.url.path)},
            },
            headers={"X-Process-Time": str(process_time)},
        )


@app.get("/health/simple")
async def simple_health_check() -> dict[str, Any]:
    """Simple health check for load balancers."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("wedding_pricing.webapp.main:app", host="127.0.0.1", port=8000, reload=True)
