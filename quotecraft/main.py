from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from starlette.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from quotecraft.api import quotes
from quotecraft.core import engine
from quotecraft.core.config import settings
from quotecraft.core.errors import QuoteCraftError, DistanceUnavailable, InternalError
from quotecraft.core.metrics import request_count, request_duration, get_metrics_text
import time
import uuid
import logging

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        try:
            response = await call_next(request)
            duration = time.time() - start_time

            request_count.labels(
                method=request.method,
                endpoint=request.url.path,
                status=response.status_code
            ).inc()

            request_duration.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(duration)

            return response
        except Exception:
            duration = time.time() - start_time
            request_count.labels(
                method=request.method,
                endpoint=request.url.path,
                status=500
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(duration)
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")
    await engine.init_quote_service()

    yield

    logger.info("Application shutting down...")
    await engine.close_quote_service()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

app.add_middleware(MetricsMiddleware)

app.include_router(quotes.router)


@app.exception_handler(QuoteCraftError)
async def quotecraft_error_handler(request: Request, exc: QuoteCraftError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    headers = None
    if isinstance(exc, DistanceUnavailable):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    error = InternalError(correlation_id=uuid.uuid4().hex)
    logger.exception(
        f"Unhandled error [{error.correlation_id}] on {request.method} {request.url.path}: {exc}"
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check():
    service = engine.quote_service

    return {
        "status": "healthy",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "components": {
            "pricing": "operational" if service is not None else "not_initialized",
            "maps": {
                "status": "operational" if service and service.resolver.client.configured else "limited",
                "configured": bool(settings.GOOGLE_MAPS_API_KEY),
            },
        }
    }


@app.get("/readiness", tags=["monitoring"])
async def readiness_check():
    if engine.quote_service is None:
        return JSONResponse(
            status_code=503,
            content={"ready": False, "reason": "Quote service not initialized"}
        )

    return {
        "ready": True,
        "service": settings.API_TITLE
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }
