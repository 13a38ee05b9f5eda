"""
Timeshift Service - FastAPI Application

Exposes health, Prometheus metrics and read-only status of the timeshift
buffers running in this process. Buffers are created by the embedding
application and registered here for observability.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from timeshift_service.logging_config import configure_logging
from timeshift_service.timeshift.buffer import TimeshiftBuffer

configure_logging()
logger = logging.getLogger(__name__)

# Buffers registered for status reporting, keyed by camera_id
_buffers: dict[str, TimeshiftBuffer] = {}


def register_buffer(buffer: TimeshiftBuffer) -> None:
    """Expose a timeshift buffer through the status endpoints."""
    _buffers[buffer.camera_id] = buffer


def unregister_buffer(camera_id: str) -> None:
    """Remove a timeshift buffer from the status endpoints."""
    _buffers.pop(camera_id, None)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Timeshift service starting...")
    yield
    for buffer in list(_buffers.values()):
        buffer.stop()
    logger.info("Timeshift service shutting down...")


app = FastAPI(
    title="Timeshift Service API",
    description="Health, metrics and status for livestream timeshift buffers",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "ok", "service": "timeshift-service"})


@app.get("/")
async def root() -> JSONResponse:
    """Root endpoint."""
    return JSONResponse(
        {
            "service": "timeshift-service",
            "version": "0.1.0",
            "status": "running",
        }
    )


@app.get("/metrics")
async def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/v1/timeshift")
async def list_buffers() -> JSONResponse:
    """Status of every registered timeshift buffer."""
    return JSONResponse({"buffers": [buffer.status() for buffer in _buffers.values()]})


@app.get("/v1/timeshift/{camera_id}")
async def get_buffer(camera_id: str) -> JSONResponse:
    """Status of one timeshift buffer."""
    buffer = _buffers.get(camera_id)

    if buffer is None:
        raise HTTPException(status_code=404, detail=f"Unknown camera: {camera_id}")

    return JSONResponse(buffer.status())
