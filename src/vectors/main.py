"""Vector layers service.

Main FastAPI application. Run with ``uvicorn vectors.main:app``.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from vectors.config import settings
from vectors.control import VectorsControl
from vectors.router import router as vectors_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Vector layers starting (map CRS {settings.map_crs}, export CRS {settings.export_crs})")
    app.state.vectors = VectorsControl()
    logger.info(f"Upload ceiling: {settings.max_upload_bytes} bytes")

    yield

    app.state.vectors.reset()
    app.state.vectors = None
    logger.info("Vector layers shutting down...")


app = FastAPI(
    title="Vector layers",
    description="Draw, edit, style, import and export vector layers",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(vectors_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "operational", "version": "0.1.0"}
