"""
Traffic Perception & Signal Decision Engine
FastAPI Application Entry Point

Serves the engine over JSON for the dashboard and the video analysis
front end. Persistence and inference stay with the calling application.
"""

import os
import time
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from traffic_engine import __version__
from traffic_engine.config import init_config
from traffic_engine.engine import get_engine, init_engine
from traffic_engine.log import setup_logging

# Load environment variables
load_dotenv()

logger = setup_logging(getattr(logging, os.getenv("TRAFFIC_ENGINE_LOG_LEVEL", "INFO").upper(), logging.INFO))

_started_at = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events - startup and shutdown"""
    logger.info("Starting traffic engine API")

    cfg = init_config()
    logger.info("Configuration loaded from %s", cfg.config_dir)

    init_engine(cfg)

    yield

    engine = get_engine()
    if engine:
        logger.info("Shutting down after %d cycles", engine.total_cycles)


# Create FastAPI application
app = FastAPI(
    title="Traffic Engine API",
    description="Traffic perception and adaptive signal timing",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# Include API Routers
# ============================================

from traffic_engine.api import engine_router

# Engine routes: /api/engine/frame, /api/engine/evaluate, /api/engine/emergency/*
app.include_router(engine_router)


# ============================================
# Root Endpoints
# ============================================

@app.get("/", tags=["root"])
async def root():
    """Root endpoint - API information"""
    return {
        "name": "Traffic Perception & Signal Decision Engine",
        "version": __version__,
        "status": "operational",
        "documentation": "/docs",
        "endpoints": {
            "frame": "/api/engine/frame",
            "evaluate": "/api/engine/evaluate",
            "emergency": "/api/engine/emergency/*",
            "video": "/api/engine/video/summary",
            "statistics": "/api/engine/statistics"
        }
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint"""
    engine = get_engine()
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "uptime": time.time() - _started_at,
        "engine": "ready" if engine else "not_initialized"
    }


# ============================================
# Entry Point
# ============================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "traffic_engine.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        log_level="info"
    )
