"""Main FastAPI application with hexagonal architecture."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

load_dotenv()

from .api.rest.routes import router as knowledge_router
from .api.rest.session_routes import router as session_router
from .api.rest.settings_routes import router as settings_router
from .api.websocket.handlers import handle_analyze_websocket
from .infrastructure.context import CoachContext
from . import __version__

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    app.state.context = CoachContext.from_env().open()
    yield
    # Shutdown
    app.state.context.close()
    logger.info("Context closed")


app = FastAPI(
    title="Coach Journal API",
    description="Coaching journal for League of Legends: advice extraction, match review and stats",
    version=__version__,
    lifespan=lifespan,
)

# CORS configuration for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",  # Alternative dev port
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    api_key_configured: bool
    spreadsheet_configured: bool
    authenticated: bool


@app.get("/", tags=["meta"])
async def root():
    """API root with information and available endpoints."""
    return {
        "name": "Coach Journal API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "health": "GET /health",
            "settings": "GET|PUT /api/settings",
            "login": "GET /api/auth/login",
            "analyze": "POST /api/extraction/analyze",
            "saveAdvice": "POST /api/knowledge/advice",
            "review": "POST /api/session/start",
            "dashboard": "GET /api/dashboard",
            "websocket": "WS /ws/analyze",
        },
    }


@app.get("/health", response_model=HealthResponse, tags=["meta"])
async def health_check(request: Request):
    """Check API health and configuration status."""
    ctx = request.app.state.context
    return HealthResponse(
        status="healthy",
        version=__version__,
        api_key_configured=ctx.settings.has_api_key,
        spreadsheet_configured=ctx.settings.has_store,
        authenticated=ctx.auth.is_authenticated,
    )


app.include_router(settings_router)
app.include_router(knowledge_router)
app.include_router(session_router)


@app.websocket("/ws/analyze")
async def websocket_analyze(websocket: WebSocket):
    """WebSocket endpoint for video analysis with progress.

    Connect to this endpoint and send:
    {
        "action": "analyze",
        "videoUrl": "https://www.youtube.com/watch?v=...",
        "notes": "focus on wave management"  // Optional
    }

    On completion, the final message carries the candidates:
    {
        "status": "completed",
        "progress": 100,
        "title": "Video Analysis - 14:03:22",
        "items": [ ... ]
    }

    Save them with POST /api/knowledge/advice.
    """
    await handle_analyze_websocket(websocket)
