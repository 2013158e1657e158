"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from claude_dashboard import config
from claude_dashboard.api.routes import analytics, sessions, settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Report where session logs and dashboard state are read from."""
    logger.info("Reading Claude Code data from %s", config.CLAUDE_DIR)
    if not (config.CLAUDE_DIR / "projects").is_dir():
        logger.warning("No projects directory under %s; session lists will be empty",
                       config.CLAUDE_DIR)
    logger.info("Dashboard settings and cache in %s", config.DATA_DIR)
    yield


app = FastAPI(
    title="Claude Dashboard API",
    description="Browse, search and cost Claude Code sessions stored on this machine",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["GET", "PUT"],
    allow_headers=["*"],
)

app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])
app.include_router(settings.router, prefix="/api/settings", tags=["settings"])


@app.get("/api/health")
async def health():
    """Health check for API."""
    return {"status": "healthy"}
