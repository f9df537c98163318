"""
Valeria API Server

FastAPI application providing endpoints for:
- Merged feed listing, read state and refresh
- Provider listing and connectivity checks
- Claude Code hook ingestion
- Server-Sent Events notification stream
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import config, state
from .feed_service import FeedService
from .notifications import NotificationHub
from .providers import create_providers
from .routes import api_router, events_router, misc_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize application services."""
    # Startup - skip if already initialized (e.g., by tests)
    if state.notifications is None:
        state.notifications = NotificationHub()

    if state.feed_service is None:
        providers = create_providers(config.providers)
        state.feed_service = FeedService(providers, cache_ttl=config.cache_ttl)
        logger.info(f"Feed service ready with providers: {', '.join(providers) or 'none'}")

    yield


app = FastAPI(
    title="Valeria API",
    version=__version__,
    lifespan=lifespan
)

# Local browser clients are served from other origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(misc_router)
app.include_router(api_router)
app.include_router(events_router)
