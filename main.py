"""
Wedding Seating Planner - FastAPI Backend
Main application entry point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from seatplan.core.config import settings
from seatplan.core.db import engine, Base
from seatplan.api import routes_public, routes_seating, ws
from seatplan.services.arrangement_store import ArrangementStore
from seatplan.services.directory import AttendeeDirectory
from seatplan.services.scheduler import AsyncioScheduler
from seatplan.services.session import SessionRegistry
from seatplan.services.view_state import ViewStateStore

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    scheduler = AsyncioScheduler()
    registry = SessionRegistry(
        directory=AttendeeDirectory(),
        store=ArrangementStore(),
        scheduler=scheduler,
        view_store=ViewStateStore(settings.VIEW_STATE_PATH),
    )
    registry.add_listener(ws.websocket_manager.publish)
    app.state.registry = registry
    yield

    # Persist anything still inside its quiet period
    await registry.flush_all()
    await scheduler.drain()
    logger.info("Application shutdown")

# Create FastAPI application
app = FastAPI(
    title="Wedding Seating Planner",
    description="Interactive seating arrangement backend with auto-save",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(routes_public.router, tags=["public"])
app.include_router(routes_seating.router, prefix="/seating", tags=["seating"])
app.include_router(ws.router, prefix="/ws", tags=["websocket"])

# Note: Run this ASGI app directly with Uvicorn or Hypercorn. For Gunicorn,
# use `uvicorn.workers.UvicornWorker` instead of wrapping the app.

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
