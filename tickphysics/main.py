"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tickphysics.config import settings
from tickphysics.database import create_db_and_tables
from tickphysics.utils.logging import setup_logging
from tickphysics.utils.metrics import prometheus_middleware
from tickphysics.api import symbols, system

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    if settings.auto_create_tables:
        create_db_and_tables()
        logger.info("Database tables ensured (auto_create_tables)")
    yield


app = FastAPI(
    title=settings.project_name,
    description="Symbol registry for the TickPhysics EA tooling",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(prometheus_middleware)

# Mount routers
app.include_router(symbols.router)
app.include_router(system.router)
