"""
@file main.py
@brief FastAPI application factory and root endpoint.
@details
Initializes the RoadWatch FastAPI application with:
- Logging configuration
- Road network, spatial index and AHP model loading
- Middleware setup (CORS, Error handling)
- Router registration (API, Health)
- Documentation serving

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from fastapi.responses import HTMLResponse

# Internal modules
from roadwatch.core.logging import setup_logging
from roadwatch.core import exceptions
from roadwatch.core import docs
from roadwatch.core.config import get_settings
from roadwatch.core.middleware import NetworkUnavailableMiddleware
from roadwatch.core.cache import cache
from roadwatch.core.registry import NetworkRegistry, set_registry
from roadwatch.api import routes
from roadwatch.api.endpoints import health

# Configure logging
logger = setup_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    @brief Application lifecycle manager
    @details
    Handles startup and shutdown events:
    - Road network, snapper index and AHP model
    - Redis connection
    A network that fails to load leaves the API in maintenance mode (503)
    instead of aborting startup, so health probes keep answering, until
    POST /network/reload succeeds.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("Starting RoadWatch API...")
    logger.info("=" * 60)

    settings = get_settings()

    try:
        logger.info(f"Loading road network from {settings.road_network_path}...")
        set_registry(NetworkRegistry.build(settings))
        logger.info("✓ Road network and AHP model ready")
    except exceptions.RoadWatchError as e:
        logger.error(f"✗ Road network initialization failed: {e}", exc_info=True)
        set_registry(None)

    # Connect Cache
    await cache.connect(settings.redis_url)

    yield

    # Shutdown
    await cache.close()
    set_registry(None)
    logger.info("RoadWatch API shutdown completed")


## @brief FastAPI application instance
app = FastAPI(
    title="RoadWatch API - Road Damage Reconciliation & Repair Prioritization",
    lifespan=lifespan,
    docs_url="/api/docs", # Move auto-docs to /api/docs to keep root clean
    redoc_url=None
)

# --------------------------------------------------------------------------
# Middleware
# --------------------------------------------------------------------------

# CORS
# Production Note: Restrict allow_origins in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Road network error handling
app.add_middleware(NetworkUnavailableMiddleware)


# --------------------------------------------------------------------------
# Routers
# --------------------------------------------------------------------------

app.include_router(health.router)
app.include_router(routes.router) # Root level API to support frontend proxies


# --------------------------------------------------------------------------
# Exception Handlers
# --------------------------------------------------------------------------

app.add_exception_handler(HTTPException, exceptions.http_exception_handler)
app.add_exception_handler(RequestValidationError, exceptions.validation_exception_handler)
app.add_exception_handler(exceptions.InvalidCoordinateError, exceptions.roadwatch_exception_handler)
app.add_exception_handler(exceptions.AHPMatrixError, exceptions.roadwatch_exception_handler)
app.add_exception_handler(Exception, exceptions.general_exception_handler)


# --------------------------------------------------------------------------
# Documentation
# --------------------------------------------------------------------------

@app.get("/", response_class=HTMLResponse)
def read_root():
    """
    @brief Serve root documentation page
    """
    return docs.get_root_documentation()
