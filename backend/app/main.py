"""
FastAPI application entry point.

Run with:
    uvicorn backend.app.main:app --reload --port 8000

Or from the project root:
    python -m uvicorn backend.app.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# ── Core infrastructure ──
from backend.app.core.config import settings
from backend.app.core.logging_config import setup_logging, get_logger
from backend.app.core.errors import register_error_handlers
from backend.app.core.middleware import RequestTimingMiddleware

# ── Data sources ──
from backend.app.ingestion.catalogue_source import USGSFeedClient, load_catalogue_async

# ── API routers ──
from backend.app.api.v1.seismicity import router as seismicity_router

# ── Initialise logging ──
setup_logging()
logger = get_logger(__name__)


# ── Application lifespan (startup / shutdown) ──

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the catalogue (or open the live feed client) for the app's lifetime."""
    logger.info(
        "Starting %s v%s [%s]",
        settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT,
    )
    app.state.catalogue = None
    app.state.feed_client = None

    if settings.uses_live_feed:
        app.state.feed_client = USGSFeedClient(
            base_url=settings.USGS_EARTHQUAKE_URL,
            timeout=settings.FEED_FETCH_TIMEOUT,
            max_retries=settings.FEED_MAX_RETRIES,
            result_limit=settings.FEED_RESULT_LIMIT,
        )
        logger.info("Serving queries from live feed %s", settings.USGS_EARTHQUAKE_URL)
    else:
        try:
            app.state.catalogue = await load_catalogue_async(settings.CATALOGUE_PATH)
        except OSError as e:
            logger.warning(
                "Catalogue %s could not be read (%s); queries will return 503",
                settings.CATALOGUE_PATH, e,
                extra={"source": settings.CATALOGUE_PATH},
            )

    yield

    if app.state.feed_client is not None:
        await app.state.feed_client.close()
    logger.info("Shutting down %s", settings.APP_NAME)


# ── Create application ──

app = FastAPI(
    title=settings.APP_NAME,
    description=(
        "Earthquake catalogue explorer. "
        "Filters the ISC-GEM catalogue (or the live USGS feed) by distance, "
        "magnitude and time window, and computes Gutenberg-Richter "
        "frequency-magnitude fits, magnitude and depth distributions, "
        "seismic energy release and temporal patterns."
    ),
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── Middleware stack (order matters — outermost first) ──

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS if not settings.CORS_ALLOW_ALL else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestTimingMiddleware)

# ── Error handlers ──
register_error_handlers(app)

# ── Register routers ──
app.include_router(seismicity_router)


# ── Root & health endpoints ──

@app.get("/", tags=["root"])
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "source": "feed" if settings.uses_live_feed else "catalogue",
        "docs": "/docs",
    }


@app.get("/health", tags=["health"])
async def health_check(request: Request):
    """Service status and data-source readiness."""
    snapshot = getattr(request.app.state, "catalogue", None)
    feed_client = getattr(request.app.state, "feed_client", None)
    ready = snapshot is not None or feed_client is not None
    return {
        "status": "healthy" if ready else "degraded",
        "version": settings.APP_VERSION,
        "catalogue_loaded": snapshot is not None,
        "event_count": snapshot.count if snapshot is not None else 0,
        "catalogue_version": snapshot.version if snapshot is not None else None,
        "live_feed": feed_client is not None,
    }
