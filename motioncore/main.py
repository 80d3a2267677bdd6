"""
MotionCore Backend - FastAPI Application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from motioncore import __version__
from motioncore.api import plans, sessions, settings as settings_api, statistics, transfer
from motioncore.core.config import settings
from motioncore.core.database import init_db
from motioncore.core.errors import DataIOError
from motioncore.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    logger.info("Starting MotionCore Backend", version=__version__)
    await init_db()
    logger.info("Database initialized")

    yield

    # Shutdown
    logger.info("Shutting down MotionCore Backend")


app = FastAPI(
    title="MotionCore API",
    description="Workout logging, statistics and backup backend",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DataIOError)
async def data_io_error_handler(request: Request, exc: DataIOError) -> JSONResponse:
    """Render export/import failures with their user-facing message."""
    logger.warning(
        "Data IO request failed",
        path=request.url.path,
        code=exc.code,
        cause=str(exc.cause) if exc.cause else None,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include routers
app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])
app.include_router(plans.router, prefix="/api/plans", tags=["plans"])
app.include_router(statistics.router, prefix="/api", tags=["statistics"])
app.include_router(transfer.router, prefix="/api/transfer", tags=["transfer"])
app.include_router(settings_api.router, prefix="/api/settings", tags=["settings"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "motioncore-backend"}
