"""
Sport Scheduler API Server

FastAPI server for scheduling recreational sport sessions: sports, sessions,
joining with team assignment, cancellation and admin reports.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
import uvicorn
from slowapi import _rate_limit_exceeded_handler  # type: ignore
from slowapi.errors import RateLimitExceeded  # type: ignore
from sqlalchemy.exc import InterfaceError, OperationalError

from sport_scheduler.api.routes import router, limiter as routes_limiter
from sport_scheduler.database import db
from sport_scheduler.database.init_defaults import init_defaults
from sport_scheduler.services.errors import SchedulerError, Unavailable

# Set up logging
# Allow log level to be configured via environment variable (default: INFO)
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
numeric_level = getattr(logging, log_level, logging.INFO)
logging.basicConfig(
    level=numeric_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown events."""
    # Startup
    logger.info("Starting up Sport Scheduler API...")

    # Fallback for tables that might not be in migrations yet
    try:
        await db.init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        # Don't raise - requests will get 503 until the database is reachable

    try:
        await init_defaults()
        logger.info("Default values initialized")
    except Exception as e:
        logger.error(f"Failed to initialize defaults: {e}", exc_info=True)

    yield  # App is running

    # Shutdown
    logger.info("Shutting down Sport Scheduler API...")
    try:
        await db.engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database connections: {e}", exc_info=True)


app = FastAPI(
    title="Sport Scheduler API",
    description="API for scheduling and joining recreational sport sessions",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup rate limiter
app.state.limiter = routes_limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def database_unavailable_handler(request: Request, exc: Exception):
    """Map persistence-layer faults to 503 instead of leaking driver errors."""
    logger.error(f"Database unavailable during {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=Unavailable.status_code, content={"detail": str(Unavailable())})


async def scheduler_error_handler(request: Request, exc: SchedulerError):
    """Rejected requests become {"detail": message} with the error's status code."""
    logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


app.add_exception_handler(OperationalError, database_unavailable_handler)
app.add_exception_handler(InterfaceError, database_unavailable_handler)
app.add_exception_handler(ConnectionError, database_unavailable_handler)
app.add_exception_handler(SchedulerError, scheduler_error_handler)

# Add CORS middleware - origins configured via ALLOWED_ORIGINS env var
allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)


@app.get("/")
async def root():
    """API root endpoint - frontend is served separately."""
    return {"message": "Sport Scheduler API is running", "docs": "/docs"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "3004")))
