import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.core.logging import setup_logging
from app.core.exceptions import api_exception_handler, general_exception_handler, APIError
from app.core.middleware import request_logging_middleware
from app.core.dependencies import get_connectivity, dispatcher, reset_dependencies
from app.database import DatabasePool
from app.services.connectivity import HttpConnectivityProbe

# Initialize logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown"""
    # Startup: poll connectivity if a probe is configured
    from app.tasks.connectivity_monitor import run_connectivity_loop

    monitor_task = None
    connectivity = get_connectivity()
    if isinstance(connectivity, HttpConnectivityProbe):
        monitor_task = asyncio.create_task(
            run_connectivity_loop(connectivity, settings.connectivity_probe_interval)
        )

    yield

    # Shutdown: stop the monitor, flush notifications, release the pool
    if monitor_task:
        monitor_task.cancel()
        try:
            await monitor_task
        except asyncio.CancelledError:
            pass

    await dispatcher.drain()
    reset_dependencies()
    await DatabasePool.close_pool()


app = FastAPI(
    title="Wichty Check-In API",
    description="Check-in de tickets en la entrada, con modo offline",
    version="1.0.0",
    debug=settings.debug,
    docs_url="/docs",
    lifespan=lifespan
)

# Exception handlers
app.add_exception_handler(APIError, api_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.middleware("http")(request_logging_middleware)

# Import and include routers
from app.routers import offline_checkin, checkin

# Offline check-in (snapshot, local check-in, sync)
app.include_router(offline_checkin.router, prefix="/offline", tags=["offline"])

# Online check-in at the entrance
app.include_router(checkin.router, prefix="/checkin", tags=["checkin"])

@app.get("/")
async def root():
    return {
        "service": "Wichty Check-In API",
        "version": "1.0.0",
        "environment": settings.environment
    }

@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "online": get_connectivity().is_online,
        "database": settings.db_name
    }

# Auto-start server if run directly
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
