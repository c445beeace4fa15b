"""TrojanTrap: file-threat screening service.

FastAPI entry point with lifespan management, CORS and the health endpoints.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.router import api_router
from .dependencies import (
    get_app_config,
    get_hash_store,
    get_payment_gate,
    get_scan_lifecycle,
    resolve_path,
)
from .middleware.error_handler import register_error_handlers
from .middleware.request_id import RequestIDMiddleware
from .utils.logging import get_logger, setup_logging

config = get_app_config()
setup_logging(
    debug=config.debug,
    log_dir=str(resolve_path(config.log_dir)),
    log_max_bytes=config.log_max_bytes,
    log_backup_count=config.log_backup_count,
    app_name=config.app_name,
)
logger = get_logger("trojantrap.main")


async def _report_purge_loop(interval: float) -> None:
    """Drop expired reports periodically (only runs when a TTL is configured)."""
    lifecycle = get_scan_lifecycle()
    while True:
        await asyncio.sleep(interval)
        lifecycle.purge_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the hash feed and build the singletons before serving requests."""
    cfg = get_app_config()
    resolve_path(cfg.upload_dir).mkdir(parents=True, exist_ok=True)

    store = get_hash_store()
    gate = get_payment_gate()
    get_scan_lifecycle()
    logger.info(
        "trojantrap_started",
        version=__version__,
        malware_database_size=store.size,
        hash_source=store.source,
        payment_gate=gate.name,
    )

    purge_task = None
    if cfg.report_ttl_seconds > 0:
        purge_task = asyncio.create_task(_report_purge_loop(max(cfg.report_ttl_seconds / 2, 1.0)))

    yield

    if purge_task is not None:
        purge_task.cancel()
        try:
            await purge_task
        except asyncio.CancelledError:
            pass
    logger.info("trojantrap_stopped")


app = FastAPI(
    title=config.app_name,
    description="File-threat screening with hash intelligence and premium scans",
    version=__version__,
    lifespan=lifespan,
)

# Register standard error handlers
register_error_handlers(app)

# CORS: origins from config
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in config.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)

# Request ID (added LAST so it runs FIRST)
app.add_middleware(RequestIDMiddleware)

app.include_router(api_router)


@app.get("/health")
async def health():
    """Service status plus the loaded malware database size."""
    store = get_hash_store()
    lifecycle = get_scan_lifecycle()
    return {
        "status": "OK",
        "message": f"{config.app_name} backend is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "malwareDatabaseSize": store.size,
        "hashSource": store.source,
        "pendingScans": lifecycle.pending_count,
        "completedReports": lifecycle.completed_count,
    }


@app.get("/test")
async def connectivity_test():
    """Connectivity check for the web client."""
    return {
        "message": "Backend is working!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def main():
    """Run the TrojanTrap server."""
    uvicorn.run(
        "trojantrap.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )


if __name__ == "__main__":
    main()
