# app/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, all routers and the
background expiry sweep.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import (
    assignments, health, inoperative, inspections, notifications, operations, vacation, vehicles,
)
from app.database import create_tables
from app.config import settings
from app.exceptions import AppException, app_exception_handler, unhandled_exception_handler
from app.utils.logger import get_logger
import time
import asyncio

logger = get_logger(__name__)

app = FastAPI(
    title="Fleet Operations API",
    description="Vehicle availability, driver scheduling and vacation quotas.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the dashboard to call the API) ──────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Health check and docs stay open. Set API_KEY in .env; leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(health.router,        prefix="/api/v1", tags=["💚 Health"])
app.include_router(vehicles.router,      prefix="/api/v1", tags=["🚚 Vehicles"])
app.include_router(operations.router,    prefix="/api/v1", tags=["📋 Operations"])
app.include_router(vacation.router,      prefix="/api/v1", tags=["🏖️  Vacation"])
app.include_router(assignments.router,   prefix="/api/v1", tags=["🔁 Assignments"])
app.include_router(inoperative.router,   prefix="/api/v1", tags=["🔧 Inoperative"])
app.include_router(inspections.router,   prefix="/api/v1", tags=["🔍 Inspections"])
app.include_router(notifications.router, prefix="/api/v1", tags=["🔔 Notifications"])


# ── Startup ───────────────────────────────────────────────────────────────────
_background_tasks: set = set()


@app.on_event("startup")
async def startup():
    logger.info("🚀 Fleet Operations backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")

    if settings.SWEEP_ENABLED:
        from app.services.expiry_sweep import start_sweep_scheduler
        task = asyncio.create_task(start_sweep_scheduler(), name="expiry-sweep")
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        logger.info("🧹 Expiry sweep started")
    else:
        logger.warning("Expiry sweep disabled (SWEEP_ENABLED=false)")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Fleet Operations backend shutting down...")
    for task in _background_tasks:
        task.cancel()
