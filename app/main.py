# app/main.py
"""
FastAPI application entry point.
Includes request logging, domain and global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import bookings, vehicles, profile, health
from app.database import create_tables
from app.config import settings
from app.services.exceptions import BookingServiceError
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Fleet Booking API",
    description="Corporate vehicle booking calendar — conflict-checked reservations and approvals.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (calendar front-end is served from another origin) ────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.APP_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Booking Domain Errors ────────────────────────────────────────────────────
@app.exception_handler(BookingServiceError)
async def booking_error_handler(request: Request, exc: BookingServiceError):
    logger.info(f"{request.method} {request.url.path} refused ({exc.status_code}): {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(bookings.router, prefix="/api/v1", tags=["Bookings"])
app.include_router(vehicles.router, prefix="/api/v1", tags=["Vehicles"])
app.include_router(profile.router,  prefix="/api/v1", tags=["Profile"])
app.include_router(health.router,   prefix="/api/v1", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("Fleet Booking backend starting up...")
    create_tables()
    logger.info("Database tables ready")
    if not settings.TEAMS_WEBHOOK_URL:
        logger.info("TEAMS_WEBHOOK_URL not set — booking notifications will be logged only")
    logger.info(f"Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Fleet Booking backend shutting down...")
