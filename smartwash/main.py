# smartwash/main.py
"""
FastAPI application entry point.
Includes security middleware, domain error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from smartwash.routers import auth, workflow, vehicles, transactions, sync, services, users, dashboard, health
from smartwash.context import build_context
from smartwash.config import settings
from smartwash.exceptions import (
    AuthenticationError, DuplicateKeyError, InvalidTransitionError, NotFoundError,
    PermissionDeniedError, PersistenceError, SyncError, SyncInProgressError, WorkflowValidationError,
)
from smartwash.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="SmartWash POS API",
    description="Car-wash point of sale: vehicle workflow, receipts, offline sync, admin dashboard.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (attendant tablets and admin dashboard call the API directly) ──────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to the dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional device-level API key on top of user sign-in.
    Health check and docs stay open. Set API_KEY in .env; leave empty to disable.
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


# ── Domain Exception Handlers ────────────────────────────────────────────────
@app.exception_handler(WorkflowValidationError)
async def validation_error_handler(request: Request, exc: WorkflowValidationError):
    return JSONResponse(status_code=422,
                        content={"detail": str(exc), "field": exc.field})


@app.exception_handler(InvalidTransitionError)
async def transition_error_handler(request: Request, exc: InvalidTransitionError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT,
                        content={"detail": str(exc), "state": exc.state})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(DuplicateKeyError)
async def duplicate_handler(request: Request, exc: DuplicateKeyError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(PermissionDeniedError)
async def permission_handler(request: Request, exc: PermissionDeniedError):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})


@app.exception_handler(AuthenticationError)
async def auth_error_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": str(exc)})


@app.exception_handler(SyncInProgressError)
async def sync_busy_handler(request: Request, exc: SyncInProgressError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(SyncError)
async def sync_error_handler(request: Request, exc: SyncError):
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY,
                        content={"detail": str(exc), "delivered": exc.delivered, "remaining": exc.remaining})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(auth.router,         prefix="/api/v1", tags=["Auth"])
app.include_router(workflow.router,     prefix="/api/v1", tags=["Workflow"])
app.include_router(vehicles.router,     prefix="/api/v1", tags=["Vehicles"])
app.include_router(transactions.router, prefix="/api/v1", tags=["Transactions"])
app.include_router(sync.router,         prefix="/api/v1", tags=["Offline Sync"])
app.include_router(services.router,     prefix="/api/v1", tags=["Service Catalog"])
app.include_router(users.router,        prefix="/api/v1", tags=["Users"])
app.include_router(dashboard.router,    prefix="/api/v1", tags=["Dashboard"])
app.include_router(health.router,       prefix="/api/v1", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("SmartWash backend starting up...")
    if getattr(app.state, "context", None) is None:
        app.state.context = build_context()
    app.state.context.init()
    ctx = app.state.context
    logger.info(f"Backing store online: {ctx.connectivity.is_online()}")
    logger.info(f"Offline transactions waiting: {len(ctx.queue)}")
    logger.info(f"Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("SmartWash backend shutting down...")
    ctx = getattr(app.state, "context", None)
    if ctx is not None:
        ctx.close()
        app.state.context = None
