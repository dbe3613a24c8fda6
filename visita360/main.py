"""
Visita360 — Field sales visit tracker
App assembly: lifespan, middleware, error handlers, router mounts.
All routes live in routers/; all logic lives in services/.
"""

import os
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import settings
from .context import AppContext
from .database import SessionLocal, create_tables
from .http_client import close_clients
from .logging_config import setup_logging
from .schemas.errors import ErrorResponse


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    testing = bool(os.environ.get("TESTING"))

    if not testing:
        create_tables()
        logger.info("Tables ready")

    ctx = AppContext(settings, SessionLocal)
    app.state.context = ctx

    scheduler = None
    if not testing:
        db = SessionLocal()
        try:
            ctx.refresh_notifications(db)
        finally:
            db.close()

        if settings.scheduler_enabled:
            from .scheduler import configure_scheduler, scheduler

            configure_scheduler(ctx)
            scheduler.start()
            logger.info("Scheduler started")

    yield

    if scheduler is not None:
        scheduler.shutdown(wait=False)
    ctx.close()
    await close_clients()
    logger.info("Shutdown complete")


app = FastAPI(title="Visita360", version=__version__, lifespan=lifespan)


# ── Middleware ───────────────────────────────────────────────────────


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
    request.state.request_id = request_id
    start = time.perf_counter()
    with logger.contextualize(request_id=request_id):
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        if request.url.path != "/health":
            logger.info(
                "{method} {path} -> {status} ({ms:.0f}ms)",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                ms=elapsed_ms,
            )
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


# ── Error handlers ───────────────────────────────────────────────────


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "") or request.headers.get("x-request-id", "")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    body = ErrorResponse(
        error=str(exc.detail),
        status_code=exc.status_code,
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in exc.errors()
    ]
    body = ErrorResponse(
        error="Validation error",
        status_code=422,
        request_id=_request_id(request),
        detail=errors,
    )
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on {path}", path=request.url.path)
    body = ErrorResponse(
        error="Internal server error",
        status_code=500,
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=500, content=body.model_dump())


# ── Routers ──────────────────────────────────────────────────────────

from .routers.app_config import router as config_router  # noqa: E402
from .routers.dashboard import router as dashboard_router  # noqa: E402
from .routers.followups import router as followups_router  # noqa: E402
from .routers.geocode import router as geocode_router  # noqa: E402
from .routers.notifications import router as notifications_router  # noqa: E402
from .routers.visits import router as visits_router  # noqa: E402

app.include_router(visits_router)
app.include_router(followups_router)
app.include_router(notifications_router)
app.include_router(geocode_router)
app.include_router(config_router)
app.include_router(dashboard_router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}
