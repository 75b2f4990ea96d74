import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from portal.api.routes import appointments, auth, notifications, slots
from portal.core.config import _ENV_FILE, settings
from portal.core.db import init_db
from portal.core.errors import STORAGE_FAILURE, InvalidArgument, PortalError

if os.getenv("ENV") != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    logger.info("Slot labels: %s", ", ".join(settings.slot_labels_list))
    if settings.auto_create_tables:
        await init_db()
        logger.info("Tables created (AUTO_CREATE_TABLES)")
    if not settings.email_enabled:
        logger.warning("SMTP not configured: booking e-mails are disabled")
    yield


app = FastAPI(
    title="Cabinet Portal API",
    description="Client portal backend: accounts, slots, appointments, notifications",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Refresh-Token"],
)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(slots.router, prefix="/api/v1")
app.include_router(appointments.router, prefix="/api/v1")
app.include_router(notifications.router, prefix="/api/v1")


def _cors_headers(origin: str | None) -> dict[str, str]:
    """Add CORS headers to error responses so the browser doesn't block them."""
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Authorization, Content-Type, X-Refresh-Token",
    }
    if origin and origin in settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = origin
    elif settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = settings.cors_origins_list[0]
    return headers


def _error(request: Request, status_code: int, kind: str, detail: str, headers: dict | None = None) -> JSONResponse:
    all_headers = _cors_headers(request.headers.get("origin"))
    if headers:
        all_headers.update(headers)
    return JSONResponse(status_code=status_code, content={"kind": kind, "detail": detail}, headers=all_headers)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.kind, exc.detail)
    return _error(request, exc.status_code, exc.kind, exc.detail)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return _error(request, InvalidArgument.status_code, InvalidArgument.kind, detail)


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Storage failure: %s", exc)
    return _error(request, 503, STORAGE_FAILURE, f"{type(exc).__name__}: storage unavailable")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    kind = {401: "Unauthorized", 403: "Forbidden", 404: "NotFound", 409: "Conflict"}.get(exc.status_code, "HTTPError")
    return _error(request, exc.status_code, kind, str(exc.detail), headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return actual error in JSON; include CORS so 500 responses are not blocked by browser."""
    logger.exception("Unhandled exception: %s", exc)
    return _error(request, 500, "InternalError", f"{type(exc).__name__}: {exc}")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
