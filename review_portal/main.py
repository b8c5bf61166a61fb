"""FastAPI entrypoint for the Assignment Review Portal."""

import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session
from starlette.exceptions import HTTPException

from review_portal.config import settings
from review_portal.database import create_db_and_tables, engine
from review_portal.errors import PortalError
from review_portal.logging_config import generate_request_id, set_request_id, setup_logging
from review_portal.routers import admin as admin_router_module
from review_portal.routers import auth as auth_router_module
from review_portal.routers import department as department_router_module
from review_portal.routers import hod as hod_router_module
from review_portal.routers import professor as professor_router_module
from review_portal.routers import student as student_router_module
from review_portal.services.accounts import ensure_default_admin

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Tag the request with an id and log its outcome."""
    request_id = request.headers.get("X-Request-ID") or generate_request_id()
    set_request_id(request_id)
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000
    logger.info("HTTP %s %s - %s (%.2fms)", request.method, request.url.path, response.status_code, duration_ms)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Turn missing or malformed input into a short 400 message."""
    messages = []
    for error in exc.errors():
        field_path = error.get("loc", [])
        field_name = str(field_path[-1]) if field_path else "request"
        if error.get("type") == "missing":
            messages.append(f"{field_name.replace('_', ' ').capitalize()} is required.")
        else:
            messages.append(f"Invalid value for {field_name.replace('_', ' ')}.")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": " ".join(messages) or "Invalid request"},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Something went wrong"},
    )


# Routers
app.include_router(auth_router_module.router, prefix="/auth", tags=["auth"])
app.include_router(department_router_module.router, prefix="/department", tags=["department"])
app.include_router(admin_router_module.router, prefix="/admin", tags=["admin"])
app.include_router(student_router_module.router, prefix="/student", tags=["student"])
app.include_router(professor_router_module.router, prefix="/professor", tags=["professor"])
app.include_router(hod_router_module.router, prefix="/hod", tags=["hod"])


@app.get("/")
def home():
    return {"message": "Backend working"}


@app.on_event("startup")
def on_startup():
    """Initialize database schema and seed the default admin."""
    create_db_and_tables()
    with Session(engine) as session:
        ensure_default_admin(session, settings.DEFAULT_ADMIN_EMAIL, settings.DEFAULT_ADMIN_PASSWORD)
