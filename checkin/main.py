# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Guest Check-in Service
======================
Visitors register with email + 4-digit PIN, log in, and check in with a
reason for their visit. Staff read analytics, visitor listings and a CSV
export through a password-gated admin API.

The backing store is either a relational database or a Google Sheet
(``STORE_BACKEND``); both sit behind the same repository contract.

Run:  uvicorn checkin.main:app --port 8000
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from checkin import __version__
from checkin.controllers import admin_controller, checkin_controller, system_controller, visitor_controller
from checkin.core.config import settings
from checkin.core.dependencies import Container, build_repository
from checkin.core.errors import (
    AuthenticationError, CheckinError, ConflictError, NotFoundError, StoreError, ValidationError,
)
from checkin.core.logging import get_logger
from checkin.middleware import MetricsMiddleware, RequestIDMiddleware
from checkin.repositories.base import VisitorRepository

logger = get_logger("checkin-service")

STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (StoreError, 500),
)


# Visitor-facing writes report every business failure as 400.
VISITOR_WRITE_ROUTES = frozenset({
    "/api/v1/register",
    "/api/v1/checkin",
    "/api/v1/pin-checkin",
    "/api/v1/profile/update",
})


def _status_for(exc: CheckinError, route_path: str = "") -> int:
    if route_path in VISITOR_WRITE_ROUTES and isinstance(exc, (ConflictError, NotFoundError)):
        return 400
    for exc_type, status in STATUS_BY_ERROR:
        if isinstance(exc, exc_type):
            return status
    return 400


def _error_body(exc: CheckinError) -> dict:
    body = {"error": exc.message}
    if isinstance(exc, ValidationError):
        body["field"] = exc.field
    if isinstance(exc, AuthenticationError):
        body["reason"] = exc.reason
    return body


@asynccontextmanager
async def lifespan(application: FastAPI):
    if getattr(application.state, "container", None) is None:
        repo = build_repository()
        application.state.container = Container.build(repo)
        logger.info("Store ready backend=%s", settings.STORE_BACKEND)
    yield
    application.state.container.repo.dispose()
    logger.info("Shutting down, store handle disposed")


def create_app(repo: Optional[VisitorRepository] = None,
               container: Optional[Container] = None) -> FastAPI:
    application = FastAPI(
        title="Guest Check-in Service",
        description="Visitor registration, check-in and admin analytics.",
        version=__version__,
        lifespan=lifespan,
    )
    if container is None and repo is not None:
        container = Container.build(repo)
    application.state.container = container

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(MetricsMiddleware)
    application.add_middleware(RequestIDMiddleware)

    @application.exception_handler(CheckinError)
    async def checkin_error_handler(request: Request, exc: CheckinError):
        route = request.scope.get("route")
        status = _status_for(exc, getattr(route, "path", request.url.path))
        if status >= 500:
            # The cause was already logged where it was caught.
            logger.error("Store failure on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=status, content=_error_body(exc))

    @application.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = [str(p) for p in first.get("loc", ()) if p != "body"]
        return JSONResponse(
            status_code=400,
            content={"error": first.get("msg", "Invalid request"), "field": ".".join(loc) or None},
        )

    @application.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse(status_code=500, content={"error": "internal_server_error"})

    application.include_router(system_controller.router)
    application.include_router(visitor_controller.router)
    application.include_router(checkin_controller.router)
    application.include_router(admin_controller.router)
    return application


app = create_app()
