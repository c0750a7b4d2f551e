# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Dependency wiring.

The repository is built once by :func:`build_repository` when the app is
created, then every service is constructed around it and parked on
``app.state``. Handlers reach them through the ``get_*`` dependencies below.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, Request

from checkin.core.config import settings
from checkin.core.database import create_sql_engine
from checkin.core.security import verify_admin_password
from checkin.metrics import LOOKUPS_RATE_LIMITED
from checkin.repositories.base import VisitorRepository
from checkin.repositories.sheet_repository import SheetVisitorRepository
from checkin.repositories.sql_repository import SQLVisitorRepository
from checkin.services.analytics_service import AnalyticsService
from checkin.services.checkin_service import CheckInService
from checkin.services.export_service import ExportService
from checkin.services.rate_limiter import SlidingWindowRateLimiter
from checkin.services.visitor_service import VisitorService


def build_repository(backend: Optional[str] = None) -> VisitorRepository:
    backend = (backend or settings.STORE_BACKEND).lower()
    if backend == "sql":
        repo = SQLVisitorRepository(create_sql_engine())
        repo.create_schema()
        return repo
    if backend == "sheets":
        return SheetVisitorRepository.from_service_account(
            settings.GOOGLE_SERVICE_ACCOUNT_FILE, settings.GOOGLE_SPREADSHEET_ID,
        )
    raise ValueError(f"Unknown STORE_BACKEND '{backend}' (expected 'sql' or 'sheets')")


@dataclass
class Container:
    repo: VisitorRepository
    visitors: VisitorService
    checkins: CheckInService
    analytics: AnalyticsService
    exports: ExportService
    lookup_limiter: SlidingWindowRateLimiter

    @classmethod
    def build(cls, repo: VisitorRepository) -> "Container":
        visitors = VisitorService(repo)
        return cls(
            repo=repo,
            visitors=visitors,
            checkins=CheckInService(repo, visitors),
            analytics=AnalyticsService(repo),
            exports=ExportService(repo),
            lookup_limiter=SlidingWindowRateLimiter(
                settings.LOOKUP_RATE_LIMIT, settings.LOOKUP_RATE_WINDOW,
            ),
        )


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_repo(request: Request) -> VisitorRepository:
    return get_container(request).repo


def get_visitor_service(request: Request) -> VisitorService:
    return get_container(request).visitors


def get_checkin_service(request: Request) -> CheckInService:
    return get_container(request).checkins


def get_analytics_service(request: Request) -> AnalyticsService:
    return get_container(request).analytics


def get_export_service(request: Request) -> ExportService:
    return get_container(request).exports


def rate_limit_lookup(request: Request):
    limiter = get_container(request).lookup_limiter
    if not limiter.enabled:
        return
    client_ip = request.client.host if request.client else "unknown"
    allowed, _, retry_after = limiter.is_allowed(client_ip)
    if not allowed:
        LOOKUPS_RATE_LIMITED.labels(endpoint=request.url.path).inc()
        raise HTTPException(
            status_code=429,
            detail="Too many lookups. Please wait a moment and try again.",
            headers={"Retry-After": str(retry_after)},
        )


def require_admin(x_admin_password: Optional[str] = Header(default=None)):
    if not verify_admin_password(x_admin_password, settings.ADMIN_PASSWORD):
        raise HTTPException(status_code=401, detail="Invalid admin password")
