# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: password-gated admin dashboard — analytics, listings, CSV export."""
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from starlette.responses import Response

from checkin.core.dependencies import (
    get_analytics_service, get_export_service, require_admin,
)
from checkin.schemas import AnalyticsOut, PaginatedUsers, VisitOut
from checkin.services.analytics_service import AnalyticsService
from checkin.services.export_service import ExportService

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"],
                   dependencies=[Depends(require_admin)])


@router.get("/analytics", response_model=AnalyticsOut)
def get_analytics(service: AnalyticsService = Depends(get_analytics_service)):
    return service.get_analytics()


@router.get("/users", response_model=PaginatedUsers)
def list_users(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=50, ge=1, le=200),
    sort: str = Query(default="updated_at"),
    order: str = Query(default="desc"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    total, users = service.list_users(page, per_page, sort, order)
    return PaginatedUsers(total=total, page=page, per_page=per_page, users=users)


@router.get("/users/{user_id}/visits", response_model=List[VisitOut])
def get_user_visits(user_id: str,
                    service: AnalyticsService = Depends(get_analytics_service)):
    return service.get_user_visits(user_id)


@router.get("/export")
def export_csv(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    discipline: Optional[str] = None,
    search: Optional[str] = None,
    service: ExportService = Depends(get_export_service),
):
    csv_text = service.export_csv(
        start_date=start_date, end_date=end_date,
        discipline=discipline, search_term=search,
    )
    filename = f"checkins-{datetime.now(timezone.utc):%Y-%m-%d}.csv"
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
