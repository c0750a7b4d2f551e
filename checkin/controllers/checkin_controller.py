# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: recording visits."""
from fastapi import APIRouter, Depends

from checkin.core.dependencies import get_checkin_service
from checkin.schemas import CheckInRequest, PinCheckInRequest
from checkin.services.checkin_service import CheckInService

router = APIRouter(prefix="/api/v1", tags=["Check-in"])


@router.post("/checkin")
def check_in(body: CheckInRequest,
             service: CheckInService = Depends(get_checkin_service)):
    visit = service.check_in(body.user_id, body.reason)
    return {"success": True, "visit": visit}


@router.post("/pin-checkin")
def pin_check_in(body: PinCheckInRequest,
                 service: CheckInService = Depends(get_checkin_service)):
    visit = service.pin_check_in(
        pin=body.pin, name=body.name, email=body.email,
        disciplines=body.disciplines, reason=body.reason,
    )
    return {"success": True, "visit": visit}
