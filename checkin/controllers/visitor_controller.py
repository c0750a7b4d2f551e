# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: visitor registration, login, lookups, profile edits."""
from fastapi import APIRouter, Depends

from checkin.core.dependencies import get_visitor_service, rate_limit_lookup
from checkin.schemas import (
    EmailLookupRequest, EmailLookupResponse, LoginRequest, LoginResponse,
    PinLookupRequest, PinLookupResponse, ProfileUpdateRequest, RegisterRequest,
    RegisterResponse, UserOut,
)
from checkin.services.visitor_service import VisitorService

router = APIRouter(prefix="/api/v1", tags=["Visitors"])


@router.post("/register", response_model=RegisterResponse)
def register(body: RegisterRequest,
             service: VisitorService = Depends(get_visitor_service)):
    user_id = service.register(
        email=body.email, name=body.name, pin=body.pin,
        disciplines=body.disciplines, workplace=body.workplace or "",
        preferred_name=body.preferred_name or "",
    )
    return RegisterResponse(user_id=user_id)


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest,
          service: VisitorService = Depends(get_visitor_service)):
    return LoginResponse(user=UserOut(**service.authenticate(body.email, body.pin)))


@router.post("/lookup", response_model=EmailLookupResponse,
             dependencies=[Depends(rate_limit_lookup)])
def lookup_by_email(body: EmailLookupRequest,
                    service: VisitorService = Depends(get_visitor_service)):
    return service.lookup_by_email(body.email)


@router.post("/lookup-by-pin", response_model=PinLookupResponse,
             dependencies=[Depends(rate_limit_lookup)])
def lookup_by_pin(body: PinLookupRequest,
                  service: VisitorService = Depends(get_visitor_service)):
    return service.lookup_by_pin(body.pin)


@router.post("/profile/update", response_model=UserOut)
def update_profile(body: ProfileUpdateRequest,
                   service: VisitorService = Depends(get_visitor_service)):
    return service.update_profile(
        body.user_id, name=body.name, disciplines=body.disciplines,
        workplace=body.workplace or "", preferred_name=body.preferred_name,
        pin=body.pin,
    )
