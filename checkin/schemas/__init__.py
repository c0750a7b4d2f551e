# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pydantic request/response schemas."""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

DISCIPLINES = (
    "Software",
    "Hardware",
    "Art",
    "Design",
    "Fashion",
    "AI/ML",
    "Photographer/Videographer",
    "Other",
)

USER_SORT_FIELDS = ("name", "email", "visit_count", "updated_at")


class RegisterRequest(BaseModel):
    email: str
    name: str
    preferred_name: Optional[str] = ""
    workplace: Optional[str] = ""
    pin: str
    disciplines: List[str] = Field(default_factory=list)


class LoginRequest(BaseModel):
    email: str
    pin: str


class EmailLookupRequest(BaseModel):
    email: str


class PinLookupRequest(BaseModel):
    pin: str


class CheckInRequest(BaseModel):
    user_id: str
    reason: str


class PinCheckInRequest(BaseModel):
    pin: str
    name: str
    email: str
    disciplines: List[str] = Field(default_factory=list)
    reason: str


class ProfileUpdateRequest(BaseModel):
    user_id: str
    name: str
    preferred_name: Optional[str] = None
    workplace: Optional[str] = ""
    disciplines: List[str] = Field(default_factory=list)
    pin: Optional[str] = None


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    preferred_name: str = ""
    workplace: str = ""
    disciplines: List[str]
    created_at: str
    updated_at: str


class VisitOut(BaseModel):
    id: str
    user_id: str
    timestamp: str
    reason: str
    disciplines_at_visit: List[str]


class ActivityOut(VisitOut):
    name: str
    email: str


class DisciplineCount(BaseModel):
    discipline: str
    count: int


class AnalyticsOut(BaseModel):
    today_count: int
    week_count: int
    month_count: int
    discipline_breakdown: List[DisciplineCount]
    recent_activity: List[ActivityOut]


class UserWithVisitCount(UserOut):
    visit_count: int


class PaginatedUsers(BaseModel):
    total: int
    page: int
    per_page: int
    users: List[UserWithVisitCount]


class RegisterResponse(BaseModel):
    success: bool = True
    user_id: str


class LoginResponse(BaseModel):
    success: bool = True
    user: UserOut


class EmailLookupResponse(BaseModel):
    exists: bool
    user: Optional[UserOut] = None
    last_visit: Optional[VisitOut] = None


class PinLookupResponse(BaseModel):
    exists: bool
    user: Optional[Dict[str, Any]] = None

