from datetime import datetime
from pydantic import BaseModel, ConfigDict, computed_field, field_validator
from typing import List, Optional
from roomres.models.reservation import ReservationStatus
from roomres.utils.timeutils import to_utc_naive
from roomres.utils.views import format_range


class ReservationCreate(BaseModel):
    start: datetime
    end: datetime
    purpose: Optional[str] = None
    photo_url: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def normalize_instant(cls, value):
        return to_utc_naive(value)


class PhotoAttach(BaseModel):
    photo_url: str


class ReservationResponse(BaseModel):
    id: str
    room_id: str
    user_id: str
    user_email: Optional[str] = None
    room_name: Optional[str] = None
    building: Optional[str] = None
    start: datetime
    end: datetime
    purpose: Optional[str] = None
    photo_url: Optional[str] = None
    status: ReservationStatus
    created_at: datetime
    cancelled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def time_range(self) -> str:
        return format_range(self.start, self.end)


class UserReservationsResponse(BaseModel):
    upcoming: List[ReservationResponse]
    past: List[ReservationResponse]
