from pydantic import BaseModel, ConfigDict
from typing import List, Optional, Union

# Capacity arrives from free-form admin input; the repository coerces it
CapacityInput = Union[int, float, str, None]


class OpeningHours(BaseModel):
    start: str
    end: str


class Location(BaseModel):
    lat: float
    lng: float
    label: Optional[str] = None


class RoomBase(BaseModel):
    name: str
    building: str
    floor: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    opening_hours: Optional[OpeningHours] = None
    location: Optional[Location] = None


class RoomCreate(RoomBase):
    id: Optional[str] = None
    capacity: CapacityInput = None
    amenities: Optional[List[str]] = None


class RoomUpdate(BaseModel):
    name: Optional[str] = None
    building: Optional[str] = None
    floor: Optional[str] = None
    capacity: CapacityInput = None
    amenities: Optional[List[str]] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    opening_hours: Optional[OpeningHours] = None
    location: Optional[Location] = None


class RoomResponse(RoomBase):
    id: str
    capacity: int
    amenities: List[str]

    model_config = ConfigDict(from_attributes=True)
