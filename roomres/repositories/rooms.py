import logging
import math
import uuid
from typing import Callable, Iterable, List, Optional
from sqlalchemy.orm import Session
from roomres.db import store_operation
from roomres.errors import NotFoundError, ValidationError
from roomres.live import LiveQueryHub
from roomres.models.reservation import Reservation
from roomres.models.room import Room
from roomres.schemas.room import RoomCreate, RoomUpdate
from roomres.services.locks import RoomLocks, admission_locks

logger = logging.getLogger(__name__)

ROOMS_TOPIC = "rooms"

# Marks a field that should be left out of the write
_DROP = object()

_STRING_FIELDS = ("name", "building", "floor", "description", "image_url")


def room_topic(room_id: str) -> str:
    return f"room:{room_id}"


def user_topic(user_id: str) -> str:
    return f"user:{user_id}"


def _normalize_string(value):
    if value is None:
        return None
    trimmed = str(value).strip()
    return trimmed or None


def _normalize_capacity(value, partial):
    fallback = _DROP if partial else 0
    if value is None or isinstance(value, bool):
        return fallback
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return fallback
    if math.isnan(numeric) or math.isinf(numeric) or numeric < 0:
        return fallback
    return math.floor(numeric)


def _normalize_opening_hours(value):
    if not value:
        return None
    start = _normalize_string(value.get("start"))
    end = _normalize_string(value.get("end"))
    if start is None or end is None:
        return None
    return {"start": start, "end": end}


def _normalize_location(value):
    if not value:
        return None
    return {
        "lat": float(value["lat"]),
        "lng": float(value["lng"]),
        "label": _normalize_string(value.get("label")),
    }


def normalize_room_input(data: dict, partial: bool = False) -> dict:
    """
    Turn room input into column values.

    With ``partial`` only the keys present in ``data`` are returned: a blank
    string or ``None`` clears the field, while an unusable capacity or
    amenities value is dropped so the stored value stays as it is. Without
    ``partial`` every column gets a value, falling back to its empty default.
    """
    values = {}
    for field in _STRING_FIELDS:
        if field in data or not partial:
            values[field] = _normalize_string(data.get(field))

    if "capacity" in data or not partial:
        capacity = _normalize_capacity(data.get("capacity"), partial)
        if capacity is not _DROP:
            values["capacity"] = capacity

    amenities = data.get("amenities")
    if isinstance(amenities, (list, tuple)):
        values["amenities"] = [
            item.strip() for item in amenities if isinstance(item, str) and item.strip()
        ]
    elif not partial:
        values["amenities"] = []

    if "opening_hours" in data or not partial:
        values["opening_hours"] = _normalize_opening_hours(data.get("opening_hours"))
    if "location" in data or not partial:
        values["location"] = _normalize_location(data.get("location"))
    return values


def _list_rooms(db: Session) -> List[Room]:
    return db.query(Room).order_by(Room.name.asc(), Room.id.asc()).all()


class RoomRepository:
    """Room metadata in the store, plus a live view of the room list."""

    def __init__(self, db: Session, hub: LiveQueryHub, locks: RoomLocks = admission_locks):
        self.db = db
        self.hub = hub
        self.locks = locks

    @store_operation
    def create(self, room_in: RoomCreate, room_id: Optional[str] = None) -> str:
        """
        Create a room and return its id. A caller-supplied id that already
        exists has its metadata replaced; its reservations are kept.
        """
        values = normalize_room_input(room_in.model_dump(exclude={"id"}))
        if values["name"] is None or values["building"] is None:
            logger.error("Rejected room without name or building")
            raise ValidationError("Room name and building are required.")

        room_id = _normalize_string(room_id) or uuid.uuid4().hex
        room = self.db.get(Room, room_id)
        if room is None:
            room = Room(id=room_id, **values)
            self.db.add(room)
        else:
            logger.debug(f"Replacing metadata of existing room: {room_id}")
            for key, value in values.items():
                setattr(room, key, value)
        self.db.commit()
        logger.debug(f"Created room: {room_id}")
        self.hub.notify(ROOMS_TOPIC)
        return room_id

    @store_operation
    def update(self, room_id: str, room_update: RoomUpdate) -> None:
        room = self.db.get(Room, room_id)
        if room is None:
            logger.error(f"Room not found: {room_id}")
            raise NotFoundError("Room not found")

        values = normalize_room_input(
            room_update.model_dump(exclude_unset=True), partial=True
        )
        for required in ("name", "building"):
            if required in values and values[required] is None:
                raise ValidationError("Room name and building are required.")

        for key, value in values.items():
            setattr(room, key, value)
        self.db.commit()
        logger.debug(f"Updated room: {room_id}, fields: {sorted(values)}")
        self.hub.notify(ROOMS_TOPIC)

    @store_operation
    def delete(self, room_id: str) -> None:
        """
        Delete a room together with all of its reservations, atomically.
        Holds the room's admission lock so no reservation is admitted mid-delete.
        """
        with self.locks.for_room(room_id):
            room = self.db.get(Room, room_id)
            if room is None:
                logger.error(f"Room not found: {room_id}")
                raise NotFoundError("Room not found")

            user_ids = {
                user_id
                for (user_id,) in self.db.query(Reservation.user_id)
                .filter(Reservation.room_id == room_id)
                .distinct()
            }
            self.db.delete(room)
            self.db.commit()
        logger.debug(f"Deleted room: {room_id} with reservations of {len(user_ids)} users")
        self.hub.notify(
            ROOMS_TOPIC, room_topic(room_id), *(user_topic(u) for u in user_ids)
        )

    @store_operation
    def get_by_id(self, room_id: str) -> Optional[Room]:
        return self.db.get(Room, room_id)

    @store_operation
    def list_all(self) -> List[Room]:
        rooms = _list_rooms(self.db)
        logger.debug(f"Retrieved {len(rooms)} rooms")
        return rooms

    def subscribe(
        self, on_change: Callable, on_error: Optional[Callable] = None
    ) -> Callable[[], None]:
        """Deliver the full name-ordered room list now and after every change."""
        return self.hub.subscribe([ROOMS_TOPIC], _list_rooms, on_change, on_error)

    def seed(self, samples: Iterable[dict]) -> List[str]:
        """Create each sample room under its own fixed id."""
        return [self.create(RoomCreate(**sample), sample["id"]) for sample in samples]
