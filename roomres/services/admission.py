import logging
import uuid
from datetime import datetime
from typing import Iterable, List
from roomres.errors import BookingConflictError, InvalidIntervalError, NotFoundError, UnauthenticatedError
from roomres.models.reservation import Reservation, ReservationStatus
from roomres.models.room import Room
from roomres.repositories.reservations import ReservationRepository
from roomres.schemas.reservation import ReservationCreate
from roomres.services.locks import RoomLocks, admission_locks

logger = logging.getLogger(__name__)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open intervals [a_start, a_end) and [b_start, b_end) intersect."""
    return a_end > b_start and b_end > a_start


def find_conflicts(existing: Iterable[Reservation], start: datetime, end: datetime) -> List[Reservation]:
    """Confirmed reservations overlapping [start, end). Cancelled ones never conflict."""
    return [
        reservation
        for reservation in existing
        if reservation.status == ReservationStatus.CONFIRMED
        and overlaps(reservation.start, reservation.end, start, end)
    ]


def create_reservation(
    reservations: ReservationRepository,
    room: Room,
    request: ReservationCreate,
    requester,
    locks: RoomLocks = admission_locks,
) -> Reservation:
    """
    Admit a reservation request for ``room`` or reject it.

    The requester is the signed-in identity (``id`` and optional ``email``).
    Admissions for the same room are serialized and the overlap check and the
    insert happen under the same lock, so two concurrent requests for
    overlapping times cannot both be admitted. Room name, building and the
    requester's email are copied onto the reservation as they are now.
    A room deleted since the caller looked it up is reported as NotFoundError.
    """
    if request.end <= request.start:
        logger.error(f"Invalid interval: {request.start} to {request.end}")
        raise InvalidIntervalError()
    if requester is None:
        raise UnauthenticatedError()

    room_id = room.id
    with locks.for_room(room_id):
        room = reservations.current_room(room_id)
        if room is None:
            logger.error(f"Room deleted before admission: {room_id}")
            raise NotFoundError("Room not found")

        candidates = reservations.list_starting_before(room.id, request.end)
        conflicts = find_conflicts(candidates, request.start, request.end)
        if conflicts:
            logger.error(
                f"Overlapping reservation found for room_id: {room.id}, "
                f"time: {request.start} to {request.end}, conflicts: {[r.id for r in conflicts]}"
            )
            raise BookingConflictError()

        purpose = (request.purpose or "").strip() or None
        reservation = Reservation(
            id=uuid.uuid4().hex,
            room_id=room.id,
            user_id=requester.id,
            user_email=requester.email,
            room_name=room.name,
            building=room.building,
            start=request.start,
            end=request.end,
            purpose=purpose,
            photo_url=request.photo_url,
            status=ReservationStatus.CONFIRMED,
        )
        reservations.add(reservation, publish=False)

    reservations.publish(reservation)
    return reservation
