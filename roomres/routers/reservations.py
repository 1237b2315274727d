from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, WebSocket, status
from sqlalchemy.orm import Session
from roomres.db import get_db
from roomres.errors import NotFoundError, ValidationError
from roomres.live import LiveQueryHub, get_hub
from roomres.repositories.reservations import ReservationRepository
from roomres.repositories.rooms import RoomRepository
from roomres.routers.streaming import stream_snapshots
from roomres.schemas.reservation import PhotoAttach, ReservationCreate, ReservationResponse
from roomres.services.admission import create_reservation
from roomres.utils.auth import Identity, get_current_identity, require_identity
from roomres.utils.timeutils import reservation_window, to_utc_naive, utcnow
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/rooms/{room_id}/reservations",
    tags=["reservations"],
)


def get_reservation_repository(
    db: Session = Depends(get_db), hub: LiveQueryHub = Depends(get_hub)
) -> ReservationRepository:
    return ReservationRepository(db, hub)


def serialize_reservations(reservations):
    return [
        ReservationResponse.model_validate(reservation).model_dump(mode="json")
        for reservation in reservations
    ]


def resolve_range(start: Optional[datetime], end: Optional[datetime]):
    """Fill in the default calendar window for whichever bound is missing."""
    window_start, window_end = reservation_window(utcnow())
    range_start = to_utc_naive(start) if start else window_start
    range_end = to_utc_naive(end) if end else window_end
    if range_end <= range_start:
        raise ValidationError("Range end must be after range start.")
    return range_start, range_end


@router.get(
    "/",
    response_model=List[ReservationResponse],
    summary="List reservations of a room",
    description="Reservations starting in [start, end), ordered by start. Defaults to the next 7 days.",
)
def list_reservations(
    room_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    reservations: ReservationRepository = Depends(get_reservation_repository),
):
    """
    List the reservations of a room, confirmed and cancelled.

    - **start**: (Optional) Range start, defaults to the start of today.
    - **end**: (Optional) Range end, defaults to the end of the 7th day out.
    """
    range_start, range_end = resolve_range(start, end)
    return reservations.list_in_range(room_id, range_start, range_end)


@router.post(
    "/",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Reserve a room",
    description="Create a reservation unless it overlaps a confirmed one. Requires authentication.",
)
def reserve_room(
    room_id: str,
    request: ReservationCreate,
    db: Session = Depends(get_db),
    hub: LiveQueryHub = Depends(get_hub),
    current_identity: Optional[Identity] = Depends(get_current_identity),
):
    """
    Reserve a room for a time interval.

    - **start**: Start of the reservation.
    - **end**: End of the reservation, strictly after start.
    - **purpose**: (Optional) Purpose of the reservation.
    - **photo_url**: (Optional) URL of an already uploaded room condition photo.

    Returns the created reservation. Overlapping a confirmed reservation
    answers 409.
    """
    room = RoomRepository(db, hub).get_by_id(room_id)
    if not room:
        logger.error(f"Room not found: {room_id}")
        raise NotFoundError("Room not found")
    return create_reservation(
        ReservationRepository(db, hub), room, request, current_identity
    )


@router.websocket("/live")
async def reservations_live(
    websocket: WebSocket,
    room_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    reservations: ReservationRepository = Depends(get_reservation_repository),
):
    """
    Stream the room's reservations in the window on connect and after every change.
    An inverted range closes the connection with a policy violation.
    """
    try:
        range_start, range_end = resolve_range(start, end)
    except ValidationError as exc:
        logger.error(f"Rejected live range for room_id: {room_id}: {exc.message}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    def subscribe(on_change, on_error):
        return reservations.subscribe_in_range(
            room_id, range_start, range_end, on_change, on_error
        )

    await stream_snapshots(websocket, subscribe, serialize_reservations)


@router.post(
    "/{reservation_id}/cancel",
    response_model=ReservationResponse,
    summary="Cancel a reservation",
    description="Mark a reservation cancelled; it stays in the history. Requires authentication.",
)
def cancel_reservation(
    room_id: str,
    reservation_id: str,
    reservations: ReservationRepository = Depends(get_reservation_repository),
    current_identity: Identity = Depends(require_identity),
):
    """
    Cancel a reservation. Cancelling twice answers 409.
    """
    logger.debug(f"Cancelling reservation {reservation_id} for user: {current_identity.id}")
    return reservations.cancel(room_id, reservation_id)


@router.put(
    "/{reservation_id}/photo",
    response_model=ReservationResponse,
    summary="Attach a photo",
    description="Store the URL of an uploaded photo on a reservation. Requires authentication.",
)
def attach_photo(
    room_id: str,
    reservation_id: str,
    photo: PhotoAttach,
    reservations: ReservationRepository = Depends(get_reservation_repository),
    current_identity: Identity = Depends(require_identity),
):
    return reservations.attach_photo(room_id, reservation_id, photo.photo_url)
