from typing import Optional
from fastapi import APIRouter, Depends, Query, WebSocket, status
from jose import JWTError
from roomres.repositories.reservations import ReservationRepository
from roomres.routers.reservations import get_reservation_repository, serialize_reservations
from roomres.routers.streaming import stream_snapshots
from roomres.schemas.reservation import UserReservationsResponse
from roomres.utils.auth import Identity, decode_identity, require_identity
from roomres.utils.timeutils import utcnow
from roomres.utils.views import partition_user_reservations


router = APIRouter(
    prefix="/me",
    tags=["me"],
)


@router.get("/reservations", response_model=UserReservationsResponse)
def my_reservations(
    reservations: ReservationRepository = Depends(get_reservation_repository),
    current_identity: Identity = Depends(require_identity),
):
    """
    Reservations of the signed-in user across all rooms, split into upcoming
    (confirmed and not yet ended) and past (ended or cancelled).
    Requires authentication.
    """
    mine = reservations.list_for_user(current_identity.id)
    return partition_user_reservations(mine, utcnow())._asdict()


@router.websocket("/reservations/live")
async def my_reservations_live(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    reservations: ReservationRepository = Depends(get_reservation_repository),
):
    """
    Stream the signed-in user's reservations on connect and after every change.
    Browsers cannot set headers on WebSockets, so the token comes as a query parameter.
    """
    try:
        identity = decode_identity(token) if token else None
    except JWTError:
        identity = None
    if identity is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    def subscribe(on_change, on_error):
        return reservations.subscribe_for_user(identity.id, on_change, on_error)

    await stream_snapshots(websocket, subscribe, serialize_reservations)
