import logging
from datetime import datetime
from typing import Callable, List, Optional
from sqlalchemy.orm import Session
from roomres.db import store_operation
from roomres.errors import AlreadyCancelledError, NotFoundError, ValidationError
from roomres.live import LiveQueryHub
from roomres.models.reservation import Reservation, ReservationStatus
from roomres.models.room import Room
from roomres.repositories.rooms import room_topic, user_topic
from roomres.utils.timeutils import to_utc_naive, utcnow

logger = logging.getLogger(__name__)


def _in_range(db: Session, room_id: str, range_start: datetime, range_end: datetime):
    return (
        db.query(Reservation)
        .filter(
            Reservation.room_id == room_id,
            Reservation.start >= range_start,
            Reservation.start < range_end,
        )
        .order_by(Reservation.start.asc(), Reservation.created_at.asc())
        .all()
    )


def _for_user(db: Session, user_id: str):
    return (
        db.query(Reservation)
        .filter(Reservation.user_id == user_id)
        .order_by(Reservation.start.asc(), Reservation.created_at.asc())
        .all()
    )


class ReservationRepository:
    """
    Reservations of a room, and of a user across rooms.

    Every listing is bounded by a time range or a user. Reservations are
    never removed here: cancellation flips the status and keeps the record.
    """

    def __init__(self, db: Session, hub: LiveQueryHub):
        self.db = db
        self.hub = hub

    @store_operation
    def get(self, room_id: str, reservation_id: str) -> Optional[Reservation]:
        return (
            self.db.query(Reservation)
            .filter(Reservation.room_id == room_id, Reservation.id == reservation_id)
            .first()
        )

    @store_operation
    def list_in_range(
        self, room_id: str, range_start: datetime, range_end: datetime
    ) -> List[Reservation]:
        """Reservations of the room whose start lies in [range_start, range_end)."""
        reservations = _in_range(
            self.db, room_id, to_utc_naive(range_start), to_utc_naive(range_end)
        )
        logger.debug(f"Retrieved {len(reservations)} reservations for room_id: {room_id}")
        return reservations

    def subscribe_in_range(
        self,
        room_id: str,
        range_start: datetime,
        range_end: datetime,
        on_change: Callable,
        on_error: Optional[Callable] = None,
    ) -> Callable[[], None]:
        range_start, range_end = to_utc_naive(range_start), to_utc_naive(range_end)
        return self.hub.subscribe(
            [room_topic(room_id)],
            lambda db: _in_range(db, room_id, range_start, range_end),
            on_change,
            on_error,
        )

    @store_operation
    def list_for_user(self, user_id: str) -> List[Reservation]:
        reservations = _for_user(self.db, user_id)
        logger.debug(f"Retrieved {len(reservations)} reservations for user_id: {user_id}")
        return reservations

    def subscribe_for_user(
        self, user_id: str, on_change: Callable, on_error: Optional[Callable] = None
    ) -> Callable[[], None]:
        return self.hub.subscribe(
            [user_topic(user_id)],
            lambda db: _for_user(db, user_id),
            on_change,
            on_error,
        )

    @store_operation
    def list_starting_before(self, room_id: str, end: datetime) -> List[Reservation]:
        """Every reservation of the room that starts before ``end``, any status."""
        return (
            self.db.query(Reservation)
            .filter(Reservation.room_id == room_id, Reservation.start < to_utc_naive(end))
            .order_by(Reservation.start.asc())
            .all()
        )

    @store_operation
    def current_room(self, room_id: str) -> Optional[Room]:
        """Re-read the room from the store, bypassing the session's cached copy."""
        return self.db.get(Room, room_id, populate_existing=True)

    @store_operation
    def add(self, reservation: Reservation, publish: bool = True) -> Reservation:
        """
        Insert and commit a reservation. With ``publish=False`` the caller
        announces it later through :meth:`publish`, e.g. after releasing a lock.
        """
        self.db.add(reservation)
        self.db.commit()
        self.db.refresh(reservation)
        logger.debug(f"Created reservation: {reservation.id}, room_id: {reservation.room_id}")
        if publish:
            self.publish(reservation)
        return reservation

    @store_operation
    def cancel(self, room_id: str, reservation_id: str) -> Reservation:
        """
        Mark a reservation cancelled. A second cancel raises
        AlreadyCancelledError so ``cancelled_at`` keeps its first value.
        """
        reservation = self._get_or_raise(room_id, reservation_id)
        # Only a confirmed row is updated, so concurrent cancels cannot both win
        updated = (
            self.db.query(Reservation)
            .filter(
                Reservation.id == reservation_id,
                Reservation.room_id == room_id,
                Reservation.status == ReservationStatus.CONFIRMED,
            )
            .update(
                {
                    Reservation.status: ReservationStatus.CANCELLED,
                    Reservation.cancelled_at: utcnow(),
                },
                synchronize_session=False,
            )
        )
        if updated == 0:
            self.db.rollback()
            logger.error(f"Reservation already cancelled: {reservation_id}")
            raise AlreadyCancelledError()
        self.db.commit()
        self.db.refresh(reservation)
        logger.debug(f"Cancelled reservation: {reservation_id}, room_id: {room_id}")
        self.publish(reservation)
        return reservation

    @store_operation
    def attach_photo(self, room_id: str, reservation_id: str, photo_url: str) -> Reservation:
        """Store the URL returned by the upload service, verbatim."""
        if not photo_url or not photo_url.strip():
            raise ValidationError("Photo URL is required.")
        reservation = self._get_or_raise(room_id, reservation_id)
        reservation.photo_url = photo_url
        self.db.commit()
        self.db.refresh(reservation)
        logger.debug(f"Attached photo to reservation: {reservation_id}")
        self.publish(reservation)
        return reservation

    def _get_or_raise(self, room_id: str, reservation_id: str) -> Reservation:
        reservation = self.get(room_id, reservation_id)
        if reservation is None:
            logger.error(f"Reservation not found: {reservation_id}, room_id: {room_id}")
            raise NotFoundError("Reservation not found")
        return reservation

    def publish(self, reservation: Reservation):
        """Tell live queries of the room and of the owner that the reservation changed."""
        self.hub.notify(room_topic(reservation.room_id), user_topic(reservation.user_id))
