from enum import Enum as PyEnum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import relationship
from roomres.db import Base
from roomres.utils.timeutils import utcnow


class ReservationStatus(str, PyEnum):
    """
    Reservation lifecycle. A cancelled reservation never becomes confirmed
    again and does not block the room.
    """

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(String, primary_key=True, index=True)
    room_id = Column(
        String, ForeignKey("rooms.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id = Column(String, index=True, nullable=False)
    # Snapshots taken at creation time, not kept in sync with the room or user
    user_email = Column(String, nullable=True)
    room_name = Column(String, nullable=True)
    building = Column(String, nullable=True)
    start = Column(DateTime, index=True, nullable=False)
    end = Column(DateTime, nullable=False)
    purpose = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    status = Column(
        Enum(ReservationStatus),
        nullable=False,
        default=ReservationStatus.CONFIRMED,
    )
    created_at = Column(DateTime, nullable=False, default=utcnow)
    cancelled_at = Column(DateTime, nullable=True)

    room = relationship("Room", back_populates="reservations")
