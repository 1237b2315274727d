from sqlalchemy.orm import relationship
from sqlalchemy import Column, Integer, JSON, String
from roomres.db import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    building = Column(String, nullable=False)
    floor = Column(String, nullable=True)
    capacity = Column(Integer, nullable=False, default=0)
    amenities = Column(JSON, nullable=False, default=list)
    description = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    opening_hours = Column(JSON, nullable=True)
    location = Column(JSON, nullable=True)

    reservations = relationship(
        "Reservation", back_populates="room", cascade="all, delete-orphan"
    )
