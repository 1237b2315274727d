from fastapi import APIRouter, Depends, WebSocket, status
from sqlalchemy.orm import Session
from typing import List
from roomres.data.sample_rooms import SAMPLE_ROOMS
from roomres.db import get_db
from roomres.errors import NotFoundError
from roomres.live import LiveQueryHub, get_hub
from roomres.repositories.rooms import RoomRepository
from roomres.routers.streaming import stream_snapshots
from roomres.schemas.room import RoomCreate, RoomUpdate, RoomResponse
from roomres.utils.auth import Identity, require_identity


router = APIRouter(
    prefix="/rooms",
    tags=["rooms"],
)


def get_room_repository(
    db: Session = Depends(get_db), hub: LiveQueryHub = Depends(get_hub)
) -> RoomRepository:
    return RoomRepository(db, hub)


def serialize_rooms(rooms):
    return [RoomResponse.model_validate(room).model_dump(mode="json") for room in rooms]


@router.post("/", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(
    room: RoomCreate,
    rooms: RoomRepository = Depends(get_room_repository),
    current_identity: Identity = Depends(require_identity),
):
    """
    Create a new room. An `id` in the body pins the room id, replacing the
    metadata of a room that already has it.
    Requires authentication.
    """
    room_id = rooms.create(room, room.id)
    return rooms.get_by_id(room_id)


@router.get("/", response_model=List[RoomResponse])
def get_rooms(rooms: RoomRepository = Depends(get_room_repository)):
    """
    Retrieve all rooms ordered by name.
    """
    return rooms.list_all()


@router.post("/seed", response_model=List[RoomResponse], status_code=status.HTTP_201_CREATED)
def seed_rooms(
    rooms: RoomRepository = Depends(get_room_repository),
    current_identity: Identity = Depends(require_identity),
):
    """
    Create the demo rooms under their fixed ids.
    Requires authentication.
    """
    return [rooms.get_by_id(room_id) for room_id in rooms.seed(SAMPLE_ROOMS)]


@router.websocket("/live")
async def rooms_live(
    websocket: WebSocket, rooms: RoomRepository = Depends(get_room_repository)
):
    """
    Stream the full room list on connect and after every room change.
    """
    await stream_snapshots(websocket, rooms.subscribe, serialize_rooms)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: str, rooms: RoomRepository = Depends(get_room_repository)):
    """
    Retrieve a specific room by ID.
    """
    room = rooms.get_by_id(room_id)
    if not room:
        raise NotFoundError("Room not found")
    return room


@router.put("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: str,
    room_update: RoomUpdate,
    rooms: RoomRepository = Depends(get_room_repository),
    current_identity: Identity = Depends(require_identity),
):
    """
    Update some of a room's details. Fields left out stay as they are; a
    field sent as an empty string or null is cleared.
    Requires authentication.
    """
    rooms.update(room_id, room_update)
    return rooms.get_by_id(room_id)


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(
    room_id: str,
    rooms: RoomRepository = Depends(get_room_repository),
    current_identity: Identity = Depends(require_identity),
):
    """
    Delete a room and every reservation it holds.
    Requires authentication.
    """
    rooms.delete(room_id)
    return None
