import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from roomres.config import LOG_LEVEL
from roomres.db import init_database
from roomres.errors import (
    AlreadyCancelledError,
    BookingConflictError,
    NotFoundError,
    ReservationError,
    TransportError,
    UnauthenticatedError,
    ValidationError,
)
from roomres.routers import me, rooms, reservations

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Checked in order, so subclasses come before their bases
ERROR_STATUS_CODES = [
    (UnauthenticatedError, status.HTTP_401_UNAUTHORIZED),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (BookingConflictError, status.HTTP_409_CONFLICT),
    (AlreadyCancelledError, status.HTTP_409_CONFLICT),
    (TransportError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_code_for(exc: ReservationError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(_: FastAPI):
    "lifespan for initing database"
    init_database()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Room reservations",
    description="Room reservations with conflict-checked admission and live calendars.",
    version="0.1.0",
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
    },
)


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError):
    status_code = status_code_for(exc)
    logger.debug(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=status_code, content={"detail": exc.message}, headers=headers
    )


app.include_router(rooms.router)
app.include_router(reservations.router)
app.include_router(me.router)
