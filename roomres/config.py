import os

# Storage
DATABASE_URL = os.getenv(
    "ROOMRES_DATABASE_URL", "sqlite:///./data/room_reservations.db"
)

# JWT configuration for identities issued by the external identity provider
SECRET_KEY = os.getenv("ROOMRES_SECRET_KEY", "secure-secret-key-1234567890")
ALGORITHM = os.getenv("ROOMRES_JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ROOMRES_TOKEN_EXPIRE_MINUTES", "30"))

LOG_LEVEL = os.getenv("ROOMRES_LOG_LEVEL", "INFO")

# Calendar views look this many days ahead of the start of today
RESERVATION_WINDOW_DAYS = 7
RESERVATION_INCREMENT_MINUTES = 30
