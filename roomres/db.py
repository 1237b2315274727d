import functools
import logging
import os
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from roomres.config import DATABASE_URL
from roomres.errors import TransportError

logger = logging.getLogger(__name__)

connect_args = (
    {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
)
engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def enable_sqlite_foreign_keys(target_engine):
    """SQLite only enforces foreign keys on connections that switch them on."""
    if target_engine.dialect.name != "sqlite":
        return

    @event.listens_for(target_engine, "connect")
    def _foreign_keys_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)


def init_database():
    if DATABASE_URL.startswith("sqlite:///./") and not os.path.exists("./data"):
        os.makedirs("./data")
    # Register the tables before creating them
    from roomres.models import reservation, room  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    """Provide a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def store_operation(method):
    """
    Wrap a repository method so store failures roll back the repository's
    session and surface as TransportError.
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error(f"Store failure in {method.__qualname__}: {exc}")
            self.db.rollback()
            raise TransportError() from exc

    return wrapper
