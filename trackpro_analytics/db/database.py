"""Engine and unit-of-work sessions for the TrackPro store."""

import logging
from typing import Generator, Optional
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..config import config
from .models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine and hands out one session per unit of work."""

    def __init__(self, database_url: Optional[str] = None):
        """Connect to ``database_url``, or to ``config.DATABASE_URL`` when omitted."""
        self.database_url = database_url or config.DATABASE_URL

        if self.database_url.startswith("sqlite"):
            engine_args = {"connect_args": {"check_same_thread": False}}
            # An in-memory database lives only as long as its single connection
            if ":memory:" in self.database_url or self.database_url in ("sqlite://", "sqlite:///"):
                engine_args["poolclass"] = StaticPool
            self.engine = create_engine(self.database_url, echo=False, **engine_args)
        else:
            self.engine = create_engine(self.database_url, echo=False)

        # Rows are converted to domain objects after commit, so keep them loaded
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )
        logger.debug(f"Opened store at {self.engine.url!r}")

    def create_tables(self):
        """Create the record, compliance, recovery and goal tables if missing."""
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Yield a session that commits on success and rolls back on any error."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self):
        self.engine.dispose()


_db: Optional[Database] = None


def get_db(database_url: Optional[str] = None) -> Database:
    """Get the shared store, reopening it when a different URL is requested.

    Tables are created on first use.
    """
    global _db
    if _db is None or (database_url and database_url != _db.database_url):
        if _db is not None:
            _db.close()
        _db = Database(database_url)
        _db.create_tables()
    return _db


def close_db():
    """Dispose of the shared store, if one is open."""
    global _db
    if _db is not None:
        _db.close()
        _db = None
