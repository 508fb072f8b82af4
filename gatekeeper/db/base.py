"""Database engine, session factory and unit-of-work helper."""
import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from gatekeeper.app.config import settings
from gatekeeper.core.errors import StorageFailure

logger = logging.getLogger(__name__)

Base = declarative_base()

# Driver-level failures that leave nothing applied and are worth retrying.
TRANSIENT_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Build the process-wide engine on first use."""
    url = settings.DATABASE_URL
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session bound to the shared engine."""
    db = SessionLocal(bind=get_engine())
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run one unit of work: commit on success, roll back on anything else.

    Rollback also happens on BaseException (task cancellation, interrupts)
    so a person mutation is never committed without its audit record.

    Raises:
        StorageFailure: the driver reported a transient error
    """
    try:
        yield db
        db.commit()
    except TRANSIENT_ERRORS as e:
        db.rollback()
        logger.error(f"Transient storage failure, transaction rolled back: {e}")
        raise StorageFailure("Storage temporarily unavailable", details={"error": str(e)}) from e
    except BaseException:
        db.rollback()
        raise
