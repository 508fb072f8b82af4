"""
Shared test configuration.

Unit and API tests run against an in-memory SQLite database. pysqlite's
own transaction handling breaks SAVEPOINTs, so it is switched off and
SQLAlchemy emits BEGIN itself.
"""
from datetime import datetime

import numpy as np
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gatekeeper.db.base import Base
import gatekeeper.models  # noqa: F401  (registers every table on Base.metadata)
from gatekeeper.models.biometric import EMBEDDING_DIMENSION
from gatekeeper.services import PersonDirectory, TopologyRegistry


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    """Create test database session."""
    session = session_factory()
    yield session
    session.close()


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def directory(db_session):
    return PersonDirectory(db_session)


@pytest.fixture
def make_person(directory):
    """Enroll a person with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "first_name": "Test",
            "last_name": f"Person{counter['n']}",
            "phone": f"+91980000{counter['n']:04d}",
            "category": "resident",
        }
        data.update(overrides)
        return directory.enroll(data, changed_by="tester")

    return _make


@pytest.fixture
def gate_device(db_session):
    """Village -> node -> gate device, ready to record entries."""
    registry = TopologyRegistry(db_session)
    registry.create_village({"id": "village-1", "name": "Poonch"})
    registry.create_node({"id": "node-1", "village_id": "village-1", "node_name": "Main Gate", "node_type": "gate"})
    return registry.register_device({
        "id": "device-1",
        "node_id": "node-1",
        "device_name": "Main Gate Device",
        "device_type": "gate",
    })


@pytest.fixture
def embedding():
    """Deterministic unit-ish embedding factory."""

    def _make(seed: int = 0, scale: float = 1.0):
        rng = np.random.default_rng(seed)
        return (rng.standard_normal(EMBEDDING_DIMENSION) * scale).tolist()

    return _make


@pytest.fixture
def now():
    return datetime(2026, 1, 15, 8, 30, 0)
