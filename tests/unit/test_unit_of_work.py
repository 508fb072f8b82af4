import pytest
from sqlalchemy.exc import OperationalError

from gatekeeper.core.errors import StorageFailure
from gatekeeper.db.base import atomic
from gatekeeper.models import Village


def test_atomic_commits(db_session, session_factory):
    with atomic(db_session):
        db_session.add(Village(id="v1", name="Poonch"))

    db_session.close()
    other = session_factory()
    assert other.get(Village, "v1") is not None
    other.close()


def test_atomic_maps_transient_errors_and_rolls_back(db_session):
    with pytest.raises(StorageFailure) as exc_info:
        with atomic(db_session):
            db_session.add(Village(id="v1", name="Poonch"))
            db_session.flush()
            raise OperationalError("INSERT ...", {}, Exception("server closed the connection"))

    assert exc_info.value.retryable
    assert db_session.get(Village, "v1") is None


def test_atomic_rolls_back_on_cancellation(db_session):
    with pytest.raises(KeyboardInterrupt):
        with atomic(db_session):
            db_session.add(Village(id="v1", name="Poonch"))
            db_session.flush()
            raise KeyboardInterrupt

    assert db_session.get(Village, "v1") is None
