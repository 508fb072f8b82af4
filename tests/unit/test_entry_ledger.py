"""
Entry Ledger Tests
==================

Idempotent recording, foreign-key resolution and event queries.
"""

from datetime import datetime, timedelta, timezone

import pytest

from gatekeeper.core.errors import ForeignKeyViolation, NotFound, ValidationError
from gatekeeper.models import Direction, EntryLog
from gatekeeper.services import EntryLedger, TopologyRegistry


@pytest.fixture
def ledger(db_session):
    return EntryLedger(db_session)


@pytest.fixture
def resident(make_person):
    return make_person(id="person-1", name="Ahmed Khan")


def _record(ledger, request_id, person_id="person-1", device_id="device-1", direction="in", when=None, **extra):
    return ledger.submit(
        request_id=request_id,
        person_id=person_id,
        device_id=device_id,
        method="face",
        match_type="mobile_auto",
        direction=direction,
        confidence=extra.pop("confidence", 0.93),
        timestamp=when or datetime(2026, 1, 15, 8, 30),
        **extra,
    )


def test_record_stores_event_with_person_name(ledger, resident, gate_device):
    event, created = _record(ledger, "r1")

    assert created is True
    assert event.request_id == "r1"
    assert event.person_name == "Ahmed Khan"
    assert event.direction == Direction.in_


def test_replay_returns_first_write(ledger, resident, gate_device, db_session):
    first, created_first = _record(ledger, "r1", direction="in")
    second, created_second = _record(ledger, "r1", direction="out")

    assert created_first is True
    assert created_second is False
    assert second.id == first.id
    assert second.direction == Direction.in_
    assert db_session.query(EntryLog).count() == 1


def test_replay_wins_over_invalid_payload(ledger, resident, gate_device):
    first, _ = _record(ledger, "r1")

    again, created = _record(ledger, "r1", confidence=7.0)

    assert created is False
    assert again.id == first.id


def test_record_plain_form_returns_event(ledger, resident, gate_device):
    event = ledger.record(
        "r9", "person-1", "device-1", "fingerprint", "server_confirm", "out", 0.5, datetime(2026, 1, 1),
    )
    assert event.biometric_method.value == "fingerprint"


def test_concurrent_duplicate_resolves_to_stored_row(ledger, resident, gate_device, mocker, db_session):
    winner, _ = _record(ledger, "r1")
    # Simulate losing the race: the replay check misses, the insert hits the unique constraint
    lookup = mocker.patch.object(ledger.repo, "get_by_request_id", side_effect=[None, winner])

    event, created = _record(ledger, "r1", direction="out")

    assert created is False
    assert event.id == winner.id
    assert lookup.call_count == 2
    assert db_session.query(EntryLog).count() == 1


@pytest.mark.parametrize("confidence", [-0.01, 1.01])
def test_confidence_out_of_range(ledger, resident, gate_device, confidence, db_session):
    with pytest.raises(ValidationError):
        _record(ledger, "r1", confidence=confidence)
    assert db_session.query(EntryLog).count() == 0


def test_confidence_bounds_inclusive(ledger, resident, gate_device):
    _record(ledger, "r0", confidence=0.0)
    _record(ledger, "r1", confidence=1.0)


def test_unknown_person_rejected(ledger, gate_device, db_session):
    with pytest.raises(ForeignKeyViolation):
        _record(ledger, "r1", person_id="ghost")
    assert db_session.query(EntryLog).count() == 0


def test_unknown_device_rejected(ledger, resident):
    with pytest.raises(ForeignKeyViolation):
        _record(ledger, "r1", device_id="device-x")


def test_device_without_node_rejected(ledger, resident, db_session):
    TopologyRegistry(db_session).register_device({"id": "console", "device_name": "Console", "device_type": "admin"})

    with pytest.raises(ForeignKeyViolation):
        _record(ledger, "r1", device_id="console")


def test_missing_request_id_rejected(ledger, resident, gate_device):
    with pytest.raises(ValidationError):
        _record(ledger, "")


def test_deactivated_person_can_still_be_logged(ledger, directory, resident, gate_device):
    directory.deactivate(resident.id, 0)

    event, created = _record(ledger, "r1", direction="out")

    assert created


def test_vehicle_details_are_flattened(ledger, resident, gate_device):
    event, _ = _record(ledger, "r1", vehicle={"vehicle_type": "CAR", "vehicle_number": "JK02AB1234"})

    assert event.vehicle_type == "CAR"
    assert event.vehicle_number == "JK02AB1234"


def test_timezone_aware_timestamps_stored_as_utc(ledger, resident, gate_device):
    ist = timezone(timedelta(hours=5, minutes=30))

    event, _ = _record(ledger, "r1", when=datetime(2026, 1, 15, 14, 0, tzinfo=ist))

    assert event.timestamp == datetime(2026, 1, 15, 8, 30)


def test_list_events_newest_first_with_filters(ledger, resident, gate_device):
    base = datetime(2026, 1, 15, 8, 0)
    for i, direction in enumerate(["in", "out", "in"]):
        _record(ledger, f"r{i}", direction=direction, when=base + timedelta(hours=i))

    events, total = ledger.list_events(person_id="person-1")
    assert total == 3
    assert [e.request_id for e in events] == ["r2", "r1", "r0"]

    events, total = ledger.list_events(direction=Direction.out)
    assert total == 1

    events, total = ledger.list_events(since=base + timedelta(minutes=30), until=base + timedelta(hours=1))
    assert [e.request_id for e in events] == ["r1"]


def test_get_and_lookup(ledger, resident, gate_device):
    event, _ = _record(ledger, "r1")

    assert ledger.get(event.id).id == event.id
    assert ledger.get_by_request_id("r1").id == event.id
    assert ledger.get_by_request_id("missing") is None
    with pytest.raises(NotFound):
        ledger.get("missing")


def test_offline_events_flagged_as_synced(ledger, resident, gate_device):
    live, _ = _record(ledger, "r1")
    offline, _ = _record(ledger, "r2", when=datetime(2026, 1, 15, 7, 0), is_synced=True)

    assert live.is_synced is False
    assert offline.is_synced is True

    synced, total = ledger.list_events(is_synced=True)
    assert total == 1
    assert synced[0].id == offline.id

    pending, _ = ledger.list_events(is_synced=False)
    assert [e.id for e in pending] == [live.id]
