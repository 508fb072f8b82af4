"""
Entry Ledger API Tests
======================

End-to-end: enroll a person, record an entry, replay it.
"""

import pytest

pytestmark = pytest.mark.integration


@pytest.fixture
def resident(client, api):
    response = client.post(
        f"{api}/persons",
        json={"id": "person-1", "name": "Ahmed Khan", "phone": "+919876543210", "category": "resident"},
    )
    assert response.status_code == 201
    return response.json()


def _entry(**overrides):
    body = {
        "request_id": "req-1",
        "person_id": "person-1",
        "device_id": "device-1",
        "biometric_method": "face",
        "match_type": "mobile_auto",
        "direction": "in",
        "confidence_score": 0.91,
        "timestamp": "2026-01-15T08:30:00Z",
    }
    body.update(overrides)
    return body


def test_record_then_replay_keeps_original(client, api, resident, topology):
    first = client.post(f"{api}/entries", json=_entry())
    replay = client.post(f"{api}/entries", json=_entry(direction="out", confidence_score=0.2))

    assert first.status_code == 201
    assert replay.status_code == 200
    assert replay.json()["id"] == first.json()["id"]
    assert replay.json()["direction"] == "in"
    assert replay.json()["person_name"] == "Ahmed Khan"

    listing = client.get(f"{api}/entries", params={"person_id": "person-1"}).json()
    assert listing["total"] == 1

    fetched = client.get(f"{api}/entries/{first.json()['id']}")
    assert fetched.status_code == 200


def test_unknown_person_or_device(client, api, resident, topology):
    unknown_person = client.post(f"{api}/entries", json=_entry(person_id="ghost"))
    unknown_device = client.post(f"{api}/entries", json=_entry(request_id="req-2", device_id="nope"))

    assert unknown_person.status_code == 422
    assert unknown_person.json()["code"] == "FOREIGN_KEY_VIOLATION"
    assert unknown_device.status_code == 422


def test_confidence_out_of_range(client, api, resident, topology):
    response = client.post(f"{api}/entries", json=_entry(confidence_score=1.5))
    assert response.status_code == 422


def test_storage_failure_is_retried(client, api, resident, topology, mocker):
    from gatekeeper.core.errors import StorageFailure
    from gatekeeper.services.entry_ledger import EntryLedger

    original = EntryLedger.submit
    calls = []

    def flaky(self, *args, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            raise StorageFailure("connection reset")
        return original(self, *args, **kwargs)

    mocker.patch.object(EntryLedger, "submit", flaky)

    response = client.post(f"{api}/entries", json=_entry())

    assert response.status_code == 201
    assert len(calls) == 2


def test_get_missing_entry(client, api):
    assert client.get(f"{api}/entries/missing").status_code == 404


def test_list_filters_offline_synced_events(client, api, resident, topology):
    client.post(f"{api}/entries", json=_entry())
    client.post(f"{api}/entries", json=_entry(request_id="req-2", is_synced=True))

    synced = client.get(f"{api}/entries", params={"is_synced": "true"}).json()

    assert synced["total"] == 1
    assert synced["entries"][0]["request_id"] == "req-2"
    assert synced["entries"][0]["is_synced"] is True
