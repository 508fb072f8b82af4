"""
Person API Tests
================

Enrollment, optimistic concurrency and audit history over HTTP.
"""

import pytest

pytestmark = pytest.mark.integration


def _enroll(client, api, **overrides):
    body = {"id": "person-1", "name": "Ahmed Khan", "phone": "+919876543210", "category": "resident"}
    body.update(overrides)
    return client.post(f"{api}/persons", json=body, headers={"X-Actor-Id": "registrar"})


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_enroll_and_get(client, api):
    response = _enroll(client, api)

    assert response.status_code == 201
    data = response.json()
    assert data["version"] == 0
    assert data["status"] == "active"

    fetched = client.get(f"{api}/persons/person-1")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Ahmed Khan"


def test_enroll_duplicate_is_conflict(client, api):
    _enroll(client, api)

    response = _enroll(client, api, name="Someone Else")

    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_ID"


def test_enroll_invalid_body(client, api):
    response = client.post(f"{api}/persons", json={"name": "No Phone", "category": "resident"})
    assert response.status_code == 422


def test_get_missing_person(client, api):
    response = client.get(f"{api}/persons/missing")

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_patch_with_stale_version_conflicts(client, api):
    _enroll(client, api)

    ok = client.patch(f"{api}/persons/person-1", json={"version": 0, "changes": {"alias": "Bhai"}})
    stale = client.patch(f"{api}/persons/person-1", json={"version": 0, "changes": {"alias": "Other"}})

    assert ok.status_code == 200
    assert ok.json()["version"] == 1
    assert stale.status_code == 409
    body = stale.json()
    assert body["code"] == "VERSION_CONFLICT"
    assert body["details"] == {"person_id": "person-1", "expected_version": 0, "actual_version": 1}


def test_patch_cannot_touch_protected_fields(client, api):
    _enroll(client, api)

    response = client.patch(f"{api}/persons/person-1", json={"version": 0, "changes": {"status": "deactivated"}})

    assert response.status_code == 422


def test_deactivate_reactivate_and_history(client, api):
    _enroll(client, api)

    off = client.post(f"{api}/persons/person-1/deactivate", json={"version": 0}, headers={"X-Actor-Id": "admin"})
    on = client.post(f"{api}/persons/person-1/reactivate", json={"version": 1})

    assert off.json()["status"] == "deactivated"
    assert on.json()["status"] == "active"

    history = client.get(f"{api}/persons/person-1/history").json()
    assert history["total"] == 3
    assert [r["action"] for r in history["records"]] == ["updated", "deleted", "created"]
    assert history["records"][1]["changed_by"] == "admin"


def test_owned_records(client, api):
    _enroll(client, api)
    _enroll(client, api, id="person-2", name="Ibrahim Khan")

    rel = client.post(
        f"{api}/persons/person-1/relationships",
        json={"version": 0, "relationship": {"related_person_id": "person-2", "relationship_type": "FATHER"}},
    )
    vehicle = client.post(
        f"{api}/persons/person-1/vehicles",
        json={"version": 1, "vehicle": {"vehicle_type": "CAR", "vehicle_number": "JK02AB1234"}},
    )
    photo = client.post(
        f"{api}/persons/person-1/photos",
        json={"version": 2, "photo": {"photo_url": "https://cdn.example/p1.jpg"}},
    )

    assert rel.status_code == 200
    assert vehicle.status_code == 200
    assert photo.json()["version"] == 3


def test_profile_records_and_listing(client, api):
    _enroll(client, api, religion="ISLAM", id_type="RATION_CARD", id_number="JK-RC-0042")

    steps = [
        ("social-media", "account", {"platform": "facebook", "account_id": "ahmed.khan"}),
        ("education", "education", {"qualification": "B.Sc"}),
        ("professional", "professional", {"profession": "Farmer"}),
        ("remarks", "remark", {"content": "Known to the night guard"}),
        ("movements", "movement", {"movement_type": "ENTRY"}),
    ]
    for version, (path, key, payload) in enumerate(steps):
        response = client.post(f"{api}/persons/person-1/{path}", json={"version": version, key: payload})
        assert response.status_code == 200, path
        assert response.json()["version"] == version + 1

    duplicate = client.post(
        f"{api}/persons/person-1/social-media",
        json={"version": 5, "account": {"platform": "facebook", "account_id": "ahmed.khan"}},
    )
    assert duplicate.status_code == 422

    records = client.get(f"{api}/persons/person-1/records").json()
    assert records["version"] == 5
    assert records["social_media"][0]["account_id"] == "ahmed.khan"
    assert records["registration_movements"][0]["movement_type"] == "ENTRY"
    assert records["remarks"][0]["content"] == "Known to the night guard"

    person = client.get(f"{api}/persons/person-1").json()
    assert person["religion"] == "ISLAM"
    assert person["id_number"] == "JK-RC-0042"


def test_list_persons(client, api):
    _enroll(client, api)
    _enroll(client, api, id="person-2", category="visitor")

    data = client.get(f"{api}/persons", params={"category": "visitor"}).json()

    assert data["total"] == 1
    assert data["persons"][0]["id"] == "person-2"
    assert data["has_more"] is False
