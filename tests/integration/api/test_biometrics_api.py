"""
Biometric API Tests
===================
"""

import base64

import pytest

from gatekeeper.api.deps import get_template_scorer
from gatekeeper.app.main import app

pytestmark = pytest.mark.integration

ZERO = [0.0] * 512


class ExactScorer:
    def distance(self, probe: bytes, template: bytes) -> float:
        return 0.0 if probe == template else 1.0


@pytest.fixture
def person(client, api):
    response = client.post(
        f"{api}/persons",
        json={"id": "person-1", "name": "Fatima Sheikh", "phone": "+919876543211", "category": "resident"},
    )
    return response.json()


def test_enroll_match_and_soft_delete(client, api, person):
    enrolled = client.post(f"{api}/biometrics/persons/person-1/embeddings", json={"embedding": ZERO, "quality_score": 0.8})
    assert enrolled.status_code == 201
    sample_id = enrolled.json()["id"]

    match = client.post(f"{api}/biometrics/match/face", json={"probe": ZERO, "top_k": 1, "threshold": 0.1}).json()
    assert match["matched"] is True
    assert match["candidates"][0]["person_id"] == "person-1"
    assert match["candidates"][0]["distance"] == pytest.approx(0.0)

    deleted = client.delete(f"{api}/biometrics/samples/{sample_id}")
    assert deleted.status_code == 200
    assert deleted.json()["is_deleted"] is True

    match = client.post(f"{api}/biometrics/match/face", json={"probe": ZERO, "top_k": 1, "threshold": 0.1}).json()
    assert match["matched"] is False
    assert match["candidates"] == []


def test_wrong_dimension_rejected(client, api, person):
    response = client.post(f"{api}/biometrics/persons/person-1/embeddings", json={"embedding": [0.1, 0.2]})

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_enroll_for_unknown_person(client, api):
    response = client.post(f"{api}/biometrics/persons/ghost/embeddings", json={"embedding": ZERO})
    assert response.status_code == 404


def test_fingerprint_without_scorer_is_unavailable(client, api):
    probe = base64.b64encode(b"template").decode()

    response = client.post(f"{api}/biometrics/match/fingerprint", json={"probe": probe})

    assert response.status_code == 503
    assert response.json()["code"] == "SCORER_UNAVAILABLE"


def test_fingerprint_with_scorer(client, api, person):
    app.dependency_overrides[get_template_scorer] = lambda: ExactScorer()
    template = base64.b64encode(b"minutiae-1").decode()

    enrolled = client.post(
        f"{api}/biometrics/persons/person-1/templates",
        json={"template": template, "finger_position": "right_thumb"},
    )
    match = client.post(f"{api}/biometrics/match/fingerprint", json={"probe": template, "threshold": 0.5})

    assert enrolled.status_code == 201
    assert match.json()["matched"] is True
    assert match.json()["candidates"][0]["sample_id"] == enrolled.json()["id"]

    samples = client.get(f"{api}/biometrics/persons/person-1/samples").json()
    assert [s["id"] for s in samples] == [enrolled.json()["id"]]


def test_invalid_base64_template(client, api, person):
    response = client.post(f"{api}/biometrics/persons/person-1/templates", json={"template": "***"})
    assert response.status_code == 422
