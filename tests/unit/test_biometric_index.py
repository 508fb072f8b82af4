"""
Biometric Index Tests
=====================

Enrollment validation, soft deletion and face/fingerprint matching on the
numpy ranking path.
"""

import math
from datetime import datetime

import pytest

from gatekeeper.core.errors import NotFound, ScorerUnavailable, ValidationError
from gatekeeper.services import BiometricIndex


class ByteDiffScorer:
    """Toy scorer: fraction of differing bytes."""

    def distance(self, probe: bytes, template: bytes) -> float:
        length = max(len(probe), len(template))
        diff = sum(1 for a, b in zip(probe.ljust(length, b"\0"), template.ljust(length, b"\0")) if a != b)
        return diff / length


@pytest.fixture
def index(db_session):
    return BiometricIndex(db_session, template_scorer=ByteDiffScorer())


ZERO = [0.0] * 512


# ============================================================================
# Enrollment
# ============================================================================

def test_enroll_embedding(index, make_person):
    person = make_person()

    sample = index.enroll_embedding(person.id, ZERO, quality_score=0.9, photo_id="photo-1")

    assert sample.id
    assert sample.person_id == person.id
    assert sample.quality_score == 0.9
    assert sample.is_deleted is False


@pytest.mark.parametrize("vector", [[0.0] * 128, [0.0] * 513, [math.inf] * 512])
def test_enroll_embedding_rejects_bad_vectors(index, make_person, vector):
    person = make_person()
    with pytest.raises(ValidationError):
        index.enroll_embedding(person.id, vector)


def test_enroll_embedding_rejects_bad_quality(index, make_person):
    person = make_person()
    with pytest.raises(ValidationError):
        index.enroll_embedding(person.id, ZERO, quality_score=1.5)


def test_enroll_for_unknown_person(index):
    with pytest.raises(NotFound):
        index.enroll_embedding("ghost", ZERO)
    with pytest.raises(NotFound):
        index.enroll_template("ghost", b"\x01\x02")


def test_enroll_template(index, make_person):
    person = make_person()

    sample = index.enroll_template(person.id, b"\x01\x02\x03", position="right_thumb", quality_score=0.5)

    assert sample.finger_position == "right_thumb"
    with pytest.raises(ValidationError):
        index.enroll_template(person.id, b"")


# ============================================================================
# Face matching
# ============================================================================

def test_zero_vector_matches_itself_at_distance_zero(index, make_person):
    person = make_person()
    index.enroll_embedding(person.id, ZERO)

    result = index.match_face(ZERO, top_k=1, threshold=0.1)

    assert result.matched
    assert result.best.person_id == person.id
    assert result.best.distance == pytest.approx(0.0)


def test_match_face_ranks_nearest_person_first(index, make_person, embedding):
    alice, bob = make_person(), make_person()
    probe = embedding(seed=1)
    index.enroll_embedding(alice.id, probe)
    index.enroll_embedding(bob.id, embedding(seed=2))

    result = index.match_face(probe, top_k=2, threshold=100.0)

    assert [c.person_id for c in result.candidates] == [alice.id, bob.id]
    assert result.candidates[0].distance < result.candidates[1].distance


def test_match_face_one_candidate_per_person(index, make_person, embedding):
    person = make_person()
    near = index.enroll_embedding(person.id, embedding(seed=1, scale=0.01))
    index.enroll_embedding(person.id, embedding(seed=2, scale=0.02))

    result = index.match_face(ZERO, top_k=5, threshold=10.0)

    assert len(result.candidates) == 1
    assert result.best.sample_id == near.id


def test_match_face_unmatched_above_threshold(index, make_person, embedding):
    person = make_person()
    index.enroll_embedding(person.id, embedding(seed=3))

    result = index.match_face(ZERO, top_k=1, threshold=0.1)

    assert result.unmatched
    assert result.best_distance > 0.1


def test_match_face_with_no_samples(index):
    result = index.match_face(ZERO, top_k=3, threshold=1.0)

    assert result.unmatched
    assert result.candidates == []


def test_soft_deleted_sample_never_matches(index, make_person):
    person = make_person()
    sample = index.enroll_embedding(person.id, ZERO)

    index.soft_delete(sample.id)
    result = index.match_face(ZERO, top_k=5, threshold=1000.0)

    assert all(c.sample_id != sample.id for c in result.candidates)
    assert result.unmatched


def test_soft_delete_is_idempotent_and_keeps_row(index, make_person):
    person = make_person()
    sample = index.enroll_embedding(person.id, ZERO)

    index.soft_delete(sample.id)
    again = index.soft_delete(sample.id)

    assert again.is_deleted is True
    assert index.samples_for(person.id) == []
    assert len(index.samples_for(person.id, include_deleted=True)) == 1


def test_soft_delete_unknown_sample(index):
    with pytest.raises(NotFound):
        index.soft_delete("nope")


def test_active_only_skips_deactivated_persons(index, directory, make_person):
    person = make_person()
    index.enroll_embedding(person.id, ZERO)
    directory.deactivate(person.id, 0)

    assert index.match_face(ZERO, top_k=1, threshold=0.1).matched
    assert index.match_face(ZERO, top_k=1, threshold=0.1, active_only=True).unmatched


def test_match_face_uses_configured_defaults(index, make_person, mocker):
    person = make_person()
    index.enroll_embedding(person.id, ZERO)
    mocker.patch("gatekeeper.services.biometric.index.settings.FACE_MATCH_THRESHOLD", 0.0)

    result = index.match_face(ZERO)

    assert result.threshold == 0.0
    assert result.matched


def test_match_face_rejects_bad_parameters(index):
    with pytest.raises(ValidationError):
        index.match_face(ZERO, top_k=0)
    with pytest.raises(ValidationError):
        index.match_face(ZERO, threshold=-1)
    with pytest.raises(ValidationError):
        index.match_face([0.0] * 10)


def test_distance_ties_prefer_later_enrollment_within_one_instant(index, make_person, db_session):
    first_person, second_person = make_person(), make_person()
    first = index.enroll_embedding(first_person.id, ZERO)
    second = index.enroll_embedding(second_person.id, ZERO)
    # Same clock reading, and sample ids that sort the other way round
    first.created_at = second.created_at = datetime(2026, 1, 1, 12, 0, 0)
    first.id, second.id = "sample-z", "sample-a"
    db_session.commit()

    result = index.match_face(ZERO, top_k=2, threshold=0.5)

    assert second.enrolled_seq > first.enrolled_seq
    assert [c.person_id for c in result.candidates] == [second_person.id, first_person.id]


# ============================================================================
# Fingerprint matching
# ============================================================================

def test_match_fingerprint(index, make_person):
    alice, bob = make_person(), make_person()
    index.enroll_template(alice.id, b"ABCDEFGH", position="right_thumb")
    index.enroll_template(bob.id, b"ABCDxxxx", position="right_thumb")

    result = index.match_fingerprint(b"ABCDEFGH", top_k=5, threshold=0.6)

    assert [c.person_id for c in result.candidates] == [alice.id, bob.id]
    assert result.best.distance == 0.0


def test_match_fingerprint_filters_by_position(index, make_person):
    person = make_person()
    index.enroll_template(person.id, b"ABCDEFGH", position="left_index")

    result = index.match_fingerprint(b"ABCDEFGH", top_k=1, threshold=0.1, finger_position="right_thumb")

    assert result.unmatched


def test_match_fingerprint_skips_non_finite_scores(db_session, make_person, mocker):
    scorer = mocker.Mock()
    scorer.distance.side_effect = [float("nan"), 0.05]
    index = BiometricIndex(db_session, template_scorer=scorer)
    a, b = make_person(), make_person()
    index.enroll_template(a.id, b"\x01")
    index.enroll_template(b.id, b"\x02")

    result = index.match_fingerprint(b"\x01", top_k=5, threshold=0.1)

    assert len(result.candidates) == 1


def test_match_fingerprint_without_scorer(db_session):
    with pytest.raises(ScorerUnavailable):
        BiometricIndex(db_session).match_fingerprint(b"\x01")


def test_match_fingerprint_uses_its_own_defaults(index, make_person, mocker):
    for _ in range(3):
        index.enroll_template(make_person().id, b"ABCDEFGH")
    mocker.patch("gatekeeper.services.biometric.index.settings.FACE_MATCH_TOP_K", 1)
    mocker.patch("gatekeeper.services.biometric.index.settings.FINGERPRINT_MATCH_TOP_K", 2)

    result = index.match_fingerprint(b"ABCDEFGH")

    assert len(result.candidates) == 2
