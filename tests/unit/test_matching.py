from datetime import datetime, timedelta

import numpy as np
import pytest

from gatekeeper.core.errors import ValidationError
from gatekeeper.services.biometric.matching import (
    ScoredSample,
    l2_distances,
    rank,
    validate_embedding,
    validate_match_params,
    validate_quality,
)

T0 = datetime(2026, 1, 1, 12, 0, 0)


def _sample(person, sample, distance, minutes=0, seq=None):
    return ScoredSample(
        person_id=person,
        sample_id=sample,
        distance=distance,
        enrolled_at=T0 + timedelta(minutes=minutes),
        enrolled_seq=minutes if seq is None else seq,
    )


def test_rank_orders_by_distance_and_dedupes_persons():
    scored = [
        _sample("p1", "s1", 0.4),
        _sample("p2", "s2", 0.2),
        _sample("p1", "s3", 0.1),
        _sample("p3", "s4", 0.3),
    ]

    result = rank(scored, top_k=5, threshold=1.0)

    assert [(c.person_id, c.sample_id) for c in result.candidates] == [("p1", "s3"), ("p2", "s2"), ("p3", "s4")]
    assert result.best_distance == pytest.approx(0.1)
    assert result.matched


def test_rank_applies_threshold_and_top_k():
    scored = [_sample(f"p{i}", f"s{i}", 0.1 * i) for i in range(1, 8)]

    result = rank(scored, top_k=2, threshold=0.55)
    assert [c.person_id for c in result.candidates] == ["p1", "p2"]

    result = rank(scored, top_k=10, threshold=0.55)
    assert [c.person_id for c in result.candidates] == ["p1", "p2", "p3", "p4", "p5"]


def test_rank_unmatched_keeps_best_distance():
    result = rank([_sample("p1", "s1", 2.5)], top_k=1, threshold=1.0)

    assert result.unmatched
    assert result.best is None
    assert result.best_distance == pytest.approx(2.5)


def test_rank_empty():
    result = rank([], top_k=3, threshold=1.0)
    assert result.unmatched
    assert result.best_distance is None


def test_rank_ties_prefer_most_recent_enrollment():
    scored = [
        _sample("old", "a", 0.5, minutes=0),
        _sample("new", "b", 0.5, minutes=10),
        _sample("mid", "c", 0.5, minutes=5),
    ]

    result = rank(scored, top_k=3, threshold=1.0)

    assert [c.person_id for c in result.candidates] == ["new", "mid", "old"]


def test_rank_ties_within_one_instant_follow_insertion_order():
    scored = [
        _sample("earlier", "zzz", 0.5, minutes=0, seq=1),
        _sample("later", "aaa", 0.5, minutes=0, seq=2),
    ]

    result = rank(scored, top_k=2, threshold=1.0)

    assert [c.person_id for c in result.candidates] == ["later", "earlier"]


def test_rank_is_deterministic_under_input_order():
    scored = [_sample(f"p{i % 3}", f"s{i}", round(0.1 * (i % 4), 2), minutes=i % 2) for i in range(12)]

    first = rank(scored, top_k=3, threshold=1.0).candidates
    second = rank(list(reversed(scored)), top_k=3, threshold=1.0).candidates

    assert first == second


def test_validate_embedding():
    assert validate_embedding([0.0] * 512).shape == (512,)
    with pytest.raises(ValidationError):
        validate_embedding([0.0] * 511)
    with pytest.raises(ValidationError):
        validate_embedding([float("nan")] + [0.0] * 511)
    with pytest.raises(ValidationError):
        validate_embedding(["a"] * 512)


@pytest.mark.parametrize("value, ok", [(None, True), (0.0, True), (1.0, True), (0.7, True), (1.2, False), (-0.1, False)])
def test_validate_quality(value, ok):
    if ok:
        assert validate_quality(value) == value
    else:
        with pytest.raises(ValidationError):
            validate_quality(value)


def test_validate_match_params():
    validate_match_params(1, 0.0)
    with pytest.raises(ValidationError):
        validate_match_params(0, 1.0)
    with pytest.raises(ValidationError):
        validate_match_params(1, -1.0)


def test_l2_distances():
    probe = np.zeros(3)
    matrix = np.array([[3.0, 4.0, 0.0], [0.0, 0.0, 0.0]])

    assert l2_distances(probe, matrix).tolist() == [5.0, 0.0]
    assert l2_distances(probe, np.empty((0, 3))).size == 0
