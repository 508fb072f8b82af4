import pytest

from gatekeeper.services.scoring import GROUP_WEIGHTS, score_fields, token_strength, tokenize


def test_tokenize():
    assert tokenize("Ahmed  KHAN, +91-98765") == ["ahmed", "khan", "91", "98765"]
    assert tokenize(None) == []
    assert tokenize("  ") == []


@pytest.mark.parametrize("query, tokens, expected", [
    ("khan", ["khan"], 1.0),
    ("kha", ["khan"], 0.75),
    ("street", ["streets"], 0.75),
    ("ahmad", ["ahmed"], pytest.approx(0.6 * 0.8)),
    ("ree", ["street"], 0.5),
    ("xyz", ["khan"], 0.0),
    ("khan", [], 0.0),
])
def test_token_strength(query, tokens, expected):
    assert token_strength(query, tokens) == expected


def test_name_outweighs_address():
    name_hit, name_fields = score_fields({"name": "Ahmed Khan"}, ["khan"])
    address_hit, address_fields = score_fields({"address": "Khan Street"}, ["khan"])

    assert name_hit == GROUP_WEIGHTS["name"]
    assert address_hit == GROUP_WEIGHTS["address"]
    assert name_fields == ["name"]
    assert address_fields == ["address"]


def test_score_sums_over_tokens_and_groups():
    values = {"name": "Ahmed Khan", "last_name": "Khan", "address": "Khan Street, Poonch"}

    score, matched = score_fields(values, ["ahmed", "khan"])

    # ahmed: name 3.0; khan: name 3.0 + address 1.0
    assert score == pytest.approx(7.0)
    assert "name" in matched
    assert "address" in matched


def test_contact_group_matches_phone_digits():
    score, matched = score_fields({"phone": "+919876543210"}, ["919876543210"])

    assert score == GROUP_WEIGHTS["contact"]
    assert matched == ["phone"]
