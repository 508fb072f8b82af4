import pytest

from gatekeeper.core.errors import StorageFailure, ValidationError, VersionConflict
from gatekeeper.core.retry import RetryConfig, retry_on_exception


def test_retries_until_success():
    calls = []
    sleeps = []

    @retry_on_exception(config=RetryConfig(max_attempts=3, base_delay=0.01, jitter=False), sleep=sleeps.append)
    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise StorageFailure("connection reset")
        return "ok"

    assert flaky() == "ok"
    assert len(calls) == 3
    assert sleeps == [0.01, 0.02]


def test_gives_up_after_max_attempts():
    @retry_on_exception(config=RetryConfig(max_attempts=2, base_delay=0), sleep=lambda _: None)
    def broken():
        raise StorageFailure("down")

    with pytest.raises(StorageFailure):
        broken()


def test_other_errors_are_not_retried():
    calls = []

    @retry_on_exception(config=RetryConfig(max_attempts=5, base_delay=0), sleep=lambda _: None)
    def invalid():
        calls.append(1)
        raise ValidationError("bad")

    with pytest.raises(ValidationError):
        invalid()
    assert len(calls) == 1


def test_delay_is_capped():
    config = RetryConfig(base_delay=1.0, max_delay=2.0, jitter=False)
    assert config.delay_for(10) == 2.0


def test_error_codes_and_retryability():
    conflict = VersionConflict("p1", 3, 4)

    assert conflict.retryable
    assert conflict.to_response().model_dump() == {
        "code": "VERSION_CONFLICT",
        "message": "Person p1 is not at version 3",
        "details": {"person_id": "p1", "expected_version": 3, "actual_version": 4},
    }
    assert StorageFailure("x").retryable
    assert not ValidationError("x").retryable
