from chatarchive.errors import (
    BackendUnavailableError,
    ChatArchiveError,
    DetectionInProgressError,
    DetectionTimeoutError,
)


def test_errors_carry_status_and_retry_hint() -> None:
    assert BackendUnavailableError.status_code == 503
    assert DetectionInProgressError.status_code == 409
    assert DetectionTimeoutError.status_code == 504
    assert DetectionTimeoutError.retryable
    assert not DetectionInProgressError.retryable


def test_to_dict_uses_default_message_and_details() -> None:
    error = DetectionInProgressError(entry_id="abc")

    assert isinstance(error, ChatArchiveError)
    assert error.to_dict() == {
        "error": "detection_in_progress",
        "message": "Relationship detection is already running for this entry",
        "retryable": False,
        "details": {"entry_id": "abc"},
    }
    assert str(BackendUnavailableError("disk gone")) == "disk gone"
