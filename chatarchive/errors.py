"""Error types raised by the relationship engine.

Missing entries are not errors: operations on unknown ids return empty
results. Everything here is recoverable from the caller's point of view.
"""


class ChatArchiveError(Exception):
    """Base exception for archive errors."""

    status_code = 500
    error_type = "internal_error"
    message = "An unexpected error occurred"
    retryable = False

    def __init__(self, message: str | None = None, **details) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "error": self.error_type,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }


class BackendUnavailableError(ChatArchiveError):
    """Persistence or embedding service could not be reached."""

    status_code = 503
    error_type = "backend_unavailable"
    message = "Storage backend is unavailable"
    retryable = True


class DetectionInProgressError(ChatArchiveError):
    """A detection for the same entry is already running."""

    status_code = 409
    error_type = "detection_in_progress"
    message = "Relationship detection is already running for this entry"


class DetectionTimeoutError(ChatArchiveError):
    status_code = 504
    error_type = "detection_timeout"
    message = "Relationship detection timed out"
    retryable = True


class MalformedVectorError(ChatArchiveError):
    """Embedding has the wrong shape. The scorer catches this and skips the signal."""

    status_code = 422
    error_type = "malformed_vector"
    message = "Embedding vector is malformed"
