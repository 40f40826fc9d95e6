"""
Error taxonomy shared by the API handlers, the vote store and the client.

Every error renders to the same JSON shape: {"error": str, "details": any}.
"""
from typing import Any, Dict, Optional


class VoteStoreError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, error: Optional[str] = None, details: Any = None):
        self.error = error or self.default_message
        self.details = details
        super().__init__(self.error)

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(VoteStoreError):
    status_code = 400
    default_message = "Missing required fields"


class MethodNotAllowedError(VoteStoreError):
    status_code = 405
    default_message = "Method not allowed"


class ConfigurationError(VoteStoreError):
    default_message = "GitHub token not configured"


class UpstreamReadError(VoteStoreError):
    default_message = "Failed to fetch from GitHub"


class UpstreamWriteError(VoteStoreError):
    default_message = "Failed to save to GitHub"


class WriteConflictError(UpstreamWriteError):
    """The store rejected a write because the sha was stale or missing."""


class ConflictError(VoteStoreError):
    default_message = "Vote store kept changing; gave up after retries"


class NetworkError(VoteStoreError):
    """Client-side transport failure (offline, DNS, timeout)."""

    default_message = "Network error"


_BY_STATUS = {
    400: ValidationError,
    405: MethodNotAllowedError,
}


def error_from_response(status_code: int, body: Any) -> VoteStoreError:
    """
    Rebuild an error from an API error response ({error, details}).
    Unknown statuses become a plain VoteStoreError carrying that status.
    """
    message = None
    details = None
    if isinstance(body, dict):
        message = body.get("error")
        details = body.get("details")
    cls = _BY_STATUS.get(status_code, VoteStoreError)
    err = cls(message, details)
    err.status_code = status_code
    return err
