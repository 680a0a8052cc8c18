"""
Error taxonomy for review and moderation decisions.

NotFound, Unauthorized, Validation and Conflict are expected outcomes the
caller can recover from. StoreUnavailable is a transient infrastructure
failure the caller may retry.
"""
from typing import Any, Dict, Optional


class ModerationError(Exception):
    """Base class. ``kind`` is the stable name reported to API clients."""

    kind = "ModerationError"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": self.message}


class NotFoundError(ModerationError):
    kind = "NotFound"


class UnauthorizedError(ModerationError):
    kind = "Unauthorized"


class ValidationError(ModerationError):
    kind = "ValidationError"


class ConflictError(ModerationError):
    """
    The record changed between read and write.

    Carries the status the record has now so the caller can discard its
    optimistic local change and re-fetch.
    """

    kind = "Conflict"

    def __init__(self, message: str, current_status: Optional[str] = None):
        self.current_status = current_status
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["current_status"] = self.current_status
        return data


class StoreUnavailableError(ModerationError):
    kind = "StoreUnavailable"
