"""
FarmGenie exception hierarchy.

All client-specific exceptions inherit from FarmGenieError, so the front end
can catch one type and show ``user_message`` without inspecting details.
"""

from datetime import UTC, datetime

RETRY_MESSAGE = "Failed to process your request. Please try again."


class FarmGenieError(Exception):
    """Base exception for all FarmGenie errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "FARMGENIE_ERROR",
        user_message: str = RETRY_MESSAGE,
    ) -> None:
        self.detail = detail
        self.code = code
        self.user_message = user_message
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class MicAccessError(FarmGenieError):
    """Raised when the microphone is denied or unavailable."""

    def __init__(self, detail: str = "Microphone unavailable") -> None:
        super().__init__(
            detail=detail,
            code="MIC_ACCESS_ERROR",
            user_message="Microphone access is required to use voice features.",
        )


class TransportError(FarmGenieError):
    """Raised when the request never got an HTTP response (DNS, reset, timeout)."""

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(
            detail=f"Network error: {cause}",
            code="TRANSPORT_ERROR",
        )


class ServerError(FarmGenieError):
    """Raised when the backend answers with a non-success status or an unusable body."""

    def __init__(self, status_code: int, detail: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(
            detail=detail or f"Server error: {status_code}",
            code="SERVER_ERROR",
        )


class PlaybackBlockedError(FarmGenieError):
    """Raised by an audio player that cannot start playback. Never shown to the user."""

    def __init__(self, detail: str = "Audio playback blocked") -> None:
        super().__init__(detail=detail, code="PLAYBACK_BLOCKED", user_message="")


class EmptyQueryError(FarmGenieError):
    """Raised when a text-only query is submitted without any text."""

    def __init__(self) -> None:
        super().__init__(
            detail="Empty text query",
            code="EMPTY_QUERY",
            user_message="Please enter your question or location",
        )
