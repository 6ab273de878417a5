"""
Rant to Reflection exception hierarchy.

All application-specific exceptions inherit from RantError,
enabling centralized error handling in the API middleware layer.
"""

from datetime import UTC, datetime


class RantError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "RANT_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class InvalidRequestError(RantError):
    """Raised when a required identifier or field is missing or invalid."""

    def __init__(self, detail: str = "Invalid request") -> None:
        super().__init__(detail=detail, code="VALIDATION_ERROR", status_code=400)


class AuthenticationError(RantError):
    """Raised when a request has no valid bearer credential."""

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(detail=detail, code="AUTH_REQUIRED", status_code=401)


class InvalidCredentialsError(RantError):
    """Raised on a failed email/password login."""

    def __init__(self) -> None:
        super().__init__(
            detail="Invalid email or password",
            code="INVALID_CREDENTIALS",
            status_code=401,
        )


class ForbiddenError(RantError):
    """Raised when a user acts on a row they do not own."""

    def __init__(self, detail: str = "You do not have access to this resource") -> None:
        super().__init__(detail=detail, code="FORBIDDEN", status_code=403)


class EmailAlreadyRegisteredError(RantError):
    """Raised on sign-up with an email that already has an account."""

    def __init__(self, email: str) -> None:
        super().__init__(
            detail=f"Email already registered: {email}",
            code="EMAIL_TAKEN",
            status_code=409,
        )


class RantNotFoundError(RantError):
    """Raised when a rant ID does not exist (or is private to someone else)."""

    def __init__(self, rant_id: str) -> None:
        super().__init__(
            detail=f"Rant not found: {rant_id}",
            code="RANT_NOT_FOUND",
            status_code=404,
        )


class CommentNotFoundError(RantError):
    """Raised when a comment ID does not exist."""

    def __init__(self, comment_id: str) -> None:
        super().__init__(
            detail=f"Comment not found: {comment_id}",
            code="COMMENT_NOT_FOUND",
            status_code=404,
        )


class AudioNotFoundError(RantError):
    """Raised when a rant has no stored audio, or the blob is missing."""

    def __init__(self, detail: str = "Audio not found") -> None:
        super().__init__(detail=detail, code="AUDIO_NOT_FOUND", status_code=404)


class TranscriptNotReadyError(RantError):
    """Raised when speech synthesis is requested before transcription completed."""

    def __init__(self, rant_id: str) -> None:
        super().__init__(
            detail=f"Transcript is not complete for rant {rant_id}",
            code="TRANSCRIPT_NOT_READY",
            status_code=409,
        )


class RecorderStateError(RantError):
    """Raised on an invalid recorder transition (e.g. start while recording)."""

    def __init__(self, detail: str = "Recorder is already recording") -> None:
        super().__init__(detail=detail, code="RECORDER_STATE", status_code=409)


class ConfigurationError(RantError):
    """Raised when a required service setting (e.g. API key) is missing."""

    def __init__(self, detail: str = "Service configuration error") -> None:
        super().__init__(detail=detail, code="CONFIGURATION_ERROR", status_code=500)


class VoiceProviderError(RantError):
    """Raised when the voice provider returns a non-success response."""

    def __init__(self, detail: str = "Voice provider request failed") -> None:
        super().__init__(detail=detail, code="UPSTREAM_ERROR", status_code=502)


class QuotaExceededError(RantError):
    """Raised when the voice provider has too few characters left."""

    def __init__(self) -> None:
        super().__init__(
            detail="TTS service temporarily unavailable",
            code="QUOTA_EXCEEDED",
            status_code=503,
        )
