"""
scribeview.exceptions - Custom exception classes.

All Scribeview-specific exceptions inherit from ScribeviewError.
"""


class ScribeviewError(Exception):
    """Base exception for all Scribeview errors."""

    pass


class ConfigError(ScribeviewError, ValueError):
    """Configuration loading or validation error."""

    pass


class ServiceError(ScribeviewError):
    """A backing service answered with a non-success status or was unreachable."""

    def __init__(self, service: str, message: str, status_code: int | None = None):
        self.service = service
        self.message = message
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class StoreError(ScribeviewError):
    """Document store read or write error."""

    pass


class StageError(ScribeviewError):
    """A pipeline stage failed. Subclasses name the stage."""

    stage = "unknown"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TranscribeFailed(StageError):
    """Speech-to-text stage failed."""

    stage = "transcribe"


class FormatFailed(StageError):
    """Text formatting stage failed."""

    stage = "format"


class TitleGenerationFailed(StageError):
    """Title generation stage failed."""

    stage = "title"


class PersistenceFailed(StageError):
    """Writing the transcript back to the store failed."""

    stage = "persist"


class PipelineBusy(StageError):
    """A run was requested while another run was still outstanding."""

    stage = "busy"


class OwnershipDenied(ScribeviewError):
    """The current user does not own the requested transcription."""

    def __init__(self, user_id: str, transcription_id: str):
        self.user_id = user_id
        self.transcription_id = transcription_id
        super().__init__(f"User '{user_id}' has no transcription '{transcription_id}'")


class LLMError(ScribeviewError):
    """LLM backend or prompt error."""

    pass


class LLMResponseError(LLMError):
    """LLM returned malformed or unexpected response."""

    pass
