"""Error taxonomy for the content mutation pipeline.

Every error carries a stable ``code`` and a ``details`` dict so callers can
show an author exactly what to fix.
"""

from datetime import UTC, datetime
from typing import Any, Dict, List, Optional


class ContentStudioError(Exception):
    """Base class for pipeline errors."""

    code = "CONTENT_STUDIO_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        # Filled in by the orchestrator with the progress made before the failure
        self.status_messages: List[Dict[str, str]] = []

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the error body returned to callers."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "timestamp": datetime.now(UTC).isoformat(),
        }


class ContentValidationError(ContentStudioError):
    """Raised when a submission is malformed (missing fields, text too long)."""

    code = "VALIDATION_ERROR"


class ContentNotFoundError(ContentStudioError):
    """Raised when a referenced content row or history entry does not exist."""

    code = "CONTENT_NOT_FOUND"


class LanguageGateError(ContentStudioError):
    """Base class for language gate failures."""

    code = "LANGUAGE_VALIDATION_ERROR"


class LanguageMismatchError(LanguageGateError):
    """Raised when the detected language differs from the topic language."""

    code = "LANGUAGE_MISMATCH"


class LanguageDetectionFailedError(LanguageGateError):
    """Raised when no language code could be determined."""

    code = "LANGUAGE_DETECTION_FAILED"


class LanguageValidationError(LanguageGateError):
    """Raised on any unexpected failure while gating language."""

    code = "LANGUAGE_VALIDATION_ERROR"


class QualityCheckFailedError(ContentStudioError):
    """Raised when content does not pass the quality gate."""

    code = "QUALITY_CHECK_FAILED"


class QualityCheckRecordError(ContentStudioError):
    """Raised when an approved check could not be recorded."""

    code = "QUALITY_CHECK_RECORD_FAILED"


class HistoryArchiveError(ContentStudioError):
    """Raised when the pre-update snapshot could not be stored."""

    code = "HISTORY_ARCHIVE_FAILED"


class AudioGenerationError(ContentStudioError):
    """Raised by audio backends; the pipeline logs and continues without audio."""

    code = "AUDIO_GENERATION_FAILED"


class MissingCollaboratorError(ContentStudioError):
    """Raised when a required collaborator is not configured."""

    code = "MISSING_COLLABORATOR"
