"""Quality gate around the quality check service.

Turns every way a check can go wrong into ``QualityCheckFailedError`` (or
``QualityCheckRecordError`` for audit failures) so the orchestrator knows
exactly which compensation to run.
"""

import logging
from typing import Optional

from contentstudio.errors import (
    ContentStudioError,
    MissingCollaboratorError,
    QualityCheckFailedError,
    QualityCheckRecordError,
)
from contentstudio.interfaces import ContentRepository, QualityCheckService
from contentstudio.models.content import Content
from contentstudio.models.quality import QualityCheckRecord, QualityResult
from contentstudio.models.status_trail import StatusTrail

module_logger = logging.getLogger(__name__)


class QualityGate:
    """Approve manual content or fail with a quality error."""

    def __init__(
        self,
        content_repository: ContentRepository,
        quality_service: Optional[QualityCheckService],
        logger: Optional[logging.Logger] = None,
    ):
        self.content_repository = content_repository
        self.quality_service = quality_service
        self.logger = logger or module_logger

    def require_service(self) -> QualityCheckService:
        if self.quality_service is None:
            raise MissingCollaboratorError(
                "Quality check service is required for manually authored content",
                {"collaborator": "quality_service"},
            )
        return self.quality_service

    def check_update(self, content_id: int, status_trail: Optional[StatusTrail] = None) -> Content:
        """Check persisted content and return it once approved.

        The service result is not trusted on its own: the content is reloaded
        and must be ``approved`` with a linked check id.

        Raises:
            QualityCheckFailedError: On any outcome other than approval
        """
        service = self.require_service()
        try:
            service.trigger_quality_check(content_id, "full", status_trail)
            reloaded = self.content_repository.find_by_id(content_id)
        except QualityCheckFailedError:
            raise
        except Exception as e:
            raise self._wrap(e, content_id) from e

        if reloaded is None or not reloaded.is_approved or not self._has_check_id(reloaded):
            status = reloaded.quality_check_status.value if reloaded and reloaded.quality_check_status else None
            raise QualityCheckFailedError(
                "Content failed quality check: content was not approved",
                {"content_id": content_id, "quality_check_status": status},
            )
        return reloaded

    def evaluate_before_create(
        self,
        content: Content,
        status_trail: Optional[StatusTrail] = None,
    ) -> QualityResult:
        """Evaluate content that does not exist yet.

        Raises:
            QualityCheckFailedError: If the content is rejected or the check fails
        """
        service = self.require_service()
        try:
            return service.validate_content_quality_before_save(content, content.topic_id, status_trail)
        except QualityCheckFailedError:
            raise
        except Exception as e:
            raise self._wrap(e, None) from e

    def record(self, content_id: int, result: QualityResult) -> QualityCheckRecord:
        """Store the audit record of a pre-create approval.

        Raises:
            QualityCheckRecordError: If the record could not be stored
        """
        service = self.require_service()
        try:
            record = service.record_quality_check(content_id, result, "full")
        except Exception as e:
            raise QualityCheckRecordError(
                f"Failed to record quality check: {e}",
                {"content_id": content_id, "cause": type(e).__name__},
            ) from e
        if record is None or record.quality_check_id is None:
            raise QualityCheckRecordError(
                "Failed to record quality check: no quality check id returned",
                {"content_id": content_id},
            )
        return record

    @staticmethod
    def _has_check_id(content: Content) -> bool:
        return bool(content.quality_check_data and content.quality_check_data.get("quality_check_id") is not None)

    @staticmethod
    def _wrap(error: Exception, content_id: Optional[int]) -> QualityCheckFailedError:
        details = {"content_id": content_id, "cause": type(error).__name__}
        if isinstance(error, ContentStudioError):
            details["cause_code"] = error.code
        message = str(error)
        if not message.startswith("Content failed quality check"):
            message = f"Quality check failed: {message}"
        return QualityCheckFailedError(message, details)
