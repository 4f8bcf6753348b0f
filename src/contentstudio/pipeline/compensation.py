"""Compensating actions for partially applied submissions.

There is no transaction around the external calls, so each step that writes
registers how to undo itself. Compensation is best effort: its own failure is
logged and the original error is what the caller sees.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from contentstudio.interfaces import ContentRepository
from contentstudio.models.content import Content

module_logger = logging.getLogger(__name__)


class Compensation(ABC):
    """Undo one write."""

    description = "compensation"

    @abstractmethod
    def compensate(self) -> None:
        """Apply the undo; raises if it could not be applied."""


class RestorePreviousVersion(Compensation):
    """Put the pre-update version of a content row back."""

    description = "restore previous version"

    def __init__(self, repository: ContentRepository, previous: Content):
        self.repository = repository
        self.previous = previous

    def compensate(self) -> None:
        self.repository.update(
            self.previous.content_id,
            {
                "content_data": self.previous.payload(),
                "quality_check_status": self.previous.quality_check_status,
                "quality_check_data": self.previous.quality_check_data,
                "generation_method_id": self.previous.generation_method_id,
            },
        )


class DeleteCreatedContent(Compensation):
    """Hard-delete a row created by this submission, retrying once."""

    description = "delete created content"

    def __init__(self, repository: ContentRepository, content_id: int, attempts: int = 2):
        self.repository = repository
        self.content_id = content_id
        self.attempts = attempts

    def compensate(self) -> None:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.attempts + 1):
            try:
                self.repository.delete(self.content_id, hard=True)
                return
            except Exception as e:
                last_error = e
                module_logger.warning(
                    f"Delete of content {self.content_id} failed (attempt {attempt}/{self.attempts}): {e}"
                )
        raise last_error


def run_compensation(compensation: Compensation, logger: Optional[logging.Logger] = None) -> bool:
    """Apply a compensation, logging instead of raising on failure.

    Returns:
        True if the compensation was applied
    """
    log = logger or module_logger
    try:
        compensation.compensate()
    except Exception as e:
        log.error(f"Compensation failed ({compensation.description}): {e}")
        return False
    log.info(f"Compensation applied: {compensation.description}")
    return True
