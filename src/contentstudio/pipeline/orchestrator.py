"""
Content Mutation Orchestrator
=============================

Runs one content submission through the gated steps and decides whether it
becomes the new version of the topic's content, is reverted to the previous
version, or is discarded:

    resolve type -> find existing -> language gate -> history snapshot
    -> persist -> quality gate -> audio

Manual and manual-edited submissions pass the language and quality gates;
AI-assisted drafts skip both. Every failure after a write runs its
compensation before the error propagates.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from contentstudio.errors import (
    ContentStudioError,
    ContentValidationError,
    HistoryArchiveError,
    MissingCollaboratorError,
    QualityCheckFailedError,
    QualityCheckRecordError,
)
from contentstudio.generators.audio_attachment import AudioAttachment
from contentstudio.interfaces import (
    AudioGenerationService,
    ContentHistoryService,
    ContentRepository,
    CourseRepository,
    QualityCheckService,
    TopicRepository,
)
from contentstudio.models.content import Content, ContentType, GenerationMethod, QualityCheckStatus
from contentstudio.models.status_trail import StatusTrail
from contentstudio.pipeline.compensation import DeleteCreatedContent, RestorePreviousVersion, run_compensation
from contentstudio.pipeline.lookup import find_existing_content
from contentstudio.pipeline.quality_gate import QualityGate
from contentstudio.utils.content_types import resolve_type_candidates
from contentstudio.utils.logging_config import pipeline_stage_logger
from contentstudio.validators.language_detector import LanguageDetector
from contentstudio.validators.language_gate import LanguageGate

module_logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("topic_id", "content_type_id", "content_data")


class MutationOrchestrator:
    """Create or update a topic's content for one content type."""

    def __init__(
        self,
        content_repository: ContentRepository,
        topic_repository: Optional[TopicRepository] = None,
        course_repository: Optional[CourseRepository] = None,
        quality_service: Optional[QualityCheckService] = None,
        history_service: Optional[ContentHistoryService] = None,
        audio_service: Optional[AudioGenerationService] = None,
        language_detector: Optional[LanguageDetector] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Wire the pipeline collaborators.

        Args:
            content_repository: Content persistence
            topic_repository: Topic lookup; without it the language gate is skipped
            course_repository: Course lookup for topics without a language
            quality_service: Required for manual submissions
            history_service: Required when a submission overwrites existing content
            audio_service: Optional narration backend for text content
            language_detector: Detector used by the language gate
            logger: Operator logger (the status trail is separate)
        """
        self.content_repository = content_repository
        self.topic_repository = topic_repository
        self.history_service = history_service
        self.logger = logger or module_logger

        self.language_gate = (
            LanguageGate(topic_repository, course_repository, language_detector, self.logger)
            if topic_repository is not None
            else None
        )
        self.quality_gate = QualityGate(content_repository, quality_service, self.logger)
        self.audio = AudioAttachment(
            audio_service, content_repository, topic_repository, course_repository, logger=self.logger
        )

    def submit(self, submission: Mapping[str, Any], generate_audio: bool = True) -> Content:
        """Run a submission through the pipeline.

        Args:
            submission: ``topic_id``, ``content_type_id`` (id or name),
                ``content_data`` and optional ``generation_method_id``
            generate_audio: Attach narration to eligible text content

        Returns:
            Persisted content with ``status_messages`` set

        Raises:
            ContentValidationError: Malformed submission or narration text too long
            LanguageGateError: Language mismatch or failed detection
            HistoryArchiveError: Previous version could not be archived
            QualityCheckFailedError: Content rejected (changes already rolled back)
            QualityCheckRecordError: Approval could not be recorded (created row removed)
            MissingCollaboratorError: A required service is not configured
        """
        trail = StatusTrail()
        try:
            content = self._run(submission, trail, generate_audio)
        except ContentStudioError as e:
            e.status_messages = trail.to_list()
            raise

        trail.push("Content saved successfully")
        content.status_messages = trail.to_list()
        return content

    def _run(self, submission: Mapping[str, Any], trail: StatusTrail, generate_audio: bool) -> Content:
        candidate = self._build_candidate(submission)
        gate_required = candidate.requires_quality_gate
        context = {
            "topic_id": candidate.topic_id,
            "content_type": candidate.content_type_id.value,
            "generation_method": candidate.generation_method_id.value,
        }
        self.logger.info(f"Processing submission: {context}")

        if gate_required:
            self.quality_gate.require_service()
        if generate_audio:
            self.audio.ensure_within_limit(candidate)

        with pipeline_stage_logger("lookup", self.logger, **context):
            candidates = resolve_type_candidates(
                submission["content_type_id"],
                getattr(self.content_repository, "get_content_type_names_by_ids", None),
            )
            existing = find_existing_content(self.content_repository, candidate.topic_id, candidates, self.logger)

        if existing is not None and self.history_service is None:
            raise MissingCollaboratorError(
                "Content history service is required to update existing content",
                {"collaborator": "history_service", "content_id": existing.content_id},
            )

        if gate_required and self.language_gate is not None:
            with pipeline_stage_logger("language_gate", self.logger, **context):
                self.language_gate.validate(candidate, trail)

        if existing is not None:
            persisted = self._update(existing, candidate, gate_required, trail, context)
        else:
            persisted = self._create(candidate, gate_required, trail, context)

        if generate_audio:
            with pipeline_stage_logger("audio", self.logger, **context):
                persisted = self.audio.attach(persisted, trail)

        return persisted

    def _build_candidate(self, submission: Mapping[str, Any]) -> Content:
        missing = [field for field in REQUIRED_FIELDS if submission.get(field) in (None, "")]
        if missing:
            raise ContentValidationError(
                f"Missing required fields: {', '.join(missing)}",
                {"missing_fields": missing},
            )

        try:
            content_type = ContentType.from_identifier(submission["content_type_id"])
        except ValueError as e:
            raise ContentValidationError(str(e), {"content_type_id": submission["content_type_id"]}) from e

        try:
            method = GenerationMethod.from_identifier(submission.get("generation_method_id") or "manual")
        except ValueError as e:
            raise ContentValidationError(
                str(e), {"generation_method_id": submission.get("generation_method_id")}
            ) from e

        try:
            return Content(
                topic_id=submission["topic_id"],
                content_type_id=content_type,
                content_data=submission["content_data"],
                generation_method_id=method,
            )
        except (ValidationError, ValueError) as e:
            raise ContentValidationError(f"Invalid content submission: {e}") from e

    def _update(
        self,
        existing: Content,
        candidate: Content,
        gate_required: bool,
        trail: StatusTrail,
        context: Dict[str, Any],
    ) -> Content:
        with pipeline_stage_logger("history_archive", self.logger, content_id=existing.content_id, **context):
            trail.push("Saving previous version to history...")
            try:
                self.history_service.save_version(existing, force=True)
            except Exception as e:
                raise HistoryArchiveError(
                    f"Failed to archive the previous version: {e}",
                    {"content_id": existing.content_id, "cause": type(e).__name__},
                ) from e

        persisted = self.content_repository.update(
            existing.content_id,
            {
                "content_data": candidate.payload(),
                "generation_method_id": candidate.generation_method_id,
                "quality_check_status": QualityCheckStatus.PENDING if gate_required else None,
                "quality_check_data": None,
            },
        )
        self.logger.info(f"Updated content {existing.content_id}")

        if not gate_required:
            return persisted

        with pipeline_stage_logger("quality_gate", self.logger, content_id=existing.content_id, **context):
            trail.push("Starting quality check...")
            try:
                approved = self.quality_gate.check_update(existing.content_id, trail)
            except QualityCheckFailedError:
                trail.push("Quality check failed, restoring previous version")
                run_compensation(RestorePreviousVersion(self.content_repository, existing), self.logger)
                raise
            trail.push("Quality check completed successfully.")
            return approved

    def _create(
        self,
        candidate: Content,
        gate_required: bool,
        trail: StatusTrail,
        context: Dict[str, Any],
    ) -> Content:
        result = None
        if gate_required:
            with pipeline_stage_logger("quality_gate", self.logger, **context):
                trail.push("Starting quality check...")
                result = self.quality_gate.evaluate_before_create(candidate, trail)
                trail.push("Quality check completed successfully.")

        created = self.content_repository.create(
            candidate.model_copy(
                update={
                    "quality_check_status": QualityCheckStatus.PENDING if gate_required else None,
                    "quality_check_data": None,
                }
            )
        )
        self.logger.info(f"Created content {created.content_id}")

        if not gate_required:
            return created

        with pipeline_stage_logger("quality_record", self.logger, content_id=created.content_id, **context):
            try:
                record = self.quality_gate.record(created.content_id, result)
                return self.content_repository.update(
                    created.content_id,
                    {
                        "quality_check_status": QualityCheckStatus.APPROVED,
                        "quality_check_data": result.to_quality_check_data(record.quality_check_id),
                    },
                )
            except Exception as e:
                run_compensation(DeleteCreatedContent(self.content_repository, created.content_id), self.logger)
                if isinstance(e, QualityCheckRecordError):
                    raise
                raise QualityCheckRecordError(
                    f"Failed to link quality check to content: {e}",
                    {"content_id": created.content_id, "cause": type(e).__name__},
                ) from e
