"""Attach narration audio to approved text content.

Audio is a convenience, never a requirement: a failed synthesis leaves the
content without audio but the submission still succeeds.
"""

import logging
from typing import Optional

from contentstudio.constants import (
    DEFAULT_LANGUAGE,
    MAX_AUDIO_TEXT_LENGTH,
    TTS_FORMAT,
    TTS_MODEL,
    TTS_VOICE,
)
from contentstudio.errors import ContentValidationError
from contentstudio.interfaces import AudioGenerationService, ContentRepository, CourseRepository, TopicRepository
from contentstudio.models.content import Content, ContentType
from contentstudio.models.status_trail import StatusTrail
from contentstudio.utils.content_data_cleaner import clean_content_data
from contentstudio.utils.language_utils import normalize_language_code, resolve_topic_language
from contentstudio.utils.text_extraction import extract_audio_text

module_logger = logging.getLogger(__name__)


class AudioAttachment:
    """Generate and store narration for text content."""

    def __init__(
        self,
        audio_service: Optional[AudioGenerationService],
        content_repository: ContentRepository,
        topic_repository: Optional[TopicRepository] = None,
        course_repository: Optional[CourseRepository] = None,
        voice: str = TTS_VOICE,
        model: str = TTS_MODEL,
        audio_format: str = TTS_FORMAT,
        logger: Optional[logging.Logger] = None,
    ):
        self.audio_service = audio_service
        self.content_repository = content_repository
        self.topic_repository = topic_repository
        self.course_repository = course_repository
        self.voice = voice
        self.model = model
        self.audio_format = audio_format
        self.logger = logger or module_logger

    def wants_audio(self, content: Content) -> bool:
        """Text content without audio, with text to narrate and a configured backend."""
        if self.audio_service is None or content.content_type_id != ContentType.TEXT:
            return False
        if getattr(content.content_data, "audio_url", None):
            return False
        return bool(extract_audio_text(content.content_data))

    def ensure_within_limit(self, content: Content) -> None:
        """Reject narration text over the limit before anything is written.

        Raises:
            ContentValidationError: If the stripped text is longer than 4000 characters
        """
        if not self.wants_audio(content):
            return
        length = len(extract_audio_text(content.content_data))
        if length > MAX_AUDIO_TEXT_LENGTH:
            raise ContentValidationError(
                f"Text content exceeds the {MAX_AUDIO_TEXT_LENGTH} character limit for audio generation",
                {"length": length, "max_length": MAX_AUDIO_TEXT_LENGTH},
            )

    def is_eligible(self, content: Content) -> bool:
        """Audio only for approved content or content that skipped the quality gate."""
        if not self.wants_audio(content):
            return False
        return content.is_approved or not content.requires_quality_gate

    def resolve_language(self, content: Content) -> str:
        """Topic language (or its course's), else ``metadata.language``, else English."""
        if self.topic_repository is not None:
            topic = self.topic_repository.find_by_id(content.topic_id)
            language = resolve_topic_language(topic, self.course_repository)
            if language:
                return language

        metadata = getattr(content.content_data, "metadata", None) or {}
        return normalize_language_code(metadata.get("language")) or DEFAULT_LANGUAGE

    def attach(self, content: Content, status_trail: Optional[StatusTrail] = None) -> Content:
        """Generate audio for ``content`` and store it on the content row.

        Args:
            content: Persisted content
            status_trail: Optional caller-facing progress trail

        Returns:
            The updated content, or ``content`` unchanged when audio was not
            generated
        """
        if not self.is_eligible(content):
            return content

        if status_trail is not None:
            status_trail.push("Generating audio narration...")

        try:
            self.ensure_within_limit(content)
            text = extract_audio_text(content.content_data)
            language = self.resolve_language(content)
            result = self.audio_service.generate_audio(
                text=text,
                voice=self.voice,
                model=self.model,
                format=self.audio_format,
                language=language,
            )
            payload = content.payload()
            payload.update(
                {
                    "audioUrl": result.audio_url,
                    "audioFormat": result.format,
                    "audioDuration": result.duration,
                    "audioVoice": result.voice or self.voice,
                }
            )
            updated = self.content_repository.update(
                content.content_id,
                {"content_data": clean_content_data(payload, ContentType.TEXT)},
            )
        except Exception as e:
            self.logger.warning(f"Audio generation failed for content {content.content_id}, continuing without audio: {e}")
            if status_trail is not None:
                status_trail.push(f"Audio generation skipped: {e}")
            return content

        self.logger.info(f"Attached audio to content {content.content_id}: {result.audio_url}")
        if status_trail is not None:
            status_trail.push("Audio narration attached")
        return updated
