"""Pydantic models shared across the pipeline."""

from contentstudio.models.audio import AudioResult
from contentstudio.models.content import (
    AudioContentData,
    AvatarVideoContentData,
    BaseContentData,
    CodeContentData,
    Content,
    ContentData,
    ContentType,
    GenerationMethod,
    MindMapContentData,
    PresentationContentData,
    QualityCheckStatus,
    TextContentData,
    parse_content_data,
)
from contentstudio.models.course import Course, Topic
from contentstudio.models.history import ContentHistoryEntry
from contentstudio.models.quality import QualityCheckRecord, QualityEvaluation, QualityResult
from contentstudio.models.status_trail import StatusMessage, StatusTrail

__all__ = [
    "AudioContentData",
    "AudioResult",
    "AvatarVideoContentData",
    "BaseContentData",
    "CodeContentData",
    "Content",
    "ContentData",
    "ContentHistoryEntry",
    "ContentType",
    "Course",
    "GenerationMethod",
    "MindMapContentData",
    "PresentationContentData",
    "QualityCheckRecord",
    "QualityCheckStatus",
    "QualityEvaluation",
    "QualityResult",
    "StatusMessage",
    "StatusTrail",
    "TextContentData",
    "Topic",
    "parse_content_data",
]
