"""Pydantic models for content items and their per-format payloads.

The ``content_data`` payload is the wire format shared with the persistence
layer and the front end, so field aliases keep its camelCase keys and unknown
keys are preserved on every variant.
"""

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============================================================================
# Enums
# ============================================================================


class ContentType(str, Enum):
    """Lesson content format."""

    TEXT = "text"
    CODE = "code"
    PRESENTATION = "presentation"
    AUDIO = "audio"
    MIND_MAP = "mind_map"
    AVATAR_VIDEO = "avatar_video"

    @property
    def type_id(self) -> int:
        """Numeric id used by the persistence layer."""
        return _CONTENT_TYPE_IDS[self]

    @classmethod
    def from_identifier(cls, value: Any) -> "ContentType":
        """Normalize a numeric id, numeric string or name to a content type.

        Raises:
            ValueError: If the identifier does not name a known content type
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool) or value is None:
            raise ValueError(f"Invalid content type identifier: {value!r}")

        if isinstance(value, (int, float)):
            if value == int(value) and int(value) in _CONTENT_TYPES_BY_ID:
                return _CONTENT_TYPES_BY_ID[int(value)]
            raise ValueError(f"Unknown content type id: {value}")

        text = str(value).strip().lower()
        if text.isdigit() and int(text) in _CONTENT_TYPES_BY_ID:
            return _CONTENT_TYPES_BY_ID[int(text)]
        if text in _CONTENT_TYPE_ALIASES:
            return _CONTENT_TYPE_ALIASES[text]

        raise ValueError(
            f"Unknown content type: '{value}'. "
            f"Supported: {', '.join(t.value for t in cls)}"
        )


_CONTENT_TYPE_IDS = {
    ContentType.TEXT: 1,
    ContentType.CODE: 2,
    ContentType.PRESENTATION: 3,
    ContentType.AUDIO: 4,
    ContentType.MIND_MAP: 5,
    ContentType.AVATAR_VIDEO: 6,
}
_CONTENT_TYPES_BY_ID = {type_id: ctype for ctype, type_id in _CONTENT_TYPE_IDS.items()}
_CONTENT_TYPE_ALIASES = {
    **{ctype.value: ctype for ctype in ContentType},
    # Legacy names still stored in older rows
    "text_audio": ContentType.TEXT,
    "slides": ContentType.PRESENTATION,
}


class GenerationMethod(str, Enum):
    """Provenance of a content item."""

    MANUAL = "manual"
    MANUAL_EDITED = "manual_edited"
    AI_ASSISTED = "ai_assisted"

    @property
    def requires_quality_gate(self) -> bool:
        """Manually authored content must pass the language and quality gates."""
        return self in (GenerationMethod.MANUAL, GenerationMethod.MANUAL_EDITED)

    @classmethod
    def from_identifier(cls, value: Any) -> "GenerationMethod":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for method in cls:
            if method.value == text:
                return method
        raise ValueError(
            f"Unknown generation method: '{value}'. "
            f"Supported: {', '.join(m.value for m in cls)}"
        )


class QualityCheckStatus(str, Enum):
    """Outcome of the quality gate (None means no check was required)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ============================================================================
# content_data variants
# ============================================================================


class BaseContentData(BaseModel):
    """Common behaviour for all content payloads."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        """Serialize back to the wire format (camelCase keys, no empty fields)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TextContentData(BaseContentData):
    """Lesson text with optional narration audio."""

    text: Optional[str] = None
    audio_url: Optional[str] = Field(None, alias="audioUrl")
    audio_format: Optional[str] = Field(None, alias="audioFormat")
    audio_duration: Optional[float] = Field(None, alias="audioDuration")
    audio_voice: Optional[str] = Field(None, alias="audioVoice")
    metadata: Optional[Dict[str, Any]] = None


class CodeContentData(BaseContentData):
    """Code sample; only the explanation is checked for language."""

    code: Optional[str] = None
    language: Optional[str] = Field(None, description="Programming language")
    explanation: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class PresentationContentData(BaseContentData):
    """Slide deck stored as a file plus optional structured slides."""

    format: Optional[str] = None
    presentation_url: Optional[str] = Field(None, alias="presentationUrl")
    storage_path: Optional[str] = Field(None, alias="storagePath")
    slides: Optional[List[Dict[str, Any]]] = None
    metadata: Optional[Dict[str, Any]] = None


class AudioContentData(BaseContentData):
    """Standalone audio lesson."""

    audio_url: Optional[str] = Field(None, alias="audioUrl")
    audio_format: Optional[str] = Field(None, alias="audioFormat")
    audio_duration: Optional[float] = Field(None, alias="audioDuration")
    audio_voice: Optional[str] = Field(None, alias="audioVoice")
    text: Optional[str] = None


class MindMapContentData(BaseContentData):
    """Mind map graph."""

    nodes: List[Dict[str, Any]] = Field(default_factory=list)
    edges: List[Dict[str, Any]] = Field(default_factory=list)


class AvatarVideoContentData(BaseContentData):
    """Narrated avatar video."""

    script: Optional[str] = None
    text: Optional[str] = None
    video_url: Optional[str] = Field(None, alias="videoUrl")
    storage_url: Optional[str] = Field(None, alias="storageUrl")


ContentData = Union[
    TextContentData,
    CodeContentData,
    PresentationContentData,
    AudioContentData,
    MindMapContentData,
    AvatarVideoContentData,
]

CONTENT_DATA_MODELS = {
    ContentType.TEXT: TextContentData,
    ContentType.CODE: CodeContentData,
    ContentType.PRESENTATION: PresentationContentData,
    ContentType.AUDIO: AudioContentData,
    ContentType.MIND_MAP: MindMapContentData,
    ContentType.AVATAR_VIDEO: AvatarVideoContentData,
}


def parse_content_data(raw: Any, content_type: ContentType) -> BaseContentData:
    """Build the payload variant for a content type.

    Args:
        raw: Payload as a dict, JSON string, or an existing variant
        content_type: Canonical content type

    Returns:
        Variant model matching the content type
    """
    model = CONTENT_DATA_MODELS[content_type]
    if isinstance(raw, model):
        return raw
    if isinstance(raw, BaseContentData):
        raw = raw.to_payload()
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            raw = {"text": raw}
    if not isinstance(raw, dict):
        raise ValueError("content_data must be an object")
    return model.model_validate(raw)


# ============================================================================
# Content
# ============================================================================


class Content(BaseModel):
    """One authored or generated artifact of a specific format for a topic."""

    content_id: Optional[int] = Field(None, description="Null until first persisted")
    topic_id: int = Field(..., gt=0, description="Owning topic")
    content_type_id: ContentType
    content_data: ContentData
    generation_method_id: GenerationMethod = GenerationMethod.MANUAL
    quality_check_status: Optional[QualityCheckStatus] = None
    quality_check_data: Optional[Dict[str, Any]] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Progress narrative returned to the caller, never persisted
    status_messages: List[Dict[str, str]] = Field(default_factory=list, exclude=True)

    @field_validator("content_type_id", mode="before")
    @classmethod
    def normalize_content_type(cls, v: Any) -> ContentType:
        return ContentType.from_identifier(v)

    @field_validator("generation_method_id", mode="before")
    @classmethod
    def normalize_generation_method(cls, v: Any) -> GenerationMethod:
        if v is None:
            return GenerationMethod.MANUAL
        return GenerationMethod.from_identifier(v)

    @model_validator(mode="before")
    @classmethod
    def parse_payload_for_type(cls, values: Any) -> Any:
        """Parse content_data into the variant selected by content_type_id."""
        if not isinstance(values, dict):
            return values
        raw = values.get("content_data")
        if raw is None or values.get("content_type_id") is None:
            return values
        try:
            content_type = ContentType.from_identifier(values["content_type_id"])
        except ValueError:
            # Reported by the field validator
            return values
        return {**values, "content_data": parse_content_data(raw, content_type)}

    @property
    def requires_quality_gate(self) -> bool:
        return self.generation_method_id.requires_quality_gate

    @property
    def is_approved(self) -> bool:
        return self.quality_check_status == QualityCheckStatus.APPROVED

    def payload(self) -> Dict[str, Any]:
        """content_data in wire format."""
        return self.content_data.to_payload()

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready representation used by stores and the CLI."""
        record = self.model_dump(mode="json")
        record["content_data"] = self.payload()
        return record
