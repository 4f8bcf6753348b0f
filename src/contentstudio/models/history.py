"""Content history snapshot model."""

from datetime import UTC, datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from contentstudio.models.content import ContentType, GenerationMethod


class ContentHistoryEntry(BaseModel):
    """Immutable copy of a content row taken right before it was overwritten."""

    history_id: Optional[int] = None
    topic_id: int
    content_type_id: ContentType
    generation_method_id: Optional[GenerationMethod] = None
    content_data: Dict[str, Any] = Field(default_factory=dict, description="Payload in wire format")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    deleted_at: Optional[datetime] = Field(None, description="Set when the entry is soft deleted")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
