"""Content version history.

Every update of existing content stores a snapshot of the previous version
first, so authors can list, restore and delete earlier versions.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from contentstudio.errors import ContentNotFoundError, ContentValidationError
from contentstudio.interfaces import ContentHistoryRepository, ContentRepository
from contentstudio.models.content import Content, ContentType
from contentstudio.models.history import ContentHistoryEntry
from contentstudio.utils.content_data_cleaner import clean_content_data

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 160


def _truncate(text: str) -> str:
    if len(text) > PREVIEW_LENGTH:
        return f"{text[:PREVIEW_LENGTH - 3]}..."
    return text


def build_preview(content_type: ContentType, content_data: Optional[Dict[str, Any]]) -> str:
    """Short human-readable summary of a payload for version lists."""
    if not content_data:
        return ""

    if content_type == ContentType.TEXT:
        return _truncate(content_data.get("text") or content_data.get("body") or "")
    if content_type == ContentType.PRESENTATION:
        presentation = content_data.get("presentation") or {}
        title = presentation.get("title") or content_data.get("title") or "Slide deck"
        slide_count = content_data.get("slide_count") or len(content_data.get("slides") or [])
        return f"{title} ({slide_count} slides)" if slide_count else title
    if content_type == ContentType.MIND_MAP:
        nodes = content_data.get("nodes")
        if isinstance(nodes, list):
            return f"Mind map with {len(nodes)} nodes"
        return "Mind map structure"
    if content_type == ContentType.CODE:
        return _truncate(content_data.get("code") or content_data.get("snippet") or "")
    if content_type == ContentType.AVATAR_VIDEO:
        return content_data.get("videoUrl") or content_data.get("storageUrl") or "Avatar video"

    return json.dumps(content_data, ensure_ascii=False)[:PREVIEW_LENGTH]


def _sort_key(entry: ContentHistoryEntry):
    return (entry.updated_at or entry.created_at, entry.created_at, entry.history_id or 0)


class ContentHistoryService:
    """Save, list, restore and delete content versions."""

    def __init__(
        self,
        content_repository: ContentRepository,
        history_repository: ContentHistoryRepository,
    ):
        self.content_repository = content_repository
        self.history_repository = history_repository

    def save_version(self, content: Content, force: bool = False) -> ContentHistoryEntry:
        """Store a snapshot of ``content``.

        Args:
            content: Current version of the content
            force: Store even if the latest snapshot has the same payload

        Returns:
            The stored entry, or the latest existing entry when deduplicated

        Raises:
            ContentValidationError: If the content has no topic or type
        """
        if not content.topic_id or content.content_type_id is None:
            raise ContentValidationError(
                "Content must include topic_id and content_type_id for history",
                {"content_id": content.content_id},
            )

        payload = clean_content_data(content.payload(), content.content_type_id)

        if not force:
            entries = self._active_entries(content.topic_id, content.content_type_id)
            if entries and entries[0].content_data == payload:
                logger.debug(
                    f"Skipping duplicate snapshot for topic {content.topic_id} ({content.content_type_id.value})"
                )
                return entries[0]

        now = datetime.now(UTC)
        entry = self.history_repository.create(
            ContentHistoryEntry(
                topic_id=content.topic_id,
                content_type_id=content.content_type_id,
                generation_method_id=content.generation_method_id,
                content_data=payload,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(
            f"Saved history entry {entry.history_id} for topic {content.topic_id} "
            f"({content.content_type_id.value})"
        )
        return entry

    def get_history_by_content(self, content_id: int) -> Dict[str, Any]:
        """Current version plus earlier versions, newest first, each with a preview.

        Raises:
            ContentNotFoundError: If the content does not exist
        """
        content = self.content_repository.find_by_id(content_id)
        if content is None:
            raise ContentNotFoundError(f"Content {content_id} not found", {"content_id": content_id})

        content_type = content.content_type_id
        entries = self._active_entries(content.topic_id, content_type)

        return {
            "content_id": content.content_id,
            "topic_id": content.topic_id,
            "type": content_type.value,
            "current": {
                "history_id": None,
                "version_label": "current",
                "created_at": content.created_at,
                "updated_at": content.updated_at,
                "preview": build_preview(content_type, content.payload()),
                "content_data": content.payload(),
                "generation_method_id": content.generation_method_id,
            },
            "versions": [
                {
                    "history_id": entry.history_id,
                    "created_at": entry.created_at,
                    "updated_at": entry.updated_at or entry.created_at,
                    "preview": build_preview(content_type, entry.content_data),
                    "content_data": entry.content_data,
                    "generation_method_id": entry.generation_method_id,
                }
                for entry in entries
            ],
        }

    def restore_version(self, history_id: int) -> Content:
        """Make a historical version the active content.

        The current version is snapshotted first. If the content row no
        longer exists it is recreated from the history entry. The restored
        entry is then soft-deleted since it is now the active version.

        Raises:
            ContentNotFoundError: If the history entry does not exist
        """
        entry = self.history_repository.find_by_id(history_id)
        if entry is None or entry.is_deleted:
            raise ContentNotFoundError(f"History entry {history_id} not found", {"history_id": history_id})

        current = self.content_repository.find_latest_by_topic_and_type(entry.topic_id, entry.content_type_id)
        if current is None:
            logger.info(
                f"No content for topic {entry.topic_id} ({entry.content_type_id.value}), "
                f"recreating from history entry {history_id}"
            )
            restored = self.content_repository.create(
                Content(
                    topic_id=entry.topic_id,
                    content_type_id=entry.content_type_id,
                    generation_method_id=entry.generation_method_id,
                    content_data=entry.content_data,
                )
            )
        else:
            self.save_version(current, force=True)
            restored = self.content_repository.update(
                current.content_id, {"content_data": entry.content_data}
            )
            logger.info(f"Restored content {current.content_id} from history entry {history_id}")

        try:
            self.history_repository.soft_delete(history_id)
        except Exception as e:
            logger.warning(f"Failed to archive restored history entry {history_id}: {e}")

        return restored

    def delete_version(self, history_id: int) -> None:
        self.history_repository.soft_delete(history_id)
        logger.info(f"Deleted history entry {history_id}")

    def _active_entries(self, topic_id: int, content_type: ContentType) -> List[ContentHistoryEntry]:
        entries = self.history_repository.find_by_topic_and_type(topic_id, content_type)
        active = [entry for entry in entries if not entry.is_deleted]
        return sorted(active, key=_sort_key, reverse=True)
