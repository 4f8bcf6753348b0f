"""
JSON file store backing the in-memory repositories.

Keeps every table (content, topics, courses, content history, quality checks)
in one JSON file so the command line tools can work across invocations.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from contentstudio.constants import CONTENT_STORE_PATH
from contentstudio.models.content import Content
from contentstudio.models.course import Course, Topic
from contentstudio.models.history import ContentHistoryEntry
from contentstudio.models.quality import QualityCheckRecord
from contentstudio.storage.memory import (
    InMemoryContentHistoryRepository,
    InMemoryContentRepository,
    InMemoryCourseRepository,
    InMemoryQualityCheckRepository,
    InMemoryTopicRepository,
)

logger = logging.getLogger(__name__)


class JsonContentStore:
    """Repositories loaded from and saved to a single JSON file."""

    def __init__(self, store_file: Optional[str | Path] = None):
        """
        Initialize the store and load the file if it exists.

        Args:
            store_file: Path to the JSON file (default: CONTENT_STORE_PATH)
        """
        self.store_file = Path(store_file or CONTENT_STORE_PATH)
        self.content = InMemoryContentRepository()
        self.topics = InMemoryTopicRepository()
        self.courses = InMemoryCourseRepository()
        self.history = InMemoryContentHistoryRepository()
        self.quality_checks = InMemoryQualityCheckRepository()
        self.load()

    def load(self) -> None:
        """Load all tables from the store file."""
        if not self.store_file.exists():
            logger.info(f"Store file not found: {self.store_file}. Starting with an empty store.")
            return

        try:
            with open(self.store_file, "r", encoding="utf-8") as f:
                data: Dict[str, Any] = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse store file {self.store_file}: {e}")
            raise

        for course in data.get("courses", []):
            self.courses.add(Course(**course))
        for topic in data.get("topics", []):
            self.topics.add(Topic(**topic))
        self.content.load(Content.model_validate(row) for row in data.get("content", []))
        self.history.load(ContentHistoryEntry(**entry) for entry in data.get("content_history", []))
        self.quality_checks.load(QualityCheckRecord(**record) for record in data.get("quality_checks", []))

        logger.info(
            f"Loaded store {self.store_file}: {len(data.get('content', []))} content rows, "
            f"{len(data.get('topics', []))} topics, {len(data.get('content_history', []))} history entries"
        )

    def save(self) -> None:
        """Write all tables to the store file."""
        data = {
            "courses": [course.model_dump(mode="json") for course in self.courses.all()],
            "topics": [topic.model_dump(mode="json") for topic in self.topics.all()],
            "content": [row.to_record() for row in self.content.all()],
            "content_history": [entry.model_dump(mode="json") for entry in self.history.all()],
            "quality_checks": [record.model_dump(mode="json") for record in self.quality_checks.all()],
        }

        self.store_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_file = self.store_file.with_suffix(self.store_file.suffix + ".tmp")
        with open(tmp_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)
        tmp_file.replace(self.store_file)

        logger.info(f"Saved store to {self.store_file}")
