"""Locate the current content of a topic for a content type."""

import logging
from datetime import datetime
from typing import Any, List, Optional

from contentstudio.interfaces import ContentRepository
from contentstudio.models.content import Content
from contentstudio.utils.content_types import content_types_match

module_logger = logging.getLogger(__name__)


def _recency(content: Content) -> datetime:
    return content.updated_at or content.created_at


def find_existing_content(
    repository: ContentRepository,
    topic_id: int,
    candidates: List[Any],
    logger: Optional[logging.Logger] = None,
) -> Optional[Content]:
    """Find the content row a submission would overwrite.

    Each type candidate is tried with ``find_latest_by_topic_and_type``;
    if none hits, all of the topic's content is scanned newest first for a
    loosely matching type. A lookup that raises counts as "not found" for that
    candidate.

    Args:
        repository: Content repository
        topic_id: Owning topic
        candidates: Output of ``resolve_type_candidates``
        logger: Logger override

    Returns:
        Existing content, or None
    """
    log = logger or module_logger

    for candidate in candidates:
        try:
            found = repository.find_latest_by_topic_and_type(topic_id, candidate)
        except Exception as e:
            log.warning(f"Content lookup failed for topic {topic_id}, type {candidate!r}: {e}")
            continue
        if found is not None:
            log.debug(f"Found content {found.content_id} for topic {topic_id} with type {candidate!r}")
            return found

    try:
        all_content = repository.find_all_by_topic_id(topic_id)
    except Exception as e:
        log.warning(f"Fallback content scan failed for topic {topic_id}: {e}")
        return None

    for content in sorted(all_content, key=_recency, reverse=True):
        if any(content_types_match(content.content_type_id, candidate) for candidate in candidates):
            log.info(f"Found content {content.content_id} for topic {topic_id} by fallback scan")
            return content

    return None
