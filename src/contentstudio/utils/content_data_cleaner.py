"""Strip redundant fields from content payloads before they are stored.

Topic, skill and language details already live on the topic and course rows,
so snapshots and audio updates keep only the fields needed for display and
playback.
"""

import logging
from typing import Any, Dict

from contentstudio.errors import ContentValidationError
from contentstudio.models.content import BaseContentData, ContentType

logger = logging.getLogger(__name__)

AUDIO_FIELDS = ("audioUrl", "audioVoice", "audioFormat", "audioDuration")
PRESENTATION_METADATA_FIELDS = (
    "generated_at",
    "source",
    "audience",
    "language",
    "deckId",
    "embedUrl",
)


def _copy_audio_fields(source: Dict[str, Any], target: Dict[str, Any]) -> None:
    for field in AUDIO_FIELDS:
        value = source.get(field)
        if field == "audioDuration":
            if value is not None:
                target[field] = value
        elif value:
            target[field] = value


def clean_text_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep text and present audio fields; drop metadata and audioText."""
    cleaned: Dict[str, Any] = {"text": data.get("text")}
    _copy_audio_fields(data, cleaned)
    return cleaned


def clean_code_data(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {"code": data.get("code")}
    if data.get("language"):
        cleaned["language"] = data["language"]
    if data.get("explanation"):
        cleaned["explanation"] = data["explanation"]

    metadata = data.get("metadata")
    if isinstance(metadata, dict) and metadata.get("programming_language"):
        cleaned["metadata"] = {"programming_language": metadata["programming_language"]}
    return cleaned


def clean_presentation_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep the stored file reference and essential metadata.

    Raises:
        ContentValidationError: If the presentation still points at an external gamma.app URL
    """
    cleaned: Dict[str, Any] = {}
    if data.get("format"):
        cleaned["format"] = data["format"]

    presentation_url = data.get("presentationUrl")
    if presentation_url:
        if "gamma.app" in presentation_url:
            raise ContentValidationError(
                "Invalid presentation URL in content data: External Gamma URL detected. "
                "All presentations must be stored in managed storage.",
                {"presentationUrl": presentation_url},
            )
        cleaned["presentationUrl"] = presentation_url

    if data.get("storagePath"):
        cleaned["storagePath"] = data["storagePath"]

    metadata = data.get("metadata")
    if isinstance(metadata, dict):
        essential = {key: metadata[key] for key in PRESENTATION_METADATA_FIELDS if metadata.get(key)}
        if essential:
            cleaned["metadata"] = essential
    return cleaned


def clean_audio_data(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    _copy_audio_fields(data, cleaned)
    return cleaned


def clean_content_data(content_data: Any, content_type: ContentType) -> Any:
    """Clean a payload according to its content type.

    Args:
        content_data: Payload as a dict or variant model (other values are returned unchanged)
        content_type: Canonical content type

    Returns:
        Cleaned payload dict
    """
    if isinstance(content_data, BaseContentData):
        content_data = content_data.to_payload()
    if not isinstance(content_data, dict):
        return content_data

    if content_type == ContentType.TEXT:
        return clean_text_data(content_data)
    if content_type == ContentType.CODE:
        return clean_code_data(content_data)
    if content_type == ContentType.PRESENTATION:
        return clean_presentation_data(content_data)
    if content_type == ContentType.AUDIO:
        return clean_audio_data(content_data)

    logger.debug(f"No cleaning rules for content type {content_type}, keeping payload as-is")
    return dict(content_data)
