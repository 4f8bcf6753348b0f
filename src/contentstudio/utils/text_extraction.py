"""Text extraction from content payloads.

Three views of the same payload:
- ``extract_validatable_text``: what the language gate inspects
- ``extract_quality_text``: what the quality judge scores
- ``extract_audio_text``: what gets narrated
"""

import json
from typing import Any, Dict, List, Optional

from contentstudio.models.content import BaseContentData, ContentType


def _as_dict(content_data: Any) -> Dict[str, Any]:
    if isinstance(content_data, BaseContentData):
        return content_data.to_payload()
    if isinstance(content_data, str):
        try:
            parsed = json.loads(content_data)
        except json.JSONDecodeError:
            return {"text": content_data}
        return parsed if isinstance(parsed, dict) else {"text": content_data}
    if isinstance(content_data, dict):
        return content_data
    return {}


def _non_empty(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _metadata_text(data: Dict[str, Any]) -> Optional[str]:
    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        return None
    parts = [metadata.get(key) for key in ("title", "description", "lessonTopic")]
    joined = "\n".join(str(part) for part in parts if part)
    return joined or None


def _node_labels(data: Dict[str, Any]) -> Optional[str]:
    nodes = data.get("nodes")
    if not isinstance(nodes, list):
        return None
    labels: List[str] = []
    for node in nodes:
        if not isinstance(node, dict):
            continue
        node_data = node.get("data") if isinstance(node.get("data"), dict) else {}
        label = node_data.get("label") or node.get("label") or node.get("text")
        if label:
            labels.append(str(label))
    return "\n".join(labels) or None


def _slide_text(slides: Any) -> Optional[str]:
    if not isinstance(slides, list):
        return None
    texts = []
    for slide in slides:
        if not isinstance(slide, dict):
            continue
        text = slide.get("text") or slide.get("title") or slide.get("content") or slide.get("body")
        if text:
            texts.append(str(text))
    joined = "\n".join(texts)
    return joined if joined.strip() else None


def _code_with_explanation(data: Dict[str, Any]) -> Optional[str]:
    code = _non_empty(data.get("code"))
    if code is None:
        return None
    explanation = _non_empty(data.get("explanation"))
    return f"{code}\n\n{explanation}" if explanation else code


def _fallback(data: Dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False)


def extract_validatable_text(content_data: Any, content_type: ContentType) -> Optional[str]:
    """Text the language gate should inspect.

    Code is special: only the explanation is natural language, so code
    without an explanation returns None and the gate is skipped.

    Args:
        content_data: Payload (variant model, dict or JSON string)
        content_type: Canonical content type

    Returns:
        Text to detect, or None when nothing should be checked
    """
    data = _as_dict(content_data)

    if content_type == ContentType.CODE:
        return _non_empty(data.get("explanation"))

    return (
        _non_empty(data.get("text"))
        or _code_with_explanation(data)
        or _metadata_text(data)
        or _node_labels(data)
        or _non_empty(data.get("script"))
        or _fallback(data)
    )


def extract_quality_text(content_data: Any, content_type: ContentType) -> str:
    """Text the quality judge should score (code is judged together with its explanation)."""
    data = _as_dict(content_data)

    text = _non_empty(data.get("text"))
    if text:
        return text

    code_text = _code_with_explanation(data)
    if code_text:
        return code_text

    if content_type == ContentType.PRESENTATION:
        presentation = data.get("presentation") if isinstance(data.get("presentation"), dict) else {}
        slide_text = _slide_text(data.get("slides")) or _slide_text(presentation.get("slides"))
        if slide_text:
            return slide_text

    return (
        _metadata_text(data)
        or _node_labels(data)
        or _non_empty(data.get("script"))
        or _fallback(data)
    )


def extract_audio_text(content_data: Any) -> str:
    """Stripped narration text of a text payload ("" when there is none)."""
    data = _as_dict(content_data)
    text = data.get("text")
    return text.strip() if isinstance(text, str) else ""
