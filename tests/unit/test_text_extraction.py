"""Unit tests for text extraction from content payloads."""

import json

from contentstudio.models.content import ContentType, parse_content_data
from contentstudio.utils.text_extraction import (
    extract_audio_text,
    extract_quality_text,
    extract_validatable_text,
)


class TestExtractValidatableText:
    """Test the text the language gate inspects."""

    def test_text_field(self):
        assert extract_validatable_text({"text": "Bonjour"}, ContentType.TEXT) == "Bonjour"

    def test_code_uses_explanation_only(self):
        data = {"code": "print('hello')", "explanation": "Imprime un saludo"}
        assert extract_validatable_text(data, ContentType.CODE) == "Imprime un saludo"

    def test_code_without_explanation_is_skipped(self):
        assert extract_validatable_text({"code": "x = 1"}, ContentType.CODE) is None
        assert extract_validatable_text({"code": "x = 1", "explanation": "  "}, ContentType.CODE) is None

    def test_presentation_metadata(self):
        data = {"presentationUrl": "https://storage/deck.pdf", "metadata": {"title": "Redes", "lessonTopic": "TCP"}}
        assert extract_validatable_text(data, ContentType.PRESENTATION) == "Redes\nTCP"

    def test_mind_map_node_labels(self):
        data = {"nodes": [{"data": {"label": "Raíz"}}, {"label": "Hoja"}, "skip"]}
        assert extract_validatable_text(data, ContentType.MIND_MAP) == "Raíz\nHoja"

    def test_avatar_script(self):
        assert extract_validatable_text({"script": "Hola a todos"}, ContentType.AVATAR_VIDEO) == "Hola a todos"

    def test_fallback_to_json(self):
        data = {"audioUrl": "https://cdn/a.mp3"}
        assert json.loads(extract_validatable_text(data, ContentType.AUDIO)) == data

    def test_accepts_variant_models(self):
        data = parse_content_data({"text": "Hallo"}, ContentType.TEXT)
        assert extract_validatable_text(data, ContentType.TEXT) == "Hallo"


class TestExtractQualityText:
    def test_code_with_explanation(self):
        data = {"code": "x = 1", "explanation": "Assigns one"}
        assert extract_quality_text(data, ContentType.CODE) == "x = 1\n\nAssigns one"

    def test_code_without_explanation(self):
        assert extract_quality_text({"code": "x = 1"}, ContentType.CODE) == "x = 1"

    def test_presentation_slides(self):
        data = {"slides": [{"title": "Intro"}, {"content": "Body"}, {}]}
        assert extract_quality_text(data, ContentType.PRESENTATION) == "Intro\nBody"

    def test_nested_presentation_slides(self):
        data = {"presentation": {"slides": [{"text": "One"}, {"body": "Two"}]}}
        assert extract_quality_text(data, ContentType.PRESENTATION) == "One\nTwo"

    def test_json_string_payload(self):
        assert extract_quality_text('{"text": "Lesson"}', ContentType.TEXT) == "Lesson"


class TestExtractAudioText:
    def test_strips_text(self):
        assert extract_audio_text({"text": "  Narrate me  "}) == "Narrate me"

    def test_missing_text(self):
        assert extract_audio_text({"code": "x"}) == ""
        assert extract_audio_text(None) == ""
