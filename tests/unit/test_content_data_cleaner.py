"""Unit tests for payload cleaning before storage."""

import pytest

from contentstudio.errors import ContentValidationError
from contentstudio.models.content import ContentType
from contentstudio.utils.content_data_cleaner import clean_content_data


class TestCleanContentData:
    def test_text_keeps_audio_fields_only_when_present(self):
        data = {
            "text": "Lesson",
            "audioUrl": "https://cdn/a.mp3",
            "audioDuration": 0,
            "audioVoice": "",
            "audioText": "Lesson",
            "metadata": {"topic": "Networks"},
        }

        cleaned = clean_content_data(data, ContentType.TEXT)

        assert cleaned == {"text": "Lesson", "audioUrl": "https://cdn/a.mp3", "audioDuration": 0}

    def test_code_keeps_programming_language(self):
        data = {
            "code": "fn main() {}",
            "language": "rust",
            "explanation": "Entry point",
            "metadata": {"programming_language": "rust", "skills": ["x"]},
        }

        cleaned = clean_content_data(data, ContentType.CODE)

        assert cleaned == {
            "code": "fn main() {}",
            "language": "rust",
            "explanation": "Entry point",
            "metadata": {"programming_language": "rust"},
        }

    def test_presentation_keeps_essential_metadata(self):
        data = {
            "format": "pdf",
            "presentationUrl": "https://storage.example.com/deck.pdf",
            "storagePath": "decks/deck.pdf",
            "metadata": {"language": "es", "deckId": "abc", "topic": "drop me"},
        }

        cleaned = clean_content_data(data, ContentType.PRESENTATION)

        assert cleaned["metadata"] == {"language": "es", "deckId": "abc"}
        assert cleaned["storagePath"] == "decks/deck.pdf"

    def test_presentation_rejects_external_gamma_url(self):
        with pytest.raises(ContentValidationError, match="External Gamma URL"):
            clean_content_data({"presentationUrl": "https://gamma.app/docs/xyz"}, ContentType.PRESENTATION)

    def test_audio(self):
        data = {"audioUrl": "https://cdn/a.mp3", "audioFormat": "mp3", "text": "dropped"}
        assert clean_content_data(data, ContentType.AUDIO) == {"audioUrl": "https://cdn/a.mp3", "audioFormat": "mp3"}

    def test_other_types_copied(self):
        data = {"nodes": [{"label": "Root"}], "edges": []}

        cleaned = clean_content_data(data, ContentType.MIND_MAP)

        assert cleaned == data
        assert cleaned is not data

    def test_non_dict_returned_unchanged(self):
        assert clean_content_data("raw", ContentType.TEXT) == "raw"
