"""Unit tests for character-ratio language detection."""

import pytest

from contentstudio.validators.script_detector import (
    count_script_characters,
    detect_language_by_ratio,
    get_language_ratio_analysis,
)


class TestDetectLanguageByRatio:
    """Test script-based detection of non-Latin languages."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("שלום עולם", "he"),
            ("مرحبا بالعالم", "ar"),
            ("Привет мир", "ru"),
            ("こんにちは世界", "ja"),
            ("你好世界", "zh"),
            ("안녕하세요", "ko"),
        ],
    )
    def test_detects_script(self, text, expected):
        assert detect_language_by_ratio(text) == expected

    def test_persian_reports_as_arabic(self):
        # Arabic block contains the Persian letters and wins the ratio rule
        assert detect_language_by_ratio("سلام دنیا") == "ar"

    def test_latin_text_left_to_ai(self):
        assert detect_language_by_ratio("Hola mundo, esto es una lección") is None

    def test_technical_terms_do_not_outweigh_script(self):
        text = "בשיעור הזה נלמד על Docker, Kubernetes ו-API"
        assert detect_language_by_ratio(text) == "he"

    def test_absolute_count_rule_for_mostly_latin_text(self):
        text = "a" * 100 + "שלום"

        analysis = get_language_ratio_analysis(text)

        assert analysis.ratios["he"] < 0.05
        assert analysis.detected_language == "he"

    def test_below_both_thresholds(self):
        assert detect_language_by_ratio("a" * 100 + "של") is None

    @pytest.mark.parametrize("text", [None, "", "   ", "!!! ???"])
    def test_no_letters(self, text):
        assert detect_language_by_ratio(text) is None


class TestRatioAnalysis:
    def test_denominator_excludes_whitespace_and_punctuation(self):
        analysis = get_language_ratio_analysis("שלום, עולם!")

        assert analysis.total_chars == 8
        assert analysis.counts["he"] == 8
        assert analysis.ratios["he"] == 1.0

    def test_count_script_characters(self):
        counts = count_script_characters("abc אב")

        assert counts["he"] == 2
        assert counts["ar"] == 0
        assert set(counts) == {"ar", "he", "ru", "fa", "ja", "zh", "ko"}
