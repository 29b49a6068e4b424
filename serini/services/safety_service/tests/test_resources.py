"""Tests for crisis resources and language detection."""
import pytest

from serini.services.safety_service.resources import (
    CHAT_BLOCKED_MESSAGE,
    CHAT_FALLBACK_MESSAGE,
    CRISIS_RESPONSE,
    MALAYSIA_HOTLINES,
    chat_fallback_message,
    crisis_response,
    detect_language,
    hotlines_payload,
)


class TestCannedMessages:
    """Every canned message must carry the 24/7 hotlines in both languages."""

    @pytest.mark.parametrize("messages", [CRISIS_RESPONSE, CHAT_BLOCKED_MESSAGE, CHAT_FALLBACK_MESSAGE])
    @pytest.mark.parametrize("language", ["en", "ms"])
    def test_hotlines_present(self, messages, language):
        text = messages[language]

        assert "15999" in text
        assert "03-7956 8145" in text

    def test_crisis_response_includes_emergency_number(self):
        assert "999" in CRISIS_RESPONSE["en"]
        assert "Perkhidmatan Kecemasan" in CRISIS_RESPONSE["ms"]

    def test_unknown_language_falls_back_to_english(self):
        assert crisis_response("fr") == CRISIS_RESPONSE["en"]
        assert chat_fallback_message("zz") == CHAT_FALLBACK_MESSAGE["en"]

    def test_hotlines_sorted_by_priority(self):
        payload = hotlines_payload()

        assert [h["number"] for h in payload] == ["15999", "03-7956 8145", "999", "03-7932 1740"]
        assert payload[2]["nameMs"] == "Perkhidmatan Kecemasan"
        assert len(MALAYSIA_HOTLINES) == 4


class TestDetectLanguage:
    """detect_language() picks the canned message language."""

    @pytest.mark.parametrize("text", [
        "I want to kill myself",
        "I feel a bit tired lately",
        "hello",
        "",
    ])
    def test_english(self, text):
        assert detect_language(text) == "en"

    @pytest.mark.parametrize("text", [
        "Saya rasa nak bunuh diri",
        "saya tidak boleh tidur dan rasa sangat sedih",
        "tolong saya",
    ])
    def test_malay(self, text):
        assert detect_language(text) == "ms"

    def test_non_string(self):
        assert detect_language(None) == "en"
