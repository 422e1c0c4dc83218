"""Tests for text analysis with a mocked OpenAI client."""

import json
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import ProviderError
from app.services.analysis import (
    DEFAULT_CATEGORY,
    DEFAULT_COLOR,
    AnalysisService,
    clean_ai_text,
    color_for,
    fallback_title,
)


def _mock_client(*answers) -> MagicMock:
    """OpenAI client whose chat completions return ``answers`` in order."""
    client = MagicMock()
    client.chat.completions.create.side_effect = [
        MagicMock(choices=[MagicMock(message=MagicMock(content=answer))]) for answer in answers
    ]
    return client


class TestMoodAnalysis:
    """Tests for analyze_mood."""

    @patch("app.services.analysis.AnalysisService._get_client")
    def test_parses_analysis(self, mock_get_client):
        mock_get_client.return_value = _mock_client(
            json.dumps(
                {
                    "detailedAnalysis": "Você parece **aliviado**.",
                    "emotionalTone": "Alívio",
                    "sentimentScore": 35,
                    "dominantEmotions": ["alívio", "calma", "esperança", "gratidão", "cansaço", "paz"],
                    "recommendedActions": ["Descansar"],
                }
            )
        )

        result = AnalysisService().analyze_mood("Finalmente terminei o projeto.", "feliz")

        assert result.detailed_analysis == "Você parece aliviado."
        assert result.emotional_tone == "Alívio"
        assert result.sentiment_score == 35
        assert result.dominant_emotions == ["alívio", "calma", "esperança", "gratidão", "cansaço"]
        assert result.recommended_actions == ["Descansar"]

        kwargs = mock_get_client.return_value.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "feliz" in kwargs["messages"][1]["content"]

    @patch("app.services.analysis.AnalysisService._get_client")
    def test_sentiment_is_clamped(self, mock_get_client):
        mock_get_client.return_value = _mock_client(json.dumps({"sentimentScore": -400}))
        assert AnalysisService().analyze_mood("texto", "triste").sentiment_score == -100

    @patch("app.services.analysis.AnalysisService._get_client")
    def test_non_numeric_sentiment_is_zero(self, mock_get_client):
        mock_get_client.return_value = _mock_client(json.dumps({"sentimentScore": "muito bom"}))
        result = AnalysisService().analyze_mood("texto", "neutro")
        assert result.sentiment_score == 0
        assert result.emotional_tone == "Neutro"
        assert result.dominant_emotions == []

    @patch("app.services.analysis.AnalysisService._get_client")
    def test_malformed_json(self, mock_get_client):
        mock_get_client.return_value = _mock_client("isto não é json")
        with pytest.raises(ProviderError, match="malformed JSON"):
            AnalysisService().analyze_mood("texto", "neutro")

    @patch("app.services.analysis.AnalysisService._get_client")
    def test_provider_failure(self, mock_get_client):
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError("rate limited")
        mock_get_client.return_value = client

        with pytest.raises(ProviderError, match="rate limited"):
            AnalysisService().analyze_mood("texto", "neutro")


class TestCategoryAndTitle:
    """Tests for the local fallbacks around model output."""

    @patch("app.services.analysis.AnalysisService._get_client")
    def test_exact_category(self, mock_get_client):
        mock_get_client.return_value = _mock_client("Trabalho")
        assert AnalysisService().suggest_category("reunião longa") == "Trabalho"

    @patch("app.services.analysis.AnalysisService._get_client")
    def test_category_inside_answer(self, mock_get_client):
        mock_get_client.return_value = _mock_client("Categoria: Sono.")
        assert AnalysisService().suggest_category("dormi mal") == "Sono"

    @patch("app.services.analysis.AnalysisService._get_client")
    def test_unknown_category_falls_back(self, mock_get_client):
        mock_get_client.return_value = _mock_client("Astrologia")
        assert AnalysisService().suggest_category("mercúrio retrógrado") == DEFAULT_CATEGORY

    @patch("app.services.analysis.AnalysisService._get_client")
    def test_title_is_cleaned(self, mock_get_client):
        mock_get_client.return_value = _mock_client('"um novo começo."')
        assert AnalysisService().generate_title("texto") == "Um Novo Começo"

    @patch("app.services.analysis.AnalysisService._get_client")
    def test_unusable_title_falls_back(self, mock_get_client):
        mock_get_client.return_value = _mock_client("?")
        assert AnalysisService().generate_title("texto").startswith("Reflexão de ")

    @patch("app.services.analysis.AnalysisService._get_client")
    def test_tags_and_summary(self, mock_get_client):
        mock_get_client.return_value = _mock_client("trabalho, prazos , , cansaço", "Um dia cheio.")
        service = AnalysisService()
        assert service.extract_tags("texto") == ["trabalho", "prazos", "cansaço"]
        assert service.generate_summary("texto") == "Um dia cheio."


class TestHelpers:
    def test_fallback_title(self):
        assert fallback_title(date(2024, 3, 7)) == "Reflexão de 07 mar"

    def test_clean_ai_text(self):
        assert clean_ai_text("**Olá**   `mundo`\n\n\n\nfim") == "Olá mundo\n\nfim"
        assert clean_ai_text(None) == ""

    def test_color_from_emotion(self):
        assert color_for(["Ansiedade leve"], "feliz") == "#fdba74"

    def test_color_from_mood(self):
        assert color_for([], "Triste") == "#a1a1aa"

    def test_default_color(self):
        assert color_for(["indefinido"], "desconhecido") == DEFAULT_COLOR
