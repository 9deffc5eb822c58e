"""
Unit tests for the guess providers.

The keyword provider runs on real transcripts; the Ollama provider is tested
with requests.post patched out.
"""

from datetime import datetime
from unittest.mock import Mock, patch

import pytest
import requests

from voxfoyer.core.config_manager import ClassifierConfig
from voxfoyer.core.error_handler import ClassificationError
from voxfoyer.intelligence.guess_provider import (
    KeywordGuessProvider,
    OllamaGuessProvider,
    create_guess_provider,
)
from voxfoyer.processors.core.temporal_resolver import TemporalResolver
from tests.fixtures.sample_data import SAMPLE_CHILDREN, SAMPLE_LLM_RESPONSES, SAMPLE_TRANSCRIPTS


class TestKeywordGuessProvider:
    """Test suite for KeywordGuessProvider"""

    @pytest.fixture
    def provider(self):
        return KeywordGuessProvider()

    @pytest.mark.unit
    @pytest.mark.parametrize("sample", SAMPLE_TRANSCRIPTS, ids=lambda s: s["id"])
    def test_sample_transcripts(self, provider, sample):
        """Each sample yields its expected fields"""
        guess = provider.guess(sample["transcript"], SAMPLE_CHILDREN)

        assert guess.category_raw == sample["category"]
        assert guess.child_name_raw == sample["child_name"]
        assert guess.date_raw == sample["date_phrase"]
        assert guess.urgency_raw == sample["urgency"]

    @pytest.mark.unit
    def test_category_confidence_grows_with_hits(self, provider):
        """Confidence is 0.5 plus 0.1 per keyword hit"""
        one_hit = provider.guess("Appeler le dentiste", [])
        two_hits = provider.guess("Inscrire Johan au cours de natation", [])

        assert one_hit.confidence == 0.6
        assert two_hits.confidence == 0.7

    @pytest.mark.unit
    def test_category_confidence_is_capped(self, provider):
        """Many hits never exceed 0.9"""
        guess = provider.guess(
            "Prendre rendez-vous chez le médecin, le dentiste, la pharmacie, "
            "le pédiatre et le vaccin à l'hôpital", []
        )

        assert guess.category_raw == "sante"
        assert guess.confidence == 0.9

    @pytest.mark.unit
    def test_no_keyword_hit(self, provider):
        """Without keywords the category is left for the normalizer"""
        guess = provider.guess("Rappeler mamie", [])

        assert guess.category_raw is None
        assert guess.confidence == 0.3

    @pytest.mark.unit
    def test_tie_keeps_detection_order(self, provider):
        """Health wins over logistics on equal hits"""
        guess = provider.guess("Emmener Emma chez le médecin", SAMPLE_CHILDREN)

        assert guess.category_raw == "sante"

    @pytest.mark.unit
    def test_action_text_is_capitalized(self, provider):
        """Action text is the trimmed transcript with a capital letter"""
        guess = provider.guess("  acheter du pain.  ", [])

        assert guess.action_text == "Acheter du pain"

    @pytest.mark.unit
    def test_date_phrase_uses_reference_instant(self):
        """The date phrase is located relative to the given instant"""
        resolver = Mock(spec=TemporalResolver)
        resolver.find_phrase.return_value = None
        now = datetime(2028, 1, 10, 9, 0)

        KeywordGuessProvider(temporal_resolver=resolver).guess("Payer la cantine", [], now)

        resolver.find_phrase.assert_called_once_with("Payer la cantine", now)

    @pytest.mark.unit
    def test_leap_day_phrase_in_leap_year(self, provider):
        guess = provider.guess("Payer la cantine le 29 février", [], datetime(2028, 1, 10, 9, 0))

        assert guess.date_raw == "le 29 février"


class TestOllamaGuessProvider:
    """Test suite for OllamaGuessProvider"""

    @pytest.fixture
    def provider(self):
        return OllamaGuessProvider(base_url="http://localhost:11434/", model="test-model", timeout=5)

    def _response(self, content):
        response = Mock()
        response.raise_for_status = Mock()
        response.json.return_value = {"response": content, "done": True}
        return response

    @pytest.mark.unit
    def test_guess_posts_to_generate_endpoint(self, provider):
        """The French prompt is sent to /api/generate"""
        with patch("voxfoyer.intelligence.guess_provider.requests.post") as mock_post:
            mock_post.return_value = self._response(SAMPLE_LLM_RESPONSES["plain_json"])

            guess = provider.guess("Emmener Emma chez le médecin vendredi prochain", ["Emma"])

        args, kwargs = mock_post.call_args
        assert args[0] == "http://localhost:11434/api/generate"
        assert kwargs["json"]["model"] == "test-model"
        assert kwargs["json"]["stream"] is False
        assert "Enfants du foyer: Emma" in kwargs["json"]["system"]
        assert "vendredi prochain" in kwargs["json"]["prompt"]
        assert kwargs["timeout"] == 5

        assert guess.action_text == "Emmener Emma chez le médecin"
        assert guess.child_name_raw == "Emma"
        assert guess.date_raw == "vendredi prochain"
        assert guess.category_raw == "sante"
        assert guess.confidence == 0.92

    @pytest.mark.unit
    def test_parse_fenced_json(self, provider):
        """JSON inside a fenced block is extracted"""
        guess = provider.parse_response(SAMPLE_LLM_RESPONSES["fenced_json"])

        assert guess.action_text == "Payer la cantine"
        assert guess.child_name_raw is None
        assert guess.urgency_raw == "haute"

    @pytest.mark.unit
    def test_parse_french_keys(self, provider):
        """French field names and string confidences are accepted"""
        guess = provider.parse_response(SAMPLE_LLM_RESPONSES["french_keys"])

        assert guess.child_name_raw == "Johan"
        assert guess.category_raw == "École"
        assert guess.confidence == 0.8

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["NaN", '"nan"', "Infinity", '"-inf"'])
    def test_non_finite_confidence_is_ignored(self, provider, raw):
        """NaN or infinite confidences never become full certainty"""
        guess = provider.parse_response(
            '{"action": "Acheter du pain", "category": "quotidien", "confidence": %s}' % raw
        )

        assert guess.confidence is None

    @pytest.mark.unit
    def test_non_numeric_confidence_is_ignored(self, provider):
        """An unusable confidence is dropped, not fatal"""
        guess = provider.parse_response('{"action": "Test", "confidence": "haute"}')

        assert guess.confidence is None

    @pytest.mark.unit
    def test_invalid_json_raises(self, provider):
        """Non-JSON answers raise ClassificationError"""
        with pytest.raises(ClassificationError):
            provider.parse_response(SAMPLE_LLM_RESPONSES["not_json"])

    @pytest.mark.unit
    def test_json_array_raises(self, provider):
        """Only JSON objects are accepted"""
        with pytest.raises(ClassificationError):
            provider.parse_response("[1, 2]")

    @pytest.mark.unit
    def test_connection_error_raises(self, provider):
        """Transport failures raise ClassificationError"""
        with patch("voxfoyer.intelligence.guess_provider.requests.post",
                   side_effect=requests.ConnectionError("refused")):
            with pytest.raises(ClassificationError) as exc_info:
                provider.guess("Acheter du pain", [])

        assert "refused" in str(exc_info.value)

    @pytest.mark.unit
    def test_empty_response_raises(self, provider):
        """An empty model answer raises ClassificationError"""
        with patch("voxfoyer.intelligence.guess_provider.requests.post") as mock_post:
            mock_post.return_value = self._response("")

            with pytest.raises(ClassificationError):
                provider.guess("Acheter du pain", [])


class TestCreateGuessProvider:
    """Test suite for provider selection from configuration"""

    @pytest.mark.unit
    def test_keyword_provider_by_default(self):
        assert isinstance(create_guess_provider(ClassifierConfig()), KeywordGuessProvider)

    @pytest.mark.unit
    def test_ollama_provider(self):
        config = ClassifierConfig(provider="ollama", model="llama3.1", base_url="http://ollama:11434/")

        provider = create_guess_provider(config)

        assert isinstance(provider, OllamaGuessProvider)
        assert provider.model == "llama3.1"
        assert provider.base_url == "http://ollama:11434"
