"""
Unit tests for UtteranceAnalyzer.

Tests intent precedence, entity extraction and sentiment scoring.
"""

import sys
sys.path.insert(0, 'backend')

import pytest
from models.conversation import Intent, Sentiment
from models.entities import Budget
from services.utterance_analyzer import UtteranceAnalyzer, tokenize


class TestUtteranceAnalyzer:
    """Test suite for UtteranceAnalyzer."""

    @pytest.fixture
    def analyzer(self):
        """Create an UtteranceAnalyzer instance for testing."""
        return UtteranceAnalyzer()

    # Intent detection

    def test_urgent_beats_everything(self, analyzer):
        """Urgent keywords win even when booking words are present."""
        assert analyzer.detect_intent("Urgent problem with my booking") == Intent.URGENT

    def test_complaint_beats_comparing(self, analyzer):
        assert analyzer.detect_intent("Worst tour, I want to compare refunds") == Intent.COMPLAINT

    def test_comparing(self, analyzer):
        assert analyzer.detect_intent("Compare Goa and Kerala") == Intent.COMPARING

    def test_comparing_vs_requires_spaces(self, analyzer):
        assert analyzer.detect_intent("Goa vs Kerala") == Intent.COMPARING

    def test_booking_beats_browsing(self, analyzer):
        assert analyzer.detect_intent("Show me how to book a trip") == Intent.BOOKING

    def test_browsing(self, analyzer):
        assert analyzer.detect_intent("Show me adventure tours in Goa") == Intent.BROWSING

    def test_support(self, analyzer):
        assert analyzer.detect_intent("Can I speak to someone?") == Intent.SUPPORT

    def test_default_inquiry(self, analyzer):
        assert analyzer.detect_intent("What is the weather like?") == Intent.INQUIRY

    def test_intent_is_case_insensitive(self, analyzer):
        assert analyzer.detect_intent("EMERGENCY!") == Intent.URGENT

    def test_urgent_beats_booking(self, analyzer):
        assert analyzer.detect_intent("this is urgent, I want to book") == Intent.URGENT

    # Sentiment

    def test_positive_sentiment(self, analyzer):
        assert analyzer.analyze_sentiment("This is amazing, I love it") == Sentiment.POSITIVE

    def test_negative_sentiment(self, analyzer):
        assert analyzer.analyze_sentiment("Awful service, I am frustrated") == Sentiment.NEGATIVE

    def test_tie_is_neutral(self, analyzer):
        """Equal positive and negative hits score neutral."""
        assert analyzer.analyze_sentiment("great views but terrible food") == Sentiment.NEUTRAL

    def test_no_hits_is_neutral(self, analyzer):
        assert analyzer.analyze_sentiment("What time does it start?") == Sentiment.NEUTRAL

    # Entities

    def test_full_entity_extraction(self, analyzer):
        entities = analyzer.extract_entities("Show me adventure tours in Goa under ₹15000 for 5 days")

        assert entities.destinations == ["goa"]
        assert entities.budget == Budget(min=None, max=15000)
        assert entities.duration == 5
        assert entities.preferences == ["adventure"]

    def test_unmentioned_fields_are_none(self, analyzer):
        entities = analyzer.extract_entities("hello there")

        assert entities.destinations is None
        assert entities.budget is None
        assert entities.duration is None
        assert entities.preferences is None
        assert entities.is_trivial()

    def test_multiple_destinations_in_gazetteer_order(self, analyzer):
        entities = analyzer.extract_entities("Kerala or Goa?")
        assert entities.destinations == ["goa", "kerala"]

    def test_budget_range_with_prefix(self, analyzer):
        entities = analyzer.extract_entities("between rs 10,000 and rs 20,000")
        assert entities.budget == Budget(min=10000, max=20000)

    def test_budget_range_out_of_order_with_suffix(self, analyzer):
        """A trailing currency word marks both ends of the range."""
        entities = analyzer.extract_entities("from 20000 to 10000 rupees")
        assert entities.budget == Budget(min=10000, max=20000)

    def test_budget_dollar_prefix(self, analyzer):
        entities = analyzer.extract_entities("anything under $500?")
        assert entities.budget == Budget(max=500)

    def test_bare_numbers_are_not_budget(self, analyzer):
        entities = analyzer.extract_entities("a trip for 4 people")
        assert entities.budget is None

    def test_duration_singular_and_hyphenated(self, analyzer):
        assert analyzer.extract_entities("a 7-day trek").duration == 7
        assert analyzer.extract_entities("3 nights in Shimla").duration == 3

    def test_entity_without_duration_unit(self, analyzer):
        assert analyzer.extract_entities("5 people to Manali").duration is None

    def test_budget_ignores_small_unmarked_range_end(self, analyzer):
        """A small number before a marked amount is not a price range."""
        entities = analyzer.extract_entities("₹15000 and 2 adults")
        assert entities.budget == Budget(max=15000)

    def test_duration_in_nights(self, analyzer):
        assert analyzer.extract_entities("a 5 night trip").duration == 5


class TestTokenize:
    """Test suite for keyword tokenization."""

    def test_strips_punctuation_and_short_words(self):
        assert tokenize("How do refunds work?") == ["refunds", "work"]

    def test_custom_min_length(self):
        assert tokenize("Can I cancel?", min_length=1) == ["can", "i", "cancel"]

    def test_empty_text(self):
        assert tokenize("") == []
