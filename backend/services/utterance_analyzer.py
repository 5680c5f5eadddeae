"""
Utterance Analyzer for the TravelBuddy dialogue engine.

This module implements deterministic, lexical analysis of a single user message:
keyword-precedence intent detection, gazetteer/regex entity extraction, and
lexicon-count sentiment scoring.
"""

import logging
import re
import string
from typing import List, Optional, Sequence

from config import MIN_BUDGET_AMOUNT, MIN_KEYWORD_LENGTH
from models.conversation import Intent, Sentiment
from models.entities import Budget, EntitySet

logger = logging.getLogger(__name__)


def tokenize(text: str, min_length: int = MIN_KEYWORD_LENGTH) -> List[str]:
    """
    Split text into lower-cased keyword tokens.

    Tokens are whitespace-separated words with surrounding punctuation removed;
    only tokens of at least min_length characters are kept, in input order.
    """
    tokens = []
    for raw in text.lower().split():
        token = raw.strip(string.punctuation)
        if len(token) >= min_length:
            tokens.append(token)
    return tokens


class UtteranceAnalyzer:
    """
    Stateless intent classifier, entity extractor and sentiment scorer.

    All matching is substring based against fixed keyword sets, so a message
    never fails to analyze: missing matches only leave fields empty.
    """

    # Intent keyword sets, checked in INTENT_PRECEDENCE order
    URGENT_KEYWORDS = (
        "urgent", "emergency", "asap", "immediately", "problem", "issue", "stuck", "help now"
    )
    COMPLAINT_KEYWORDS = (
        "complaint", "complain", "bad", "terrible", "disappointed", "angry", "worst", "unhappy"
    )
    COMPARING_KEYWORDS = (
        "compare", "comparison", "versus", " vs ", "difference between", "which is better", "better than"
    )
    BOOKING_KEYWORDS = (
        "book", "reserve", "booking", "reservation", "schedule", "availability"
    )
    BROWSING_KEYWORDS = (
        "show", "find", "looking for", "recommend", "suggest", "explore", "browse",
        "options", "vacation", "holiday", "getaway"
    )
    SUPPORT_KEYWORDS = (
        "help", "support", "contact", "call", "email", "speak to", "phone"
    )

    INTENT_PRECEDENCE = (
        (Intent.URGENT, URGENT_KEYWORDS),
        (Intent.COMPLAINT, COMPLAINT_KEYWORDS),
        (Intent.COMPARING, COMPARING_KEYWORDS),
        (Intent.BOOKING, BOOKING_KEYWORDS),
        (Intent.BROWSING, BROWSING_KEYWORDS),
        (Intent.SUPPORT, SUPPORT_KEYWORDS),
    )

    # Sentiment lexicons ("frustrat" catches frustrated/frustrating)
    POSITIVE_WORDS = (
        "great", "excellent", "amazing", "wonderful", "love", "happy",
        "perfect", "awesome", "fantastic", "best"
    )
    NEGATIVE_WORDS = (
        "bad", "terrible", "awful", "worst", "hate", "angry",
        "disappointed", "frustrat", "poor", "horrible"
    )

    # Gazetteers
    DESTINATIONS = (
        "goa", "kerala", "rajasthan", "himalayas", "kashmir", "varanasi",
        "agra", "jaipur", "delhi", "mumbai", "udaipur", "shimla",
        "manali", "ladakh", "sikkim", "andaman"
    )
    PREFERENCES = (
        "adventure", "cultural", "beach", "wildlife", "trekking", "spiritual",
        "heritage", "luxury", "family", "romantic", "nature", "honeymoon", "relaxation"
    )

    # A currency marker on either end of a range applies to both amounts (see _extract_budget)
    _CURRENCY_PREFIX = r"(?:₹|\$|\brs\.?|\binr)"
    _CURRENCY_SUFFIX = r"(?:rupees|rs\b\.?|inr\b)"
    BUDGET_PATTERN = re.compile(
        rf"(?P<pre>{_CURRENCY_PREFIX})?\s*(?P<first>\d[\d,]*)"
        rf"(?:\s*(?:to|-|–|and)\s*(?P<mid>{_CURRENCY_PREFIX})?\s*(?P<second>\d[\d,]*))?"
        rf"(?:\s*(?P<post>{_CURRENCY_SUFFIX}))?"
    )
    DURATION_PATTERN = re.compile(r"(\d+)\s*-?\s*(?:days?|nights?)\b")

    def detect_intent(self, text: str) -> Intent:
        """
        Classify the message by keyword precedence.

        Rules, in order (first hit wins):
        1. urgent  2. complaint  3. comparing  4. booking  5. browsing  6. support
        7. Default: inquiry

        Args:
            text: Raw user message

        Returns:
            Detected Intent
        """
        text_lower = text.lower()
        for intent, keywords in self.INTENT_PRECEDENCE:
            if self._contains_any(text_lower, keywords):
                logger.debug(f"Intent: {intent.value} - {text[:50]}")
                return intent

        logger.debug(f"Intent: {Intent.INQUIRY.value} (default) - {text[:50]}")
        return Intent.INQUIRY

    def extract_entities(self, text: str) -> EntitySet:
        """
        Extract destinations, budget, duration and preferences.

        Args:
            text: Raw user message

        Returns:
            EntitySet whose unmentioned fields are None
        """
        text_lower = text.lower()

        destinations = self._matches(text_lower, self.DESTINATIONS)
        preferences = self._matches(text_lower, self.PREFERENCES)

        duration = None
        duration_match = self.DURATION_PATTERN.search(text_lower)
        if duration_match:
            duration = int(duration_match.group(1))

        return EntitySet(
            destinations=destinations or None,
            budget=self._extract_budget(text_lower),
            duration=duration,
            preferences=preferences or None,
        )

    def analyze_sentiment(self, text: str) -> Sentiment:
        """Score sentiment by lexicon hit counts; ties are neutral."""
        text_lower = text.lower()
        positive_count = sum(1 for word in self.POSITIVE_WORDS if word in text_lower)
        negative_count = sum(1 for word in self.NEGATIVE_WORDS if word in text_lower)

        if negative_count > positive_count:
            return Sentiment.NEGATIVE
        if positive_count > negative_count:
            return Sentiment.POSITIVE
        return Sentiment.NEUTRAL

    def _extract_budget(self, text_lower: str) -> Optional[Budget]:
        """
        Collect currency-marked amounts.

        One amount becomes an upper bound; two or more become a min/max range
        regardless of the order they appear in. In a range, an end that carries
        no currency marker of its own counts only if it is at least
        MIN_BUDGET_AMOUNT (so "₹15000 and 2 adults" is not a 2-15000 range).
        """
        amounts: List[int] = []
        for match in self.BUDGET_PATTERN.finditer(text_lower):
            pre, mid, post = match.group("pre"), match.group("mid"), match.group("post")
            if not (pre or mid or post):
                continue

            first = int(match.group("first").replace(",", ""))
            if match.group("second") is None:
                amounts.append(first)
                continue

            second = int(match.group("second").replace(",", ""))
            for value, own_marker in ((first, pre), (second, mid or post)):
                if own_marker or value >= MIN_BUDGET_AMOUNT:
                    amounts.append(value)

        if not amounts:
            return None
        if len(amounts) == 1:
            return Budget(max=amounts[0])
        return Budget(min=min(amounts), max=max(amounts))

    @staticmethod
    def _contains_any(text_lower: str, keywords: Sequence[str]) -> bool:
        return any(keyword in text_lower for keyword in keywords)

    @staticmethod
    def _matches(text_lower: str, gazetteer: Sequence[str]) -> List[str]:
        return [term for term in gazetteer if term in text_lower]
