"""
Response Resolution Pipeline for the TravelBuddy dialogue engine.

Turns one user message into a reply by running an ordered sequence of
short-circuiting checks over the analyzed message, the conversation context,
the response cache and the learning store.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from models.conversation import ConversationContext, Intent, Sentiment
from models.entities import EntitySet
from models.faq import FAQ
from models.tour import TourRecord
from services.catalog_client import TourCatalog
from services.context_store import ContextStore
from services.faq_table import FAQS
from services.learning_store import LearningStore
from services.resolution_logger import ResolutionLogger
from services.response_cache import ResponseCache
from services.tour_ranker import DestinationSummary, compare_destinations, recommend_tours
from services.utterance_analyzer import UtteranceAnalyzer, tokenize

logger = logging.getLogger(__name__)

SUPPORT_PHONE = "+91-9876543210"
SUPPORT_EMAIL = "support@traveler.com"


@dataclass
class TurnResult:
    """
    Outcome of processing one user message.

    Attributes:
        reply_text: Assistant reply
        suggestions: Follow-up prompts offered to the user
        tour_recommendations: Tours recommended with the reply
        context: The session context after the turn
        resolution: Name of the pipeline step that produced the reply
        cached: Whether the reply came from the response cache
        intent: Detected intent (None on cache hits)
        sentiment: Detected sentiment (None on cache hits)
    """
    reply_text: str
    suggestions: List[str]
    tour_recommendations: List[TourRecord]
    context: ConversationContext
    resolution: str
    cached: bool = False
    intent: Optional[Intent] = None
    sentiment: Optional[Sentiment] = None


@dataclass
class _Reply:
    text: str
    resolution: str
    suggestions: List[str] = field(default_factory=list)
    tours: List[TourRecord] = field(default_factory=list)


@dataclass(frozen=True)
class KeywordBucket:
    """A canned reply triggered by any of its keywords."""
    topic: str
    keywords: Sequence[str]
    reply: str
    suggestions: Sequence[str]


class ResponsePipeline:
    """
    Resolves user messages into replies.

    Resolution order (first match wins):
    1. Cache hit
    2. Escalation (urgent intent or negative sentiment)
    3. Positive continuation (positive sentiment after more than 2 turns)
    4. Tour recommendations (browsing intent, non-empty catalog)
    5. Destination comparison (comparing intent, 2+ remembered destinations)
    6. Unhelpful echo (resembles a reply previously marked unhelpful)
    7. FAQ match
    8. Topic keyword buckets
    9. Learned-keyword deflection
    10. Capability menu
    """

    CACHE_HIT = "cache_hit"
    ESCALATION = "escalation"
    POSITIVE_CONTINUATION = "positive_continuation"
    RECOMMENDATION = "recommendation"
    NO_RESULTS = "no_results"
    COMPARISON = "comparison"
    UNHELPFUL_ECHO = "unhelpful_echo"
    FAQ_MATCH = "faq"
    KEYWORD = "keyword"
    LEARNED_KEYWORD = "learned_keyword"
    FALLBACK = "fallback"

    RECOMMENDATION_SUGGESTIONS = [
        "Tell me more about tour 1",
        "Compare these tours",
        "Show cheaper options",
        "Different destinations",
    ]
    NO_RESULTS_SUGGESTIONS = ["Show all tours", "Increase my budget", "Different destinations", "Contact support"]
    ESCALATION_SUGGESTIONS = ["Call support", "Email support", "Check my booking"]
    CONTINUATION_SUGGESTIONS = ["Book a tour", "Show similar tours", "Compare options"]
    FALLBACK_SUGGESTIONS = [
        "Show me adventure tours",
        "How do I book a tour?",
        "What is your refund policy?",
        "Contact support",
    ]

    POPULAR_BOOKING_THRESHOLD = 5

    KEYWORD_BUCKETS = (
        KeywordBucket(
            "booking", ("book", "reservation", "how to book"),
            "To book a tour, browse our collection and click \"Book Your Adventure\" on your chosen "
            "tour. We recommend booking 3-7 days in advance for the best availability!",
            ("Show me tours", "How far in advance should I book?", "Payment methods"),
        ),
        KeywordBucket(
            "payment", ("payment", "pay", "cost", "price"),
            "We accept cards, UPI, net banking and digital wallets. All transactions are secure and "
            "encrypted. No hidden charges, everything is transparent!",
            ("Are there any hidden charges?", "Refund policy", "Student discounts"),
        ),
        KeywordBucket(
            "cancel", ("cancel", "refund", "modify"),
            "You can cancel up to 24 hours in advance for a full refund. 12-24 hours notice gets a 50% "
            "refund. Contact support for modifications!",
            ("What is your refund policy?", "Contact support", "Modify my booking"),
        ),
        KeywordBucket(
            "contact", ("contact", "support", "help", "phone"),
            f"Our support team is available 24/7! Email: {SUPPORT_EMAIL} | Phone: {SUPPORT_PHONE} | "
            "Or chat with me anytime!",
            ("Call support", "Email support", "Browse FAQs"),
        ),
        KeywordBucket(
            "discount", ("discount", "student", "group", "senior"),
            "Yes! We offer 10% student discounts, senior citizen rates, and special group pricing for "
            "6+ people. Bring valid ID to avail!",
            ("Do you offer group discounts?", "Show budget tours", "How do I book a tour?"),
        ),
        KeywordBucket(
            "pickup", ("pickup", "hotel", "transport"),
            "We provide complimentary hotel pickup and drop-off within city limits for most tours. "
            "Pickup times are confirmed in your booking!",
            ("What should I bring on the tour?", "What happens if I'm late?"),
        ),
        KeywordBucket(
            "meal", ("meal", "food", "lunch", "breakfast"),
            "Meal inclusion varies by tour. Full-day tours typically include lunch, half-day tours may "
            "include snacks. Check individual tour descriptions!",
            ("Show food tours", "What should I bring on the tour?"),
        ),
        KeywordBucket(
            "weather", ("weather", "rain", "storm"),
            "Tours run rain or shine, but severe weather may cause rescheduling or a full refund. "
            "You'll get 2+ hours notice for any changes!",
            ("What is your refund policy?", "What should I bring on the tour?"),
        ),
        KeywordBucket(
            "age", ("age", "child", "kid", "family"),
            "Age requirements vary by tour. Adventure tours are typically 12+, cultural tours are "
            "family-friendly. Check specific tour details!",
            ("Show family tours", "Show cultural tours"),
        ),
        KeywordBucket(
            "guide", ("guide", "language", "english", "hindi"),
            "Our multilingual guides speak English, Hindi and local languages. For specific language "
            "requests, mention them during booking!",
            ("Can I customize my tour itinerary?", "How do I book a tour?"),
        ),
        KeywordBucket(
            "custom", ("custom", "private", "personalize"),
            "Absolutely! We offer customizable private tours. Contact our team with your preferences "
            "for a personalized itinerary!",
            ("Contact support", "Show luxury tours"),
        ),
        KeywordBucket(
            "photo", ("photo", "camera", "picture"),
            "Professional photography packages are available for an additional fee. Our photographers "
            "will capture your memorable moments!",
            ("Show heritage tours", "Are there any hidden charges?"),
        ),
        KeywordBucket(
            "wheelchair", ("wheelchair", "accessible", "disability"),
            "We offer wheelchair-accessible tours and accommodate special needs. Please inform us "
            "during booking for proper arrangements!",
            ("Contact support", "How do I book a tour?"),
        ),
        KeywordBucket(
            "late", ("late", "time", "departure"),
            "Please arrive 15 minutes before departure. Tours leave on schedule, so contact us "
            "immediately if you're running late!",
            ("Contact support", "Do you provide hotel pickup?"),
        ),
        KeywordBucket(
            "dress", ("dress", "clothing", "wear"),
            "Dress comfortably and weather-appropriately. Modest clothing is required for religious "
            "sites. Specific guidelines are in your pre-tour info!",
            ("What should I bring on the tour?", "Show spiritual tours"),
        ),
        KeywordBucket(
            "pet", ("pet", "dog", "animal"),
            "Pets are allowed on select outdoor tours only. Service animals are always welcome. Check "
            "tour descriptions for pet-friendly options!",
            ("Show nature tours", "Contact support"),
        ),
        KeywordBucket(
            "review", ("review", "feedback", "rating"),
            "After your tour you'll get an email with a review link. You can also rate through your "
            "account. We value your feedback!",
            ("Can I get a tour certificate?", "Show me tours"),
        ),
        KeywordBucket(
            "lost", ("lost", "found", "forget"),
            "Contact support immediately for lost items. We maintain a lost & found database and work "
            "with locations to recover belongings!",
            ("Contact support", "Email support"),
        ),
        KeywordBucket(
            "certificate", ("certificate", "completion", "proof"),
            "Yes! Digital certificates are provided for all tours. Download from your account or get "
            "them emailed within 24 hours of completion!",
            ("How do I leave a review?", "Show me tours"),
        ),
        KeywordBucket(
            "safety", ("safe", "insurance", "insured"),
            "All our tours are fully insured and run by certified guides, with emergency support "
            "throughout your journey.",
            ("Are tours wheelchair accessible?", "Show family tours"),
        ),
    )

    def __init__(
        self,
        learning_store: LearningStore,
        catalog: TourCatalog,
        cache: Optional[ResponseCache] = None,
        faqs: Sequence[FAQ] = FAQS,
        analyzer: Optional[UtteranceAnalyzer] = None,
        context_store: Optional[ContextStore] = None,
        resolution_logger: Optional[ResolutionLogger] = None
    ):
        """
        Initialize the pipeline.

        Args:
            learning_store: Durable learning store (already loaded)
            catalog: Tour catalog snapshot holder
            cache: Default response cache, used when a caller passes none
            faqs: Static FAQ table
            analyzer: Utterance analyzer (default instance if omitted)
            context_store: Context store (default instance if omitted)
            resolution_logger: Optional JSONL resolution log
        """
        self.cache = cache if cache is not None else ResponseCache()
        self.learning_store = learning_store
        self.catalog = catalog
        self.faqs = list(faqs)
        self.analyzer = analyzer or UtteranceAnalyzer()
        self.context_store = context_store or ContextStore()
        self.resolution_logger = resolution_logger
        logger.info(f"Initialized ResponsePipeline with {len(self.faqs)} FAQs")

    def process_message(
        self,
        text: str,
        context: ConversationContext,
        cache: Optional[ResponseCache] = None
    ) -> TurnResult:
        """
        Process one user message.

        Learning counters are updated before the cache is consulted, so even a
        cached reply counts towards query and keyword frequencies.

        Args:
            text: Raw user message
            context: Session context, updated in place on cache misses
            cache: The session's own response cache (defaults to self.cache)

        Returns:
            TurnResult with reply, suggestions, recommendations and context
        """
        start_time = time.time()

        cache = cache if cache is not None else self.cache
        self.learning_store.record_query(text)

        cached = cache.get(text)
        if cached is not None:
            logger.info(f"Cache hit for query: {text[:50]}")
            self._log(text, self.CACHE_HIT, None, None, context, cached=True, tours=0, start_time=start_time)
            return TurnResult(
                reply_text=cached,
                suggestions=[],
                tour_recommendations=[],
                context=context,
                resolution=self.CACHE_HIT,
                cached=True,
            )

        intent = self.analyzer.detect_intent(text)
        sentiment = self.analyzer.analyze_sentiment(text)
        entities = self.analyzer.extract_entities(text)

        prior_turns = len(context.previous_queries)
        self.context_store.apply_turn(context, text, intent, sentiment, entities)

        reply = self._resolve(text, context, intent, sentiment, prior_turns)
        cache.put(text, reply.text)

        logger.info(
            f"Resolved query via {reply.resolution} (intent={intent.value}, sentiment={sentiment.value})",
            extra={"extra": {"resolution": reply.resolution, "intent": intent.value, "stage": context.stage.value}}
        )
        self._log(text, reply.resolution, intent, sentiment, context, cached=False,
                  tours=len(reply.tours), start_time=start_time)

        return TurnResult(
            reply_text=reply.text,
            suggestions=list(reply.suggestions),
            tour_recommendations=list(reply.tours),
            context=context,
            resolution=reply.resolution,
            intent=intent,
            sentiment=sentiment,
        )

    def _resolve(
        self,
        text: str,
        context: ConversationContext,
        intent: Intent,
        sentiment: Sentiment,
        prior_turns: int
    ) -> _Reply:
        if intent == Intent.URGENT or sentiment == Sentiment.NEGATIVE:
            return self._escalation(intent)

        if sentiment == Sentiment.POSITIVE and prior_turns > 2:
            return _Reply(
                text="That's wonderful to hear! I'm glad we're finding great options together. "
                     "Shall I narrow things down further or help you book?",
                resolution=self.POSITIVE_CONTINUATION,
                suggestions=list(self.CONTINUATION_SUGGESTIONS),
            )

        if intent == Intent.BROWSING:
            reply = self._recommend(context)
            if reply is not None:
                return reply

        if intent == Intent.COMPARING and context.destinations and len(context.destinations) >= 2:
            return self._compare(context.destinations)

        echo = self.learning_store.find_unhelpful_echo(text)
        if echo is not None:
            logger.info(f"Query resembles earlier unhelpful exchange: {echo.query[:50]}")
            return _Reply(
                text="I notice I may not have answered this well before. Let me try a smarter approach: "
                     f"our support team at {SUPPORT_PHONE} or {SUPPORT_EMAIL} can give you detailed "
                     f"help with \"{text}\". They're available 24/7!",
                resolution=self.UNHELPFUL_ECHO,
                suggestions=list(self.ESCALATION_SUGGESTIONS),
            )

        tokens = tokenize(text)

        faq = self._match_faq(text, tokens)
        if faq is not None:
            self.learning_store.record_faq_hit(faq.id)
            return _Reply(
                text=faq.answer,
                resolution=self.FAQ_MATCH,
                suggestions=self._related_questions(faq),
            )

        bucket_reply = self._match_keyword_bucket(text)
        if bucket_reply is not None:
            return bucket_reply

        learned = self.learning_store.learned_keywords(tokens)
        if learned:
            return _Reply(
                text=f"People also ask about \"{learned[0]}\" a lot, and I'm still learning about it. "
                     f"Our support team at {SUPPORT_PHONE} can help you in detail with \"{text}\".",
                resolution=self.LEARNED_KEYWORD,
                suggestions=["Contact support", "Browse FAQs"],
            )

        return _Reply(
            text="I'm continuously learning to help you better! You can ask me about tours, bookings, "
                 "payments, cancellations, discounts, accessibility, or pick one of the suggestions "
                 "below. What would you like to know?",
            resolution=self.FALLBACK,
            suggestions=list(self.FALLBACK_SUGGESTIONS),
        )

    def _escalation(self, intent: Intent) -> _Reply:
        feeling = "urgent" if intent == Intent.URGENT else "frustrating"
        return _Reply(
            text=f"I understand this is {feeling}. Let me connect you with our priority support team "
                 f"right away. Call {SUPPORT_PHONE}, WhatsApp us on the same number, or email "
                 f"{SUPPORT_EMAIL} for instant help. We're here to resolve this!",
            resolution=self.ESCALATION,
            suggestions=list(self.ESCALATION_SUGGESTIONS),
        )

    def _recommend(self, context: ConversationContext) -> Optional[_Reply]:
        """Rank the catalog against remembered entities; None means fall through."""
        catalog = self.catalog.tours
        if not catalog:
            logger.debug("Catalog is empty, skipping recommendations")
            return None

        entities = self.context_store.remembered_entities(context)
        tours = recommend_tours(entities, catalog)

        if tours:
            lines = [f"Here are the top {len(tours)} tours I found for you:", ""]
            for position, tour in enumerate(tours, start=1):
                lines.append(
                    f"{position}. {tour.title} - {tour.destination}, {tour.duration_days} days, "
                    f"₹{tour.price:,.0f} per person"
                )
            return _Reply(
                text="\n".join(lines),
                resolution=self.RECOMMENDATION,
                suggestions=list(self.RECOMMENDATION_SUGGESTIONS),
                tours=tours,
            )

        if not entities.is_trivial():
            return _Reply(
                text=f"I couldn't find tours {self._describe_criteria(entities)} right now. "
                     "Try widening your budget, adjusting the trip length, or exploring another "
                     "destination. I can also show you everything we have!",
                resolution=self.NO_RESULTS,
                suggestions=list(self.NO_RESULTS_SUGGESTIONS),
            )
        return None

    def _compare(self, destinations: Sequence[str]) -> _Reply:
        summaries = compare_destinations(destinations, self.catalog.tours)
        names = [summary.destination.title() for summary in summaries]
        lines = [f"Here's how {names[0]} and {names[1]} compare:", ""]
        lines.extend(self._format_summary(summary) for summary in summaries)
        return _Reply(
            text="\n".join(lines),
            resolution=self.COMPARISON,
            suggestions=[f"Show tours in {names[0]}", f"Show tours in {names[1]}", "Help me choose"],
        )

    @staticmethod
    def _format_summary(summary: DestinationSummary) -> str:
        name = summary.destination.title()
        if summary.count == 0:
            return f"{name}: no tours available right now"
        return (
            f"{name}: {summary.count} tour{'s' if summary.count != 1 else ''}, "
            f"average ₹{summary.average_price:,.0f}, mostly {summary.category}"
        )

    @staticmethod
    def _describe_criteria(entities: EntitySet) -> str:
        parts = []
        if entities.destinations:
            parts.append("in " + ", ".join(d.title() for d in entities.destinations))
        if entities.budget is not None:
            low, high = entities.budget.min, entities.budget.max
            if low is not None and high is not None:
                parts.append(f"between ₹{low:,} and ₹{high:,}")
            elif high is not None:
                parts.append(f"under ₹{high:,}")
            elif low is not None:
                parts.append(f"above ₹{low:,}")
        if entities.duration is not None:
            parts.append(f"of around {entities.duration} days")
        return " ".join(parts) if parts else "matching your request"

    def _match_faq(self, text: str, tokens: Sequence[str]) -> Optional[FAQ]:
        """
        Find the first FAQ sharing at least two keyword tokens with the text,
        or whose question's first three words appear in the text.
        """
        text_lower = text.lower()
        wanted = set(tokens)
        for faq in self.faqs:
            question_words = faq.question.lower().split()
            question_tokens = set(tokenize(faq.question, min_length=1))
            if len(wanted & question_tokens) >= 2:
                return faq
            if " ".join(question_words[:3]) in text_lower:
                return faq
        return None

    def _related_questions(self, faq: FAQ, limit: int = 3) -> List[str]:
        return [other.question for other in self.faqs
                if other.category == faq.category and other.id != faq.id][:limit]

    def _match_keyword_bucket(self, text: str) -> Optional[_Reply]:
        text_lower = text.lower()
        for bucket in self.KEYWORD_BUCKETS:
            if not any(keyword in text_lower for keyword in bucket.keywords):
                continue

            reply_text = bucket.reply
            if bucket.topic == "booking" and self.learning_store.query_count("booking") > self.POPULAR_BOOKING_THRESHOLD:
                reply_text = ("I notice booking is a popular topic! Browse tours and click \"Book Your "
                              "Adventure\". Pro tip: book 3-7 days ahead for the best availability. "
                              "Need help with a specific destination?")
            return _Reply(
                text=reply_text,
                resolution=f"{self.KEYWORD}:{bucket.topic}",
                suggestions=list(bucket.suggestions),
            )
        return None

    def answer_faq(self, faq_id: str) -> FAQ:
        """
        Select an FAQ directly (e.g. from a suggestion chip) and count it.

        Raises:
            KeyError: If no FAQ has this id
        """
        faq = next((f for f in self.faqs if f.id == faq_id), None)
        if faq is None:
            raise KeyError(faq_id)
        self.learning_store.record_faq_hit(faq.id)
        return faq

    def popular_faqs(self, limit: int = 6) -> List[FAQ]:
        """FAQs ordered by learned popularity, table order on ties."""
        ranked = sorted(self.faqs, key=lambda f: self.learning_store.faq_popularity(f.id), reverse=True)
        return ranked[:limit]

    def typing_suggestions(self, partial: str, limit: int = 3) -> List[str]:
        """
        Autocomplete a partially typed message.

        Candidates are learned queries and FAQ questions containing the
        partial text, most frequently asked first.
        """
        if len(partial.strip()) < 2:
            return []

        fragment = partial.lower()
        candidates = self.learning_store.frequent_queries(fragment)
        seen = set(candidates)
        for faq in self.faqs:
            if fragment in faq.question.lower() and faq.question not in seen:
                candidates.append(faq.question)
                seen.add(faq.question)

        ranked = sorted(candidates, key=self.learning_store.query_count, reverse=True)
        return ranked[:limit]

    def _log(
        self,
        text: str,
        resolution: str,
        intent: Optional[Intent],
        sentiment: Optional[Sentiment],
        context: ConversationContext,
        cached: bool,
        tours: int,
        start_time: float
    ) -> None:
        if self.resolution_logger is None:
            return
        self.resolution_logger.log_resolution(
            query=text,
            resolution=resolution,
            intent=intent.value if intent else None,
            sentiment=sentiment.value if sentiment else None,
            stage=context.stage.value,
            cached=cached,
            recommendations=tours,
            latency_ms=int((time.time() - start_time) * 1000),
        )
