"""Conversation data models."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from models.entities import Budget
from models.tour import TourRecord


class Sender(str, Enum):
    """Author of a transcript message."""
    USER = "user"
    ASSISTANT = "assistant"


class Intent(str, Enum):
    """Coarse category of user goal."""
    URGENT = "urgent"
    COMPLAINT = "complaint"
    COMPARING = "comparing"
    BOOKING = "booking"
    BROWSING = "browsing"
    SUPPORT = "support"
    INQUIRY = "inquiry"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class ConversationStage(str, Enum):
    """Coarse phase of the dialogue, recomputed every turn."""
    GREETING = "greeting"
    EXPLORING = "exploring"
    DECIDING = "deciding"
    BOOKING = "booking"
    SUPPORT = "support"


@dataclass
class Message:
    """Represents a single message in a session transcript."""
    id: str
    text: str
    sender: Sender
    timestamp: datetime
    helpful: Optional[bool] = None
    originating_query: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)
    tour_recommendations: List[TourRecord] = field(default_factory=list)


@dataclass
class ConversationContext:
    """Per-session dialogue state merged turn by turn."""
    previous_queries: List[str] = field(default_factory=list)
    intent: Optional[Intent] = None
    sentiment: Optional[Sentiment] = None
    destinations: Optional[List[str]] = None
    budget: Optional[Budget] = None
    duration: Optional[int] = None
    preferences: Optional[List[str]] = None
    stage: ConversationStage = ConversationStage.GREETING
