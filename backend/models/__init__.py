"""Data models for the TravelBuddy dialogue engine."""
from .tour import TourRecord
from .entities import Budget, EntitySet
from .conversation import ConversationContext, ConversationStage, Intent, Message, Sender, Sentiment
from .learning import LearningState, UnhelpfulResponse
from .faq import FAQ
from .api import ChatRequest, ChatResponse, FeedbackRequest, FAQOut, TourOut

__all__ = [
    "TourRecord",
    "Budget",
    "EntitySet",
    "ConversationContext",
    "ConversationStage",
    "Intent",
    "Message",
    "Sender",
    "Sentiment",
    "LearningState",
    "UnhelpfulResponse",
    "FAQ",
    "ChatRequest",
    "ChatResponse",
    "FeedbackRequest",
    "FAQOut",
    "TourOut",
]
