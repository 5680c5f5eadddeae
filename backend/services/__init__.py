"""Services for the TravelBuddy dialogue engine."""
from .utterance_analyzer import UtteranceAnalyzer, tokenize
from .context_store import ContextStore
from .tour_ranker import recommend_tours, compare_destinations, DestinationSummary
from .response_cache import ResponseCache
from .learning_store import (
    LearningStore,
    LearningRepository,
    InMemoryLearningRepository,
    JsonFileLearningRepository,
    SupabaseLearningRepository,
)
from .catalog_client import CatalogClient, CatalogError, TourCatalog
from .resolution_logger import ResolutionLogger
from .response_pipeline import ResponsePipeline, TurnResult
from .typing_delay import TypingDelay
from .conversation_manager import ConversationManager, ChatSession, SessionClosedError, FeedbackAlreadyRecorded

__all__ = ['UtteranceAnalyzer', 'tokenize', 'ContextStore', 'recommend_tours', 'compare_destinations', 'DestinationSummary', 'ResponseCache', 'LearningStore', 'LearningRepository', 'InMemoryLearningRepository', 'JsonFileLearningRepository', 'SupabaseLearningRepository', 'CatalogClient', 'CatalogError', 'TourCatalog', 'ResolutionLogger', 'ResponsePipeline', 'TurnResult', 'TypingDelay', 'ConversationManager', 'ChatSession', 'SessionClosedError', 'FeedbackAlreadyRecorded']
