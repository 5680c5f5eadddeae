"""Conversation context store for multi-turn dialogue state."""
import copy
import logging

from config import MAX_PREVIOUS_QUERIES
from models.conversation import ConversationContext, ConversationStage, Intent, Sentiment
from models.entities import EntitySet

logger = logging.getLogger(__name__)


class ContextStore:
    """Creates and updates per-session ConversationContext objects."""

    STAGE_BY_INTENT = {
        Intent.BOOKING: ConversationStage.BOOKING,
        Intent.SUPPORT: ConversationStage.SUPPORT,
        Intent.COMPLAINT: ConversationStage.SUPPORT,
        Intent.BROWSING: ConversationStage.DECIDING,
        Intent.COMPARING: ConversationStage.DECIDING,
    }

    def __init__(self, max_previous_queries: int = MAX_PREVIOUS_QUERIES):
        """
        Initialize the context store.

        Args:
            max_previous_queries: Number of recent queries remembered per session
        """
        self.max_previous_queries = max_previous_queries

    def new_context(self) -> ConversationContext:
        """Return a fresh context in the greeting stage."""
        return ConversationContext()

    def next_stage(self, intent: Intent) -> ConversationStage:
        """
        Map the turn's intent to a conversation stage.

        The stage is recomputed from scratch every turn, so it can move
        backwards (e.g. booking -> exploring) when the intent changes.
        """
        return self.STAGE_BY_INTENT.get(intent, ConversationStage.EXPLORING)

    def apply_turn(
        self,
        context: ConversationContext,
        query: str,
        intent: Intent,
        sentiment: Sentiment,
        entities: EntitySet
    ) -> ConversationContext:
        """
        Merge one analyzed turn into the context in place.

        Entity fields are overwritten only when the turn mentioned them
        (field is not None); unmentioned fields keep their remembered value.

        Args:
            context: Session context to update
            query: Raw user message
            intent: Detected intent
            sentiment: Detected sentiment
            entities: Entities extracted from this turn

        Returns:
            The same context object, updated
        """
        context.previous_queries = (context.previous_queries + [query])[-self.max_previous_queries:]
        context.intent = intent
        context.sentiment = sentiment
        context.stage = self.next_stage(intent)

        if entities.destinations is not None:
            context.destinations = list(entities.destinations)
        if entities.budget is not None:
            context.budget = copy.copy(entities.budget)
        if entities.duration is not None:
            context.duration = entities.duration
        if entities.preferences is not None:
            context.preferences = list(entities.preferences)

        logger.debug(
            f"Context updated: stage={context.stage.value}, intent={intent.value}, "
            f"destinations={context.destinations}, queries={len(context.previous_queries)}"
        )
        return context

    @staticmethod
    def remembered_entities(context: ConversationContext) -> EntitySet:
        """Return the merged entity fields of a context as an EntitySet."""
        return EntitySet(
            destinations=list(context.destinations) if context.destinations else None,
            budget=copy.copy(context.budget),
            duration=context.duration,
            preferences=list(context.preferences) if context.preferences else None,
        )

    @staticmethod
    def snapshot(context: ConversationContext) -> ConversationContext:
        """Return an independent copy of a context."""
        return copy.deepcopy(context)
