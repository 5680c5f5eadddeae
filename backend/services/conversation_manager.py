"""Conversation manager for multi-turn chat sessions."""
import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from config import MAX_SESSIONS, SESSION_IDLE_TIMEOUT_SECONDS
from models.conversation import ConversationContext, Message, Sender
from services.response_cache import ResponseCache
from services.response_pipeline import ResponsePipeline, TurnResult
from services.typing_delay import TypingDelay

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Hello! I'm TravelBuddy, your travel companion with learning capabilities. I improve my "
    "answers based on your feedback and help fellow travelers like you! Tell me your destination, "
    "budget or trip length, or ask me anything about booking."
)
WELCOME_SUGGESTIONS = ["Show me adventure tours", "Beach vacations", "Cultural tours", "How do I book a tour?"]


class SessionClosedError(Exception):
    """Raised when a closed session is asked to do work."""


class FeedbackAlreadyRecorded(Exception):
    """Raised when a message that was already rated is rated again."""


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class ChatSession:
    """
    A single user's conversation: transcript, context, reply cache and typing delay.

    The transcript is append-only; the only mutation of an existing message
    is setting its helpful flag once. The reply cache belongs to the session
    because cached replies depend on its context.
    """

    def __init__(self, session_id: str, pipeline: ResponsePipeline, typing_delay: Optional[TypingDelay] = None):
        self.session_id = session_id
        self.pipeline = pipeline
        self.typing_delay = typing_delay or TypingDelay()
        self.context: ConversationContext = pipeline.context_store.new_context()
        self.cache = ResponseCache()
        self.created_at = datetime.now(timezone.utc)
        self.closed = False
        self.last_result: Optional[TurnResult] = None
        self.messages: List[Message] = [
            Message(
                id=_new_id("msg"),
                text=WELCOME_TEXT,
                sender=Sender.ASSISTANT,
                timestamp=self.created_at,
                suggestions=list(WELCOME_SUGGESTIONS),
            )
        ]

    async def send(self, text: str) -> Message:
        """
        Process a user message and append the assistant's reply.

        Non-cached replies are delayed by the typing simulation. If the
        session is closed during that delay, nothing is appended.

        Args:
            text: Raw user message

        Returns:
            The assistant Message

        Raises:
            ValueError: If text is empty
            SessionClosedError: If the session is (or becomes) closed
        """
        if self.closed:
            raise SessionClosedError(self.session_id)
        if not text or not text.strip():
            raise ValueError("Message text cannot be empty")

        self.messages.append(
            Message(id=_new_id("msg"), text=text, sender=Sender.USER, timestamp=datetime.now(timezone.utc))
        )

        result = self.pipeline.process_message(text, self.context, cache=self.cache)

        if not result.cached:
            try:
                await self.typing_delay.wait(result.reply_text)
            except asyncio.CancelledError:
                if self.closed:
                    raise SessionClosedError(self.session_id)
                raise

        if self.closed:
            raise SessionClosedError(self.session_id)

        reply = Message(
            id=_new_id("msg"),
            text=result.reply_text,
            sender=Sender.ASSISTANT,
            timestamp=datetime.now(timezone.utc),
            originating_query=text,
            suggestions=list(result.suggestions),
            tour_recommendations=list(result.tour_recommendations),
        )
        self.messages.append(reply)
        self.last_result = result
        logger.debug(
            f"Session {self.session_id} replied via {result.resolution}",
            extra={"extra": {"session_id": self.session_id, "message_id": reply.id, "cached": result.cached}}
        )
        return reply

    def get_message(self, message_id: str) -> Message:
        """
        Raises:
            KeyError: If no message has this id
        """
        for message in self.messages:
            if message.id == message_id:
                return message
        raise KeyError(message_id)

    def record_feedback(self, message_id: str, helpful: bool) -> Message:
        """
        Rate an assistant reply.

        A negative rating logs the originating query and reply text to the
        learning store so similar future questions are handled differently.

        Raises:
            KeyError: If the message does not exist
            FeedbackAlreadyRecorded: If the message was already rated
        """
        message = self.get_message(message_id)
        if message.helpful is not None:
            raise FeedbackAlreadyRecorded(message_id)

        message.helpful = helpful
        if not helpful and message.originating_query:
            self.pipeline.learning_store.record_unhelpful(message.originating_query, message.text)

        logger.info(
            f"Feedback for {message_id} in session {self.session_id}: helpful={helpful}",
            extra={"extra": {"session_id": self.session_id, "message_id": message_id, "helpful": helpful}}
        )
        return message

    def close(self) -> None:
        """Mark the session closed and cancel any pending typing delay."""
        self.closed = True
        self.typing_delay.cancel()


class ConversationManager:
    """
    Owns in-memory chat sessions; contexts are never persisted.

    Sessions idle for longer than idle_timeout_seconds are closed and dropped
    whenever a new session is created, and the least recently active session
    is dropped when max_sessions would be exceeded.
    """

    def __init__(
        self,
        pipeline: ResponsePipeline,
        typing_delay_enabled: bool = True,
        idle_timeout_seconds: float = SESSION_IDLE_TIMEOUT_SECONDS,
        max_sessions: int = MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the conversation manager.

        Args:
            pipeline: Shared response pipeline
            typing_delay_enabled: Whether new sessions simulate typing
            idle_timeout_seconds: Inactivity after which a session is ended
            max_sessions: Upper bound on live sessions
            clock: Monotonic time source in seconds
        """
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.pipeline = pipeline
        self.typing_delay_enabled = typing_delay_enabled
        self.idle_timeout_seconds = idle_timeout_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: Dict[str, ChatSession] = {}
        self._last_active: Dict[str, float] = {}
        logger.info("ConversationManager initialized")

    def get_or_create_session(self, session_id: Optional[str] = None) -> ChatSession:
        """
        Get an existing session or start a new one.

        Unknown ids start a new session with a freshly generated id.
        """
        self.expire_idle_sessions()

        if session_id:
            session = self._sessions.get(session_id)
            if session is not None:
                self._touch(session_id)
                return session
            logger.warning(f"Session {session_id} not found, creating new one")

        while len(self._sessions) >= self.max_sessions:
            oldest = min(self._last_active, key=self._last_active.get)
            logger.warning(f"Session limit {self.max_sessions} reached, ending {oldest}")
            self.end_session(oldest)

        session = ChatSession(
            session_id=_new_id("sess"),
            pipeline=self.pipeline,
            typing_delay=TypingDelay(enabled=self.typing_delay_enabled),
        )
        self._sessions[session.session_id] = session
        self._touch(session.session_id)
        logger.info(f"Created new session: {session.session_id}")
        return session

    def get_session(self, session_id: str) -> ChatSession:
        """
        Raises:
            KeyError: If the session does not exist
        """
        session = self._sessions[session_id]
        self._touch(session_id)
        return session

    def expire_idle_sessions(self) -> int:
        """End sessions idle longer than the timeout; returns how many ended."""
        cutoff = self._clock() - self.idle_timeout_seconds
        expired = [sid for sid, last_active in self._last_active.items() if last_active < cutoff]
        for session_id in expired:
            self.end_session(session_id)
        if expired:
            logger.info(f"Expired {len(expired)} idle session(s)")
        return len(expired)

    def end_session(self, session_id: str) -> bool:
        """Close and discard a session; returns False if it did not exist."""
        session = self._sessions.pop(session_id, None)
        self._last_active.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info(f"Ended session: {session_id}")
        return True

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.end_session(session_id)

    def _touch(self, session_id: str) -> None:
        self._last_active[session_id] = self._clock()

    def __len__(self) -> int:
        return len(self._sessions)
