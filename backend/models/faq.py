"""FAQ data models."""
from dataclasses import dataclass


@dataclass(frozen=True)
class FAQ:
    """A canned question/answer pair."""
    id: str
    question: str
    answer: str
    category: str  # booking | travel | payment | general
