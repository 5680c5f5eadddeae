"""Learning store data models."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List


@dataclass
class UnhelpfulResponse:
    """A reply the user marked as not helpful."""
    query: str
    response: str
    timestamp: datetime


@dataclass
class LearningState:
    """Usage signals persisted across sessions."""
    query_frequency: Dict[str, int] = field(default_factory=dict)
    unhelpful_log: List[UnhelpfulResponse] = field(default_factory=list)
    faq_popularity: Dict[str, int] = field(default_factory=dict)
    keyword_frequency: Dict[str, int] = field(default_factory=dict)
