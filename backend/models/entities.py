"""Entity data models."""
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class Budget:
    """Price bounds in rupees; either side may be open."""
    min: Optional[int] = None
    max: Optional[int] = None


@dataclass
class EntitySet:
    """
    Structured facts extracted from one utterance.

    A field left as None means the utterance did not mention it. Extraction
    never produces empty lists, so a list field is either None or non-empty.
    """
    destinations: Optional[List[str]] = None
    budget: Optional[Budget] = None
    duration: Optional[int] = None
    preferences: Optional[List[str]] = None

    def is_trivial(self) -> bool:
        """True when no destination, budget or duration was supplied."""
        return not self.destinations and self.budget is None and self.duration is None
