"""Tour catalog data models."""
from dataclasses import dataclass


@dataclass(frozen=True)
class TourRecord:
    """A bookable tour as returned by the remote catalog."""
    id: str
    title: str
    destination: str
    price: float
    duration_days: int
    difficulty_level: str
    category: str
