"""Tour recommendation filter and ranker."""
import logging
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional, Sequence

from config import DURATION_TOLERANCE_DAYS, MAX_RECOMMENDATIONS
from models.entities import EntitySet
from models.tour import TourRecord

logger = logging.getLogger(__name__)


@dataclass
class DestinationSummary:
    """Aggregate view of the catalog for one destination."""
    destination: str
    count: int
    average_price: Optional[float]
    category: Optional[str]


def _mentions_any(fields: Sequence[str], terms: Sequence[str]) -> bool:
    lowered = [(value or "").lower() for value in fields]
    return any(term.lower() in value for term in terms for value in lowered)


def recommend_tours(
    entities: EntitySet,
    catalog: Sequence[TourRecord],
    limit: int = MAX_RECOMMENDATIONS,
    duration_tolerance: int = DURATION_TOLERANCE_DAYS
) -> List[TourRecord]:
    """
    Filter the catalog by the entity set and rank what remains.

    Filters are applied in order, each narrowing the working set, and each is
    skipped when its entity field is absent:
    1. Destination: destination or title contains any entity destination
    2. Budget: price <= max, price >= min
    3. Duration: |duration_days - duration| <= tolerance
    4. Preference: category, difficulty_level or title contains any preference

    Remaining tours are ordered by price, most expensive first.

    Args:
        entities: Merged entity set for the conversation
        catalog: Read-only tour catalog (may be empty)
        limit: Maximum number of tours returned
        duration_tolerance: Allowed difference in days for the duration filter

    Returns:
        Up to `limit` tours
    """
    tours = list(catalog)

    if entities.destinations:
        tours = [t for t in tours if _mentions_any([t.destination, t.title], entities.destinations)]

    if entities.budget is not None:
        if entities.budget.max is not None:
            tours = [t for t in tours if t.price <= entities.budget.max]
        if entities.budget.min is not None:
            tours = [t for t in tours if t.price >= entities.budget.min]

    if entities.duration is not None:
        tours = [t for t in tours if abs(t.duration_days - entities.duration) <= duration_tolerance]

    if entities.preferences:
        tours = [
            t for t in tours
            if _mentions_any([t.category, t.difficulty_level, t.title], entities.preferences)
        ]

    # TODO: price-descending order mirrors the booking app; revisit once ratings reach the catalog feed
    ranked = sorted(tours, key=lambda t: t.price, reverse=True)[:limit]
    logger.debug(f"Ranked {len(ranked)} of {len(tours)} matching tours (catalog size {len(catalog)})")
    return ranked


def summarize_destination(destination: str, catalog: Sequence[TourRecord]) -> DestinationSummary:
    """Count, average price and most common category of tours for a destination."""
    matching = [t for t in catalog if _mentions_any([t.destination, t.title], [destination])]
    if not matching:
        return DestinationSummary(destination=destination, count=0, average_price=None, category=None)

    # Counter.most_common keeps first-seen order among equal counts
    category = Counter(t.category for t in matching).most_common(1)[0][0]
    return DestinationSummary(
        destination=destination,
        count=len(matching),
        average_price=sum(t.price for t in matching) / len(matching),
        category=category,
    )


def compare_destinations(destinations: Sequence[str], catalog: Sequence[TourRecord]) -> List[DestinationSummary]:
    """Summarize the first two destinations side by side."""
    return [summarize_destination(destination, catalog) for destination in list(destinations)[:2]]
