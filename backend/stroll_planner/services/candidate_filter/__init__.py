from .service import (
    CandidateFilterService,
    mentions_food,
    place_count_bounds,
    rating_fallback,
)

__all__ = [
    "CandidateFilterService",
    "mentions_food",
    "place_count_bounds",
    "rating_fallback",
]
