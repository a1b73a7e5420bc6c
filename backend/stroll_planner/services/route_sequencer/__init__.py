from .service import (
    DistanceMatrix,
    GreedyRouteSequencer,
    RouteSequencerService,
    total_distance,
)

__all__ = [
    "DistanceMatrix",
    "GreedyRouteSequencer",
    "RouteSequencerService",
    "total_distance",
]
