from .service import (
    EMPTY_ROUTE_DESCRIPTION,
    START_POINT_ID,
    RouteOrchestrator,
)

__all__ = [
    "EMPTY_ROUTE_DESCRIPTION",
    "START_POINT_ID",
    "RouteOrchestrator",
]
