"""Data models for Stroll Planner."""

from .core import (
    Category,
    Coordinates,
    Place,
    RouteRequest,
    RouteResponse,
)
from .errors import (
    AppError,
    ErrorCode,
    ErrorDetail,
    ErrorResponse,
    Violation,
)

__all__ = [
    # Core
    "Category",
    "Coordinates",
    "Place",
    "RouteRequest",
    "RouteResponse",
    # Errors
    "AppError",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "Violation",
]
