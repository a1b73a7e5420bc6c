"""Utility helpers for Stroll Planner."""

from .directions import build_directions_url
from .geo import haversine_distance, haversine_matrix

__all__ = [
    "build_directions_url",
    "haversine_distance",
    "haversine_matrix",
]
