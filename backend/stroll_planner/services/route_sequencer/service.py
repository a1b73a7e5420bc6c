"""Route sequencing by greedy nearest neighbor over great-circle distance.

Starting at the user's start point, always walk to the closest place not
visited yet. This is a heuristic, not a TSP solver: there is no
backtracking and no 2-opt pass. Distances are straight-line (haversine,
Earth radius 6,371 km), not street-network distances.

Tie-break: when two unvisited places are equally close, the one earlier in
the input list wins.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from stroll_planner.models import Place
from stroll_planner.utils.geo import haversine_distance, haversine_matrix

logger = logging.getLogger(__name__)


@dataclass
class DistanceMatrix:
    """Pairwise great-circle distances (meters) between places."""
    places: list[Place]
    distances: NDArray[np.float64]

    @classmethod
    def build(cls, places: list[Place]) -> "DistanceMatrix":
        if not places:
            return cls(places=[], distances=np.zeros((0, 0), dtype=np.float64))
        lats = np.array([p.lat for p in places], dtype=np.float64)
        lons = np.array([p.lon for p in places], dtype=np.float64)
        return cls(places=places, distances=haversine_matrix(lats, lons))


class RouteSequencerService(ABC):
    """Abstract base class for route sequencing."""

    @abstractmethod
    def optimize_order(self, matrix: DistanceMatrix, start_index: int = 0) -> list[int]:
        pass

    @abstractmethod
    def sequence(self, start: Place, places: list[Place]) -> list[Place]:
        pass


class GreedyRouteSequencer(RouteSequencerService):
    """Nearest-neighbor sequencer."""

    def optimize_order(self, matrix: DistanceMatrix, start_index: int = 0) -> list[int]:
        """Visit order as indices into ``matrix.places``, beginning at ``start_index``."""
        n = len(matrix.places)
        if n == 0:
            return []

        visited = np.zeros(n, dtype=bool)
        order = [start_index]
        visited[start_index] = True
        current = start_index

        while len(order) < n:
            row = np.where(visited, np.inf, matrix.distances[current])
            # argmin returns the first minimum, which gives the input-order tie-break
            nearest = int(np.argmin(row))
            order.append(nearest)
            visited[nearest] = True
            current = nearest

        return order

    def sequence(self, start: Place, places: list[Place]) -> list[Place]:
        """Start point followed by every place, in nearest-neighbor order.

        The result always has ``len(places) + 1`` elements.
        """
        matrix = DistanceMatrix.build([start, *places])
        order = self.optimize_order(matrix, start_index=0)
        route = [matrix.places[i] for i in order]
        logger.info(
            f"[ROUTE] Sequenced {len(places)} places, "
            f"{total_distance(route) / 1000:.2f} km straight-line"
        )
        return route


def total_distance(route: list[Place]) -> float:
    """Sum of leg lengths in meters."""
    return sum(
        haversine_distance(a.lat, a.lon, b.lat, b.lon)
        for a, b in zip(route, route[1:])
    )
