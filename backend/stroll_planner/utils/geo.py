"""Great-circle distance helpers."""

import math

import numpy as np
from numpy.typing import NDArray

EARTH_RADIUS_METERS = 6_371_000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in meters between two WGS84 points on a spherical Earth."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lon2 - lon1)
    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_METERS * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def haversine_matrix(lats: NDArray[np.float64], lons: NDArray[np.float64]) -> NDArray[np.float64]:
    """Pairwise haversine distances in meters, shape ``(n, n)``."""
    phi = np.radians(lats)[:, np.newaxis]
    lam = np.radians(lons)[:, np.newaxis]
    d_phi = phi.T - phi
    d_lambda = lam.T - lam
    h = np.sin(d_phi / 2) ** 2 + np.cos(phi) * np.cos(phi.T) * np.sin(d_lambda / 2) ** 2
    h = np.clip(h, 0.0, 1.0)
    return 2 * EARTH_RADIUS_METERS * np.arctan2(np.sqrt(h), np.sqrt(1 - h))
