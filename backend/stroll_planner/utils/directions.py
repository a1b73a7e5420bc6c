"""Directions deep link for the 2GIS web/mobile app."""

from urllib.parse import quote_plus

from stroll_planner.models import Place

DEFAULT_DIRECTIONS_BASE_URL = "https://2gis.ru"


def _is_catalog_id(place_id: str | None) -> bool:
    return bool(place_id) and place_id.isascii() and place_id.isdigit()


def format_point(place: Place) -> str:
    """``lon,lat;id`` with six decimals, the segment format of the link."""
    return f"{place.lon:.6f},{place.lat:.6f};{place.id}"


def build_directions_url(
    ordered_places: list[Place],
    base_url: str = DEFAULT_DIRECTIONS_BASE_URL,
) -> str | None:
    """Build a directions link through the ordered places.

    Only places with a purely numeric catalog id are linked; the synthetic
    start point and anything else is skipped. Returns None when nothing is
    left to link.

    Example:
        >>> build_directions_url([Place(id="1", name="A", lat=59.9, lon=30.1)])
        'https://2gis.ru/directions/points/30.100000%2C59.900000%3B1'
    """
    segments = [format_point(p) for p in ordered_places if _is_catalog_id(p.id)]
    if not segments:
        return None
    points = quote_plus("|".join(segments))
    return f"{base_url.rstrip('/')}/directions/points/{points}"
