"""2GIS Catalog API client."""

from .service import (
    CategoryTarget,
    GisCatalogService,
    PlaceSourceService,
    format_schedule,
    is_open_at,
    map_item,
    merge_unique,
    parse_items,
)

__all__ = [
    "CategoryTarget",
    "GisCatalogService",
    "PlaceSourceService",
    "format_schedule",
    "is_open_at",
    "map_item",
    "merge_unique",
    "parse_items",
]
