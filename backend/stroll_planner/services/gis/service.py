"""2GIS Catalog API client: identifier resolution and balanced place search.

Architecture:
1. Region search: city name -> region id (cached)
2. Rubric search: category name -> rubric id within the region (cached),
   picking the rubric with the most branches so "Museums" resolves to the
   broad rubric, not a narrow sub-rubric that happens to come first
3. Items search: one request per category, run concurrently, then merged

Every requested category gets its own query and its own slice of the
result budget; a popular rubric never crowds out the others.

Every upstream failure is contained at the smallest scope: a failed region
lookup yields None, a failed rubric lookup yields None, a failed category
fetch yields an empty list. An unreachable identifier cache counts as a
miss on read and is skipped on write. Nothing here raises to the caller.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Callable, Optional

import httpx

from stroll_planner.models import Coordinates, Place
from stroll_planner.models.gis import (
    GisItem,
    GisItemsResponse,
    GisRegionSearchResponse,
    GisRubricSearchResponse,
    GisSchedule,
)
from stroll_planner.services.cache import IdentifierCache

logger = logging.getLogger(__name__)

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

EXTENDED_FIELDS = ",".join([
    "items.point",
    "items.rubrics",
    "items.reviews",
    "items.schedule",
    "items.address",
    "items.description",
    "items.external_content",
])


@dataclass(frozen=True)
class CategoryTarget:
    """One independent items query.

    ``rubric_id`` is the resolved catalog rubric. When it could not be
    resolved the query falls back to a free-text search on ``name``.
    """
    name: str
    rubric_id: Optional[str] = None


# ── Item parsing ──────────────────────────────────────────────────────

def _parse_clock(value: str | None) -> Optional[time]:
    if not value:
        return None
    if value.startswith("24:"):
        return time.max
    try:
        return time.fromisoformat(value)
    except ValueError:
        return None


def format_schedule(schedule: GisSchedule) -> Optional[str]:
    """Summarise a weekly schedule as ``"Mon: 10:00-18:00, Tue: ..."``.

    Only the first interval of each day is shown. Returns ``"24/7"`` for
    round-the-clock places and None when no day has hours.
    """
    if schedule.is_24x7:
        return "24/7"
    parts = []
    for day in WEEKDAYS:
        day_schedule = schedule.day(day)
        if day_schedule is None or not day_schedule.working_hours:
            continue
        hours = day_schedule.working_hours[0]
        if hours.from_ and hours.to:
            parts.append(f"{day}: {hours.from_}-{hours.to}")
    return ", ".join(parts) or None


def is_open_at(schedule: GisSchedule, moment: datetime) -> bool:
    """Whether any of today's intervals contains ``moment``.

    Intervals that wrap past midnight (22:00-02:00) count as open on both
    sides of midnight for the day they are listed under.
    """
    if schedule.is_24x7:
        return True
    day_schedule = schedule.day(WEEKDAYS[moment.weekday()])
    if day_schedule is None:
        return False
    now = moment.time()
    for hours in day_schedule.working_hours:
        start = _parse_clock(hours.from_)
        end = _parse_clock(hours.to)
        if start is None or end is None:
            continue
        if start <= end:
            if start <= now <= end:
                return True
        elif now >= start or now <= end:
            return True
    return False


def _parse_rating(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return None
    return rating if 0 <= rating <= 5 else None


def _parse_count(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return None


def normalize_item_id(raw_id: str) -> str:
    """Drop the hash suffix 2GIS appends to branch ids (``123_abc`` -> ``123``)."""
    return raw_id.split("_", 1)[0]


def map_item(item: GisItem, now: datetime) -> Optional[Place]:
    """Convert a catalog item into a Place, or None if it can't be placed on a map."""
    if not item.id or not item.name:
        return None
    if item.point is None or item.point.lat is None or item.point.lon is None:
        return None

    category = None
    if item.rubrics:
        category = item.rubrics[0].name

    rating = review_count = None
    if item.reviews is not None:
        rating = _parse_rating(item.reviews.general_rating or item.reviews.rating)
        review_count = _parse_count(
            item.reviews.general_review_count or item.reviews.review_count
        )

    working_hours = open_now = None
    if item.schedule is not None:
        working_hours = format_schedule(item.schedule)
        open_now = is_open_at(item.schedule, now)

    photo_url = next(
        (c.main_photo_url for c in item.external_content if c.main_photo_url), None
    )

    try:
        return Place(
            id=normalize_item_id(item.id),
            name=item.name,
            category=category,
            lat=item.point.lat,
            lon=item.point.lon,
            address=item.address_name,
            description=item.description,
            rating=rating,
            review_count=review_count,
            working_hours=working_hours,
            open_now=open_now,
            photo_url=photo_url,
        )
    except ValueError as e:
        logger.info(f"[GIS] Skipping item {item.id}: {e}")
        return None


def parse_items(payload: dict[str, Any], now: datetime) -> list[Place]:
    """Parse an items response. API-level errors yield an empty list."""
    response = GisItemsResponse.model_validate(payload)
    if response.meta.code != 200:
        error = response.meta.error
        logger.warning(
            f"[GIS] API error code={response.meta.code} "
            f"type={error.type if error else None} message={error.message if error else None}"
        )
        return []
    if response.result is None:
        return []
    places = []
    for item in response.result.items:
        place = map_item(item, now)
        if place is not None:
            places.append(place)
    return places


def merge_unique(batches: list[list[Place]], limit: int | None = None) -> list[Place]:
    """Concatenate batches, keeping the first occurrence of every id."""
    seen: set[str] = set()
    merged: list[Place] = []
    for batch in batches:
        for place in batch:
            if place.id in seen:
                continue
            seen.add(place.id)
            merged.append(place)
    return merged if limit is None else merged[:limit]


# ── Service ───────────────────────────────────────────────────────────

class PlaceSourceService(ABC):
    """Abstract base class for place catalog clients."""

    @abstractmethod
    async def resolve_region_id(self, city: str) -> Optional[str]:
        pass

    @abstractmethod
    async def resolve_rubric_id(self, category: str, region_id: str) -> Optional[str]:
        pass

    @abstractmethod
    async def search(
        self,
        region_id: str,
        targets: list[CategoryTarget],
        point: Coordinates,
        radius_meters: int,
        limit_per_category: int,
        total_limit: int | None = None,
    ) -> list[Place]:
        pass

    @abstractmethod
    async def search_places(
        self,
        city: str,
        categories: list[str],
        point: Coordinates,
        radius_meters: int,
        total_limit: int,
    ) -> list[Place]:
        pass


class GisCatalogService(PlaceSourceService):
    """2GIS Catalog API implementation.

    Uses:
    - ``/2.0/region/search`` for city -> region id
    - ``/2.0/catalog/rubric/search`` for category -> rubric id
    - ``/3.0/items`` for places around the start point, sorted by rating
    """

    DEFAULT_BASE_URL = "https://catalog.api.2gis.com"
    REGION_ENDPOINT = "/2.0/region/search"
    RUBRIC_ENDPOINT = "/2.0/catalog/rubric/search"
    ITEMS_ENDPOINT = "/3.0/items"

    HEADERS = {"User-Agent": "StrollPlanner/1.0", "Accept": "application/json"}

    def __init__(
        self,
        api_key: str,
        cache: IdentifierCache,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        page_size: int = 10,
        min_per_category: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._api_key = api_key.strip()
        self._cache = cache
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._page_size = page_size
        self._min_per_category = min_per_category
        self._transport = transport
        self._clock = clock

    def _get_client(self) -> httpx.AsyncClient:
        # Fresh client per stage; the balanced fan-out shares one
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=self.HEADERS,
            transport=self._transport,
        )

    async def close(self) -> None:
        pass  # No persistent client to close

    @staticmethod
    def _sanitize_url(url: str) -> str:
        return re.sub(r"(key=)[^&]+", r"\1***", url)

    async def _get_json(
        self, client: httpx.AsyncClient, path: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        response = await client.get(path, params={**params, "key": self._api_key})
        logger.info(f"[GIS] GET {self._sanitize_url(str(response.request.url))} -> {response.status_code}")
        response.raise_for_status()
        return response.json()

    def per_category_limit(self, total_limit: int, category_count: int) -> int:
        """Result budget of one category in balanced search.

        ``max(min_per_category, total // count)`` capped by the page-size
        ceiling of the items endpoint.
        """
        if category_count <= 0:
            return min(total_limit, self._page_size)
        share = total_limit // category_count
        return min(self._page_size, max(self._min_per_category, share))

    # ── Identifier resolution ─────────────────────────────────────────

    async def resolve_region_id(self, city: str) -> Optional[str]:
        """Region id of a city: the first region search result.

        Returns None when the city is unknown or the lookup fails; without a
        region nothing can be searched.
        """
        try:
            cached = await self._cache.get_region_id(city)
        except Exception as e:
            logger.warning(f"[CACHE] Region read failed for '{city}': {e}")
            cached = None
        if cached:
            logger.info(f"[GIS] Region for '{city}' from cache: {cached}")
            return cached

        try:
            async with self._get_client() as client:
                payload = await self._get_json(client, self.REGION_ENDPOINT, {"q": city})
            response = GisRegionSearchResponse.model_validate(payload)
        except Exception as e:
            logger.warning(f"[GIS] Region lookup failed for '{city}': {e}")
            return None

        if response.meta.code != 200 or response.result is None or not response.result.items:
            logger.warning(f"[GIS] No region found for '{city}'")
            return None

        region = response.result.items[0]
        try:
            await self._cache.put_region_id(city, region.id)
        except Exception as e:
            logger.warning(f"[CACHE] Region write failed for '{city}': {e}")
        logger.info(f"[GIS] Region for '{city}': {region.id} ({region.name})")
        return region.id

    async def resolve_rubric_id(self, category: str, region_id: str) -> Optional[str]:
        """Rubric id of a category inside a region.

        Among all candidates the one with the largest branch count wins;
        on equal counts the earlier result wins.
        """
        try:
            cached = await self._cache.get_rubric_id(region_id, category)
        except Exception as e:
            logger.warning(f"[CACHE] Rubric read failed for '{category}': {e}")
            cached = None
        if cached:
            return cached

        try:
            async with self._get_client() as client:
                payload = await self._get_json(
                    client, self.RUBRIC_ENDPOINT, {"q": category, "region_id": region_id}
                )
            response = GisRubricSearchResponse.model_validate(payload)
        except Exception as e:
            logger.warning(f"[GIS] Rubric lookup failed for '{category}': {e}")
            return None

        if response.meta.code != 200 or response.result is None or not response.result.items:
            logger.info(f"[GIS] No rubric found for '{category}' in region {region_id}")
            return None

        best = max(response.result.items, key=lambda r: r.branch_count or 0)
        try:
            await self._cache.put_rubric_id(region_id, category, best.id)
        except Exception as e:
            logger.warning(f"[CACHE] Rubric write failed for '{category}': {e}")
        logger.info(
            f"[GIS] Rubric for '{category}': {best.id} ({best.name}, "
            f"{best.branch_count or 0} branches, {len(response.result.items)} candidates)"
        )
        return best.id

    # ── Items search ──────────────────────────────────────────────────

    async def _fetch_category(
        self,
        client: httpx.AsyncClient,
        region_id: str,
        target: CategoryTarget,
        point: Coordinates,
        radius_meters: int,
        limit: int,
    ) -> list[Place]:
        params: dict[str, Any] = {
            "region_id": region_id,
            "point": f"{point.lon},{point.lat}",
            "radius": radius_meters,
            "sort": "rating",
            "sort_point": f"{point.lon},{point.lat}",
            "type": "branch",
            "page_size": min(limit, self._page_size),
            "fields": EXTENDED_FIELDS,
        }
        if target.rubric_id:
            params["rubric_id"] = target.rubric_id
        else:
            params["q"] = target.name

        try:
            payload = await self._get_json(client, self.ITEMS_ENDPOINT, params)
            places = parse_items(payload, self._clock())
        except Exception as e:
            logger.warning(f"[GIS] Category '{target.name}' failed: {e}")
            return []
        logger.info(f"[GIS] Category '{target.name}' found {len(places)} places")
        return places

    async def search(
        self,
        region_id: str,
        targets: list[CategoryTarget],
        point: Coordinates,
        radius_meters: int,
        limit_per_category: int,
        total_limit: int | None = None,
    ) -> list[Place]:
        """Query every target independently and concurrently, then merge.

        The merged list keeps target order, drops repeated ids (first one
        wins) and is cut to ``total_limit``.
        """
        if not targets:
            return []
        async with self._get_client() as client:
            batches = await asyncio.gather(*(
                self._fetch_category(
                    client, region_id, target, point, radius_meters, limit_per_category
                )
                for target in targets
            ))
        merged = merge_unique(list(batches), total_limit)
        logger.info(
            f"[GIS] Merged {sum(len(b) for b in batches)} results from "
            f"{len(targets)} queries into {len(merged)} unique places"
        )
        return merged

    async def search_places(
        self,
        city: str,
        categories: list[str],
        point: Coordinates,
        radius_meters: int,
        total_limit: int,
    ) -> list[Place]:
        """Resolve identifiers and fetch candidates for a route request.

        - no categories: a single free-text query on the city name
        - one category: a single query of up to ``total_limit`` (page capped)
        - several categories: balanced search, one query per category
        """
        logger.info(
            f"[GIS] Search: city='{city}' categories={categories} "
            f"radius={radius_meters} limit={total_limit}"
        )
        region_id = await self.resolve_region_id(city)
        if not region_id:
            return []

        if not categories:
            targets = [CategoryTarget(name=city)]
        else:
            rubric_ids = await asyncio.gather(*(
                self.resolve_rubric_id(category, region_id) for category in categories
            ))
            targets = [
                CategoryTarget(name=category, rubric_id=rubric_id)
                for category, rubric_id in zip(categories, rubric_ids)
            ]

        if len(targets) > 1:
            limit = self.per_category_limit(total_limit, len(targets))
            logger.info(f"[GIS] Balanced search: {len(targets)} categories, {limit} per category")
        else:
            limit = min(total_limit, self._page_size)

        return await self.search(region_id, targets, point, radius_meters, limit, total_limit)
