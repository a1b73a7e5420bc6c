"""Shared fakes for the unit tests."""

import json
from typing import Any, Optional

from stroll_planner.models import Coordinates, Place
from stroll_planner.services import CategoryTarget, PlaceSourceService
from stroll_planner.services.ai_reasoning import AIReasoningService


class ScriptedAIService(AIReasoningService):
    """AI service that replays canned replies.

    Each reply is either a string (returned as raw model text), a dict
    (serialized to JSON) or an exception instance (raised).
    """

    _timeout = 1.0

    def __init__(self, *replies: Any) -> None:
        self._replies = list(replies)
        self.prompts: list[str] = []
        self.schemas: list[Optional[dict[str, Any]]] = []

    @property
    def provider_name(self) -> str:
        return "Scripted"

    async def _generate(
        self,
        prompt: str,
        schema: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> str:
        self.prompts.append(prompt)
        self.schemas.append(schema)
        if not self._replies:
            raise RuntimeError("no scripted reply left")
        reply = self._replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, (dict, list)):
            return json.dumps(reply)
        return reply


def make_place(
    place_id: str,
    lat: float = 59.93,
    lon: float = 30.31,
    rating: Optional[float] = None,
    category: Optional[str] = "Museums",
    name: Optional[str] = None,
) -> Place:
    return Place(
        id=place_id,
        name=name or f"Place {place_id}",
        category=category,
        lat=lat,
        lon=lon,
        rating=rating,
    )


class FakePlaceSource(PlaceSourceService):
    """Returns fixed candidates and records every search."""

    def __init__(self, places: list[Place]) -> None:
        self.places = places
        self.searches: list[dict] = []

    async def resolve_region_id(self, city: str) -> Optional[str]:
        return "38"

    async def resolve_rubric_id(self, category: str, region_id: str) -> Optional[str]:
        return None

    async def search(
        self,
        region_id: str,
        targets: list[CategoryTarget],
        point: Coordinates,
        radius_meters: int,
        limit_per_category: int,
        total_limit: int | None = None,
    ) -> list[Place]:
        return list(self.places)

    async def search_places(
        self,
        city: str,
        categories: list[str],
        point: Coordinates,
        radius_meters: int,
        total_limit: int,
    ) -> list[Place]:
        self.searches.append({
            "city": city,
            "categories": categories,
            "radius": radius_meters,
            "limit": total_limit,
        })
        return list(self.places)
