"""Unit tests for the end-to-end route pipeline with fake collaborators."""

import pytest

from conftest import FakePlaceSource, ScriptedAIService, make_place
from stroll_planner.models import RouteRequest
from stroll_planner.services import (
    CandidateFilterService,
    CategoryEnricherService,
    GreedyRouteSequencer,
    RouteOrchestrator,
)
from stroll_planner.services.ai_reasoning import ROUTE_DESCRIPTION_FALLBACK
from stroll_planner.services.route_orchestrator import EMPTY_ROUTE_DESCRIPTION, START_POINT_ID

ALLOWED = ["Museums", "Parks", "Embankments", "Cafes"]


def make_request(**overrides) -> RouteRequest:
    data = {
        "city": "Saint Petersburg",
        "categories": ["Museums"],
        "description": "art and a walk by the water",
        "duration_hours": 3,
        "start_point": {"lat": 59.9386, "lon": 30.3141},
    }
    data.update(overrides)
    return RouteRequest.model_validate(data)


def make_orchestrator(ai: ScriptedAIService, source: FakePlaceSource) -> RouteOrchestrator:
    return RouteOrchestrator(
        enricher=CategoryEnricherService(ai, ALLOWED),
        places=source,
        candidate_filter=CandidateFilterService(ai),
        sequencer=GreedyRouteSequencer(),
        ai=ai,
        radius_meters=2000,
        candidate_limit=20,
    )


class TestRouteOrchestrator:
    """Tests for RouteOrchestrator.generate_route."""

    def setup_method(self) -> None:
        self.candidates = [
            make_place("100", lat=59.9500, lon=30.3300, rating=4.7, name="Far museum"),
            make_place("200", lat=59.9400, lon=30.3150, rating=4.9, name="Near museum"),
            make_place("300", lat=59.9450, lon=30.3200, rating=4.2, name="Embankment",
                       category="Embankments"),
        ]

    @pytest.mark.asyncio
    async def test_full_pipeline(self) -> None:
        ai = ScriptedAIService(
            {"categories": ["Embankments"]},
            {"place_ids": ["100", "200", "300"], "reason": "all fit"},
            {"description": "Art first, then the river."},
        )
        source = FakePlaceSource(self.candidates)

        response = await make_orchestrator(ai, source).generate_route(make_request())

        assert source.searches == [{
            "city": "Saint Petersburg",
            "categories": ["Museums", "Embankments"],
            "radius": 2000,
            "limit": 20,
        }]
        assert [p.id for p in response.places] == [START_POINT_ID, "200", "300", "100"]
        assert response.places[0].lat == 59.9386
        assert response.description == "Art first, then the river."
        assert response.directions_url is not None
        assert "start" not in response.directions_url
        assert response.directions_url.startswith("https://2gis.ru/directions/points/")

    @pytest.mark.asyncio
    async def test_every_assistant_call_failing(self) -> None:
        ai = ScriptedAIService(RuntimeError("a"), RuntimeError("b"), RuntimeError("c"))
        source = FakePlaceSource(self.candidates)

        response = await make_orchestrator(ai, source).generate_route(make_request())

        assert source.searches[0]["categories"] == ["Museums"]
        assert response.places[0].id == START_POINT_ID
        assert {p.id for p in response.places[1:]} == {"100", "200", "300"}
        assert response.description == ROUTE_DESCRIPTION_FALLBACK
        assert response.directions_url is not None

    @pytest.mark.asyncio
    async def test_no_candidates_gives_empty_route(self) -> None:
        ai = ScriptedAIService({"categories": []})
        source = FakePlaceSource([])

        response = await make_orchestrator(ai, source).generate_route(make_request())

        assert response.places == []
        assert response.description == EMPTY_ROUTE_DESCRIPTION
        assert response.directions_url is None
        # enrichment only; no filter or description call
        assert len(ai.prompts) == 1

    @pytest.mark.asyncio
    async def test_filter_selection_is_respected(self) -> None:
        ai = ScriptedAIService(
            {"categories": []},
            {"place_ids": ["300"], "reason": "water"},
            {"description": "Just the river."},
        )
        source = FakePlaceSource(self.candidates)

        response = await make_orchestrator(ai, source).generate_route(make_request())

        assert [p.id for p in response.places] == [START_POINT_ID, "300"]

    def test_start_place(self) -> None:
        start = RouteOrchestrator.start_place(make_request())
        assert start.id == START_POINT_ID
        assert (start.lat, start.lon) == (59.9386, 30.3141)
