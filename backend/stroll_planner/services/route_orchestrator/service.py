"""Route generation pipeline.

Stages run strictly one after another, and each has a fallback instead of
a hard failure:

1. Enrich categories           -> original categories on failure
2. Resolve ids, fetch places   -> empty route if nothing is found
3. Filter candidates           -> top-rated candidates on failure
4. Sequence from start point   -> (pure computation)
5. Describe the route          -> fixed sentence on failure
6. Build the directions link   -> None if nothing is linkable

Nothing is retried; an external call either succeeds once or its stage
falls back.
"""

import logging

from stroll_planner.models import Place, RouteRequest, RouteResponse
from stroll_planner.services.ai_reasoning import AIReasoningService
from stroll_planner.services.candidate_filter import CandidateFilterService
from stroll_planner.services.category_enricher import CategoryEnricherService
from stroll_planner.services.gis import PlaceSourceService
from stroll_planner.services.route_sequencer import RouteSequencerService
from stroll_planner.utils.directions import DEFAULT_DIRECTIONS_BASE_URL, build_directions_url

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_METERS = 3000
DEFAULT_CANDIDATE_LIMIT = 30

START_POINT_ID = "start"
START_POINT_NAME = "Starting point"
EMPTY_ROUTE_DESCRIPTION = "Unfortunately, no suitable places were found."


class RouteOrchestrator:
    """Drives one route request through the pipeline."""

    def __init__(
        self,
        enricher: CategoryEnricherService,
        places: PlaceSourceService,
        candidate_filter: CandidateFilterService,
        sequencer: RouteSequencerService,
        ai: AIReasoningService,
        radius_meters: int = DEFAULT_RADIUS_METERS,
        candidate_limit: int = DEFAULT_CANDIDATE_LIMIT,
        directions_base_url: str = DEFAULT_DIRECTIONS_BASE_URL,
    ) -> None:
        self._enricher = enricher
        self._places = places
        self._filter = candidate_filter
        self._sequencer = sequencer
        self._ai = ai
        self._radius = radius_meters
        self._candidate_limit = candidate_limit
        self._directions_base_url = directions_base_url

    @staticmethod
    def start_place(request: RouteRequest) -> Place:
        return Place(
            id=START_POINT_ID,
            name=START_POINT_NAME,
            category="start",
            lat=request.start_point.lat,
            lon=request.start_point.lon,
        )

    @staticmethod
    def empty_route() -> RouteResponse:
        return RouteResponse(places=[], description=EMPTY_ROUTE_DESCRIPTION, directions_url=None)

    async def generate_route(self, request: RouteRequest) -> RouteResponse:
        logger.info("[ROUTE] === Route generation start ===")
        logger.info(
            f"[ROUTE] City: {request.city}, categories: {request.categories}, "
            f"duration: {request.duration_hours}h"
        )

        logger.info("[ROUTE] Step 1/6: enriching categories")
        categories = await self._enricher.enrich(
            request.categories, request.description, request.city
        )

        logger.info("[ROUTE] Step 2/6: fetching candidates")
        candidates = await self._places.search_places(
            request.city,
            categories,
            request.start_point,
            self._radius,
            self._candidate_limit,
        )
        logger.info(f"[ROUTE] Catalog returned {len(candidates)} candidates")
        if not candidates:
            logger.warning("[ROUTE] No candidates found, returning empty route")
            return self.empty_route()

        logger.info("[ROUTE] Step 3/6: filtering candidates")
        selected = await self._filter.filter(
            candidates, request.description, request.duration_hours
        )

        logger.info("[ROUTE] Step 4/6: sequencing")
        ordered = self._sequencer.sequence(self.start_place(request), selected)

        logger.info("[ROUTE] Step 5/6: describing route")
        description = await self._ai.describe_route(ordered, request.description)

        logger.info("[ROUTE] Step 6/6: building directions link")
        directions_url = build_directions_url(ordered, self._directions_base_url)

        logger.info(f"[ROUTE] === Route generation complete: {len(ordered)} points ===")
        return RouteResponse(
            places=ordered,
            description=description,
            directions_url=directions_url,
        )
