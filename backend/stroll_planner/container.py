"""Process-wide service wiring.

Everything with state (the identifier cache above all) is built once here
at startup and handed to the API through ``app.state``; nothing reaches for
module-level singletons.
"""

import logging
from dataclasses import dataclass

from stroll_planner.settings import Settings
from stroll_planner.services import (
    AIReasoningService,
    CandidateFilterService,
    CategoryCatalogService,
    CategoryEnricherService,
    GisCatalogService,
    GreedyRouteSequencer,
    IdentifierCache,
    NullReasoningService,
    RouteOrchestrator,
    create_ai_service,
)
from stroll_planner.services.cache import create_cache_backend

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    catalog: CategoryCatalogService
    identifier_cache: IdentifierCache
    ai: AIReasoningService
    places: GisCatalogService
    orchestrator: RouteOrchestrator

    async def aclose(self) -> None:
        await self.places.close()
        await self.ai.close()
        await self.identifier_cache.close()


def create_container(settings: Settings) -> ServiceContainer:
    settings.log_summary()

    catalog = CategoryCatalogService.from_file(settings.categories_file)
    identifier_cache = IdentifierCache(
        backend=create_cache_backend(settings.redis_url, settings.cache_ttl_seconds),
        ttl_seconds=settings.cache_ttl_seconds,
    )

    try:
        ai = create_ai_service()
    except ValueError as e:
        logger.warning(f"[AI] {e}. AI stages will use their fallbacks.")
        ai = NullReasoningService()

    places = GisCatalogService(
        api_key=settings.gis_api_key,
        cache=identifier_cache,
        base_url=settings.gis_base_url,
        timeout=settings.gis_timeout,
        page_size=settings.gis_page_size,
        min_per_category=settings.gis_min_per_category,
    )
    orchestrator = RouteOrchestrator(
        enricher=CategoryEnricherService(ai, catalog.names()),
        places=places,
        candidate_filter=CandidateFilterService(ai),
        sequencer=GreedyRouteSequencer(),
        ai=ai,
        radius_meters=settings.search_radius_meters,
        candidate_limit=settings.candidate_limit,
        directions_base_url=settings.directions_base_url,
    )
    return ServiceContainer(
        settings=settings,
        catalog=catalog,
        identifier_cache=identifier_cache,
        ai=ai,
        places=places,
        orchestrator=orchestrator,
    )
