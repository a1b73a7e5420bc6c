"""API routes for Stroll Planner.

- POST   /routes/generate  build a walking route from a wish
- GET    /categories       allowed category vocabulary
- GET    /cache/stats      identifier cache statistics
- DELETE /cache            drop every cached identifier
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from stroll_planner.container import ServiceContainer
from stroll_planner.models import Category, ErrorResponse, RouteRequest, RouteResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


@router.post(
    "/routes/generate",
    response_model=RouteResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Generate a walking route",
)
async def generate_route(
    request: RouteRequest,
    container: ServiceContainer = Depends(get_container),
) -> RouteResponse:
    """Build an ordered walking route from the user's wish and start point.

    The first place is always the start point. When no places are found the
    response has an empty place list and no directions link.
    """
    return await container.orchestrator.generate_route(request)


@router.get("/categories", response_model=list[Category], summary="List categories")
async def list_categories(
    container: ServiceContainer = Depends(get_container),
) -> list[Category]:
    return container.catalog.all()


@router.get("/cache/stats", summary="Identifier cache statistics")
async def cache_stats(
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    stats = await container.identifier_cache.stats()
    return stats.to_dict()


@router.delete("/cache", summary="Clear the identifier cache")
async def clear_cache(
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    await container.identifier_cache.clear()
    return {"cleared": True}
