"""Stroll Planner Services.

Service layer components:
- Cache: identifier cache over an in-memory or Redis backend
- GIS: 2GIS Catalog API client with balanced per-category search
- AI Reasoning: Groq / Gemini / OpenAI-compatible assistant calls
- Category Catalog: allowed category vocabulary
- Category Enricher: assistant-suggested extra categories
- Candidate Filter: assistant selection with rating fallback
- Route Sequencer: greedy nearest-neighbor ordering
- Route Orchestrator: the end-to-end pipeline
"""

from .cache import CacheService, IdentifierCache, MemoryCacheService, RedisCacheService
from .ai_reasoning import (
    AIReasoningService,
    GeminiReasoningService,
    GroqReasoningService,
    NullReasoningService,
    OpenAICompatibleReasoningService,
    create_ai_service,
)
from .gis import CategoryTarget, GisCatalogService, PlaceSourceService
from .category_catalog import CategoryCatalogService
from .category_enricher import CategoryEnricherService
from .candidate_filter import CandidateFilterService
from .route_sequencer import GreedyRouteSequencer, RouteSequencerService
from .route_orchestrator import RouteOrchestrator

__all__ = [
    # Cache
    "CacheService",
    "IdentifierCache",
    "MemoryCacheService",
    "RedisCacheService",
    # AI reasoning
    "AIReasoningService",
    "GeminiReasoningService",
    "GroqReasoningService",
    "NullReasoningService",
    "OpenAICompatibleReasoningService",
    "create_ai_service",
    # Catalog client
    "CategoryTarget",
    "GisCatalogService",
    "PlaceSourceService",
    # Pipeline stages
    "CategoryCatalogService",
    "CategoryEnricherService",
    "CandidateFilterService",
    "GreedyRouteSequencer",
    "RouteSequencerService",
    "RouteOrchestrator",
]
