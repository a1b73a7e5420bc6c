"""Runtime configuration.

Values come from the environment (``.env`` is loaded first). AI provider
credentials are read by the provider classes themselves, see
``stroll_planner.services.ai_reasoning``.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

try:
    load_dotenv()
except Exception:
    pass  # Python 3.14+ compat

DEFAULT_CATEGORIES_FILE = Path(__file__).parent / "data" / "categories.json"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[CONFIG] {name}={raw!r} is not an integer, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[CONFIG] {name}={raw!r} is not a number, using {default}")
        return default


def mask_key(key: str | None) -> str:
    """Show only the first four characters of a secret."""
    if not key or len(key) <= 4:
        return "****"
    return key[:4] + "****"


@dataclass
class Settings:
    """Service configuration.

    Attributes:
        gis_api_key: 2GIS Catalog API key.
        gis_base_url: Catalog API root.
        gis_timeout: Connect/response timeout for every catalog call (seconds).
        gis_page_size: Page-size ceiling of the items endpoint.
        gis_min_per_category: Floor of the per-category limit in balanced search.
        search_radius_meters: Search radius around the start point.
        candidate_limit: Total candidates fetched per request.
        cache_ttl_seconds: Lifetime of resolved region/rubric identifiers.
        redis_url: Optional Redis backend for the identifier cache.
        directions_base_url: Host used for the directions deep link.
        categories_file: JSON file with the allowed category vocabulary.
        cors_origins: Allowed browser origins.
    """

    gis_api_key: str = ""
    gis_base_url: str = "https://catalog.api.2gis.com"
    gis_timeout: float = 10.0
    gis_page_size: int = 10
    gis_min_per_category: int = 3
    search_radius_meters: int = 3000
    candidate_limit: int = 30
    cache_ttl_seconds: int = 86400
    redis_url: str | None = None
    directions_base_url: str = "https://2gis.ru"
    categories_file: Path = DEFAULT_CATEGORIES_FILE
    cors_origins: list[str] = field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
        ]
    )

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            gis_api_key=(os.getenv("GIS_API_KEY") or "").strip(),
            gis_base_url=os.getenv("GIS_BASE_URL", defaults.gis_base_url).rstrip("/"),
            gis_timeout=_env_float("GIS_TIMEOUT", defaults.gis_timeout),
            gis_page_size=_env_int("GIS_PAGE_SIZE", defaults.gis_page_size),
            gis_min_per_category=_env_int("GIS_MIN_PER_CATEGORY", defaults.gis_min_per_category),
            search_radius_meters=_env_int("ROUTE_SEARCH_RADIUS", defaults.search_radius_meters),
            candidate_limit=_env_int("ROUTE_CANDIDATE_LIMIT", defaults.candidate_limit),
            cache_ttl_seconds=_env_int("CACHE_TTL_SECONDS", defaults.cache_ttl_seconds),
            redis_url=os.getenv("REDIS_URL") or None,
            directions_base_url=os.getenv(
                "DIRECTIONS_BASE_URL", defaults.directions_base_url
            ).rstrip("/"),
            categories_file=Path(os.getenv("CATEGORIES_FILE") or DEFAULT_CATEGORIES_FILE),
            cors_origins=(
                [o.strip() for o in origins.split(",") if o.strip()]
                if origins
                else defaults.cors_origins
            ),
        )

    def log_summary(self) -> None:
        """Log the loaded configuration with secrets masked."""
        if not self.gis_api_key:
            logger.warning("[CONFIG] GIS_API_KEY is not set, catalog searches will fail")
        logger.info(
            f"[CONFIG] GIS: base_url={self.gis_base_url} key={mask_key(self.gis_api_key)} "
            f"timeout={self.gis_timeout}s page_size={self.gis_page_size}"
        )
        logger.info(
            f"[CONFIG] Route: radius={self.search_radius_meters}m "
            f"candidates={self.candidate_limit}"
        )
        backend = "redis" if self.redis_url else "memory"
        logger.info(f"[CONFIG] Cache: ttl={self.cache_ttl_seconds}s backend={backend}")
