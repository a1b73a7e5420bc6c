"""Category catalog: the closed vocabulary of searchable categories.

Loaded once at startup from a JSON file of ``{"id", "category"}`` objects.
The same list is served to clients and constrains AI category enrichment.
"""

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter

from stroll_planner.models import Category

logger = logging.getLogger(__name__)

_CATEGORY_LIST = TypeAdapter(list[Category])


class CategoryCatalogService:
    """In-memory, read-only category vocabulary."""

    def __init__(self, categories: list[Category]) -> None:
        self._categories = list(categories)

    @classmethod
    def from_file(cls, path: Path) -> "CategoryCatalogService":
        """Load the catalog.

        Raises:
            FileNotFoundError: If the file does not exist.
            pydantic.ValidationError: If an entry is malformed.
        """
        logger.info(f"[CATALOG] Loading categories from {path}")
        if not path.exists():
            logger.error(f"[CATALOG] Categories file not found: {path}")
            raise FileNotFoundError(f"Categories file not found: {path}")
        raw = json.loads(path.read_text(encoding="utf-8"))
        categories = _CATEGORY_LIST.validate_python(raw)
        logger.info(f"[CATALOG] Loaded {len(categories)} categories")
        return cls(categories)

    def all(self) -> list[Category]:
        return list(self._categories)

    def names(self) -> list[str]:
        return [c.name for c in self._categories]

    def __len__(self) -> int:
        return len(self._categories)
