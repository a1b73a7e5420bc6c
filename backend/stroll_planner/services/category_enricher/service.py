"""Category enrichment from the user's free-text wish.

The assistant may add up to four categories, but only names from the
allowed vocabulary count. Enrichment is strictly additive: the original
categories always come first and any failure returns them untouched.
"""

import logging
from typing import Any

from stroll_planner.services.ai_reasoning import AIReasoningService

logger = logging.getLogger(__name__)

MAX_CATEGORIES = 8
MAX_ADDED_CATEGORIES = 4

CATEGORY_SCHEMA: dict[str, Any] = {
    "name": "category_response",
    "schema": {
        "type": "object",
        "properties": {
            "categories": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Categories from the allowed list",
            },
        },
        "required": ["categories"],
        "additionalProperties": False,
    },
}


def _key(name: str) -> str:
    return name.strip().lower()


class CategoryEnricherService:
    """Suggest extra categories that fit the wish, from a closed vocabulary."""

    def __init__(self, ai: AIReasoningService, allowed_categories: list[str]) -> None:
        self._ai = ai
        self._allowed = list(allowed_categories)

    def build_prompt(self, current: list[str], description: str, city: str) -> str:
        sanitize = self._ai._sanitize_input
        return (
            f"You help plan walking routes.\n\n"
            f"City: {sanitize(city, max_length=100)}\n"
            f"Current search categories: {', '.join(current) or 'none'}\n"
            f'User request: "{sanitize(description)}"\n\n'
            f"ALLOWED CATEGORIES:\n[{', '.join(self._allowed)}]\n\n"
            f"Task: choose 0 to {MAX_ADDED_CATEGORIES} additional categories from the "
            f"ALLOWED CATEGORIES that best match the user request and complement "
            f"the current ones.\n\n"
            f"Strict rules:\n"
            f"1. Use ONLY names from the list above, spelled exactly.\n"
            f"2. Do not repeat categories that are already in the current search categories.\n"
            f"3. If nothing fits, return an empty array.\n\n"
            f'Respond ONLY with JSON: {{"categories": ["Name 1", "Name 2"]}}'
        )

    def validate_suggestions(self, suggestions: list[Any]) -> list[str]:
        """Keep suggestions that match the vocabulary, in its canonical spelling."""
        canonical: dict[str, str] = {}
        for name in self._allowed:
            canonical.setdefault(_key(name), name)

        valid = []
        for suggestion in suggestions:
            if not isinstance(suggestion, str):
                continue
            match = canonical.get(_key(suggestion))
            if match is None:
                logger.warning(f"[ENRICH] Ignored category not in vocabulary: '{suggestion}'")
                continue
            valid.append(match)
        return valid

    @staticmethod
    def merge(original: list[str], suggested: list[str]) -> list[str]:
        """Originals first, then new suggestions, no case-insensitive repeats,
        at most MAX_CATEGORIES in total."""
        seen: set[str] = set()
        merged: list[str] = []
        for name in original:
            if _key(name) not in seen:
                seen.add(_key(name))
                merged.append(name)
        for name in suggested:
            if len(merged) >= MAX_CATEGORIES:
                break
            if _key(name) not in seen:
                seen.add(_key(name))
                merged.append(name)
                logger.info(f"[ENRICH] Added category: '{name}'")
        return merged

    async def enrich(self, categories: list[str], description: str, city: str) -> list[str]:
        """Return ``categories`` plus validated suggestions.

        No-op when the description is blank or the vocabulary is empty.
        """
        if not description or not description.strip():
            logger.info("[ENRICH] No description provided, using original categories")
            return categories
        if not self._allowed:
            logger.warning("[ENRICH] Category vocabulary is empty, skipping enrichment")
            return categories

        logger.info(f"[ENRICH] Analyzing description: '{description}'")
        try:
            prompt = self.build_prompt(categories, description, city)
            data = await self._ai.generate_json(prompt, schema=CATEGORY_SCHEMA)
            suggestions = data.get("categories") or []
            if not isinstance(suggestions, list):
                raise ValueError("'categories' is not a list")
            enriched = self.merge(categories, self.validate_suggestions(suggestions))
        except Exception as e:
            logger.warning(f"[ENRICH] Enrichment failed, keeping original categories: {e}")
            return categories

        logger.info(f"[ENRICH] Enriched categories: {enriched}")
        return enriched
