"""Candidate filtering against the user's wish and time budget.

The assistant picks a subset of candidate ids. Its ordering is ignored:
the result keeps the catalog order and the sequencer decides the walk order.
When the assistant fails, returns garbage or selects nothing known, the
best-rated candidates are taken instead.
"""

import json
import logging
import re
from typing import Any

from stroll_planner.models import Place
from stroll_planner.services.ai_reasoning import AIReasoningService

logger = logging.getLogger(__name__)

FILTER_SCHEMA: dict[str, Any] = {
    "name": "place_selection",
    "schema": {
        "type": "object",
        "properties": {
            "place_ids": {"type": "array", "items": {"type": "string"}},
            "reason": {"type": "string"},
        },
        "required": ["place_ids", "reason"],
        "additionalProperties": False,
    },
}

# Words that mean the user wants to eat somewhere along the way
FOOD_PATTERN = re.compile(
    r"\b(eat|eating|food|hungry|lunch|dinner|breakfast|brunch|snack|restaurants?|"
    r"cafes?|caf[eé]|coffee|dessert|bakery|"
    r"поесть|перекус\w*|обед\w*|ужин\w*|завтрак\w*|еда|кафе|ресторан\w*|кофе)\b",
    re.IGNORECASE,
)


def place_count_bounds(duration_hours: int) -> tuple[int, int]:
    """Minimum and maximum number of stops that fit in the time budget."""
    if duration_hours <= 1:
        return 1, 2
    if duration_hours == 2:
        return 2, 3
    if duration_hours == 3:
        return 2, 4
    if duration_hours == 4:
        return 3, 5
    if duration_hours <= 6:
        return 4, 6
    return 6, 8


def fallback_target(duration_hours: int) -> int:
    return max(3, duration_hours * 2)


def mentions_food(description: str) -> bool:
    return bool(FOOD_PATTERN.search(description or ""))


def rating_fallback(candidates: list[Place], duration_hours: int) -> list[Place]:
    """Best-rated candidates first, unrated last, original order on ties."""
    ranked = sorted(
        candidates,
        key=lambda p: (p.rating is None, -(p.rating or 0.0)),
    )
    return ranked[:fallback_target(duration_hours)]


class CandidateFilterService:
    """Pick the places that fit the wish, with a rating-sort fallback."""

    def __init__(self, ai: AIReasoningService) -> None:
        self._ai = ai

    @staticmethod
    def compact(place: Place) -> dict[str, Any]:
        view: dict[str, Any] = {"id": place.id, "name": place.name, "category": place.category}
        if place.rating is not None:
            view["rating"] = place.rating
        if place.review_count:
            view["reviews"] = place.review_count
        return view

    def build_prompt(self, candidates: list[Place], description: str, duration_hours: int) -> str:
        min_places, max_places = place_count_bounds(duration_hours)
        candidates_json = json.dumps(
            [self.compact(p) for p in candidates], ensure_ascii=False
        )
        rules = [
            f"Select between {min_places} and {max_places} places; "
            f"a {duration_hours}h walk has no room for more.",
            "Prefer places that match the user's wish; use rating and review count "
            "to break ties.",
            "Keep the route varied: do not pick several places of the same category "
            "in a row, mix categories.",
            "Use ONLY ids from the candidate list.",
        ]
        if mentions_food(description):
            rules.append(
                "The user wants to eat: include one food place (cafe or restaurant), "
                "two at most for walks over 5 hours, never as the first stop."
            )
        else:
            rules.append("Do not pick more than one food place (cafe, restaurant, bar).")
        rules_text = "\n".join(f"{i}. {r}" for i, r in enumerate(rules, 1))
        return (
            f"Choose places for a walking route.\n\n"
            f'User wish: "{self._ai._sanitize_input(description)}"\n'
            f"Available time: {duration_hours} hours\n\n"
            f"Rules:\n{rules_text}\n\n"
            f"Candidates (JSON):\n{candidates_json}\n\n"
            f'Respond ONLY with JSON: {{"place_ids": ["id1", "id2"], "reason": "one sentence"}}'
        )

    async def _select_ids(
        self, candidates: list[Place], description: str, duration_hours: int
    ) -> set[str]:
        prompt = self.build_prompt(candidates, description, duration_hours)
        data = await self._ai.generate_json(prompt, schema=FILTER_SCHEMA)
        ids = data.get("place_ids")
        if not isinstance(ids, list):
            raise ValueError("'place_ids' is not a list")
        if data.get("reason"):
            logger.info(f"[FILTER] Reason: {data['reason']}")
        return {str(i) for i in ids if i is not None}

    async def filter(
        self, candidates: list[Place], description: str, duration_hours: int
    ) -> list[Place]:
        """Subset of ``candidates`` in their original order."""
        if not candidates:
            return []

        logger.info(f"[FILTER] Filtering {len(candidates)} candidates for {duration_hours}h")
        try:
            selected = await self._select_ids(candidates, description, duration_hours)
        except Exception as e:
            logger.warning(f"[FILTER] Assistant selection failed: {e}")
            selected = set()

        filtered = [p for p in candidates if p.id in selected]
        if filtered:
            logger.info(f"[FILTER] Assistant selected {len(filtered)} places")
            return filtered

        fallback = rating_fallback(candidates, duration_hours)
        logger.info(f"[FILTER] Falling back to top {len(fallback)} places by rating")
        return fallback
