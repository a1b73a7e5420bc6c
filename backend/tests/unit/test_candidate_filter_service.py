"""Unit tests for AI candidate filtering and its rating fallback."""

import pytest

from conftest import ScriptedAIService, make_place
from stroll_planner.services.candidate_filter import (
    CandidateFilterService,
    mentions_food,
    place_count_bounds,
    rating_fallback,
)


class TestPlaceCountBounds:
    @pytest.mark.parametrize(
        "hours, bounds",
        [(1, (1, 2)), (2, (2, 3)), (3, (2, 4)), (4, (3, 5)), (5, (4, 6)), (6, (4, 6)), (8, (6, 8))],
    )
    def test_bounds(self, hours: int, bounds: tuple[int, int]) -> None:
        assert place_count_bounds(hours) == bounds


class TestMentionsFood:
    def test_english(self) -> None:
        assert mentions_food("museums and then lunch somewhere")

    def test_russian(self) -> None:
        assert mentions_food("хочу где-нибудь поесть")

    def test_no_food(self) -> None:
        assert not mentions_food("quiet parks and bridges")


class TestRatingFallback:
    def test_rated_first_unrated_last(self) -> None:
        candidates = [
            make_place("a", rating=4.8),
            make_place("b", rating=None),
            make_place("c", rating=4.2),
        ]

        result = rating_fallback(candidates, duration_hours=4)

        assert [p.id for p in result] == ["a", "c", "b"]

    def test_size_is_twice_hours(self) -> None:
        candidates = [make_place(str(i), rating=4.0) for i in range(20)]
        assert len(rating_fallback(candidates, duration_hours=5)) == 10

    def test_minimum_three(self) -> None:
        candidates = [make_place(str(i), rating=4.0) for i in range(5)]
        assert len(rating_fallback(candidates, duration_hours=1)) == 3

    def test_ties_keep_input_order(self) -> None:
        candidates = [make_place("x", rating=4.5), make_place("y", rating=4.5)]
        assert [p.id for p in rating_fallback(candidates, 2)] == ["x", "y"]


class TestCandidateFilterService:
    """Tests for CandidateFilterService.filter."""

    def setup_method(self) -> None:
        self.candidates = [
            make_place("1", rating=4.1),
            make_place("2", rating=4.9),
            make_place("3", rating=None),
            make_place("4", rating=4.5),
        ]

    @pytest.mark.asyncio
    async def test_keeps_catalog_order(self) -> None:
        ai = ScriptedAIService({"place_ids": ["4", "1"], "reason": "fits"})
        service = CandidateFilterService(ai)

        result = await service.filter(self.candidates, "museums", 2)

        assert [p.id for p in result] == ["1", "4"]

    @pytest.mark.asyncio
    async def test_unknown_ids_ignored(self) -> None:
        ai = ScriptedAIService({"place_ids": ["99", "2"], "reason": "fits"})
        result = await CandidateFilterService(ai).filter(self.candidates, "museums", 2)
        assert [p.id for p in result] == ["2"]

    @pytest.mark.asyncio
    async def test_numeric_ids_matched_as_strings(self) -> None:
        ai = ScriptedAIService({"place_ids": [3], "reason": ""})
        result = await CandidateFilterService(ai).filter(self.candidates, "museums", 2)
        assert [p.id for p in result] == ["3"]

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_rating(self) -> None:
        ai = ScriptedAIService(RuntimeError("unavailable"))

        result = await CandidateFilterService(ai).filter(self.candidates, "museums", 4)

        assert [p.id for p in result] == ["2", "4", "1", "3"]

    @pytest.mark.asyncio
    async def test_empty_selection_falls_back(self) -> None:
        ai = ScriptedAIService({"place_ids": ["nope"], "reason": "nothing fits"})

        result = await CandidateFilterService(ai).filter(self.candidates, "museums", 1)

        assert [p.id for p in result] == ["2", "4", "1"]

    @pytest.mark.asyncio
    async def test_malformed_reply_falls_back(self) -> None:
        ai = ScriptedAIService({"place_ids": "1,2"})
        result = await CandidateFilterService(ai).filter(self.candidates, "museums", 1)
        assert [p.id for p in result] == ["2", "4", "1"]

    @pytest.mark.asyncio
    async def test_no_candidates_skips_call(self) -> None:
        ai = ScriptedAIService()
        assert await CandidateFilterService(ai).filter([], "museums", 3) == []
        assert ai.prompts == []

    @pytest.mark.asyncio
    async def test_prompt_contents(self) -> None:
        ai = ScriptedAIService({"place_ids": ["1"], "reason": "ok"})

        await CandidateFilterService(ai).filter(self.candidates, "lunch after museums", 4)

        prompt = ai.prompts[0]
        assert "between 3 and 5 places" in prompt
        assert "The user wants to eat" in prompt
        assert '"id": "2"' in prompt
        assert ai.schemas[0]["name"] == "place_selection"

    def test_compact_view(self) -> None:
        view = CandidateFilterService.compact(make_place("1", rating=4.5))
        assert view == {"id": "1", "name": "Place 1", "category": "Museums", "rating": 4.5}
