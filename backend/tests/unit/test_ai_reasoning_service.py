"""Unit tests for the AI reasoning base class and providers."""

import json

import httpx
import pytest

from conftest import ScriptedAIService, make_place
from stroll_planner.services.ai_reasoning import (
    ROUTE_DESCRIPTION_FALLBACK,
    NullReasoningService,
    OpenAICompatibleReasoningService,
    create_ai_service,
)
from stroll_planner.services.ai_reasoning.service import AIReasoningService

PROVIDER_ENV = ("GROQ_API_KEY", "GEMINI_API_KEY", "LLM_BASE_URL", "LLM_API_KEY")


class TestHelpers:
    def test_sanitize_strips_control_characters(self) -> None:
        assert AIReasoningService._sanitize_input("museums\x00\x07 and\nparks") == "museums and\nparks"

    def test_sanitize_truncates(self) -> None:
        assert len(AIReasoningService._sanitize_input("a" * 1000)) == 500

    def test_sanitize_none(self) -> None:
        assert AIReasoningService._sanitize_input(None) == ""  # type: ignore[arg-type]

    def test_extract_json_from_fence(self) -> None:
        text = 'Sure!\n```json\n{"a": 1}\n```'
        assert AIReasoningService._extract_json(text) == '{"a": 1}'

    def test_extract_json_plain(self) -> None:
        assert AIReasoningService._extract_json('  {"a": 1} ') == '{"a": 1}'


class TestGenerateJson:
    @pytest.mark.asyncio
    async def test_parses_object(self) -> None:
        ai = ScriptedAIService('{"categories": ["Parks"]}')
        assert await ai.generate_json("prompt") == {"categories": ["Parks"]}

    @pytest.mark.asyncio
    async def test_empty_reply_raises(self) -> None:
        ai = ScriptedAIService("")
        with pytest.raises(ValueError):
            await ai.generate_json("prompt")

    @pytest.mark.asyncio
    async def test_non_object_raises(self) -> None:
        ai = ScriptedAIService("[1, 2]")
        with pytest.raises(ValueError):
            await ai.generate_json("prompt")

    @pytest.mark.asyncio
    async def test_malformed_json_raises(self) -> None:
        ai = ScriptedAIService("not json at all")
        with pytest.raises(ValueError):
            await ai.generate_json("prompt")


class TestDescribeRoute:
    def setup_method(self) -> None:
        self.places = [
            make_place("start", category=None, name="Starting point"),
            make_place("1", name="Hermitage"),
        ]

    @pytest.mark.asyncio
    async def test_returns_description(self) -> None:
        ai = ScriptedAIService({"description": "A classic museum walk."})

        result = await ai.describe_route(self.places, "museums")

        assert result == "A classic museum walk."
        assert "1. Starting point" in ai.prompts[0]
        assert "2. Hermitage (Museums)" in ai.prompts[0]

    @pytest.mark.asyncio
    async def test_failure_uses_fallback(self) -> None:
        ai = ScriptedAIService(RuntimeError("boom"))
        assert await ai.describe_route(self.places, "museums") == ROUTE_DESCRIPTION_FALLBACK

    @pytest.mark.asyncio
    async def test_blank_description_uses_fallback(self) -> None:
        ai = ScriptedAIService({"description": "   "})
        assert await ai.describe_route(self.places, "museums") == ROUTE_DESCRIPTION_FALLBACK

    @pytest.mark.asyncio
    async def test_no_places_skips_call(self) -> None:
        ai = ScriptedAIService()
        assert await ai.describe_route([], "museums") == ROUTE_DESCRIPTION_FALLBACK
        assert ai.prompts == []


class TestNullReasoningService:
    @pytest.mark.asyncio
    async def test_every_call_fails(self) -> None:
        ai = NullReasoningService()
        with pytest.raises(RuntimeError):
            await ai.generate_json("prompt")

    @pytest.mark.asyncio
    async def test_description_falls_back(self) -> None:
        ai = NullReasoningService()
        places = [make_place("1")]
        assert await ai.describe_route(places, "wish") == ROUTE_DESCRIPTION_FALLBACK


class TestOpenAICompatibleReasoningService:
    """Tests for the plain HTTP provider."""

    @staticmethod
    def make_service(handler) -> OpenAICompatibleReasoningService:
        return OpenAICompatibleReasoningService(
            base_url="https://llm.example.com/v1/",
            api_key="secret",
            model_name="test-model",
            max_tokens=500,
            transport=httpx.MockTransport(handler),
        )

    @pytest.mark.asyncio
    async def test_sends_strict_schema(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"choices": [{"message": {"content": '{"description": "Nice"}'}}]},
            )

        service = self.make_service(handler)
        schema = {"name": "route_description", "schema": {"type": "object"}}

        assert await service.generate_json("prompt", schema=schema) == {"description": "Nice"}

        request = seen[0]
        assert str(request.url) == "https://llm.example.com/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer secret"
        body = json.loads(request.content)
        assert body["model"] == "test-model"
        assert body["max_tokens"] == 500
        assert body["response_format"]["type"] == "json_schema"
        assert body["response_format"]["json_schema"]["strict"] is True
        assert body["response_format"]["json_schema"]["name"] == "route_description"
        assert body["messages"][0]["role"] == "system"

    @pytest.mark.asyncio
    async def test_without_schema_uses_json_object(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"choices": [{"message": {"content": "{}"}}]})

        await self.make_service(handler).generate_json("prompt")

        assert seen[0]["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_http_error_raises(self) -> None:
        service = self.make_service(lambda request: httpx.Response(502))
        with pytest.raises(httpx.HTTPStatusError):
            await service.generate_json("prompt")

    @pytest.mark.asyncio
    async def test_api_error_payload_raises(self) -> None:
        service = self.make_service(
            lambda request: httpx.Response(200, json={"error": {"message": "quota"}})
        )
        with pytest.raises(RuntimeError):
            await service.generate_json("prompt")

    @pytest.mark.asyncio
    async def test_no_choices_raises(self) -> None:
        service = self.make_service(lambda request: httpx.Response(200, json={"choices": []}))
        with pytest.raises(ValueError):
            await service.generate_json("prompt")

    def test_requires_base_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LLM_BASE_URL", raising=False)
        with pytest.raises(ValueError):
            OpenAICompatibleReasoningService(api_key="secret")


class TestCreateAiService:
    def test_no_provider_configured(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in PROVIDER_ENV:
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(ValueError):
            create_ai_service()

    def test_openai_compatible_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GROQ_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("LLM_BASE_URL", "https://llm.example.com/v1")
        monkeypatch.setenv("LLM_API_KEY", "secret")

        service = create_ai_service()

        assert isinstance(service, OpenAICompatibleReasoningService)
        assert service.provider_name == "LLM"
