"""AI Reasoning service: Groq, Gemini or any OpenAI-compatible endpoint.

Provider-agnostic base class with concrete implementations:
- GroqReasoningService:    Groq LPU, llama-3.1-8b-instant
- GeminiReasoningService:  Google Gemini
- OpenAICompatibleReasoningService: any ``/chat/completions`` endpoint with
  ``json_schema`` response format (OpenRouter, vLLM, OpenAI itself)
- NullReasoningService:    used when nothing is configured; every call fails,
  so each pipeline stage takes its documented fallback

Every call is stateless and asks for a JSON object matching a schema.
The AI never produces coordinates or ids of its own; it only picks from
what it is given.
"""

import asyncio
import json
import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx
from dotenv import load_dotenv

from stroll_planner.models import Place

logger = logging.getLogger(__name__)

try:
    load_dotenv()
except Exception:
    pass  # Python 3.14+ compat

SYSTEM_PROMPT = (
    "You are a careful city-walk planner. You help people turn a short wish "
    "into a walking route made of real places from a catalog. "
    "Only ever pick from the options you are given; never invent places, "
    "categories, ids, coordinates, prices or opening hours. "
    "Respond ONLY with valid JSON matching the requested format. "
    "No explanations, no markdown, no extra text."
)

ROUTE_DESCRIPTION_FALLBACK = "Enjoy your walk through the selected places!"

DESCRIPTION_SCHEMA: dict[str, Any] = {
    "name": "route_description",
    "schema": {
        "type": "object",
        "properties": {
            "description": {"type": "string"},
        },
        "required": ["description"],
        "additionalProperties": False,
    },
}


class AIReasoningService(ABC):
    """Base class for AI reasoning services.

    Prompt plumbing and JSON parsing live here. Subclasses only implement
    ``_generate()`` for their specific API client.
    """

    _timeout: float

    @abstractmethod
    async def _generate(
        self,
        prompt: str,
        schema: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> str:
        """Send prompt to the AI provider and return raw text."""
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Human-readable provider name for logging."""
        ...

    # ── Utilities ─────────────────────────────────────────────────────

    @staticmethod
    def _sanitize_input(text: str, max_length: int = 500) -> str:
        """Sanitize user input before passing to AI prompts.

        Strips control characters and limits length to prevent
        prompt injection and abuse.
        """
        # Remove control characters (keep newlines/tabs for readability)
        cleaned = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text or "")
        return cleaned[:max_length].strip()

    @staticmethod
    def _extract_json(text: str) -> str:
        if "```json" in text:
            return text.split("```json")[1].split("```")[0].strip()
        if "```" in text:
            return text.split("```")[1].split("```")[0].strip()
        return text.strip()

    @staticmethod
    def _schema_hint(schema: dict[str, Any] | None) -> str:
        if not schema:
            return ""
        body = schema.get("schema", schema)
        return f"\n\nThe JSON must match this schema:\n{json.dumps(body, ensure_ascii=False)}"

    # ── Shared implementations ────────────────────────────────────────

    async def generate_json(
        self,
        prompt: str,
        schema: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Run one prompt and parse the reply as a JSON object.

        Raises:
            ValueError: If the reply is not a JSON object.
            Exception: Whatever the provider raised (network, timeout, auth).
        """
        text = await self._generate(prompt, schema=schema, timeout=timeout)
        if not text:
            raise ValueError(f"{self.provider_name} returned an empty response")
        data = json.loads(self._extract_json(text))
        if not isinstance(data, dict):
            raise ValueError(f"{self.provider_name} returned {type(data).__name__}, expected object")
        return data

    async def describe_route(self, places: list[Place], wish: str) -> str:
        """Short, friendly summary of an ordered route.

        Falls back to a fixed sentence when the provider fails or returns
        nothing usable.
        """
        if not places:
            return ROUTE_DESCRIPTION_FALLBACK
        stops = "\n".join(
            f"{i}. {p.name}" + (f" ({p.category})" if p.category else "")
            for i, p in enumerate(places, 1)
        )
        prompt = (
            f"Write a short, engaging summary (3-5 sentences) of this walking route.\n"
            f"Mention key highlights and the overall vibe. "
            f"No specific times or prices.\n\n"
            f'User\'s original wish: "{self._sanitize_input(wish)}"\n\n'
            f"Stops in order:\n{stops}\n\n"
            f'Respond ONLY with JSON: {{"description": "your text"}}'
        )
        try:
            data = await self.generate_json(prompt, schema=DESCRIPTION_SCHEMA)
            description = str(data.get("description") or "").strip()
            if description:
                return description
            logger.info(f"[{self.provider_name}] Empty route description, using fallback")
        except Exception as e:
            logger.warning(f"[{self.provider_name}] Route description failed: {e}")
        return ROUTE_DESCRIPTION_FALLBACK

    async def close(self) -> None:
        return None


# ═══════════════════════════════════════════════════════════════════════
# Provider: Groq  (fast LPU inference)
# ═══════════════════════════════════════════════════════════════════════

class GroqReasoningService(AIReasoningService):
    """Groq LPU with Llama 3.1 8B Instant, JSON mode."""

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        from groq import AsyncGroq

        self._api_key = api_key or os.getenv("GROQ_API_KEY")
        if not self._api_key:
            raise ValueError("GROQ_API_KEY not provided")
        self._client = AsyncGroq(api_key=self._api_key)
        self._model_name = model_name or os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")
        self._timeout = timeout_seconds
        logger.info(f"[AI] Groq ready: {self._model_name}")

    @property
    def provider_name(self) -> str:
        return "Groq"

    async def _generate(
        self,
        prompt: str,
        schema: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> str:
        t = timeout or self._timeout
        try:
            resp = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model_name,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt + self._schema_hint(schema)},
                    ],
                    temperature=0.3,
                    max_tokens=2048,
                    response_format={"type": "json_object"},
                ),
                timeout=t,
            )
            return (resp.choices[0].message.content or "").strip()
        except asyncio.TimeoutError:
            logger.warning(f"[Groq] Timeout after {t}s")
            raise
        except Exception as e:
            logger.warning(f"[Groq] Error: {e}")
            raise


# ═══════════════════════════════════════════════════════════════════════
# Provider: Gemini
# ═══════════════════════════════════════════════════════════════════════

class GeminiReasoningService(AIReasoningService):
    """Google Gemini through the ``google-genai`` SDK."""

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        from google import genai

        self._api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self._api_key:
            raise ValueError("GEMINI_API_KEY not provided")
        self._client = genai.Client(api_key=self._api_key)
        self._model_name = model_name or os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
        self._timeout = timeout_seconds
        logger.info(f"[AI] Gemini ready: {self._model_name}")

    @property
    def provider_name(self) -> str:
        return "Gemini"

    async def _generate(
        self,
        prompt: str,
        schema: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> str:
        t = timeout or self._timeout
        try:
            # Gemini has no system role here; prepend it to the user prompt
            full_prompt = f"{SYSTEM_PROMPT}\n\n{prompt}{self._schema_hint(schema)}"
            config: dict[str, Any] = {"temperature": 0.3}
            # Gemma models reject JSON mode
            if self._model_name.startswith("gemini"):
                config["response_mime_type"] = "application/json"
            resp = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._model_name,
                    contents=full_prompt,
                    config=config,
                ),
                timeout=t,
            )
            return (resp.text or "").strip()
        except asyncio.TimeoutError:
            logger.warning(f"[Gemini] Timeout after {t}s")
            raise
        except Exception as e:
            logger.warning(f"[Gemini] Error: {e}")
            raise


# ═══════════════════════════════════════════════════════════════════════
# Provider: OpenAI-compatible HTTP endpoint (strict JSON schema)
# ═══════════════════════════════════════════════════════════════════════

class OpenAICompatibleReasoningService(AIReasoningService):
    """Plain ``/chat/completions`` over httpx with ``json_schema`` output."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model_name: str | None = None,
        max_tokens: int | None = None,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or os.getenv("LLM_BASE_URL") or "").rstrip("/")
        if not self._base_url:
            raise ValueError("LLM_BASE_URL not provided")
        self._api_key = api_key or os.getenv("LLM_API_KEY")
        if not self._api_key:
            raise ValueError("LLM_API_KEY not provided")
        self._model_name = model_name or os.getenv("LLM_MODEL", "gpt-4o-mini")
        self._max_tokens = max_tokens or int(os.getenv("LLM_MAX_TOKENS", "2000"))
        self._timeout = timeout_seconds
        self._transport = transport
        logger.info(f"[AI] OpenAI-compatible ready: {self._model_name} @ {self._base_url}")

    @property
    def provider_name(self) -> str:
        return "LLM"

    async def _generate(
        self,
        prompt: str,
        schema: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> str:
        t = timeout or self._timeout
        if schema:
            response_format = {
                "type": "json_schema",
                "json_schema": {"strict": True, **schema},
            }
        else:
            response_format = {"type": "json_object"}
        body = {
            "model": self._model_name,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.4,
            "max_tokens": self._max_tokens,
            "response_format": response_format,
        }
        try:
            async with httpx.AsyncClient(timeout=t, transport=self._transport) as client:
                response = await client.post(
                    f"{self._base_url}/chat/completions",
                    json=body,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException:
            logger.warning(f"[LLM] Timeout after {t}s")
            raise
        except Exception as e:
            logger.warning(f"[LLM] Error: {e}")
            raise

        if "error" in data:
            raise RuntimeError(f"LLM API error: {data['error']}")
        choices = data.get("choices") or []
        if not choices:
            raise ValueError("LLM response has no choices")
        return (choices[0].get("message", {}).get("content") or "").strip()


# ═══════════════════════════════════════════════════════════════════════
# No provider configured
# ═══════════════════════════════════════════════════════════════════════

class NullReasoningService(AIReasoningService):
    """Stand-in when no provider is configured. Every call fails."""

    _timeout = 0.0

    @property
    def provider_name(self) -> str:
        return "NoAI"

    async def _generate(
        self,
        prompt: str,
        schema: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> str:
        raise RuntimeError("No AI provider configured")


# ═══════════════════════════════════════════════════════════════════════
# Factory: Groq → Gemini → OpenAI-compatible
# ═══════════════════════════════════════════════════════════════════════

def create_ai_service() -> AIReasoningService:
    """Create the best available AI service.  Groq first, then Gemini, then any
    OpenAI-compatible endpoint."""
    if os.getenv("GROQ_API_KEY"):
        try:
            return GroqReasoningService()
        except Exception as e:
            logger.info(f"[AI] Groq init failed: {e}")

    if os.getenv("GEMINI_API_KEY"):
        try:
            return GeminiReasoningService()
        except Exception as e:
            logger.info(f"[AI] Gemini init failed: {e}")

    if os.getenv("LLM_BASE_URL") and os.getenv("LLM_API_KEY"):
        try:
            return OpenAICompatibleReasoningService()
        except Exception as e:
            logger.info(f"[AI] OpenAI-compatible init failed: {e}")

    raise ValueError(
        "No AI provider available. Set GROQ_API_KEY, GEMINI_API_KEY "
        "or LLM_BASE_URL + LLM_API_KEY in .env"
    )
