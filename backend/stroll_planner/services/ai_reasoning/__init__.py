"""AI Reasoning: Groq, Gemini or an OpenAI-compatible endpoint."""

from .service import (
    AIReasoningService,
    GeminiReasoningService,
    GroqReasoningService,
    NullReasoningService,
    OpenAICompatibleReasoningService,
    ROUTE_DESCRIPTION_FALLBACK,
    create_ai_service,
)

__all__ = [
    "AIReasoningService",
    "GeminiReasoningService",
    "GroqReasoningService",
    "NullReasoningService",
    "OpenAICompatibleReasoningService",
    "ROUTE_DESCRIPTION_FALLBACK",
    "create_ai_service",
]
