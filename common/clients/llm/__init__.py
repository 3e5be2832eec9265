"""LLM provider exports."""

from .base import GenerationError, LLMProvider, LLMRequest, LLMResponse
from .factory import build_generation_provider
from .mock_provider import MockProvider
from .openai_provider import OpenAIProvider

__all__ = [
    "GenerationError",
    "LLMProvider",
    "LLMRequest",
    "LLMResponse",
    "MockProvider",
    "OpenAIProvider",
    "build_generation_provider",
]
