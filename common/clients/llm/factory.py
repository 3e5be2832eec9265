"""Pick the generation backend from settings."""

from __future__ import annotations

import logging

from common.utils.config import Settings

from .base import LLMProvider
from .mock_provider import MockProvider
from .openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)


def build_generation_provider(settings: Settings) -> LLMProvider:
    """OpenAI when a key is configured, otherwise the local mock."""

    if settings.openai_api_key:
        return OpenAIProvider(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            default_model=settings.openai_model,
            timeout=settings.text_generation_timeout,
        )
    logger.warning("OPENAI_API_KEY not configured, using mock generation provider")
    return MockProvider()
