"""LLM provider abstraction used by announcement copy generation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class GenerationError(RuntimeError):
    """Backend failed to produce text (transport, status, or empty content)."""


@dataclass
class LLMRequest:
    """One generation call."""

    prompt: str
    task_type: str  # e.g. announcement:linkedin
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMResponse:
    """Normalized model output."""

    content: str
    provider: str
    model: str
    tokens: Optional[int] = None
    latency_ms: Optional[int] = None


class LLMProvider(ABC):
    """Interface every provider implements."""

    name: str

    @abstractmethod
    async def invoke(self, request: LLMRequest) -> LLMResponse:  # pragma: no cover - interface
        """Run the model and return the normalized response."""

    async def aclose(self) -> None:
        """Release network resources, if any."""
