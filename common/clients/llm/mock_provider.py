"""Local provider used without an API key: echoes a trimmed line of the prompt."""

from __future__ import annotations

import time

from .base import LLMProvider, LLMRequest, LLMResponse


class MockProvider(LLMProvider):
    """Truncation based mock."""

    name = "mock"

    def __init__(self, suffix: str = "...") -> None:
        self.suffix = suffix

    async def invoke(self, request: LLMRequest) -> LLMResponse:
        start = time.perf_counter()
        lines = [line for line in request.prompt.strip().splitlines() if line.strip()]
        text = lines[0] if lines else ""
        content = text[:160] + self.suffix if text else ""
        elapsed = int((time.perf_counter() - start) * 1000)
        return LLMResponse(
            content=content,
            provider=self.name,
            model="mock-1",
            latency_ms=elapsed,
            tokens=len(content),
        )
