"""OpenAI Chat Completions provider over an async httpx client."""

from __future__ import annotations

import time
from typing import Optional

import httpx

from .base import GenerationError, LLMProvider, LLMRequest, LLMResponse


class OpenAIProvider(LLMProvider):
    """Wraps the Chat Completions endpoint (official API or compatible proxy)."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        default_model: str = "gpt-4o-mini",
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._default_model = default_model
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    async def invoke(self, request: LLMRequest) -> LLMResponse:
        """Build a standard chat request and return the unified response."""

        messages = [
            {
                "role": "system",
                "content": request.meta.get(
                    "system_prompt", "You write short, engaging job announcements."
                ),
            },
            {"role": "user", "content": request.prompt},
        ]
        model = request.meta.get("model") or self._default_model
        body = {
            "model": model,
            "messages": messages,
            "temperature": request.meta.get("temperature", 0.7),
        }
        if request.meta.get("max_tokens"):
            body["max_tokens"] = request.meta["max_tokens"]

        start = time.perf_counter()
        try:
            response = await self._client.post("/chat/completions", json=body)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise GenerationError(f"openai returned {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise GenerationError(f"openai request failed: {exc}") from exc
        elapsed = int((time.perf_counter() - start) * 1000)

        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as exc:
            raise GenerationError("openai response has no choices") from exc
        usage = data.get("usage") or {}
        return LLMResponse(
            content=content,
            provider=self.name,
            model=data.get("model") or model,
            tokens=usage.get("total_tokens"),
            latency_ms=elapsed,
        )

    async def aclose(self) -> None:
        """Release the HTTP connection pool."""

        await self._client.aclose()
