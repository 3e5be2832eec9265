"""Channel adapter base: one destination, failures returned as outcomes."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field

from common.domain import DispatchOutcome, JobPosting, Platform, RenderedPost

logger = logging.getLogger("distribution_service.channels")

DEFAULT_TIMEOUT_SECONDS = 30.0


class ChannelError(Exception):
    """Adapter-level failure with a message meant for logs and reports."""


class ChannelStatus(BaseModel):
    """Reachability result for the diagnostics endpoint."""

    platform: Platform
    status: str = Field(..., description="connected / failed / not_configured / error")
    error: Optional[str] = None
    info: Dict[str, Any] = Field(default_factory=dict)


class ChannelAdapter(ABC):
    """Uniform capability: post a rendered announcement, report the outcome.

    ``post`` never raises; subclasses implement ``_send`` and may raise freely.
    """

    platform: Platform
    label: str

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def _client(self, **kwargs: Any) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport, **kwargs)

    def _error_message(self, response: httpx.Response) -> str:
        """Best effort readable reason from an error response."""

        try:
            data = response.json()
        except ValueError:
            return response.text[:200] or response.reason_phrase
        if isinstance(data, dict):
            message = data.get("message")
            if not message and isinstance(data.get("error"), dict):
                message = data["error"].get("message")
            if message:
                return str(message)
        return response.reason_phrase

    @abstractmethod
    async def _send(self, post: RenderedPost, job: JobPosting) -> Dict[str, Any]:
        """Deliver the post; return a detail dict (e.g. remote post id)."""

    async def post(self, post: RenderedPost, job: JobPosting) -> DispatchOutcome:
        logger.info(
            "posting job %s to %s (%d chars, link %s)",
            job.id,
            self.platform.value,
            len(post.body),
            post.target_url,
        )
        try:
            detail = await self._send(post, job)
        except httpx.HTTPStatusError as exc:
            error = (
                f"{self.label} posting failed: HTTP {exc.response.status_code} "
                f"{self._error_message(exc.response)}"
            )
        except httpx.HTTPError as exc:
            error = f"{self.label} posting failed: {exc.__class__.__name__} {exc}".rstrip()
        except ChannelError as exc:
            error = f"{self.label} posting failed: {exc}"
        except Exception as exc:  # noqa: BLE001
            logger.exception("unexpected error in %s adapter", self.platform.value)
            error = f"{self.label} posting failed: {exc.__class__.__name__} {exc}".rstrip()
        else:
            logger.info("posted job %s to %s: %s", job.id, self.platform.value, detail)
            return DispatchOutcome.success(self.platform, detail)

        logger.error("failed to post job %s to %s: %s", job.id, self.platform.value, error)
        return DispatchOutcome.failure(self.platform, error)

    async def check(self) -> ChannelStatus:
        """Validate credentials; subclasses override when there is an endpoint for it."""

        return ChannelStatus(platform=self.platform, status="connected")
