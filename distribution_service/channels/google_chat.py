"""Google Chat incoming-webhook notifier."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from common.domain import JobPosting, Platform, RenderedPost

from .base import ChannelAdapter, ChannelStatus

DEFAULT_TIMEOUT_SECONDS = 10.0
NOT_SPECIFIED = "Not specified"


class GoogleChatChannel(ChannelAdapter):
    """Sends a card with the job summary and an "open job" button."""

    platform = Platform.GOOGLE_CHAT
    label = "Google Chat"

    def __init__(
        self,
        webhook_url: str,
        *,
        brand: str = "Wippii Work",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self._webhook_url = webhook_url
        self._brand = brand

    def build_message(self, post: RenderedPost, job: JobPosting) -> Dict[str, Any]:
        summary = (
            f"<b>Location:</b> {job.location or NOT_SPECIFIED}<br>"
            f"<b>Employment:</b> {job.employment_type or NOT_SPECIFIED}<br>"
            f"<b>Status:</b> {job.status.value}"
        )
        return {
            "text": post.body,
            "cards": [
                {
                    "header": {
                        "title": job.title or "New job",
                        "subtitle": job.department or job.company.name or self._brand,
                    },
                    "sections": [
                        {
                            "widgets": [
                                {"textParagraph": {"text": summary}},
                                {
                                    "buttons": [
                                        {
                                            "textButton": {
                                                "text": "Open job",
                                                "onClick": {"openLink": {"url": post.target_url}},
                                            }
                                        }
                                    ]
                                },
                            ]
                        }
                    ],
                }
            ],
        }

    async def _send(self, post: RenderedPost, job: JobPosting) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.post(self._webhook_url, json=self.build_message(post, job))
            response.raise_for_status()
        return {"status_code": response.status_code}

    async def check(self) -> ChannelStatus:
        # incoming webhooks have no read endpoint; report configuration only
        return ChannelStatus(platform=self.platform, status="connected", info={"configured": True})
