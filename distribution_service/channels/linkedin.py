"""LinkedIn company page poster (UGC Posts API)."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from common.domain import JobPosting, Platform, RenderedPost

from .base import DEFAULT_TIMEOUT_SECONDS, ChannelAdapter, ChannelError, ChannelStatus

LINKEDIN_API_BASE = "https://api.linkedin.com/v2"


class LinkedInChannel(ChannelAdapter):
    """Publishes an organization share with the job link as ARTICLE media."""

    platform = Platform.LINKEDIN
    label = "LinkedIn"

    def __init__(
        self,
        access_token: str,
        organization_id: str,
        *,
        api_base: str = LINKEDIN_API_BASE,
        brand: str = "Wippii Work",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self._access_token = access_token
        self._organization_id = organization_id
        self._api_base = api_base.rstrip("/")
        self._brand = brand

    @property
    def author(self) -> str:
        return f"urn:li:organization:{self._organization_id}"

    def build_payload(self, post: RenderedPost) -> Dict[str, Any]:
        return {
            "author": self.author,
            "lifecycleState": "PUBLISHED",
            "specificContent": {
                "com.linkedin.ugc.ShareContent": {
                    "shareCommentary": {"text": post.body},
                    "shareMediaCategory": "ARTICLE",
                    "media": [
                        {
                            "status": "READY",
                            "description": {"text": f"See the full job posting on {self._brand}"},
                            "originalUrl": post.target_url,
                            "title": {"text": f"New job opportunity - {self._brand}"},
                        }
                    ],
                }
            },
            "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": "PUBLIC"},
        }

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "X-Restli-Protocol-Version": "2.0.0",
        }

    async def _send(self, post: RenderedPost, job: JobPosting) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.post(
                f"{self._api_base}/ugcPosts",
                json=self.build_payload(post),
                headers=self._headers(),
            )
            response.raise_for_status()
        post_id = response.headers.get("x-restli-id")
        if not post_id and response.content:
            post_id = response.json().get("id")
        if not post_id:
            raise ChannelError("response did not include a post id")
        return {"post_id": post_id}

    async def check(self) -> ChannelStatus:
        try:
            async with self._client() as client:
                response = await client.get(f"{self._api_base}/me", headers=self._headers())
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            return ChannelStatus(
                platform=self.platform,
                status="failed",
                error=f"HTTP {exc.response.status_code} {self._error_message(exc.response)}",
            )
        except httpx.HTTPError as exc:
            return ChannelStatus(platform=self.platform, status="error", error=str(exc) or exc.__class__.__name__)
        return ChannelStatus(
            platform=self.platform,
            status="connected",
            info={"organization_id": self._organization_id},
        )
