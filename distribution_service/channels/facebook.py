"""Facebook page poster (Graph API feed)."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from common.domain import JobPosting, Platform, RenderedPost

from .base import DEFAULT_TIMEOUT_SECONDS, ChannelAdapter, ChannelError, ChannelStatus

FACEBOOK_API_BASE = "https://graph.facebook.com/v18.0"
PAGE_FIELDS = "id,name,category,link,fan_count"


class FacebookChannel(ChannelAdapter):
    platform = Platform.FACEBOOK
    label = "Facebook"

    def __init__(
        self,
        access_token: str,
        page_id: str,
        *,
        api_base: str = FACEBOOK_API_BASE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self._access_token = access_token
        self._page_id = page_id
        self._api_base = api_base.rstrip("/")

    async def _send(self, post: RenderedPost, job: JobPosting) -> Dict[str, Any]:
        payload = {
            "message": post.body,
            "link": post.target_url,
            "access_token": self._access_token,
        }
        async with self._client() as client:
            response = await client.post(f"{self._api_base}/{self._page_id}/feed", json=payload)
            response.raise_for_status()
            data = response.json()
        post_id = data.get("id") if isinstance(data, dict) else None
        if not post_id:
            raise ChannelError("response did not include a post id")
        return {"post_id": post_id}

    async def check(self) -> ChannelStatus:
        params = {"access_token": self._access_token}
        try:
            async with self._client() as client:
                me = await client.get(f"{self._api_base}/me", params=params)
                me.raise_for_status()
                page = await client.get(
                    f"{self._api_base}/{self._page_id}",
                    params={**params, "fields": PAGE_FIELDS},
                )
                page.raise_for_status()
                page_info = page.json()
        except httpx.HTTPStatusError as exc:
            return ChannelStatus(
                platform=self.platform,
                status="failed",
                error=f"HTTP {exc.response.status_code} {self._error_message(exc.response)}",
            )
        except httpx.HTTPError as exc:
            return ChannelStatus(platform=self.platform, status="error", error=str(exc) or exc.__class__.__name__)
        except ValueError:
            return ChannelStatus(platform=self.platform, status="error", error="page info is not valid JSON")
        return ChannelStatus(platform=self.platform, status="connected", info={"page": page_info})
