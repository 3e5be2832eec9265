"""Channel adapters and the registry that builds them from settings."""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from common.utils.config import Settings

from .base import ChannelAdapter, ChannelError, ChannelStatus
from .facebook import FacebookChannel
from .google_chat import GoogleChatChannel
from .linkedin import LinkedInChannel

logger = logging.getLogger("distribution_service.channels")


def build_channel_adapters(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[ChannelAdapter]:
    """Configured adapters in declared order: linkedin, facebook, google_chat."""

    adapters: List[ChannelAdapter] = []
    if settings.linkedin_access_token and settings.linkedin_organization_id:
        adapters.append(
            LinkedInChannel(
                settings.linkedin_access_token,
                settings.linkedin_organization_id,
                api_base=settings.linkedin_api_base,
                brand=settings.brand_name,
                timeout=settings.channel_timeout,
                transport=transport,
            )
        )
    else:
        logger.warning("LinkedIn channel disabled: LINKEDIN_ACCESS_TOKEN/LINKEDIN_ORGANIZATION_ID missing")

    if settings.facebook_access_token and settings.facebook_page_id:
        adapters.append(
            FacebookChannel(
                settings.facebook_access_token,
                settings.facebook_page_id,
                api_base=settings.facebook_api_base,
                timeout=settings.channel_timeout,
                transport=transport,
            )
        )
    else:
        logger.warning("Facebook channel disabled: FACEBOOK_ACCESS_TOKEN/FACEBOOK_PAGE_ID missing")

    if settings.google_chat_webhook_url:
        adapters.append(
            GoogleChatChannel(
                settings.google_chat_webhook_url,
                brand=settings.brand_name,
                timeout=min(settings.channel_timeout, 10.0),
                transport=transport,
            )
        )
    else:
        logger.warning("Google Chat channel disabled: GOOGLE_CHAT_WEBHOOK_URL missing")
    return adapters


__all__ = [
    "ChannelAdapter",
    "ChannelError",
    "ChannelStatus",
    "FacebookChannel",
    "GoogleChatChannel",
    "LinkedInChannel",
    "build_channel_adapters",
]
