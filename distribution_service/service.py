"""Announcement service: generate per-channel copy, then dispatch it."""

from __future__ import annotations

import logging
import time
from typing import List, Sequence

from ai_processor.text_generator import TextGenerator
from common.domain import DispatchReport, JobPosting, Platform, RenderedPost

from .channels import ChannelAdapter
from .dispatcher import DispatchCoordinator

logger = logging.getLogger("distribution_service.service")


class AnnouncementService:
    """Text generation for every configured channel followed by the fan-out."""

    def __init__(
        self,
        generator: TextGenerator,
        adapters: Sequence[ChannelAdapter],
        coordinator: DispatchCoordinator | None = None,
    ) -> None:
        self.generator = generator
        self.adapters: List[ChannelAdapter] = list(adapters)
        self.coordinator = coordinator or DispatchCoordinator()

    @property
    def platforms(self) -> List[Platform]:
        return [adapter.platform for adapter in self.adapters]

    async def render(self, job: JobPosting, target_url: str) -> dict[Platform, RenderedPost]:
        texts = await self.generator.generate_all(job, self.platforms)
        return {
            platform: RenderedPost(platform=platform, body=text, target_url=target_url)
            for platform, text in texts.items()
        }

    async def announce(self, job: JobPosting, target_url: str) -> DispatchReport:
        """Raises AllChannelsFailed when no channel accepted the post."""

        start = time.perf_counter()
        logger.info("announcing job %s (%s) to %s", job.id, job.title, [p.value for p in self.platforms])
        posts = await self.render(job, target_url)
        logger.info(
            "generated texts for job %s: %s",
            job.id,
            {platform.value: len(post.body) for platform, post in posts.items()},
        )
        report = await self.coordinator.dispatch(job, posts, self.adapters)
        logger.info("job %s announced in %d ms", job.id, int((time.perf_counter() - start) * 1000))
        return report
