"""Dispatch coordinator: fan a job out to every channel concurrently."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional, Sequence

from common.domain import DispatchOutcome, DispatchReport, JobPosting, Platform, RenderedPost

from .channels import ChannelAdapter

logger = logging.getLogger("distribution_service.dispatcher")


class AllChannelsFailed(Exception):
    """No channel accepted the announcement. ``report`` holds every outcome."""

    def __init__(self, report: DispatchReport) -> None:
        self.report = report
        errors = "; ".join(f"{o.platform.value}: {o.error}" for o in report.outcomes) or "no channels configured"
        super().__init__(f"all channel postings failed for job {report.job_id} ({errors})")


class DispatchCoordinator:
    """Runs every adapter at once; one adapter's failure never affects another."""

    def __init__(self, channel_timeout: Optional[float] = None) -> None:
        # outer bound on top of each adapter's own HTTP timeout
        self._channel_timeout = channel_timeout

    async def _run_one(
        self,
        adapter: ChannelAdapter,
        post: Optional[RenderedPost],
        job: JobPosting,
    ) -> DispatchOutcome:
        if post is None:
            return DispatchOutcome.failure(adapter.platform, "no rendered post for this channel")
        try:
            if self._channel_timeout:
                return await asyncio.wait_for(adapter.post(post, job), timeout=self._channel_timeout)
            return await adapter.post(post, job)
        except asyncio.TimeoutError:
            return DispatchOutcome.failure(
                adapter.platform, f"{adapter.platform.value} timed out after {self._channel_timeout:g}s"
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("adapter %s broke its contract and raised", adapter.platform.value)
            return DispatchOutcome.failure(adapter.platform, f"{exc.__class__.__name__}: {exc}")

    async def dispatch(
        self,
        job: JobPosting,
        posts: Mapping[Platform, RenderedPost],
        adapters: Sequence[ChannelAdapter],
    ) -> DispatchReport:
        """Post to all adapters and wait for every one of them.

        Outcomes follow the order of ``adapters`` regardless of completion
        order. Raises AllChannelsFailed (carrying the report) when none succeed.
        """

        outcomes = await asyncio.gather(
            *(self._run_one(adapter, posts.get(adapter.platform), job) for adapter in adapters)
        )
        report = DispatchReport(job_id=job.id, outcomes=list(outcomes))
        for outcome in report.outcomes:
            if outcome.succeeded:
                logger.info("job %s: %s ok %s", job.id, outcome.platform.value, outcome.detail)
            else:
                logger.warning("job %s: %s failed: %s", job.id, outcome.platform.value, outcome.error)

        if not report.overall_success:
            raise AllChannelsFailed(report)
        logger.info(
            "job %s dispatched: %d/%d channels succeeded",
            job.id,
            report.succeeded_count,
            len(report.outcomes),
        )
        return report
