"""Webhook ingestion: authenticate, classify, gate, hand off to dispatch.

States: received -> authenticated -> classified -> suppressed | dispatching
-> acknowledged. The sender is acknowledged as soon as the publish decision
is made; generation and posting run afterwards via ``run_dispatch``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from common.domain import (
    DispatchReport,
    EventKind,
    InboundEvent,
    JobAnnouncementEvent,
    JobStatus,
)
from distribution_service.dispatcher import AllChannelsFailed
from distribution_service.service import AnnouncementService

from .classifier import classify, job_url
from .publish_state import PublishStateTracker
from .signature import SignatureVerifier

logger = logging.getLogger("ingestion_service.pipeline")


class IngestionState(str, Enum):
    RECEIVED = "received"
    AUTHENTICATED = "authenticated"
    CLASSIFIED = "classified"
    SUPPRESSED = "suppressed"
    DISPATCHING = "dispatching"
    ACKNOWLEDGED = "acknowledged"


@dataclass(frozen=True)
class IngestionDecision:
    """Outcome of the publish decision for one event."""

    state: IngestionState
    event: JobAnnouncementEvent
    reason: str
    target_url: str

    @property
    def should_dispatch(self) -> bool:
        return self.state == IngestionState.DISPATCHING

    @property
    def message(self) -> str:
        if self.should_dispatch:
            return "Webhook received, announcement scheduled"
        return f"Webhook received, no announcement ({self.reason})"


class WebhookIngestion:
    """Top-level orchestrator for inbound job events."""

    def __init__(
        self,
        verifier: SignatureVerifier,
        tracker: PublishStateTracker,
        announcer: AnnouncementService,
        *,
        careers_base_url: str,
        default_company_slug: str,
    ) -> None:
        self.verifier = verifier
        self.tracker = tracker
        self.announcer = announcer
        self.careers_base_url = careers_base_url
        self.default_company_slug = default_company_slug

    def _transition(self, state: IngestionState, event: Optional[JobAnnouncementEvent] = None, **extra) -> None:
        job_id = event.job_id if event else "-"
        details = " ".join(f"{key}={value}" for key, value in extra.items())
        logger.info("webhook %s job=%s %s", state.value, job_id, details)

    def acknowledge(self, decision: IngestionDecision) -> None:
        """Record that the sender has been answered."""

        self._transition(IngestionState.ACKNOWLEDGED, decision.event, dispatch=decision.should_dispatch)

    async def ingest(self, inbound: InboundEvent) -> IngestionDecision:
        """Run the event up to the publish decision.

        Raises WebhookAuthenticationError or EventClassificationError; in both
        cases nothing has been recorded.
        """

        self._transition(IngestionState.RECEIVED, payload_bytes=len(inbound.payload), signed=bool(inbound.signature))
        self.verifier.ensure_valid(inbound.payload, inbound.signature)
        self._transition(IngestionState.AUTHENTICATED)

        event = classify(inbound.payload, self.default_company_slug)
        self._transition(
            IngestionState.CLASSIFIED,
            event,
            name=event.event_name,
            kind=event.event_kind.value,
            status=event.status.value,
        )
        return await self.decide(event)

    async def decide(self, event: JobAnnouncementEvent) -> IngestionDecision:
        """Idempotency gate. At most one decision per job id ever dispatches."""

        target_url = job_url(event.job, self.careers_base_url)

        def suppressed(reason: str) -> IngestionDecision:
            self._transition(IngestionState.SUPPRESSED, event, reason=reason)
            return IngestionDecision(IngestionState.SUPPRESSED, event, reason, target_url)

        if event.event_kind == EventKind.DELETED:
            return suppressed("job deleted")
        if event.event_kind == EventKind.UNKNOWN:
            return suppressed(f"unhandled event {event.event_name or '<none>'}")
        if event.status != JobStatus.OPEN:
            return suppressed(f"job status is {event.status.value}")

        # created and updated both pass through the same atomic claim, so
        # redelivered created events are suppressed as well
        if not await self.tracker.claim(event.job_id):
            return suppressed("already published")

        reason = "new job" if event.event_kind == EventKind.CREATED else "first time published"
        self._transition(IngestionState.DISPATCHING, event, reason=reason)
        return IngestionDecision(IngestionState.DISPATCHING, event, reason, target_url)

    async def run_dispatch(self, decision: IngestionDecision) -> Optional[DispatchReport]:
        """Background half of the pipeline. Never raises."""

        if not decision.should_dispatch:
            return None
        job = decision.event.job
        try:
            report = await self.announcer.announce(job, decision.target_url)
        except AllChannelsFailed as exc:
            logger.error("job %s: %s", job.id, exc)
            return exc.report
        except Exception:  # noqa: BLE001
            logger.exception("background processing crashed for job %s", job.id)
            return None
        logger.info("job %s processing completed", job.id)
        return report
