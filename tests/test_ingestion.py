import asyncio
import logging

import pytest

from conftest import (
    SECRET,
    ContractBreakingChannel,
    FakeChannel,
    InterleavingStore,
    event_payload,
    make_channels,
    make_ingestion,
    signed,
)

from common.domain import InboundEvent, Platform
from ingestion_service import (
    EventClassificationError,
    IngestionState,
    WebhookAuthenticationError,
)

HEADERS = ("x-teamtailor-signature",)


def inbound(payload: bytes, signature=None) -> InboundEvent:
    return InboundEvent(payload=payload, signature=signature if signature is not None else signed(payload))


async def deliver(ingestion, payload: bytes):
    decision = await ingestion.ingest(inbound(payload))
    report = await ingestion.run_dispatch(decision)
    return decision, report


def test_created_open_job_dispatches_to_every_channel():
    channels = make_channels()
    ingestion = make_ingestion(channels)

    decision, report = asyncio.run(deliver(ingestion, event_payload("job.created")))

    assert decision.state == IngestionState.DISPATCHING
    assert decision.target_url == "https://careers.example.com/careers/wippii-work/job-1"
    assert report.overall_success is True
    assert report.succeeded_count == 3
    for channel in channels:
        assert len(channel.calls) == 1
        post, _ = channel.calls[0]
        assert post.target_url == decision.target_url


def test_created_then_updated_publishes_once():
    channels = make_channels()
    ingestion = make_ingestion(channels)

    async def scenario():
        first = await deliver(ingestion, event_payload("job.created"))
        second = await deliver(ingestion, event_payload("job.updated", title="Senior Warehouse Worker"))
        return first, second

    (first, _), (second, second_report) = asyncio.run(scenario())

    assert first.should_dispatch is True
    assert second.state == IngestionState.SUPPRESSED
    assert second.reason == "already published"
    assert second_report is None
    assert all(len(channel.calls) == 1 for channel in channels)


def test_update_to_open_publishes_first_time():
    channels = make_channels()
    ingestion = make_ingestion(channels)

    async def scenario():
        draft = await deliver(ingestion, event_payload("job.created", status="draft"))
        opened = await deliver(ingestion, event_payload("job.updated", status="open"))
        return draft, opened

    (draft, _), (opened, report) = asyncio.run(scenario())

    assert draft.state == IngestionState.SUPPRESSED
    assert opened.should_dispatch is True
    assert opened.reason == "first time published"
    assert report.succeeded_count == 3


@pytest.mark.parametrize(
    "event, status, reason",
    [
        ("job.created", "draft", "job status is draft"),
        ("job.updated", "closed", "job status is closed"),
        ("job.deleted", "open", "job deleted"),
        ("job.archived", "open", "unhandled event job.archived"),
    ],
)
def test_non_publishable_events_are_suppressed(event, status, reason):
    channels = make_channels()
    ingestion = make_ingestion(channels)

    decision, report = asyncio.run(deliver(ingestion, event_payload(event, status=status)))

    assert decision.state == IngestionState.SUPPRESSED
    assert decision.reason == reason
    assert report is None
    assert all(not channel.calls for channel in channels)
    assert asyncio.run(ingestion.tracker.was_published("job-1")) is False


def test_concurrent_updates_dispatch_exactly_once():
    channels = make_channels()
    ingestion = make_ingestion(channels, store=InterleavingStore())

    async def scenario():
        payloads = [event_payload("job.updated") for _ in range(100)] + [event_payload("job.created")]
        return await asyncio.gather(*(ingestion.ingest(inbound(payload)) for payload in payloads))

    decisions = asyncio.run(scenario())

    dispatching = [decision for decision in decisions if decision.should_dispatch]
    assert len(dispatching) == 1
    assert ingestion.tracker.pending_locks == 0

    asyncio.run(ingestion.run_dispatch(dispatching[0]))
    assert all(len(channel.calls) == 1 for channel in channels)


def test_distinct_jobs_do_not_block_each_other():
    ingestion = make_ingestion(store=InterleavingStore())

    async def scenario():
        payloads = [event_payload("job.created", job_id=f"job-{index}") for index in range(20)]
        return await asyncio.gather(*(ingestion.ingest(inbound(payload)) for payload in payloads))

    decisions = asyncio.run(scenario())
    assert all(decision.should_dispatch for decision in decisions)


def test_bad_signature_is_rejected_before_anything_is_recorded():
    channels = make_channels()
    ingestion = make_ingestion(channels)
    payload = event_payload("job.created")

    with pytest.raises(WebhookAuthenticationError):
        asyncio.run(ingestion.ingest(inbound(payload, signed(payload, "wrong-secret"))))
    with pytest.raises(WebhookAuthenticationError):
        asyncio.run(ingestion.ingest(inbound(payload, "")))

    assert asyncio.run(ingestion.tracker.was_published("job-1")) is False
    assert all(not channel.calls for channel in channels)


def test_missing_secret_rejects_everything():
    ingestion = make_ingestion(secret=None)
    payload = event_payload("job.created")
    with pytest.raises(WebhookAuthenticationError):
        asyncio.run(ingestion.ingest(inbound(payload, signed(payload, SECRET))))


def test_unparseable_payload_raises_classification_error():
    ingestion = make_ingestion()
    payload = b"{not json"
    with pytest.raises(EventClassificationError):
        asyncio.run(ingestion.ingest(inbound(payload)))


def test_all_channels_failing_keeps_job_published():
    channels = make_channels(Platform.LINKEDIN, Platform.FACEBOOK, Platform.GOOGLE_CHAT)
    ingestion = make_ingestion(channels)

    async def scenario():
        first = await deliver(ingestion, event_payload("job.created"))
        again = await ingestion.ingest(inbound(event_payload("job.updated")))
        return first, again

    (decision, report), again = asyncio.run(scenario())

    assert decision.should_dispatch is True
    assert report.overall_success is False
    assert len(report.failures()) == 3
    assert again.reason == "already published"


def test_partial_failure_is_reported_per_channel():
    channels = make_channels(Platform.FACEBOOK)
    ingestion = make_ingestion(channels)

    _, report = asyncio.run(deliver(ingestion, event_payload("job.created")))

    assert report.overall_success is True
    assert [outcome.succeeded for outcome in report.outcomes] == [True, False, True]
    assert "remote rejected the post" in report.outcomes[1].error


def test_run_dispatch_contains_unexpected_crashes():
    channels = [ContractBreakingChannel(Platform.LINKEDIN), FakeChannel(Platform.FACEBOOK, crash=True)]
    ingestion = make_ingestion(channels)

    decision, report = asyncio.run(deliver(ingestion, event_payload("job.created")))

    assert decision.should_dispatch is True
    assert report is not None
    assert report.overall_success is False
    assert all(len(channel.calls) == 1 for channel in channels)


def test_classified_transition_is_logged_with_event_name(caplog):
    caplog.set_level(logging.INFO, logger="ingestion_service.pipeline")
    ingestion = make_ingestion()

    decision = asyncio.run(ingestion.ingest(inbound(event_payload("job.created"))))

    assert decision.should_dispatch is True
    messages = [record.getMessage() for record in caplog.records]
    assert "webhook classified job=job-1 name=job.created kind=created status=open" in messages
    assert "webhook dispatching job=job-1 reason=new job" in messages
