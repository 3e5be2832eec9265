import asyncio

import pytest

from conftest import ContractBreakingChannel, FakeChannel, build_job, make_channels

from common.domain import Platform, RenderedPost
from distribution_service.dispatcher import AllChannelsFailed, DispatchCoordinator


def posts_for(channels, url="https://careers.example.com/careers/acme/job-1"):
    return {
        channel.platform: RenderedPost(platform=channel.platform, body=f"text for {channel.platform.value}", target_url=url)
        for channel in channels
    }


def test_one_failing_channel_does_not_affect_the_others():
    channels = make_channels(Platform.FACEBOOK)
    report = asyncio.run(DispatchCoordinator().dispatch(build_job(), posts_for(channels), channels))

    assert [o.platform for o in report.outcomes] == [Platform.LINKEDIN, Platform.FACEBOOK, Platform.GOOGLE_CHAT]
    assert [o.succeeded for o in report.outcomes] == [True, False, True]
    assert report.overall_success is True
    assert report.succeeded_count == 2
    failed = report.failures()
    assert len(failed) == 1
    assert "remote rejected the post" in failed[0].error
    assert report.outcomes[0].detail == {"post_id": "linkedin-job-1"}
    assert all(len(channel.calls) == 1 for channel in channels)


def test_all_channels_failing_raises_with_full_report():
    channels = make_channels(Platform.LINKEDIN, Platform.FACEBOOK, Platform.GOOGLE_CHAT)

    with pytest.raises(AllChannelsFailed) as excinfo:
        asyncio.run(DispatchCoordinator().dispatch(build_job(), posts_for(channels), channels))

    report = excinfo.value.report
    assert report.overall_success is False
    assert len(report.outcomes) == 3
    assert all(outcome.error for outcome in report.outcomes)
    assert "job-1" in str(excinfo.value)


def test_report_order_follows_adapters_not_completion():
    channels = [
        FakeChannel(Platform.LINKEDIN, delay=0.05),
        FakeChannel(Platform.FACEBOOK, delay=0.0),
        FakeChannel(Platform.GOOGLE_CHAT, delay=0.02),
    ]
    report = asyncio.run(DispatchCoordinator().dispatch(build_job(), posts_for(channels), channels))
    assert [o.platform for o in report.outcomes] == [Platform.LINKEDIN, Platform.FACEBOOK, Platform.GOOGLE_CHAT]


def test_channels_run_concurrently():
    channels = [FakeChannel(platform, delay=0.2) for platform in Platform]
    loop_time = {}

    async def scenario():
        loop = asyncio.get_running_loop()
        start = loop.time()
        await DispatchCoordinator().dispatch(build_job(), posts_for(channels), channels)
        loop_time["elapsed"] = loop.time() - start

    asyncio.run(scenario())
    assert loop_time["elapsed"] < 0.5


def test_crashing_and_contract_breaking_adapters_are_contained():
    channels = [
        FakeChannel(Platform.LINKEDIN, crash=True),
        ContractBreakingChannel(Platform.FACEBOOK),
        FakeChannel(Platform.GOOGLE_CHAT),
    ]
    report = asyncio.run(DispatchCoordinator().dispatch(build_job(), posts_for(channels), channels))

    assert [o.succeeded for o in report.outcomes] == [False, False, True]
    assert "adapter exploded" in report.outcomes[0].error
    assert "post() should never raise" in report.outcomes[1].error


def test_slow_channel_hits_coordinator_timeout():
    channels = [FakeChannel(Platform.LINKEDIN, delay=2.0), FakeChannel(Platform.FACEBOOK)]
    report = asyncio.run(
        DispatchCoordinator(channel_timeout=0.05).dispatch(build_job(), posts_for(channels), channels)
    )
    assert report.outcomes[0].succeeded is False
    assert "timed out" in report.outcomes[0].error
    assert report.outcomes[1].succeeded is True


def test_missing_rendered_post_is_a_channel_failure():
    channels = make_channels()
    posts = posts_for(channels[:2])
    report = asyncio.run(DispatchCoordinator().dispatch(build_job(), posts, channels))
    assert report.outcomes[2].succeeded is False
    assert channels[2].calls == []


def test_no_adapters_counts_as_total_failure():
    with pytest.raises(AllChannelsFailed, match="no channels configured"):
        asyncio.run(DispatchCoordinator().dispatch(build_job(), {}, []))
