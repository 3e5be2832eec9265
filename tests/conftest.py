import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ai_processor.text_generator import TextGenerator
from common.clients.llm import LLMProvider, LLMRequest, LLMResponse, MockProvider
from common.domain import CompanyRef, JobPosting, JobStatus, Platform
from distribution_service.channels import ChannelAdapter, ChannelError
from distribution_service.dispatcher import DispatchCoordinator
from distribution_service.service import AnnouncementService
from ingestion_service import (
    InMemoryPublishStore,
    PublishStateTracker,
    SignatureVerifier,
    WebhookIngestion,
    build_signature,
)

SECRET = "test-webhook-secret"
CAREERS_BASE_URL = "https://careers.example.com"


class FakeChannel(ChannelAdapter):
    """In-process adapter that records every post."""

    def __init__(self, platform: Platform, *, fail: bool = False, delay: float = 0.0, crash: bool = False):
        super().__init__()
        self.platform = platform
        self.label = platform.value
        self.fail = fail
        self.delay = delay
        self.crash = crash
        self.calls: List[tuple] = []

    async def _send(self, post, job):
        self.calls.append((post, job))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.crash:
            raise RuntimeError("adapter exploded")
        if self.fail:
            raise ChannelError("remote rejected the post")
        return {"post_id": f"{self.platform.value}-{job.id}"}


class ContractBreakingChannel(FakeChannel):
    """Raises out of post() itself, bypassing the base class guard."""

    async def post(self, post, job):
        self.calls.append((post, job))
        raise RuntimeError("post() should never raise")


class StaticProvider(LLMProvider):
    name = "static"

    def __init__(self, content: str = "  Generated announcement text  "):
        self.content = content
        self.requests: List[LLMRequest] = []

    async def invoke(self, request: LLMRequest) -> LLMResponse:
        self.requests.append(request)
        return LLMResponse(content=self.content, provider=self.name, model="static-1")


class SlowProvider(LLMProvider):
    name = "slow"

    def __init__(self, delay: float = 5.0):
        self.delay = delay
        self.cancelled = False

    async def invoke(self, request: LLMRequest) -> LLMResponse:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return LLMResponse(content="too late", provider=self.name, model="slow-1")


class FailingProvider(LLMProvider):
    name = "failing"

    async def invoke(self, request: LLMRequest) -> LLMResponse:
        raise RuntimeError("backend unavailable")


class InterleavingStore(InMemoryPublishStore):
    """Yields to the event loop inside every operation to force interleaving."""

    async def contains(self, job_id: str) -> bool:
        await asyncio.sleep(0)
        return await super().contains(job_id)

    async def add_if_absent(self, job_id: str) -> bool:
        await asyncio.sleep(0)
        return await super().add_if_absent(job_id)


def build_job(**overrides) -> JobPosting:
    data = {
        "id": "job-1",
        "title": "Warehouse Worker",
        "body": "Pick and pack orders in our Tampere warehouse.",
        "excerpt": "Steady shifts and a friendly team.",
        "company": CompanyRef(name="Acme Logistics", slug="acme"),
        "department": "Logistics",
        "locations": ["Tampere"],
        "employment_type": "full-time",
        "status": JobStatus.OPEN,
    }
    data.update(overrides)
    return JobPosting(**data)


def event_payload(event: str = "job.created", job_id="job-1", status: str = "open", **extra) -> bytes:
    payload = {
        "event_name": event,
        "id": job_id,
        "title": "Warehouse Worker",
        "body": "Pick and pack orders in our Tampere warehouse.",
        "pitch": "Steady shifts and a friendly team.",
        "status": status,
        "company_name": "Acme Logistics",
        "locations": ["Tampere"],
        "employment_type": "full-time",
    }
    payload.update(extra)
    return json.dumps(payload).encode("utf-8")


def signed(payload: bytes, secret: str = SECRET) -> str:
    return build_signature(payload, secret, timestamp=1_700_000_000)


def make_channels(*failing: Platform) -> List[FakeChannel]:
    return [
        FakeChannel(platform, fail=platform in failing)
        for platform in (Platform.LINKEDIN, Platform.FACEBOOK, Platform.GOOGLE_CHAT)
    ]


def make_ingestion(
    channels: Optional[List[ChannelAdapter]] = None,
    provider: Optional[LLMProvider] = None,
    store=None,
    secret: Optional[str] = SECRET,
) -> WebhookIngestion:
    announcer = AnnouncementService(
        TextGenerator(provider or MockProvider(), timeout=1.0),
        channels if channels is not None else make_channels(),
        DispatchCoordinator(),
    )
    return WebhookIngestion(
        SignatureVerifier(secret),
        PublishStateTracker(store or InMemoryPublishStore()),
        announcer,
        careers_base_url=CAREERS_BASE_URL,
        default_company_slug="wippii-work",
    )


@pytest.fixture
def job() -> JobPosting:
    return build_job()


@pytest.fixture
def channels() -> List[FakeChannel]:
    return make_channels()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    from common.utils.config import get_settings

    for name in (
        "LINKEDIN_ACCESS_TOKEN",
        "LINKEDIN_ORGANIZATION_ID",
        "FACEBOOK_ACCESS_TOKEN",
        "FACEBOOK_PAGE_ID",
        "GOOGLE_CHAT_WEBHOOK_URL",
        "OPENAI_API_KEY",
        "PUBLISH_STORE_URL",
        "WEBHOOK_MAX_AGE_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TEAMTAILOR_WEBHOOK_SECRET", SECRET)
    monkeypatch.setenv("APP_ENV", "development")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
