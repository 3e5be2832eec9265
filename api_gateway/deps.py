"""FastAPI dependencies: the shared ingestion pipeline and its collaborators."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from ai_processor.text_generator import build_text_generator
from common.utils.config import Settings, get_settings
from distribution_service.channels import build_channel_adapters
from distribution_service.dispatcher import DispatchCoordinator
from distribution_service.service import AnnouncementService
from ingestion_service import (
    PublishStateTracker,
    SignatureVerifier,
    WebhookIngestion,
    build_publish_store,
)


def build_ingestion(settings: Settings) -> WebhookIngestion:
    """Wire the pipeline from settings."""

    announcer = AnnouncementService(
        build_text_generator(settings),
        build_channel_adapters(settings),
        DispatchCoordinator(),
    )
    return WebhookIngestion(
        SignatureVerifier(settings.teamtailor_webhook_secret, settings.webhook_max_age_seconds),
        PublishStateTracker(build_publish_store(settings.publish_store_url)),
        announcer,
        careers_base_url=settings.careers_base_url,
        default_company_slug=settings.default_company_slug,
    )


@lru_cache(maxsize=1)
def get_ingestion() -> WebhookIngestion:
    """Process-wide pipeline; the publish tracker must be shared by all requests."""

    return build_ingestion(get_settings())


def get_announcer(ingestion: WebhookIngestion = Depends(get_ingestion)) -> AnnouncementService:
    return ingestion.announcer


def get_tracker(ingestion: WebhookIngestion = Depends(get_ingestion)) -> PublishStateTracker:
    return ingestion.tracker
