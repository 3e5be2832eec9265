"""Inbound webhook handling: signature, classification, publish state, orchestration."""

from .classifier import EventClassificationError, classify, job_url
from .pipeline import IngestionDecision, IngestionState, WebhookIngestion
from .publish_state import (
    InMemoryPublishStore,
    PublishStateTracker,
    PublishStore,
    SqlPublishStore,
    build_publish_store,
)
from .signature import SignatureVerifier, WebhookAuthenticationError, build_signature, verify

__all__ = [
    "EventClassificationError",
    "InMemoryPublishStore",
    "IngestionDecision",
    "IngestionState",
    "PublishStateTracker",
    "PublishStore",
    "SignatureVerifier",
    "SqlPublishStore",
    "WebhookAuthenticationError",
    "WebhookIngestion",
    "build_publish_store",
    "build_signature",
    "classify",
    "job_url",
    "verify",
]
