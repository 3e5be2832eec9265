"""Domain model exports so other modules import from one place."""

from .models import (
    CompanyRef,
    DispatchOutcome,
    DispatchReport,
    EventKind,
    InboundEvent,
    JobAnnouncementEvent,
    JobPosting,
    JobStatus,
    Platform,
    RenderedPost,
)

__all__ = [
    "CompanyRef",
    "DispatchOutcome",
    "DispatchReport",
    "EventKind",
    "InboundEvent",
    "JobAnnouncementEvent",
    "JobPosting",
    "JobStatus",
    "Platform",
    "RenderedPost",
]
