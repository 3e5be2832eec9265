"""Domain data models shared across modules."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class EventKind(str, Enum):
    """Job lifecycle event kinds."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    UNKNOWN = "unknown"


class JobStatus(str, Enum):
    """Job posting status in the applicant tracker."""

    OPEN = "open"
    CLOSED = "closed"
    DRAFT = "draft"
    UNKNOWN = "unknown"


class Platform(str, Enum):
    """Announcement destinations."""

    LINKEDIN = "linkedin"
    FACEBOOK = "facebook"
    GOOGLE_CHAT = "google_chat"


class InboundEvent(BaseModel):
    """Raw signed webhook envelope, exactly as received."""

    model_config = ConfigDict(frozen=True)

    payload: bytes = Field(..., description="Raw request body")
    signature: Optional[str] = Field(None, description="Signature token from the first matching header")
    header_names: tuple[str, ...] = Field(default_factory=tuple, description="Candidate signature headers")

    @classmethod
    def from_headers(
        cls,
        payload: bytes,
        headers: Dict[str, str],
        header_names: List[str],
    ) -> "InboundEvent":
        """Pick the signature from the first accepted header that is present."""

        lowered = {key.lower(): value for key, value in headers.items()}
        signature = None
        for name in header_names:
            value = lowered.get(name.lower())
            if value:
                signature = value
                break
        return cls(payload=payload, signature=signature, header_names=tuple(header_names))


class CompanyRef(BaseModel):
    name: str = Field("", description="Company display name")
    slug: str = Field(..., description="Company slug used in career site links")


class JobPosting(BaseModel):
    """Normalized job attributes used for copy generation and channel payloads."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = ""
    body: str = ""
    excerpt: str = ""
    company: CompanyRef
    department: Optional[str] = None
    locations: List[str] = Field(default_factory=list)
    employment_type: Optional[str] = None
    remote_status: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    currency: Optional[str] = None
    status: JobStatus = JobStatus.UNKNOWN

    @property
    def location(self) -> Optional[str]:
        """Primary location, if any."""

        return self.locations[0] if self.locations else None


class JobAnnouncementEvent(BaseModel):
    """Classified webhook event."""

    model_config = ConfigDict(frozen=True)

    job_id: str = Field(..., min_length=1)
    event_kind: EventKind
    status: JobStatus
    event_name: str = Field("", description="Event name as sent by the tracker")
    job: JobPosting


class RenderedPost(BaseModel):
    """Announcement text ready for one channel."""

    platform: Platform
    body: str
    target_url: str


class DispatchOutcome(BaseModel):
    """Result of one channel post attempt."""

    platform: Platform
    succeeded: bool
    error: Optional[str] = None
    detail: Optional[dict] = None

    @classmethod
    def success(cls, platform: Platform, detail: Optional[dict] = None) -> "DispatchOutcome":
        return cls(platform=platform, succeeded=True, detail=detail or {})

    @classmethod
    def failure(cls, platform: Platform, error: str) -> "DispatchOutcome":
        return cls(platform=platform, succeeded=False, error=error or "unknown error")


class DispatchReport(BaseModel):
    """Per-channel outcomes for one event, in declared adapter order."""

    job_id: str
    outcomes: List[DispatchOutcome] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def succeeded_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @computed_field  # type: ignore[misc]
    @property
    def overall_success(self) -> bool:
        return self.succeeded_count >= 1

    def failures(self) -> List[DispatchOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]
