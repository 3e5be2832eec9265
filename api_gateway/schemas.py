"""API response schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

from common.domain import DispatchReport, JobPosting
from distribution_service.channels import ChannelStatus


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class WebhookAck(BaseModel):
    success: bool
    message: str
    timestamp: str


class ErrorBody(BaseModel):
    error: str
    timestamp: str


class LogLine(BaseModel):
    idx: int
    content: str


class LogListData(BaseModel):
    lines: List[LogLine]
    total: int
    truncated: bool


class PublishedJobsData(BaseModel):
    items: List[str]
    total: int


class ChannelStatusData(BaseModel):
    channels: List[ChannelStatus]
    environment: str


class SamplePostingData(BaseModel):
    job: JobPosting
    target_url: str
    report: DispatchReport
    error: Optional[str] = None


T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    code: int
    msg: str
    data: T
