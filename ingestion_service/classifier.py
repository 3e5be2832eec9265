"""Turn a verified webhook body into a JobAnnouncementEvent.

The tracker's payload schema has drifted over time, so alternative field
names are accepted (``event_name``/``event``, ``pitch``/``excerpt``).
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from common.domain import (
    CompanyRef,
    EventKind,
    JobAnnouncementEvent,
    JobPosting,
    JobStatus,
)


class EventClassificationError(Exception):
    """Body could not be parsed into a job event."""


EVENT_KINDS: Dict[str, EventKind] = {
    "job.created": EventKind.CREATED,
    "job.create": EventKind.CREATED,
    "job.updated": EventKind.UPDATED,
    "job.update": EventKind.UPDATED,
    "job.deleted": EventKind.DELETED,
    "job.delete": EventKind.DELETED,
}


def _first(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _name_of(value: Any) -> Optional[str]:
    """Strings pass through; objects contribute their name/city."""

    if isinstance(value, dict):
        value = _first(value, "name", "city", "title")
    text = _text(value)
    return text or None


def _number(value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def classify_event_name(name: Optional[str]) -> EventKind:
    return EVENT_KINDS.get(_text(name).lower(), EventKind.UNKNOWN)


def classify_status(status: Any) -> JobStatus:
    try:
        return JobStatus(_text(status).lower())
    except ValueError:
        return JobStatus.UNKNOWN


def _locations(data: Dict[str, Any]) -> List[str]:
    raw = data.get("locations")
    if raw is None and data.get("location") is not None:
        raw = [data["location"]]
    if not isinstance(raw, list):
        raw = [raw] if raw else []
    names = [_name_of(item) for item in raw]
    return [name for name in names if name]


def _company(data: Dict[str, Any], default_slug: str) -> CompanyRef:
    company = data.get("company")
    if isinstance(company, dict):
        name = _text(_first(company, "name")) or _text(data.get("company_name"))
        slug = _text(_first(company, "slug")) or default_slug
    else:
        name = _text(data.get("company_name") or company)
        slug = _text(data.get("company_slug")) or default_slug
    return CompanyRef(name=name, slug=slug)


def parse_payload(payload: bytes) -> Dict[str, Any]:
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise EventClassificationError(f"body is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise EventClassificationError("body must be a JSON object")
    # some deliveries wrap the job in a data envelope
    if isinstance(data.get("data"), dict) and "id" not in data:
        merged = dict(data["data"])
        merged.setdefault("event_name", _first(data, "event_name", "event"))
        data = merged
    return data


def classify(payload: bytes, default_company_slug: str = "wippii-work") -> JobAnnouncementEvent:
    """Parse and normalize a webhook body. Raises EventClassificationError."""

    data = parse_payload(payload)

    job_id = _text(data.get("id"))
    if not job_id:
        raise EventClassificationError("job id is missing")

    event_name = _text(_first(data, "event_name", "event"))
    status = classify_status(data.get("status"))
    try:
        job = JobPosting(
            id=job_id,
            title=_text(data.get("title")),
            body=_text(data.get("body")),
            excerpt=_text(_first(data, "pitch", "excerpt")),
            company=_company(data, default_company_slug),
            department=_name_of(data.get("department")),
            locations=_locations(data),
            employment_type=_text(data.get("employment_type")) or None,
            remote_status=_text(data.get("remote_status")) or None,
            salary_min=_number(data.get("min_salary")),
            salary_max=_number(data.get("max_salary")),
            currency=_text(data.get("currency")) or None,
            status=status,
        )
        return JobAnnouncementEvent(
            job_id=job_id,
            event_kind=classify_event_name(event_name),
            status=status,
            event_name=event_name,
            job=job,
        )
    except ValidationError as exc:
        raise EventClassificationError(f"invalid job payload: {exc.error_count()} errors") from exc


def job_url(job: JobPosting, careers_base_url: str) -> str:
    """Canonical public link for a job."""

    return f"{careers_base_url.rstrip('/')}/careers/{job.company.slug}/{job.id}"
