"""Development-only routes that exercise the pipeline end to end."""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from common.domain import CompanyRef, JobPosting, JobStatus
from common.utils.config import Settings, get_settings
from distribution_service.dispatcher import AllChannelsFailed
from distribution_service.service import AnnouncementService
from ingestion_service import job_url

from ..deps import get_announcer
from ..schemas import Envelope, SamplePostingData

logger = logging.getLogger("api_gateway.diagnostics")

router = APIRouter()


class SampleJobRequest(BaseModel):
    title: str = "Senior Full Stack Developer"
    excerpt: str = "We are looking for an experienced full stack developer to build modern web apps."
    company_name: str = "Wippii Work Oy"
    company_slug: Optional[str] = None
    location: Optional[str] = "Helsinki"
    department: Optional[str] = "Technology"
    employment_type: Optional[str] = "permanent"


def sample_job(request: SampleJobRequest, settings: Settings) -> JobPosting:
    return JobPosting(
        id=f"test-job-{int(time.time() * 1000)}",
        title=request.title,
        body=request.excerpt,
        excerpt=request.excerpt,
        company=CompanyRef(
            name=request.company_name,
            slug=request.company_slug or settings.default_company_slug,
        ),
        department=request.department,
        locations=[request.location] if request.location else [],
        employment_type=request.employment_type,
        status=JobStatus.OPEN,
    )


@router.post("/job-posting", response_model=Envelope[SamplePostingData])
async def run_sample_job_posting(
    request: Optional[SampleJobRequest] = None,
    announcer: AnnouncementService = Depends(get_announcer),
    settings: Settings = Depends(get_settings),
):
    """Generate and post a sample job synchronously, bypassing the publish gate."""

    job = sample_job(request or SampleJobRequest(), settings)
    target_url = job_url(job, settings.careers_base_url)
    logger.info("running sample job posting %s", job.id)
    try:
        report = await announcer.announce(job, target_url)
    except AllChannelsFailed as exc:
        data = SamplePostingData(job=job, target_url=target_url, report=exc.report, error=str(exc))
        return JSONResponse(
            status_code=500,
            content=Envelope(code=1, msg="all channels failed", data=data).model_dump(mode="json"),
        )
    data = SamplePostingData(job=job, target_url=target_url, report=report)
    return Envelope(code=0, msg="success", data=data)
