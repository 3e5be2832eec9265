"""Operations routes: log tail, publish state and channel reachability."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from pathlib import Path

from fastapi import APIRouter, Depends, Query

from common.utils.config import Settings, get_settings
from distribution_service.channels import ChannelAdapter, ChannelStatus
from distribution_service.service import AnnouncementService
from ingestion_service import PublishStateTracker

from ..deps import get_announcer, get_tracker
from ..schemas import ChannelStatusData, Envelope, LogLine, LogListData, PublishedJobsData


logger = logging.getLogger("api_gateway.admin")

router = APIRouter()

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _resolve_log_path(settings: Settings) -> Path:
    """Relative LOG_FILE_PATH values are resolved against the project root."""

    path = Path(settings.log_file_path or "logs/service.log")
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


def _load_tail_lines(path: Path, limit: int) -> tuple[list[str], int]:
    """Read the end of the log without loading the whole file."""

    if not path.exists():
        return [], 0

    lines: deque[str] = deque(maxlen=limit)
    total = 0
    try:
        with path.open("r", encoding="utf-8", errors="ignore") as fp:
            for line in fp:
                total += 1
                lines.append(line.rstrip("\n"))
    except OSError:
        return [], 0
    return list(lines), total


@router.get("/logs", response_model=Envelope[LogListData])
async def fetch_latest_logs(
    limit: int = Query(200, ge=10, le=2000, description="Maximum number of lines"),
    settings: Settings = Depends(get_settings),
) -> Envelope[LogListData]:
    """Tail of the service log for quick inspection."""

    lines, total = _load_tail_lines(_resolve_log_path(settings), limit)
    log_items = [
        LogLine(idx=total - len(lines) + index + 1, content=content)
        for index, content in enumerate(lines)
    ]

    data = LogListData(lines=log_items, total=total, truncated=len(lines) < total)
    return Envelope(code=0, msg="success", data=data)


@router.get("/published", response_model=Envelope[PublishedJobsData])
async def list_published_jobs(
    limit: int = Query(50, ge=1, le=500),
    tracker: PublishStateTracker = Depends(get_tracker),
) -> Envelope[PublishedJobsData]:
    """Most recently announced job ids."""

    items = await tracker.recent(limit)
    return Envelope(code=0, msg="success", data=PublishedJobsData(items=items, total=len(items)))


async def _check_channel(adapter: ChannelAdapter) -> ChannelStatus:
    """One adapter's failed check must not hide the others."""

    try:
        return await adapter.check()
    except Exception as exc:  # noqa: BLE001
        logger.exception("channel check crashed for %s", adapter.platform.value)
        return ChannelStatus(platform=adapter.platform, status="error", error=f"{exc.__class__.__name__}: {exc}")


@router.get("/channels", response_model=Envelope[ChannelStatusData])
async def check_channels(
    announcer: AnnouncementService = Depends(get_announcer),
    settings: Settings = Depends(get_settings),
) -> Envelope[ChannelStatusData]:
    """Credential check against every configured channel, run concurrently."""

    statuses = await asyncio.gather(*(_check_channel(adapter) for adapter in announcer.adapters))
    data = ChannelStatusData(channels=list(statuses), environment=settings.app_env)
    return Envelope(code=0, msg="success", data=data)
