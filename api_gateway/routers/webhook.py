"""Inbound applicant-tracker webhook."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import JSONResponse

from common.domain import InboundEvent
from common.utils.config import Settings, get_settings
from ingestion_service import (
    EventClassificationError,
    WebhookAuthenticationError,
    WebhookIngestion,
)

from ..deps import get_ingestion
from ..schemas import ErrorBody, WebhookAck, utc_timestamp

logger = logging.getLogger("api_gateway.webhook")

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    body = ErrorBody(error=message, timestamp=utc_timestamp())
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post(
    "/teamtailor",
    response_model=WebhookAck,
    responses={400: {"model": ErrorBody}, 401: {"model": ErrorBody}, 500: {"model": ErrorBody}},
)
async def receive_teamtailor_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    ingestion: WebhookIngestion = Depends(get_ingestion),
    settings: Settings = Depends(get_settings),
):
    """Acknowledge immediately; generation and posting run after the response."""

    payload = await request.body()
    inbound = InboundEvent.from_headers(payload, dict(request.headers), settings.signature_header_names)
    try:
        decision = await ingestion.ingest(inbound)
    except WebhookAuthenticationError as exc:
        logger.warning(
            "rejected webhook from %s: %s",
            request.client.host if request.client else "unknown",
            exc,
        )
        return _error(status.HTTP_401_UNAUTHORIZED, "Invalid webhook signature")
    except EventClassificationError as exc:
        logger.warning("unprocessable webhook body: %s", exc)
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid webhook payload: {exc}")
    except Exception:  # noqa: BLE001
        logger.exception("webhook processing error")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    if decision.should_dispatch:
        background_tasks.add_task(ingestion.run_dispatch, decision)
    ingestion.acknowledge(decision)
    return WebhookAck(success=True, message=decision.message, timestamp=utc_timestamp())
