"""Endpoints triggering lifecycle notification e-mails."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from finpipe.application.use_cases.notifications import (
    LifecycleCoordinator,
    TransitionResult,
    TransitionStatus,
)
from finpipe.interfaces.api.dependencies import get_coordinator
from finpipe.interfaces.api.schemas import MaturityNotificationResponse, NotificationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

_STATUS_CODES = {
    TransitionStatus.OK: status.HTTP_200_OK,
    TransitionStatus.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    TransitionStatus.DELIVERY_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    TransitionStatus.CRITICAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def _read_body(request: Request) -> Any:
    """Return the decoded JSON body, or ``None`` when it is not valid JSON."""

    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Notification request body is not valid JSON")
        return None


def _to_response(result: TransitionResult) -> JSONResponse:
    if result.success:
        body = NotificationResponse(success=True, message=result.message)
    else:
        body = NotificationResponse(error=result.message)
    return JSONResponse(
        status_code=_STATUS_CODES[result.status],
        content=body.model_dump(exclude_none=True),
    )


@router.post("/investment-request", response_model=NotificationResponse)
async def investment_request(
    request: Request,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
) -> JSONResponse:
    """Send the submission confirmation and the admin alert for an investment."""

    result = await coordinator.notify_investment_submitted(await _read_body(request))
    return _to_response(result)


@router.post("/withdrawal-request", response_model=NotificationResponse)
async def withdrawal_request(
    request: Request,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
) -> JSONResponse:
    result = await coordinator.notify_withdrawal_submitted(await _read_body(request))
    return _to_response(result)


@router.post("/admin-action", response_model=NotificationResponse)
async def admin_action(
    request: Request,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
) -> JSONResponse:
    """Tell the user their request was approved or rejected."""

    result = await coordinator.notify_admin_action(await _read_body(request))
    return _to_response(result)


@router.post("/maturity-processing", response_model=MaturityNotificationResponse)
async def maturity_processing(
    request: Request,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
) -> JSONResponse:
    """Send maturity notices and the admin summary.

    Delivery failures are reported in the counts; only a malformed payload
    is rejected.
    """

    result = await coordinator.notify_maturity_batch(await _read_body(request))
    if result.status is TransitionStatus.VALIDATION_ERROR:
        return _to_response(result)

    body = MaturityNotificationResponse(
        success=result.success,
        message=result.message if result.success else None,
        error=None if result.success else result.message,
        emails_sent=result.emails_sent,
        emails_failed=result.emails_failed,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


__all__ = ["router"]
