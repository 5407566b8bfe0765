"""GET /v1/fees - Hidden fee detection endpoint"""

import time
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from wellness_gateway.api.v1.schemas import DetectedFeeSchema, FeeSummarySchema, FeeTimelineSchema, FeesResponse
from wellness_gateway.api.v1.loader import load_snapshot
from wellness_gateway.api.dependencies import get_request_id, get_storage_client, get_today
from wellness_gateway.infrastructure.clients.storage import StorageClient
from wellness_gateway.domain.fees import filter_fees, merge_duplicate_fees, monthly_fee_timeline, summarize_fees
from wellness_gateway.domain.models import DateWindow
from wellness_gateway.domain.exceptions import StorageAPIError
from wellness_gateway.infrastructure.observability.metrics import record_fees, storage_fetch_failures_counter
from wellness_gateway.infrastructure.observability.logging import log_analysis
from wellness_gateway.config import settings

router = APIRouter()


@router.get("/fees", response_model=FeesResponse)
async def get_fees(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    category: Optional[str] = Query(None, description="Fee category, or 'all'"),
    min_amount: float = Query(0.0, ge=0, description="Hide fees below this amount"),
    min_confidence: Optional[float] = Query(None, ge=0, le=1, description="Confidence floor"),
    show_all: bool = Query(False, description="Include low-confidence candidates"),
    merge_duplicates: bool = Query(False, description="One entry per transaction"),
    today: date = Depends(get_today),
    storage: StorageClient = Depends(get_storage_client),
):
    """
    Scan the user's history for hidden fees.

    Flow:
    1. Fetch up to fee_scan_limit transactions
    2. Detect fees (one entry per matching category unless merge_duplicates)
    3. Apply the view filter; without show_all the configured confidence floor applies
    4. Summarize and build a six-month timeline over the filtered fees
    """
    start_time = time.time()
    request_id = get_request_id(request)

    if min_confidence is None and not show_all:
        min_confidence = settings.fee_confidence_floor

    try:
        snapshot = await load_snapshot(
            storage,
            user_id,
            DateWindow.preset("month", today),
            limit=settings.fee_scan_limit,
            with_categories=False,
        )
        detected = snapshot.detected_fees
        if merge_duplicates:
            detected = merge_duplicate_fees(detected)

        visible = filter_fees(detected, category=category, min_amount=min_amount, min_confidence=min_confidence)
        summary = summarize_fees(visible)
        timeline = monthly_fee_timeline(visible, today)

        duration_ms = (time.time() - start_time) * 1000
        record_fees(detected)
        log_analysis(
            request_id,
            user_id,
            "fees",
            duration_ms,
            detected_count=len(detected),
            visible_count=len(visible),
            annual_impact=summary.annual_impact,
        )

        return FeesResponse(
            user_id=user_id,
            fees=[DetectedFeeSchema.model_validate(f) for f in visible],
            summary=FeeSummarySchema.model_validate(summary),
            timeline=[FeeTimelineSchema.model_validate(t) for t in timeline],
            skipped_records=snapshot.skipped_records,
        )

    except StorageAPIError as e:
        storage_fetch_failures_counter.inc()
        logging.error(f"Storage API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Storage service unavailable")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
