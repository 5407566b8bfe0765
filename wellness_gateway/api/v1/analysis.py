"""GET /v1/summary, /v1/health-score, /v1/predictions - window analytics endpoints"""

import time
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from wellness_gateway.api.v1.schemas import (
    AggregateSchema,
    CategoryAmountSchema,
    DailyExpenseSchema,
    HealthMetricsSchema,
    HealthScoreResponse,
    PredictionSchema,
    PredictionsResponse,
    SummaryResponse,
)
from wellness_gateway.api.v1.loader import load_snapshot
from wellness_gateway.api.dependencies import get_request_id, get_storage_client, get_today, resolve_window
from wellness_gateway.infrastructure.clients.storage import StorageClient
from wellness_gateway.domain.models import DateWindow
from wellness_gateway.domain.predictions import horizon_months
from wellness_gateway.domain.exceptions import StorageAPIError
from wellness_gateway.infrastructure.observability.metrics import (
    analysis_counter,
    record_health_score,
    storage_fetch_failures_counter,
)
from wellness_gateway.infrastructure.observability.logging import log_analysis

router = APIRouter()


def _storage_unavailable(e: StorageAPIError, request_id: str) -> HTTPException:
    storage_fetch_failures_counter.inc()
    logging.error(f"Storage API error: {e}", extra={"request_id": request_id})
    return HTTPException(status_code=503, detail="Storage service unavailable")


def _unexpected(e: Exception, request_id: str) -> HTTPException:
    logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    category_id: Optional[str] = Query(None, description="Restrict totals to one category"),
    include_hidden_fees: bool = Query(True, description="Count hidden fees in spending"),
    window: DateWindow = Depends(resolve_window),
    storage: StorageClient = Depends(get_storage_client),
):
    """
    Income, expenses, balance and savings rate over a window.

    Also returns the per-category spending breakdown for the window and a
    30-day daily expense series ending at the window end.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        snapshot = await load_snapshot(
            storage,
            user_id,
            window,
            category_id=category_id,
            include_hidden_fees=include_hidden_fees,
        )
        metrics = snapshot.aggregate

        duration_ms = (time.time() - start_time) * 1000
        analysis_counter.labels(kind="summary").inc()
        log_analysis(
            request_id,
            user_id,
            "summary",
            duration_ms,
            transaction_count=metrics.transaction_count,
            skipped_records=snapshot.skipped_records,
        )

        return SummaryResponse(
            user_id=user_id,
            start=window.start,
            end=window.end,
            metrics=AggregateSchema.model_validate(metrics),
            category_breakdown=[CategoryAmountSchema.model_validate(c) for c in snapshot.category_breakdown],
            daily_expenses=[DailyExpenseSchema.model_validate(d) for d in snapshot.daily_expenses],
            skipped_records=snapshot.skipped_records,
        )

    except StorageAPIError as e:
        raise _storage_unavailable(e, request_id)

    except Exception as e:
        raise _unexpected(e, request_id)


@router.get("/health-score", response_model=HealthScoreResponse)
async def get_health_score(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    window: DateWindow = Depends(resolve_window),
    storage: StorageClient = Depends(get_storage_client),
):
    """
    Weighted 0-100 financial health score for the window.

    Emergency fund coverage comes from the user's financial profile; a user
    without a profile is scored with no emergency fund.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        snapshot = await load_snapshot(storage, user_id, window, with_profile=True)
        health = snapshot.health_score

        duration_ms = (time.time() - start_time) * 1000
        record_health_score(health.score)
        log_analysis(request_id, user_id, "health", duration_ms, score=health.score, health_level=health.level.value)

        return HealthScoreResponse(
            user_id=user_id,
            start=window.start,
            end=window.end,
            score=health.score,
            level=health.level,
            components=health.components,
            metrics=HealthMetricsSchema.model_validate(snapshot.health_metrics),
            skipped_records=snapshot.skipped_records,
        )

    except StorageAPIError as e:
        raise _storage_unavailable(e, request_id)

    except Exception as e:
        raise _unexpected(e, request_id)


@router.get("/predictions", response_model=PredictionsResponse)
async def get_predictions(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    horizon: str = Query("6months", description="3months | 6months | 1year | 2years"),
    today: date = Depends(get_today),
    storage: StorageClient = Depends(get_storage_client),
):
    """Income, per-category expense and balance forecasts, most confident first"""
    start_time = time.time()
    request_id = get_request_id(request)
    months = horizon_months(horizon)

    try:
        snapshot = await load_snapshot(storage, user_id, DateWindow.preset("month", today))
        forecasts = snapshot.forecasts(months)

        duration_ms = (time.time() - start_time) * 1000
        analysis_counter.labels(kind="predictions").inc()
        log_analysis(request_id, user_id, "predictions", duration_ms, prediction_count=len(forecasts))

        return PredictionsResponse(
            user_id=user_id,
            horizon_months=months,
            predictions=[PredictionSchema.model_validate(p) for p in forecasts],
            skipped_records=snapshot.skipped_records,
        )

    except StorageAPIError as e:
        raise _storage_unavailable(e, request_id)

    except Exception as e:
        raise _unexpected(e, request_id)
