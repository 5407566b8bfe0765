"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request
from wellness_gateway.config import settings
from wellness_gateway.domain.models import DateWindow
from wellness_gateway.infrastructure.clients.storage import StorageClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_storage_client() -> StorageClient:
    """Provide storage API client instance"""
    return StorageClient()


def get_today() -> date:
    """Reference date for windows and forecasts; overridden in tests"""
    return date.today()


def resolve_window(
    window: Optional[str] = Query(None, alias="range", description="week | month | year"),
    start: Optional[date] = Query(None, description="Explicit window start (inclusive)"),
    end: Optional[date] = Query(None, description="Explicit window end (inclusive), defaults to today"),
    today: date = Depends(get_today),
) -> DateWindow:
    """Explicit start/end wins over a named range preset"""
    if start is not None:
        end = end or today
        if start > end:
            raise HTTPException(status_code=422, detail="start must not be after end")
        return DateWindow(start, end)

    try:
        return DateWindow.preset(window or settings.default_window, end or today)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
