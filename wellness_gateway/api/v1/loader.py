"""Fetch a user's records from storage and wrap them in a per-request snapshot"""

from typing import Optional

from wellness_gateway.domain.models import DateWindow
from wellness_gateway.domain.snapshot import FinancialSnapshot
from wellness_gateway.infrastructure.clients.storage import StorageClient
from wellness_gateway.infrastructure.observability.metrics import record_malformed


async def load_snapshot(
    storage: StorageClient,
    user_id: str,
    window: DateWindow,
    limit: Optional[int] = None,
    with_categories: bool = True,
    with_profile: bool = False,
    category_id: Optional[str] = None,
    include_hidden_fees: bool = True,
) -> FinancialSnapshot:
    """
    One fetch per collaborator resource, then a fresh snapshot.

    Raises:
        StorageAPIError: if any fetch fails
    """
    transactions, report = await storage.get_transactions(user_id, limit)
    record_malformed(report.entity, report.malformed)
    skipped = report.malformed

    categories = []
    if with_categories:
        categories, category_report = await storage.get_budget_categories(user_id)
        record_malformed(category_report.entity, category_report.malformed)
        skipped += category_report.malformed

    emergency_fund = await storage.get_emergency_fund(user_id) if with_profile else 0.0

    return FinancialSnapshot(
        user_id=user_id,
        window=window,
        transactions=transactions,
        categories=categories,
        emergency_fund=emergency_fund,
        skipped_records=skipped,
        category_id=category_id,
        include_hidden_fees=include_hidden_fees,
    )
