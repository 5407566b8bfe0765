"""Storage collaborator HTTP client for ledger records"""

import httpx
from typing import Any, List, Optional, Tuple

from wellness_gateway.config import settings
from wellness_gateway.domain.exceptions import InvalidTransactionDataError, StorageAPIError
from wellness_gateway.domain.models import BudgetCategory, Transaction
from wellness_gateway.infrastructure.clients.records import (
    ParseReport,
    parse_budget_categories,
    parse_emergency_fund,
    parse_transactions,
)


class StorageClient:
    """Client for the external storage API that owns users' ledgers"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.storage_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _get(self, path: str, params: dict | None = None, allow_missing: bool = False) -> Any:
        """
        GET a JSON document from the collaborator.

        Raises:
            StorageAPIError: On timeout, connection failure, HTTP errors, or non-JSON body
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}{path}", params=params)
                if allow_missing and response.status_code == 404:
                    return None
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise StorageAPIError(f"Storage API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise StorageAPIError(f"Storage API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise StorageAPIError(f"Storage API unreachable: {e}") from e
            except ValueError as e:
                raise StorageAPIError(f"Invalid JSON from storage API: {e}") from e

    async def get_transactions(self, user_id: str, limit: int | None = None) -> Tuple[List[Transaction], ParseReport]:
        """
        Fetch up to `limit` transactions for a user.

        Malformed records are dropped or coerced and counted in the report.

        Raises:
            StorageAPIError: On transport failures or a payload that is not a list
        """
        data = await self._get(
            f"/transactions/{user_id}",
            params={"limit": limit or settings.transaction_fetch_limit},
        )
        try:
            return parse_transactions(data)
        except InvalidTransactionDataError as e:
            raise StorageAPIError(f"Invalid transaction data from storage: {e}") from e

    async def get_budget_categories(self, user_id: str) -> Tuple[List[BudgetCategory], ParseReport]:
        data = await self._get(f"/budget-categories/{user_id}")
        try:
            return parse_budget_categories(data)
        except InvalidTransactionDataError as e:
            raise StorageAPIError(f"Invalid budget category data from storage: {e}") from e

    async def get_financial_profile(self, user_id: str) -> Optional[dict]:
        """Profile document, or None when the user has not created one yet"""
        data = await self._get(f"/financial-profiles/{user_id}", allow_missing=True)
        if data is not None and not isinstance(data, dict):
            raise StorageAPIError("Invalid financial profile from storage")
        return data

    async def get_emergency_fund(self, user_id: str) -> float:
        return parse_emergency_fund(await self.get_financial_profile(user_id))
