"""Boundary DTOs: validate collaborator JSON before it reaches the domain stages"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from wellness_gateway.domain.exceptions import InvalidTransactionDataError
from wellness_gateway.domain.models import BudgetCategory, CategoryType, Transaction, TransactionType
from wellness_gateway.infrastructure.observability.logging import log_malformed_record


def coerce_amount(value: Any) -> Tuple[float, bool]:
    """
    Parse a collaborator amount (often a decimal string) into a magnitude.

    Returns (amount, coerced). Missing, non-numeric or non-finite values
    become 0.0 with coerced=True.
    """
    if value is None or isinstance(value, bool):
        return 0.0, True
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0, True
    if not math.isfinite(amount):
        return 0.0, True
    return abs(amount), False


def _parse_day(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        # "2024-03-01" and "2024-03-01T09:30:00Z" both carry the day first
        return date.fromisoformat(value.strip()[:10])
    return value


class TransactionRecord(BaseModel):
    """Transaction as served by GET /transactions/{userId}"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(validation_alias=AliasChoices("id", "transactionId", "transaction_id"))
    amount: Any = None
    type: TransactionType
    date: date
    description: Optional[str] = ""
    merchant_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("merchantName", "merchant_name"))
    category_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("categoryId", "category_id"))
    is_hidden_fee: bool = Field(default=False, validation_alias=AliasChoices("isHiddenFee", "is_hidden_fee"))
    is_recurring: bool = Field(default=False, validation_alias=AliasChoices("isRecurring", "is_recurring"))
    confidence: Any = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> Any:
        return _parse_day(value)

    @field_validator("is_hidden_fee", "is_recurring", mode="before")
    @classmethod
    def null_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("confidence", mode="after")
    @classmethod
    def bounded_confidence(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        try:
            confidence = float(value)
        except (TypeError, ValueError):
            return None
        return confidence if 0.0 <= confidence <= 1.0 else None

    def to_domain(self) -> Tuple[Transaction, bool]:
        amount, coerced = coerce_amount(self.amount)
        transaction = Transaction(
            transaction_id=self.id,
            amount=amount,
            type=self.type,
            date=self.date,
            description=self.description or "",
            merchant_name=self.merchant_name or None,
            category_id=self.category_id or None,
            is_hidden_fee=self.is_hidden_fee,
            is_recurring=self.is_recurring,
            confidence=self.confidence,
        )
        return transaction, coerced


class BudgetCategoryRecord(BaseModel):
    """Budget category as served by GET /budget-categories/{userId}"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(validation_alias=AliasChoices("id", "categoryId", "category_id"))
    name: str
    type: CategoryType = CategoryType.VARIABLE_EXPENSE
    budgeted_amount: Any = Field(
        default=None, validation_alias=AliasChoices("budgetedAmount", "budget", "budgeted_amount")
    )
    actual_amount: Any = Field(default=None, validation_alias=AliasChoices("actualAmount", "spent", "actual_amount"))
    color: Optional[str] = "#808080"
    icon: Optional[str] = ""

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: Any) -> Any:
        if value is None:
            return CategoryType.VARIABLE_EXPENSE
        if isinstance(value, str):
            value = value.strip().lower()
            # Older clients only distinguish income/expense/investment
            if value == "expense":
                return CategoryType.VARIABLE_EXPENSE
        return value

    def to_domain(self) -> Tuple[BudgetCategory, bool]:
        budgeted, budget_coerced = coerce_amount(self.budgeted_amount)
        actual, actual_coerced = coerce_amount(self.actual_amount if self.actual_amount is not None else 0)
        category = BudgetCategory(
            category_id=self.id,
            name=self.name,
            type=self.type,
            budgeted_amount=budgeted,
            actual_amount=actual,
            color=self.color or "#808080",
            icon=self.icon or "",
        )
        return category, budget_coerced or actual_coerced


@dataclass
class ParseReport:
    """Outcome of boundary parsing for one collaborator payload"""

    entity: str
    records: int = 0
    skipped: int = 0
    coerced: int = 0

    @property
    def malformed(self) -> int:
        return self.skipped + self.coerced


def _ensure_list(payload: Any, entity: str) -> List[Any]:
    if isinstance(payload, dict):
        # Accept {"transactions": [...]} style envelopes as well as bare arrays
        payload = payload.get(entity, payload.get("data"))
    if not isinstance(payload, list):
        raise InvalidTransactionDataError(f"Expected a list of {entity}, got {type(payload).__name__}")
    return payload


def parse_transactions(payload: Any) -> Tuple[List[Transaction], ParseReport]:
    """
    Validate a transaction payload record by record.

    Records failing validation are skipped, bad amounts are coerced to 0;
    both are counted in the report rather than failing the whole batch.

    Raises:
        InvalidTransactionDataError: if the payload is not a list of records
    """
    raw_records = _ensure_list(payload, "transactions")
    report = ParseReport(entity="transactions")
    transactions = []

    for index, raw in enumerate(raw_records):
        try:
            record = TransactionRecord.model_validate(raw)
        except ValidationError as e:
            report.skipped += 1
            log_malformed_record("transaction", index, "skipped", errors=e.error_count())
            continue

        transaction, coerced = record.to_domain()
        if coerced:
            report.coerced += 1
            log_malformed_record("transaction", index, "coerced", transaction_id=transaction.transaction_id)
        transactions.append(transaction)

    report.records = len(transactions)
    return transactions, report


def parse_budget_categories(payload: Any) -> Tuple[List[BudgetCategory], ParseReport]:
    """Same tolerance rules as parse_transactions, for budget categories"""
    raw_records = _ensure_list(payload, "categories")
    report = ParseReport(entity="budget_categories")
    categories = []

    for index, raw in enumerate(raw_records):
        try:
            record = BudgetCategoryRecord.model_validate(raw)
        except ValidationError as e:
            report.skipped += 1
            log_malformed_record("budget_category", index, "skipped", errors=e.error_count())
            continue

        category, coerced = record.to_domain()
        if coerced:
            report.coerced += 1
            log_malformed_record("budget_category", index, "coerced", category_id=category.category_id)
        categories.append(category)

    report.records = len(categories)
    return categories, report


def parse_emergency_fund(profile: Optional[dict]) -> float:
    """Emergency fund balance from a financial profile; absent or malformed counts as 0"""
    if not profile:
        return 0.0
    value = profile.get("emergencyFund", profile.get("emergency_fund"))
    amount, _ = coerce_amount(value)
    return amount
