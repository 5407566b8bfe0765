"""Hidden fee detector - keyword and heuristic scan over expense transactions"""

import re
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, List, Optional, Pattern

from wellness_gateway.domain.aggregation import safe_amount
from wellness_gateway.domain.models import (
    DetectedFee,
    FeeSummary,
    FeeTimelinePoint,
    FeeType,
    Severity,
    Transaction,
    TransactionType,
)
from wellness_gateway.utils.date_utils import add_months, month_key

UNKNOWN_CATEGORY = "unknown"

BASE_CONFIDENCE = 0.7
POTENTIAL_FEE_CONFIDENCE = 0.5
POTENTIAL_FEE_MAX_AMOUNT = 50.0
RECURRENCE_TOLERANCE = 0.01
RECURRENCE_MIN_MATCHES = 2


@dataclass(frozen=True)
class FeePattern:
    """Keyword set for one fee category, compiled into a single alternation"""

    fee_type: FeeType
    severity: Severity
    keywords: tuple
    regex: Pattern

    @classmethod
    def build(cls, fee_type: FeeType, severity: Severity, keywords: List[str]) -> "FeePattern":
        regex = re.compile("|".join(re.escape(k) for k in keywords))
        return cls(fee_type=fee_type, severity=severity, keywords=tuple(keywords), regex=regex)

    def matches(self, description: str, merchant: str) -> bool:
        return bool(self.regex.search(description) or self.regex.search(merchant))


# Order is significant: a transaction matching several categories yields
# one entry per category, in this order before sorting.
FEE_PATTERNS = [
    FeePattern.build(
        FeeType.BANK,
        Severity.MEDIUM,
        ["frais bancaires", "commission", "agios", "découvert", "tenue de compte", "carte bancaire"],
    ),
    FeePattern.build(
        FeeType.SUBSCRIPTION,
        Severity.HIGH,
        ["abonnement", "subscription", "monthly", "annual", "premium", "pro"],
    ),
    FeePattern.build(
        FeeType.SERVICE,
        Severity.MEDIUM,
        ["service fee", "processing fee", "handling", "administration", "gestion"],
    ),
    FeePattern.build(
        FeeType.FOREIGN_EXCHANGE,
        Severity.HIGH,
        ["change", "foreign", "fx", "currency", "devise"],
    ),
    FeePattern.build(
        FeeType.PENALTY,
        Severity.CRITICAL,
        ["penalty", "late fee", "retard", "pénalité", "amende"],
    ),
]

SUSPICIOUS_PATTERNS = [
    re.compile(r"\d+\.\d{2}$"),  # precise amount written in the text, e.g. "2.95"
    re.compile(r"service|admin|process|handle", re.IGNORECASE),
    re.compile(r"monthly|annual|yearly", re.IGNORECASE),
]


class RecurrenceIndex:
    """Transactions grouped by exact merchant name for the recurrence check"""

    def __init__(self, transactions: List[Transaction]):
        self._by_merchant: Dict[str, List[Transaction]] = defaultdict(list)
        for t in transactions:
            if t.merchant_name:
                self._by_merchant[t.merchant_name].append(t)

    def is_recurring(self, transaction: Transaction) -> bool:
        """At least two other transactions from the same merchant with the same amount (±0.01)"""
        if not transaction.merchant_name:
            return False

        amount = safe_amount(transaction.amount)
        similar = [
            t
            for t in self._by_merchant.get(transaction.merchant_name, [])
            if t.transaction_id != transaction.transaction_id
            and abs(safe_amount(t.amount) - amount) < RECURRENCE_TOLERANCE
        ]
        return len(similar) >= RECURRENCE_MIN_MATCHES


def keyword_confidence(amount: float, description: str, recurring: bool) -> float:
    """
    Confidence for a keyword match.

    0.70 base, +0.20 below 5, +0.10 for a whole amount, +0.20 when the
    description says "fee" or "frais", +0.10 when recurring. Capped at 1.0.
    """
    confidence = BASE_CONFIDENCE
    if amount < 5:
        confidence += 0.2
    if amount % 1 == 0:
        confidence += 0.1
    if "fee" in description or "frais" in description:
        confidence += 0.2
    if recurring:
        confidence += 0.1

    return round(min(confidence, 1.0), 3)


def _is_suspicious(description: str, merchant: str) -> bool:
    return any(p.search(description) or p.search(merchant) for p in SUSPICIOUS_PATTERNS)


def detect(transactions: List[Transaction]) -> List[DetectedFee]:
    """
    Scan expense transactions for likely hidden fees.

    Every matching keyword category produces its own entry, so a transaction
    can appear more than once (see merge_duplicate_fees). Small unflagged
    expenses with fee-like wording additionally produce a low-confidence
    "unknown" entry. Output is sorted by confidence, highest first; ties keep
    scan order.
    """
    recurrence = RecurrenceIndex(transactions)
    detected: List[DetectedFee] = []

    for t in transactions:
        if t.type != TransactionType.EXPENSE:
            continue

        amount = abs(safe_amount(t.amount))
        description = (t.description or "").lower()
        merchant = (t.merchant_name or "").lower()

        matched = [p for p in FEE_PATTERNS if p.matches(description, merchant)]
        if matched:
            recurring = recurrence.is_recurring(t)
            confidence = keyword_confidence(amount, description, recurring)
            annual_impact = amount * 12 if recurring else amount
            for pattern in matched:
                detected.append(
                    DetectedFee(
                        source_transaction_id=t.transaction_id,
                        amount=amount,
                        confidence=confidence,
                        severity=pattern.severity,
                        fee_type=pattern.fee_type,
                        category=pattern.fee_type.value,
                        recurring=recurring,
                        estimated_annual_impact=annual_impact,
                        description=t.description or "Detected fee",
                        merchant_name=t.merchant_name,
                        date=t.date,
                        matched_categories=[pattern.fee_type.value],
                    )
                )

        if amount < POTENTIAL_FEE_MAX_AMOUNT and not t.is_hidden_fee and _is_suspicious(description, merchant):
            detected.append(
                DetectedFee(
                    source_transaction_id=t.transaction_id,
                    amount=amount,
                    confidence=POTENTIAL_FEE_CONFIDENCE,
                    severity=Severity.LOW,
                    fee_type=FeeType.SERVICE,
                    category=UNKNOWN_CATEGORY,
                    recurring=False,
                    estimated_annual_impact=amount,
                    description=t.description or "Potential fee",
                    merchant_name=t.merchant_name,
                    date=t.date,
                    matched_categories=[UNKNOWN_CATEGORY],
                )
            )

    # sorted() is stable, so equal confidences keep scan order
    return sorted(detected, key=lambda fee: fee.confidence, reverse=True)


def merge_duplicate_fees(fees: List[DetectedFee]) -> List[DetectedFee]:
    """
    Collapse entries that share a source transaction into one.

    The merged entry keeps the fee type and category of the first entry seen
    for that transaction, the highest confidence, severity and annual impact,
    and lists every matched category.
    """
    merged: Dict[str, DetectedFee] = {}
    for fee in fees:
        current = merged.get(fee.source_transaction_id)
        if current is None:
            merged[fee.source_transaction_id] = replace(fee, matched_categories=list(fee.matched_categories))
            continue

        categories = current.matched_categories + [
            c for c in fee.matched_categories if c not in current.matched_categories
        ]
        merged[fee.source_transaction_id] = replace(
            current,
            confidence=max(current.confidence, fee.confidence),
            severity=max(current.severity, fee.severity, key=lambda s: s.rank),
            recurring=current.recurring or fee.recurring,
            estimated_annual_impact=max(current.estimated_annual_impact, fee.estimated_annual_impact),
            matched_categories=categories,
        )

    return sorted(merged.values(), key=lambda fee: fee.confidence, reverse=True)


def filter_fees(
    fees: List[DetectedFee],
    category: Optional[str] = None,
    min_amount: float = 0.0,
    min_confidence: Optional[float] = None,
) -> List[DetectedFee]:
    """View-level filter; category "all" or None keeps every category"""
    result = []
    for fee in fees:
        if category not in (None, "all") and fee.category != category:
            continue
        if fee.amount < min_amount:
            continue
        if min_confidence is not None and fee.confidence < min_confidence:
            continue
        result.append(fee)
    return result


def summarize_fees(fees: List[DetectedFee]) -> FeeSummary:
    total = sum(fee.amount for fee in fees)
    by_category: Dict[str, float] = defaultdict(float)
    for fee in fees:
        by_category[fee.category] += fee.amount

    return FeeSummary(
        total_amount=total,
        annual_impact=sum(fee.estimated_annual_impact for fee in fees),
        average_amount=total / len(fees) if fees else 0.0,
        count=len(fees),
        critical_count=sum(1 for fee in fees if fee.severity == Severity.CRITICAL),
        by_category=dict(by_category),
    )


def monthly_fee_timeline(fees: List[DetectedFee], as_of: date, months: int = 6) -> List[FeeTimelinePoint]:
    """Fee amount and count per calendar month, oldest month first, ending with as_of's month"""
    keys = [month_key(add_months(as_of.replace(day=1), -offset)) for offset in range(months - 1, -1, -1)]
    amounts: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for fee in fees:
        if fee.date is None:
            continue
        key = month_key(fee.date)
        amounts[key] += fee.amount
        counts[key] += 1

    return [FeeTimelinePoint(month=key, amount=amounts.get(key, 0.0), count=counts.get(key, 0)) for key in keys]
