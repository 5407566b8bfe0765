"""Unit tests for hidden fee detection"""

import pytest
from datetime import date
from wellness_gateway.domain.fees import (
    FEE_PATTERNS,
    RecurrenceIndex,
    detect,
    filter_fees,
    keyword_confidence,
    merge_duplicate_fees,
    monthly_fee_timeline,
    summarize_fees,
)
from wellness_gateway.domain.models import FeeType, Severity, TransactionType

from conftest import TODAY, make_transaction


def test_detect_bank_fee_example():
    """3.50 'frais de tenue de compte': bank, capped confidence, medium"""
    fees = detect([make_transaction("t1", 3.5, description="frais de tenue de compte")])

    assert len(fees) == 1
    fee = fees[0]
    assert fee.category == "bank"
    assert fee.fee_type == FeeType.BANK
    assert fee.confidence == 1.0
    assert fee.severity == Severity.MEDIUM
    assert fee.recurring is False
    assert fee.estimated_annual_impact == 3.5
    assert fee.source_transaction_id == "t1"


def test_detect_ignores_non_expenses():
    transactions = [
        make_transaction("i", 3.0, TransactionType.INCOME, description="commission"),
        make_transaction("x", 3.0, TransactionType.TRANSFER, description="frais bancaires"),
    ]

    assert detect(transactions) == []


def test_detect_empty():
    assert detect([]) == []


def test_detect_matches_merchant_name():
    fees = detect([make_transaction("t", 60.0, description="Card payment", merchant_name="Western Union Currency")])

    assert [f.category for f in fees] == ["foreign_exchange"]
    assert fees[0].severity == Severity.HIGH


def test_detect_keyword_is_substring():
    """'pro' inside 'Protein' is still a subscription keyword hit"""
    fees = detect([make_transaction("t", 60.0, description="Protein shop")])

    assert [f.category for f in fees] == ["subscription"]


def test_detect_penalty_is_critical():
    fees = detect([make_transaction("t", 80.0, description="Amende stationnement")])

    assert fees[0].severity == Severity.CRITICAL
    assert fees[0].fee_type == FeeType.PENALTY


def test_detect_multiple_categories_produce_duplicates():
    """One transaction matching two keyword sets appears once per set"""
    fees = detect([make_transaction("t", 20.0, description="late fee on premium plan")])

    assert [f.category for f in fees] == ["subscription", "penalty"]
    assert {f.source_transaction_id for f in fees} == {"t"}
    assert [f.severity for f in fees] == [Severity.HIGH, Severity.CRITICAL]


def test_merge_duplicate_fees_collapses_per_transaction():
    fees = merge_duplicate_fees(detect([make_transaction("t", 20.0, description="late fee on premium plan")]))

    assert len(fees) == 1
    merged = fees[0]
    assert merged.category == "subscription"
    assert merged.severity == Severity.CRITICAL
    assert merged.matched_categories == ["subscription", "penalty"]
    assert merged.confidence == 1.0


def test_merge_duplicate_fees_keeps_distinct_transactions():
    transactions = [
        make_transaction("a", 10.0, description="monthly fx fee"),
        make_transaction("b", 12.34, description="commission"),
    ]
    detected = detect(transactions)
    merged = merge_duplicate_fees(detected)

    assert len(detected) == 4  # subscription + fx + unknown for "a", bank for "b"
    assert [f.source_transaction_id for f in merged] == ["a", "b"]
    assert merged[0].matched_categories == ["subscription", "foreign_exchange", "unknown"]
    assert merged[0].confidence == 1.0


@pytest.mark.parametrize(
    "amount,description,expected",
    [
        (12.34, "commission", 0.7),
        (7.0, "agios", 0.8),
        (4.99, "agios", 0.9),
        (4.0, "agios", 1.0),
        (12.34, "commission fee", 0.9),
        (3.5, "frais de tenue de compte", 1.0),
    ],
)
def test_keyword_confidence(amount, description, expected):
    fees = detect([make_transaction("t", amount, description=description)])
    keyword_fees = [f for f in fees if f.category != "unknown"]

    assert keyword_fees[0].confidence == expected


def test_keyword_confidence_recurring_bonus():
    assert keyword_confidence(12.34, "commission", recurring=True) == 0.8


def test_recurring_needs_two_other_matches():
    def netflix(tid, day, amount=45.99):
        return make_transaction(tid, amount, day=day, description="Streaming premium", merchant_name="Netflix")

    three = [netflix("a", date(2024, 4, 20)), netflix("b", date(2024, 5, 20)), netflix("c", date(2024, 6, 20))]
    fees = detect(three)

    assert len(fees) == 3
    assert all(f.recurring for f in fees)
    assert all(f.confidence == 0.8 for f in fees)
    assert fees[0].estimated_annual_impact == pytest.approx(45.99 * 12)

    two = detect(three[:2])
    assert not any(f.recurring for f in two)
    assert two[0].confidence == 0.7
    assert two[0].estimated_annual_impact == 45.99


def test_recurrence_amount_tolerance_and_exact_merchant():
    base = make_transaction("a", 9.99, merchant_name="Spotify")
    close = [make_transaction("b", 9.995, merchant_name="Spotify"), make_transaction("c", 9.985, merchant_name="Spotify")]
    other_case = [make_transaction("d", 9.99, merchant_name="spotify"), make_transaction("e", 9.99, merchant_name="spotify")]

    assert RecurrenceIndex([base] + close).is_recurring(base)
    assert not RecurrenceIndex([base] + other_case).is_recurring(base)


def test_recurrence_requires_merchant():
    t = make_transaction("a", 5.0)

    assert not RecurrenceIndex([t, make_transaction("b", 5.0), make_transaction("c", 5.0)]).is_recurring(t)


def test_potential_fee_from_wording():
    """Small unflagged expense mentioning admin: low-confidence unknown entry"""
    fees = detect([make_transaction("t", 12.49, description="Account admin charge")])

    assert len(fees) == 1
    fee = fees[0]
    assert fee.category == "unknown"
    assert fee.confidence == 0.5
    assert fee.severity == Severity.LOW
    assert fee.fee_type == FeeType.SERVICE
    assert fee.recurring is False
    assert fee.estimated_annual_impact == 12.49


def test_potential_fee_from_trailing_decimal():
    fees = detect([make_transaction("t", 30.0, description="Payment ref 2.95")])

    assert [f.category for f in fees] == ["unknown"]


def test_potential_fee_skipped_for_flagged_or_large():
    transactions = [
        make_transaction("flagged", 12.49, description="Account admin charge", is_hidden_fee=True),
        make_transaction("large", 50.0, description="Account admin charge"),
    ]

    assert detect(transactions) == []


def test_detect_sorted_by_confidence_stable():
    transactions = [
        make_transaction("low", 12.49, description="admin charge"),
        make_transaction("mid", 12.34, description="commission"),
        make_transaction("high", 4.0, description="agios"),
        make_transaction("mid2", 12.34, description="agios"),
    ]
    fees = detect(transactions)

    assert [f.source_transaction_id for f in fees] == ["high", "mid", "mid2", "low"]


def test_detect_confidence_bounds():
    transactions = [
        make_transaction(str(i), amount, description=desc, merchant_name="Same")
        for i, (amount, desc) in enumerate(
            [(1.0, "late fee frais penalty"), (1.0, "late fee frais penalty"), (1.0, "late fee frais penalty"), (49.99, "monthly service")]
        )
    ]

    for fee in detect(transactions):
        assert 0.0 <= fee.confidence <= 1.0


def test_detect_is_idempotent(sample_transactions):
    assert detect(sample_transactions) == detect(sample_transactions)


def test_pattern_table_order():
    assert [p.fee_type for p in FEE_PATTERNS] == [
        FeeType.BANK,
        FeeType.SUBSCRIPTION,
        FeeType.SERVICE,
        FeeType.FOREIGN_EXCHANGE,
        FeeType.PENALTY,
    ]


def test_filter_fees():
    fees = detect(
        [
            make_transaction("bank", 3.5, description="frais de tenue de compte"),
            make_transaction("sub", 60.0, description="premium"),
            make_transaction("maybe", 12.49, description="admin charge"),
        ]
    )

    assert {f.source_transaction_id for f in filter_fees(fees, category="bank")} == {"bank"}
    assert {f.source_transaction_id for f in filter_fees(fees, category="all")} == {"bank", "sub", "maybe"}
    assert {f.source_transaction_id for f in filter_fees(fees, min_amount=10)} == {"sub", "maybe"}
    assert {f.source_transaction_id for f in filter_fees(fees, min_confidence=0.6)} == {"bank", "sub"}


def test_summarize_fees():
    fees = detect(
        [
            make_transaction("bank", 4.0, description="agios"),
            make_transaction("late", 20.0, description="late fee"),
        ]
    )
    summary = summarize_fees(fees)

    assert summary.total_amount == 24.0
    assert summary.annual_impact == 24.0
    assert summary.average_amount == 12.0
    assert summary.count == 2
    assert summary.critical_count == 1
    assert summary.by_category == {"bank": 4.0, "penalty": 20.0}


def test_summarize_no_fees():
    summary = summarize_fees([])

    assert summary.total_amount == 0
    assert summary.average_amount == 0
    assert summary.by_category == {}


def test_monthly_fee_timeline():
    fees = detect(
        [
            make_transaction("jun", 4.0, day=date(2024, 6, 15), description="agios"),
            make_transaction("jun2", 6.0, day=date(2024, 6, 1), description="agios"),
            make_transaction("jan", 2.0, day=date(2024, 1, 10), description="agios"),
            make_transaction("old", 9.0, day=date(2023, 12, 31), description="agios"),
        ]
    )
    timeline = monthly_fee_timeline(fees, TODAY)

    assert [p.month for p in timeline] == ["2024-01", "2024-02", "2024-03", "2024-04", "2024-05", "2024-06"]
    assert timeline[-1].amount == 10.0
    assert timeline[-1].count == 2
    assert timeline[0].amount == 2.0
    assert timeline[1].count == 0
