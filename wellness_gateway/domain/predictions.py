"""Predictive analytics - linear trends and seasonal estimates over transaction history"""

import math
from datetime import date
from typing import List, Optional, Sequence, Tuple

from wellness_gateway.domain.aggregation import safe_amount
from wellness_gateway.domain.models import BudgetCategory, Prediction, Transaction, TransactionType
from wellness_gateway.utils.date_utils import months_span

PROJECTION_MONTHS = 6
MIN_INCOME_POINTS = 3
MIN_CATEGORY_POINTS = 2
BALANCE_CONFIDENCE = 0.75

HORIZON_MONTHS = {
    "3months": 3,
    "6months": 6,
    "1year": 12,
    "2years": 24,
}


def horizon_months(name: Optional[str]) -> int:
    return HORIZON_MONTHS.get(name or "", PROJECTION_MONTHS)


def linear_trend(points: Sequence[Tuple[float, float]]) -> float:
    """Least-squares slope of (x, y) points; 0 when x has no spread"""
    n = len(points)
    if n == 0:
        return 0.0
    sum_x = sum(x for x, _ in points)
    sum_y = sum(y for _, y in points)
    sum_xy = sum(x * y for x, y in points)
    sum_xx = sum(x * x for x, _ in points)

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def population_variance(values: Sequence[float]) -> float:
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def seasonal_factor(transactions: List[Transaction], as_of: date) -> float:
    """as_of's calendar-month average relative to the mean of all twelve monthly averages"""
    totals = [0.0] * 12
    counts = [0] * 12
    for t in transactions:
        totals[t.date.month - 1] += safe_amount(t.amount)
        counts[t.date.month - 1] += 1

    averages = [totals[i] / counts[i] if counts[i] else 0.0 for i in range(12)]
    overall = sum(averages) / 12
    return averages[as_of.month - 1] / overall if overall > 0 else 1.0


def predict_income(transactions: List[Transaction]) -> Optional[Prediction]:
    """Average income plus six months of linear trend; needs three income records"""
    income = sorted((t for t in transactions if t.type == TransactionType.INCOME), key=lambda t: t.date)
    if len(income) < MIN_INCOME_POINTS:
        return None

    points = [(float(i), safe_amount(t.amount)) for i, t in enumerate(income)]
    average = sum(y for _, y in points) / len(points)
    slope = linear_trend(points)
    predicted = average + slope * PROJECTION_MONTHS
    last = points[-1][1]

    recommendations = [
        "Income is trending up" if predicted > average else "Consider diversifying your income sources",
        "Plan your savings around this projection",
    ]
    return Prediction(
        kind="income",
        category="income",
        current_value=average,
        predicted_value=predicted,
        confidence=min(0.85, 0.5 + len(income) / 20),
        impact="positive" if predicted > average else "negative",
        data_points=[last + slope * i for i in range(1, PROJECTION_MONTHS + 1)],
        recommendations=recommendations,
    )


def _expense_recommendations(predicted: float, average: float, volatility: float) -> List[str]:
    recommendations = []
    if predicted > average * 1.1:
        recommendations.append("Spending increase expected, prepare your budget")
    elif predicted < average * 0.9:
        recommendations.append("Spending decrease expected, a chance to save")
    if volatility > 0.3:
        recommendations.append("Volatile category, keep a close eye on it")
    recommendations.append("Set up alerts for this category")
    return recommendations


def predict_category_expenses(
    transactions: List[Transaction],
    categories: List[BudgetCategory],
    as_of: date,
) -> List[Prediction]:
    """Seasonally adjusted average spend per budget category with at least two expenses"""
    predictions = []
    for category in categories:
        spent = [
            t
            for t in transactions
            if t.category_id == category.category_id and t.type == TransactionType.EXPENSE
        ]
        if len(spent) < MIN_CATEGORY_POINTS:
            continue

        amounts = [safe_amount(t.amount) for t in spent]
        average = sum(amounts) / len(amounts)
        volatility = math.sqrt(population_variance(amounts)) / average if average > 0 else 0.0
        predicted = average * seasonal_factor(spent, as_of)

        predictions.append(
            Prediction(
                kind="expense",
                category=category.name,
                current_value=average,
                predicted_value=predicted,
                confidence=max(0.3, 0.9 - volatility),
                impact="negative" if predicted > average else "positive",
                data_points=[
                    average * (1 + math.sin(i * math.pi / 6) * 0.1) for i in range(1, PROJECTION_MONTHS + 1)
                ],
                recommendations=_expense_recommendations(predicted, average, volatility),
            )
        )

    return predictions


def predict_balance(transactions: List[Transaction], horizon: int = PROJECTION_MONTHS) -> Prediction:
    """Current net balance carried forward at the historical monthly net rate"""
    income = sum(safe_amount(t.amount) for t in transactions if t.type == TransactionType.INCOME)
    expenses = sum(safe_amount(t.amount) for t in transactions if t.type == TransactionType.EXPENSE)
    current = income - expenses

    if transactions:
        span = months_span(min(t.date for t in transactions), max(t.date for t in transactions))
    else:
        span = 1
    monthly_net = income / span - expenses / span
    predicted = current + monthly_net * horizon

    improving = predicted > current
    return Prediction(
        kind="balance",
        category="balance",
        current_value=current,
        predicted_value=predicted,
        confidence=BALANCE_CONFIDENCE,
        impact="positive" if improving else "negative",
        data_points=[current + monthly_net * i for i in range(1, horizon + 1)],
        recommendations=[
            "Your position should improve" if improving else "Your balance is projected to decline",
            "Watch spending in volatile categories",
        ],
    )


def predict_all(
    transactions: List[Transaction],
    categories: List[BudgetCategory],
    as_of: date,
    horizon: int = PROJECTION_MONTHS,
) -> List[Prediction]:
    """Every available prediction, most confident first"""
    predictions: List[Prediction] = []
    income = predict_income(transactions)
    if income is not None:
        predictions.append(income)
    predictions.extend(predict_category_expenses(transactions, categories, as_of))
    predictions.append(predict_balance(transactions, horizon))

    return sorted(predictions, key=lambda p: p.confidence, reverse=True)
