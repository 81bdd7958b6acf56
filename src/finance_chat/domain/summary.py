from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import date, datetime

from finance_chat.extraction.keywords import FALLBACK_CATEGORY
from finance_chat.models import (
    FinancialSummary,
    MonthlyTotals,
    ParsedTransaction,
    TransactionKind,
)

HISTORY_MONTHS = 6
MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def _totals(transactions: Iterable[ParsedTransaction]) -> tuple[float, float]:
    income = 0.0
    expenses = 0.0
    for t in transactions:
        if t.kind is TransactionKind.INCOME:
            income += t.amount
        else:
            expenses += t.amount
    return income, expenses


def _in_month(t: ParsedTransaction, year: int, month: int) -> bool:
    return t.occurred_at.year == year and t.occurred_at.month == month


def build_summary(
    transactions: list[ParsedTransaction],
    today: date | datetime | None = None,
) -> FinancialSummary:
    today = today or datetime.now()

    total_income, total_expenses = _totals(transactions)

    current = [t for t in transactions if _in_month(t, today.year, today.month)]
    month_income, month_expenses = _totals(current)
    savings_rate = 0
    if month_income > 0:
        rate = (month_income - month_expenses) / month_income * 100
        if math.isfinite(rate):
            # Half-up, so 72.5 reads as 73
            savings_rate = math.floor(rate + 0.5)

    expense_by_category: dict[str, float] = {}
    for t in current:
        if t.kind is TransactionKind.EXPENSE:
            category = t.category or FALLBACK_CATEGORY
            expense_by_category[category] = expense_by_category.get(category, 0.0) + t.amount

    monthly: list[MonthlyTotals] = []
    for offset in range(HISTORY_MONTHS - 1, -1, -1):
        year, month = _shift_month(today.year, today.month, -offset)
        income, expenses = _totals(t for t in transactions if _in_month(t, year, month))
        monthly.append(MonthlyTotals(month=MONTH_LABELS[month - 1], income=income, expenses=expenses))

    return FinancialSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_balance=total_income - total_expenses,
        month_income=month_income,
        month_expenses=month_expenses,
        savings_rate=savings_rate,
        expense_by_category=expense_by_category,
        monthly=monthly,
    )
