"""Spending aggregates derived from fetched records.

Nothing here is persisted; every figure is recomputed from the full
transaction and budget lists on each call. Records only need ``amount``,
``category`` and (for transactions) ``date`` attributes, so table models
and any plain object with those fields both work.
"""
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from ..models.category import CATEGORIES


NO_CATEGORY = "None"
RECENT_LIMIT = 5


def month_of(value) -> str:
    """``YYYY-MM`` prefix of a date, timestamp, or ISO date string."""
    if isinstance(value, str):
        return value[:7]
    return value.strftime("%Y-%m")


def current_month() -> str:
    return date.today().strftime("%Y-%m")


def in_month(transactions: Iterable, month: str) -> list:
    return [tx for tx in transactions if month_of(tx.date) == month]


def total_spend(transactions: Iterable) -> float:
    return sum(tx.amount for tx in transactions)


def average_transaction(transactions: Sequence) -> float:
    if not transactions:
        return 0
    return total_spend(transactions) / len(transactions)


def totals_by_category(transactions: Iterable, month: Optional[str] = None) -> Dict[str, float]:
    """Per-category sums for every known category, zero when nothing was spent."""
    totals = {cat: 0 for cat in CATEGORIES}
    for tx in transactions:
        if month is not None and month_of(tx.date) != month:
            continue
        totals[tx.category] = totals.get(tx.category, 0) + tx.amount
    return totals


def category_breakdown(transactions: Iterable) -> List[dict]:
    return [
        {"category": cat, "amount": amount}
        for cat, amount in totals_by_category(transactions).items()
        if amount > 0
    ]


def top_category(transactions: Iterable) -> str:
    best, best_amount = NO_CATEGORY, 0
    # strict comparison keeps the earlier category on ties
    for row in category_breakdown(transactions):
        if row["amount"] > best_amount:
            best, best_amount = row["category"], row["amount"]
    return best


def monthly_series(transactions: Iterable) -> List[dict]:
    totals: Dict[str, float] = {}
    for tx in transactions:
        key = month_of(tx.date)
        totals[key] = totals.get(key, 0) + tx.amount
    return [{"month": m, "amount": totals[m]} for m in sorted(totals)]


def budget_amounts(budgets: Iterable, month: Optional[str] = None) -> Dict[str, float]:
    amounts = {}
    for b in budgets:
        if month is not None and b.month != month:
            continue
        amounts[b.category] = b.amount
    return amounts


def budget_vs_actual(transactions: Iterable, budgets: Iterable, month: str) -> List[dict]:
    """One row per category: budgeted and actual spend for ``month``."""
    budgeted = budget_amounts(budgets, month)
    actuals = totals_by_category(transactions, month)
    return [
        {
            "category": cat,
            "budgeted": budgeted.get(cat, 0),
            "actual": actuals.get(cat, 0),
        }
        for cat in CATEGORIES
    ]


def percent_of_budget(actual: float, budgeted: float) -> Optional[int]:
    if not budgeted:
        return None
    return round(actual / budgeted * 100)


def spending_insights(transactions: Iterable, budgets: Iterable, month: str) -> List[dict]:
    """Budget-vs-actual rows for budgeted categories only, with percent and flag."""
    insights = []
    for row in budget_vs_actual(transactions, budgets, month):
        percent = percent_of_budget(row["actual"], row["budgeted"])
        if percent is None:
            continue
        insights.append({
            **row,
            "percent": percent,
            "over_budget": row["actual"] > row["budgeted"],
        })
    return insights


def dashboard_summary(transactions: Sequence) -> dict:
    """Figures for the dashboard; ``transactions`` is expected newest first."""
    return {
        "total": total_spend(transactions),
        "count": len(transactions),
        "average": average_transaction(transactions),
        "top_category": top_category(transactions),
        "by_category": category_breakdown(transactions),
        "recent": list(transactions[:RECENT_LIMIT]),
    }


def budget_overview(transactions: Iterable, budgets: Iterable, month: str) -> dict:
    transactions = list(transactions)
    budgets = list(budgets)
    return {
        "month": month,
        "total": total_spend(in_month(transactions, month)),
        "comparison": budget_vs_actual(transactions, budgets, month),
        "insights": spending_insights(transactions, budgets, month),
    }
