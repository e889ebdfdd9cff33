from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlmodel import Session, select

from ..core import insights
from ..core.errors import database_errors
from ..database import get_session
from ..models.budget import Budget
from ..models.transaction import Transaction
from ..schemas import is_valid_month
from .transactions import TransactionRead


router = APIRouter(
    prefix="/insights",
    tags=["insights"],
)


class CategoryAmount(BaseModel):
    category: str
    amount: float


class MonthAmount(BaseModel):
    month: str
    amount: float


class DashboardRead(BaseModel):
    total: float
    count: int
    average: float
    top_category: str
    by_category: List[CategoryAmount]
    recent: List[TransactionRead]


class ComparisonRow(BaseModel):
    category: str
    budgeted: float
    actual: float


class InsightRow(ComparisonRow):
    percent: int
    over_budget: bool


class BudgetOverviewRead(BaseModel):
    month: str
    total: float
    comparison: List[ComparisonRow]
    insights: List[InsightRow]


def _all_transactions(session: Session) -> List[Transaction]:
    return list(session.exec(select(Transaction).order_by(Transaction.date.desc())).all())


@router.get("/dashboard", response_model=DashboardRead)
def dashboard(session: Session = Depends(get_session)):
    with database_errors(session, "Failed to fetch transactions"):
        transactions = _all_transactions(session)
    return insights.dashboard_summary(transactions)


@router.get("/monthly", response_model=List[MonthAmount])
def monthly(session: Session = Depends(get_session)):
    with database_errors(session, "Failed to fetch transactions"):
        transactions = _all_transactions(session)
    return insights.monthly_series(transactions)


@router.get("/budgets", response_model=BudgetOverviewRead)
def budget_overview(
    month: Optional[str] = None,
    session: Session = Depends(get_session),
):
    """Budget vs actual for one month (the current month by default)."""
    month = month or insights.current_month()
    if not is_valid_month(month):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid month")

    with database_errors(session, "Failed to fetch budgets"):
        transactions = _all_transactions(session)
        budgets = list(session.exec(select(Budget).where(Budget.month == month)).all())
    return insights.budget_overview(transactions, budgets, month)
