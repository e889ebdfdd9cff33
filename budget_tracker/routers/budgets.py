import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import field_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Field, Session, SQLModel, select

from ..core.errors import database_errors
from ..database import get_session
from ..models.budget import Budget
from ..models.category import Category
from ..models.columns import utcnow
from ..schemas import DeleteResult, RecordRead, RecordRef, is_valid_month


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
)


class BudgetBase(SQLModel):
    month: str = Field(min_length=7, max_length=7)
    category: Category
    amount: float = Field(gt=0)

    @field_validator("month")
    @classmethod
    def _month_format(cls, value: str) -> str:
        if not is_valid_month(value):
            raise ValueError("month must be formatted YYYY-MM")
        return value


class BudgetCreate(BudgetBase):
    pass


class BudgetRead(RecordRead):
    month: str
    category: str
    amount: float


def _find_budget(session: Session, category: str, month: str) -> Optional[Budget]:
    return session.exec(
        select(Budget).where(
            Budget.category == category,
            Budget.month == month,
        )
    ).first()


def _write_budget(session: Session, payload: BudgetCreate) -> Budget:
    now = utcnow()
    category = payload.category.value

    budget = _find_budget(session, category, payload.month)
    if budget is None:
        budget = Budget(
            month=payload.month,
            category=category,
            amount=payload.amount,
            created_at=now,
            updated_at=now,
        )
    else:
        budget.amount = payload.amount
        budget.updated_at = now

    session.add(budget)
    session.commit()
    session.refresh(budget)
    return budget


@router.get(
    "",
    response_model=List[BudgetRead],
    status_code=status.HTTP_200_OK,
)
def list_budgets(
    month: Optional[str] = None,
    session: Session = Depends(get_session),
):
    if month and not is_valid_month(month):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid month")

    with database_errors(session, "Failed to fetch budgets"):
        stmt = select(Budget)
        if month:
            stmt = stmt.where(Budget.month == month)
        stmt = stmt.order_by(Budget.month.desc(), Budget.category.asc())
        return list(session.exec(stmt).all())


@router.post(
    "",
    response_model=BudgetRead,
    status_code=status.HTTP_200_OK,
)
def upsert_budget(
    payload: BudgetCreate,
    session: Session = Depends(get_session),
):
    """Set the budget for (category, month), replacing any existing amount."""
    with database_errors(session, "Failed to save budget"):
        try:
            budget = _write_budget(session, payload)
        except IntegrityError:
            # Lost an insert race on the same key; the row exists now.
            session.rollback()
            budget = _write_budget(session, payload)

    logger.info("Budget set: %s %s = %s", budget.category, budget.month, budget.amount)
    return budget


@router.delete(
    "",
    response_model=DeleteResult,
    status_code=status.HTTP_200_OK,
)
def delete_budget(
    ref: RecordRef,
    session: Session = Depends(get_session),
):
    with database_errors(session, "Failed to delete budget"):
        budget = session.get(Budget, ref.id)
        if budget is not None:
            session.delete(budget)
            session.commit()
            logger.info("Budget deleted: %s", ref.id)
    return DeleteResult()
