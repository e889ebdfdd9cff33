import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field as PydanticField, field_validator
from sqlmodel import Field, Session, SQLModel, select

from ..core.errors import database_errors
from ..database import get_session
from ..models.category import Category
from ..models.columns import utcnow
from ..models.transaction import Transaction
from ..schemas import DeleteResult, RecordRead, RecordRef, as_utc, coerce_timestamp


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
)

# ─────────────────────────────
#   SCHEMAS
# ─────────────────────────────

class TransactionBase(SQLModel):
    amount: float = Field(gt=0)
    date: datetime
    description: str = Field(min_length=1)
    category: Category

    @field_validator("date", mode="before")
    @classmethod
    def _accept_calendar_date(cls, value):
        return coerce_timestamp(value)

    @field_validator("date")
    @classmethod
    def _store_as_utc(cls, value):
        return as_utc(value)

    @field_validator("description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("description must not be blank")
        return value


class TransactionCreate(TransactionBase):
    pass


class TransactionUpdate(RecordRef):
    amount: Optional[float] = PydanticField(default=None, gt=0)
    date: Optional[datetime] = None
    description: Optional[str] = PydanticField(default=None, min_length=1)
    category: Optional[Category] = None

    @field_validator("date", mode="before")
    @classmethod
    def _accept_calendar_date(cls, value):
        return coerce_timestamp(value)

    @field_validator("date")
    @classmethod
    def _store_as_utc(cls, value):
        return as_utc(value)


class TransactionRead(RecordRead):
    amount: float
    date: datetime
    description: str
    category: str


# ─────────────────────────────
#   ENDPOINTS
# ─────────────────────────────

@router.get(
    "",
    response_model=List[TransactionRead],
)
def list_transactions(session: Session = Depends(get_session)):
    """All transactions, newest first."""
    with database_errors(session, "Failed to fetch transactions"):
        statement = select(Transaction).order_by(Transaction.date.desc())
        transactions = session.exec(statement).all()
    logger.debug("Found %d transactions", len(transactions))
    return transactions


@router.post(
    "",
    response_model=TransactionRead,
)
def create_transaction(
    transaction_in: TransactionCreate,
    session: Session = Depends(get_session),
):
    now = utcnow()
    transaction = Transaction(
        amount=transaction_in.amount,
        date=transaction_in.date,
        description=transaction_in.description,
        category=transaction_in.category.value,
        created_at=now,
        updated_at=now,
    )
    with database_errors(session, "Failed to create transaction"):
        session.add(transaction)
        session.commit()
        session.refresh(transaction)
    logger.info("Transaction created: %s", transaction.id)
    return transaction


@router.put(
    "",
    response_model=Optional[TransactionRead],
)
def update_transaction(
    transaction_in: TransactionUpdate,
    session: Session = Depends(get_session),
):
    """Replace the supplied fields; ``null`` when the id is unknown."""
    with database_errors(session, "Failed to update transaction"):
        transaction = session.get(Transaction, transaction_in.id)
        if transaction is None:
            return None

        changes = transaction_in.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})
        if "category" in changes:
            changes["category"] = changes["category"].value
        for key, value in changes.items():
            setattr(transaction, key, value)

        transaction.updated_at = utcnow()
        session.add(transaction)
        session.commit()
        session.refresh(transaction)
    return transaction


@router.delete(
    "",
    response_model=DeleteResult,
    status_code=status.HTTP_200_OK,
)
def delete_transaction(
    ref: RecordRef,
    session: Session = Depends(get_session),
):
    """Delete by id. Unknown ids succeed too."""
    with database_errors(session, "Failed to delete transaction"):
        transaction = session.get(Transaction, ref.id)
        if transaction is not None:
            session.delete(transaction)
            session.commit()
            logger.info("Transaction deleted: %s", ref.id)
    return DeleteResult()
