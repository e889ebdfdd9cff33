import uuid
from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

from .columns import UTCDateTime, utcnow


class Budget(SQLModel, table=True):
    __tablename__ = "budgets"
    __table_args__ = (UniqueConstraint("category", "month", name="uq_budgets_category_month"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    # YYYY-MM (e.g. 2024-06)
    month: str = Field(index=True, min_length=7, max_length=7)

    category: str = Field(max_length=50, index=True)

    amount: float = Field(gt=0)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
