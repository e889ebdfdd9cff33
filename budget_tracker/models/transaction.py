import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from .columns import UTCDateTime, utcnow


class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    amount: float
    # stored in UTC; the YYYY-MM prefix is the UTC month
    date: datetime = Field(sa_type=UTCDateTime, index=True)
    description: str
    category: str = Field(max_length=50, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
