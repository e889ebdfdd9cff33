import re
import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# YYYY-MM with a real month number
MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def is_valid_month(value: str) -> bool:
    return bool(MONTH_RE.match(value))


def coerce_timestamp(value: Any) -> Any:
    """Accept a bare calendar date wherever a timestamp is expected (UTC midnight)."""
    if isinstance(value, str) and len(value) == 10:
        return datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, datetime.min.time(), tzinfo=timezone.utc)
    return value


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # timestamps without an offset are taken as UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Records travel as ``_id`` on the wire; pydantic treats a leading underscore
# as private, hence the aliases.

class RecordRef(BaseModel):
    id: uuid.UUID = Field(validation_alias=AliasChoices("_id", "id"))


class RecordRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(serialization_alias="_id")
    created_at: datetime
    updated_at: datetime


class DeleteResult(BaseModel):
    success: bool = True
