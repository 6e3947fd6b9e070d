"""Snapshot types shared by the reports, exports, API and dashboard."""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TransactionType = Literal["expense", "income"]
RangeKind = Literal["all", "today", "week", "month", "year", "custom"]
Granularity = Literal["day", "month"]

UNKNOWN_NAME = "Unknown"
UNKNOWN_COLOR = "#9CA3AF"


def _clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Category name is required")
    return value


class Category(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str = UNKNOWN_COLOR

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _clean_name(value)


class Transaction(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: float = Field(..., ge=0, allow_inf_nan=False, description="Unsigned magnitude; direction comes from type")
    category_id: Optional[int] = None
    description: str = ""
    date: dt.date
    created_at: dt.datetime = Field(default_factory=dt.datetime.now)
    type: TransactionType

    @field_validator("description", mode="before")
    @classmethod
    def description_default(cls, value):
        return value or ""


class DateRange(BaseModel):
    """Inclusive calendar-date interval."""

    start_date: dt.date
    end_date: dt.date

    def contains(self, day: dt.date) -> bool:
        return self.start_date <= day <= self.end_date


class Summary(BaseModel):
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_balance: float = 0.0
    count: int = 0


class TimeBucket(BaseModel):
    label: str
    income: float
    expenses: float
    net: float


class CategoryBucket(BaseModel):
    category_id: Optional[int] = None
    name: str
    color: str
    income: float
    expenses: float
    net: float
    total: float


# --- Write payloads (API bodies and dashboard forms) ---

class CategoryCreate(BaseModel):
    name: str
    color: str = UNKNOWN_COLOR

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _clean_name(value)


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _clean_name(value)


class TransactionCreate(BaseModel):
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    type: TransactionType
    category_id: Optional[int] = None
    description: str = ""
    date: dt.date = Field(default_factory=dt.date.today)


class TransactionUpdate(BaseModel):
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    type: Optional[TransactionType] = None
    category_id: Optional[int] = None
    description: Optional[str] = None
    date: Optional[dt.date] = None
