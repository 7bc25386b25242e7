"""
Core Data Models for Expense Bot

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Keep remote-store quirks out of the business logic

DESIGN DECISION: Records read back from the store are decoded into
ExpenseEntry with defaults already applied. Aggregation code never has
to guess whether a field is present.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


T = TypeVar("T")


def _to_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class ExpenseRecord(BaseModel):
    """
    A complete expense, ready to be written to the store.

    Created only when the entry wizard has collected every field.
    Immutable once built.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    title: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )
    date: datetime = Field(
        ...,
        description="When the expense happened (UTC)"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category option name"
    )
    amount: int = Field(
        ...,
        gt=0,
        description="Amount in whole currency units"
    )

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return _to_utc(v)


class ExpenseDraft(BaseModel):
    """
    Partially filled expense collected by the wizard.

    Fields are filled strictly in order: title, date, category, amount.
    A draft that never completes is simply dropped.
    """
    model_config = ConfigDict(validate_assignment=True)

    title: Optional[str] = None
    date: Optional[datetime] = None
    category: Optional[str] = None
    amount: Optional[int] = Field(default=None, gt=0)

    @property
    def is_complete(self) -> bool:
        """Check if every field has been collected."""
        return (
            bool(self.title)
            and self.date is not None
            and bool(self.category)
            and self.amount is not None
        )

    def to_record(self) -> ExpenseRecord:
        """
        Build the final record.

        Raises:
            ValueError: If the draft is not complete
        """
        if not self.is_complete:
            raise ValueError("Draft is missing required fields")
        return ExpenseRecord(
            title=self.title,
            date=self.date,
            category=self.category,
            amount=self.amount,
        )


class ExpenseEntry(BaseModel):
    """
    An expense as read back from the store.

    Stored records may be missing any field (rows edited by hand in the
    database UI, for example). The gateway fills the gaps before
    building this model, so amount is always a number and category/title
    are always strings. Only the date may be unknown.
    """

    title: str
    date: Optional[datetime] = None
    category: str
    amount: int = 0

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_utc(v) if v is not None else None


# =============================================================================
# QUERY MODELS
# =============================================================================

class DateRange(BaseModel):
    """Inclusive range of instants."""
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode='after')
    def validate_order(self) -> 'DateRange':
        if self.end < self.start:
            raise ValueError("Range end cannot be before start")
        return self

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


class SummaryRequest(BaseModel):
    """Parsed arguments of a summary command."""

    date_range: DateRange
    detail: bool = False
    explicit_range: bool = False


class SummaryResult(BaseModel):
    """
    Totals for a date range.

    Derived from store data on every request, never persisted.
    per_category is a plain mapping; callers must not rely on its order.
    """

    date_range: DateRange
    total: int = 0
    per_category: dict[str, int] = Field(default_factory=dict)
    detail: list[ExpenseEntry] = Field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return len(self.detail)


# =============================================================================
# STORE RESULT
# =============================================================================

class StoreResult(BaseModel, Generic[T]):
    """
    Outcome of a remote store operation.

    Every store call returns one of these instead of raising, so each
    call site has to decide what a failure means for the user.
    """

    success: bool
    value: Optional[T] = None
    error_message: Optional[str] = None

    @classmethod
    def ok(cls, value: Any = None) -> "StoreResult":
        return cls(success=True, value=value)

    @classmethod
    def failure(cls, reason: str) -> "StoreResult":
        return cls(success=False, error_message=reason)


# =============================================================================
# WIZARD MODELS
# =============================================================================

class WizardStep(str, Enum):
    """
    Steps of the guided entry flow.

    INIT is transient: starting the wizard prompts for the title and
    moves straight to AWAIT_TITLE.
    """
    INIT = "init"
    AWAIT_TITLE = "await_title"
    AWAIT_DATE = "await_date"
    AWAIT_CATEGORY = "await_category"
    AWAIT_AMOUNT = "await_amount"


class WizardState(BaseModel):
    """The state machine value carried between turns of one conversation."""

    step: WizardStep = WizardStep.INIT
    draft: ExpenseDraft = Field(default_factory=ExpenseDraft)
    correlation_id: UUID = Field(
        default_factory=uuid4,
        description="Ties together audit events of one session"
    )


class WizardOutcome(BaseModel):
    """
    Result of feeding one turn to the wizard.

    state is None once the wizard has finished (saved or abandoned).
    """

    state: Optional[WizardState] = None
    replies: list[str] = Field(default_factory=list)
    finished: bool = False
    record: Optional[ExpenseRecord] = None
