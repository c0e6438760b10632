"""
Core Data Models for Trip Ledger

These models define the schemas for everything the settlement engine
reads and returns. They are designed to:
1. Be immutable snapshots (frozen) once built
2. Keep money as integer minor units, never floats
3. Be serializable for whatever action layer calls the engine

DESIGN DECISION: Models here are STRUCTURAL only.
Domain rules (known members, split sums, non-empty participants) are
checked by ExpenseValidator, so the engine can still be handed a raw
snapshot and report precisely what is wrong with it.
"""

import datetime as dt
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


# =============================================================================
# ENUMS
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    Used for the per-category spend breakdown of a trip.
    """
    DINING = "dining"
    TRANSPORT = "transport"
    HOTEL = "hotel"
    SHOPPING = "shopping"
    ACTIVITY = "activity"
    OTHER = "other"


class SplitMode(str, Enum):
    """How an expense is divided between its participants."""
    EQUAL = "equal"
    CUSTOM = "custom"
    MIXED = "mixed"  # Never produced by the entry form


# =============================================================================
# MEMBERS
# =============================================================================

class Member(BaseModel):
    """A person on the trip. Immutable once created."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque member identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )


# =============================================================================
# PARTICIPANT SHARES
# =============================================================================

class EqualShare(BaseModel):
    """Participant who takes an even slice of the expense."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["equal"] = "equal"
    member_id: str = Field(..., min_length=1)


class CustomShare(BaseModel):
    """Participant with an explicit amount, in minor units."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["custom"] = "custom"
    member_id: str = Field(..., min_length=1)
    amount: int = Field(
        ...,
        ge=0,
        description="Share in minor units"
    )


Participant = Annotated[
    Union[EqualShare, CustomShare],
    Field(discriminator="kind"),
]


# =============================================================================
# EXPENSES
# =============================================================================

class Expense(BaseModel):
    """
    A single recorded expense, already in the reference currency.

    ``amount`` is in minor units. ``original_currency`` and
    ``original_amount`` keep what the user typed before conversion;
    the engine never reads them.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(default_factory=_new_id)
    amount: int = Field(
        ...,
        description="Total in minor units of the reference currency"
    )
    payer_id: str = Field(..., min_length=1)
    date: dt.date = Field(default_factory=date.today)
    participants: list[Participant] = Field(default_factory=list)

    title: str = Field(default="", max_length=200)
    category: ExpenseCategory = ExpenseCategory.OTHER
    note: Optional[str] = Field(default=None, max_length=1000)
    original_currency: Optional[str] = Field(default=None, max_length=3)
    original_amount: Optional[Decimal] = None

    @property
    def participant_ids(self) -> list[str]:
        return [p.member_id for p in self.participants]

    @property
    def split_mode(self) -> SplitMode:
        """Classify the expense by the kinds of shares it carries."""
        kinds = {p.kind for p in self.participants}
        if kinds == {"custom"}:
            return SplitMode.CUSTOM
        if kinds == {"custom", "equal"}:
            return SplitMode.MIXED
        return SplitMode.EQUAL

    @property
    def custom_total(self) -> int:
        """Sum of explicit shares only."""
        return sum(p.amount for p in self.participants if isinstance(p, CustomShare))


class ExpenseDraft(BaseModel):
    """
    Expense as submitted by the entry form.

    CRITICAL: This is UNVERIFIED input. Amounts are major units and may
    be in a foreign currency. It must go through
    ExpenseValidator.build_expense() before it is trusted.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(
        ...,
        description="Total as typed, in major units of ``currency``"
    )
    currency: Optional[str] = Field(
        default=None,
        description="Currency of ``amount``; None means the reference currency"
    )
    exchange_rate: Decimal = Field(
        default=Decimal("1"),
        description="Multiplier from ``currency`` to the reference currency"
    )
    payer_id: str
    participant_ids: list[str] = Field(default_factory=list)
    custom_splits: Optional[dict[str, Decimal]] = Field(
        default=None,
        description="member_id -> share in major units of the reference currency"
    )

    date: dt.date = Field(default_factory=date.today)
    title: str = ""
    category: ExpenseCategory = ExpenseCategory.OTHER
    note: Optional[str] = None

    @field_validator('currency')
    @classmethod
    def upper_currency(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else None


# =============================================================================
# RESULTS
# =============================================================================

class Transfer(BaseModel):
    """A suggested payment from a debtor to a creditor."""
    model_config = ConfigDict(frozen=True)

    from_member_id: str
    to_member_id: str
    amount: int = Field(
        ...,
        gt=0,
        description="Payment in minor units"
    )


class MemberSummary(BaseModel):
    """What one member paid, consumed, and nets out at."""

    member_id: str
    name: str
    total_paid: int = 0
    total_consumed: int = 0
    balance: int = 0

    @property
    def is_creditor(self) -> bool:
        return self.balance > 0

    @property
    def is_debtor(self) -> bool:
        return self.balance < 0


class CategoryTotal(BaseModel):
    """Spend for one category and its share of the trip total."""

    category: ExpenseCategory
    amount: int = Field(ge=0)
    share: float = Field(
        ge=0.0,
        le=1.0,
        description="Fraction of the trip total (0-1)"
    )


class SettlementReport(BaseModel):
    """
    Everything the presentation layer shows for a trip.

    Derived on every request and never stored.
    """

    report_id: str = Field(default_factory=_new_id)
    computed_at: datetime = Field(default_factory=_utcnow)
    currency: str

    balances: dict[str, int] = Field(default_factory=dict)
    transfers: list[Transfer] = Field(default_factory=list)
    summaries: list[MemberSummary] = Field(default_factory=list)
    category_totals: list[CategoryTotal] = Field(default_factory=list)
    total_spent: int = 0

    @property
    def is_settled(self) -> bool:
        """True when nobody needs to pay anybody."""
        return not self.transfers
