"""
Core Data Models for Household Budget

These models mirror the rows returned by the hosted backend.
They are designed to:
1. Parse backend JSON (ISO dates, numeric strings) into exact types
2. Be immutable - calculations read them, never change them
3. Carry money as Decimal so totals reconcile to the cent

DESIGN DECISION: Every entity is a frozen Pydantic v2 model.
The backend owns create/update/delete; we only derive values from rows.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Frequency(str, Enum):
    """
    Recurrence interval for bills, income and contributions.

    Values outside this set are tolerated on bills and advance monthly.
    Matching is exact: "Weekly" or " weekly " is not a known frequency.
    """
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value: Any) -> Optional["Frequency"]:
        """Return the member with exactly this value, or None for anything else."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


class AccountType(str, Enum):
    CASH = "cash"
    BANK = "bank"
    CREDIT = "credit"
    INVESTMENT = "investment"
    DEBT = "debt"
    LOAN = "loan"
    CREDIT_CARD = "credit_card"


class GoalType(str, Enum):
    SAVINGS = "savings"
    DEBT_PAYOFF = "debt_payoff"
    NET_WORTH_MILESTONE = "net_worth_milestone"


class GoalStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ScopeKind(str, Enum):
    """
    Whose data a view shows.

    PERSONAL: rows owned by one user.
    HOUSEHOLD: rows shared across every member of a household.
    """
    PERSONAL = "personal"
    HOUSEHOLD = "household"


# =============================================================================
# ENTITIES
# =============================================================================

_ROW_CONFIG = ConfigDict(frozen=True, str_strip_whitespace=True, extra="ignore")


class Bill(BaseModel):
    """
    A recurring or one-off bill.

    Invariants:
    - One-off bills become inactive once paid and never recur
    - Recurring bills always have a later next_due after being paid
    """
    model_config = _ROW_CONFIG

    id: str
    user_id: Optional[str] = None
    household_id: Optional[str] = None
    category_id: Optional[str] = None
    name: str = Field(default="", max_length=200)
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    frequency: Union[Frequency, str] = Field(
        default=Frequency.MONTHLY,
        description="Known frequencies parse to Frequency; anything else is kept as-is"
    )
    next_due: date
    is_one_off: bool = False
    is_active: bool = True
    last_paid_date: Optional[date] = None

    # plain: whitespace stripping must not turn " weekly " into a known frequency
    @field_validator('frequency', mode='plain')
    @classmethod
    def normalise_frequency(cls, v: Any) -> Any:
        parsed = Frequency.parse(v)
        return parsed if parsed is not None else ("" if v is None else str(v))


class NetWorthSnapshot(BaseModel):
    """Point-in-time net worth record. Sequences are ordered by date ascending."""
    model_config = _ROW_CONFIG

    snapshot_date: date
    net_worth: Decimal
    total_assets: Decimal = Decimal("0")
    total_liabilities: Decimal = Decimal("0")


class Transaction(BaseModel):
    """A single ledger entry. Amounts are positive; `type` gives direction."""
    model_config = _ROW_CONFIG

    id: str
    amount: Decimal
    category_id: str
    type: TransactionType = TransactionType.EXPENSE
    date: date
    account_id: Optional[str] = None
    user_id: Optional[str] = None
    description: str = ""


class Account(BaseModel):
    """
    An asset or liability account.

    Liability balances are stored as positive amounts owed.
    """
    model_config = _ROW_CONFIG

    id: str
    name: str = ""
    type: AccountType = AccountType.BANK
    balance: Decimal = Decimal("0")
    is_asset: bool = True
    interest_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Annual percentage rate"
    )
    minimum_payment: Optional[Decimal] = Field(default=None, ge=0)
    original_amount: Optional[Decimal] = Field(default=None, ge=0)


class IncomeEntry(BaseModel):
    """
    Income logged for a month, optionally with a recurring pay schedule.

    pay_day is a weekday for weekly and fortnightly pay (0 = Sunday ..
    6 = Saturday) and a day of the month otherwise.
    """
    model_config = _ROW_CONFIG

    id: Optional[str] = None
    amount: Decimal
    month: date
    source: str = ""
    is_recurring: bool = False
    pay_frequency: Optional[Frequency] = None
    pay_day: Optional[int] = Field(default=None, ge=0, le=31)
    next_pay_date: Optional[date] = None

    @field_validator('pay_frequency', mode='before')
    @classmethod
    def unknown_pay_frequency_is_unset(cls, v: Any) -> Optional[Frequency]:
        return Frequency.parse(v)

    @property
    def has_pay_schedule(self) -> bool:
        return self.is_recurring and self.pay_frequency is not None and self.pay_day is not None


class Category(BaseModel):
    model_config = _ROW_CONFIG

    id: str
    name: str
    icon: str = "circle"
    color: str = "#94a3b8"
    type: TransactionType = TransactionType.EXPENSE


class Budget(BaseModel):
    """Amount allocated to one category for one month."""
    model_config = _ROW_CONFIG

    id: str
    category_id: str
    month: date
    allocated: Decimal = Field(default=Decimal("0"), ge=0)


class Goal(BaseModel):
    model_config = _ROW_CONFIG

    id: str
    name: str
    target_amount: Decimal = Field(..., ge=0)
    current_amount: Decimal = Decimal("0")
    deadline: Optional[date] = None
    goal_type: GoalType = GoalType.SAVINGS
    status: GoalStatus = GoalStatus.ACTIVE
    created_at: date


class ViewScope(BaseModel):
    """
    Which rows a computation runs over.

    DESIGN DECISION: Scope is passed explicitly to every service call.
    Nothing reads a "current user" from shared state.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    household_id: Optional[str] = None
    kind: ScopeKind = ScopeKind.PERSONAL

    @model_validator(mode='after')
    def household_needs_id(self) -> 'ViewScope':
        if self.kind == ScopeKind.HOUSEHOLD and not self.household_id:
            raise ValueError("Household scope requires a household_id")
        return self

    @property
    def is_household(self) -> bool:
        return self.kind == ScopeKind.HOUSEHOLD

    @classmethod
    def personal(cls, user_id: str) -> 'ViewScope':
        return cls(user_id=user_id)

    @classmethod
    def household(cls, user_id: str, household_id: str) -> 'ViewScope':
        return cls(user_id=user_id, household_id=household_id, kind=ScopeKind.HOUSEHOLD)


class Debt(BaseModel):
    """
    A liability as the payoff planner sees it.

    Usually built from a liability Account with debt_from_account().
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    balance: Decimal = Field(..., ge=0)
    interest_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Annual percentage rate, e.g. 19.99"
    )
    minimum_payment: Decimal = Field(default=Decimal("0"), ge=0)
    original_amount: Optional[Decimal] = None
