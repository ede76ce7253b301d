"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass
class Account:
    """Credit account tracked by the user"""

    id: str
    account_name: str
    credit_limit: Optional[float]
    amount_owed: Optional[float] = 0.0
    minimum_monthly_payment: Optional[float] = 0.0
    position: int = 0
    account_number: Optional[str] = None
    interest_rate: Optional[float] = None
    rate_expiration: Optional[date] = None
    payment_due_date: Optional[int] = None  # legacy day-of-month
    statement_cycle_day: Optional[int] = None
    next_payment_due_date: Optional[date | str] = None  # authoritative, from bank link
    last_statement_balance: Optional[float] = None
    rewards: Optional[float] = None
    last_used: Optional[int] = None  # month 1-12
    payment_preference: Optional[str] = None  # "full" or "minimum"
    plaid_access_token: Optional[str] = None
    plaid_account_id: Optional[str] = None
    plaid_item_id: Optional[str] = None

    @property
    def is_linked(self) -> bool:
        return bool(self.plaid_access_token)


@dataclass
class UpcomingPayment:
    """Minimum payment due within the upcoming window"""

    account_id: str
    account_name: str
    amount: float
    due_date: date
    day_of_week: str
    formatted_date: str


@dataclass
class AccountTotals:
    """Aggregate figures across a set of accounts"""

    total_limit: float
    total_owed: float
    total_available: float
    total_minimum_payment: float
    total_rewards: float
    total_utilization: int


@dataclass
class LinkedAccount:
    """Account as reported by the bank-link aggregator"""

    account_id: str
    name: str
    type: str
    subtype: Optional[str] = None
    official_name: Optional[str] = None
    mask: Optional[str] = None
    current_balance: Optional[float] = None
    available_balance: Optional[float] = None
    limit: Optional[float] = None

    @property
    def display_name(self) -> str:
        return self.official_name or self.name


@dataclass
class CreditLiability:
    """Credit-card liability details from the aggregator"""

    account_id: str
    credit_limit: Optional[float] = None
    minimum_payment_amount: Optional[float] = None
    next_payment_due_date: Optional[date] = None
    last_statement_balance: Optional[float] = None
    last_payment_amount: Optional[float] = None
    apr_percentages: List[float] = field(default_factory=list)
