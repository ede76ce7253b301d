"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Literal, Optional

PaymentPreference = Literal["full", "minimum"]


class AccountFields(BaseModel):
    """Optional account attributes shared by create and update"""

    account_number: Optional[str] = None
    amount_owed: Optional[float] = Field(None, ge=0)
    minimum_monthly_payment: Optional[float] = Field(None, ge=0)
    interest_rate: Optional[float] = Field(None, ge=0, le=100, description="Annual rate in percent")
    rate_expiration: Optional[date] = None
    payment_due_date: Optional[int] = Field(None, ge=1, le=31, description="Legacy day of month")
    statement_cycle_day: Optional[int] = Field(None, ge=1, le=31)
    next_payment_due_date: Optional[date] = None
    rewards: Optional[float] = Field(None, ge=0)
    last_used: Optional[int] = Field(None, ge=1, le=12, description="Month last used")
    payment_preference: Optional[PaymentPreference] = None
    position: Optional[int] = None


class AccountCreate(AccountFields):
    """Request body for POST /v1/accounts"""

    account_name: str = Field(..., min_length=1, description="Display name")
    credit_limit: float = Field(..., gt=0)
    amount_owed: float = Field(0.0, ge=0)
    minimum_monthly_payment: float = Field(0.0, ge=0)


class AccountUpdate(AccountFields):
    """Request body for PUT /v1/accounts/{account_id}; only sent fields change"""

    account_name: Optional[str] = Field(None, min_length=1)
    credit_limit: Optional[float] = Field(None, gt=0)


class AccountResponse(BaseModel):
    """Account with derived metrics"""

    id: str
    account_name: str
    account_number: Optional[str] = None
    credit_limit: float
    amount_owed: float
    minimum_monthly_payment: float
    interest_rate: Optional[float] = None
    rate_expiration: Optional[date] = None
    payment_due_date: Optional[int] = None
    statement_cycle_day: Optional[int] = None
    next_payment_due_date: Optional[date] = None
    last_statement_balance: Optional[float] = None
    rewards: Optional[float] = None
    last_used: Optional[int] = None
    payment_preference: Optional[str] = None
    position: int
    is_linked: bool
    utilization: int
    utilization_category: str
    available_credit: float
    rate_expiring_soon: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentRequest(BaseModel):
    """Request body for POST /v1/accounts/{account_id}/payments"""

    amount: float = Field(..., gt=0, description="Payment amount in dollars")


class MigrateRequest(BaseModel):
    """Request body for POST /v1/accounts/migrate"""

    accounts: List[AccountCreate]


class MigrateResponse(BaseModel):
    success: bool
    count: int


class UpcomingPaymentSchema(BaseModel):
    """Single payment due in the upcoming window"""

    account_id: str
    account_name: str
    amount: float
    due_date: date
    day_of_week: str
    formatted_date: str


class UpcomingPaymentsResponse(BaseModel):
    today: date
    payments: List[UpcomingPaymentSchema]


class SummaryResponse(BaseModel):
    """Response for GET /v1/summary"""

    account_count: int
    total_limit: float
    total_owed: float
    total_available: float
    total_minimum_payment: float
    total_rewards: float
    total_utilization: int
    utilization_category: str
    upcoming_payments: List[UpcomingPaymentSchema]
    upcoming_payments_total: float


class LinkTokenResponse(BaseModel):
    link_token: str


class ExchangeRequest(BaseModel):
    public_token: str = Field(..., min_length=1)


class ExchangeResponse(BaseModel):
    access_token: str
    item_id: str


class LinkAccountRequest(BaseModel):
    """Request body for POST /v1/accounts/{account_id}/link"""

    access_token: str = Field(..., min_length=1)
    item_id: Optional[str] = None


class SyncRequest(BaseModel):
    """Request body for POST /v1/plaid/sync"""

    access_token: str = Field(..., min_length=1)
    item_id: Optional[str] = None


class SyncedAccount(BaseModel):
    account: AccountResponse
    matched: bool  # True if an existing account was updated


class SyncResponse(BaseModel):
    accounts: List[SyncedAccount]


class RefreshAllResponse(BaseModel):
    success: bool
    tokens_processed: int
    accounts_updated: int
    tokens_failed: int
