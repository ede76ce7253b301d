"""GET /v1/summary and /v1/payments/upcoming - Dashboard metrics"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from credit_dashboard.api.v1.schemas import SummaryResponse, UpcomingPaymentSchema, UpcomingPaymentsResponse
from credit_dashboard.api.dependencies import get_today, get_user_id
from credit_dashboard.config import settings
from credit_dashboard.domain.calculations import aggregate_totals, utilization_category
from credit_dashboard.domain.payments import upcoming_payments
from credit_dashboard.infrastructure.database.session import get_db
from credit_dashboard.infrastructure.database.repositories import AccountRepository

router = APIRouter()


def _payment_schemas(accounts, today: date) -> list[UpcomingPaymentSchema]:
    return [
        UpcomingPaymentSchema(
            account_id=p.account_id,
            account_name=p.account_name,
            amount=p.amount,
            due_date=p.due_date,
            day_of_week=p.day_of_week,
            formatted_date=p.formatted_date,
        )
        for p in upcoming_payments(accounts, today, settings.upcoming_window_days)
    ]


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Summary cards for the dashboard.

    Returns:
        Totals across all accounts plus the payments due in the next 30 days
    """
    accounts = [record.to_domain() for record in AccountRepository(db, user_id).list_accounts()]
    totals = aggregate_totals(accounts)
    payments = _payment_schemas(accounts, today)

    return SummaryResponse(
        account_count=len(accounts),
        total_limit=totals.total_limit,
        total_owed=totals.total_owed,
        total_available=totals.total_available,
        total_minimum_payment=totals.total_minimum_payment,
        total_rewards=totals.total_rewards,
        total_utilization=totals.total_utilization,
        utilization_category=utilization_category(totals.total_utilization),
        upcoming_payments=payments,
        upcoming_payments_total=sum(p.amount for p in payments),
    )


@router.get("/payments/upcoming", response_model=UpcomingPaymentsResponse)
def get_upcoming_payments(
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Minimum payments due within the window, soonest first"""
    accounts = [record.to_domain() for record in AccountRepository(db, user_id).list_accounts()]
    return UpcomingPaymentsResponse(today=today, payments=_payment_schemas(accounts, today))
