"""Payment due-date projection and upcoming payment schedule"""

from datetime import date, timedelta
from typing import Iterable, List, Optional

from credit_dashboard.domain.models import Account, UpcomingPayment
from credit_dashboard.utils.date_utils import add_months, clamped_date, parse_iso_date

UPCOMING_WINDOW_DAYS = 30

DAY_ABBREVIATIONS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTH_ABBREVIATIONS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def project_next_date(
    cycle_day: Optional[int],
    today: date,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> Optional[date]:
    """
    Project the next due date for a statement-cycle day of month.

    Tries this month first, then next month. Days past the end of a short
    month clamp to its last day (31 in February -> Feb 28/29) rather than
    rolling over. A candidate is only returned if it falls within
    [today, today + window_days].

    Args:
        cycle_day: Day of month (1-31). None or out of range yields None.
        today: Reference date
        window_days: Look-ahead window in days (default 30)

    Returns:
        The projected date, or None when no candidate falls in the window
    """
    if cycle_day is None or not 1 <= cycle_day <= 31:
        return None

    window_end = today + timedelta(days=window_days)

    candidate = clamped_date(today.year, today.month, cycle_day)
    if today <= candidate <= window_end:
        return candidate

    year, month = add_months(today.year, today.month, 1)
    candidate = clamped_date(year, month, cycle_day)
    if candidate <= window_end:
        return candidate

    return None


def format_payment_date(due_date: date) -> str:
    """Format as "Dow, Mon D" (e.g. "Mon, Dec 15")"""
    return (
        f"{DAY_ABBREVIATIONS[due_date.weekday()]}, "
        f"{MONTH_ABBREVIATIONS[due_date.month - 1]} {due_date.day}"
    )


def resolve_due_date(
    account: Account,
    today: date,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> Optional[date]:
    """Authoritative due date if the account has one, else the cycle-day projection"""
    if account.next_payment_due_date:
        return parse_iso_date(account.next_payment_due_date)
    return project_next_date(account.statement_cycle_day, today, window_days)


def upcoming_payments(
    accounts: Iterable[Account],
    today: date,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> List[UpcomingPayment]:
    """
    Build the list of minimum payments due in the next window_days.

    Requirements:
    - Authoritative next_payment_due_date wins over statement-cycle projection
    - Due date must fall in [today, today + window_days] inclusive
    - Accounts without a positive minimum payment are skipped
    - Ascending by due date, ties keep input order
    """
    window_end = today + timedelta(days=window_days)
    payments = []

    for account in accounts:
        due_date = resolve_due_date(account, today, window_days)
        if due_date is None or not today <= due_date <= window_end:
            continue
        if not account.minimum_monthly_payment or account.minimum_monthly_payment <= 0:
            continue

        payments.append(
            UpcomingPayment(
                account_id=account.id,
                account_name=account.account_name,
                amount=account.minimum_monthly_payment,
                due_date=due_date,
                day_of_week=DAY_ABBREVIATIONS[due_date.weekday()],
                formatted_date=format_payment_date(due_date),
            )
        )

    # sorted() is stable, so ties keep input order
    return sorted(payments, key=lambda p: p.due_date)
