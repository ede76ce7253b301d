"""Derived account metrics - utilization, available credit, totals"""

import math
from datetime import date
from typing import Iterable, Optional

from credit_dashboard.domain.models import Account, AccountTotals
from credit_dashboard.utils.date_utils import days_between, parse_iso_date

LOW_UTILIZATION_CEILING = 30
HIGH_UTILIZATION_FLOOR = 70
RATE_EXPIRY_WARNING_DAYS = 60


def _percent(numerator: float, denominator: float) -> int:
    # Half-up rounding, 12.5% -> 13%
    return int(math.floor(numerator / denominator * 100 + 0.5))


def utilization(account: Account) -> int:
    """
    Amount owed as a rounded percentage of the credit limit.

    A zero or missing limit yields 0; a missing balance counts as 0.
    """
    if not account.credit_limit:
        return 0
    return _percent(account.amount_owed or 0, account.credit_limit)


def utilization_category(pct: int) -> str:
    """Bucket a utilization percentage: low (<30), medium (30-69), high (70+)"""
    if pct < LOW_UTILIZATION_CEILING:
        return "low"
    if pct < HIGH_UTILIZATION_FLOOR:
        return "medium"
    return "high"


def available_credit(account: Account) -> float:
    """Credit limit minus amount owed. Negative when over limit"""
    return (account.credit_limit or 0) - (account.amount_owed or 0)


def aggregate_totals(accounts: Iterable[Account]) -> AccountTotals:
    """Sum limits, balances, minimum payments and rewards across accounts"""
    total_limit = 0.0
    total_owed = 0.0
    total_minimum = 0.0
    total_rewards = 0.0
    for account in accounts:
        total_limit += account.credit_limit or 0
        total_owed += account.amount_owed or 0
        total_minimum += account.minimum_monthly_payment or 0
        total_rewards += account.rewards or 0

    return AccountTotals(
        total_limit=total_limit,
        total_owed=total_owed,
        total_available=total_limit - total_owed,
        total_minimum_payment=total_minimum,
        total_rewards=total_rewards,
        total_utilization=_percent(total_owed, total_limit) if total_limit else 0,
    )


def days_until(target: date, today: date) -> int:
    return days_between(today, target)


def is_rate_expiring_soon(
    rate_expiration: Optional[date | str],
    today: date,
    window_days: int = RATE_EXPIRY_WARNING_DAYS,
) -> bool:
    """True when the promotional rate ends within the warning window (already expired is not soon)"""
    expires = parse_iso_date(rate_expiration)
    if expires is None:
        return False
    return 0 <= days_until(expires, today) <= window_days
