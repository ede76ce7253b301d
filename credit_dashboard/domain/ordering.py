"""Column sorting for the account table"""

from typing import Any, Callable, Dict, Iterable, List

from credit_dashboard.domain.calculations import available_credit
from credit_dashboard.domain.models import Account


def _utilization_ratio(account: Account) -> float:
    # Unrounded so 30.4% sorts above 30.1%
    if not account.credit_limit:
        return 0.0
    return (account.amount_owed or 0) / account.credit_limit * 100


SORT_KEYS: Dict[str, Callable[[Account], Any]] = {
    "account_name": lambda a: a.account_name.lower(),
    "account_number": lambda a: a.account_number or "",
    "credit_limit": lambda a: a.credit_limit or 0,
    "amount_owed": lambda a: a.amount_owed or 0,
    "available": available_credit,
    "minimum_monthly_payment": lambda a: a.minimum_monthly_payment or 0,
    "interest_rate": lambda a: a.interest_rate or 0,
    "utilization": _utilization_ratio,
    "rewards": lambda a: a.rewards or 0,
    "last_used": lambda a: a.last_used or 0,
    "position": lambda a: a.position or 0,
}


def sort_accounts(
    accounts: Iterable[Account],
    column: str = "position",
    direction: str = "asc",
) -> List[Account]:
    """Stable sort by a table column; unknown columns fall back to position"""
    key = SORT_KEYS.get(column, SORT_KEYS["position"])
    return sorted(accounts, key=key, reverse=(direction == "desc"))
