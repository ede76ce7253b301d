"""CSV report of the account table"""

import csv
import io
from datetime import date
from typing import Iterable

from credit_dashboard.domain.calculations import available_credit, utilization
from credit_dashboard.domain.models import Account

CSV_HEADERS = [
    "Account Name",
    "Account Number",
    "Credit Limit",
    "Amount Owed",
    "Available",
    "Minimum Payment",
    "Interest Rate",
    "Rate Expiration",
    "Utilization",
    "Rewards",
    "Last Used",
]


def export_filename(today: date) -> str:
    return f"accounts-{today.isoformat()}.csv"


def accounts_to_csv(accounts: Iterable[Account]) -> str:
    """Render accounts as CSV text with derived available credit and utilization"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for account in accounts:
        writer.writerow([
            account.account_name,
            account.account_number or "",
            account.credit_limit or 0,
            account.amount_owed or 0,
            available_credit(account),
            account.minimum_monthly_payment or 0,
            account.interest_rate or 0,
            account.rate_expiration.isoformat() if account.rate_expiration else "",
            utilization(account),
            account.rewards or 0,
            account.last_used or "",
        ])

    return buffer.getvalue()
