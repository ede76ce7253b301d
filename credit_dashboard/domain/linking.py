"""Bank-link merge rules: matching local accounts and applying aggregator data"""

from typing import Any, Dict, Iterable, Optional

from credit_dashboard.domain.models import Account, CreditLiability, LinkedAccount


def is_credit_card(linked: LinkedAccount) -> bool:
    return linked.type == "credit" and linked.subtype == "credit card"


def match_linked_account(
    candidates: Iterable[LinkedAccount],
    account_number: Optional[str],
    account_name: str,
) -> Optional[LinkedAccount]:
    """
    Find the aggregator account corresponding to a local account.

    Matches on mask == account_number, or on the aggregator's display name
    containing the local account name (case-insensitive). First match wins.
    """
    needle = account_name.lower()
    for linked in candidates:
        if account_number and linked.mask == account_number:
            return linked
        if needle and needle in linked.display_name.lower():
            return linked
    return None


def find_liability(
    liabilities: Iterable[CreditLiability],
    account_id: str,
) -> Optional[CreditLiability]:
    return next((c for c in liabilities if c.account_id == account_id), None)


def refresh_fields(
    account: Account,
    linked: LinkedAccount,
    liability: Optional[CreditLiability],
) -> Dict[str, Any]:
    """
    Field values to write when refreshing a linked account.

    Aggregator data overwrites local values unconditionally; the existing
    value is only kept when the aggregator reports nothing for that field.
    Liability data is preferred over balance data for the credit limit.
    """
    apr = liability.apr_percentages[0] if liability and liability.apr_percentages else None

    return {
        "credit_limit": (liability and liability.credit_limit) or linked.limit or account.credit_limit,
        "amount_owed": abs(linked.current_balance or 0),
        "minimum_monthly_payment": (
            (liability and liability.minimum_payment_amount) or account.minimum_monthly_payment
        ),
        "interest_rate": apr or account.interest_rate,
        "next_payment_due_date": (
            (liability and liability.next_payment_due_date) or account.next_payment_due_date
        ),
        "last_statement_balance": (
            (liability and liability.last_statement_balance) or account.last_statement_balance
        ),
    }


def sync_payload(
    linked: LinkedAccount,
    liability: Optional[CreditLiability],
    access_token: str,
    item_id: Optional[str],
) -> Dict[str, Any]:
    """Account fields for a card discovered during a bulk sync"""
    apr = liability.apr_percentages[0] if liability and liability.apr_percentages else None

    return {
        "plaid_account_id": linked.account_id,
        "plaid_access_token": access_token,
        "plaid_item_id": item_id,
        "account_name": linked.display_name,
        "account_number": linked.mask,
        "credit_limit": (liability and liability.credit_limit) or linked.limit or 0,
        "amount_owed": abs(linked.current_balance or 0),
        "minimum_monthly_payment": (liability and liability.minimum_payment_amount) or 0,
        "interest_rate": apr,
        "next_payment_due_date": liability.next_payment_due_date if liability else None,
        "last_statement_balance": liability.last_statement_balance if liability else None,
    }


def apply_payment(amount_owed: Optional[float], payment: float) -> float:
    """New balance after a payment, never below zero"""
    return max((amount_owed or 0) - payment, 0.0)
