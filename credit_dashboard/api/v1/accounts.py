"""Account CRUD, payments, migration and CSV export endpoints"""

import logging
from datetime import date
from typing import List, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from credit_dashboard.api.v1.schemas import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    MigrateRequest,
    MigrateResponse,
    PaymentRequest,
)
from credit_dashboard.api.dependencies import get_request_id, get_today, get_user_id
from credit_dashboard.config import settings
from credit_dashboard.domain.calculations import (
    available_credit,
    is_rate_expiring_soon,
    utilization,
    utilization_category,
)
from credit_dashboard.domain.exceptions import AccountNotFoundError
from credit_dashboard.domain.export import accounts_to_csv, export_filename
from credit_dashboard.domain.linking import apply_payment
from credit_dashboard.domain.ordering import sort_accounts
from credit_dashboard.infrastructure.database.models import AccountRecord
from credit_dashboard.infrastructure.database.repositories import AccountRepository
from credit_dashboard.infrastructure.database.session import get_db
from credit_dashboard.infrastructure.observability.logging import log_account_event
from credit_dashboard.infrastructure.observability.metrics import record_account_operation

router = APIRouter()

# Columns that cannot be cleared with an explicit null
REQUIRED_FIELDS = {"account_name", "credit_limit", "amount_owed", "minimum_monthly_payment", "position"}


def account_to_response(record: AccountRecord, today: date) -> AccountResponse:
    """Serialize an account row with its derived metrics"""
    account = record.to_domain()
    pct = utilization(account)
    return AccountResponse(
        id=account.id,
        account_name=account.account_name,
        account_number=account.account_number,
        credit_limit=account.credit_limit or 0,
        amount_owed=account.amount_owed or 0,
        minimum_monthly_payment=account.minimum_monthly_payment or 0,
        interest_rate=account.interest_rate,
        rate_expiration=account.rate_expiration,
        payment_due_date=account.payment_due_date,
        statement_cycle_day=account.statement_cycle_day,
        next_payment_due_date=account.next_payment_due_date,
        last_statement_balance=account.last_statement_balance,
        rewards=account.rewards,
        last_used=account.last_used,
        payment_preference=account.payment_preference,
        position=account.position,
        is_linked=account.is_linked,
        utilization=pct,
        utilization_category=utilization_category(pct),
        available_credit=available_credit(account),
        rate_expiring_soon=is_rate_expiring_soon(
            account.rate_expiration, today, settings.rate_expiry_warning_days
        ),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


@router.get("/accounts", response_model=List[AccountResponse])
def list_accounts(
    sort: str = Query("position", description="Column to sort by"),
    direction: Literal["asc", "desc"] = Query("asc"),
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """List the user's accounts sorted by a table column (default: position)"""
    records = AccountRepository(db, user_id).list_accounts()
    by_id = {record.id: record for record in records}
    ordered = sort_accounts([record.to_domain() for record in records], sort, direction)
    return [account_to_response(by_id[account.id], today) for account in ordered]


@router.get("/accounts/export")
def export_accounts(
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Download the account table as CSV"""
    records = AccountRepository(db, user_id).list_accounts()
    content = accounts_to_csv(record.to_domain() for record in records)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(today)}"'},
    )


@router.post("/accounts", response_model=AccountResponse, status_code=201)
def create_account(
    request_body: AccountCreate,
    request: Request,
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Create an account; it is appended to the end of the list unless a position is given"""
    repo = AccountRepository(db, user_id)
    record = repo.create_account(request_body.model_dump())
    db.commit()
    db.refresh(record)

    record_account_operation("create")
    log_account_event(get_request_id(request), user_id, "account_created", record.id)
    return account_to_response(record, today)


@router.get("/accounts/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    record = AccountRepository(db, user_id).get_account(account_id)
    if not record:
        raise HTTPException(status_code=404, detail="Account not found")
    return account_to_response(record, today)


@router.put("/accounts/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: str,
    request_body: AccountUpdate,
    request: Request,
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Update only the fields present in the request body"""
    changes = {
        name: value
        for name, value in request_body.model_dump(exclude_unset=True).items()
        if value is not None or name not in REQUIRED_FIELDS
    }
    try:
        record = AccountRepository(db, user_id).update_account(account_id, changes)
    except AccountNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Account not found")

    db.commit()
    db.refresh(record)

    record_account_operation("update")
    log_account_event(get_request_id(request), user_id, "account_updated", account_id, fields=sorted(changes))
    return account_to_response(record, today)


@router.delete("/accounts/{account_id}")
def delete_account(
    account_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    try:
        AccountRepository(db, user_id).delete_account(account_id)
    except AccountNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Account not found")

    db.commit()
    record_account_operation("delete")
    log_account_event(get_request_id(request), user_id, "account_deleted", account_id)
    return {"message": "Account deleted successfully"}


@router.post("/accounts/{account_id}/payments", response_model=AccountResponse)
def make_payment(
    account_id: str,
    request_body: PaymentRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Apply a payment, reducing the amount owed (never below zero)"""
    repo = AccountRepository(db, user_id)
    record = repo.get_account(account_id)
    if not record:
        raise HTTPException(status_code=404, detail="Account not found")

    record = repo.update_account(account_id, {"amount_owed": apply_payment(record.amount_owed, request_body.amount)})
    db.commit()
    db.refresh(record)

    record_account_operation("payment")
    log_account_event(
        get_request_id(request), user_id, "payment_applied", account_id, amount=request_body.amount
    )
    return account_to_response(record, today)


@router.post("/accounts/migrate", response_model=MigrateResponse)
def migrate_accounts(
    request_body: MigrateRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Replace all of the user's accounts with the supplied list"""
    try:
        count = AccountRepository(db, user_id).replace_all(
            account.model_dump() for account in request_body.accounts
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Migration failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Migration failed")

    record_account_operation("migrate")
    log_account_event(get_request_id(request), user_id, "accounts_migrated", count=count)
    return MigrateResponse(success=True, count=count)
