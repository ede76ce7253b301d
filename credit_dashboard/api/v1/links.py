"""Bank-link endpoints - Link tokens, account linking, sync and refresh"""

import logging
from datetime import date
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from credit_dashboard.api.v1.accounts import account_to_response
from credit_dashboard.api.v1.schemas import (
    AccountResponse,
    ExchangeRequest,
    ExchangeResponse,
    LinkAccountRequest,
    LinkTokenResponse,
    RefreshAllResponse,
    SyncedAccount,
    SyncRequest,
    SyncResponse,
)
from credit_dashboard.api.dependencies import get_plaid_client, get_request_id, get_today, get_user_id
from credit_dashboard.config import settings
from credit_dashboard.domain.exceptions import (
    AccountNotFoundError,
    AccountNotLinkedError,
    AggregatorAPIError,
    NoMatchingAccountError,
)
from credit_dashboard.domain.linking import (
    find_liability,
    is_credit_card,
    match_linked_account,
    refresh_fields,
    sync_payload,
)
from credit_dashboard.domain.models import CreditLiability, LinkedAccount
from credit_dashboard.infrastructure.clients.liabilities_cache import LiabilitiesCache
from credit_dashboard.infrastructure.clients.plaid import PlaidClient
from credit_dashboard.infrastructure.database.models import AccountRecord
from credit_dashboard.infrastructure.database.repositories import AccountRepository
from credit_dashboard.infrastructure.database.session import get_db
from credit_dashboard.infrastructure.observability.logging import log_account_event, token_suffix
from credit_dashboard.infrastructure.observability.metrics import record_refresh

router = APIRouter()


def _apply_refresh(
    repo: AccountRepository,
    record: AccountRecord,
    linked_accounts: List[LinkedAccount],
    liabilities: List[CreditLiability],
) -> AccountRecord:
    """
    Overwrite a linked account's balance fields from aggregator data.

    Raises:
        AccountNotLinkedError: The aggregator no longer reports this account
    """
    linked = next((a for a in linked_accounts if a.account_id == record.plaid_account_id), None)
    if linked is None:
        raise AccountNotLinkedError(f"Aggregator account {record.plaid_account_id} not found")

    liability = find_liability(liabilities, linked.account_id)
    return repo.update_account(record.id, refresh_fields(record.to_domain(), linked, liability))


@router.post("/plaid/link-token", response_model=LinkTokenResponse)
async def create_link_token(
    request: Request,
    user_id: str = Depends(get_user_id),
    plaid_client: PlaidClient = Depends(get_plaid_client),
):
    """Create a Link token for the browser bank-link widget"""
    try:
        link_token = await plaid_client.create_link_token(user_id)
    except AggregatorAPIError as e:
        logging.error(f"Link token error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Bank-link service unavailable")
    return LinkTokenResponse(link_token=link_token)


@router.post("/plaid/exchange", response_model=ExchangeResponse)
async def exchange_public_token(
    request_body: ExchangeRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    plaid_client: PlaidClient = Depends(get_plaid_client),
):
    """Exchange a Link public token for a long-lived access token"""
    try:
        access_token, item_id = await plaid_client.exchange_public_token(request_body.public_token)
    except AggregatorAPIError as e:
        logging.error(f"Token exchange error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Bank-link service unavailable")

    log_account_event(get_request_id(request), user_id, "token_exchanged", item_id=item_id)
    return ExchangeResponse(access_token=access_token, item_id=item_id)


@router.post("/plaid/sync", response_model=SyncResponse)
async def sync_accounts(
    request_body: SyncRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
    plaid_client: PlaidClient = Depends(get_plaid_client),
):
    """
    Create or update local accounts for every credit account on an item.

    Existing accounts are matched on account number (card mask); unmatched
    cards are appended to the end of the list.
    """
    request_id = get_request_id(request)
    repo = AccountRepository(db, user_id)
    cache = LiabilitiesCache(plaid_client, settings.liabilities_cache_size)

    try:
        linked_accounts = await plaid_client.get_accounts(request_body.access_token)
        liabilities = await cache.get(request_body.access_token)

        credit_accounts = [a for a in linked_accounts if a.type == "credit"]
        if not credit_accounts:
            logging.warning("No credit accounts found on item", extra={"request_id": request_id})

        results = []
        for linked in credit_accounts:
            payload = sync_payload(
                linked,
                find_liability(liabilities, linked.account_id),
                request_body.access_token,
                request_body.item_id,
            )
            existing = repo.find_by_account_number(linked.mask)
            if existing:
                record = repo.update_account(existing.id, payload)
            else:
                record = repo.create_account({**payload, "position": repo.next_position()})
            results.append((record, existing is not None))

        db.commit()

    except AggregatorAPIError as e:
        db.rollback()
        logging.error(f"Aggregator error during sync: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Bank-link service unavailable")

    log_account_event(
        request_id,
        user_id,
        "accounts_synced",
        count=len(results),
        token=token_suffix(request_body.access_token),
    )
    return SyncResponse(
        accounts=[
            SyncedAccount(account=account_to_response(record, today), matched=matched)
            for record, matched in results
        ]
    )


@router.post("/accounts/{account_id}/link", response_model=AccountResponse)
async def link_account(
    account_id: str,
    request_body: LinkAccountRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
    plaid_client: PlaidClient = Depends(get_plaid_client),
):
    """
    Link an existing account to a bank connection.

    Flow:
    1. Fetch the item's credit cards and liabilities
    2. Match the local account by card mask or name
    3. Store link credentials and overwrite balance fields
    """
    request_id = get_request_id(request)
    repo = AccountRepository(db, user_id)
    cache = LiabilitiesCache(plaid_client, settings.liabilities_cache_size)

    try:
        record = repo.get_account_or_raise(account_id)
        cards = [a for a in await plaid_client.get_accounts(request_body.access_token) if is_credit_card(a)]
        liabilities = await cache.get(request_body.access_token)

        matched = match_linked_account(cards, record.account_number, record.account_name)
        if matched is None:
            raise NoMatchingAccountError("No matching account found", candidates=cards)

        changes = refresh_fields(record.to_domain(), matched, find_liability(liabilities, matched.account_id))
        changes.update(
            plaid_access_token=request_body.access_token,
            plaid_account_id=matched.account_id,
            plaid_item_id=request_body.item_id,
        )
        record = repo.update_account(account_id, changes)
        db.commit()
        db.refresh(record)

    except AccountNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Account not found")

    except NoMatchingAccountError as e:
        db.rollback()
        logging.warning(f"Link failed: {e}", extra={"request_id": request_id})
        raise HTTPException(
            status_code=404,
            detail={
                "error": str(e),
                "available_accounts": [
                    {"name": c.display_name, "mask": c.mask, "id": c.account_id} for c in e.candidates
                ],
            },
        )

    except AggregatorAPIError as e:
        db.rollback()
        logging.error(f"Aggregator error during link: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Bank-link service unavailable")

    log_account_event(request_id, user_id, "account_linked", account_id, token=token_suffix(request_body.access_token))
    return account_to_response(record, today)


@router.post("/accounts/{account_id}/refresh", response_model=AccountResponse)
async def refresh_account(
    account_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
    plaid_client: PlaidClient = Depends(get_plaid_client),
):
    """Pull current balance, limit, minimum payment, APR and due date for one linked account"""
    request_id = get_request_id(request)
    repo = AccountRepository(db, user_id)
    cache = LiabilitiesCache(plaid_client, settings.liabilities_cache_size)

    try:
        record = repo.get_account_or_raise(account_id)
        if not record.plaid_access_token:
            raise AccountNotLinkedError("Account not linked to a bank connection")

        linked_accounts = await plaid_client.get_accounts(record.plaid_access_token)
        liabilities = await cache.get(record.plaid_access_token)
        record = _apply_refresh(repo, record, linked_accounts, liabilities)
        db.commit()
        db.refresh(record)

    except AccountNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Account not found")

    except AccountNotLinkedError as e:
        db.rollback()
        record_refresh("skipped")
        raise HTTPException(status_code=404, detail=str(e))

    except AggregatorAPIError as e:
        db.rollback()
        record_refresh("failed")
        logging.error(f"Aggregator error during refresh: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Bank-link service unavailable")

    record_refresh("updated")
    log_account_event(request_id, user_id, "account_refreshed", account_id)
    return account_to_response(record, today)


@router.post("/accounts/refresh-all", response_model=RefreshAllResponse)
async def refresh_all_accounts(
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    plaid_client: PlaidClient = Depends(get_plaid_client),
):
    """
    Refresh every linked account, calling the aggregator once per access token.

    A failing token is logged and skipped; the remaining tokens still refresh.
    """
    request_id = get_request_id(request)
    repo = AccountRepository(db, user_id)
    cache = LiabilitiesCache(plaid_client, settings.liabilities_cache_size)

    by_token: Dict[str, List[AccountRecord]] = {}
    for record in repo.list_linked_accounts():
        by_token.setdefault(record.plaid_access_token, []).append(record)

    updated = 0
    skipped = 0
    failed_tokens = 0
    for token, records in by_token.items():
        try:
            linked_accounts = await plaid_client.get_accounts(token)
        except AggregatorAPIError as e:
            failed_tokens += 1
            logging.error(
                f"Error refreshing token: {e}",
                extra={"request_id": request_id, "token": token_suffix(token)},
            )
            continue

        liabilities = await cache.get(token)
        for record in records:
            try:
                _apply_refresh(repo, record, linked_accounts, liabilities)
                updated += 1
            except AccountNotLinkedError:
                skipped += 1

    db.commit()

    record_refresh("updated", updated)
    record_refresh("skipped", skipped)
    record_refresh("failed", failed_tokens)
    log_account_event(
        request_id,
        user_id,
        "accounts_refreshed",
        tokens_processed=len(by_token),
        accounts_updated=updated,
        tokens_failed=failed_tokens,
    )
    return RefreshAllResponse(
        success=True,
        tokens_processed=len(by_token),
        accounts_updated=updated,
        tokens_failed=failed_tokens,
    )
