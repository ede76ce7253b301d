"""Data access layer for credit accounts"""

from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from credit_dashboard.infrastructure.database.models import AccountRecord
from credit_dashboard.domain.exceptions import AccountNotFoundError


class AccountRepository:
    """Repository for credit accounts, scoped to a single user"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def _query(self):
        return self.db.query(AccountRecord).filter(AccountRecord.user_id == self.user_id)

    def list_accounts(self) -> List[AccountRecord]:
        """All of the user's accounts in default (position) order"""
        return self._query().order_by(AccountRecord.position.asc(), AccountRecord.created_at.asc()).all()

    def get_account(self, account_id: str) -> Optional[AccountRecord]:
        return self._query().filter(AccountRecord.id == account_id).first()

    def get_account_or_raise(self, account_id: str) -> AccountRecord:
        account = self.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account

    def next_position(self) -> int:
        """Position after the current last account"""
        max_position = (
            self.db.query(func.max(AccountRecord.position))
            .filter(AccountRecord.user_id == self.user_id)
            .scalar()
        )
        return 0 if max_position is None else max_position + 1

    def create_account(self, data: Dict[str, Any]) -> AccountRecord:
        """Persist a new account; appends to the end of the list when no position is given"""
        fields = dict(data)
        if fields.get("position") is None:
            fields["position"] = self.next_position()

        account = AccountRecord(user_id=self.user_id, **fields)
        self.db.add(account)
        self.db.flush()  # Get ID without committing
        return account

    def update_account(self, account_id: str, changes: Dict[str, Any]) -> AccountRecord:
        account = self.get_account_or_raise(account_id)
        for name, value in changes.items():
            setattr(account, name, value)
        self.db.flush()
        return account

    def delete_account(self, account_id: str) -> None:
        account = self.get_account_or_raise(account_id)
        self.db.delete(account)
        self.db.flush()

    def find_by_account_number(self, account_number: Optional[str]) -> Optional[AccountRecord]:
        if not account_number:
            return None
        return self._query().filter(AccountRecord.account_number == account_number).first()

    def list_linked_accounts(self) -> List[AccountRecord]:
        """Accounts holding bank-link credentials"""
        return (
            self._query()
            .filter(AccountRecord.plaid_access_token.isnot(None))
            .order_by(AccountRecord.position.asc())
            .all()
        )

    def replace_all(self, accounts: Iterable[Dict[str, Any]]) -> int:
        """Delete the user's accounts and insert the given ones"""
        self._query().delete(synchronize_session=False)
        count = 0
        for position, data in enumerate(accounts):
            fields = dict(data)
            if fields.get("position") is None:
                fields["position"] = position
            self.db.add(AccountRecord(user_id=self.user_id, **fields))
            count += 1
        self.db.flush()
        return count
