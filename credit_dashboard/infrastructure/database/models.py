"""SQLAlchemy ORM models"""

import uuid
from sqlalchemy import Column, String, Float, DateTime, Date, Integer, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from credit_dashboard.domain.models import Account

Base = declarative_base()


def _new_account_id() -> str:
    return str(uuid.uuid4())


class AccountRecord(Base):
    """Credit account owned by a user"""

    __tablename__ = "credit_account"

    id = Column(String(36), primary_key=True, default=_new_account_id)
    user_id = Column(Text, nullable=False, index=True)
    account_name = Column(Text, nullable=False)
    account_number = Column(Text, nullable=True, index=True)
    credit_limit = Column(Float, nullable=False)
    amount_owed = Column(Float, nullable=False, default=0.0)
    minimum_monthly_payment = Column(Float, nullable=False, default=0.0)
    interest_rate = Column(Float, nullable=True)
    rate_expiration = Column(Date, nullable=True)
    payment_due_date = Column(Integer, nullable=True)
    statement_cycle_day = Column(Integer, nullable=True)
    next_payment_due_date = Column(Date, nullable=True)
    last_statement_balance = Column(Float, nullable=True)
    rewards = Column(Float, nullable=True)
    last_used = Column(Integer, nullable=True)
    payment_preference = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)

    # Bank link credentials, owned by the aggregator integration
    plaid_access_token = Column(Text, nullable=True, index=True)
    plaid_account_id = Column(Text, nullable=True)
    plaid_item_id = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def to_domain(self) -> Account:
        """Read-only domain view used by the calculation modules"""
        return Account(
            id=self.id,
            account_name=self.account_name,
            credit_limit=self.credit_limit,
            amount_owed=self.amount_owed,
            minimum_monthly_payment=self.minimum_monthly_payment,
            position=self.position,
            account_number=self.account_number,
            interest_rate=self.interest_rate,
            rate_expiration=self.rate_expiration,
            payment_due_date=self.payment_due_date,
            statement_cycle_day=self.statement_cycle_day,
            next_payment_due_date=self.next_payment_due_date,
            last_statement_balance=self.last_statement_balance,
            rewards=self.rewards,
            last_used=self.last_used,
            payment_preference=self.payment_preference,
            plaid_access_token=self.plaid_access_token,
            plaid_account_id=self.plaid_account_id,
            plaid_item_id=self.plaid_item_id,
        )
