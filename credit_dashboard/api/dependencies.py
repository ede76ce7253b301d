"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Optional

from fastapi import Header, Query, Request
from credit_dashboard.infrastructure.clients.plaid import PlaidClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_user_id(x_user_id: str = Header(..., min_length=1, description="Owning user identifier")) -> str:
    """Caller-supplied user identity scoping every account query"""
    return x_user_id


def get_today(today: Optional[date] = Query(None, description="Reference date (defaults to the server's today)")) -> date:
    """Reference date for due-date and expiry calculations"""
    return today or date.today()


def get_plaid_client() -> PlaidClient:
    """Provide bank-link aggregator client instance"""
    return PlaidClient()
