"""Bank-link aggregator (Plaid) HTTP client"""

import httpx
from datetime import date
from typing import Any, Dict, List
from credit_dashboard.domain.models import LinkedAccount, CreditLiability
from credit_dashboard.domain.exceptions import AggregatorAPIError
from credit_dashboard.config import settings
from credit_dashboard.infrastructure.observability.metrics import plaid_latency_histogram, plaid_request_counter


def _parse_linked_account(raw: Dict[str, Any]) -> LinkedAccount:
    balances = raw.get("balances") or {}
    return LinkedAccount(
        account_id=raw["account_id"],
        name=raw["name"],
        type=raw["type"],
        subtype=raw.get("subtype"),
        official_name=raw.get("official_name"),
        mask=raw.get("mask"),
        current_balance=balances.get("current"),
        available_balance=balances.get("available"),
        limit=balances.get("limit"),
    )


def _parse_liability(raw: Dict[str, Any]) -> CreditLiability:
    due = raw.get("next_payment_due_date")
    return CreditLiability(
        account_id=raw["account_id"],
        credit_limit=raw.get("credit_limit"),
        minimum_payment_amount=raw.get("minimum_payment_amount"),
        next_payment_due_date=date.fromisoformat(due) if due else None,
        last_statement_balance=raw.get("last_statement_balance"),
        last_payment_amount=raw.get("last_payment_amount"),
        apr_percentages=[apr["apr_percentage"] for apr in raw.get("aprs") or []],
    )


class PlaidClient:
    """Client for the bank-link aggregator REST API"""

    def __init__(
        self,
        base_url: str | None = None,
        client_id: str | None = None,
        secret: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.plaid_api_base
        self.client_id = client_id if client_id is not None else settings.plaid_client_id
        self.secret = secret if secret is not None else settings.plaid_secret
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST an authenticated request and return the decoded JSON body.

        Raises:
            AggregatorAPIError: On timeout, HTTP errors, or network failures
        """
        body = {"client_id": self.client_id, "secret": self.secret, **payload}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with plaid_latency_histogram.time():
                    response = await client.post(f"{self.base_url}{endpoint}", json=body)
                    response.raise_for_status()
                plaid_request_counter.labels(endpoint=endpoint, outcome="ok").inc()
                return response.json()

            except httpx.TimeoutException as e:
                plaid_request_counter.labels(endpoint=endpoint, outcome="error").inc()
                raise AggregatorAPIError(f"Aggregator timeout after {self.timeout}s on {endpoint}") from e
            except httpx.HTTPStatusError as e:
                plaid_request_counter.labels(endpoint=endpoint, outcome="error").inc()
                raise AggregatorAPIError(f"Aggregator error on {endpoint}: {e.response.status_code}") from e
            except (httpx.RequestError, ValueError) as e:
                plaid_request_counter.labels(endpoint=endpoint, outcome="error").inc()
                raise AggregatorAPIError(f"Aggregator request failed on {endpoint}: {e}") from e

    async def create_link_token(self, user_id: str) -> str:
        """Create a Link token for the browser widget"""
        data = await self._post(
            "/link/token/create",
            {
                "user": {"client_user_id": user_id},
                "client_name": settings.plaid_client_name,
                "products": settings.plaid_products,
                "country_codes": settings.plaid_country_codes,
                "language": "en",
            },
        )
        try:
            return data["link_token"]
        except KeyError as e:
            raise AggregatorAPIError("Link token missing from aggregator response") from e

    async def exchange_public_token(self, public_token: str) -> tuple[str, str]:
        """Exchange a Link public token for (access_token, item_id)"""
        data = await self._post("/item/public_token/exchange", {"public_token": public_token})
        try:
            return data["access_token"], data["item_id"]
        except KeyError as e:
            raise AggregatorAPIError("Token exchange response missing fields") from e

    async def get_accounts(self, access_token: str) -> List[LinkedAccount]:
        """Fetch all accounts and balances on an item"""
        data = await self._post("/accounts/get", {"access_token": access_token})
        try:
            return [_parse_linked_account(raw) for raw in data.get("accounts", [])]
        except (KeyError, TypeError) as e:
            raise AggregatorAPIError(f"Invalid account data from aggregator: {e}") from e

    async def get_liabilities(self, access_token: str) -> List[CreditLiability]:
        """Fetch credit-card liabilities (limits, minimum payments, due dates, APRs)"""
        data = await self._post("/liabilities/get", {"access_token": access_token})
        try:
            credit = (data.get("liabilities") or {}).get("credit") or []
            return [_parse_liability(raw) for raw in credit]
        except (KeyError, TypeError, ValueError) as e:
            raise AggregatorAPIError(f"Invalid liability data from aggregator: {e}") from e
