"""Request-scoped cache of aggregator liabilities keyed by access token"""

import logging
from collections import OrderedDict
from typing import List

from credit_dashboard.domain.exceptions import AggregatorAPIError
from credit_dashboard.domain.models import CreditLiability
from credit_dashboard.infrastructure.clients.plaid import PlaidClient
from credit_dashboard.infrastructure.observability.logging import token_suffix

logger = logging.getLogger(__name__)


class LiabilitiesCache:
    """
    Fetch liabilities at most once per access token within one request.

    Create one per request; never share between requests. Holds at most
    max_entries tokens, evicting the oldest. A token whose item does not
    support the liabilities product caches an empty list so callers fall
    back to balance data.
    """

    def __init__(self, client: PlaidClient, max_entries: int = 64):
        self.client = client
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, List[CreditLiability]]" = OrderedDict()

    def __contains__(self, access_token: str) -> bool:
        return access_token in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, access_token: str) -> List[CreditLiability]:
        if access_token in self._entries:
            return self._entries[access_token]

        try:
            liabilities = await self.client.get_liabilities(access_token)
        except AggregatorAPIError as e:
            logger.info(
                f"Liabilities not available: {e}",
                extra={"token": token_suffix(access_token)},
            )
            liabilities = []

        self._entries[access_token] = liabilities
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        return liabilities
