"""Domain-specific exceptions"""

from typing import List

from credit_dashboard.domain.models import LinkedAccount


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class AccountNotFoundError(DomainException):
    """No account with this id exists for the user"""

    pass


class AccountNotLinkedError(DomainException):
    """Account has no bank-link credentials, or the aggregator no longer reports it"""

    pass


class NoMatchingAccountError(DomainException):
    """None of the aggregator's accounts match the local account"""

    def __init__(self, message: str, candidates: List[LinkedAccount]):
        super().__init__(message)
        self.candidates = candidates


class AggregatorAPIError(DomainException):
    """Bank-link aggregator returned an error or is unavailable"""

    pass
