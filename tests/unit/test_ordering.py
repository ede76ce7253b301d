"""Unit tests for account table sorting"""

from credit_dashboard.domain.ordering import sort_accounts


def _ids(accounts):
    return [a.id for a in accounts]


def test_sort_default_is_position(sample_accounts):
    shuffled = [sample_accounts[2], sample_accounts[0], sample_accounts[1]]
    assert _ids(sort_accounts(shuffled)) == ["acc_1", "acc_2", "acc_3"]


def test_sort_by_name_case_insensitive(sample_accounts):
    assert _ids(sort_accounts(sample_accounts, "account_name")) == ["acc_3", "acc_2", "acc_1"]


def test_sort_by_utilization_desc(sample_accounts):
    # 80%, 30%, 0%
    assert _ids(sort_accounts(sample_accounts, "utilization", "desc")) == ["acc_2", "acc_1", "acc_3"]


def test_sort_by_available(sample_accounts):
    # 600, 2000, 3500
    assert _ids(sort_accounts(sample_accounts, "available")) == ["acc_2", "acc_3", "acc_1"]


def test_sort_missing_values_sort_first(sample_accounts):
    """acc_3 has no account number and sorts as empty string"""
    assert _ids(sort_accounts(sample_accounts, "account_number")) == ["acc_3", "acc_2", "acc_1"]


def test_sort_unknown_column_falls_back_to_position(sample_accounts):
    reversed_input = list(reversed(sample_accounts))
    assert _ids(sort_accounts(reversed_input, "no_such_column")) == ["acc_1", "acc_2", "acc_3"]


def test_sort_is_stable(sample_accounts):
    """Equal keys keep input order in both directions"""
    for account in sample_accounts:
        account.interest_rate = 19.99
    assert _ids(sort_accounts(sample_accounts, "interest_rate")) == ["acc_1", "acc_2", "acc_3"]
    assert _ids(sort_accounts(sample_accounts, "interest_rate", "desc")) == ["acc_1", "acc_2", "acc_3"]
