"""Integration tests for account and summary endpoints"""

import csv
import io
import pytest
from fastapi.testclient import TestClient

TODAY = "2024-06-10"


def _create(client: TestClient, **fields) -> dict:
    body = {"account_name": "Sapphire", "credit_limit": 5000.0}
    body.update(fields)
    response = client.post("/v1/accounts", json=body)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def seeded(client: TestClient) -> list[dict]:
    """Three accounts: projected due date, authoritative due date, no minimum"""
    return [
        _create(client, account_name="Sapphire", credit_limit=5000.0, amount_owed=1500.0,
                minimum_monthly_payment=40.0, statement_cycle_day=25, account_number="4242", rewards=120.0),
        _create(client, account_name="Freedom", credit_limit=3000.0, amount_owed=2400.0,
                minimum_monthly_payment=60.0, next_payment_due_date="2024-06-15", statement_cycle_day=12),
        _create(client, account_name="Discover", credit_limit=2000.0, statement_cycle_day=12),
    ]


def test_health_endpoint(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_metrics_endpoint(client: TestClient):
    _create(client)
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "account_operations_total" in response.text


def test_create_account_defaults_and_metrics(client: TestClient):
    data = _create(client, amount_owed=300.0, credit_limit=1000.0)

    assert data["id"]
    assert data["position"] == 0
    assert data["minimum_monthly_payment"] == 0
    assert data["utilization"] == 30
    assert data["utilization_category"] == "medium"
    assert data["available_credit"] == 700.0
    assert data["is_linked"] is False


def test_create_account_appends_position(client: TestClient):
    _create(client, account_name="First")
    second = _create(client, account_name="Second")
    explicit = _create(client, account_name="Pinned", position=10)

    assert second["position"] == 1
    assert explicit["position"] == 10


def test_new_account_position_unique_after_delete(client: TestClient):
    first = _create(client, account_name="A")
    _create(client, account_name="B")
    _create(client, account_name="C")
    assert client.delete(f"/v1/accounts/{first['id']}").status_code == 200

    fourth = _create(client, account_name="D")

    positions = [a["position"] for a in client.get("/v1/accounts").json()]
    assert len(positions) == 3
    assert len(set(positions)) == 3
    assert fourth["position"] == 3


@pytest.mark.parametrize(
    "body",
    [
        {"credit_limit": 1000.0},
        {"account_name": "", "credit_limit": 1000.0},
        {"account_name": "Card"},
        {"account_name": "Card", "credit_limit": 0},
        {"account_name": "Card", "credit_limit": 1000.0, "statement_cycle_day": 32},
        {"account_name": "Card", "credit_limit": 1000.0, "last_used": 13},
        {"account_name": "Card", "credit_limit": 1000.0, "interest_rate": 101},
        {"account_name": "Card", "credit_limit": 1000.0, "payment_preference": "later"},
    ],
)
def test_create_account_validation(client: TestClient, body: dict):
    response = client.post("/v1/accounts", json=body)
    assert response.status_code == 422


def test_user_header_required(client: TestClient):
    response = client.get("/v1/accounts", headers={"X-User-ID": ""})
    assert response.status_code == 422


def test_accounts_scoped_to_user(client: TestClient):
    account = _create(client)

    response = client.get(f"/v1/accounts/{account['id']}", headers={"X-User-ID": "someone_else"})
    assert response.status_code == 404

    response = client.get("/v1/accounts", headers={"X-User-ID": "someone_else"})
    assert response.json() == []


def test_list_accounts_default_and_sorted(client: TestClient, seeded: list[dict]):
    response = client.get("/v1/accounts")
    assert [a["account_name"] for a in response.json()] == ["Sapphire", "Freedom", "Discover"]

    response = client.get("/v1/accounts?sort=utilization&direction=desc")
    assert [a["account_name"] for a in response.json()] == ["Freedom", "Sapphire", "Discover"]

    response = client.get("/v1/accounts?sort=account_name")
    assert [a["account_name"] for a in response.json()] == ["Discover", "Freedom", "Sapphire"]


def test_update_account_partial(client: TestClient):
    account = _create(client, amount_owed=100.0, interest_rate=19.99)

    response = client.put(f"/v1/accounts/{account['id']}", json={"amount_owed": 800.0})

    assert response.status_code == 200
    data = response.json()
    assert data["amount_owed"] == 800.0
    assert data["interest_rate"] == 19.99
    assert data["account_name"] == "Sapphire"


def test_update_account_validation_and_not_found(client: TestClient):
    account = _create(client)
    assert client.put(f"/v1/accounts/{account['id']}", json={"credit_limit": -5}).status_code == 422
    assert client.put("/v1/accounts/missing", json={"amount_owed": 1.0}).status_code == 404


def test_delete_account(client: TestClient):
    account = _create(client)

    response = client.delete(f"/v1/accounts/{account['id']}")
    assert response.status_code == 200
    assert client.get(f"/v1/accounts/{account['id']}").status_code == 404
    assert client.delete(f"/v1/accounts/{account['id']}").status_code == 404


def test_make_payment(client: TestClient):
    account = _create(client, amount_owed=500.0)

    response = client.post(f"/v1/accounts/{account['id']}/payments", json={"amount": 200.0})
    assert response.status_code == 200
    assert response.json()["amount_owed"] == 300.0

    response = client.post(f"/v1/accounts/{account['id']}/payments", json={"amount": 1000.0})
    assert response.json()["amount_owed"] == 0.0


def test_make_payment_validation(client: TestClient):
    account = _create(client, amount_owed=500.0)
    assert client.post(f"/v1/accounts/{account['id']}/payments", json={"amount": 0}).status_code == 422
    assert client.post("/v1/accounts/missing/payments", json={"amount": 10}).status_code == 404


def test_migrate_replaces_accounts(client: TestClient):
    _create(client, account_name="Old")

    response = client.post(
        "/v1/accounts/migrate",
        json={"accounts": [
            {"account_name": "Imported A", "credit_limit": 1000.0},
            {"account_name": "Imported B", "credit_limit": 2000.0, "amount_owed": 50.0},
        ]},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 2}
    names = [a["account_name"] for a in client.get("/v1/accounts").json()]
    assert names == ["Imported A", "Imported B"]


def test_migrate_leaves_other_users_alone(client: TestClient):
    _create(client, account_name="Mine")
    client.post(
        "/v1/accounts/migrate",
        headers={"X-User-ID": "other"},
        json={"accounts": [{"account_name": "Theirs", "credit_limit": 1000.0}]},
    )
    assert [a["account_name"] for a in client.get("/v1/accounts").json()] == ["Mine"]


def test_export_csv(client: TestClient, seeded: list[dict]):
    response = client.get(f"/v1/accounts/export?today={TODAY}")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "accounts-2024-06-10.csv" in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0][0] == "Account Name"
    assert len(rows) == 4
    assert rows[2][8] == "80"


def test_rate_expiring_soon_flag(client: TestClient):
    account = _create(client, rate_expiration="2024-07-01")
    response = client.get(f"/v1/accounts/{account['id']}?today={TODAY}")
    assert response.json()["rate_expiring_soon"] is True

    response = client.get(f"/v1/accounts/{account['id']}?today=2024-07-02")
    assert response.json()["rate_expiring_soon"] is False


def test_summary(client: TestClient, seeded: list[dict]):
    response = client.get(f"/v1/summary?today={TODAY}")

    assert response.status_code == 200
    data = response.json()
    assert data["account_count"] == 3
    assert data["total_limit"] == 10000.0
    assert data["total_owed"] == 3900.0
    assert data["total_available"] == 6100.0
    assert data["total_minimum_payment"] == 100.0
    assert data["total_utilization"] == 39
    assert data["utilization_category"] == "medium"
    assert data["upcoming_payments_total"] == 100.0
    assert [p["account_name"] for p in data["upcoming_payments"]] == ["Freedom", "Sapphire"]


def test_upcoming_payments_endpoint(client: TestClient, seeded: list[dict]):
    response = client.get(f"/v1/payments/upcoming?today={TODAY}")

    assert response.status_code == 200
    data = response.json()
    assert data["today"] == TODAY
    first, second = data["payments"]
    # Authoritative date wins over cycle day 12
    assert first["due_date"] == "2024-06-15"
    assert first["formatted_date"] == "Sat, Jun 15"
    assert second["due_date"] == "2024-06-25"
    assert second["amount"] == 40.0


def test_summary_empty(client: TestClient):
    data = client.get(f"/v1/summary?today={TODAY}").json()
    assert data["account_count"] == 0
    assert data["total_utilization"] == 0
    assert data["upcoming_payments"] == []


def test_update_ignores_null_for_required_fields(client: TestClient):
    account = _create(client, amount_owed=250.0, rewards=40.0)

    response = client.put(f"/v1/accounts/{account['id']}", json={"amount_owed": None, "rewards": None})

    assert response.status_code == 200
    assert response.json()["amount_owed"] == 250.0
    assert response.json()["rewards"] is None
