"""
Tests for transaction, budget and calendar endpoints.
"""
from decimal import Decimal
import pytest
from app.services import fx_service


def add_budget(client, headers, group_id, category="Dining", limit="100", currency="USD", month=10, year=2026):
    response = client.put(
        f"/api/budgets/{group_id}",
        json={"category": category, "amount_limit": limit, "currency": currency, "month": month, "year": year},
        headers=headers
    )
    assert response.status_code == 200, response.text
    return response.json()


def add_transaction(client, headers, group_id=None, **fields):
    body = {
        "type": "expense", "date": "2026-10-05", "amount": "40", "currency": "USD",
        "merchant": "Bistro", "category": "Dining", "group_id": group_id
    }
    body.update(fields)
    return client.post("/api/transactions", json=body, headers=headers)


@pytest.fixture
def fixed_rate(monkeypatch):
    calls = []
    
    def fake_rate(from_currency, to_currency):
        calls.append((from_currency, to_currency))
        return Decimal("0.5")
    
    monkeypatch.setattr(fx_service, "fetch_exchange_rate", fake_rate)
    return calls


def test_create_converts_into_budget_currency(client, auth_headers, group_id, fixed_rate):
    add_budget(client, auth_headers, group_id, currency="EUR")
    response = add_transaction(client, auth_headers, group_id, amount="40.25", category="dining")
    assert response.status_code == 201
    data = response.json()
    assert Decimal(data["converted_amount"]) == Decimal("20.13")
    assert data["converted_currency"] == "EUR"
    assert fixed_rate == [("USD", "EUR")]


def test_same_currency_not_converted(client, auth_headers, group_id, fixed_rate):
    add_budget(client, auth_headers, group_id, currency="USD")
    data = add_transaction(client, auth_headers, group_id).json()
    assert data["converted_amount"] is None
    assert data["converted_currency"] is None
    assert fixed_rate == []


def test_failed_conversion_saves_without_converted_amount(client, auth_headers, group_id, monkeypatch):
    def unavailable(from_currency, to_currency):
        raise ValueError("Exchange rate API network error")
    
    monkeypatch.setattr(fx_service, "fetch_exchange_rate", unavailable)
    add_budget(client, auth_headers, group_id, currency="JPY")
    response = add_transaction(client, auth_headers, group_id)
    assert response.status_code == 201
    assert response.json()["converted_amount"] is None
    assert response.json()["converted_currency"] is None


@pytest.mark.parametrize("amount", ["0", "-5"])
def test_amount_must_be_positive(client, auth_headers, group_id, amount):
    response = add_transaction(client, auth_headers, group_id, amount=amount)
    assert response.status_code == 400
    assert "error" in response.json()


def test_transaction_in_foreign_group_rejected(client, group_id, other_headers):
    response = add_transaction(client, other_headers, group_id)
    assert response.status_code == 404


def test_list_month_newest_first(client, auth_headers, group_id):
    add_transaction(client, auth_headers, group_id, date="2026-10-02", merchant="Early")
    add_transaction(client, auth_headers, group_id, date="2026-10-20", merchant="Late", type="income")
    add_transaction(client, auth_headers, group_id, date="2026-11-01", merchant="Next month")
    
    response = client.get(
        "/api/transactions", params={"month": 10, "year": 2026, "group_id": group_id}, headers=auth_headers
    )
    assert [t["merchant"] for t in response.json()] == ["Late", "Early"]
    
    response = client.get(
        "/api/transactions",
        params={"month": 10, "year": 2026, "group_id": group_id, "type": "income"},
        headers=auth_headers
    )
    assert [t["merchant"] for t in response.json()] == ["Late"]


def test_summary(client, auth_headers, group_id):
    add_transaction(client, auth_headers, group_id, date="2026-10-02", amount="40")
    add_transaction(client, auth_headers, group_id, date="2026-10-02", amount="15.50")
    add_transaction(client, auth_headers, group_id, date="2026-10-09", amount="100", type="income")
    
    data = client.get(
        "/api/transactions/summary", params={"month": 10, "year": 2026, "group_id": group_id}, headers=auth_headers
    ).json()
    assert Decimal(data["total_expenses"]) == Decimal("55.50")
    assert Decimal(data["total_income"]) == Decimal("100")
    assert Decimal(data["net"]) == Decimal("44.50")
    assert data["transaction_count"] == 3
    assert [(d["date"], len(d["transactions"])) for d in data["days"]] == [("2026-10-09", 1), ("2026-10-02", 2)]


def test_update_recomputes_conversion(client, auth_headers, group_id, fixed_rate):
    add_budget(client, auth_headers, group_id, category="Travel", currency="EUR")
    created = add_transaction(client, auth_headers, group_id, category=None).json()
    assert created["converted_amount"] is None
    
    response = client.patch(
        f"/api/transactions/{created['id']}", json={"category": "Travel", "amount": "10"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert Decimal(response.json()["converted_amount"]) == Decimal("5.00")
    assert response.json()["converted_currency"] == "EUR"


def test_only_owner_modifies(client, auth_headers, other_headers, group_id):
    code = client.get(f"/api/groups/{group_id}", headers=auth_headers).json()["invite_code"]
    client.post("/api/groups/join", json={"invite_code": code}, headers=other_headers)
    created = add_transaction(client, auth_headers, group_id).json()
    
    assert client.get(f"/api/transactions/{created['id']}", headers=other_headers).status_code == 200
    assert client.delete(f"/api/transactions/{created['id']}", headers=other_headers).status_code == 403
    assert client.delete(f"/api/transactions/{created['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/transactions/{created['id']}", headers=auth_headers).status_code == 404


def test_budget_upsert_replaces_on_same_key(client, auth_headers, group_id):
    first = add_budget(client, auth_headers, group_id, limit="100")
    second = add_budget(client, auth_headers, group_id, limit="250", currency="eur")
    assert first["id"] == second["id"]
    assert Decimal(second["amount_limit"]) == Decimal("250")
    assert second["currency"] == "EUR"


def test_budget_overview(client, auth_headers, group_id):
    add_budget(client, auth_headers, group_id, category="Dining", limit="100")
    add_budget(client, auth_headers, group_id, category="Fuel", limit="50")
    add_transaction(client, auth_headers, group_id, amount="40", category="DINING")
    add_transaction(client, auth_headers, group_id, amount="10", category="dining", type="income")
    add_transaction(client, auth_headers, group_id, amount="48", category="Fuel")
    
    data = client.get(
        f"/api/budgets/{group_id}", params={"month": 10, "year": 2026}, headers=auth_headers
    ).json()
    budgets = {b["category"]: b for b in data["budgets"]}
    
    assert Decimal(budgets["Dining"]["effective_limit"]) == Decimal("110")
    assert Decimal(budgets["Dining"]["remaining"]) == Decimal("70")
    assert budgets["Dining"]["level"] == "nominal"
    assert Decimal(budgets["Fuel"]["remaining"]) == Decimal("2")
    assert budgets["Fuel"]["percent_used"] == pytest.approx(96.0)
    assert budgets["Fuel"]["level"] == "critical"
    assert Decimal(data["total_limit"]) == Decimal("160")
    assert Decimal(data["total_spent"]) == Decimal("88")


def test_budget_categories(client, auth_headers, group_id):
    add_budget(client, auth_headers, group_id, category="Travel")
    add_budget(client, auth_headers, group_id, category="Dining")
    add_budget(client, auth_headers, group_id, category="Rent", month=11)
    response = client.get(
        f"/api/budgets/{group_id}/categories", params={"month": 10, "year": 2026}, headers=auth_headers
    )
    assert response.json() == ["Dining", "Travel"]


def test_budget_requires_membership(client, group_id, other_headers):
    response = client.get(f"/api/budgets/{group_id}", params={"month": 10, "year": 2026}, headers=other_headers)
    assert response.status_code == 404


def test_calendar_days(client, auth_headers, group_id):
    add_transaction(client, auth_headers, group_id, date="2026-10-02", amount="40")
    add_transaction(client, auth_headers, group_id, date="2026-10-02", amount="20", type="income")
    add_transaction(client, auth_headers, group_id, date="2026-10-31", amount="5")
    
    days = client.get(f"/api/calendar/{group_id}/2026/10", headers=auth_headers).json()
    assert [d["date"] for d in days] == ["2026-10-02", "2026-10-31"]
    assert Decimal(days[0]["expense_total"]) == Decimal("40")
    assert Decimal(days[0]["income_total"]) == Decimal("20")
    assert days[0]["transaction_count"] == 2


@pytest.mark.parametrize("year,month", [(2026, 13), (2026, 0), (0, 10), (10000, 10)])
def test_calendar_rejects_bad_period(client, auth_headers, group_id, year, month):
    response = client.get(f"/api/calendar/{group_id}/{year}/{month}", headers=auth_headers)
    assert response.status_code == 400
    assert "error" in response.json()
