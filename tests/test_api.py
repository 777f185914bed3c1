"""Tests for the HTTP API."""

import pytest
from decimal import Decimal
from uuid import uuid4

from fastapi.testclient import TestClient

from app.core.config import Settings

API = "/api/v1"


def create_code(client: TestClient, **data) -> dict:
    response = client.post(f"{API}/codes", json=data)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def codes(client: TestClient) -> dict:
    assets = create_code(client, code="10", title="Assets", nature=0, category="asset")
    revenue = create_code(client, code="40", title="Revenue", nature=1, category="revenue")
    expenses = create_code(client, code="50", title="Expenses", nature=0, category="expense")
    return {
        "cash": create_code(client, code="1000", title="Cash", parent_id=assets["id"], nature=0),
        "sales": create_code(client, code="4000", title="Sales", parent_id=revenue["id"], nature=1),
        "expense": create_code(client, code="5000", title="Expense", parent_id=expenses["id"], nature=0),
    }


@pytest.fixture
def fiscal_year(client: TestClient) -> dict:
    response = client.post(
        f"{API}/fiscal-years",
        json={"name": "FY 2031", "start_date": "2031-04-01", "end_date": "2032-03-20"},
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_journal(client: TestClient, fiscal_year: dict, entry_date: str, *items, **extra):
    return client.post(
        f"{API}/journals",
        json={"fiscal_year_id": fiscal_year["id"], "date": entry_date, "items": list(items), **extra},
    )


def post_journal(client: TestClient, fiscal_year: dict, entry_date: str, *items) -> dict:
    response = create_journal(client, fiscal_year, entry_date, *items)
    assert response.status_code == 201, response.text
    response = client.post(f"{API}/journals/{response.json()['id']}/post")
    assert response.status_code == 200, response.text
    return response.json()


def test_health(client: TestClient):
    assert client.get("/health").json() == {"status": "healthy"}

    response = client.get(f"{API}/health")
    assert response.status_code == 200
    assert response.json()["database"] == "healthy"
    assert response.json()["last_serial"] == 0


def test_full_scenario(client: TestClient, codes: dict, fiscal_year: dict):
    cash, sales, expense = codes["cash"]["id"], codes["sales"]["id"], codes["expense"]["id"]

    j1 = post_journal(
        client, fiscal_year, "2031-05-01",
        {"code_id": cash, "debit": "1000"},
        {"code_id": sales, "credit": "1000"},
    )
    j2 = post_journal(
        client, fiscal_year, "2031-06-01",
        {"code_id": expense, "debit": "200"},
        {"code_id": cash, "credit": "200"},
    )
    assert (j1["serial_no"], j2["serial_no"]) == (1, 2)
    assert j1["status"] == "posted"

    params = {"fiscal_year_id": fiscal_year["id"]}

    trial = client.get(f"{API}/reports/trial-balance", params=params).json()
    rows = {row["code"]: row for row in trial["rows"]}
    assert Decimal(rows["1000"]["debit"]) == Decimal("1000")
    assert Decimal(rows["1000"]["credit"]) == Decimal("200")
    assert Decimal(trial["total_debit"]) == Decimal(trial["total_credit"]) == Decimal("1200")
    assert trial["balanced"] is True

    ledger = client.get(f"{API}/reports/ledger", params={**params, "account_id": cash}).json()
    assert [e["journal_id"] for e in ledger["entries"]] == [j1["id"], j2["id"]]
    assert [e["date"] for e in ledger["entries"]] == ["2031-05-01", "2031-06-01"]

    sheet = client.get(f"{API}/reports/balance-sheet", params=params).json()
    assert Decimal(sheet["assets"]) == Decimal("800")
    assert sheet["balanced"] is True

    pnl = client.get(f"{API}/reports/profit-loss", params=params).json()
    assert Decimal(pnl["revenue"]) == Decimal("1000")
    assert Decimal(pnl["expense"]) == Decimal("200")
    assert Decimal(pnl["profit"]) == Decimal("800")


def test_unbalanced_journal_rejected(client: TestClient, codes: dict, fiscal_year: dict):
    response = create_journal(
        client, fiscal_year, "2031-05-01",
        {"code_id": codes["cash"]["id"], "debit": "100"},
        {"code_id": codes["sales"]["id"], "credit": "50"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["ok"] is False
    assert body["error"] == "unbalanced"

    journals = client.get(f"{API}/journals", params={"fiscal_year_id": fiscal_year["id"]}).json()
    assert journals == []


def test_patch_posted_journal_rejected(client: TestClient, codes: dict, fiscal_year: dict):
    journal = post_journal(
        client, fiscal_year, "2031-05-01",
        {"code_id": codes["cash"]["id"], "debit": "100"},
        {"code_id": codes["sales"]["id"], "credit": "100"},
    )

    response = client.patch(f"{API}/journals/{journal['id']}", json={"description": "Changed"})

    assert response.status_code == 400
    assert response.json()["error"] == "journal_posted"
    assert client.get(f"{API}/journals/{journal['id']}").json()["description"] is None


def test_reverse_draft_rejected(client: TestClient, codes: dict, fiscal_year: dict):
    response = create_journal(
        client, fiscal_year, "2031-05-01",
        {"code_id": codes["cash"]["id"], "debit": "100"},
        {"code_id": codes["sales"]["id"], "credit": "100"},
    )

    response = client.post(f"{API}/journals/{response.json()['id']}/reverse")

    assert response.status_code == 400
    assert response.json()["message"] == "Only posted journals can be reversed"


def test_reverse_posted_journal(client: TestClient, codes: dict, fiscal_year: dict):
    journal = post_journal(
        client, fiscal_year, "2031-05-01",
        {"code_id": codes["cash"]["id"], "debit": "100"},
        {"code_id": codes["sales"]["id"], "credit": "100"},
    )

    response = client.post(f"{API}/journals/{journal['id']}/reverse", json={"date": "2031-05-02"})

    assert response.status_code == 201, response.text
    reversal = response.json()
    assert reversal["status"] == "posted"
    assert reversal["reversal_of_id"] == journal["id"]
    assert reversal["date"] == "2031-05-02"
    assert Decimal(reversal["items"][0]["credit"]) == Decimal("100")
    assert client.get(f"{API}/journals/{journal['id']}").json()["reversed_by_id"] == reversal["id"]


def test_draft_update_and_delete(client: TestClient, codes: dict, fiscal_year: dict):
    journal = create_journal(
        client, fiscal_year, "2031-05-01",
        {"code_id": codes["cash"]["id"], "debit": "100"},
        {"code_id": codes["sales"]["id"], "credit": "100"},
        ref_no="D-1",
    ).json()

    response = client.patch(
        f"{API}/journals/{journal['id']}",
        json={
            "date": "2031-05-03",
            "items": [
                {"code_id": codes["expense"]["id"], "debit": "40"},
                {"code_id": codes["cash"]["id"], "credit": "40"},
            ],
        },
    )
    assert response.status_code == 200, response.text
    assert response.json()["date"] == "2031-05-03"
    assert Decimal(response.json()["total_debit"]) == Decimal("40")

    assert client.delete(f"{API}/journals/{journal['id']}").status_code == 204
    assert client.get(f"{API}/journals/{journal['id']}").status_code == 404


def test_fiscal_year_close_and_open_next(client: TestClient):
    fy = client.post(
        f"{API}/fiscal-years",
        json={"name": "1410", "start_date": "2031-03-21", "end_date": "2032-03-20"},
    ).json()

    response = client.post(f"{API}/fiscal-years/{fy['id']}/open-next")
    assert response.status_code == 400
    assert response.json()["error"] == "fiscal_year_open"

    assert client.post(f"{API}/fiscal-years/{fy['id']}/close").json()["is_closed"] is True
    # Closing again changes nothing
    assert client.post(f"{API}/fiscal-years/{fy['id']}/close").status_code == 200

    response = client.post(f"{API}/fiscal-years/{fy['id']}/open-next", json={"name": "1411"})
    assert response.status_code == 201, response.text
    assert response.json()["start_date"] == "2032-03-21"
    assert response.json()["name"] == "1411"

    response = client.post(f"{API}/fiscal-years/{fy['id']}/open-next")
    assert response.status_code == 409


def test_invalid_fiscal_year_range(client: TestClient):
    response = client.post(
        f"{API}/fiscal-years",
        json={"name": "Bad", "start_date": "2031-03-21", "end_date": "2031-03-21"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_range"


def test_code_endpoints(client: TestClient, codes: dict):
    response = client.post(f"{API}/codes", json={"code": "10", "title": "Duplicate", "category": "asset"})
    assert response.status_code == 409

    tree = client.get(f"{API}/codes/tree").json()
    assert [node["code"] for node in tree] == ["10", "40", "50"]
    assert tree[0]["children"][0]["code"] == "1000"

    response = client.patch(f"{API}/codes/{codes['cash']['id']}", json={"title": "Cash on hand"})
    assert response.json()["title"] == "Cash on hand"

    generals = client.get(f"{API}/codes", params={"kind": "general"}).json()
    assert {c["code"] for c in generals} == {"1000", "4000", "5000"}

    assert client.delete(f"{API}/codes/{codes['expense']['id']}").status_code == 204


def test_ledger_requires_code(client: TestClient, fiscal_year: dict):
    response = client.get(f"{API}/reports/ledger", params={"fiscal_year_id": fiscal_year["id"]})
    assert response.status_code == 400


def test_unknown_journal(client: TestClient):
    response = client.get(f"{API}/journals/{uuid4()}")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_app_settings_reach_services(client: TestClient, settings: Settings):
    from app.main import create_app

    assets = create_code(client, code="10", title="Assets", nature=0, category="asset")
    response = client.post(
        f"{API}/codes", json={"code": "2000", "title": "Loans", "parent_id": assets["id"]}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_parent"

    relaxed = settings.model_copy(update={"code_strict_prefix": False})
    with TestClient(create_app(relaxed)) as other:
        response = other.post(
            f"{API}/codes", json={"code": "2000", "title": "Loans", "parent_id": assets["id"]}
        )
        assert response.status_code == 201, response.text
        assert response.json()["parent_id"] == assets["id"]
