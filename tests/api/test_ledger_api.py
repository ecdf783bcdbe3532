"""
Tests for the chart of accounts and journal entry endpoints.

These test the HTTP layer: status codes, response format,
and error translation. Business logic is tested in
tests/services.
"""

from decimal import Decimal


def seed(client):
    response = client.post("/ledger/accounts/seed")
    assert response.status_code == 201
    return {a["code"]: a["id"] for a in client.get("/ledger/accounts").json()}


def entry_body(lines, reference="JV-1"):
    return {
        "entry_date": "2024-01-15",
        "reference": reference,
        "description": "Test entry",
        "lines": [
            {"account_code": code, "debit": debit, "credit": credit}
            for code, debit, credit in lines
        ],
    }


class TestAccounts:

    def test_create_account_returns_201(self, client):
        response = client.post("/ledger/accounts", json={
            "code": "1000",
            "name": "Cash",
            "account_type": "ASSET",
            "subtype": "Cash and Bank",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["code"] == "1000"
        assert data["is_active"] is True
        assert Decimal(data["balance"]) == 0

    def test_duplicate_code_returns_400(self, client):
        body = {
            "code": "1000",
            "name": "Cash",
            "account_type": "ASSET",
            "subtype": "Cash and Bank",
        }
        client.post("/ledger/accounts", json=body)
        response = client.post("/ledger/accounts", json=body)

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "DUPLICATE_CODE"

    def test_invalid_account_type_returns_422(self, client):
        response = client.post("/ledger/accounts", json={
            "code": "1000",
            "name": "Cash",
            "account_type": "MONEY",
            "subtype": "Cash and Bank",
        })
        assert response.status_code == 422

    def test_seed_is_idempotent(self, client):
        first = client.post("/ledger/accounts/seed").json()
        second = client.post("/ledger/accounts/seed").json()

        assert len(first["created"]) > 0
        assert second["created"] == []
        assert sorted(second["skipped"]) == sorted(first["created"])

    def test_unknown_account_returns_404(self, client):
        response = client.get("/ledger/accounts/999")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NOT_FOUND"

    def test_deactivate_with_balance_returns_409(self, client):
        ids = seed(client)
        client.post("/ledger/entries", json=entry_body([
            ("1010", 500, 0), ("3000", 0, 500),
        ]))

        response = client.post(f"/ledger/accounts/{ids['1010']}/deactivate")
        assert response.status_code == 409

    def test_deactivate_empty_account(self, client):
        ids = seed(client)
        response = client.post(f"/ledger/accounts/{ids['5500']}/deactivate")
        assert response.status_code == 200
        assert response.json()["is_active"] is False


class TestPostEntries:

    def test_balanced_entry_returns_201(self, client):
        seed(client)
        response = client.post("/ledger/entries", json=entry_body([
            ("1010", 500, 0), ("3000", 0, 500),
        ]))

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "POSTED"
        assert data["entry_number"] == "JE-000001"
        assert Decimal(data["total_debit"]) == Decimal("500")
        assert [line["account_code"] for line in data["lines"]] == ["1010", "3000"]

    def test_unbalanced_entry_returns_400(self, client):
        seed(client)
        response = client.post("/ledger/entries", json=entry_body([
            ("1010", 100, 0), ("4000", 0, 90),
        ]))

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "UNBALANCED_ENTRY"

    def test_empty_entry_returns_400(self, client):
        seed(client)
        response = client.post("/ledger/entries", json=entry_body([]))
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "EMPTY_ENTRY"

    def test_unknown_account_returns_404(self, client):
        seed(client)
        response = client.post("/ledger/entries", json=entry_body([
            ("9999", 100, 0), ("4000", 0, 100),
        ]))
        assert response.status_code == 404

    def test_balance_endpoint(self, client):
        ids = seed(client)
        client.post("/ledger/entries", json=entry_body([
            ("1010", 750, 0), ("3000", 0, 750),
        ]))

        response = client.get(f"/ledger/accounts/{ids['3000']}/balance")
        data = response.json()
        assert Decimal(data["balance"]) == Decimal("750")
        assert data["currency"] == "KES"

        earlier = client.get(
            f"/ledger/accounts/{ids['3000']}/balance", params={"as_of": "2024-01-01"}
        )
        assert Decimal(earlier.json()["balance"]) == 0

    def test_activity_endpoint(self, client):
        ids = seed(client)
        client.post("/ledger/entries", json=entry_body([
            ("1010", 750, 0), ("3000", 0, 750),
        ]))
        client.post("/ledger/entries", json=entry_body([
            ("5200", 250, 0), ("1010", 0, 250),
        ], reference="JV-2"))

        activity = client.get(f"/ledger/accounts/{ids['1010']}/activity").json()
        assert [Decimal(a["running_balance"]) for a in activity] == [
            Decimal("750"), Decimal("500"),
        ]


class TestDraftsAndReversals:

    def test_draft_then_post(self, client):
        seed(client)
        draft = client.post("/ledger/entries/drafts", json=entry_body([
            ("1010", 100, 0), ("3000", 0, 100),
        ])).json()
        assert draft["status"] == "DRAFT"

        response = client.post(f"/ledger/entries/{draft['id']}/post")
        assert response.status_code == 200
        assert response.json()["status"] == "POSTED"

        again = client.post(f"/ledger/entries/{draft['id']}/post")
        assert again.status_code == 409
        assert again.json()["detail"]["code"] == "ALREADY_POSTED"

    def test_reverse_entry(self, client):
        ids = seed(client)
        entry = client.post("/ledger/entries", json=entry_body([
            ("5200", 50000, 0), ("1000", 0, 50000),
        ])).json()

        response = client.post(
            f"/ledger/entries/{entry['id']}/reverse",
            json={"reversal_date": "2024-01-31"},
        )
        assert response.status_code == 201
        reversal = response.json()
        assert reversal["reversal_of_id"] == entry["id"]
        assert reversal["reference"] == f"REV-{entry['entry_number']}"

        balance = client.get(f"/ledger/accounts/{ids['5200']}/balance").json()
        assert Decimal(balance["balance"]) == 0

        original = client.get(f"/ledger/entries/{entry['id']}").json()
        assert original["status"] == "REVERSED"

    def test_reverse_twice_returns_409(self, client):
        seed(client)
        entry = client.post("/ledger/entries", json=entry_body([
            ("5200", 100, 0), ("1000", 0, 100),
        ])).json()
        client.post(f"/ledger/entries/{entry['id']}/reverse")

        response = client.post(f"/ledger/entries/{entry['id']}/reverse")
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "ALREADY_REVERSED"

    def test_list_entries_by_status(self, client):
        seed(client)
        client.post("/ledger/entries", json=entry_body([
            ("1010", 100, 0), ("3000", 0, 100),
        ]))
        client.post("/ledger/entries/drafts", json=entry_body([
            ("1010", 100, 0), ("3000", 0, 100),
        ], reference="JV-2"))

        posted = client.get("/ledger/entries", params={"status": "POSTED"}).json()
        assert len(posted) == 1


class TestOpeningBalancesAndVerify:

    def test_opening_balances(self, client):
        ids = seed(client)
        response = client.post("/ledger/opening-balances", json={
            "entry_date": "2024-01-01",
            "balances": {"1010": 10000, "2000": 4000},
        })
        assert response.status_code == 201
        assert response.json()["source_module"] == "OPENING_BALANCE"

        equity = client.get(f"/ledger/accounts/{ids['3900']}/balance").json()
        assert Decimal(equity["balance"]) == Decimal("6000")

    def test_all_zero_opening_balances_return_422(self, client):
        seed(client)
        response = client.post("/ledger/opening-balances", json={
            "entry_date": "2024-01-01",
            "balances": {"1010": 0},
        })
        assert response.status_code == 422

    def test_verify_reports_consistency(self, client):
        seed(client)
        client.post("/ledger/entries", json=entry_body([
            ("1010", 100, 0), ("3000", 0, 100),
        ]))

        data = client.get("/ledger/verify").json()
        assert data["consistent"] is True
        assert data["mismatches"] == []
