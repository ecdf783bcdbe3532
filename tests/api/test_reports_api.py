"""
Tests for the report endpoints.
"""

from decimal import Decimal


def post_sale(client):
    client.post("/ledger/accounts/seed")
    client.post("/ledger/opening-balances", json={
        "entry_date": "2024-01-01",
        "balances": {"1010": 50000, "3000": 50000},
    })
    customer = client.post("/customers", json={"name": "Acme Ltd"}).json()
    client.post("/invoices", json={
        "customer_id": customer["id"],
        "issue_date": "2024-03-01",
        "lines": [{"description": "Goods", "quantity": 1,
                   "unit_price": 10000, "tax_rate": 16}],
    })


class TestReportEndpoints:

    def test_profit_and_loss(self, client):
        post_sale(client)
        response = client.get("/reports/profit-and-loss", params={
            "start": "2024-03-01", "end": "2024-03-31",
        })
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["revenue"]) == Decimal("10000")
        assert Decimal(data["net_margin"]) == Decimal("100")

    def test_reversed_date_range_returns_400(self, client):
        response = client.get("/reports/profit-and-loss", params={
            "start": "2024-03-31", "end": "2024-03-01",
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_DATE_RANGE"

    def test_balance_sheet_is_balanced(self, client):
        post_sale(client)
        data = client.get("/reports/balance-sheet", params={"as_of": "2024-03-31"}).json()
        assert data["is_balanced"] is True
        assert Decimal(data["assets"]["total"]) == Decimal("61600")

    def test_trial_balance(self, client):
        post_sale(client)
        data = client.get("/reports/trial-balance", params={"as_of": "2024-03-31"}).json()
        assert Decimal(data["total_debit"]) == Decimal(data["total_credit"])

    def test_cash_flow(self, client):
        post_sale(client)
        data = client.get("/reports/cash-flow", params={
            "start": "2024-03-01", "end": "2024-03-31",
        }).json()
        assert Decimal(data["net_cash_flow"]) == 0
        assert Decimal(data["ending_cash"]) == Decimal("50000")

    def test_ar_aging(self, client):
        post_sale(client)
        data = client.get("/reports/ar-aging", params={"as_of": "2024-04-15"}).json()
        assert Decimal(data["totals"]["days_31_60"]) == Decimal("11600")

    def test_vat_return(self, client):
        post_sale(client)
        data = client.get("/reports/vat-return", params={
            "start": "2024-03-01", "end": "2024-03-31",
        }).json()
        assert Decimal(data["output_vat"]) == Decimal("1600")
        assert Decimal(data["withholding_vat"]) == Decimal("32")
        assert data["due_date"] == "2024-04-20"
