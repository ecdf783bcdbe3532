"""
Tests for the subledger workflow endpoints: parties, invoices,
payments, estimates, payroll, purchases and tax calculations.
"""

from decimal import Decimal


def setup_customer(client):
    client.post("/ledger/accounts/seed")
    response = client.post("/customers", json={"name": "Acme Ltd", "email": "ap@acme.test"})
    assert response.status_code == 201
    return response.json()["id"]


def raise_invoice(client, customer_id, quantity=100, unit_price=1250):
    return client.post("/invoices", json={
        "customer_id": customer_id,
        "issue_date": "2024-03-01",
        "lines": [{
            "description": "Consulting hours",
            "quantity": quantity,
            "unit_price": unit_price,
            "tax_rate": 16,
        }],
    })


class TestParties:

    def test_duplicate_customer_email_returns_400(self, client):
        client.post("/customers", json={"name": "Acme", "email": "ap@acme.test"})
        response = client.post("/customers", json={"name": "Acme 2", "email": "ap@acme.test"})
        assert response.status_code == 400

    def test_unknown_customer_returns_404(self, client):
        assert client.get("/customers/42").status_code == 404

    def test_vendor_and_employee(self, client):
        vendor = client.post("/vendors", json={"name": "Stationery World"})
        assert vendor.status_code == 201

        employee = client.post("/employees", json={
            "employee_number": "E001",
            "first_name": "Amina",
            "last_name": "Otieno",
            "salary": 120000,
        })
        assert employee.status_code == 201

        deactivated = client.post(f"/employees/{employee.json()['id']}/deactivate")
        assert deactivated.json()["is_active"] is False


class TestInvoiceAndPayment:

    def test_create_invoice_returns_workflow_result(self, client):
        customer_id = setup_customer(client)
        response = raise_invoice(client, customer_id)

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["invoice"]["total"]) == Decimal("145000")
        assert data["journal_entry"]["source_module"] == "INVOICES"
        assert Decimal(data["customer_balance"]) == Decimal("145000")
        assert Decimal(data["account_balances"]["2100"]) == Decimal("20000")

    def test_invoice_without_chart_returns_500(self, client):
        customer = client.post("/customers", json={"name": "Acme Ltd"}).json()
        response = raise_invoice(client, customer["id"])

        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "ACCOUNT_CODE_NOT_CONFIGURED"
        assert client.get("/invoices").json() == []

    def test_due_date_before_issue_date_returns_422(self, client):
        customer_id = setup_customer(client)
        response = client.post("/invoices", json={
            "customer_id": customer_id,
            "issue_date": "2024-03-01",
            "due_date": "2024-02-01",
            "lines": [{"description": "X", "quantity": 1, "unit_price": 10}],
        })
        assert response.status_code == 422

    def test_send_invoice_twice_returns_409(self, client):
        customer_id = setup_customer(client)
        invoice_id = raise_invoice(client, customer_id).json()["invoice"]["id"]

        assert client.post(f"/invoices/{invoice_id}/send").status_code == 200
        assert client.post(f"/invoices/{invoice_id}/send").status_code == 409

    def test_payment_settles_invoice(self, client):
        customer_id = setup_customer(client)
        invoice_id = raise_invoice(client, customer_id).json()["invoice"]["id"]

        response = client.post("/payments", json={
            "customer_id": customer_id,
            "payment_date": "2024-03-20",
            "amount": 145000,
            "method": "MOBILE_MONEY",
            "allocations": [{"invoice_id": invoice_id, "allocated_amount": 145000}],
        })

        assert response.status_code == 201
        data = response.json()
        assert data["payment"]["payment_number"] == "PAY-0001"
        assert data["invoices"][0]["status"] == "PAID"
        assert Decimal(data["customer_balance"]) == 0
        assert Decimal(data["account_balances"]["1010"]) == Decimal("145000")

    def test_allocation_mismatch_returns_400(self, client):
        customer_id = setup_customer(client)
        invoice_id = raise_invoice(client, customer_id).json()["invoice"]["id"]

        response = client.post("/payments", json={
            "customer_id": customer_id,
            "payment_date": "2024-03-20",
            "amount": 150,
            "allocations": [{"invoice_id": invoice_id, "allocated_amount": 100}],
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "ALLOCATION_MISMATCH"

        invoice = client.get(f"/invoices/{invoice_id}").json()
        assert invoice["status"] == "DRAFT"

    def test_sub_cent_payment_returns_400(self, client):
        customer_id = setup_customer(client)
        invoice_id = raise_invoice(client, customer_id).json()["invoice"]["id"]

        response = client.post("/payments", json={
            "customer_id": customer_id,
            "payment_date": "2024-03-20",
            "amount": "0.004",
            "allocations": [{"invoice_id": invoice_id, "allocated_amount": "0.004"}],
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"


class TestEstimates:

    def test_estimate_lifecycle_and_conversion(self, client):
        customer_id = setup_customer(client)
        estimate = client.post("/estimates", json={
            "customer_id": customer_id,
            "issue_date": "2024-05-02",
            "lines": [{"description": "Website", "quantity": 1,
                       "unit_price": 80000, "tax_rate": 16}],
        }).json()
        estimate_id = estimate["id"]

        early = client.post(f"/estimates/{estimate_id}/convert", json={})
        assert early.status_code == 409

        assert client.post(f"/estimates/{estimate_id}/send").json()["status"] == "SENT"
        assert client.post(f"/estimates/{estimate_id}/accept").json()["status"] == "ACCEPTED"

        response = client.post(f"/estimates/{estimate_id}/convert", json={
            "issue_date": "2024-05-10",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["estimate"]["converted_to_invoice"] is True
        assert Decimal(data["invoice"]["invoice"]["total"]) == Decimal("92800")

    def test_declining_a_draft_returns_409(self, client):
        customer_id = setup_customer(client)
        estimate = client.post("/estimates", json={
            "customer_id": customer_id,
            "issue_date": "2024-05-02",
            "lines": [{"description": "Website", "quantity": 1, "unit_price": 100}],
        }).json()

        response = client.post(f"/estimates/{estimate['id']}/decline")
        assert response.status_code == 409


class TestPayrollAndPurchases:

    def test_payroll_run(self, client):
        client.post("/ledger/accounts/seed")
        client.post("/employees", json={
            "employee_number": "E001",
            "first_name": "Amina",
            "last_name": "Otieno",
            "salary": 120000,
        })

        response = client.post("/payroll/runs", json={
            "pay_period_start": "2024-06-01",
            "pay_period_end": "2024-06-30",
            "pay_date": "2024-06-28",
        })
        assert response.status_code == 201
        run = response.json()["payroll_run"]
        assert run["status"] == "PROCESSED"
        assert Decimal(run["payslips"][0]["paye"]) == Decimal("28383.15")
        assert Decimal(run["total_net"]) == Decimal("88836.85")

    def test_payroll_with_deductions_above_gross_returns_400(self, client):
        client.post("/ledger/accounts/seed")
        client.post("/employees", json={
            "employee_number": "E007",
            "first_name": "Juma",
            "last_name": "Mwangi",
            "salary": 100,
        })

        response = client.post("/payroll/runs", json={
            "pay_period_start": "2024-06-01",
            "pay_period_end": "2024-06-30",
            "pay_date": "2024-06-28",
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"
        assert client.get("/payroll/runs").json() == []

    def test_payroll_without_employees_returns_400(self, client):
        client.post("/ledger/accounts/seed")
        response = client.post("/payroll/runs", json={
            "pay_period_start": "2024-06-01",
            "pay_period_end": "2024-06-30",
            "pay_date": "2024-06-28",
        })
        assert response.status_code == 400

    def test_purchase(self, client):
        client.post("/ledger/accounts/seed")
        vendor = client.post("/vendors", json={"name": "Stationery World"}).json()

        response = client.post("/purchases", json={
            "vendor_id": vendor["id"],
            "purchase_date": "2024-04-12",
            "lines": [{"description": "Paper", "account_code": "5400",
                       "quantity": 10, "unit_price": 500}],
        })
        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["purchase"]["total"]) == Decimal("5800")
        assert Decimal(data["vendor_balance"]) == Decimal("5800")


class TestTaxEndpoints:

    def test_paye_calculation(self, client):
        response = client.post("/tax/paye", json={"gross_amount": 120000})
        data = response.json()
        assert data["jurisdiction"] == "KE"
        assert Decimal(data["paye"]) == Decimal("28383.15")
        assert Decimal(data["net_pay"]) == Decimal("88836.85")

    def test_withholding_calculation(self, client):
        response = client.post("/tax/withholding", json={
            "amount": 100000, "category": "RENT", "jurisdiction": "KE",
        })
        data = response.json()
        assert Decimal(data["withholding_tax"]) == Decimal("10000")
        assert Decimal(data["net_amount"]) == Decimal("90000")

    def test_unknown_jurisdiction_returns_404(self, client):
        response = client.get("/tax/jurisdictions/ZZ")
        assert response.status_code == 404

    def test_jurisdiction_table(self, client):
        data = client.get("/tax/jurisdictions/ug").json()
        assert data["country_code"] == "UG"
