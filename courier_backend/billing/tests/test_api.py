# billing/tests/test_api.py

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.services.chart_service import initialize_default_accounts
from billing.models import Invoice, Payment
from parties.models import Customer, Vendor

User = get_user_model()


class BillingApiTests(TestCase):
    def setUp(self):
        initialize_default_accounts()
        self.client = APIClient()
        self.admin = User.objects.create_superuser(
            username="admin", email="admin@example.com", password="pass"
        )
        self.client.force_authenticate(self.admin)
        self.customer = Customer.objects.create(company_name="Acme Freight")
        self.vendor = Vendor.objects.create(company_name="Fuel Depot")

    def _create_invoice(self, number, amount, **extra):
        payload = {
            "invoice_number": number,
            "invoice_date": "2026-01-10",
            "profile": "Customer",
            "customer_id": self.customer.id,
            "total_amount": amount,
            "line_items": [{"description": "Express parcel", "amount": amount}],
        }
        payload.update(extra)
        return self.client.post("/api/billing/invoices/", payload, format="json")

    def _pay(self, number, amount, **extra):
        payload = {
            "invoice_number": number,
            "payment_amount": amount,
            "payment_type": "CUSTOMER_PAYMENT",
        }
        payload.update(extra)
        return self.client.post("/api/billing/payments/process/", payload, format="json")

    def test_permissions(self):
        self.assertEqual(APIClient().get("/api/billing/invoices/").status_code, 401)

        clerk = User.objects.create_user(username="clerk", password="pass")
        client = APIClient()
        client.force_authenticate(clerk)
        self.assertEqual(client.get("/api/billing/invoices/").status_code, 403)
        self.assertEqual(
            client.post("/api/billing/payments/process/", {}, format="json").status_code, 403
        )

    def test_create_and_list_invoices(self):
        res = self._create_invoice("INV-1", "1000.00")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["status"], Invoice.UNPAID)
        self.assertEqual(res.data["party_name"], "Acme Freight")

        res = self._create_invoice("INV-1", "5.00")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "duplicate_code")

        res = self.client.get("/api/billing/invoices/", {"status": "Unpaid"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)

        res = self.client.get("/api/billing/invoices/", {"search": "acme"})
        self.assertEqual(res.data["count"], 1)

    def test_invoice_requires_matching_party(self):
        res = self._create_invoice("INV-2", "10.00", customer_id=None)
        self.assertEqual(res.status_code, 400)
        self.assertIn("customer_id", res.data)

        res = self._create_invoice(
            "BILL-1", "10.00", profile="Vendor", customer_id=None, vendor_id=999999
        )
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["code"], "not_found")

    def test_process_payment_flow(self):
        self._create_invoice("INV-1", "1000.00")

        res = self._pay("INV-1", "600.00")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["status"], Invoice.PARTIAL)
        self.assertEqual(res.data["remaining_amount"], "400.00")
        self.assertTrue(res.data["journal_entry"]["entry_number"].startswith("JE-"))

        res = self._pay("INV-1", "500.00", payment_method="CARD", reference="POS-7")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["status"], Invoice.PAID)
        self.assertEqual(res.data["overpayment"], "100.00")
        self.assertEqual(res.data["payment"]["mode"], "CARD")

        invoice = Invoice.objects.get(invoice_number="INV-1")
        res = self.client.get(f"/api/billing/invoices/{invoice.id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["payment_status"]["total_paid"], "1100.00")
        self.assertEqual(len(res.data["payments"]), 2)

        res = self.client.get("/api/billing/payments/", {"invoice": invoice.id})
        self.assertEqual(res.data["count"], 2)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("-100.00"))

    def test_process_payment_errors(self):
        self._create_invoice("INV-1", "100.00")

        res = self._pay("INV-404", "10.00")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["code"], "not_found")

        res = self._pay("INV-1", "10.00", payment_type="VENDOR_PAYMENT")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "validation_error")

        res = self._pay("INV-1", "0")
        self.assertEqual(res.status_code, 400)

    def test_outstanding_and_allocate(self):
        self._create_invoice("INV-1", "100.00", invoice_date="2026-01-01")
        self._create_invoice("INV-2", "80.00", invoice_date="2026-01-02")
        self._create_invoice("INV-3", "50.00", invoice_date="2026-01-03")
        self._pay("INV-1", "200.00", reference="TRX-1")

        res = self.client.get(
            "/api/billing/payments/allocate/",
            {"party_type": "CUSTOMER", "party_id": self.customer.id, "exclude": "INV-1"},
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(
            [row["invoice_number"] for row in res.data["invoices"]], ["INV-2", "INV-3"]
        )
        self.assertEqual(res.data["total_outstanding"], "130.00")

        res = self.client.post(
            "/api/billing/payments/allocate/",
            {
                "payment_type": "CUSTOMER_PAYMENT",
                "excess_amount": "100.00",
                "original_invoice_number": "INV-1",
                "payment_reference": "TRX-1",
                "customer_id": self.customer.id,
            },
            format="json",
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["total_allocated"], "100.00")
        self.assertEqual(res.data["unapplied_credit"], "0.00")
        self.assertEqual(
            [(a["invoice_number"], a["allocated_amount"]) for a in res.data["allocations"]],
            [("INV-2", "80.00"), ("INV-3", "20.00")],
        )

    def test_allocate_requires_party_id(self):
        res = self.client.post(
            "/api/billing/payments/allocate/",
            {
                "payment_type": "VENDOR_PAYMENT",
                "excess_amount": "10.00",
                "original_invoice_number": "BILL-1",
                "payment_reference": "W-1",
            },
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn("vendor_id", res.data)

        res = self.client.get("/api/billing/payments/allocate/", {"party_type": "CUSTOMER"})
        self.assertEqual(res.status_code, 400)

    def test_credit_note_create_and_delete(self):
        self._create_invoice("INV-1", "300.00")
        invoice = Invoice.objects.get(invoice_number="INV-1")

        res = self.client.post(
            "/api/billing/credit-notes/",
            {
                "customer_id": self.customer.id,
                "amount": "50.00",
                "date": "2026-01-15",
                "description": "Late delivery",
                "invoice_id": invoice.id,
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["credit_note_number"], "#CREDIT00001")
        self.assertEqual(res.data["invoice_number"], "INV-1")
        note_id = res.data["id"]

        res = self.client.get("/api/billing/credit-notes/", {"search": "late"})
        self.assertEqual(res.data["count"], 1)

        res = self.client.delete(f"/api/billing/credit-notes/{note_id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["journal_entries_deleted"], 1)

        res = self.client.get(f"/api/billing/credit-notes/{note_id}/")
        self.assertEqual(res.status_code, 404)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("300.00"))

    def test_payment_detail_edit_and_delete(self):
        self._create_invoice("INV-1", "300.00")
        res = self._pay("INV-1", "100.00", reference="TRX-1")
        payment_id = res.data["payment"]["id"]

        res = self.client.get(f"/api/billing/payments/{payment_id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["reference"], "TRX-1")

        res = self.client.patch(
            f"/api/billing/payments/{payment_id}/", {"amount": "300.00"}, format="json"
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], Invoice.PAID)
        self.assertEqual(res.data["payment"]["amount"], "300.00")

        res = self.client.patch(f"/api/billing/payments/{payment_id}/", {}, format="json")
        self.assertEqual(res.status_code, 400)

        res = self.client.delete(f"/api/billing/payments/{payment_id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], Invoice.UNPAID)
        self.assertEqual(res.data["journal_entries_deleted"], 1)
        self.assertFalse(Payment.objects.exists())

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("300.00"))

        res = self.client.get(f"/api/billing/payments/{payment_id}/")
        self.assertEqual(res.status_code, 404)

    def test_credit_note_payment_cannot_be_deleted_directly(self):
        res = self.client.post(
            "/api/billing/credit-notes/",
            {"customer_id": self.customer.id, "amount": "20.00", "date": "2026-01-15"},
            format="json",
        )
        payment_id = res.data["payment"]

        res = self.client.delete(f"/api/billing/payments/{payment_id}/")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "referenced")

    def test_invoice_edit_and_delete(self):
        res = self._create_invoice("INV-1", "300.00")
        invoice_id = res.data["id"]

        res = self.client.patch(
            f"/api/billing/invoices/{invoice_id}/",
            {"total_amount": "350.00", "tracking_number": "TRK-5"},
            format="json",
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["total_amount"], "350.00")
        self.assertEqual(res.data["tracking_number"], "TRK-5")

        self._pay("INV-1", "50.00")

        res = self.client.patch(
            f"/api/billing/invoices/{invoice_id}/", {"total_amount": "400.00"}, format="json"
        )
        self.assertEqual(res.status_code, 409)

        res = self.client.delete(f"/api/billing/invoices/{invoice_id}/")
        self.assertEqual(res.status_code, 409)

        payment = Payment.objects.get()
        self.assertEqual(self.client.delete(f"/api/billing/payments/{payment.id}/").status_code, 200)

        res = self.client.delete(f"/api/billing/invoices/{invoice_id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["invoice_number"], "INV-1")
        self.assertFalse(Invoice.objects.exists())

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))

    def test_edit_and_delete_need_permissions(self):
        res = self._create_invoice("INV-1", "300.00")
        invoice_id = res.data["id"]
        res = self._pay("INV-1", "100.00")
        payment_id = res.data["payment"]["id"]

        clerk = User.objects.create_user(username="clerk", password="pass")
        client = APIClient()
        client.force_authenticate(clerk)

        self.assertEqual(
            client.patch(f"/api/billing/invoices/{invoice_id}/", {"destination": "X"}, format="json").status_code,
            403,
        )
        self.assertEqual(client.delete(f"/api/billing/invoices/{invoice_id}/").status_code, 403)
        self.assertEqual(client.delete(f"/api/billing/payments/{payment_id}/").status_code, 403)
        self.assertEqual(client.get("/api/billing/debit-notes/").status_code, 403)

    def test_debit_note_create_and_delete(self):
        res = self._create_invoice(
            "BILL-1", "200.00", profile="Vendor", customer_id=None, vendor_id=self.vendor.id
        )
        self.assertEqual(res.status_code, 201, res.data)
        bill_id = res.data["id"]

        res = self.client.post(
            "/api/billing/debit-notes/",
            {
                "vendor_id": self.vendor.id,
                "amount": "80.00",
                "date": "2026-01-15",
                "description": "Fuel surcharge dispute",
                "invoice_id": bill_id,
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["debit_note_number"], "#DEBIT00001")
        self.assertEqual(res.data["vendor_name"], "Fuel Depot")
        note_id = res.data["id"]

        self.vendor.refresh_from_db()
        self.assertEqual(self.vendor.current_balance, Decimal("120.00"))
        self.assertEqual(Invoice.objects.get(pk=bill_id).status, Invoice.PARTIAL)

        res = self.client.get("/api/billing/debit-notes/", {"search": "surcharge"})
        self.assertEqual(res.data["count"], 1)

        res = self.client.delete(f"/api/billing/debit-notes/{note_id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["journal_entries_deleted"], 1)

        self.vendor.refresh_from_db()
        self.assertEqual(self.vendor.current_balance, Decimal("200.00"))
        self.assertEqual(self.client.get(f"/api/billing/debit-notes/{note_id}/").status_code, 404)
