# parties/tests/test_api.py

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from parties.models import Customer, Vendor
from parties.services.balance_service import post_customer_transaction

User = get_user_model()


class PartiesApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_superuser(
            username="admin", email="admin@example.com", password="pass"
        )
        self.clerk = User.objects.create_user(username="clerk", password="pass")
        self.client.force_authenticate(self.admin)

    def test_anonymous_is_rejected(self):
        anon = APIClient()
        res = anon.get("/api/parties/customers/")
        self.assertEqual(res.status_code, 401)

    def test_user_without_permission_is_forbidden(self):
        client = APIClient()
        client.force_authenticate(self.clerk)
        res = client.get("/api/parties/customers/")
        self.assertEqual(res.status_code, 403)

    def test_create_and_list_customers(self):
        res = self.client.post(
            "/api/parties/customers/",
            {"company_name": "Acme Freight", "person_name": "Ann", "current_balance": "999"},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        # balance is not writable through the API
        self.assertEqual(Decimal(res.data["current_balance"]), Decimal("0.00"))

        res = self.client.get("/api/parties/customers/", {"search": "acme"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)

    def test_create_customer_requires_company_name(self):
        res = self.client.post(
            "/api/parties/customers/", {"company_name": "  "}, format="json"
        )
        self.assertEqual(res.status_code, 400)

    def test_update_vendor(self):
        vendor = Vendor.objects.create(company_name="Fuel Depot")
        res = self.client.patch(
            f"/api/parties/vendors/{vendor.id}/", {"city": "Lagos"}, format="json"
        )
        self.assertEqual(res.status_code, 200)
        vendor.refresh_from_db()
        self.assertEqual(vendor.city, "Lagos")

    def test_customer_manual_posting_and_history(self):
        customer = Customer.objects.create(company_name="Acme Freight")
        url = f"/api/parties/customers/{customer.id}/transactions/"

        res = self.client.post(
            url,
            {"type": "DEBIT", "amount": "150.00", "description": "Manual charge"},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["previous_balance"], "0.00")
        self.assertEqual(res.data["new_balance"], "150.00")

        res = self.client.get(url)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["current_balance"], "150.00")
        self.assertEqual(len(res.data["transactions"]), 1)

    def test_history_is_limited_to_latest_fifty(self):
        customer = Customer.objects.create(company_name="Acme Freight")
        for i in range(55):
            post_customer_transaction(customer.id, "DEBIT", "1", f"Charge {i}")

        res = self.client.get(f"/api/parties/customers/{customer.id}/transactions/")
        self.assertEqual(len(res.data["transactions"]), 50)
        self.assertEqual(res.data["transactions"][0]["description"], "Charge 54")

    def test_posting_to_missing_customer_is_404(self):
        res = self.client.post(
            "/api/parties/customers/424242/transactions/",
            {"direction": "CREDIT", "amount": "5", "description": "x"},
            format="json",
        )
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["code"], "not_found")

    def test_posting_requires_direction(self):
        customer = Customer.objects.create(company_name="Acme Freight")
        res = self.client.post(
            f"/api/parties/customers/{customer.id}/transactions/",
            {"amount": "5", "description": "x"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_company_account_summary_and_posting(self):
        res = self.client.post(
            "/api/parties/company-account/transactions/",
            {"direction": "CREDIT", "amount": "75", "description": "Cash deposit"},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)

        res = self.client.get("/api/parties/company-account/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["account"]["current_balance"], "75.00")
        self.assertEqual(len(res.data["transactions"]), 1)
