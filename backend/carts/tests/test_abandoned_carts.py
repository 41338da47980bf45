from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from accounts.models import CustomUser
from audit.models import AuditLog
from carts.models import AbandonedCart


def _client(user):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Token {Token.objects.create(user=user).key}")
    return client


class AbandonedCartApiTests(TestCase):
    def setUp(self):
        self.admin = CustomUser.objects.create_user(username="admin", password="pass12345", role="admin")
        self.manager = CustomUser.objects.create_user(username="manager", password="pass12345", role="manager")
        self.shopper = CustomUser.objects.create_user(
            username="shopper", email="shopper@example.com", password="pass12345", role="staff",
        )
        self.client = _client(self.admin)
        now = timezone.now()

        self.old = AbandonedCart.objects.create(
            session_id="sess-old", user=self.shopper, total_amount=Decimal("1200.00"), items_count=3,
            is_abandoned=True, abandoned_at=now - timedelta(days=20), recovery_email_count=3,
        )
        self.recent = AbandonedCart.objects.create(
            session_id="sess-recent", total_amount=Decimal("300.50"), items_count=1,
            is_abandoned=True, abandoned_at=now - timedelta(days=1), recovery_email_count=1,
        )
        self.active = AbandonedCart.objects.create(session_id="sess-active", total_amount=Decimal("99.00"))

    def test_list_shows_only_abandoned_newest_first(self):
        resp = self.client.get("/api/admin/abandoned-carts/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["count"], 2)
        self.assertEqual([row["session_id"] for row in resp.data["results"]], ["sess-recent", "sess-old"])

    def test_list_filters(self):
        by_email = self.client.get("/api/admin/abandoned-carts/", {"search": "shopper@"})
        self.assertEqual([row["session_id"] for row in by_email.data["results"]], ["sess-old"])
        self.assertEqual(by_email.data["results"][0]["email"], "shopper@example.com")

        by_session = self.client.get("/api/admin/abandoned-carts/", {"search": "recent"})
        self.assertEqual([row["session_id"] for row in by_session.data["results"]], ["sess-recent"])

        by_emails = self.client.get("/api/admin/abandoned-carts/", {"recovery_emails": "3"})
        self.assertEqual([row["session_id"] for row in by_emails.data["results"]], ["sess-old"])

        bad = self.client.get("/api/admin/abandoned-carts/", {"recovery_emails": "many"})
        self.assertEqual(bad.status_code, 400)

    def test_list_is_paginated(self):
        resp = self.client.get("/api/admin/abandoned-carts/", {"per_page": 1})
        self.assertEqual(resp.data["count"], 2)
        self.assertEqual(len(resp.data["results"]), 1)
        self.assertIsNotNone(resp.data["next"])

    def test_show(self):
        resp = self.client.get(f"/api/admin/abandoned-carts/{self.old.pk}/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["username"], "shopper")

        resp = self.client.get(f"/api/admin/abandoned-carts/{self.active.pk}/")
        self.assertEqual(resp.status_code, 404)

    def test_destroy_is_audited(self):
        resp = self.client.delete(f"/api/admin/abandoned-carts/{self.recent.pk}/")
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(AbandonedCart.objects.filter(pk=self.recent.pk).exists())
        entry = AuditLog.objects.get(event="abandonedcart.deleted")
        self.assertEqual(entry.old_values["session_id"], "sess-recent")

    def test_destroy_refuses_active_cart(self):
        resp = self.client.delete(f"/api/admin/abandoned-carts/{self.active.pk}/")
        self.assertEqual(resp.status_code, 400)
        self.assertTrue(AbandonedCart.objects.filter(pk=self.active.pk).exists())

    def test_statistics(self):
        resp = self.client.get("/api/admin/abandoned-carts/statistics/")
        self.assertEqual(resp.status_code, 200)
        data = resp.data["data"]
        self.assertEqual(data["total_abandoned"], 2)
        self.assertEqual(Decimal(data["total_value"]), Decimal("1500.50"))
        self.assertEqual(data["by_recovery_count"], {"none": 0, "one": 1, "two": 0, "three_plus": 1})
        self.assertEqual(data["recent_abandoned"], 1)

    def test_manager_reads_but_cannot_delete(self):
        manager = _client(self.manager)
        self.assertEqual(manager.get("/api/admin/abandoned-carts/").status_code, 200)
        self.assertEqual(manager.delete(f"/api/admin/abandoned-carts/{self.old.pk}/").status_code, 403)

    def test_staff_is_refused(self):
        staff = _client(self.shopper)
        self.assertEqual(staff.get("/api/admin/abandoned-carts/statistics/").status_code, 403)
