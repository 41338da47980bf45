from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from accounts.models import CustomUser
from audit.models import AuditLog
from audit.services import audit_service


class AuditLogApiTests(TestCase):
    def setUp(self):
        self.admin = CustomUser.objects.create_user(username="admin", password="pass12345", role="admin")
        self.client = APIClient()
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {Token.objects.create(user=self.admin).key}")

    def _client_for(self, role):
        user = CustomUser.objects.create_user(username=f"{role}_user", password="pass12345", role=role)
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Token {Token.objects.create(user=user).key}")
        return client

    def test_list_is_paginated_and_filterable(self):
        for i in range(3):
            audit_service.log("banner.created", new_values={"n": i})
        audit_service.log("taxconfiguration.updated")

        resp = self.client.get("/api/admin/audit-logs/", {"per_page": 2})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["count"], 4)
        self.assertEqual(len(resp.data["results"]), 2)

        resp = self.client.get("/api/admin/audit-logs/", {"event": "taxconfiguration.updated"})
        self.assertEqual(resp.data["count"], 1)

        resp = self.client.get("/api/admin/audit-logs/", {"recent_days": "soon"})
        self.assertEqual(resp.status_code, 400)

    def test_manager_can_read_but_not_purge(self):
        manager = self._client_for("manager")
        self.assertEqual(manager.get("/api/admin/audit-logs/").status_code, 200)
        self.assertEqual(manager.post("/api/admin/audit-logs/purge/", {"days": 90}, format="json").status_code, 403)

        staff = self._client_for("staff")
        self.assertEqual(staff.get("/api/admin/audit-logs/").status_code, 403)

    def test_detail(self):
        entry = audit_service.log("banner.created", new_values={"title": "Sale"})
        resp = self.client.get(f"/api/admin/audit-logs/{entry.pk}/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["new_values"], {"title": "Sale"})
        self.assertEqual(self.client.get(f"/api/admin/audit-logs/{entry.pk + 99}/").status_code, 404)

    def test_stats_and_events(self):
        audit_service.log("banner.created")
        audit_service.log("banner.deleted")

        resp = self.client.get("/api/admin/audit-logs/stats/", {"days": 7})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["total_changes"], 2)
        self.assertEqual(self.client.get("/api/admin/audit-logs/stats/", {"days": 0}).status_code, 400)

        resp = self.client.get("/api/admin/audit-logs/events/")
        self.assertEqual(resp.data["data"], ["banner.created", "banner.deleted"])

    def test_purge_validates_window(self):
        stale = audit_service.log("stale.event")
        AuditLog.objects.filter(pk=stale.pk).update(created_at=timezone.now() - timedelta(days=200))

        resp = self.client.post("/api/admin/audit-logs/purge/", {"days": 10}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertTrue(AuditLog.objects.filter(pk=stale.pk).exists())

        resp = self.client.post("/api/admin/audit-logs/purge/", {"days": 90}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["deleted_count"], 1)
