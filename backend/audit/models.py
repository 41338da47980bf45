from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class AuditLog(models.Model):
    id = models.BigAutoField(primary_key=True)
    event = models.CharField(max_length=255, db_index=True)
    auditable_type = models.CharField(max_length=255, blank=True, null=True)
    auditable_id = models.BigIntegerField(blank=True, null=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='audit_logs',
        blank=True,
        null=True,
    )
    ip_address = models.GenericIPAddressField(blank=True, null=True)
    user_agent = models.TextField(blank=True, null=True)
    old_values = models.JSONField(blank=True, null=True, encoder=DjangoJSONEncoder)
    new_values = models.JSONField(blank=True, null=True, encoder=DjangoJSONEncoder)
    metadata = models.JSONField(blank=True, null=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['auditable_type', 'auditable_id'], name='audit_auditable_idx'),
        ]

    def __str__(self):
        return f"{self.event} @ {self.created_at:%Y-%m-%d %H:%M}"
