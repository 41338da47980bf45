from rest_framework import serializers

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = [
            'id', 'event', 'auditable_type', 'auditable_id', 'user', 'username',
            'ip_address', 'user_agent', 'old_values', 'new_values', 'metadata', 'created_at',
        ]
        read_only_fields = fields


class PurgeSerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=30, max_value=365)
