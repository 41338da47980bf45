from rest_framework import serializers

from .models import AbandonedCart


class AbandonedCartSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(source='user.username', read_only=True, default=None)
    email = serializers.CharField(source='user.email', read_only=True, default=None)

    class Meta:
        model = AbandonedCart
        fields = [
            'id', 'session_id', 'user_id', 'username', 'email', 'cart_data', 'total_amount',
            'items_count', 'currency', 'last_activity', 'expires_at', 'is_abandoned',
            'abandoned_at', 'recovery_email_count', 'last_recovery_email_sent',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields
