from django.conf import settings
from django.db import models
from django.utils import timezone


class AbandonedCart(models.Model):
    """A persisted shopping cart; flagged once the shopper stops coming back."""

    id = models.BigAutoField(primary_key=True)
    session_id = models.CharField(max_length=255, db_index=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='carts',
        blank=True,
        null=True,
    )
    cart_data = models.JSONField(default=dict, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    items_count = models.PositiveIntegerField(default=0)
    currency = models.CharField(max_length=3, default='INR')
    last_activity = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField(blank=True, null=True)
    is_abandoned = models.BooleanField(default=False)
    abandoned_at = models.DateTimeField(blank=True, null=True)
    recovery_email_count = models.PositiveIntegerField(default=0)
    last_recovery_email_sent = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'abandoned_carts'
        ordering = ['-abandoned_at', '-id']
        indexes = [
            models.Index(fields=['is_abandoned', 'abandoned_at'], name='cart_abandoned_idx'),
        ]

    def __str__(self):
        return f"Cart {self.session_id} ({self.items_count} items)"
