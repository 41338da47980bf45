from django.contrib import admin

from .models import AbandonedCart


@admin.register(AbandonedCart)
class AbandonedCartAdmin(admin.ModelAdmin):
    list_display = ("id", "session_id", "user", "total_amount", "items_count", "is_abandoned", "abandoned_at")
    list_filter = ("is_abandoned", "recovery_email_count")
    search_fields = ("session_id", "user__email")
    ordering = ("-abandoned_at", "-id")
