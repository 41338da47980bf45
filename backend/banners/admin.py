from django.contrib import admin

from .models import PromotionalBanner


@admin.register(PromotionalBanner)
class PromotionalBannerAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "is_active", "order", "updated_at")
    list_filter = ("is_active",)
    search_fields = ("title",)
    ordering = ("order", "id")
