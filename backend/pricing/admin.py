from django.contrib import admin

from pricing.models import OrderCharge, ShippingInsurance, TaxConfiguration


@admin.register(TaxConfiguration)
class TaxConfigurationAdmin(admin.ModelAdmin):
    list_display = ("id", "code", "name", "tax_type", "rate", "apply_on", "is_inclusive", "is_enabled", "priority")
    list_filter = ("tax_type", "apply_on", "is_inclusive", "is_enabled")
    search_fields = ("code", "name")
    ordering = ("priority", "id")


@admin.register(OrderCharge)
class OrderChargeAdmin(admin.ModelAdmin):
    list_display = ("id", "code", "name", "type", "apply_to", "is_taxable", "is_enabled", "priority")
    list_filter = ("type", "apply_to", "is_taxable", "is_enabled")
    search_fields = ("code", "name")
    ordering = ("priority", "id")


@admin.register(ShippingInsurance)
class ShippingInsuranceAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "min_order_value",
        "max_order_value",
        "premium_percentage",
        "coverage_percentage",
        "is_mandatory",
        "is_active",
    )
    list_filter = ("is_mandatory", "is_active")
    search_fields = ("name",)
