# backend/pricing/management/commands/seed_cost_rules.py

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from pricing.models import OrderCharge, ShippingInsurance, TaxConfiguration

#region -------- Default rules --------
TAXES = [
    {
        "code": "GST",
        "name": "Goods and Services Tax",
        "tax_type": "gst",
        "rate": Decimal("18.00"),
        "apply_on": "subtotal_with_charges",
        "display_label": "GST (18%)",
        "priority": 1,
    },
]

CHARGES = [
    {
        "code": "SHIPPING",
        "name": "Shipping",
        "type": "tiered",
        "tiers": [
            {"threshold": "0", "value": "60"},
            {"threshold": "500", "value": "40"},
            {"threshold": "1000", "value": "0"},
        ],
        "display_label": "Shipping",
        "is_taxable": True,
        "apply_after_discount": True,
        "priority": 1,
    },
    {
        "code": "COD_FEE",
        "name": "Cash on delivery fee",
        "type": "fixed",
        "amount": Decimal("30.00"),
        "apply_to": "cod_only",
        "display_label": "COD charges",
        "is_taxable": True,
        "priority": 2,
    },
    {
        "code": "GATEWAY_FEE",
        "name": "Payment gateway fee",
        "type": "percentage",
        "percentage": Decimal("2.00"),
        "apply_to": "online_only",
        "display_label": "Payment processing",
        "priority": 3,
    },
]

INSURANCE = [
    {
        "name": "Basic Protection",
        "description": "Covers loss in transit",
        "min_order_value": Decimal("0"),
        "max_order_value": Decimal("5000"),
        "coverage_percentage": Decimal("100"),
        "premium_percentage": Decimal("1.5"),
        "minimum_premium": Decimal("20"),
        "maximum_premium": Decimal("100"),
        "claim_processing_days": 7,
    },
    {
        "name": "Premium Protection",
        "description": "Full cover for high value orders",
        "min_order_value": Decimal("5000.01"),
        "coverage_percentage": Decimal("100"),
        "premium_percentage": Decimal("1.0"),
        "minimum_premium": Decimal("75"),
        "surcharge_schedule": [
            {"type": "remote_surcharge", "amount": "50"},
            {"type": "high_value_discount", "threshold": "20000", "discount_percent": "10"},
            {"type": "fragile_item_surcharge", "multiplier": "1.5"},
        ],
        "claim_processing_days": 5,
    },
]
#endregion


class Command(BaseCommand):
    help = "Idempotently seed default taxes, order charges and insurance plans."

    @transaction.atomic
    def handle(self, *args, **opts):
        for row in TAXES:
            _, created = TaxConfiguration.objects.get_or_create(code=row["code"], defaults=row)
            self._report("tax", row["code"], created)

        for row in CHARGES:
            _, created = OrderCharge.objects.get_or_create(code=row["code"], defaults=row)
            self._report("charge", row["code"], created)

        for row in INSURANCE:
            _, created = ShippingInsurance.objects.get_or_create(name=row["name"], defaults=row)
            self._report("insurance plan", row["name"], created)

        self.stdout.write(self.style.SUCCESS("Cost rules seeded."))

    def _report(self, label, key, created):
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created {label} {key}"))
        else:
            self.stdout.write(f"{label.capitalize()} {key} already exists")
