from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class TaxConfiguration(models.Model):
    TAX_TYPE_CHOICES = [
        ('gst', 'GST'),
        ('igst', 'IGST'),
        ('cgst_sgst', 'CGST + SGST'),
        ('vat', 'VAT'),
        ('sales_tax', 'Sales Tax'),
        ('custom', 'Custom'),
    ]
    APPLY_ON_CHOICES = [
        ('subtotal', 'Subtotal'),
        ('subtotal_with_charges', 'Subtotal with charges'),
        ('subtotal_with_shipping', 'Subtotal with shipping'),
    ]

    id = models.BigAutoField(primary_key=True)
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=255, unique=True)
    tax_type = models.CharField(max_length=16, choices=TAX_TYPE_CHOICES)
    rate = models.DecimalField(
        max_digits=5, decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    is_enabled = models.BooleanField(default=True)
    apply_on = models.CharField(max_length=32, choices=APPLY_ON_CHOICES, default='subtotal')
    # Expression tree, see pricing.services.conditions
    conditions = models.JSONField(blank=True, null=True)
    is_inclusive = models.BooleanField(default=False)
    priority = models.PositiveIntegerField(default=0)
    description = models.TextField(blank=True, null=True)
    display_label = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tax_configurations'
        ordering = ['priority', 'id']
        indexes = [
            models.Index(fields=['is_enabled', 'priority'], name='tax_enabled_priority_idx'),
        ]

    def __str__(self):
        return f"{self.code} ({self.rate}%)"


class OrderCharge(models.Model):
    TYPE_CHOICES = [
        ('fixed', 'Fixed'),
        ('percentage', 'Percentage'),
        ('tiered', 'Tiered'),
    ]
    APPLY_TO_CHOICES = [
        ('all', 'All orders'),
        ('cod_only', 'Cash on delivery only'),
        ('online_only', 'Online payments only'),
        ('specific_payment_methods', 'Specific payment methods'),
        ('conditional', 'Conditional'),
    ]

    id = models.BigAutoField(primary_key=True)
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=255, unique=True)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, blank=True, null=True,
        validators=[MinValueValidator(0)],
    )
    percentage = models.DecimalField(
        max_digits=5, decimal_places=2, blank=True, null=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    # [{"threshold": "500", "value": "20"}, ...] ascending by threshold
    tiers = models.JSONField(blank=True, null=True)
    is_enabled = models.BooleanField(default=True)
    apply_to = models.CharField(max_length=32, choices=APPLY_TO_CHOICES, default='all')
    payment_methods = models.JSONField(blank=True, null=True)
    conditions = models.JSONField(blank=True, null=True)
    priority = models.PositiveIntegerField(default=0)
    description = models.TextField(blank=True, null=True)
    display_label = models.CharField(max_length=255)
    is_taxable = models.BooleanField(default=False)
    apply_after_discount = models.BooleanField(default=True)
    is_refundable = models.BooleanField(default=False)
    # cod_only charges: {"required": true, "type": "percentage", "value": "20", "description": ""}
    advance_payment = models.JSONField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'order_charges'
        ordering = ['priority', 'id']
        indexes = [
            models.Index(fields=['is_enabled', 'priority'], name='charge_enabled_priority_idx'),
        ]

    def __str__(self):
        return f"{self.code} ({self.type})"


class ShippingInsurance(models.Model):
    id = models.BigAutoField(primary_key=True)
    name = models.CharField(max_length=255, unique=True)
    description = models.CharField(max_length=1000, blank=True, null=True)
    min_order_value = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    max_order_value = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    coverage_percentage = models.DecimalField(
        max_digits=5, decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    premium_percentage = models.DecimalField(
        max_digits=5, decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(50)],
    )
    minimum_premium = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    maximum_premium = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    is_mandatory = models.BooleanField(default=False)
    # Eligibility predicate over zone / is_remote / has_fragile_items / has_electronics
    conditions = models.JSONField(blank=True, null=True)
    # Consumed by the configured surcharge policy
    surcharge_schedule = models.JSONField(blank=True, null=True)
    claim_processing_days = models.PositiveSmallIntegerField(
        default=7, validators=[MinValueValidator(1), MaxValueValidator(30)],
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shipping_insurance'
        ordering = ['min_order_value', 'id']
        verbose_name_plural = "Shipping insurance plans"

    def __str__(self):
        return self.name
