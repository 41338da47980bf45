import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='TaxConfiguration',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('code', models.CharField(max_length=255, unique=True)),
                ('tax_type', models.CharField(choices=[('gst', 'GST'), ('igst', 'IGST'), ('cgst_sgst', 'CGST + SGST'), ('vat', 'VAT'), ('sales_tax', 'Sales Tax'), ('custom', 'Custom')], max_length=16)),
                ('rate', models.DecimalField(decimal_places=2, max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('is_enabled', models.BooleanField(default=True)),
                ('apply_on', models.CharField(choices=[('subtotal', 'Subtotal'), ('subtotal_with_charges', 'Subtotal with charges'), ('subtotal_with_shipping', 'Subtotal with shipping')], default='subtotal', max_length=32)),
                ('conditions', models.JSONField(blank=True, null=True)),
                ('is_inclusive', models.BooleanField(default=False)),
                ('priority', models.PositiveIntegerField(default=0)),
                ('description', models.TextField(blank=True, null=True)),
                ('display_label', models.CharField(max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'tax_configurations',
                'ordering': ['priority', 'id'],
                'indexes': [models.Index(fields=['is_enabled', 'priority'], name='tax_enabled_priority_idx')],
            },
        ),
        migrations.CreateModel(
            name='OrderCharge',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('code', models.CharField(max_length=255, unique=True)),
                ('type', models.CharField(choices=[('fixed', 'Fixed'), ('percentage', 'Percentage'), ('tiered', 'Tiered')], max_length=16)),
                ('amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('percentage', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('tiers', models.JSONField(blank=True, null=True)),
                ('is_enabled', models.BooleanField(default=True)),
                ('apply_to', models.CharField(choices=[('all', 'All orders'), ('cod_only', 'Cash on delivery only'), ('online_only', 'Online payments only'), ('specific_payment_methods', 'Specific payment methods'), ('conditional', 'Conditional')], default='all', max_length=32)),
                ('payment_methods', models.JSONField(blank=True, null=True)),
                ('conditions', models.JSONField(blank=True, null=True)),
                ('priority', models.PositiveIntegerField(default=0)),
                ('description', models.TextField(blank=True, null=True)),
                ('display_label', models.CharField(max_length=255)),
                ('is_taxable', models.BooleanField(default=False)),
                ('apply_after_discount', models.BooleanField(default=True)),
                ('is_refundable', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'order_charges',
                'ordering': ['priority', 'id'],
                'indexes': [models.Index(fields=['is_enabled', 'priority'], name='charge_enabled_priority_idx')],
            },
        ),
        migrations.CreateModel(
            name='ShippingInsurance',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255, unique=True)),
                ('description', models.CharField(blank=True, max_length=1000, null=True)),
                ('min_order_value', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('max_order_value', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('coverage_percentage', models.DecimalField(decimal_places=2, max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('premium_percentage', models.DecimalField(decimal_places=2, max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(50)])),
                ('minimum_premium', models.DecimalField(decimal_places=2, default=0, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('maximum_premium', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('is_mandatory', models.BooleanField(default=False)),
                ('conditions', models.JSONField(blank=True, null=True)),
                ('surcharge_schedule', models.JSONField(blank=True, null=True)),
                ('claim_processing_days', models.PositiveSmallIntegerField(default=7, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(30)])),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'shipping_insurance',
                'ordering': ['min_order_value', 'id'],
                'verbose_name_plural': 'Shipping insurance plans',
            },
        ),
    ]
