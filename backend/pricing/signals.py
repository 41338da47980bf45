from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import OrderCharge, ShippingInsurance, TaxConfiguration
from .services.rule_store import invalidate_snapshot


@receiver(post_save, sender=TaxConfiguration)
@receiver(post_save, sender=OrderCharge)
@receiver(post_save, sender=ShippingInsurance)
@receiver(post_delete, sender=TaxConfiguration)
@receiver(post_delete, sender=OrderCharge)
@receiver(post_delete, sender=ShippingInsurance)
def rules_changed(sender, **kwargs):
    # Cleared again after commit; a concurrent read may re-cache pre-commit rows
    invalidate_snapshot()
    transaction.on_commit(invalidate_snapshot)
