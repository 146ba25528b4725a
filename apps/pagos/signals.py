# pagos/signals.py

"""
Ledger signal handlers

Auto-processing for:
- Receipt number generation on new abonos
- Invoice state change logging
"""

from django.db.models.signals import pre_save, post_save
from django.dispatch import receiver
import logging

from pagos.utils import generate_receipt_number

logger = logging.getLogger(__name__)


# =============================================================================
# ABONO SIGNALS
# =============================================================================

@receiver(pre_save, sender='pagos.Abono')
def abono_pre_save(sender, instance, **kwargs):
    """Auto-generate the receipt number for new abonos"""
    if instance._state.adding and not instance.numero_recibo:
        instance.numero_recibo = generate_receipt_number()
        logger.debug(f"Generated receipt number: {instance.numero_recibo}")


# =============================================================================
# INVOICE SIGNALS
# =============================================================================

@receiver(post_save, sender='pagos.MatriculaPago')
def matricula_pago_post_save(sender, instance, created, update_fields=None, **kwargs):
    """Log invoice creation and estado transitions"""
    if created:
        logger.info(f"Invoice {instance.pk} created for matricula {instance.matricula_id}")
    elif update_fields and 'estado' in update_fields:
        logger.info(f"Invoice {instance.pk} estado -> {instance.get_estado_display()}")
