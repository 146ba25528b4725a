# pagos/utils.py

"""
Ledger utility functions

Contains:
- Receipt number generation
- Invoice filter helpers
"""

from django.conf import settings
from django.db import transaction
from datetime import date
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# REFERENCE NUMBER GENERATION
# =============================================================================

def generate_receipt_number():
    """
    Generate unique receipt number.
    Format: REC-000001 (prefix from settings.RECIBO_PREFIX)

    The per-prefix sequence row is locked with select_for_update, so two
    abonos saved at the same time on different invoices never get the
    same number.

    Returns:
        str: Unique receipt number
    """
    from pagos.models import SecuenciaRecibo

    prefix = (getattr(settings, 'RECIBO_PREFIX', '') or '').strip()

    with transaction.atomic():
        SecuenciaRecibo.objects.get_or_create(prefijo=prefix)
        secuencia = SecuenciaRecibo.objects.select_for_update().get(prefijo=prefix)
        secuencia.ultimo_numero += 1
        secuencia.save(update_fields=['ultimo_numero'])
        new_number = secuencia.ultimo_numero

    if new_number <= 999999:
        formatted_number = f"{new_number:06d}"
    else:
        formatted_number = str(new_number)

    if prefix:
        return f"{prefix}-{formatted_number}"
    return formatted_number


# =============================================================================
# FILTER HELPERS
# =============================================================================

def parse_date(value):
    """'YYYY-MM-DD' -> date, anything else -> None"""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.debug(f"Ignoring invalid date filter: {value}")
        return None


def parse_estado(value):
    """Estado filter as int (1-4) or None"""
    from pagos.models import MatriculaPago

    if value and value.isdigit() and int(value) in dict(MatriculaPago.ESTADO_CHOICES):
        return int(value)
    return None
