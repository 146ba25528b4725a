# pagos/models.py

"""
Invoices generated from payment plans and the abonos applied to them.

MatriculaPago.estado is only changed by pagos.services; Abono rows are
append-only and can only be removed through LedgerService.remove_abono.
"""

from django.db import models
from django.db.models import Sum
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
from utils.models import BaseModel
import logging

from core.exceptions import InvalidStateError
from core.money import Money

logger = logging.getLogger(__name__)


# =============================================================================
# MATRICULA PAGO (INVOICE)
# =============================================================================

class MatriculaPago(BaseModel):
    """One billable installment of an enrollment"""

    PENDIENTE = 1
    PAGADO = 2
    VENCIDO = 3
    ANULADO = 4

    ESTADO_CHOICES = [
        (PENDIENTE, 'Pendiente'),
        (PAGADO, 'Pagado'),
        (VENCIDO, 'Vencido'),
        (ANULADO, 'Anulado'),
    ]

    # External enrollment reference; enrollment itself lives in another system
    matricula_id = models.CharField("Matrícula", max_length=50, db_index=True)
    plan_pago = models.ForeignKey(
        'planes.PlanPago',
        on_delete=models.PROTECT,
        related_name='matriculas_pagos',
        null=True,
        blank=True,
        verbose_name="Plan de Pago"
    )
    numero_pago = models.PositiveIntegerField("Número de Pago", validators=[MinValueValidator(1)])

    # Snapshot of the plan amounts at generation time
    subtotal = models.DecimalField(
        "Subtotal",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    total = models.DecimalField(
        "Total",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )

    fecha_vencimiento = models.DateField("Fecha de Vencimiento", null=True, blank=True, db_index=True)
    estado = models.PositiveSmallIntegerField(
        "Estado",
        choices=ESTADO_CHOICES,
        default=PENDIENTE,
        db_index=True
    )

    fecha_anulacion = models.DateTimeField("Fecha de Anulación", null=True, blank=True)
    motivo_anulacion = models.TextField("Motivo de Anulación", blank=True, null=True)

    class Meta:
        ordering = ['matricula_id', 'numero_pago']
        verbose_name = "Pago de Matrícula"
        verbose_name_plural = "Pagos de Matrícula"
        constraints = [
            models.UniqueConstraint(
                fields=['matricula_id', 'numero_pago'],
                name='unique_numero_pago_por_matricula'
            ),
        ]
        indexes = [
            models.Index(fields=['estado', 'fecha_vencimiento'], name='pagos_matri_estado_9a4c12_idx'),
        ]

    def __str__(self):
        return f"Matrícula {self.matricula_id} - Pago #{self.numero_pago} ({self.get_estado_display()})"

    @property
    def total_pago(self):
        return Money.from_decimal(self.total)

    def get_total_abonado(self):
        """Sum of persisted abonos, read from the database every call"""
        result = self.abonos.aggregate(total=Sum('monto'))
        return Money.from_decimal(result['total'])

    def get_saldo_pendiente(self):
        return self.total_pago - self.get_total_abonado()

    @property
    def is_anulado(self):
        return self.estado == self.ANULADO


# =============================================================================
# ABONO (PARTIAL PAYMENT)
# =============================================================================

class Abono(BaseModel):
    """Immutable partial payment against a MatriculaPago"""

    METODO_PAGO_CHOICES = [
        ('Efectivo', 'Efectivo'),
        ('Transferencia', 'Transferencia'),
        ('Tarjeta de Crédito', 'Tarjeta de Crédito'),
        ('Tarjeta de Débito', 'Tarjeta de Débito'),
        ('Cheque', 'Cheque'),
        ('Otro', 'Otro'),
    ]

    matricula_pago = models.ForeignKey(
        MatriculaPago,
        on_delete=models.PROTECT,
        related_name='abonos',
        verbose_name="Pago de Matrícula"
    )
    monto = models.DecimalField(
        "Monto",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    metodo_pago = models.CharField("Método de Pago", max_length=30, choices=METODO_PAGO_CHOICES)
    fecha_abono = models.DateTimeField("Fecha del Abono", default=timezone.now, db_index=True)
    referencia = models.CharField("Referencia", max_length=100, blank=True, null=True)
    nota = models.TextField("Nota", blank=True, null=True)
    usuario_id = models.CharField("Registrado por", max_length=50, blank=True, null=True, db_index=True)
    numero_recibo = models.CharField(
        "Número de Recibo",
        max_length=30,
        unique=True,
        blank=True,
        null=True,
        help_text="Generated on insert"
    )

    class Meta:
        ordering = ['fecha_abono', 'created_at']
        verbose_name = "Abono"
        verbose_name_plural = "Abonos"
        indexes = [
            models.Index(fields=['matricula_pago', 'fecha_abono'], name='pagos_abono_matricu_2d6e80_idx'),
        ]

    def __str__(self):
        return f"Abono {self.numero_recibo or self.pk} - {self.monto}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise InvalidStateError("Los abonos no se pueden modificar; elimínelo y registre uno nuevo")
        return super().save(*args, **kwargs)

    @property
    def monto_money(self):
        return Money.from_decimal(self.monto)


# =============================================================================
# RECEIPT SEQUENCE
# =============================================================================

class SecuenciaRecibo(models.Model):
    """Last receipt number issued per prefix; its row is the lock for the next one"""

    prefijo = models.CharField(max_length=10, unique=True)
    ultimo_numero = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Secuencia de Recibos"
        verbose_name_plural = "Secuencias de Recibos"

    def __str__(self):
        return f"{self.prefijo}: {self.ultimo_numero}"
