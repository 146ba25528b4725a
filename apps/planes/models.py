# planes/models.py

"""
Payment plan templates.

A PlanPago is the price/tax/cadence template that billing copies into
MatriculaPago invoices. Amounts are stored as DecimalField and converted to
Money at the boundary (to_state / apply_state).
"""

from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
from utils.models import BaseModel
import logging

from core.money import Money
from planes.derivation import (
    PlanState, TipoPago, PeriodicidadUnidad,
    TIPO_PAGO_CHOICES, PERIODICIDAD_UNIDAD_CHOICES, NOMBRE_MAX_LENGTH,
)

logger = logging.getLogger(__name__)


def _money_or_none(value):
    return Money.from_decimal(value) if value is not None else None


def _decimal_or_none(value):
    return value.to_decimal() if value is not None else None


class PlanPago(BaseModel):
    """Reusable billing template: price, tax and payment cadence"""

    # Fields locked once an invoice has been generated from the plan
    FROZEN_FIELDS = (
        'tipo_pago', 'subtotal', 'total', 'impuesto_id', 'moneda_id',
        'periodicidad_valor', 'periodicidad_unidad',
        'numero_cuotas', 'subtotal_final', 'total_final',
    )

    # -------------------------------------------------------------------------
    # IDENTIFICATION
    # -------------------------------------------------------------------------

    nombre = models.CharField("Nombre", max_length=NOMBRE_MAX_LENGTH)
    descripcion = models.TextField("Descripción", blank=True, null=True)
    tipo_pago = models.PositiveSmallIntegerField(
        "Tipo de Pago",
        choices=TIPO_PAGO_CHOICES,
        default=TipoPago.UNICO.value,
        db_index=True
    )

    # -------------------------------------------------------------------------
    # CATALOG REFERENCES
    # -------------------------------------------------------------------------

    moneda = models.ForeignKey(
        'core.Moneda',
        on_delete=models.PROTECT,
        related_name='planes_pago',
        verbose_name="Moneda"
    )
    impuesto = models.ForeignKey(
        'core.Impuesto',
        on_delete=models.PROTECT,
        related_name='planes_pago',
        verbose_name="Impuesto"
    )

    # -------------------------------------------------------------------------
    # AMOUNTS
    # -------------------------------------------------------------------------

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
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # RECURRENTE only
    periodicidad_valor = models.PositiveIntegerField("Cada", null=True, blank=True)
    periodicidad_unidad = models.PositiveSmallIntegerField(
        "Unidad de Periodicidad",
        choices=PERIODICIDAD_UNIDAD_CHOICES,
        null=True,
        blank=True
    )

    # CUOTAS only
    numero_cuotas = models.PositiveIntegerField("Número de Cuotas", null=True, blank=True)
    subtotal_final = models.DecimalField(
        "Subtotal Final", max_digits=14, decimal_places=2, null=True, blank=True
    )
    total_final = models.DecimalField(
        "Total Final", max_digits=14, decimal_places=2, null=True, blank=True
    )

    activo = models.BooleanField("Activo", default=True, db_index=True)

    class Meta:
        ordering = ['nombre']
        verbose_name = "Plan de Pago"
        verbose_name_plural = "Planes de Pago"
        indexes = [
            models.Index(fields=['tipo_pago', 'activo'], name='planes_plan_tipo_pa_5e0a7c_idx'),
        ]

    def __str__(self):
        return f"{self.nombre} ({self.get_tipo_pago_display()})"

    # -------------------------------------------------------------------------
    # STATE CONVERSION
    # -------------------------------------------------------------------------

    def to_state(self):
        """Immutable PlanState snapshot of this row"""
        return PlanState(
            tipo_pago=TipoPago(self.tipo_pago),
            subtotal=Money.from_decimal(self.subtotal),
            total=Money.from_decimal(self.total),
            periodicidad_valor=self.periodicidad_valor,
            periodicidad_unidad=(
                PeriodicidadUnidad(self.periodicidad_unidad)
                if self.periodicidad_unidad is not None else None
            ),
            numero_cuotas=self.numero_cuotas,
            subtotal_final=_money_or_none(self.subtotal_final),
            total_final=_money_or_none(self.total_final),
            nombre=self.nombre or '',
            descripcion=self.descripcion or '',
            impuesto_id=self.impuesto_id,
            moneda_id=self.moneda_id,
            activo=self.activo,
        )

    def apply_state(self, state):
        """Copy a PlanState onto this row (does not save)"""
        self.nombre = state.nombre.strip()
        self.descripcion = state.descripcion or None
        self.tipo_pago = int(state.tipo_pago)
        self.subtotal = state.subtotal.to_decimal()
        self.total = state.total.to_decimal()
        self.periodicidad_valor = state.periodicidad_valor
        self.periodicidad_unidad = (
            int(state.periodicidad_unidad) if state.periodicidad_unidad is not None else None
        )
        self.numero_cuotas = state.numero_cuotas
        self.subtotal_final = _decimal_or_none(state.subtotal_final)
        self.total_final = _decimal_or_none(state.total_final)
        self.impuesto_id = state.impuesto_id
        self.moneda_id = state.moneda_id
        self.activo = state.activo
        return self

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    def is_referenced(self):
        """True once billing has generated an invoice from this plan"""
        if self._state.adding:
            return False
        return self.matriculas_pagos.exists()

    def snapshot(self):
        """JSON-safe dict of the frozen fields, for audit entries"""
        values = {}
        for name in self.FROZEN_FIELDS:
            value = getattr(self, name)
            values[name] = str(value) if value is not None else None
        values['nombre'] = self.nombre
        values['activo'] = self.activo
        return values
