# core/models.py

"""
Read-only catalogs consumed by payment plans: tax rates and currencies.
"""

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from django.core.exceptions import ValidationError
from decimal import Decimal
from utils.models import BaseModel
import pycountry
import logging

from core.money import rate_from_percent

logger = logging.getLogger(__name__)


# =============================================================================
# IMPUESTO (TAX RATE)
# =============================================================================

class Impuesto(BaseModel):
    """Tax rate applied on top of a plan's subtotal"""

    nombre = models.CharField("Nombre", max_length=100)
    codigo = models.CharField("Código", max_length=20, unique=True)
    tasa = models.DecimalField(
        "Tasa (%)",
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )
    es_exento = models.BooleanField("Exento", default=False)
    descripcion = models.TextField("Descripción", blank=True)
    activo = models.BooleanField("Activo", default=True, db_index=True)

    class Meta:
        ordering = ['nombre']
        verbose_name = "Impuesto"
        verbose_name_plural = "Impuestos"

    def __str__(self):
        return f"{self.nombre} - {self.tasa}%"

    def clean(self):
        super().clean()
        errors = {}
        if self.tasa is not None and not (0 <= self.tasa <= 100):
            errors['tasa'] = "Tasa must be between 0 and 100"
        if self.es_exento and self.tasa:
            errors['tasa'] = "An exempt tax must have a 0% rate"
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def get_rate(self):
        """Rate as a fraction: 13.00% -> Decimal('0.13')"""
        if self.es_exento:
            return Decimal('0')
        return rate_from_percent(self.tasa)


# =============================================================================
# MONEDA (CURRENCY)
# =============================================================================

class Moneda(BaseModel):
    """Currency a plan is billed in"""

    codigo = models.CharField("Código ISO", max_length=3, unique=True)
    nombre = models.CharField("Nombre", max_length=100)
    simbolo = models.CharField("Símbolo", max_length=5, default='$')
    activo = models.BooleanField("Activo", default=True, db_index=True)

    class Meta:
        ordering = ['codigo']
        verbose_name = "Moneda"
        verbose_name_plural = "Monedas"

    def __str__(self):
        return f"{self.codigo} ({self.simbolo})"

    @staticmethod
    def get_currency_choices():
        """ISO 4217 choices for admin forms"""
        return sorted(
            ((currency.alpha_3, f"{currency.name} ({currency.alpha_3})") for currency in pycountry.currencies),
            key=lambda choice: choice[1]
        )

    def clean(self):
        super().clean()
        if self.codigo:
            self.codigo = self.codigo.strip().upper()
            if pycountry.currencies.get(alpha_3=self.codigo) is None:
                raise ValidationError({
                    'codigo': f"'{self.codigo}' is not a valid ISO 4217 currency code"
                })

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)
