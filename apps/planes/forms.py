# planes/forms.py

"""
Input forms for the plan endpoints.

The API speaks camelCase; API_FIELD_MAP translates request keys to form
field names before binding. Cross-field rules (amount derivation, required
groups per tipo_pago) belong to planes.derivation, not to these forms.
"""

from django import forms
from decimal import Decimal
import logging

from core.models import Impuesto, Moneda
from core.money import Money
from planes.derivation import (
    PlanState, TipoPago, PeriodicidadUnidad, EditedField,
    TIPO_PAGO_CHOICES, PERIODICIDAD_UNIDAD_CHOICES,
)

logger = logging.getLogger(__name__)

API_FIELD_MAP = {
    'nombre': 'nombre',
    'descripcion': 'descripcion',
    'tipoPago': 'tipo_pago',
    'idMoneda': 'moneda',
    'idImpuesto': 'impuesto',
    'subtotal': 'subtotal',
    'total': 'total',
    'periodicidadValor': 'periodicidad_valor',
    'idPeriodicidadUnidad': 'periodicidad_unidad',
    'numeroCuotas': 'numero_cuotas',
    'subtotalFinal': 'subtotal_final',
    'totalFinal': 'total_final',
    'activo': 'activo',
    'campoEditado': 'campo_editado',
}


def _amount_field(required=False):
    return forms.DecimalField(
        required=required,
        max_digits=14,
        decimal_places=2,
        error_messages={
            'invalid': 'Ingrese un monto válido',
            'max_decimal_places': 'Los montos admiten 2 decimales',
        }
    )


class PlanPagoForm(forms.Form):
    """Create/update payload for a PlanPago"""

    nombre = forms.CharField(required=False, strip=True)
    descripcion = forms.CharField(required=False, strip=True)
    tipo_pago = forms.TypedChoiceField(
        choices=TIPO_PAGO_CHOICES,
        coerce=int,
        error_messages={
            'required': 'El tipo de pago es requerido',
            'invalid_choice': 'Tipo de pago inválido',
        }
    )
    moneda = forms.ModelChoiceField(
        queryset=Moneda.objects.all(),
        required=False,
        error_messages={'invalid_choice': 'La moneda no existe'}
    )
    impuesto = forms.ModelChoiceField(
        queryset=Impuesto.objects.all(),
        required=False,
        error_messages={'invalid_choice': 'El impuesto no existe'}
    )
    subtotal = _amount_field()
    total = _amount_field()
    periodicidad_valor = forms.IntegerField(required=False)
    periodicidad_unidad = forms.TypedChoiceField(
        choices=PERIODICIDAD_UNIDAD_CHOICES,
        coerce=int,
        required=False,
        empty_value=None,
        error_messages={'invalid_choice': 'Unidad de periodicidad inválida'}
    )
    numero_cuotas = forms.IntegerField(required=False)
    subtotal_final = _amount_field()
    total_final = _amount_field()
    activo = forms.NullBooleanField(required=False)
    campo_editado = forms.CharField(required=False)

    def clean_campo_editado(self):
        return EditedField.parse(self.cleaned_data.get('campo_editado'))

    def clean(self):
        cleaned_data = super().clean()

        # Inactive catalogs are only acceptable if the plan already used them
        for name in ('moneda', 'impuesto'):
            value = cleaned_data.get(name)
            initial = self.initial.get(name)
            if value is not None and not value.activo and getattr(initial, 'pk', initial) != value.pk:
                self.add_error(name, f'El {name} seleccionado está inactivo')

        return cleaned_data

    def to_state(self):
        """Cleaned data -> PlanState. Call only after is_valid()."""
        data = self.cleaned_data
        moneda = data.get('moneda')
        impuesto = data.get('impuesto')
        unidad = data.get('periodicidad_unidad')
        activo = data.get('activo')

        def money(name):
            value = data.get(name)
            return Money.from_decimal(value) if value is not None else None

        return PlanState(
            tipo_pago=TipoPago(data['tipo_pago']),
            subtotal=money('subtotal') or Money.zero(),
            total=money('total') or Money.zero(),
            periodicidad_valor=data.get('periodicidad_valor'),
            periodicidad_unidad=PeriodicidadUnidad(unidad) if unidad is not None else None,
            numero_cuotas=data.get('numero_cuotas'),
            subtotal_final=money('subtotal_final'),
            total_final=money('total_final'),
            nombre=data.get('nombre') or '',
            descripcion=data.get('descripcion') or '',
            impuesto_id=impuesto.pk if impuesto else None,
            moneda_id=moneda.pk if moneda else None,
            activo=True if activo is None else activo,
        )

    @property
    def tax_rate(self):
        impuesto = self.cleaned_data.get('impuesto')
        return impuesto.get_rate() if impuesto else Decimal('0')


def plan_to_form_data(plan):
    """Current row as form data, so PUT bodies can be partial"""
    return {
        'nombre': plan.nombre,
        'descripcion': plan.descripcion or '',
        'tipo_pago': plan.tipo_pago,
        'moneda': plan.moneda_id,
        'impuesto': plan.impuesto_id,
        'subtotal': plan.subtotal,
        'total': plan.total,
        'periodicidad_valor': plan.periodicidad_valor,
        'periodicidad_unidad': plan.periodicidad_unidad,
        'numero_cuotas': plan.numero_cuotas,
        'subtotal_final': plan.subtotal_final,
        'total_final': plan.total_final,
        'activo': plan.activo,
    }
