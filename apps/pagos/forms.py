# pagos/forms.py

"""
Input forms for invoice and abono endpoints.

Forms only parse and type-check the JSON body. Balance rules live in
pagos.services so they are checked under the invoice lock.
"""

from django import forms
import logging

from pagos.models import Abono
from planes.models import PlanPago

logger = logging.getLogger(__name__)


# =============================================================================
# ABONO FORMS
# =============================================================================

class AbonoForm(forms.Form):
    """POST /matriculas-pagos-abonos"""

    API_FIELDS = {
        'matriculaPagoId': 'matricula_pago_id',
        'monto': 'monto',
        'metodoPago': 'metodo_pago',
        'referencia': 'referencia',
        'nota': 'nota',
    }

    matricula_pago_id = forms.UUIDField(
        error_messages={
            'required': 'El pago de matrícula es requerido',
            'invalid': 'Identificador de pago inválido',
        }
    )
    monto = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        error_messages={
            'required': 'El monto es requerido',
            'invalid': 'Ingrese un monto válido',
            'max_decimal_places': 'El monto admite 2 decimales',
        }
    )
    metodo_pago = forms.ChoiceField(
        choices=Abono.METODO_PAGO_CHOICES,
        error_messages={
            'required': 'El método de pago es requerido',
            'invalid_choice': 'Método de pago inválido',
        }
    )
    referencia = forms.CharField(required=False, max_length=100, strip=True)
    nota = forms.CharField(required=False, strip=True)


# =============================================================================
# INVOICE FORMS
# =============================================================================

class MatriculaPagoForm(forms.Form):
    """POST /matriculas-pagos"""

    API_FIELDS = {
        'matriculaId': 'matricula_id',
        'numeroPago': 'numero_pago',
        'idPlanPago': 'plan_pago',
        'subtotal': 'subtotal',
        'total': 'total',
        'fechaVencimiento': 'fecha_vencimiento',
    }

    matricula_id = forms.CharField(
        max_length=50,
        error_messages={'required': 'La matrícula es requerida'}
    )
    numero_pago = forms.IntegerField(
        min_value=1,
        error_messages={
            'required': 'El número de pago es requerido',
            'min_value': 'El número de pago debe ser al menos 1',
        }
    )
    plan_pago = forms.ModelChoiceField(
        queryset=PlanPago.objects.all(),
        required=False,
        error_messages={'invalid_choice': 'El plan de pago no existe'}
    )
    subtotal = forms.DecimalField(required=False, max_digits=12, decimal_places=2)
    total = forms.DecimalField(required=False, max_digits=12, decimal_places=2)
    fecha_vencimiento = forms.DateField(required=False, input_formats=['%Y-%m-%d'])

    def clean(self):
        cleaned_data = super().clean()

        if cleaned_data.get('total') is None and cleaned_data.get('plan_pago') is None:
            self.add_error('total', 'El total es requerido cuando no se indica un plan de pago')

        return cleaned_data


class AnularForm(forms.Form):
    """POST /matriculas-pagos/{id}/anular"""

    API_FIELDS = {'motivo': 'motivo'}

    motivo = forms.CharField(
        strip=True,
        error_messages={'required': 'El motivo de anulación es requerido'}
    )
