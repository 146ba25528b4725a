# planes/derivation.py

"""
Payment plan field derivation.

A plan has five interdependent amounts (subtotal, total, subtotal_final,
total_final and the cuota count) tied together by the tax rate. Whichever
field the user edited last is treated as the source and the rest are
recomputed from it in one pass:

    state = derive(state, EditedField.SUBTOTAL, Decimal('0.13'))

Everything here is pure: no database, no request, no mutation. The same
functions back the client preview endpoint and the server-side save.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from enum import Enum, IntEnum

from core.exceptions import (
    InvalidRangeError,
    PlanValidationError,
    RequiredFieldError,
)
from core.money import Money

NOMBRE_MAX_LENGTH = 150


class TipoPago(IntEnum):
    UNICO = 1
    RECURRENTE = 2
    CUOTAS = 3


class PeriodicidadUnidad(IntEnum):
    DIAS = 1
    SEMANAS = 2
    MESES = 3
    ANIOS = 4


TIPO_PAGO_CHOICES = [
    (TipoPago.UNICO.value, 'Pago único'),
    (TipoPago.RECURRENTE.value, 'Recurrente'),
    (TipoPago.CUOTAS.value, 'Cuotas'),
]

PERIODICIDAD_UNIDAD_CHOICES = [
    (PeriodicidadUnidad.DIAS.value, 'Días'),
    (PeriodicidadUnidad.SEMANAS.value, 'Semanas'),
    (PeriodicidadUnidad.MESES.value, 'Meses'),
    (PeriodicidadUnidad.ANIOS.value, 'Años'),
]


class EditedField(Enum):
    """The field the user changed last; values are the API's campoEditado names"""
    SUBTOTAL = 'subtotal'
    TOTAL = 'total'
    SUBTOTAL_FINAL = 'subtotalFinal'
    TOTAL_FINAL = 'totalFinal'
    NUMERO_CUOTAS = 'numeroCuotas'
    TAX_RATE_CHANGED = 'impuesto'

    @classmethod
    def parse(cls, value):
        """campoEditado string -> EditedField; None passes through"""
        if value is None or value == '':
            return None
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value or member.name == str(value).upper():
                return member
        raise InvalidRangeError(f"campoEditado inválido: {value}")


@dataclass(frozen=True)
class PlanState:
    """Immutable snapshot of a plan's editable fields"""

    tipo_pago: TipoPago = TipoPago.UNICO
    subtotal: Money = field(default_factory=Money.zero)
    total: Money = field(default_factory=Money.zero)
    periodicidad_valor: int = None
    periodicidad_unidad: PeriodicidadUnidad = None
    numero_cuotas: int = None
    subtotal_final: Money = None
    total_final: Money = None
    nombre: str = ''
    descripcion: str = ''
    impuesto_id: object = None
    moneda_id: object = None
    activo: bool = True

    @property
    def cuotas(self):
        """Usable cuota count, or None"""
        if self.tipo_pago == TipoPago.CUOTAS and self.numero_cuotas and self.numero_cuotas > 0:
            return self.numero_cuotas
        return None


def coerce_rate(tax_rate):
    """Tax rate as Decimal; None means exempt"""
    if tax_rate is None:
        return Decimal('0')
    if isinstance(tax_rate, float):
        raise InvalidRangeError("La tasa de impuesto debe ser decimal")
    try:
        rate = Decimal(str(tax_rate))
    except InvalidOperation:
        raise InvalidRangeError(f"Tasa de impuesto inválida: {tax_rate}")
    if not rate.is_finite() or rate < 0:
        raise InvalidRangeError(f"Tasa de impuesto inválida: {tax_rate}")
    return rate


# =============================================================================
# DERIVATION
# =============================================================================

def _with_amounts(state, subtotal, total):
    """Set subtotal/total and rescale the cuota finals when they apply"""
    n = state.cuotas
    if n is None:
        return replace(state, subtotal=subtotal, total=total)
    return replace(
        state,
        subtotal=subtotal,
        total=total,
        subtotal_final=subtotal.multiply_by_int(n),
        total_final=total.multiply_by_int(n),
    )


def _from_subtotal(state, rate):
    return _with_amounts(state, state.subtotal, state.subtotal.multiply_by_rate(rate))


def _from_total(state, rate):
    return _with_amounts(state, state.total.divide_by_rate(rate), state.total)


def derive(state, edited, tax_rate):
    """
    Recompute every field that depends on `edited`.

    Branches whose preconditions do not hold (cuota edits on a non-CUOTAS
    plan, a missing or zero cuota count) return the state unchanged.
    Re-deriving subtotal from a total that was itself derived from a
    subtotal can move it by one cent; that is accepted rounding.
    """
    rate = coerce_rate(tax_rate)
    edited = EditedField.parse(edited)

    if edited == EditedField.SUBTOTAL:
        return _from_subtotal(state, rate)

    if edited == EditedField.TOTAL:
        return _from_total(state, rate)

    n = state.cuotas

    if edited == EditedField.SUBTOTAL_FINAL:
        if n is None or state.subtotal_final is None:
            return state
        subtotal = state.subtotal_final.divide_by_int(n)
        total = subtotal.multiply_by_rate(rate)
        return replace(state, subtotal=subtotal, total=total, total_final=total.multiply_by_int(n))

    if edited == EditedField.TOTAL_FINAL:
        if n is None or state.total_final is None:
            return state
        total = state.total_final.divide_by_int(n)
        subtotal = total.divide_by_rate(rate)
        return replace(state, subtotal=subtotal, total=total, subtotal_final=subtotal.multiply_by_int(n))

    if edited == EditedField.NUMERO_CUOTAS:
        if n is None:
            return state
        return _with_amounts(state, state.subtotal, state.total)

    if edited == EditedField.TAX_RATE_CHANGED:
        if state.subtotal.is_positive():
            return _from_subtotal(state, rate)
        if state.total.is_positive():
            return _from_total(state, rate)
        return state

    raise InvalidRangeError(f"campoEditado inválido: {edited}")


def normalize_groups(state):
    """Null the field group the plan type does not use"""
    changes = {}
    if state.tipo_pago != TipoPago.RECURRENTE:
        changes.update(periodicidad_valor=None, periodicidad_unidad=None)
    if state.tipo_pago != TipoPago.CUOTAS:
        changes.update(numero_cuotas=None, subtotal_final=None, total_final=None)
    return replace(state, **changes)


def switch_tipo_pago(state, tipo_pago):
    """
    Change the plan type and clear the fields the new type does not use.

    Periodicidad survives only on RECURRENTE plans and the cuota group only
    on CUOTAS plans, so stale values from a previous type are never saved.
    """
    try:
        tipo_pago = TipoPago(int(tipo_pago))
    except (TypeError, ValueError):
        raise InvalidRangeError(f"Tipo de pago inválido: {tipo_pago}")

    state = normalize_groups(replace(state, tipo_pago=tipo_pago))
    if state.cuotas is not None:
        state = _with_amounts(state, state.subtotal, state.total)
    return state


# =============================================================================
# VALIDATION
# =============================================================================

def validate_plan(state):
    """
    Raise PlanValidationError listing every invalid field. Never mutates.
    """
    errors = {}

    nombre = (state.nombre or '').strip()
    if not nombre:
        errors['nombre'] = RequiredFieldError("El nombre es requerido")
    elif len(nombre) > NOMBRE_MAX_LENGTH:
        errors['nombre'] = InvalidRangeError(
            f"El nombre no debe exceder {NOMBRE_MAX_LENGTH} caracteres"
        )

    if not state.moneda_id:
        errors['moneda'] = RequiredFieldError("La moneda es requerida")
    if not state.impuesto_id:
        errors['impuesto'] = RequiredFieldError("El impuesto es requerido")

    if state.total.is_negative():
        errors['total'] = InvalidRangeError("El total no puede ser negativo")
    elif state.total.is_zero():
        errors['total'] = RequiredFieldError("El total es requerido")

    if state.subtotal.is_negative():
        errors['subtotal'] = InvalidRangeError("El subtotal no puede ser negativo")

    if state.tipo_pago == TipoPago.RECURRENTE:
        if state.periodicidad_valor is None:
            errors['periodicidad_valor'] = RequiredFieldError(
                "El valor de periodicidad es requerido"
            )
        elif state.periodicidad_valor < 1:
            errors['periodicidad_valor'] = InvalidRangeError(
                "El valor de periodicidad debe ser al menos 1"
            )
        if state.periodicidad_unidad is None:
            errors['periodicidad_unidad'] = RequiredFieldError(
                "La unidad de periodicidad es requerida"
            )

    if state.tipo_pago == TipoPago.CUOTAS:
        if state.numero_cuotas is None:
            errors['numero_cuotas'] = RequiredFieldError("El número de cuotas es requerido")
        elif state.numero_cuotas < 1:
            errors['numero_cuotas'] = InvalidRangeError(
                "El número de cuotas debe ser al menos 1"
            )

    if errors:
        raise PlanValidationError(errors)


def default_edited_field(state):
    """Without a hint, subtotal wins when set; otherwise total drives"""
    if state.subtotal.is_positive():
        return EditedField.SUBTOTAL
    return EditedField.TOTAL


def authoritative_state(state, tax_rate, edited=None):
    """
    What the server stores: derive from the edited field, drop the groups
    the plan type does not use, then validate.
    """
    edited = EditedField.parse(edited) or default_edited_field(state)
    state = normalize_groups(state)
    state = derive(state, edited, tax_rate)
    validate_plan(state)
    return state
