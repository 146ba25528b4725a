# tests/test_derivation.py

import pytest
from dataclasses import replace
from decimal import Decimal

from core.exceptions import InvalidRangeError, PlanValidationError
from core.money import Money
from planes.derivation import (
    EditedField,
    PeriodicidadUnidad,
    PlanState,
    TipoPago,
    authoritative_state,
    default_edited_field,
    derive,
    switch_tipo_pago,
    validate_plan,
)

IVA = Decimal("0.13")


def m(value):
    return Money.round(value)


@pytest.fixture
def cuotas_state():
    return PlanState(
        tipo_pago=TipoPago.CUOTAS,
        subtotal=m("100.00"),
        numero_cuotas=3,
        nombre="Diplomado",
        impuesto_id="imp-1",
        moneda_id="mon-1",
    )


def test_subtotal_drives_total_and_cuota_finals(cuotas_state):
    derived = derive(cuotas_state, EditedField.SUBTOTAL, IVA)

    assert derived.total == m("113.00")
    assert derived.subtotal_final == m("300.00")
    assert derived.total_final == m("339.00")
    # input is untouched
    assert cuotas_state.total == Money.zero()


def test_total_drives_subtotal():
    state = PlanState(total=m("113.00"))
    derived = derive(state, EditedField.TOTAL, IVA)

    assert derived.subtotal == m("100.00")
    assert derived.subtotal_final is None


def test_total_final_drives_unit_amounts(cuotas_state):
    state = replace(cuotas_state, total_final=m("339.00"))
    derived = derive(state, EditedField.TOTAL_FINAL, IVA)

    assert derived.total == m("113.00")
    assert derived.subtotal == m("100.00")
    assert derived.subtotal_final == m("300.00")


def test_subtotal_final_drives_unit_amounts(cuotas_state):
    state = replace(cuotas_state, subtotal=Money.zero(), subtotal_final=m("300.00"))
    derived = derive(state, EditedField.SUBTOTAL_FINAL, IVA)

    assert derived.subtotal == m("100.00")
    assert derived.total == m("113.00")
    assert derived.total_final == m("339.00")


def test_numero_cuotas_rescales_finals(cuotas_state):
    state = replace(derive(cuotas_state, EditedField.SUBTOTAL, IVA), numero_cuotas=4)
    derived = derive(state, EditedField.NUMERO_CUOTAS, IVA)

    assert derived.subtotal_final == m("400.00")
    assert derived.total_final == m("452.00")
    assert derived.total == m("113.00")


def test_tax_change_rederives_from_subtotal_then_total():
    with_subtotal = PlanState(subtotal=m("100.00"), total=m("113.00"))
    assert derive(with_subtotal, EditedField.TAX_RATE_CHANGED, Decimal("0.05")).total == m("105.00")

    with_total = PlanState(total=m("105.00"))
    assert derive(with_total, EditedField.TAX_RATE_CHANGED, Decimal("0.05")).subtotal == m("100.00")

    empty = PlanState()
    assert derive(empty, EditedField.TAX_RATE_CHANGED, IVA) == empty


@pytest.mark.parametrize("edited", [
    EditedField.SUBTOTAL_FINAL,
    EditedField.TOTAL_FINAL,
    EditedField.NUMERO_CUOTAS,
])
def test_cuota_edits_are_noops_without_usable_cuotas(edited):
    unico = PlanState(subtotal=m("100.00"), total=m("113.00"), subtotal_final=m("1.00"), total_final=m("1.00"))
    assert derive(unico, edited, IVA) == unico

    sin_cuotas = replace(unico, tipo_pago=TipoPago.CUOTAS, numero_cuotas=0)
    assert derive(sin_cuotas, edited, IVA) == sin_cuotas


@pytest.mark.parametrize("subtotal", ["0.01", "10.07", "99.99", "123.45", "1000.01", "7777.77"])
@pytest.mark.parametrize("rate", ["0.13", "0.16", "0.07", "0"])
def test_subtotal_total_round_trip_within_one_cent(subtotal, rate):
    forward = derive(PlanState(subtotal=m(subtotal)), EditedField.SUBTOTAL, Decimal(rate))
    back = derive(replace(forward, subtotal=Money.zero()), EditedField.TOTAL, Decimal(rate))

    assert forward.total == m(subtotal).multiply_by_rate(Decimal(rate))
    assert abs(back.subtotal.cents - m(subtotal).cents) <= 1


def test_float_rate_is_rejected():
    with pytest.raises(InvalidRangeError):
        derive(PlanState(subtotal=m("1")), EditedField.SUBTOTAL, 0.13)


def test_negative_rate_is_rejected():
    with pytest.raises(InvalidRangeError):
        derive(PlanState(subtotal=m("1")), EditedField.SUBTOTAL, Decimal("-0.5"))


def test_edited_field_parse():
    assert EditedField.parse("subtotalFinal") is EditedField.SUBTOTAL_FINAL
    assert EditedField.parse("TOTAL_FINAL") is EditedField.TOTAL_FINAL
    assert EditedField.parse(EditedField.TOTAL) is EditedField.TOTAL
    assert EditedField.parse("") is None
    with pytest.raises(InvalidRangeError):
        EditedField.parse("precio")


def test_switch_away_from_cuotas_clears_cuota_group(cuotas_state):
    derived = derive(cuotas_state, EditedField.SUBTOTAL, IVA)
    switched = switch_tipo_pago(derived, TipoPago.UNICO)

    assert switched.tipo_pago == TipoPago.UNICO
    assert switched.numero_cuotas is None
    assert switched.subtotal_final is None
    assert switched.total_final is None
    assert switched.total == m("113.00")


def test_switch_to_cuotas_computes_finals():
    state = PlanState(
        subtotal=m("100.00"),
        total=m("113.00"),
        numero_cuotas=2,
        periodicidad_valor=1,
        periodicidad_unidad=PeriodicidadUnidad.MESES,
    )
    switched = switch_tipo_pago(state, 3)

    assert switched.subtotal_final == m("200.00")
    assert switched.total_final == m("226.00")
    assert switched.periodicidad_valor is None
    assert switched.periodicidad_unidad is None


def test_switch_to_unknown_type():
    with pytest.raises(InvalidRangeError):
        switch_tipo_pago(PlanState(), 9)


def test_validate_reports_every_field():
    with pytest.raises(PlanValidationError) as exc_info:
        validate_plan(PlanState(tipo_pago=TipoPago.RECURRENTE))

    errors = exc_info.value.message_dict
    assert set(errors) == {
        "nombre", "moneda", "impuesto", "total",
        "periodicidad_valor", "periodicidad_unidad",
    }


def test_validate_limits():
    base = PlanState(
        tipo_pago=TipoPago.CUOTAS,
        total=m("10"),
        numero_cuotas=0,
        nombre="x" * 151,
        impuesto_id="imp-1",
        moneda_id="mon-1",
    )
    with pytest.raises(PlanValidationError) as exc_info:
        validate_plan(base)

    assert set(exc_info.value.message_dict) == {"nombre", "numero_cuotas"}

    validate_plan(replace(base, nombre="Plan", numero_cuotas=1))


def test_authoritative_state_normalizes_and_derives(cuotas_state):
    stale = replace(cuotas_state, periodicidad_valor=2, periodicidad_unidad=PeriodicidadUnidad.SEMANAS)
    state = authoritative_state(stale, IVA)

    assert state.periodicidad_valor is None
    assert state.total == m("113.00")
    assert state.total_final == m("339.00")


def test_default_edited_field():
    assert default_edited_field(PlanState(subtotal=m("1"))) is EditedField.SUBTOTAL
    assert default_edited_field(PlanState(total=m("1"))) is EditedField.TOTAL
