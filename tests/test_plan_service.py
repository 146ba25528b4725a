# tests/test_plan_service.py

import pytest
from dataclasses import replace

from core.exceptions import InvalidStateError, PlanValidationError
from core.money import Money
from planes.derivation import EditedField, PeriodicidadUnidad, PlanState, TipoPago
from planes.models import PlanPago
from planes.services import PlanPagoService, infer_edited_field
from utils.models import FinancialAuditLog


@pytest.fixture
def cuotas_state(impuesto, moneda):
    return PlanState(
        nombre="Diplomado en Redes",
        tipo_pago=TipoPago.CUOTAS,
        subtotal=Money.round("100.00"),
        numero_cuotas=3,
        impuesto_id=impuesto.pk,
        moneda_id=moneda.pk,
    )


@pytest.mark.django_db
class TestCreatePlan:

    def test_server_derives_amounts(self, cuotas_state, impuesto):
        plan = PlanPagoService.create_plan(cuotas_state, impuesto.get_rate())
        plan.refresh_from_db()

        assert plan.total == Money.round("113.00").to_decimal()
        assert plan.subtotal_final == Money.round("300.00").to_decimal()
        assert plan.total_final == Money.round("339.00").to_decimal()
        assert FinancialAuditLog.objects.filter(action="PLAN_CREATE").count() == 1

    def test_client_amounts_are_not_trusted(self, cuotas_state, impuesto):
        tampered = replace(cuotas_state, total=Money.round("1.00"), total_final=Money.round("3.00"))

        plan = PlanPagoService.create_plan(tampered, impuesto.get_rate(), EditedField.SUBTOTAL)

        assert plan.total == Money.round("113.00").to_decimal()
        assert plan.total_final == Money.round("339.00").to_decimal()

    def test_total_only(self, impuesto, moneda):
        state = PlanState(
            nombre="Inscripción",
            total=Money.round("113.00"),
            impuesto_id=impuesto.pk,
            moneda_id=moneda.pk,
        )
        plan = PlanPagoService.create_plan(state, impuesto.get_rate())

        assert plan.subtotal == Money.round("100.00").to_decimal()

    def test_recurrente_keeps_periodicidad_and_drops_cuotas(self, cuotas_state, impuesto):
        state = replace(
            cuotas_state,
            tipo_pago=TipoPago.RECURRENTE,
            periodicidad_valor=1,
            periodicidad_unidad=PeriodicidadUnidad.MESES,
        )
        plan = PlanPagoService.create_plan(state, impuesto.get_rate())

        assert plan.periodicidad_unidad == PeriodicidadUnidad.MESES
        assert plan.numero_cuotas is None
        assert plan.total_final is None

    def test_invalid_plan_is_not_saved(self, impuesto, moneda):
        state = PlanState(total=Money.round("10"), impuesto_id=impuesto.pk, moneda_id=moneda.pk)

        with pytest.raises(PlanValidationError) as exc_info:
            PlanPagoService.create_plan(state, impuesto.get_rate())

        assert "nombre" in exc_info.value.message_dict
        assert not PlanPago.objects.exists()


@pytest.mark.django_db
class TestUpdatePlan:

    def test_edit_total(self, plan, impuesto):
        state = replace(plan.to_state(), total=Money.round("226.00"))

        updated = PlanPagoService.update_plan(plan, state, impuesto.get_rate(), EditedField.TOTAL)

        assert updated.subtotal == Money.round("200.00").to_decimal()
        assert FinancialAuditLog.objects.filter(action="PLAN_UPDATE").count() == 1

    def test_edited_field_is_inferred(self, plan, impuesto):
        state = replace(plan.to_state(), subtotal=Money.round("50.00"))

        updated = PlanPagoService.update_plan(plan, state, impuesto.get_rate())

        assert updated.total == Money.round("56.50").to_decimal()

    def test_name_only_change_keeps_amounts(self, plan, impuesto):
        state = replace(plan.to_state(), nombre="Mensualidad 2025")

        updated = PlanPagoService.update_plan(plan, state, impuesto.get_rate())

        assert updated.nombre == "Mensualidad 2025"
        assert updated.total == plan.total

    def test_switch_to_unico_clears_cuotas(self, cuotas_state, impuesto):
        plan = PlanPagoService.create_plan(cuotas_state, impuesto.get_rate())
        state = replace(plan.to_state(), tipo_pago=TipoPago.UNICO)

        updated = PlanPagoService.update_plan(plan, state, impuesto.get_rate())

        assert updated.numero_cuotas is None
        assert updated.subtotal_final is None
        assert updated.total_final is None
        assert updated.total == Money.round("113.00").to_decimal()

    def test_type_switch_keeps_stored_amounts(self, impuesto, moneda):
        # 1.00 / 1.13 rounds to 0.88, and 0.88 x 1.13 rounds back to 0.99
        state = PlanState(
            nombre="Inscripción",
            total=Money.round("1.00"),
            impuesto_id=impuesto.pk,
            moneda_id=moneda.pk,
        )
        plan = PlanPagoService.create_plan(state, impuesto.get_rate(), EditedField.TOTAL)
        assert plan.subtotal == Money.round("0.88").to_decimal()

        switched = replace(
            plan.to_state(),
            tipo_pago=TipoPago.RECURRENTE,
            periodicidad_valor=1,
            periodicidad_unidad=PeriodicidadUnidad.MESES,
        )
        updated = PlanPagoService.update_plan(plan, switched, impuesto.get_rate())

        assert updated.tipo_pago == TipoPago.RECURRENTE
        assert updated.subtotal == Money.round("0.88").to_decimal()
        assert updated.total == Money.round("1.00").to_decimal()

    def test_referenced_plan_is_frozen(self, plan, pago, impuesto):
        state = replace(plan.to_state(), total=Money.round("200.00"))

        with pytest.raises(InvalidStateError):
            PlanPagoService.update_plan(plan, state, impuesto.get_rate(), EditedField.TOTAL)

        plan.refresh_from_db()
        assert plan.total == Money.round("113.00").to_decimal()

    def test_referenced_plan_allows_descriptive_edits(self, plan, pago, impuesto):
        state = replace(plan.to_state(), nombre="Renombrado", descripcion="Nuevo texto", activo=False)

        updated = PlanPagoService.update_plan(plan, state, impuesto.get_rate())

        assert updated.nombre == "Renombrado"
        assert updated.activo is False
        assert updated.total == plan.total


@pytest.mark.django_db
class TestDeletePlan:

    def test_delete_unreferenced(self, plan):
        PlanPagoService.delete_plan(plan)

        assert not PlanPago.objects.exists()
        assert FinancialAuditLog.objects.filter(action="PLAN_DELETE").count() == 1

    def test_referenced_plan_cannot_be_deleted(self, plan, pago):
        with pytest.raises(InvalidStateError):
            PlanPagoService.delete_plan(plan)

        assert PlanPago.objects.filter(pk=plan.pk).exists()


def test_infer_edited_field():
    current = PlanState(subtotal=Money.round("1"), total=Money.round("2"))

    assert infer_edited_field(current, current) is None
    assert infer_edited_field(current, replace(current, total=Money.round("3"))) is EditedField.TOTAL
    assert infer_edited_field(current, replace(current, impuesto_id="otro")) is EditedField.TAX_RATE_CHANGED
