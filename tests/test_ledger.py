# tests/test_ledger.py

import threading
import uuid
import pytest
from datetime import date, timedelta
from decimal import Decimal

from django.db import connection

from core.exceptions import (
    BalanceExceededError,
    InvalidRangeError,
    InvalidStateError,
    NotFoundError,
    RequiredFieldError,
)
from core.money import Money
from pagos.models import Abono, MatriculaPago
from pagos.services import InvoiceService, LedgerService
from utils.models import FinancialAuditLog


def saldo(pago):
    return MatriculaPago.objects.get(pk=pago.pk).get_saldo_pendiente()


def estado(pago):
    return MatriculaPago.objects.get(pk=pago.pk).estado


# =============================================================================
# APPLY / REMOVE
# =============================================================================

@pytest.mark.django_db
class TestApplyAbono:

    def test_partial_then_full_payment(self, pago):
        LedgerService.apply_abono(pago.id, "50.00", "Efectivo")
        assert saldo(pago) == Money.round("63.00")
        assert estado(pago) == MatriculaPago.PENDIENTE

        LedgerService.apply_abono(pago.id, Decimal("63.00"), "Transferencia")
        assert saldo(pago) == Money.zero()
        assert estado(pago) == MatriculaPago.PAGADO

        with pytest.raises(BalanceExceededError):
            LedgerService.apply_abono(pago.id, "0.01", "Efectivo")
        assert pago.abonos.count() == 2

    def test_overpayment_leaves_ledger_unchanged(self, pago):
        LedgerService.apply_abono(pago.id, "13.00", "Efectivo")

        with pytest.raises(BalanceExceededError):
            LedgerService.apply_abono(pago.id, "100.01", "Efectivo")

        assert pago.abonos.count() == 1
        assert saldo(pago) == Money.round("100.00")
        assert estado(pago) == MatriculaPago.PENDIENTE

    @pytest.mark.parametrize("monto", ["0", "0.00", "-5", "abc", 1.5, None])
    def test_invalid_amounts(self, pago, monto):
        with pytest.raises(InvalidRangeError):
            LedgerService.apply_abono(pago.id, monto, "Efectivo")
        assert pago.abonos.count() == 0

    def test_metodo_pago_is_checked(self, pago):
        with pytest.raises(RequiredFieldError):
            LedgerService.apply_abono(pago.id, "1.00", "")
        with pytest.raises(InvalidRangeError):
            LedgerService.apply_abono(pago.id, "1.00", "Bitcoin")

    def test_unknown_invoice(self, db):
        with pytest.raises(NotFoundError):
            LedgerService.apply_abono(uuid.uuid4(), "1.00", "Efectivo")

    def test_cancelled_invoice_rejects_abonos(self, pago):
        InvoiceService.anular(pago.id, "Baja del alumno")

        with pytest.raises(InvalidStateError):
            LedgerService.apply_abono(pago.id, "1.00", "Efectivo")

    def test_overdue_invoice_can_be_paid_off(self, crear_pago):
        pago = crear_pago(estado=MatriculaPago.VENCIDO)

        LedgerService.apply_abono(pago.id, "113.00", "Cheque")

        assert estado(pago) == MatriculaPago.PAGADO

    def test_receipt_numbers_are_sequential(self, pago, settings):
        settings.RECIBO_PREFIX = "TST"

        first = LedgerService.apply_abono(pago.id, "1.00", "Efectivo")
        second = LedgerService.apply_abono(pago.id, "1.00", "Efectivo")

        assert first.numero_recibo == "TST-000001"
        assert second.numero_recibo == "TST-000002"

    def test_abonos_are_append_only(self, pago):
        abono = LedgerService.apply_abono(pago.id, "10.00", "Efectivo")
        abono.nota = "corregido"

        with pytest.raises(InvalidStateError):
            abono.save()

    def test_audit_entry_is_written(self, pago):
        abono = LedgerService.apply_abono(pago.id, "50.00", "Efectivo", actor="42")

        entry = FinancialAuditLog.objects.get(action="ABONO_APPLY")
        assert entry.object_id == str(abono.pk)
        assert entry.user_id == "42"
        assert entry.amount_involved == Decimal("50.00")
        assert entry.new_values["saldo_pendiente"] == "63.00"
        assert abono.usuario_id == "42"


@pytest.mark.django_db
class TestRemoveAbono:

    def test_removing_last_abono_reopens_paid_invoice(self, pago):
        abono = LedgerService.apply_abono(pago.id, "113.00", "Efectivo")
        assert estado(pago) == MatriculaPago.PAGADO

        LedgerService.remove_abono(abono.id)

        assert estado(pago) == MatriculaPago.PENDIENTE
        assert saldo(pago) == Money.round("113.00")
        assert not Abono.objects.filter(pk=abono.pk).exists()
        assert FinancialAuditLog.objects.filter(action="ABONO_REMOVE").count() == 1

    def test_cancelled_invoice_stays_cancelled(self, pago):
        abono = LedgerService.apply_abono(pago.id, "20.00", "Efectivo")
        InvoiceService.anular(pago.id, "Error de facturación")

        LedgerService.remove_abono(abono.id)

        assert estado(pago) == MatriculaPago.ANULADO
        assert saldo(pago) == Money.round("113.00")

    def test_unknown_abono(self, db):
        with pytest.raises(NotFoundError):
            LedgerService.remove_abono(uuid.uuid4())


@pytest.mark.django_db
def test_resumen_and_recibo(pago):
    first = LedgerService.apply_abono(pago.id, "50.00", "Efectivo")
    LedgerService.apply_abono(pago.id, "40.00", "Efectivo")

    resumen = LedgerService.get_resumen(pago.id)
    assert resumen.total_abonado == Money.round("90.00")
    assert resumen.saldo_pendiente == Money.round("23.00")

    recibo = LedgerService.get_recibo(first.id)
    assert recibo["saldoPendiente"] == Money.round("63.00")
    assert recibo["numeroRecibo"] == first.numero_recibo
    assert recibo["planPagoNombre"] == pago.plan_pago.nombre


# =============================================================================
# CONCURRENCY
# =============================================================================

@pytest.mark.django_db(transaction=True)
def test_concurrent_abonos_cannot_overdraw(pago):
    barrier = threading.Barrier(2)
    results = []

    def pay():
        try:
            barrier.wait()
            LedgerService.apply_abono(pago.id, "80.00", "Efectivo")
            results.append("ok")
        except BalanceExceededError:
            results.append("rejected")
        except Exception as e:
            results.append(f"{type(e).__name__}: {e}")
        finally:
            connection.close()

    threads = [threading.Thread(target=pay) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(results) == ["ok", "rejected"]
    assert saldo(pago) == Money.round("33.00")


# =============================================================================
# INVOICE LIFECYCLE
# =============================================================================

@pytest.mark.django_db
class TestInvoiceService:

    def test_create_from_plan_copies_amounts(self, plan):
        pago = InvoiceService.create_invoice({"matricula_id": "MAT-9", "numero_pago": 1, "plan_pago": plan})

        assert pago.total == Decimal("113.00")
        assert pago.subtotal == Decimal("100.00")
        assert pago.estado == MatriculaPago.PENDIENTE
        assert FinancialAuditLog.objects.filter(action="INVOICE_CREATE").count() == 1

    def test_explicit_total_defaults_subtotal(self, db):
        pago = InvoiceService.create_invoice({"matricula_id": "MAT-9", "numero_pago": 1, "total": "80.00"})

        assert pago.subtotal == Decimal("80.00")

    def test_numero_pago_is_unique_per_matricula(self, plan):
        data = {"matricula_id": "MAT-9", "numero_pago": 1, "plan_pago": plan}
        InvoiceService.create_invoice(data)

        with pytest.raises(InvalidStateError):
            InvoiceService.create_invoice(data)

        InvoiceService.create_invoice({**data, "matricula_id": "MAT-10"})

    def test_rejects_inactive_plan(self, plan):
        plan.activo = False
        plan.save()

        with pytest.raises(InvalidStateError):
            InvoiceService.create_invoice({"matricula_id": "MAT-9", "numero_pago": 1, "plan_pago": plan})

    @pytest.mark.parametrize("data, error", [
        ({"numero_pago": 1, "total": "10"}, RequiredFieldError),
        ({"matricula_id": "MAT-9", "total": "10"}, RequiredFieldError),
        ({"matricula_id": "MAT-9", "numero_pago": 0, "total": "10"}, InvalidRangeError),
        ({"matricula_id": "MAT-9", "numero_pago": 1}, RequiredFieldError),
        ({"matricula_id": "MAT-9", "numero_pago": 1, "total": "0"}, InvalidRangeError),
        ({"matricula_id": "MAT-9", "numero_pago": 1, "total": "10", "subtotal": "11"}, InvalidRangeError),
    ])
    def test_validation(self, db, data, error):
        with pytest.raises(error):
            InvoiceService.create_invoice(data)

    def test_anular(self, pago):
        with pytest.raises(RequiredFieldError):
            InvoiceService.anular(pago.id, "  ")

        anulado = InvoiceService.anular(pago.id, "Baja del alumno", actor="5")
        assert anulado.estado == MatriculaPago.ANULADO
        assert anulado.fecha_anulacion is not None
        assert anulado.motivo_anulacion == "Baja del alumno"

        entry = FinancialAuditLog.objects.get(action="INVOICE_CANCEL")
        assert entry.risk_level == "HIGH"
        assert entry.user_id == "5"

        with pytest.raises(InvalidStateError):
            InvoiceService.anular(pago.id, "otra vez")

    def test_mark_overdue(self, crear_pago):
        today = date(2024, 6, 15)
        vencido = crear_pago(numero_pago=1, fecha_vencimiento=today - timedelta(days=1))
        al_dia = crear_pago(numero_pago=2, fecha_vencimiento=today)
        pagado = crear_pago(numero_pago=3, fecha_vencimiento=today - timedelta(days=5),
                            estado=MatriculaPago.PAGADO)

        assert InvoiceService.mark_overdue(today) == 1

        assert estado(vencido) == MatriculaPago.VENCIDO
        assert estado(al_dia) == MatriculaPago.PENDIENTE
        assert estado(pagado) == MatriculaPago.PAGADO
        assert FinancialAuditLog.objects.get(action="INVOICE_OVERDUE").is_automated

        # Already VENCIDO invoices are not counted twice
        assert InvoiceService.mark_overdue(today) == 0
