# tests/test_resumen.py

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from core.exceptions import NotFoundError
from core.money import Money
from pagos.resumen import build_recibo, build_resumen, historical_balance

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def fake_pago(total="113.00", subtotal="100.00", plan_nombre="Mensualidad"):
    return SimpleNamespace(
        pk="pago-1",
        matricula_id="MAT-001",
        numero_pago=2,
        total=Decimal(total),
        subtotal=Decimal(subtotal),
        plan_pago=SimpleNamespace(nombre=plan_nombre) if plan_nombre else None,
    )


def fake_abono(pk, monto, minutes, numero_recibo=None):
    return SimpleNamespace(
        pk=pk,
        monto=Decimal(monto),
        metodo_pago="Efectivo",
        fecha_abono=T0 + timedelta(minutes=minutes),
        referencia=None,
        nota=None,
        usuario_id="7",
        numero_recibo=numero_recibo or f"REC-{pk}",
    )


@pytest.fixture
def resumen():
    # Deliberately out of chronological order
    abonos = [fake_abono("b", "63.00", 30), fake_abono("a", "50.00", 10)]
    return build_resumen(fake_pago(), abonos)


def test_build_resumen_orders_and_totals(resumen):
    assert [entry.id for entry in resumen.abonos] == ["a", "b"]
    assert resumen.total_pago == Money.round("113.00")
    assert resumen.total_abonado == Money.round("113.00")
    assert resumen.saldo_pendiente == Money.zero()


def test_empty_resumen():
    resumen = build_resumen(fake_pago(), [])
    assert resumen.total_abonado == Money.zero()
    assert resumen.saldo_pendiente == Money.round("113.00")


def test_historical_balance_replays_up_to_the_abono(resumen):
    assert historical_balance(resumen, "a") == Money.round("63.00")
    assert historical_balance(resumen, "b") == Money.zero()


def test_historical_balance_unknown_abono(resumen):
    with pytest.raises(NotFoundError):
        historical_balance(resumen, "zzz")


def test_recibo_shows_balance_as_of_abono(resumen):
    recibo = build_recibo(fake_pago(), resumen, "a")

    assert recibo["abonoId"] == "a"
    assert recibo["numeroRecibo"] == "REC-a"
    assert recibo["monto"] == Money.round("50.00")
    assert recibo["totalAbonado"] == Money.round("50.00")
    assert recibo["saldoPendiente"] == Money.round("63.00")
    assert recibo["subtotal"] == Money.round("100.00")
    assert recibo["impuestoMonto"] == Money.round("13.00")
    assert recibo["impuestoPorcentaje"] == Decimal("13.00")
    assert recibo["planPagoNombre"] == "Mensualidad"
    assert recibo["numeroPago"] == 2


def test_recibo_without_tax_breakdown():
    pago = fake_pago(subtotal="0.00", plan_nombre=None)
    resumen = build_resumen(pago, [fake_abono("a", "13.00", 0)])
    recibo = build_recibo(pago, resumen, "a")

    assert recibo["subtotal"] == Money.round("113.00")
    assert recibo["impuestoMonto"] == Money.zero()
    assert recibo["impuestoPorcentaje"] == Decimal("0.00")
    assert recibo["planPagoNombre"] is None
    assert recibo["saldoPendiente"] == Money.round("100.00")
