# tests/conftest.py

import json
import pytest
from datetime import date, timedelta
from decimal import Decimal

from core.models import Impuesto, Moneda
from pagos.models import MatriculaPago
from planes.derivation import TipoPago
from planes.models import PlanPago


@pytest.fixture
def impuesto(db):
    return Impuesto.objects.create(
        nombre="IVA 13%",
        codigo="IVA13",
        tasa=Decimal("13.00"),
    )


@pytest.fixture
def impuesto_exento(db):
    return Impuesto.objects.create(
        nombre="Exento",
        codigo="EXENTO",
        tasa=Decimal("0.00"),
        es_exento=True,
    )


@pytest.fixture
def moneda(db):
    return Moneda.objects.create(codigo="USD", nombre="US Dollar", simbolo="$")


@pytest.fixture
def plan(impuesto, moneda):
    return PlanPago.objects.create(
        nombre="Mensualidad Inglés",
        tipo_pago=TipoPago.UNICO.value,
        moneda=moneda,
        impuesto=impuesto,
        subtotal=Decimal("100.00"),
        total=Decimal("113.00"),
    )


@pytest.fixture
def crear_pago(db):
    """Factory for invoices; defaults to a 113.00 invoice due in 30 days"""

    def _crear(matricula_id="MAT-001", numero_pago=1, total="113.00", subtotal="100.00",
               plan_pago=None, estado=MatriculaPago.PENDIENTE, fecha_vencimiento=None):
        return MatriculaPago.objects.create(
            matricula_id=matricula_id,
            numero_pago=numero_pago,
            plan_pago=plan_pago,
            subtotal=Decimal(subtotal),
            total=Decimal(total),
            estado=estado,
            fecha_vencimiento=fecha_vencimiento or date.today() + timedelta(days=30),
        )

    return _crear


@pytest.fixture
def pago(plan, crear_pago):
    return crear_pago(plan_pago=plan)


@pytest.fixture
def api(client):
    """Django test client speaking JSON"""

    class JsonClient:
        def get(self, path, **params):
            return client.get(path, params)

        def post(self, path, data=None):
            return client.post(path, json.dumps(data or {}), content_type="application/json")

        def put(self, path, data=None):
            return client.put(path, json.dumps(data or {}), content_type="application/json")

        def delete(self, path):
            return client.delete(path)

    return JsonClient()
