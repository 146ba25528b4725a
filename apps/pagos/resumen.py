# pagos/resumen.py

"""
Read-only projections of an invoice's ledger.

build_resumen turns an invoice and its abonos into a ResumenAbonos value;
historical_balance and build_recibo replay that value to show the balance
as it stood right after a given abono, which is what a reprinted receipt
needs. None of these functions touch the database.
"""

from dataclasses import dataclass
import logging

from core.exceptions import NotFoundError
from core.money import Money, percent_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AbonoEntry:
    id: str
    monto: Money
    metodo_pago: str
    fecha_abono: object
    referencia: str = None
    nota: str = None
    usuario_id: str = None
    numero_recibo: str = None

    @classmethod
    def from_abono(cls, abono):
        return cls(
            id=str(abono.pk),
            monto=Money.from_decimal(abono.monto),
            metodo_pago=abono.metodo_pago,
            fecha_abono=abono.fecha_abono,
            referencia=abono.referencia,
            nota=abono.nota,
            usuario_id=abono.usuario_id,
            numero_recibo=abono.numero_recibo,
        )


@dataclass(frozen=True)
class ResumenAbonos:
    """Balance summary of one invoice; abonos in chronological order"""

    matricula_pago_id: str
    total_pago: Money
    abonos: tuple = ()

    @property
    def total_abonado(self):
        return Money.sum(entry.monto for entry in self.abonos)

    @property
    def saldo_pendiente(self):
        return self.total_pago - self.total_abonado


def build_resumen(pago, abonos):
    """
    Args:
        pago: MatriculaPago
        abonos: its Abono rows, in any order

    Returns:
        ResumenAbonos with entries sorted by fecha_abono (stable for ties)
    """
    entries = sorted(
        (AbonoEntry.from_abono(abono) for abono in abonos),
        key=lambda entry: entry.fecha_abono,
    )
    return ResumenAbonos(
        matricula_pago_id=str(pago.pk),
        total_pago=Money.from_decimal(pago.total),
        abonos=tuple(entries),
    )


def _replay_until(resumen, abono_id):
    """Running total of abonos up to and including abono_id"""
    abono_id = str(abono_id)
    running = Money.zero()
    for entry in resumen.abonos:
        running = running + entry.monto
        if entry.id == abono_id:
            return entry, running
    raise NotFoundError(f"El abono {abono_id} no pertenece a este pago")


def historical_balance(resumen, abono_id):
    """Saldo pendiente right after abono_id was applied"""
    _, running = _replay_until(resumen, abono_id)
    return resumen.total_pago - running


def build_recibo(pago, resumen, abono_id):
    """
    Receipt payload for one abono, with balances as of that abono.

    A stored subtotal of zero means the invoice carries no tax breakdown;
    the total is shown as subtotal and the tax as zero.
    """
    entry, abonado = _replay_until(resumen, abono_id)

    subtotal = Money.from_decimal(pago.subtotal)
    if subtotal.is_zero():
        subtotal = resumen.total_pago
    impuesto_monto = resumen.total_pago - subtotal

    plan = getattr(pago, 'plan_pago', None)

    return {
        'abonoId': entry.id,
        'numeroRecibo': entry.numero_recibo,
        'monto': entry.monto,
        'metodoPago': entry.metodo_pago,
        'fechaAbono': entry.fecha_abono,
        'referencia': entry.referencia,
        'nota': entry.nota,
        'usuarioId': entry.usuario_id,
        'pagoId': str(pago.pk),
        'matriculaId': pago.matricula_id,
        'numeroPago': pago.numero_pago,
        'planPagoNombre': plan.nombre if plan is not None else None,
        'subtotal': subtotal,
        'impuestoPorcentaje': percent_of(impuesto_monto, subtotal),
        'impuestoMonto': impuesto_monto,
        'totalPago': resumen.total_pago,
        'totalAbonado': abonado,
        'saldoPendiente': resumen.total_pago - abonado,
    }
