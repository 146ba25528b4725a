# pagos/services.py

"""
Invoice ledger operations

LedgerService applies and removes abonos; InvoiceService covers the invoice
lifecycle around it (creation by billing, cancellation, overdue marking).

Every write locks the invoice row with select_for_update inside
transaction.atomic and re-reads the balance from the Abono table after the
lock is held, so concurrent abonos on the same invoice are serialized and
can never jointly overdraw it.
"""

from django.db import IntegrityError, transaction
from django.core.exceptions import ValidationError
from django.utils import timezone
import logging

from core.exceptions import (
    BalanceExceededError,
    InvalidRangeError,
    InvalidStateError,
    NotFoundError,
    RequiredFieldError,
)
from core.money import Money
from pagos.models import Abono, MatriculaPago
from pagos.resumen import build_recibo, build_resumen
from utils.context import get_context_user_id
from utils.models import FinancialAuditLog

logger = logging.getLogger(__name__)


def _actor_id(actor):
    """User instance, id or None -> id string (falls back to the request user)"""
    if actor is None:
        return get_context_user_id()
    return str(getattr(actor, 'pk', actor))


def _parse_monto(monto):
    try:
        monto = Money.parse(monto)
    except ValueError as e:
        raise InvalidRangeError(f"Monto inválido: {e}")
    if not monto.is_positive():
        raise InvalidRangeError("El monto debe ser mayor a cero")
    return monto


def _get_pago(pago_id, lock=False):
    queryset = MatriculaPago.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=pago_id)
    except (MatriculaPago.DoesNotExist, ValidationError, ValueError):
        raise NotFoundError(f"Pago de matrícula {pago_id} no encontrado")


def _get_abono(abono_id):
    try:
        return Abono.objects.get(pk=abono_id)
    except (Abono.DoesNotExist, ValidationError, ValueError):
        raise NotFoundError(f"Abono {abono_id} no encontrado")


# =============================================================================
# LEDGER SERVICE - ABONOS
# =============================================================================

class LedgerService:
    """
    Partial-payment ledger for one invoice aggregate.

    Invariant after every call: sum(abonos.monto) <= pago.total.
    """

    @staticmethod
    @transaction.atomic
    def apply_abono(pago_id, monto, metodo_pago, referencia=None, nota=None, actor=None, fecha_abono=None):
        """
        Record a partial payment.

        Args:
            pago_id: MatriculaPago id
            monto: amount (Money, Decimal or decimal string), > 0
            metodo_pago: one of Abono.METODO_PAGO_CHOICES
            referencia, nota: optional text
            actor: user (or user id) recording the payment
            fecha_abono: defaults to now

        Returns:
            Abono instance

        Raises:
            InvalidRangeError: monto <= 0 or malformed, unknown metodo_pago
            RequiredFieldError: metodo_pago missing
            NotFoundError: no such invoice
            InvalidStateError: invoice is ANULADO
            BalanceExceededError: monto > saldo pendiente at execution time

        Example:
            abono = LedgerService.apply_abono(pago.id, '50.00', 'Efectivo', actor=request.user)
        """
        monto = _parse_monto(monto)

        if not metodo_pago:
            raise RequiredFieldError("El método de pago es requerido")
        if metodo_pago not in dict(Abono.METODO_PAGO_CHOICES):
            raise InvalidRangeError(f"Método de pago inválido: {metodo_pago}")

        pago = _get_pago(pago_id, lock=True)

        if pago.is_anulado:
            logger.warning(f"Rejected abono of {monto} on cancelled invoice {pago.pk}")
            raise InvalidStateError("No se pueden registrar abonos en un pago anulado")

        # Balance from the persisted ledger, read under the row lock
        saldo = pago.get_saldo_pendiente()
        if monto > saldo:
            logger.warning(f"Rejected abono of {monto} on invoice {pago.pk}: saldo pendiente is {saldo}")
            raise BalanceExceededError(
                f"El monto ({monto}) excede el saldo pendiente ({saldo})"
            )

        usuario_id = _actor_id(actor)
        abono = Abono(
            matricula_pago=pago,
            monto=monto.to_decimal(),
            metodo_pago=metodo_pago,
            referencia=referencia or None,
            nota=nota or None,
            usuario_id=usuario_id,
        )
        if fecha_abono is not None:
            abono.fecha_abono = fecha_abono
        abono.save()

        nuevo_saldo = saldo - monto
        old_estado = pago.estado
        if nuevo_saldo.is_zero():
            pago.estado = MatriculaPago.PAGADO
            pago.save(update_fields=['estado'])

        FinancialAuditLog.log_financial_action(
            action='ABONO_APPLY',
            user_id=usuario_id,
            target_object=abono,
            amount=monto,
            old_values={'saldo_pendiente': str(saldo), 'estado': old_estado},
            new_values={'saldo_pendiente': str(nuevo_saldo), 'estado': pago.estado},
        )
        logger.info(
            f"Applied abono {abono.numero_recibo} of {monto} to invoice {pago.pk}: "
            f"saldo {saldo} -> {nuevo_saldo}"
        )
        return abono

    @staticmethod
    @transaction.atomic
    def remove_abono(abono_id, actor=None):
        """
        Delete an abono and reopen its invoice if it was fully paid.

        PAGADO -> PENDIENTE when the saldo becomes positive again; any other
        estado (including ANULADO) is left as it is.

        Raises:
            NotFoundError: no such abono
        """
        abono = _get_abono(abono_id)
        pago = _get_pago(abono.matricula_pago_id, lock=True)

        # Another request may have removed it while we waited for the lock
        if not Abono.objects.filter(pk=abono.pk).exists():
            raise NotFoundError(f"Abono {abono_id} no encontrado")

        monto = abono.monto_money
        saldo_anterior = pago.get_saldo_pendiente()
        old_estado = pago.estado
        description = str(abono)

        abono.delete()

        saldo = pago.get_saldo_pendiente()
        if pago.estado == MatriculaPago.PAGADO and saldo.is_positive():
            pago.estado = MatriculaPago.PENDIENTE
            pago.save(update_fields=['estado'])

        usuario_id = _actor_id(actor)
        FinancialAuditLog.log_financial_action(
            action='ABONO_REMOVE',
            user_id=usuario_id,
            target_object=pago,
            amount=monto,
            old_values={'saldo_pendiente': str(saldo_anterior), 'estado': old_estado},
            new_values={'saldo_pendiente': str(saldo), 'estado': pago.estado},
            risk_level='MEDIUM',
            notes=f"Removed {description}",
        )
        logger.info(
            f"Removed abono {abono_id} ({monto}) from invoice {pago.pk}: "
            f"saldo {saldo_anterior} -> {saldo}"
        )

    @staticmethod
    def get_resumen(pago_id):
        """Lock-free read of an invoice's balance summary"""
        pago = _get_pago(pago_id)
        return build_resumen(pago, pago.abonos.all())

    @staticmethod
    def get_recibo(abono_id):
        """Receipt payload for an abono, with the balance as of that abono"""
        abono = _get_abono(abono_id)
        pago = MatriculaPago.objects.select_related('plan_pago').get(pk=abono.matricula_pago_id)
        resumen = build_resumen(pago, pago.abonos.all())
        return build_recibo(pago, resumen, abono.pk)


# =============================================================================
# INVOICE SERVICE - LIFECYCLE
# =============================================================================

class InvoiceService:
    """
    Invoice lifecycle outside the ledger.
    Enrollment billing creates invoices; staff cancel them; a scheduled
    command marks them overdue.
    """

    @staticmethod
    @transaction.atomic
    def create_invoice(invoice_data):
        """
        Create a PENDIENTE invoice.

        Args:
            invoice_data (dict):
                Required:
                    - matricula_id: str
                    - numero_pago: int >= 1
                    - total: amount > 0 (or taken from plan_pago)
                Optional:
                    - plan_pago: PlanPago (amounts default to the plan's)
                    - subtotal: amount, defaults to total
                    - fecha_vencimiento: date

        Returns:
            MatriculaPago instance

        Raises:
            RequiredFieldError, InvalidRangeError, InvalidStateError
        """
        plan = invoice_data.get('plan_pago')
        matricula_id = str(invoice_data.get('matricula_id') or '').strip()
        numero_pago = invoice_data.get('numero_pago')

        if not matricula_id:
            raise RequiredFieldError("La matrícula es requerida")
        if numero_pago is None:
            raise RequiredFieldError("El número de pago es requerido")
        if numero_pago < 1:
            raise InvalidRangeError("El número de pago debe ser al menos 1")

        if plan is not None and not plan.activo:
            raise InvalidStateError("El plan de pago está inactivo")

        total = invoice_data.get('total')
        subtotal = invoice_data.get('subtotal')
        if total is None and plan is not None:
            total = plan.total
            if subtotal is None:
                subtotal = plan.subtotal
        if total is None:
            raise RequiredFieldError("El total es requerido")

        total = _parse_monto(total)
        try:
            subtotal = Money.parse(subtotal) if subtotal is not None else total
        except ValueError as e:
            raise InvalidRangeError(f"Subtotal inválido: {e}")
        if subtotal.is_negative() or subtotal > total:
            raise InvalidRangeError("El subtotal debe estar entre 0 y el total")

        if MatriculaPago.objects.filter(matricula_id=matricula_id, numero_pago=numero_pago).exists():
            raise InvalidStateError(
                f"Ya existe el pago #{numero_pago} para la matrícula {matricula_id}"
            )

        try:
            with transaction.atomic():
                pago = MatriculaPago.objects.create(
                    matricula_id=matricula_id,
                    plan_pago=plan,
                    numero_pago=numero_pago,
                    subtotal=subtotal.to_decimal(),
                    total=total.to_decimal(),
                    fecha_vencimiento=invoice_data.get('fecha_vencimiento'),
                    estado=MatriculaPago.PENDIENTE,
                )
        except IntegrityError:
            raise InvalidStateError(
                f"Ya existe el pago #{numero_pago} para la matrícula {matricula_id}"
            )

        FinancialAuditLog.log_financial_action(
            action='INVOICE_CREATE',
            target_object=pago,
            amount=total,
            new_values={'total': str(total), 'subtotal': str(subtotal), 'numero_pago': numero_pago},
            currency=plan.moneda.codigo if plan is not None else None,
        )
        logger.info(f"Created invoice {pago.pk} for matricula {matricula_id} #{numero_pago}: {total}")
        return pago

    @staticmethod
    @transaction.atomic
    def anular(pago_id, motivo, actor=None):
        """
        Cancel an invoice. Terminal: the ledger rejects new abonos afterwards.

        Raises:
            RequiredFieldError: no motivo
            InvalidStateError: already ANULADO
        """
        motivo = (motivo or '').strip()
        if not motivo:
            raise RequiredFieldError("El motivo de anulación es requerido")

        pago = _get_pago(pago_id, lock=True)
        if pago.is_anulado:
            raise InvalidStateError("El pago ya está anulado")

        old_estado = pago.estado
        pago.estado = MatriculaPago.ANULADO
        pago.fecha_anulacion = timezone.now()
        pago.motivo_anulacion = motivo
        pago.set_change_reason(motivo)
        pago.save(update_fields=['estado', 'fecha_anulacion', 'motivo_anulacion', 'change_reason'])

        FinancialAuditLog.log_financial_action(
            action='INVOICE_CANCEL',
            user_id=_actor_id(actor),
            target_object=pago,
            amount=pago.total,
            old_values={'estado': old_estado},
            new_values={'estado': pago.estado, 'motivo': motivo},
            risk_level='HIGH',
        )
        logger.warning(f"Cancelled invoice {pago.pk}: {motivo} (by {_actor_id(actor) or 'System'})")
        return pago

    @staticmethod
    def mark_overdue(as_of=None):
        """
        PENDIENTE invoices whose fecha_vencimiento is before as_of -> VENCIDO.
        Called by the marcar_vencidos management command.

        Returns:
            int: Number of invoices marked as overdue
        """
        as_of = as_of or timezone.localdate()

        candidates = MatriculaPago.objects.filter(
            estado=MatriculaPago.PENDIENTE,
            fecha_vencimiento__lt=as_of,
        ).values_list('pk', flat=True)

        count = 0
        for pago_id in list(candidates):
            with transaction.atomic():
                pago = MatriculaPago.objects.select_for_update().get(pk=pago_id)
                # Re-check under the lock: an abono may have paid it meanwhile
                if pago.estado != MatriculaPago.PENDIENTE:
                    continue
                pago.estado = MatriculaPago.VENCIDO
                pago.save(update_fields=['estado'])

                FinancialAuditLog.log_financial_action(
                    action='INVOICE_OVERDUE',
                    target_object=pago,
                    amount=pago.get_saldo_pendiente(),
                    old_values={'estado': MatriculaPago.PENDIENTE},
                    new_values={'estado': MatriculaPago.VENCIDO},
                    is_automated=True,
                    notes=f"Vencido desde {pago.fecha_vencimiento}",
                )
            count += 1

        logger.info(f"Marked {count} invoices as overdue (as of {as_of})")
        return count
