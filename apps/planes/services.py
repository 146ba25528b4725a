# planes/services.py

"""
Plan operations.

The server never trusts client-computed amounts: every create/update re-runs
the derivation from the field the user edited and validates the result
before saving. Plans already used by invoices keep their monetary and
cadence fields frozen.
"""

from dataclasses import replace
from django.db import transaction
from django.db.models import ProtectedError
import logging

from core.exceptions import InvalidStateError
from planes.derivation import (
    EditedField, authoritative_state, derive, normalize_groups, validate_plan,
)
from planes.models import PlanPago
from utils.models import FinancialAuditLog

logger = logging.getLogger(__name__)

# Amount fields in the order they are checked when guessing the edited field
AMOUNT_EDIT_ORDER = (
    ('subtotal', EditedField.SUBTOTAL),
    ('total', EditedField.TOTAL),
    ('subtotal_final', EditedField.SUBTOTAL_FINAL),
    ('total_final', EditedField.TOTAL_FINAL),
    ('numero_cuotas', EditedField.NUMERO_CUOTAS),
    ('impuesto_id', EditedField.TAX_RATE_CHANGED),
)


def infer_edited_field(current, new):
    """First amount field that differs between two states, or None"""
    for name, edited in AMOUNT_EDIT_ORDER:
        if getattr(current, name) != getattr(new, name):
            return edited
    return None


def changed_frozen_fields(current, new):
    """Names of frozen fields whose value differs between two states"""
    names = []
    for name in PlanPago.FROZEN_FIELDS:
        if getattr(current, name) != getattr(new, name):
            names.append(name)
    return names


class PlanPagoService:
    """Create, update, delete and preview payment plans"""

    @staticmethod
    @transaction.atomic
    def create_plan(state, tax_rate, edited=None):
        """
        Derive, validate and persist a new plan.

        Args:
            state: PlanState built from the request
            tax_rate: Decimal rate of the selected impuesto (0.13 for 13%)
            edited: EditedField hint (defaults to subtotal, else total)

        Returns:
            PlanPago instance

        Raises:
            PlanValidationError: one entry per invalid field
        """
        state = authoritative_state(state, tax_rate, edited)
        plan = PlanPago().apply_state(state)
        plan.save()

        FinancialAuditLog.log_financial_action(
            action='PLAN_CREATE',
            target_object=plan,
            amount=plan.total,
            new_values=plan.snapshot(),
            currency=plan.moneda.codigo,
        )
        logger.info(f"Created plan de pago {plan.pk} '{plan.nombre}' total={plan.total}")
        return plan

    @staticmethod
    @transaction.atomic
    def update_plan(plan, state, tax_rate, edited=None):
        """
        Apply an edited PlanState to an existing plan.

        Without an explicit hint the edited field is inferred from what
        changed. When no amount changed, a plan type switch included, the
        stored amounts are kept as they are instead of being re-derived.

        Raises:
            InvalidStateError: a frozen field changed on a plan in use
            PlanValidationError: invalid result
        """
        plan = PlanPago.objects.select_for_update().get(pk=plan.pk)
        current = plan.to_state()
        old_values = plan.snapshot()

        if plan.is_referenced():
            changed = changed_frozen_fields(current, normalize_groups(state))
            if changed:
                logger.warning(
                    f"Rejected update of plan {plan.pk}: frozen fields {changed} changed "
                    f"while invoices reference it"
                )
                raise InvalidStateError(
                    "El plan de pago tiene pagos generados; solo se pueden modificar "
                    "nombre, descripción y estado activo"
                )
            # Editable fields only; amounts stay exactly as billed
            state = replace(
                current,
                nombre=state.nombre,
                descripcion=state.descripcion,
                activo=state.activo,
            )
            validate_plan(state)
        else:
            edited = EditedField.parse(edited) or infer_edited_field(current, state)
            if edited is None:
                state = normalize_groups(state)
                validate_plan(state)
            else:
                state = authoritative_state(state, tax_rate, edited)

        plan.apply_state(state)
        plan.save()

        FinancialAuditLog.log_financial_action(
            action='PLAN_UPDATE',
            target_object=plan,
            amount=plan.total,
            old_values=old_values,
            new_values=plan.snapshot(),
            currency=plan.moneda.codigo,
        )
        logger.info(f"Updated plan de pago {plan.pk} '{plan.nombre}'")
        return plan

    @staticmethod
    @transaction.atomic
    def delete_plan(plan):
        """
        Raises:
            InvalidStateError: invoices were generated from the plan
        """
        if plan.is_referenced():
            raise InvalidStateError(
                "No se puede eliminar un plan de pago con pagos generados; desactívelo"
            )

        old_values = plan.snapshot()
        description = str(plan)
        plan_id = plan.pk
        try:
            plan.delete()
        except ProtectedError:
            raise InvalidStateError(
                "No se puede eliminar un plan de pago con pagos generados; desactívelo"
            )

        FinancialAuditLog.log_financial_action(
            action='PLAN_DELETE',
            old_values=old_values,
            notes=f"Deleted plan {plan_id}: {description}",
            risk_level='MEDIUM',
        )
        logger.info(f"Deleted plan de pago {plan_id} '{description}'")

    @staticmethod
    def preview(state, tax_rate, edited):
        """Advisory derivation for the editor; nothing is validated or saved"""
        state = normalize_groups(state)
        return derive(state, edited, tax_rate)
