# utils/context.py

"""
Per-thread audit context.

AuditContextMiddleware records who is calling and from where for the
duration of a request. BaseModel.save() and FinancialAuditLog read it back,
so services only pass an explicit actor when they act on someone's behalf.
Management commands open their own scope with `audit_context()`.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from threading import local

logger = logging.getLogger(__name__)

_state = local()


@dataclass(frozen=True)
class AuditContext:
    actor_id: str = None
    ip_address: str = None
    user_agent: str = ''
    source: str = ''
    automated: bool = False


def context_from_request(request):
    user = getattr(request, 'user', None)
    actor_id = str(user.pk) if user is not None and user.is_authenticated else None
    return AuditContext(
        actor_id=actor_id,
        ip_address=get_client_ip(request),
        user_agent=request.META.get('HTTP_USER_AGENT', '')[:512],
        source=f"{request.method} {request.path}",
    )


def set_request_context(context):
    _state.context = context
    logger.debug(f"Audit context set: actor={context.actor_id} ip={context.ip_address}")


def get_request_context():
    """The active AuditContext, or None outside a request or audit_context() block"""
    return getattr(_state, 'context', None)


def get_context_user_id():
    context = get_request_context()
    return context.actor_id if context else None


def clear_request_context():
    if hasattr(_state, 'context'):
        del _state.context


def get_client_ip(request):
    """First address of X-Forwarded-For when proxied, else REMOTE_ADDR"""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


@contextmanager
def audit_context(actor=None, source='', automated=True, **fields):
    """
    Temporarily replace the audit context, restoring the previous one on exit.

        with audit_context(source='marcar_vencidos'):
            InvoiceService.mark_overdue(today)
    """
    previous = get_request_context()
    actor_id = str(getattr(actor, 'pk', actor)) if actor is not None else None
    context = AuditContext(actor_id=actor_id, source=source, automated=automated)
    set_request_context(replace(context, **fields) if fields else context)
    try:
        yield get_request_context()
    finally:
        if previous is None:
            clear_request_context()
        else:
            set_request_context(previous)
