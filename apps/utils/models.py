# utils/models.py

"""
Base models with audit trail support.

Key Features:
- UUID primary keys for every domain record
- created/updated timestamps set in save()
- User and IP tracking from the thread-local request context
- Financial audit log for ledger and plan operations
"""

from django.db import models, transaction
from django.utils import timezone
from django.contrib.contenttypes.models import ContentType
import uuid
import logging
from decimal import Decimal, InvalidOperation

logger = logging.getLogger(__name__)


# =============================================================================
# BASE MODEL
# =============================================================================

class BaseModel(models.Model):
    """
    Abstract base model with audit trail capabilities.

    Features:
    - Automatic user tracking (who created/updated)
    - IP address tracking (where operations came from)
    - Change reason tracking (why changes were made)

    User and IP come from utils.context, which AuditContextMiddleware fills
    for every request. Outside a request (management commands, tests) the
    fields stay empty unless an audit_context() block is active.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Set in save(); blank so full_clean() before the first save passes
    created_at = models.DateTimeField("Created At", db_index=True, blank=True)
    updated_at = models.DateTimeField("Updated At", db_index=True, blank=True)

    # User tracking - CharField so the auth user table stays decoupled
    created_by_id = models.CharField(
        "Created By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who created this record"
    )
    updated_by_id = models.CharField(
        "Updated By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who last updated this record"
    )

    created_from_ip = models.GenericIPAddressField("Created From IP", null=True, blank=True)
    updated_from_ip = models.GenericIPAddressField("Updated From IP", null=True, blank=True)

    change_reason = models.CharField(
        "Change Reason",
        max_length=255,
        blank=True,
        null=True,
        help_text="Explanation for why this change was made"
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """
        Override save to:
        1. Set created_at/updated_at
        2. Populate audit trail fields (created_by, updated_by, IPs)
        """
        from utils.context import get_request_context

        is_new = self._state.adding
        now = timezone.now()

        if is_new:
            if not self.created_at:
                self.created_at = now
            if not self.updated_at:
                self.updated_at = now
        else:
            self.updated_at = now

        context = get_request_context()

        if context:
            actor_id = context.actor_id
            ip_address = context.ip_address

            if is_new:
                if actor_id and not self.created_by_id:
                    self.created_by_id = actor_id
                if ip_address and not self.created_from_ip:
                    self.created_from_ip = ip_address

            if actor_id:
                self.updated_by_id = actor_id
            if ip_address:
                self.updated_from_ip = ip_address
        elif is_new:
            logger.debug(
                f"No request context available when creating {self.__class__.__name__}. "
                f"Audit fields will not be populated."
            )

        # update_fields saves must carry the timestamp too
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'updated_at', 'updated_by_id', 'updated_from_ip'}

        return super().save(*args, **kwargs)

    def set_change_reason(self, reason):
        """Attach a reason to the next save"""
        self.change_reason = (reason or '')[:255]
        return self


# =============================================================================
# FINANCIAL AUDIT LOG
# =============================================================================

class FinancialAuditLog(models.Model):
    """
    Append-only audit log for money-moving and plan-changing operations.
    """

    FINANCIAL_ACTIONS = [
        ('ABONO_APPLY', 'Abono Applied'),
        ('ABONO_REMOVE', 'Abono Removed'),
        ('INVOICE_CREATE', 'Invoice Created'),
        ('INVOICE_CANCEL', 'Invoice Cancelled'),
        ('INVOICE_OVERDUE', 'Invoice Marked Overdue'),
        ('PLAN_CREATE', 'Payment Plan Created'),
        ('PLAN_UPDATE', 'Payment Plan Updated'),
        ('PLAN_DELETE', 'Payment Plan Deleted'),
    ]

    RISK_LEVELS = [
        ('LOW', 'Low Risk'),
        ('MEDIUM', 'Medium Risk'),
        ('HIGH', 'High Risk'),
    ]

    id = models.AutoField(primary_key=True)

    timestamp = models.DateTimeField(db_index=True)
    action = models.CharField(max_length=30, choices=FINANCIAL_ACTIONS, db_index=True)

    user_id = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(null=True, blank=True)

    # Target object (what was changed)
    content_type = models.ForeignKey(
        ContentType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True
    )
    object_id = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    object_description = models.CharField(max_length=500, null=True, blank=True)

    amount_involved = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Monetary amount involved in the action"
    )
    currency = models.CharField(max_length=3, null=True, blank=True)

    old_values = models.JSONField(null=True, blank=True, help_text="Values before change")
    new_values = models.JSONField(null=True, blank=True, help_text="Values after change")

    risk_level = models.CharField(max_length=10, choices=RISK_LEVELS, default='LOW', db_index=True)
    notes = models.TextField(null=True, blank=True)
    is_automated = models.BooleanField(
        default=False,
        help_text="Whether this action was performed automatically by the system"
    )

    class Meta:
        verbose_name = "Financial Audit Log"
        verbose_name_plural = "Financial Audit Logs"
        ordering = ['-timestamp', '-id']
        indexes = [
            models.Index(fields=['timestamp', 'action'], name='utils_finan_timesta_7c1f2e_idx'),
            models.Index(fields=['content_type', 'object_id'], name='utils_finan_content_3b9d41_idx'),
        ]

    def __str__(self):
        return f"{self.get_action_display()} at {self.timestamp}"

    def save(self, *args, **kwargs):
        if not self.timestamp:
            self.timestamp = timezone.now()
        return super().save(*args, **kwargs)

    @classmethod
    def log_financial_action(
        cls,
        action,
        user_id=None,
        target_object=None,
        amount=None,
        old_values=None,
        new_values=None,
        risk_level='LOW',
        notes=None,
        currency=None,
        is_automated=False,
    ):
        """
        Record a financial action.

        User and IP default to the current request context. The insert runs
        in its own savepoint, so a failed log write never breaks the caller's
        transaction.

        Example:
            FinancialAuditLog.log_financial_action(
                action='ABONO_APPLY',
                user_id=actor,
                target_object=abono,
                amount=abono.monto,
                new_values={'saldo_pendiente': '63.00'},
            )

        Returns:
            FinancialAuditLog or None if the write failed
        """
        from utils.context import get_request_context

        log_data = {
            'action': action,
            'risk_level': risk_level,
            'timestamp': timezone.now(),
            'notes': (notes or '')[:2000],
            'old_values': old_values,
            'new_values': new_values,
            'is_automated': bool(is_automated),
        }

        if currency:
            log_data['currency'] = str(getattr(currency, 'codigo', currency))[:3].upper()

        if amount is not None:
            try:
                log_data['amount_involved'] = Decimal(str(amount))
            except (ValueError, InvalidOperation, TypeError):
                logger.warning(f"Invalid amount for financial audit log: {amount}")

        context = get_request_context()
        if context is not None:
            if user_id is None:
                user_id = context.actor_id
            log_data['ip_address'] = context.ip_address or None
            log_data['user_agent'] = context.user_agent[:512] or None
            log_data['is_automated'] = log_data['is_automated'] or context.automated
            if context.source:
                log_data['notes'] = f"{log_data['notes']} [{context.source}]".strip()[:2000]
        log_data['user_id'] = str(user_id) if user_id is not None else None

        if target_object is not None:
            log_data.update({
                'content_type': ContentType.objects.get_for_model(target_object, for_concrete_model=False),
                'object_id': str(getattr(target_object, 'pk', '')),
                'object_description': str(target_object)[:500],
            })

        try:
            with transaction.atomic():
                return cls.objects.create(**log_data)
        except Exception as e:
            logger.error(f"Error creating financial audit log: {e}", exc_info=True)
            return None
