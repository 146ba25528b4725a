# utils/admin.py

from django.contrib import admin
from .models import FinancialAuditLog


@admin.register(FinancialAuditLog)
class FinancialAuditLogAdmin(admin.ModelAdmin):
    list_display = [
        'timestamp', 'action', 'object_description',
        'amount_involved', 'user_id', 'ip_address'
    ]
    list_filter = ['action', 'risk_level', 'timestamp']
    search_fields = ['object_description', 'object_id', 'user_id', 'notes']
    readonly_fields = [
        'id', 'timestamp', 'action', 'user_id', 'ip_address', 'user_agent',
        'content_type', 'object_id', 'object_description', 'amount_involved',
        'currency', 'old_values', 'new_values', 'risk_level', 'notes',
        'is_automated',
    ]

    fieldsets = (
        ('What Changed', {
            'fields': ('action', 'content_type', 'object_id', 'object_description',
                       'amount_involved', 'currency')
        }),
        ('Values', {
            'fields': ('old_values', 'new_values', 'notes')
        }),
        ('Who & Where', {
            'fields': ('timestamp', 'user_id', 'ip_address', 'user_agent', 'is_automated')
        }),
    )

    def has_add_permission(self, request):
        # Audit logs are written by the services only
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return request.user.is_superuser
