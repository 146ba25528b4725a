# planes/admin.py

from django.contrib import admin
from .models import PlanPago


@admin.register(PlanPago)
class PlanPagoAdmin(admin.ModelAdmin):
    list_display = ['nombre', 'tipo_pago', 'subtotal', 'total', 'numero_cuotas', 'moneda', 'activo']
    list_filter = ['tipo_pago', 'activo', 'moneda']
    search_fields = ['nombre', 'descripcion']
    # Amounts are derived; edit plans through the API so the derivation runs
    readonly_fields = [
        'subtotal', 'total', 'subtotal_final', 'total_final',
        'created_at', 'updated_at', 'created_by_id', 'updated_by_id',
    ]
