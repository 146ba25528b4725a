# pagos/admin.py

from django.contrib import admin
from .models import MatriculaPago, Abono, SecuenciaRecibo


class AbonoInline(admin.TabularInline):
    model = Abono
    extra = 0
    can_delete = False
    fields = ['numero_recibo', 'fecha_abono', 'monto', 'metodo_pago', 'referencia', 'usuario_id']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        # Abonos go through LedgerService so the balance is checked
        return False


@admin.register(MatriculaPago)
class MatriculaPagoAdmin(admin.ModelAdmin):
    list_display = ['matricula_id', 'numero_pago', 'total', 'estado', 'fecha_vencimiento']
    list_filter = ['estado', 'fecha_vencimiento']
    search_fields = ['matricula_id']
    readonly_fields = ['estado', 'fecha_anulacion', 'motivo_anulacion', 'created_at', 'updated_at']
    inlines = [AbonoInline]


@admin.register(Abono)
class AbonoAdmin(admin.ModelAdmin):
    list_display = ['numero_recibo', 'matricula_pago', 'monto', 'metodo_pago', 'fecha_abono']
    list_filter = ['metodo_pago', 'fecha_abono']
    search_fields = ['numero_recibo', 'referencia']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(SecuenciaRecibo)
class SecuenciaReciboAdmin(admin.ModelAdmin):
    list_display = ['prefijo', 'ultimo_numero']
