# core/admin.py

from django import forms
from django.contrib import admin
from .models import Impuesto, Moneda


@admin.register(Impuesto)
class ImpuestoAdmin(admin.ModelAdmin):
    list_display = ['nombre', 'codigo', 'tasa', 'es_exento', 'activo']
    list_filter = ['activo', 'es_exento']
    search_fields = ['nombre', 'codigo']
    readonly_fields = ['created_at', 'updated_at', 'created_by_id', 'updated_by_id']


@admin.register(Moneda)
class MonedaAdmin(admin.ModelAdmin):
    list_display = ['codigo', 'nombre', 'simbolo', 'activo']
    list_filter = ['activo']
    search_fields = ['codigo', 'nombre']
    readonly_fields = ['created_at', 'updated_at', 'created_by_id', 'updated_by_id']

    def formfield_for_dbfield(self, db_field, request, **kwargs):
        if db_field.name == 'codigo':
            return forms.ChoiceField(choices=Moneda.get_currency_choices(), label="Código ISO")
        return super().formfield_for_dbfield(db_field, request, **kwargs)
