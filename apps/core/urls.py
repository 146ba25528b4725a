# core/urls.py
from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # Read-only catalogs
    path('impuestos', views.impuesto_list, name='impuesto_list'),
    path('monedas', views.moneda_list, name='moneda_list'),
]
