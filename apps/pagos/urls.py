# pagos/urls.py

from django.urls import path
from . import views

app_name = 'pagos'

urlpatterns = [
    # Invoices
    path('matriculas-pagos', views.matricula_pago_list, name='matricula_pago_list'),
    path('matriculas-pagos/export', views.matricula_pago_export, name='matricula_pago_export'),
    path('matriculas-pagos/<uuid:pago_id>', views.matricula_pago_detail, name='matricula_pago_detail'),
    path('matriculas-pagos/<uuid:pago_id>/anular', views.matricula_pago_anular, name='matricula_pago_anular'),

    # Abonos
    path('matriculas-pagos-abonos', views.abono_create, name='abono_create'),
    path('matriculas-pagos-abonos/resumen/<uuid:pago_id>', views.abono_resumen, name='abono_resumen'),
    path('matriculas-pagos-abonos/<uuid:abono_id>/recibo', views.abono_recibo, name='abono_recibo'),
    path('matriculas-pagos-abonos/<uuid:abono_id>', views.abono_delete, name='abono_delete'),
]
