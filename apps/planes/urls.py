# planes/urls.py
from django.urls import path
from . import views

app_name = 'planes'

urlpatterns = [
    path('planes-pago', views.plan_list, name='plan_list'),
    path('planes-pago/derivar', views.plan_derive, name='plan_derive'),
    path('planes-pago/<uuid:plan_id>', views.plan_detail, name='plan_detail'),
]
