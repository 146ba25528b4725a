"""
URL configuration for the academia project.

Every JSON endpoint lives under /api/. Paths follow the REST contract used by
the admin console (no trailing slashes).
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Django admin
    path('admin/', admin.site.urls),

    # Catalogs - impuestos, monedas (read-only)
    path('api/', include(('core.urls', 'core'), namespace='core')),

    # Payment plans
    path('api/', include(('planes.urls', 'planes'), namespace='planes')),

    # Invoices and abonos
    path('api/', include(('pagos.urls', 'pagos'), namespace='pagos')),
]
