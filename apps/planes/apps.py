# planes/apps.py

from django.apps import AppConfig


class PlanesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "planes"
    verbose_name = "Planes de Pago"
