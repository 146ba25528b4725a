# pagos/apps.py

from django.apps import AppConfig


class PagosConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "pagos"
    verbose_name = "Pagos y Abonos"

    def ready(self):
        """
        Import signal handlers when the app is ready.
        This ensures signals are connected when Django starts.
        """
        import pagos.signals  # noqa: F401
