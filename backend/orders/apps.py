from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.orders'

    def ready(self):
        """Import signals when app is ready"""
        import backend.orders.signals  # noqa: F401  # Cache invalidation signals
