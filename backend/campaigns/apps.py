from django.apps import AppConfig


class CampaignsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.campaigns'
    verbose_name = 'Campaign Orders'

    def ready(self):
        import backend.campaigns.signals  # noqa: F401
