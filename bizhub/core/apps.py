from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bizhub.core'
    verbose_name = 'Core'

    def ready(self):
        """Import signals when app is ready"""
        import bizhub.core.cache_signals  # noqa: F401  # Cache invalidation signals
