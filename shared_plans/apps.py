from django.apps import AppConfig


class SharedPlansConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'shared_plans'
    verbose_name = 'Shared Plans'
