from django.apps import AppConfig


class DjangoPackflowConfig(AppConfig):
    name = "django_packflow"
    verbose_name = "Pack Flow"
    default_auto_field = "django.db.models.BigAutoField"
