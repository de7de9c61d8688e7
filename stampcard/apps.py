from django.apps import AppConfig


class StampcardConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "stampcard"
    verbose_name = "Stampcard - Loyalty Card"
