from django.apps import AppConfig


class LogbooksConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "logbooks"
