from django.apps import AppConfig


class LandedCostConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "landed_cost"
    verbose_name = "Landed cost"
