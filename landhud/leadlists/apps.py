from django.apps import AppConfig


class LeadListsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "landhud.leadlists"
    label = "leadlists"
