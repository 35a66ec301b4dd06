"""Django app configuration for Restockman."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class RestockmanConfig(AppConfig):
    """Configuration for Restockman app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "restockman"
    verbose_name = _("Stock Alerts & Replenishment")
