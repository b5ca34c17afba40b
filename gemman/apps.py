"""Django app configuration for Gemman."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class GemmanConfig(AppConfig):
    """Configuration for Gemman app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "gemman"
    verbose_name = _("Catálogo de Pedras")
