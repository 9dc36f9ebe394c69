"""Django app configuration for Tallerman."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class TallermanConfig(AppConfig):
    """Configuration for Tallerman app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "tallerman"
    verbose_name = _("Gestión de Taller")
