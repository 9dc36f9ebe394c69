"""
Tallerman configuration.

Usage in settings.py:
    TALLERMAN = {
        "DIAGNOSIS_DESCRIPTION": "Diagnóstico",
        "DIAGNOSIS_DEFAULT_PRICE": Decimal("15000"),
        "RESTORE_UNAPPROVED_ON_GENERATE": True,
        "RELEASE_UNAPPROVED_SLOTS_ON_GENERATE": True,
        "CORRECTION_ROLES": ["owner", "administration"],
    }
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django.conf import settings


@dataclass
class TallermanSettings:
    """Tallerman configuration settings."""

    # Description of the reserved first line item of every evaluation
    DIAGNOSIS_DESCRIPTION: str = "Diagnóstico"

    # Price used when create_draft() gets no diagnosis price
    DIAGNOSIS_DEFAULT_PRICE: Decimal = Decimal("0")

    # Return stock consumed by unapproved items when the work order is generated
    RESTORE_UNAPPROVED_ON_GENERATE: bool = True

    # Give back the slots hired by unapproved items when the work order is generated
    RELEASE_UNAPPROVED_SLOTS_ON_GENERATE: bool = True

    # Roles allowed to correct or delete batches through the facade
    CORRECTION_ROLES: list[str] = field(
        default_factory=lambda: ["owner", "administration"]
    )


def get_taller_settings() -> TallermanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "TALLERMAN", {})
    return TallermanSettings(**{
        k: v for k, v in user_settings.items()
        if k in TallermanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_taller_settings(), name)


taller_settings = _LazySettings()
