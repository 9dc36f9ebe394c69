"""
Session context passed explicitly to the Workshop facade.

Replaces the role and user id that a browser client would keep in local
storage: the caller builds a context from its authenticated request and
hands it to every engine call.

    ctx = WorkshopContext.from_user(request.user, role='owner')
    Workshop(ctx).consume(producto, 2)
"""

from dataclasses import dataclass
from typing import Any

from tallerman.conf import taller_settings
from tallerman.models.enums import StaffRole


@dataclass(frozen=True)
class WorkshopContext:
    """Who is calling the engine."""

    user: Any = None
    role: str = StaffRole.MECHANIC

    @classmethod
    def from_user(cls, user, role=None) -> 'WorkshopContext':
        """Build a context; role falls back to user.role when present."""
        if role is None:
            role = getattr(user, 'role', None) or StaffRole.MECHANIC
        return cls(user=user, role=role)

    @classmethod
    def system(cls) -> 'WorkshopContext':
        """Context for management commands and background jobs."""
        return cls(user=None, role=StaffRole.OWNER)

    @property
    def can_correct_stock(self) -> bool:
        return self.role in taller_settings.CORRECTION_ROLES
