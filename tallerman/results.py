"""
Outcome — result-or-error value returned by the Workshop facade.

Business conditions (insufficient stock, scheduling conflicts, invalid
transitions, missing rows) come back as values the caller must inspect,
never as exceptions:

    outcome = Workshop(ctx).consume(producto, 6)
    if not outcome.ok:
        return JsonResponse(outcome.error.as_dict(), status=outcome.http_status)
    trace = outcome.value
"""

from dataclasses import dataclass
from typing import Any

from tallerman.exceptions import NotFound, TallerError


@dataclass(frozen=True)
class Outcome:
    """Success value, or the TallerError that prevented it."""

    ok: bool
    value: Any = None
    error: TallerError | None = None

    @classmethod
    def success(cls, value=None) -> 'Outcome':
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: TallerError) -> 'Outcome':
        return cls(ok=False, error=error)

    @property
    def code(self) -> str | None:
        return self.error.code if self.error else None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error else None

    @property
    def http_status(self) -> int:
        """Suggested status for an HTTP layer."""
        if self.ok:
            return 200
        if isinstance(self.error, NotFound):
            return 404
        if self.error.code == 'PERMISSION_DENIED':
            return 403
        return 409

    def unwrap(self):
        """Return the value, or raise the error."""
        if not self.ok:
            raise self.error
        return self.value
