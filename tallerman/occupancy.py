"""
Occupancy — one overlap abstraction for every bookable resource.

Two kinds of resources are booked in the workshop:
- External services: claims are time windows, they overlap when the
  half-open intervals [start, end) intersect.
- Vehicles: claims are evaluations, any evaluation that is not released
  (rejected) occupies the vehicle regardless of dates.

Both are checked with find_conflict(); only the overlaps() predicate changes.

Examples:
    find_conflict(INTERVALS, Interval(9h, 10h), slots)            # -> Slot | None
    find_conflict(VEHICLE_STATUS, None, vehicle.evaluations.all())  # -> Evaluation | None
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Protocol, runtime_checkable

from tallerman.models.enums import RELEASED_STATUSES


@dataclass(frozen=True)
class Interval:
    """Half-open interval [start, end)."""

    start: datetime
    end: datetime

    @property
    def is_valid(self) -> bool:
        return self.end > self.start


@runtime_checkable
class Occupancy(Protocol):
    """Decides whether a candidate claim collides with an existing one."""

    def overlaps(self, claim, other) -> bool:
        ...


class IntervalOccupancy:
    """Time windows collide when start < other.end and other.start < end."""

    def overlaps(self, claim, other) -> bool:
        return claim.start < other.end and other.start < claim.end


class StatusOccupancy:
    """
    Single-occupant resource: any existing claim that is not released
    blocks the resource. The candidate itself carries no time data.
    """

    def __init__(self, released=RELEASED_STATUSES):
        self.released = tuple(released)

    def overlaps(self, claim, other) -> bool:
        return other.status not in self.released


INTERVALS = IntervalOccupancy()
VEHICLE_STATUS = StatusOccupancy()


def find_conflict(occupancy: Occupancy, claim, existing: Iterable, exclude=None):
    """
    Return the first existing claim that collides with the candidate.

    Args:
        occupancy: Overlap predicate for the resource kind
        claim: Candidate claim
        existing: Claims already committed on the same resource
        exclude: Claim (or its pk) being edited, ignored in the check

    Returns:
        The blocking claim, or None when the candidate fits
    """
    exclude_pk = getattr(exclude, 'pk', exclude)
    for other in existing:
        if exclude_pk is not None and getattr(other, 'pk', None) == exclude_pk:
            continue
        if occupancy.overlaps(claim, other):
            return other
    return None
