"""Ride state machine and model."""

import itertools
import threading
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from core.exceptions import InvalidStateTransitionError
from drivers.models import Driver


class RideStatus(str, Enum):
    """Ride lifecycle states."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


VALID_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.PENDING: {RideStatus.ACTIVE},
    RideStatus.ACTIVE: {RideStatus.COMPLETED},
    RideStatus.COMPLETED: set(),
}

_ride_ids = itertools.count(1)
_ride_id_lock = threading.Lock()


def next_ride_id() -> int:
    """Allocate the next id from the process-wide ride sequence."""
    with _ride_id_lock:
        return next(_ride_ids)


class Ride(BaseModel):
    """One requested ride.

    The user is held by id and resolved through the account registry, so a
    premium promotion mid-ride is visible on the next lookup.
    """

    ride_id: int = Field(default_factory=next_ride_id, frozen=True)
    user_id: str = Field(frozen=True)
    pickup_location: str
    dropoff_location: str
    driver: Driver | None = None
    fare: float = Field(default=0.0, ge=0)
    status: RideStatus = Field(default=RideStatus.PENDING)
    requested_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    matched_at: datetime | None = None
    completed_at: datetime | None = None

    def can_transition_to(self, new_status: RideStatus) -> bool:
        return new_status in VALID_TRANSITIONS[self.status]

    def transition_to(self, new_status: RideStatus) -> None:
        """Transition to a new status with validation."""
        if not self.can_transition_to(new_status):
            raise InvalidStateTransitionError(
                f"Ride {self.ride_id}: invalid transition from "
                f"{self.status.value} to {new_status.value}",
                details={
                    "ride_id": self.ride_id,
                    "from": self.status.value,
                    "to": new_status.value,
                },
            )

        self.status = new_status
        now = datetime.now(UTC)
        if new_status == RideStatus.ACTIVE:
            self.matched_at = now
        elif new_status == RideStatus.COMPLETED:
            self.completed_at = now
