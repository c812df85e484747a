"""Driver entity, tiered regular or VIP."""

import logging
from enum import Enum

from pydantic import BaseModel, Field

from core.exceptions import ValidationError

notification_logger = logging.getLogger("notifications")


class DriverTier(str, Enum):
    REGULAR = "regular"
    VIP = "vip"


class Driver(BaseModel):
    """A fleet driver.

    Tier and fare rate are fixed at creation. Availability is flipped only by
    the pool that owns the driver; balance only grows.
    """

    driver_id: str
    name: str
    tier: DriverTier = Field(default=DriverTier.REGULAR, frozen=True)
    premium_rate: float = Field(default=1.0, ge=1.0, frozen=True)
    is_available: bool = True
    balance: float = Field(default=0.0, ge=0.0)

    @property
    def is_vip(self) -> bool:
        return self.tier == DriverTier.VIP

    def add_to_balance(self, amount: float) -> None:
        if amount < 0:
            raise ValidationError(
                f"Cannot credit a negative amount to driver {self.driver_id}",
                details={"driver_id": self.driver_id, "amount": amount},
            )
        self.balance += amount

    def update(self, message: str) -> None:
        notification_logger.info(
            message, extra={"recipient_id": self.driver_id, "role": "driver"}
        )


def build_driver(
    driver_id: str, name: str, tier: DriverTier, vip_fare_multiplier: float
) -> Driver:
    """Create a driver carrying the fare rate of its tier."""
    premium_rate = vip_fare_multiplier if tier == DriverTier.VIP else 1.0
    return Driver(driver_id=driver_id, name=name, tier=tier, premium_rate=premium_rate)
