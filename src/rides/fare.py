import random

from pydantic import BaseModel, Field

from accounts.models import User
from drivers.models import Driver
from settings import PricingSettings


class FareBreakdown(BaseModel):
    """Detailed breakdown of fare components."""

    base_fare: float = Field(ge=0)
    discount_multiplier: float = Field(gt=0, le=1.0)
    vip_multiplier: float = Field(ge=1.0)
    total_fare: float = Field(ge=0)


class FareCalculator:
    """Prices a ride from a random base fare and the tiers of both parties."""

    def __init__(
        self, settings: PricingSettings | None = None, rng: random.Random | None = None
    ) -> None:
        self._settings = settings or PricingSettings()
        self._rng = rng or random.Random()

    def draw_base_fare(self) -> int:
        """Uniform whole-unit base fare within the configured bounds."""
        return self._rng.randint(self._settings.base_fare_min, self._settings.base_fare_max)

    def calculate(self, user: User, driver: Driver) -> FareBreakdown:
        return self.calculate_from_base(self.draw_base_fare(), user, driver)

    def calculate_from_base(self, base_fare: float, user: User, driver: Driver) -> FareBreakdown:
        """
        Apply tier adjustments to a known base fare.

        The premium discount and VIP rate compose multiplicatively, and the
        result is rounded once for currency display.
        """
        if base_fare < 0:
            raise ValueError("Base fare must be non-negative")

        discount_multiplier = user.fare_multiplier if user.is_premium else 1.0
        vip_multiplier = driver.premium_rate if driver.is_vip else 1.0
        total_fare = round(
            base_fare * discount_multiplier * vip_multiplier,
            self._settings.fare_decimal_places,
        )

        return FareBreakdown(
            base_fare=base_fare,
            discount_multiplier=discount_multiplier,
            vip_multiplier=vip_multiplier,
            total_fare=total_fare,
        )
