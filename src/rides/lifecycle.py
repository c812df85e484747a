"""Ride lifecycle: driver assignment, completion and the notifications they trigger."""

import logging

from accounts.models import User
from accounts.registry import AccountRegistry
from core.exceptions import NotFoundError, ValidationError
from drivers.models import Driver
from notifications.bus import RideEventBus, SubscriberRole
from rides.fare import FareCalculator
from rides.ride import Ride, RideStatus
from settings import PricingSettings
from sim_logging import log_ride_context

logger = logging.getLogger(__name__)


class RideLifecycle:
    """Drives a ride through pending -> active -> completed.

    Each transition is validated before anything else changes, so an illegal
    call leaves the ride, driver, user and bus untouched.
    """

    def __init__(
        self,
        registry: AccountRegistry,
        bus: RideEventBus,
        fare_calculator: FareCalculator | None = None,
        pricing_settings: PricingSettings | None = None,
    ) -> None:
        self._registry = registry
        self._bus = bus
        self._pricing = pricing_settings or PricingSettings()
        self._fare_calculator = fare_calculator or FareCalculator(self._pricing)

    @property
    def bus(self) -> RideEventBus:
        return self._bus

    def create(self, user: User, pickup_location: str, dropoff_location: str) -> Ride:
        if not pickup_location or not dropoff_location:
            raise ValidationError(
                "Pickup and dropoff locations are required",
                details={"pickup": pickup_location, "dropoff": dropoff_location},
            )
        if self._registry.get_user(user.user_id) is None:
            raise NotFoundError(
                f"User {user.user_id} is not registered", details={"user_id": user.user_id}
            )

        return Ride(
            user_id=user.user_id,
            pickup_location=pickup_location,
            dropoff_location=dropoff_location,
        )

    def user_of(self, ride: Ride) -> User:
        user = self._registry.get_user(ride.user_id)
        if user is None:
            raise NotFoundError(
                f"User {ride.user_id} for ride {ride.ride_id} is not registered",
                details={"ride_id": ride.ride_id, "user_id": ride.user_id},
            )
        return user

    def assign_driver(self, ride: Ride, driver: Driver) -> None:
        user = self.user_of(ride)
        breakdown = self._fare_calculator.calculate(user, driver)

        with log_ride_context(ride.ride_id, user_id=user.user_id, driver_id=driver.driver_id):
            ride.transition_to(RideStatus.ACTIVE)
            ride.driver = driver
            ride.fare = breakdown.total_fare
            logger.debug(
                f"Ride {ride.ride_id} fare {ride.fare} "
                f"(base={breakdown.base_fare}, discount={breakdown.discount_multiplier}, "
                f"vip={breakdown.vip_multiplier})"
            )

            self._bus.subscribe(ride.ride_id, driver, SubscriberRole.DRIVER)
            self._bus.subscribe(ride.ride_id, user, SubscriberRole.USER)

            self._bus.notify(
                ride.ride_id,
                f"Your driver {driver.name} is on the way to {ride.pickup_location}",
                f"Driver {driver.name}, client {user.name} awaits you at {ride.pickup_location}",
            )

    def complete(self, ride: Ride) -> User:
        """Complete an active ride and settle it.

        Returns the ride's user as registered after settlement, which is a new
        premium instance if this fare pushed them over the threshold.
        """
        user = self.user_of(ride)
        driver = ride.driver

        with log_ride_context(
            ride.ride_id,
            user_id=user.user_id,
            driver_id=driver.driver_id if driver else None,
        ):
            ride.transition_to(RideStatus.COMPLETED)
            assert driver is not None  # active rides always carry a driver

            user = self._registry.add_spending(user, ride.fare)
            driver.add_to_balance(
                round(ride.fare * self._pricing.driver_cut, self._pricing.fare_decimal_places)
            )

            fare_text = self._format_amount(ride.fare)
            self._bus.notify(
                ride.ride_id,
                f"Your ride has been completed. Fare: ${fare_text}",
                f"Ride with client {user.name} is completed. Fare: ${fare_text}",
            )
            self._bus.unsubscribe_all(ride.ride_id)

            spending = self._format_amount(self._registry.get_spending(user.user_id))
            logger.info(f"Total spending for {user.name}: ${spending}")

        return user

    def _format_amount(self, amount: float) -> str:
        return f"{amount:.{self._pricing.fare_decimal_places}f}"
