"""Ride-sharing dispatcher: driver pools, matching policy and active rides."""

import asyncio
import logging
import random
import threading
from collections.abc import Collection, Iterable
from typing import Any

from accounts.models import User
from accounts.registry import AccountRegistry
from core.exceptions import ConfigurationError, NoDriversAvailableError
from directory.client import DriverSource, UserSource
from directory.records import DriverRecord
from drivers.models import Driver, DriverTier, build_driver
from matching.driver_pool import DriverPool
from notifications.bus import RideEventBus
from rides.fare import FareCalculator
from rides.lifecycle import RideLifecycle
from rides.ride import Ride
from settings import Settings
from sim_logging import log_ride_context

logger = logging.getLogger(__name__)


class RideSharingService:
    """Matches ride requests to drivers and tracks rides until completion.

    Drivers live in one pool per tier for their whole lifetime. A request
    claims a driver atomically inside the pool, so two concurrent requests
    can never be handed the same driver.

    Thread-safe: assignment/completion and the active-ride map are protected
    by an RLock; pool scans are protected by each pool's own lock.
    """

    def __init__(
        self,
        registry: AccountRegistry,
        lifecycle: RideLifecycle,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ):
        self._registry = registry
        self._lifecycle = lifecycle
        self._settings = settings or Settings()
        self._rng = rng or random.Random()
        self._pools: dict[DriverTier, DriverPool] = {
            DriverTier.REGULAR: DriverPool(DriverTier.REGULAR),
            DriverTier.VIP: DriverPool(DriverTier.VIP),
        }
        self._active_rides: dict[int, Ride] = {}
        self._state_lock = threading.RLock()
        self._completed_count: int = 0
        self._total_fares: float = 0.0

    @property
    def registry(self) -> AccountRegistry:
        return self._registry

    def load_drivers(
        self,
        records: Iterable[DriverRecord],
        vip_ids: Collection[str] | None = None,
    ) -> int:
        """Create one driver per record and pool it by tier.

        A record's own ``tier`` wins; otherwise the driver is VIP exactly when
        its id is in ``vip_ids``. Returns how many drivers were added.
        """
        vip_ids = set(vip_ids or ())
        loaded = 0
        for record in records:
            if self.get_driver(record.driver_id) is not None:
                logger.warning(f"Driver {record.driver_id} already loaded, skipping")
                continue

            tier = record.tier or (
                DriverTier.VIP if record.driver_id in vip_ids else DriverTier.REGULAR
            )
            driver = build_driver(
                record.driver_id,
                record.name,
                tier,
                self._settings.pricing.vip_fare_multiplier,
            )
            self._pools[tier].add(driver)
            loaded += 1

        logger.info(
            f"Loaded {loaded} drivers "
            f"(regular={len(self._pools[DriverTier.REGULAR])}, "
            f"vip={len(self._pools[DriverTier.VIP])})"
        )
        return loaded

    async def load_drivers_from(
        self, source: DriverSource, vip_ids: Collection[str] | None = None
    ) -> int:
        try:
            records = await source.fetch_drivers()
        except Exception as e:
            logger.error(f"Error fetching drivers: {e}")
            raise
        return self.load_drivers(records, vip_ids)

    async def register_user_from(self, source: UserSource, user_id: str | int) -> User:
        """Fetch a user from the directory and register it.

        Directory failures propagate unchanged and nothing is registered.
        """
        try:
            record = await source.fetch_user(user_id)
        except Exception as e:
            logger.error(f"Error fetching user {user_id}: {e}")
            raise
        return self._registry.create_user_from_record(record)

    def find_available_driver(self, prefer_vip: bool = False) -> Driver | None:
        """First available driver under the preference policy, without claiming it."""
        for pool in self._search_order(prefer_vip):
            driver = pool.find_first_available()
            if driver is not None:
                return driver
        return None

    def _claim_driver(self, prefer_vip: bool) -> Driver | None:
        for pool in self._search_order(prefer_vip):
            driver = pool.claim_first_available()
            if driver is not None:
                return driver
        return None

    def _search_order(self, prefer_vip: bool) -> list[DriverPool]:
        if prefer_vip:
            return [self._pools[DriverTier.VIP], self._pools[DriverTier.REGULAR]]
        return [self._pools[DriverTier.REGULAR]]

    def _release_driver(self, driver: Driver) -> None:
        pool = self._pools[driver.tier]
        if driver.driver_id in pool:
            pool.release(driver)
        else:
            driver.is_available = True

    async def _simulate_matching_delay(self) -> None:
        low = self._settings.matching.delay_min_seconds
        high = self._settings.matching.delay_max_seconds
        if high <= 0:
            return
        await asyncio.sleep(self._rng.uniform(low, high))

    async def create_ride(
        self,
        user: User,
        pickup_location: str,
        dropoff_location: str,
        prefer_vip: bool = False,
    ) -> Ride:
        """Match a driver to a new ride and start it.

        Pool state is read only after the matching delay. Raises
        ``NoDriversAvailableError`` when nobody matches; the request is not
        retried and no ride is tracked. If anything fails after a driver was
        claimed, including cancellation, the driver is released again.
        """
        ride = self._lifecycle.create(user, pickup_location, dropoff_location)

        with log_ride_context(ride.ride_id, user_id=user.user_id):
            await self._simulate_matching_delay()

            driver = self._claim_driver(prefer_vip)
            if driver is None:
                logger.warning(f"No drivers available for ride {ride.ride_id}")
                raise NoDriversAvailableError(
                    "All drivers are busy, please try again later.",
                    details={"ride_id": ride.ride_id, "prefer_vip": prefer_vip},
                )

            try:
                with self._state_lock:
                    self._lifecycle.assign_driver(ride, driver)
                    self._active_rides[ride.ride_id] = ride
            except BaseException:
                self._release_driver(driver)
                logger.warning(
                    f"Released driver {driver.driver_id} after failed assignment "
                    f"of ride {ride.ride_id}"
                )
                raise

            if prefer_vip and not driver.is_vip:
                logger.info(
                    "Unfortunately, no VIP drivers were available. "
                    "A regular driver has been assigned."
                )

            label = "VIP Ride" if driver.is_vip else "Ride"
            driver_label = "VIP Driver" if driver.is_vip else "Driver"
            logger.info(
                f"{label} created for {user.name} from {pickup_location} to "
                f"{dropoff_location}. {driver_label}: {driver.name}"
            )
            return ride

    def complete_ride(self, ride: Ride) -> User:
        """Complete an active ride and free its driver.

        Returns the ride's user as registered after settlement.
        """
        with self._state_lock:
            user = self._lifecycle.complete(ride)
            if ride.driver is not None:
                self._release_driver(ride.driver)
            self._active_rides.pop(ride.ride_id, None)
            self._completed_count += 1
            self._total_fares += ride.fare
        return user

    def get_active_rides(self) -> dict[int, Ride]:
        with self._state_lock:
            return dict(self._active_rides)

    def get_all_drivers(self) -> dict[str, list[Driver]]:
        return {
            "regular": self._pools[DriverTier.REGULAR].drivers(),
            "vip": self._pools[DriverTier.VIP].drivers(),
        }

    def get_driver(self, driver_id: str) -> Driver | None:
        for pool in self._pools.values():
            driver = pool.get(driver_id)
            if driver is not None:
                return driver
        return None

    def get_stats(self) -> dict[str, Any]:
        with self._state_lock:
            completed_count = self._completed_count
            total_fares = self._total_fares
            active_count = len(self._active_rides)

        return {
            "active_rides": active_count,
            "completed_rides": completed_count,
            "total_fares": round(total_fares, self._settings.pricing.fare_decimal_places),
            "available_regular_drivers": self._pools[DriverTier.REGULAR].available_count(),
            "available_vip_drivers": self._pools[DriverTier.VIP].available_count(),
        }


def build_service(
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> RideSharingService:
    """Wire a service with its registry, bus, fare calculator and lifecycle."""
    settings = settings or Settings()
    registry = AccountRegistry(settings.accounts, settings.pricing)
    lifecycle = RideLifecycle(
        registry,
        RideEventBus(),
        FareCalculator(settings.pricing, rng),
        settings.pricing,
    )
    return RideSharingService(registry, lifecycle, settings, rng)


_service: RideSharingService | None = None
_service_lock = threading.Lock()


def init_service(
    settings: Settings | None = None, rng: random.Random | None = None
) -> RideSharingService:
    """Build the process-wide dispatcher. Call once at startup."""
    global _service
    with _service_lock:
        if _service is not None:
            raise ConfigurationError("Ride sharing service is already initialized")
        _service = build_service(settings, rng)
        return _service


def get_service() -> RideSharingService:
    if _service is None:
        raise ConfigurationError("Ride sharing service is not initialized; call init_service()")
    return _service


def reset_service() -> None:
    """Drop the process-wide dispatcher (tests and simulation resets)."""
    global _service
    with _service_lock:
        _service = None
