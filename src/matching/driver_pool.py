import threading

from drivers.models import Driver, DriverTier


class DriverPool:
    """Drivers of one tier, in load order.

    Membership is fixed once a driver is added; only availability changes.
    Thread-safe: scanning and flipping availability happen under one lock, so
    ``claim_first_available`` hands each driver to at most one caller.
    """

    def __init__(self, tier: DriverTier) -> None:
        self.tier = tier
        self._lock = threading.Lock()
        self._drivers: dict[str, Driver] = {}

    def add(self, driver: Driver) -> bool:
        """Add a driver; returns False if its id is already pooled."""
        if driver.tier != self.tier:
            raise ValueError(
                f"Driver {driver.driver_id} is {driver.tier.value}, pool is {self.tier.value}"
            )
        with self._lock:
            if driver.driver_id in self._drivers:
                return False
            self._drivers[driver.driver_id] = driver
            return True

    def find_first_available(self) -> Driver | None:
        with self._lock:
            return next((d for d in self._drivers.values() if d.is_available), None)

    def claim_first_available(self) -> Driver | None:
        with self._lock:
            for driver in self._drivers.values():
                if driver.is_available:
                    driver.is_available = False
                    return driver
            return None

    def release(self, driver: Driver) -> None:
        with self._lock:
            if driver.driver_id not in self._drivers:
                raise KeyError(driver.driver_id)
            driver.is_available = True

    def get(self, driver_id: str) -> Driver | None:
        with self._lock:
            return self._drivers.get(driver_id)

    def drivers(self) -> list[Driver]:
        with self._lock:
            return list(self._drivers.values())

    def available_count(self) -> int:
        with self._lock:
            return sum(1 for d in self._drivers.values() if d.is_available)

    def __contains__(self, driver_id: object) -> bool:
        with self._lock:
            return driver_id in self._drivers

    def __len__(self) -> int:
        with self._lock:
            return len(self._drivers)
